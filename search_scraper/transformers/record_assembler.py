"""
Record assembler: turns raw extractor output into validated product records.

Only candidates with a real title and a price survive. When the listing
shows a discount but no crossed-out price, the old price is derived from the
discount; when it shows no discount, the record carries no old price at all.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..extractors.fields import UNKNOWN_PRODUCT, FieldValues
from ..utils.text import format_amount, normalize_whitespace, parse_digits

MIN_PRICE_LENGTH = 2


class ProductRecord(BaseModel):
    """One product listed on a search page (items mode)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    brand: Optional[str] = None
    price: str
    price_numeric: int = Field(alias="priceNumeric")
    old_price: Optional[str] = Field(default=None, alias="oldPrice")
    old_price_numeric: Optional[int] = Field(default=None, alias="oldPriceNumeric")
    discount: Optional[str] = None
    url: str
    image: str = ""

    @field_validator("title", "price", "url", "image")
    @classmethod
    def clean_text(cls, v: str) -> str:
        return normalize_whitespace(v)

    @field_validator("brand", "old_price", "discount")
    @classmethod
    def clean_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = normalize_whitespace(v)
        return v or None


class PageRecord(BaseModel):
    """A category, collection or brand page linked from a search page (pages mode)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    url: str
    image: str = ""
    product_count: Optional[str] = Field(default=None, alias="productCount")

    @field_validator("title")
    @classmethod
    def clean_title(cls, v: str) -> str:
        return normalize_whitespace(v)


def parse_discount_percent(discount: Optional[str]) -> Optional[int]:
    """Read "-20%" as 20. None unless the percentage is strictly between 0 and 100."""
    if not discount:
        return None
    percent = parse_digits(discount)
    if 0 < percent < 100:
        return percent
    return None


def derive_old_price(price_numeric: int, percent: int) -> int:
    return round(price_numeric / (1 - percent / 100))


class RecordAssembler:
    """Validates extractor output and derives the missing numeric fields."""

    def __init__(self, currency_prefix: str = "$ ", thousands_separator: str = "."):
        self.currency_prefix = currency_prefix
        self.thousands_separator = thousands_separator

    @classmethod
    def from_config(cls, scraper_config) -> "RecordAssembler":
        return cls(
            currency_prefix=scraper_config.currency_prefix,
            thousands_separator=scraper_config.thousands_separator,
        )

    @staticmethod
    def is_valid(fields: FieldValues) -> bool:
        title = normalize_whitespace(fields.title)
        price = normalize_whitespace(fields.price)
        return bool(title) and title != UNKNOWN_PRODUCT and len(price) >= MIN_PRICE_LENGTH

    def assemble(self, fields: FieldValues) -> Optional[ProductRecord]:
        """Build a ProductRecord, or return None when the candidate is not a product."""
        if not self.is_valid(fields):
            return None

        price = normalize_whitespace(fields.price)
        price_numeric = parse_digits(price)

        # The discount badge decides whether the item is on sale.
        discount = normalize_whitespace(fields.discount) or None
        old_price: Optional[str] = None
        old_price_numeric: Optional[int] = None
        if discount:
            old_price = normalize_whitespace(fields.old_price) or None
            if old_price:
                old_price_numeric = parse_digits(old_price)
            else:
                percent = parse_discount_percent(discount)
                if percent is not None and price_numeric > 0:
                    old_price_numeric = derive_old_price(price_numeric, percent)
                    old_price = format_amount(
                        old_price_numeric, self.currency_prefix, self.thousands_separator
                    )

        return ProductRecord(
            title=fields.title,
            brand=fields.brand,
            price=price,
            price_numeric=price_numeric,
            old_price=old_price,
            old_price_numeric=old_price_numeric,
            discount=discount,
            url=fields.url,
            image=fields.image,
        )

