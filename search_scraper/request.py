"""
Run input: what to search for and how many results to keep.
"""

from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import InputValidationError


class SearchRequest(BaseModel):
    """Validated, immutable run input. Accepts both snake_case and the camelCase input keys."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    mode: Literal["items", "pages"] = Field(default="items", alias="searchFor")
    query: str = Field(alias="searchQuery")
    max_results: int = Field(default=100, ge=0, alias="maxProducts")
    min_price: Optional[float] = Field(default=None, ge=0, alias="minPrice")
    max_price: Optional[float] = Field(default=None, ge=0, alias="maxPrice")

    @field_validator("query", mode="before")
    @classmethod
    def clean_query(cls, v: Any) -> str:
        if v is None or not str(v).strip():
            raise ValueError("Search query is required")
        return str(v).strip()

    @field_validator("min_price", "max_price", mode="before")
    @classmethod
    def zero_bound_is_unset(cls, v: Any) -> Any:
        # A 0 price bound means "no bound".
        if v == 0:
            return None
        return v

    @model_validator(mode="after")
    def check_price_range(self) -> "SearchRequest":
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValueError("minPrice cannot be greater than maxPrice")
        return self

    @property
    def has_price_range(self) -> bool:
        return self.min_price is not None or self.max_price is not None

    @property
    def is_bounded(self) -> bool:
        return self.max_results > 0

    def accepts_price(self, price_numeric: int) -> bool:
        """Whether a price falls inside the requested range (bounds inclusive)."""
        if self.min_price is not None and price_numeric < self.min_price:
            return False
        if self.max_price is not None and price_numeric > self.max_price:
            return False
        return True

    @classmethod
    def from_input(cls, data: Optional[Mapping[str, Any]]) -> "SearchRequest":
        """
        Validate raw run input (CLI flags or an input JSON file).

        Raises:
            InputValidationError: when the input is missing or invalid
        """
        if not data:
            raise InputValidationError("Input is missing!")
        cleaned = {key: value for key, value in data.items() if value is not None}
        try:
            return cls.model_validate(cleaned)
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}"
                for err in e.errors()
            )
            raise InputValidationError(f"Invalid input: {details}") from e
