"""Tests for record validation and old-price derivation."""

import pytest
from pydantic import ValidationError

from search_scraper.extractors.fields import UNKNOWN_PRODUCT, FieldValues
from search_scraper.transformers.record_assembler import (
    ProductRecord,
    RecordAssembler,
    derive_old_price,
    parse_discount_percent,
)
from search_scraper.utils.text import format_amount, parse_digits

URL = "https://www.falabella.com.co/product/123/laptop/456"


def fields(**overrides) -> FieldValues:
    values = dict(title="Laptop Pavilion", price="$ 1.200.000", url=URL, brand="HP")
    values.update(overrides)
    return FieldValues(**values)


class TestValidation:
    def setup_method(self):
        self.assembler = RecordAssembler()

    def test_unknown_title_rejected(self):
        assert self.assembler.assemble(fields(title=UNKNOWN_PRODUCT)) is None

    def test_empty_title_rejected(self):
        assert self.assembler.assemble(fields(title="   ")) is None

    def test_short_price_rejected(self):
        assert self.assembler.assemble(fields(price="$")) is None
        assert self.assembler.assemble(fields(price="")) is None

    def test_two_character_price_accepted(self):
        record = self.assembler.assemble(fields(price="$1"))

        assert record is not None
        assert record.price_numeric == 1


class TestOldPrice:
    def setup_method(self):
        self.assembler = RecordAssembler()

    def test_derived_from_discount(self):
        record = self.assembler.assemble(fields(discount="-20%"))

        assert record.price_numeric == 1200000
        assert record.old_price_numeric == 1500000
        assert record.old_price == "$ 1.500.000"
        assert record.discount == "-20%"

    def test_read_from_listing(self):
        record = self.assembler.assemble(fields(discount="-17%", old_price="$ 1.449.900"))

        assert record.old_price == "$ 1.449.900"
        assert record.old_price_numeric == 1449900

    def test_no_discount_means_no_old_price(self):
        record = self.assembler.assemble(fields(old_price="$ 1.500.000"))

        assert record.discount is None
        assert record.old_price is None
        assert record.old_price_numeric is None

    @pytest.mark.parametrize("discount", ["0%", "-100%", "-150%", "%"])
    def test_out_of_range_discount_not_derived(self, discount):
        record = self.assembler.assemble(fields(discount=discount))

        assert record.old_price is None
        assert record.old_price_numeric is None

    def test_zero_price_not_derived(self):
        record = self.assembler.assemble(fields(price="Agotado", discount="-20%"))

        assert record.price_numeric == 0
        assert record.old_price is None

    def test_custom_formatting(self):
        assembler = RecordAssembler(currency_prefix="COP ", thousands_separator=",")

        record = assembler.assemble(fields(discount="-20%"))

        assert record.old_price == "COP 1,500,000"


class TestNumericParsing:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("$ 1.200.000", 1200000),
            ("$1,299,900", 1299900),
            ("Precio: $ 89.990 c/u", 89990),
            ("sin dígitos", 0),
            ("", 0),
        ],
    )
    def test_parse_digits(self, text, expected):
        assert parse_digits(text) == expected

    def test_price_numeric_matches_display_digits(self):
        record = RecordAssembler().assemble(fields(price="  $ 3.199.000  "))

        assert record.price == "$ 3.199.000"
        assert record.price_numeric == parse_digits(record.price)

    def test_discount_percent(self):
        assert parse_discount_percent("-20%") == 20
        assert parse_discount_percent("35%") == 35
        assert parse_discount_percent("0%") is None
        assert parse_discount_percent("100%") is None
        assert parse_discount_percent(None) is None

    def test_derive_old_price_rounds(self):
        assert derive_old_price(1200000, 20) == 1500000
        assert derive_old_price(99990, 33) == 149239

    def test_format_amount(self):
        assert format_amount(1500000) == "$ 1.500.000"
        assert format_amount(900) == "$ 900"


class TestProductRecord:
    def test_serializes_with_camel_case_keys(self):
        record = RecordAssembler().assemble(fields(discount="-20%"))

        data = record.model_dump(mode="json", by_alias=True)

        assert data["priceNumeric"] == 1200000
        assert data["oldPrice"] == "$ 1.500.000"
        assert data["oldPriceNumeric"] == 1500000
        assert "price_numeric" not in data

    def test_accepts_alias_input(self):
        record = ProductRecord(title="TV", price="$ 10", priceNumeric=10, url=URL)

        assert record.price_numeric == 10

    def test_frozen(self):
        record = ProductRecord(title="TV", price="$ 10", price_numeric=10, url=URL)

        with pytest.raises(ValidationError):
            record.title = "Otro"
