"""Utility modules for the search scraper."""

from .text import (
    AMOUNT_PATTERN,
    find_amount,
    find_percentage,
    format_amount,
    normalize_whitespace,
    parse_digits,
)

__all__ = [
    "AMOUNT_PATTERN",
    "find_amount",
    "find_percentage",
    "format_amount",
    "normalize_whitespace",
    "parse_digits",
]
