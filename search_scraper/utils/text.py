"""Text and number helpers shared by the extractors and the assembler."""

import re
from typing import Optional

# "$" followed by digits with optional grouping/decimal separators.
AMOUNT_PATTERN = re.compile(r"\$\s*\d[\d.,]*")
PERCENT_PATTERN = re.compile(r"-?\d+%")


def normalize_whitespace(value: Optional[str]) -> str:
    """Collapse repeated spaces and newlines."""
    if not value:
        return ""
    return re.sub(r"\s+", " ", value).strip()


def find_amount(text: str) -> Optional[str]:
    """Return the first currency amount in ``text`` (e.g. ``"$ 1.200.000"``)."""
    match = AMOUNT_PATTERN.search(text or "")
    if not match:
        return None
    return match.group(0).strip().rstrip(".,")


def find_percentage(text: str) -> Optional[str]:
    """Return the first (optionally signed) percentage in ``text``."""
    match = PERCENT_PATTERN.search(text or "")
    return match.group(0) if match else None


def parse_digits(value: Optional[str]) -> int:
    """
    Keep only the digits of a display price and read them as an integer.

    Prices on the site are whole pesos, so "$ 1.200.000" -> 1200000.
    Returns 0 when there are no digits.
    """
    digits = re.sub(r"\D", "", value or "")
    return int(digits) if digits else 0


def format_amount(value: int, prefix: str = "$ ", separator: str = ".") -> str:
    """Format an integer amount with thousands grouping: 1500000 -> "$ 1.500.000"."""
    grouped = f"{value:,}".replace(",", separator)
    return f"{prefix}{grouped}"
