"""
Candidate selection: find the repeated blocks that most likely hold one product each.
"""

from ..dom import Node
from ..utils.text import AMOUNT_PATTERN

PRODUCT_CLASS_TOKENS = ("product-item", "productitem")
PRODUCT_DATA_ATTRIBUTES = ("data-testid", "data-pod")
PRODUCT_DATA_TOKENS = ("product", "pod")

# Fallback text length band, exclusive on both ends.
MIN_FALLBACK_TEXT = 30
MAX_FALLBACK_TEXT = 1000


def is_product_container(node: Node) -> bool:
    """Known product-container markers on the class list or data attributes."""
    classes = node.class_string.lower()
    if any(token in classes for token in PRODUCT_CLASS_TOKENS):
        return True
    for attribute in PRODUCT_DATA_ATTRIBUTES:
        value = (node.attribute(attribute) or "").lower()
        if value and any(token in value for token in PRODUCT_DATA_TOKENS):
            return True
    return False


def looks_like_product_block(node: Node) -> bool:
    """
    Structural guess for pages without container markers.

    The block must show a price, be neither empty nor page-sized, and carry
    a link. Nested matches are not suppressed.
    """
    text = node.text()
    if not MIN_FALLBACK_TEXT < len(text) < MAX_FALLBACK_TEXT:
        return False
    if not AMOUNT_PATTERN.search(text):
        return False
    return node.find_first(lambda child: child.is_tag("a") and child.has_attribute("href")) is not None


def select_candidates(root: Node) -> list[Node]:
    """Product blocks in document order, via container markers or the structural fallback."""
    candidates = root.find_descendants(is_product_container)
    if candidates:
        return candidates
    return root.find_descendants(looks_like_product_block)
