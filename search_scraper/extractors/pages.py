"""
Page-link extraction for pages mode.

Instead of products, pages mode collects the category, collection, brand and
search pages a results page links to.
"""

import re
from typing import Optional

from ..dom import Node, class_contains
from ..transformers.record_assembler import PageRecord
from ..utils.text import normalize_whitespace
from .fields import absolute_url

PAGE_PATH_MARKERS = ("/category/", "/collection/", "/brand/", "/search")
COUNT_CLASS_TOKENS = ("count", "total", "result")
NON_PAGE_TITLE = re.compile(r"^\$|precio|comprar|agregar|ver más", re.IGNORECASE)

MIN_PAGE_TITLE = 3
MAX_PAGE_TITLE = 199


def section_link_pattern(search_path: str) -> re.Pattern:
    """Top-level section links under the site prefix, e.g. ``/falabella-co/tecnologia``."""
    prefix = search_path.strip("/").split("/")[0]
    return re.compile(rf"{re.escape(prefix)}/[a-z\-]+/?$")


def is_page_link(href: str, section_pattern: re.Pattern) -> bool:
    return any(marker in href for marker in PAGE_PATH_MARKERS) or bool(section_pattern.search(href))


def page_title(link: Node) -> str:
    return (
        link.normalized_text()
        or normalize_whitespace(link.attribute("title"))
        or normalize_whitespace(link.attribute("aria-label"))
    )


def page_image(link: Node) -> str:
    image = link.find_first(lambda n: n.is_tag("img"))
    if image is None:
        return ""
    return (image.attribute("src") or image.attribute("data-src") or "").strip()


def page_product_count(link: Node) -> Optional[str]:
    counters = link.find_descendants(class_contains(*COUNT_CLASS_TOKENS))
    text = normalize_whitespace("".join(node.text() for node in counters))
    return text or None


def extract_page_record(link: Node, base_url: str, section_pattern: re.Pattern) -> Optional[PageRecord]:
    href = (link.attribute("href") or "").strip()
    if not href or not is_page_link(href, section_pattern):
        return None

    title = page_title(link)
    if not MIN_PAGE_TITLE <= len(title) <= MAX_PAGE_TITLE or NON_PAGE_TITLE.search(title):
        return None

    return PageRecord(
        title=title,
        url=absolute_url(href, base_url),
        image=page_image(link),
        product_count=page_product_count(link),
    )


def extract_page_records(root: Node, base_url: str, search_path: str) -> list[PageRecord]:
    """Page records for every qualifying link, in document order (duplicates included)."""
    section_pattern = section_link_pattern(search_path)
    records = []
    for link in root.find_descendants(lambda n: n.is_tag("a") and n.has_attribute("href")):
        record = extract_page_record(link, base_url, section_pattern)
        if record:
            records.append(record)
    return records
