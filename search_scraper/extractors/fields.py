"""
Field extractors for product candidates.

Every field is resolved by an ordered chain of small resolver functions; the
first one that returns a non-empty value wins. Resolvers only read the tree
and never raise, so a failed lookup simply degrades to ``None`` and the
record assembler decides what to do with it.

Chains:
    TITLE_CHAIN   link title attribute -> image alt -> cleaned block text
    BRAND_CHAIN   bold/strong text -> known manufacturer names
    URL_CHAIN     first non-navigational descendant link -> the block itself
    IMAGE_CHAIN   live-page image map -> <img> attributes -> CDN URL from product id
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional
from urllib.parse import urljoin

from ..dom import Node, class_contains
from ..utils.text import find_amount, find_percentage, normalize_whitespace

UNKNOWN_PRODUCT = "Unknown Product"

MIN_ATTRIBUTE_TITLE = 6

NOISE_PATTERNS = [
    re.compile(r"\$[\s\d,.]+"),
    re.compile(r"-?\d+%"),
    re.compile(
        r"Patrocinado|Sponsored|Agregar al carro|Add to cart"
        r"|Llega (?:hoy|mañana)|Retira.*?min"
        r"|Env[ií]o gratis|Despacho gratis|Free shipping"
        r"|(?:Precio|Exclusivo|Oferta)\s+CMR|CMR Puntos"
        r"|\bPor\s.*",
        re.IGNORECASE,
    ),
]

# "HPLaptop" -> "HP Laptop"
GLUED_CAPS = re.compile(r"\b([A-Z]{2,})([A-Z][a-z]{2,})")

BOLD_NOISE = re.compile(r"\$|price|precio|cop|por|patrocinado|sponsored|llega|retira", re.IGNORECASE)

KNOWN_BRANDS = (
    "HP", "Lenovo", "Dell", "Asus", "Acer", "Apple", "Samsung", "LG", "Xiaomi",
    "Motorola", "Huawei", "Honor", "Sony", "MSI", "Microsoft", "Philips",
    "Oster", "Kalley", "Challenger", "Whirlpool", "Mabe", "Haceb", "Electrolux",
    "Nike", "Adidas", "Puma",
)

NAVIGATION_HREF = re.compile(r"/(category|search|account|cart|checkout|help|about)", re.IGNORECASE)

PLACEHOLDER_MARKERS = ("placeholder", "icon", "loading", "1x1", "pixel", "spacer", "blank.gif", "transparent")

IMAGE_SOURCE_ATTRIBUTES = ("src", "data-src", "data-lazy-src", "data-original")

PRODUCT_ID_IN_URL = re.compile(r"/product/(\d+)")

OLD_PRICE_CLASS_TOKENS = ("crossed", "old-price", "original", "before")
STRIKE_TAGS = ("del", "s", "strike")


@dataclass(frozen=True)
class ExtractionContext:
    """Per-page inputs the extractors need besides the candidate itself."""

    base_url: str
    media_base_url: str
    image_map: Mapping[str, str] = field(default_factory=dict)
    strip_brand_prefix: bool = True

    @classmethod
    def from_config(cls, scraper_config, image_map: Optional[Mapping[str, str]] = None):
        return cls(
            base_url=scraper_config.base_url,
            media_base_url=scraper_config.media_base_url,
            image_map=dict(image_map or {}),
            strip_brand_prefix=scraper_config.strip_brand_prefix,
        )


@dataclass(frozen=True)
class FieldValues:
    """Raw extractor outputs for one candidate; None means absent."""

    title: str
    price: str
    url: str
    image: str = ""
    brand: Optional[str] = None
    old_price: Optional[str] = None
    discount: Optional[str] = None


def resolve_chain(chain, *args) -> Optional[str]:
    """Run resolvers in order and return the first non-empty result."""
    for resolver in chain:
        value = resolver(*args)
        if value:
            return value
    return None


def is_placeholder_source(src: Optional[str]) -> bool:
    """True for sources that are not real product images (icons, loaders, pixels, inline data)."""
    if not src:
        return True
    lowered = src.strip().lower()
    if lowered.startswith("data:"):
        return True
    return any(marker in lowered for marker in PLACEHOLDER_MARKERS)


def _first_tag(candidate: Node, name: str, attribute: Optional[str] = None) -> Optional[Node]:
    if attribute is None:
        return candidate.find_first(lambda node: node.is_tag(name))
    return candidate.find_first(lambda node: node.is_tag(name) and node.has_attribute(attribute))


# ---------------------------------------------------------------------------
# Title
# ---------------------------------------------------------------------------


def title_from_link_attribute(candidate: Node) -> Optional[str]:
    link = _first_tag(candidate, "a", "title")
    title = normalize_whitespace(link.attribute("title")) if link else ""
    return title if len(title) >= MIN_ATTRIBUTE_TITLE else None


def title_from_image_alt(candidate: Node) -> Optional[str]:
    image = _first_tag(candidate, "img", "alt")
    alt = normalize_whitespace(image.attribute("alt")) if image else ""
    return alt if len(alt) >= MIN_ATTRIBUTE_TITLE else None


def title_from_text(candidate: Node) -> Optional[str]:
    """Block text with prices, percentages and badge copy removed."""
    text = candidate.normalized_text()
    for pattern in NOISE_PATTERNS:
        text = pattern.sub("", text)
    return normalize_whitespace(text) or None


TITLE_CHAIN: tuple[Callable[[Node], Optional[str]], ...] = (
    title_from_link_attribute,
    title_from_image_alt,
    title_from_text,
)


def repair_concatenation(title: str) -> str:
    """Insert the space lost when an all-caps token was glued to the next word."""
    return GLUED_CAPS.sub(r"\1 \2", title)


def strip_brand(title: str, brand: Optional[str]) -> str:
    """Drop a leading "<brand> -" from the title."""
    if not brand:
        return title
    pattern = re.compile(rf"^{re.escape(brand)}\s*-?\s*", re.IGNORECASE)
    stripped = pattern.sub("", title).strip()
    return stripped or title


def extract_title(candidate: Node, brand: Optional[str] = None, strip_brand_prefix: bool = True) -> str:
    title = resolve_chain(TITLE_CHAIN, candidate) or ""
    title = repair_concatenation(title)
    if strip_brand_prefix:
        title = strip_brand(title, brand)
    return title or UNKNOWN_PRODUCT


# ---------------------------------------------------------------------------
# Brand
# ---------------------------------------------------------------------------


def brand_from_bold_text(candidate: Node) -> Optional[str]:
    for node in candidate.find_descendants(lambda n: n.is_tag("b", "strong")):
        text = normalize_whitespace(node.text())
        if 1 < len(text) < 50 and not BOLD_NOISE.search(text):
            return text
    return None


def brand_from_vocabulary(candidate: Node) -> Optional[str]:
    text = candidate.normalized_text()
    for brand in KNOWN_BRANDS:
        if re.search(rf"\b{re.escape(brand)}\b", text, re.IGNORECASE):
            return brand
    return None


BRAND_CHAIN: tuple[Callable[[Node], Optional[str]], ...] = (
    brand_from_bold_text,
    brand_from_vocabulary,
)


def extract_brand(candidate: Node) -> Optional[str]:
    return resolve_chain(BRAND_CHAIN, candidate)


# ---------------------------------------------------------------------------
# Prices and discount
# ---------------------------------------------------------------------------


def _is_price_element(node: Node) -> bool:
    return class_contains("price")(node) or node.attribute("data-testid") == "price"


def extract_price(candidate: Node) -> str:
    """First amount inside the first price-like element; its raw text if no amount is found."""
    element = candidate.find_first(_is_price_element)
    if element is None:
        return ""
    text = element.normalized_text()
    return find_amount(text) or text


def _is_old_price_element(node: Node) -> bool:
    return node.is_tag(*STRIKE_TAGS) or class_contains(*OLD_PRICE_CLASS_TOKENS)(node)


def extract_old_price(candidate: Node) -> Optional[str]:
    element = candidate.find_first(_is_old_price_element)
    if element is None:
        return None
    return find_amount(element.normalized_text())


def extract_discount(candidate: Node) -> Optional[str]:
    element = candidate.find_first(class_contains("discount"))
    if element is None:
        return None
    return find_percentage(element.normalized_text())


# ---------------------------------------------------------------------------
# URL
# ---------------------------------------------------------------------------


def is_product_href(href: Optional[str]) -> bool:
    """Usable product link: not empty, not a fragment, script or root, not site navigation."""
    if not href:
        return False
    href = href.strip()
    if href in ("#", "/") or href.lower().startswith("javascript:"):
        return False
    return not NAVIGATION_HREF.search(href)


def url_from_descendant_links(candidate: Node) -> Optional[str]:
    for link in candidate.find_descendants(lambda n: n.is_tag("a") and n.has_attribute("href")):
        href = link.attribute("href")
        if is_product_href(href):
            return href.strip()
    return None


def url_from_self(candidate: Node) -> Optional[str]:
    if candidate.is_tag("a"):
        return (candidate.attribute("href") or "").strip() or None
    return None


URL_CHAIN: tuple[Callable[[Node], Optional[str]], ...] = (
    url_from_descendant_links,
    url_from_self,
)


def absolute_url(href: Optional[str], base_url: str) -> str:
    """Resolve an href against the site origin; unusable hrefs fall back to the home page."""
    home = f"{base_url.rstrip('/')}/"
    if not href or href.strip() == "#":
        return home
    return urljoin(home, href.strip())


def extract_url(candidate: Node, context: ExtractionContext) -> str:
    return absolute_url(resolve_chain(URL_CHAIN, candidate), context.base_url)


# ---------------------------------------------------------------------------
# Image
# ---------------------------------------------------------------------------


def first_srcset_entry(srcset: Optional[str]) -> str:
    """URL of the first srcset candidate. CDN URLs may contain commas, so split on whitespace."""
    tokens = (srcset or "").split()
    return tokens[0].rstrip(",") if tokens else ""


def image_source_candidates(image: Node) -> list[str]:
    """Source-bearing attributes of an <img>, in priority order."""
    sources = [image.attribute(name) or "" for name in IMAGE_SOURCE_ATTRIBUTES]
    sources.append(first_srcset_entry(image.attribute("srcset")))
    return [src.strip() for src in sources if src and src.strip()]


def image_from_map(candidate: Node, url: str, context: ExtractionContext) -> Optional[str]:
    return context.image_map.get(url)


def image_from_markup(candidate: Node, url: str, context: ExtractionContext) -> Optional[str]:
    for image in candidate.find_descendants(lambda n: n.is_tag("img")):
        for src in image_source_candidates(image):
            if not is_placeholder_source(src):
                return src
    return None


def image_from_product_id(candidate: Node, url: str, context: ExtractionContext) -> Optional[str]:
    match = PRODUCT_ID_IN_URL.search(url or "")
    if not match:
        return None
    return f"{context.media_base_url.rstrip('/')}/{match.group(1)}_01/public"


IMAGE_CHAIN = (
    image_from_map,
    image_from_markup,
    image_from_product_id,
)


def extract_image(candidate: Node, url: str, context: ExtractionContext) -> str:
    return resolve_chain(IMAGE_CHAIN, candidate, url, context) or ""


# ---------------------------------------------------------------------------


def extract_fields(candidate: Node, context: ExtractionContext) -> FieldValues:
    """Run every field extractor over one candidate."""
    brand = extract_brand(candidate)
    url = extract_url(candidate, context)
    return FieldValues(
        title=extract_title(candidate, brand, context.strip_brand_prefix),
        brand=brand,
        price=extract_price(candidate),
        old_price=extract_old_price(candidate),
        discount=extract_discount(candidate),
        url=url,
        image=extract_image(candidate, url, context),
    )
