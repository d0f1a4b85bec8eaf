"""
Image map built from the live rendered page.

After lazy loading, the browser knows image sources that the serialized
markup may still lack (``currentSrc`` of responsive images, sources swapped
in by scripts). We read them straight from the DOM and key them by the
product link they sit under, so the image extractor can look them up first.
"""

from typing import Iterable, Mapping, Optional
from urllib.parse import urljoin

from rich.console import Console

from .fields import first_srcset_entry, is_placeholder_source

console = Console()

PRODUCT_LINK_MARKER = "/product/"

COLLECT_IMAGE_ENTRIES_JS = """
(marker) => {
    const entries = [];
    document.querySelectorAll('a[href]').forEach(link => {
        const href = link.href || '';
        if (!href.includes(marker)) return;
        const img = link.querySelector('img');
        if (!img) return;
        entries.push({
            href: href,
            sources: [
                img.currentSrc || '',
                img.getAttribute('src') || '',
                img.getAttribute('data-src') || '',
                img.getAttribute('data-lazy-src') || '',
                img.getAttribute('data-original') || '',
            ],
            srcset: img.getAttribute('srcset') || '',
        });
    });
    return entries;
}
"""


def pick_image_source(sources: Iterable[str], srcset: str = "") -> Optional[str]:
    """First real image among the collected sources, then the first srcset entry."""
    for src in [*(s.strip() for s in sources if s), first_srcset_entry(srcset)]:
        if src and not is_placeholder_source(src):
            return src
    return None


def build_image_map(entries: Iterable[Mapping], base_url: str) -> dict[str, str]:
    """
    Turn the raw in-page entries into ``{absolute product url: image src}``.

    The first usable image seen for a URL wins; later duplicates (the same
    product linked from its title and its picture) are ignored.
    """
    home = f"{base_url.rstrip('/')}/"
    image_map: dict[str, str] = {}
    for entry in entries or []:
        href = (entry.get("href") or "").strip()
        if not href or PRODUCT_LINK_MARKER not in href:
            continue
        url = urljoin(home, href)
        if url in image_map:
            continue
        src = pick_image_source(entry.get("sources") or [], entry.get("srcset") or "")
        if src:
            image_map[url] = urljoin(home, src)
    return image_map


async def collect_image_map(page, base_url: str) -> dict[str, str]:
    """Run the collector script on a rendered page and build the map."""
    try:
        entries = await page.run_script(COLLECT_IMAGE_ENTRIES_JS, PRODUCT_LINK_MARKER)
    except Exception as e:
        console.print(f"[yellow]Image map collection failed: {e}[/yellow]")
        return {}

    image_map = build_image_map(entries or [], base_url)
    console.print(f"[dim]  Image map: {len(image_map)} product images from live page[/dim]")
    return image_map
