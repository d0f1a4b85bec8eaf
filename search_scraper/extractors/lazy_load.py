"""
Lazy-load completion protocol.

Search results only receive real image sources once they have been near the
viewport, so before snapshotting we scroll the whole page in small steps,
return to the top, let things settle, and promote any ``data-src`` that the
site's loader never swapped in. Every step is best-effort: a page that never
finishes loading is still extracted with whatever it managed to show.
"""

from dataclasses import dataclass
from typing import Optional

from rich.console import Console

from config.settings import ScraperConfig

console = Console()

SCROLL_THROUGH_PAGE_JS = """
async ({distance, delay, maxSteps}) => {
    let steps = 0;
    while (window.scrollY + window.innerHeight < document.body.scrollHeight && steps < maxSteps) {
        window.scrollBy(0, distance);
        steps += 1;
        await new Promise(resolve => setTimeout(resolve, delay));
    }
    window.scrollTo(0, 0);
    return steps;
}
"""

PROMOTE_DATA_SRC_JS = """
() => {
    let promoted = 0;
    document.querySelectorAll('img[data-src]').forEach(img => {
        const dataSrc = img.getAttribute('data-src');
        if (dataSrc && !img.getAttribute('src')) {
            img.setAttribute('src', dataSrc);
            promoted += 1;
        }
    });
    return promoted;
}
"""

IMAGES_READY_JS = """
(threshold) => {
    const images = Array.from(document.querySelectorAll('img'));
    if (images.length === 0) return true;
    const markers = ['placeholder', 'loading', '1x1', 'data:', 'transparent'];
    const ready = images.filter(img => {
        const src = (img.currentSrc || img.getAttribute('src') || '').toLowerCase();
        return src && !markers.some(marker => src.includes(marker));
    });
    return ready.length / images.length >= threshold;
}
"""


@dataclass
class LazyLoadReport:
    """What the protocol achieved on one page."""

    scroll_steps: int = 0
    scrolled: bool = False
    promoted_images: int = 0
    images_ready: Optional[bool] = None  # None when the readiness wait is disabled


async def complete_lazy_load(page, scraper_config: ScraperConfig) -> LazyLoadReport:
    """Scroll, settle, promote lazy sources and optionally wait for images."""
    report = LazyLoadReport()

    try:
        report.scroll_steps = await page.run_script(
            SCROLL_THROUGH_PAGE_JS,
            {
                "distance": scraper_config.scroll_step_px,
                "delay": scraper_config.scroll_delay_ms,
                "maxSteps": scraper_config.max_scroll_steps,
            },
        ) or 0
        report.scrolled = True
    except Exception as e:
        console.print(f"[yellow]  Progressive scroll interrupted: {e}[/yellow]")

    await page.pause(scraper_config.settle_delay_ms)

    try:
        report.promoted_images = await page.run_script(PROMOTE_DATA_SRC_JS) or 0
    except Exception as e:
        console.print(f"[yellow]  Could not promote lazy image sources: {e}[/yellow]")

    await page.pause(scraper_config.promote_settle_ms)

    if scraper_config.wait_for_images:
        report.images_ready = await page.wait_for_condition(
            IMAGES_READY_JS,
            scraper_config.image_ready_timeout_ms,
            arg=scraper_config.image_ready_threshold,
        )
        if not report.images_ready:
            console.print(
                f"[dim]  Fewer than {scraper_config.image_ready_threshold:.0%} of images loaded; continuing[/dim]"
            )

    console.print(
        f"[dim]  Lazy load: {report.scroll_steps} scroll steps, "
        f"{report.promoted_images} sources promoted[/dim]"
    )
    return report
