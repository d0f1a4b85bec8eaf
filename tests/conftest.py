"""Shared fixtures: parsed HTML helpers and an in-memory stand-in for the browser."""

from typing import Optional

import pytest

from config.settings import PipelineConfig, StorageConfig
from search_scraper.dom import parse
from search_scraper.errors import NavigationError
from search_scraper.extractors.fields import ExtractionContext
from search_scraper.extractors.image_map import COLLECT_IMAGE_ENTRIES_JS
from search_scraper.extractors.lazy_load import PROMOTE_DATA_SRC_JS, SCROLL_THROUGH_PAGE_JS

BASE_URL = "https://www.falabella.com.co"


def product_pod(
    product_id: int,
    name: str,
    price: str,
    brand: str = "HP",
    discount: Optional[str] = None,
    old_price: Optional[str] = None,
    image: Optional[str] = None,
) -> str:
    """Markup shaped like one result pod on the search page."""
    image = image or f"https://media.falabella.com/falabellaCO/{product_id}_01/public"
    discount_html = f'<span class="discount-badge-item">{discount}</span>' if discount else ""
    old_price_html = f'<span class="copy10 crossed">{old_price}</span>' if old_price else ""
    return f"""
    <div class="jsx-1833870204 pod pod-4_GRID" data-pod="catalyst-pod">
      <a href="/falabella-co/product/{product_id}/{name.lower().replace(' ', '-')}/{product_id}" class="pod-link">
        <picture><img src="{image}" alt="{name}"></picture>
        <b class="pod-title">{brand}</b>
        <b class="pod-subTitle">{name}</b>
        <ol class="ol-4_GRID pod-prices">
          <li class="prices-0"><span class="copy10 primary high">{price}</span></li>
          {old_price_html}
        </ol>
        {discount_html}
      </a>
    </div>
    """


def results_page(*pods: str) -> str:
    return f"<html><body><div id='testId-searchResults-products'>{''.join(pods)}</div></body></html>"


def first_element(markup: str):
    """Parse markup and return its first element as a Node."""
    return next(parse(markup).iter_descendants())


@pytest.fixture
def context() -> ExtractionContext:
    return ExtractionContext(
        base_url=BASE_URL,
        media_base_url="https://media.falabella.com/falabellaCO",
    )


@pytest.fixture
def pipeline_config(tmp_path) -> PipelineConfig:
    pipeline_config = PipelineConfig(storage=StorageConfig(base_dir=tmp_path / "data"))
    pipeline_config.scraper.base_url = BASE_URL
    pipeline_config.scraper.page_delay_seconds = 0
    pipeline_config.logging.log_to_file = False
    return pipeline_config


class FakePage:
    """Implements the RenderedPage surface over canned markup."""

    def __init__(
        self,
        markup: str,
        image_entries: Optional[list] = None,
        fail_navigation: bool = False,
        fail_snapshot: bool = False,
    ):
        self.markup = markup
        self.image_entries = image_entries or []
        self.fail_navigation = fail_navigation
        self.fail_snapshot = fail_snapshot
        self.url = ""
        self.scripts: list[str] = []
        self.closed = False

    async def navigate(self, url, wait_until="domcontentloaded", timeout_ms=60000):
        self.url = url
        if self.fail_navigation:
            raise NavigationError(url, f"Navigation timed out after {timeout_ms}ms")

    async def run_script(self, script, arg=None):
        self.scripts.append(script)
        if script == SCROLL_THROUGH_PAGE_JS:
            return 12
        if script == PROMOTE_DATA_SRC_JS:
            return 3
        if script == COLLECT_IMAGE_ENTRIES_JS:
            return self.image_entries
        return None

    async def wait_for_condition(self, predicate, timeout_ms, arg=None):
        return True

    async def wait_for_selector(self, selector, timeout_ms):
        return True

    async def pause(self, milliseconds):
        return None

    async def snapshot_markup(self):
        if self.fail_snapshot:
            raise NavigationError(self.url, "Could not read page content")
        return self.markup

    async def close(self):
        self.closed = True


class FakeRenderer:
    """Hands out FakePages in schedule order and remembers which URLs were visited."""

    def __init__(self, pages: list[FakePage]):
        self.pages = list(pages)
        self.opened: list[FakePage] = []

    def __call__(self, scraper_config):
        return self

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None

    async def new_page(self) -> FakePage:
        page = self.pages[len(self.opened)] if len(self.opened) < len(self.pages) else FakePage("")
        self.opened.append(page)
        return page

    @property
    def visited_urls(self) -> list[str]:
        return [page.url for page in self.opened]
