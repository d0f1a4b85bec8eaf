"""Tests for the lazy-load completion protocol."""

import pytest

from conftest import FakePage

from config.settings import ScraperConfig
from search_scraper.extractors.lazy_load import (
    IMAGES_READY_JS,
    PROMOTE_DATA_SRC_JS,
    SCROLL_THROUGH_PAGE_JS,
    complete_lazy_load,
)


class RecordingPage(FakePage):
    def __init__(self, images_ready=True, scroll_error=None):
        super().__init__("")
        self.images_ready = images_ready
        self.scroll_error = scroll_error
        self.pauses = []
        self.script_args = []
        self.conditions = []

    async def run_script(self, script, arg=None):
        self.script_args.append(arg)
        if script == SCROLL_THROUGH_PAGE_JS and self.scroll_error:
            raise self.scroll_error
        return await super().run_script(script, arg)

    async def wait_for_condition(self, predicate, timeout_ms, arg=None):
        self.conditions.append((predicate, timeout_ms, arg))
        return self.images_ready

    async def pause(self, milliseconds):
        self.pauses.append(milliseconds)


class TestCompleteLazyLoad:
    @pytest.mark.asyncio
    async def test_full_protocol(self):
        page = RecordingPage()
        scraper_config = ScraperConfig()

        report = await complete_lazy_load(page, scraper_config)

        assert page.scripts == [SCROLL_THROUGH_PAGE_JS, PROMOTE_DATA_SRC_JS]
        assert page.script_args[0] == {"distance": 300, "delay": 100, "maxSteps": 400}
        assert page.pauses == [2000, 500]
        assert page.conditions == [(IMAGES_READY_JS, 8000, 0.7)]
        assert report.scrolled
        assert report.scroll_steps == 12
        assert report.promoted_images == 3
        assert report.images_ready is True

    @pytest.mark.asyncio
    async def test_images_not_ready_is_not_fatal(self):
        report = await complete_lazy_load(RecordingPage(images_ready=False), ScraperConfig())

        assert report.images_ready is False

    @pytest.mark.asyncio
    async def test_readiness_wait_disabled(self):
        page = RecordingPage()
        scraper_config = ScraperConfig(wait_for_images=False)

        report = await complete_lazy_load(page, scraper_config)

        assert page.conditions == []
        assert report.images_ready is None

    @pytest.mark.asyncio
    async def test_scroll_failure_continues(self):
        page = RecordingPage(scroll_error=RuntimeError("Execution context was destroyed"))

        report = await complete_lazy_load(page, ScraperConfig())

        assert not report.scrolled
        assert report.scroll_steps == 0
        assert report.promoted_images == 3
