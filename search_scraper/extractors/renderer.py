"""
Playwright renderer with stealth settings.

Loads search pages in a real browser so client-side rendering and lazy
loading happen, and exposes the handful of page operations the crawler
needs (navigate, run a script, best-effort waits, snapshot the markup).
"""

import random
from typing import Any, Optional

from playwright.async_api import Browser, BrowserContext, Page, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright_stealth import Stealth
from rich.console import Console

from config.settings import ScraperConfig, config

from ..errors import NavigationError

console = Console()


class RenderedPage:
    """One browser tab. Waits are best-effort and report readiness as a bool."""

    def __init__(self, page: Page):
        self.page = page

    @property
    def url(self) -> str:
        return self.page.url

    async def navigate(
        self, url: str, wait_until: str = "domcontentloaded", timeout_ms: int = 60000
    ) -> None:
        """Load ``url``. Raises NavigationError on timeout or network failure."""
        try:
            await self.page.goto(url, wait_until=wait_until, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise NavigationError(url, f"Navigation timed out after {timeout_ms}ms") from e
        except PlaywrightError as e:
            raise NavigationError(url, f"Navigation failed: {e.message}") from e

    async def run_script(self, script: str, arg: Any = None) -> Any:
        if arg is None:
            return await self.page.evaluate(script)
        return await self.page.evaluate(script, arg)

    async def wait_for_condition(
        self, predicate: str, timeout_ms: int, arg: Any = None
    ) -> bool:
        """Wait until the JS predicate is truthy. Never raises."""
        try:
            await self.page.wait_for_function(predicate, arg=arg, timeout=timeout_ms)
            return True
        except PlaywrightError:
            return False

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> bool:
        try:
            await self.page.wait_for_selector(selector, timeout=timeout_ms, state="attached")
            return True
        except PlaywrightError:
            return False

    async def pause(self, milliseconds: int) -> None:
        await self.page.wait_for_timeout(milliseconds)

    async def snapshot_markup(self) -> str:
        try:
            return await self.page.content()
        except PlaywrightError as e:
            raise NavigationError(self.page.url, f"Could not read page content: {e.message}") from e

    async def close(self) -> None:
        await self.page.close()


class PlaywrightRenderer:
    """Owns the browser and hands out stealth pages."""

    def __init__(
        self,
        scraper_config: Optional[ScraperConfig] = None,
        browser_type: str = "chromium",
    ):
        self.config = scraper_config or config.scraper
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.playwright = None
        self.browser_type = browser_type  # "chromium", "firefox", or "webkit"
        self.stealth = Stealth()

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self) -> None:
        """Start the browser with a desktop profile for the target locale."""
        console.print(f"[bold blue]Starting {self.browser_type} browser...[/bold blue]")

        self.playwright = await async_playwright().start()

        browser_launchers = {
            "chromium": self.playwright.chromium,
            "firefox": self.playwright.firefox,
            "webkit": self.playwright.webkit,
        }
        launcher = browser_launchers.get(self.browser_type, self.playwright.chromium)

        try:
            self.browser = await launcher.launch(headless=self.config.headless)
        except PlaywrightError as e:
            console.print(f"[yellow]Failed to launch {self.browser_type}: {e}[/yellow]")
            console.print("[yellow]Trying Firefox as fallback...[/yellow]")
            self.browser = await self.playwright.firefox.launch(
                headless=self.config.headless,
            )

        self.context = await self.browser.new_context(
            viewport={
                "width": self.config.viewport_width,
                "height": self.config.viewport_height,
            },
            user_agent=random.choice(self.config.user_agents),
            locale=self.config.locale,
            timezone_id=self.config.timezone_id,
            extra_http_headers={
                **self.config.extra_headers,
                "Referer": self.config.home_url,
            },
        )

        console.print("[bold green]Browser started successfully[/bold green]")

    async def close(self) -> None:
        """Close the browser."""
        if self.context:
            await self.context.close()
        if self.browser:
            await self.browser.close()
        if self.playwright:
            await self.playwright.stop()
        console.print("[bold blue]Browser closed[/bold blue]")

    async def new_page(self) -> RenderedPage:
        """Open a new tab with stealth patches applied."""
        page = await self.context.new_page()
        await self.stealth.apply_stealth_async(page)
        return RenderedPage(page)
