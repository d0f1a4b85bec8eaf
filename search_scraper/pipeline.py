"""
Crawl pipeline: plans the search URLs, visits them one at a time, and feeds
every rendered page through selection, extraction, assembly and dedup.
"""

import asyncio
import math
import random
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config.settings import PipelineConfig, config

from .dom import Node, parse
from .errors import NavigationError
from .extractors.candidates import select_candidates
from .extractors.fields import ExtractionContext, extract_fields
from .extractors.image_map import collect_image_map
from .extractors.lazy_load import complete_lazy_load
from .extractors.pages import extract_page_records
from .loaders.dataset_loader import DatasetLoader
from .request import SearchRequest
from .tracking.accumulator import ResultAccumulator
from .transformers.record_assembler import RecordAssembler

console = Console(record=True)

# Playwright renderer (only imported when a real browser is needed)
PlaywrightRenderer = None


def _get_renderer_class():
    """Lazily import the Playwright renderer so parsing code runs without a browser."""
    global PlaywrightRenderer
    if PlaywrightRenderer is None:
        from .extractors.renderer import PlaywrightRenderer as _PlaywrightRenderer

        PlaywrightRenderer = _PlaywrightRenderer
    return PlaywrightRenderer


@dataclass
class PageOutcome:
    """Counts for one processed page."""

    candidates: int = 0
    admitted: int = 0


class SearchPipeline:
    """
    Crawl pipeline for Falabella search results.

    Orchestrates:
    - Plan: one search URL, or a bounded run of result pages
    - Visit: render each page in turn and complete lazy loading
    - Extract: candidates -> fields -> records -> price filter -> dedup
    - Load: save the accumulated dataset
    """

    def __init__(
        self,
        request: SearchRequest,
        pipeline_config: Optional[PipelineConfig] = None,
        renderer_factory=None,
        loader: Optional[DatasetLoader] = None,
        output_path: Optional[Path] = None,
        save_dataset: bool = True,
    ):
        self.request = request
        self.config = pipeline_config or config
        self.renderer_factory = renderer_factory
        self.loader = loader or DatasetLoader(self.config.storage)
        self.output_path = output_path
        self.save_dataset = save_dataset

        self.assembler = RecordAssembler.from_config(self.config.scraper)
        self.accumulator: ResultAccumulator = ResultAccumulator()
        self.pages_visited: int = 0

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def build_search_url(self, page_number: int = 1) -> str:
        """Search URL for one results page, carrying the price range when one was requested."""
        scraper = self.config.scraper
        url = (
            f"{scraper.base_url}{scraper.search_path}"
            f"?{scraper.query_param}={quote(self.request.query, safe='')}"
        )

        if self.request.has_price_range:
            minimum = int(self.request.min_price or 0)
            maximum = (
                int(self.request.max_price)
                if self.request.max_price is not None
                else scraper.max_price_sentinel
            )
            url += f"&{scraper.price_range_param}={quote(f'{maximum}::{minimum}', safe=':')}"

        if page_number > 1:
            url += f"&{scraper.page_param}={page_number}"

        return url

    def page_count(self) -> int:
        """Number of result pages to schedule, capped at max_pages."""
        scraper = self.config.scraper
        max_results = self.request.max_results

        if self.request.mode == "items" and 0 < max_results <= scraper.page_size:
            return 1
        if max_results == 0:
            return scraper.max_pages
        return max(1, min(math.ceil(max_results / scraper.page_size), scraper.max_pages))

    def plan_urls(self) -> list[str]:
        return [self.build_search_url(n) for n in range(1, self.page_count() + 1)]

    # ------------------------------------------------------------------
    # Extraction (synchronous, per page)
    # ------------------------------------------------------------------

    def process_markup(self, markup: str, image_map: Optional[dict] = None) -> PageOutcome:
        """Parse one page snapshot and admit its records."""
        root = parse(markup)
        if self.request.mode == "pages":
            return self._collect_pages(root)
        return self._collect_products(root, image_map or {})

    def _collect_products(self, root: Node, image_map: dict) -> PageOutcome:
        context = ExtractionContext.from_config(self.config.scraper, image_map)
        candidates = select_candidates(root)
        outcome = PageOutcome(candidates=len(candidates))

        for candidate in candidates:
            if self.accumulator.is_full(self.request.max_results):
                break

            record = self.assembler.assemble(extract_fields(candidate, context))
            if record is None:
                self.accumulator.record_rejection()
                continue

            if not self.request.accepts_price(record.price_numeric):
                self.accumulator.record_filtered()
                continue

            if self.accumulator.admit(record):
                outcome.admitted += 1

        console.print(
            f"[dim]  {outcome.candidates} candidates, {outcome.admitted} new products[/dim]"
        )
        return outcome

    def _collect_pages(self, root: Node) -> PageOutcome:
        scraper = self.config.scraper
        records = extract_page_records(root, scraper.base_url, scraper.search_path)
        outcome = PageOutcome(candidates=len(records))

        for record in records:
            if self.accumulator.is_full(self.request.max_results):
                break
            if self.accumulator.admit(record):
                outcome.admitted += 1

        console.print(f"[dim]  {outcome.candidates} page links, {outcome.admitted} new pages[/dim]")
        return outcome

    # ------------------------------------------------------------------
    # Visiting
    # ------------------------------------------------------------------

    async def _random_delay(self) -> None:
        """Pause between page visits, with jitter."""
        delay = self.config.scraper.page_delay_seconds
        if delay > 0:
            await asyncio.sleep(delay * random.uniform(0.5, 1.5))

    async def visit(self, renderer, url: str) -> PageOutcome:
        """Render one results page and run it through extraction. Never fails the run."""
        scraper = self.config.scraper
        page = await renderer.new_page()

        try:
            try:
                await page.navigate(url, "domcontentloaded", scraper.navigation_timeout_ms)
            except NavigationError as e:
                console.print(f"[yellow]  {e}; continuing with what loaded[/yellow]")

            if not await page.wait_for_selector("img", scraper.selector_timeout_ms):
                console.print("[dim]  No images appeared before the timeout[/dim]")

            await complete_lazy_load(page, scraper)

            image_map = {}
            if self.request.mode == "items":
                image_map = await collect_image_map(page, scraper.base_url)

            try:
                markup = await page.snapshot_markup()
            except NavigationError as e:
                console.print(f"[yellow]  Skipping page: {e}[/yellow]")
                return PageOutcome()

            return self.process_markup(markup, image_map)
        finally:
            await page.close()

    async def crawl(self) -> list:
        """Visit the planned pages in order until they run out or enough results are collected."""
        urls = self.plan_urls()
        factory = self.renderer_factory or _get_renderer_class()

        async with factory(self.config.scraper) as renderer:
            for page_number, url in enumerate(urls, start=1):
                if page_number > 1:
                    await self._random_delay()

                console.print(
                    f"\n[bold magenta]Page {page_number}/{len(urls)}:[/bold magenta] [cyan]{url}[/cyan]"
                )
                outcome = await self.visit(renderer, url)
                self.pages_visited += 1

                if self.accumulator.is_full(self.request.max_results):
                    remaining = len(urls) - page_number
                    if remaining:
                        console.print(
                            f"[green]Reached {self.request.max_results} results; "
                            f"skipping {remaining} remaining page(s)[/green]"
                        )
                    break

                if page_number > 1 and outcome.candidates == 0:
                    console.print("[dim]Empty results page; assuming this was the last one[/dim]")
                    break

        return self.accumulator.records(self.request.max_results)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self) -> dict:
        """
        Run the complete crawl and save the dataset.

        Returns:
            Summary dict with run results
        """
        start_time = datetime.now()
        self._print_header()

        error = None
        try:
            records = await self.crawl()
        except Exception as e:
            error = str(e)
            console.print(f"[bold red]Crawl stopped early: {e}[/bold red]")
            records = self.accumulator.records(self.request.max_results)

        noun = "products" if self.request.mode == "items" else "pages"
        console.print(f"\n[green]Found {len(records)} {noun}.[/green]")

        dataset_path = None
        if self.save_dataset:
            dataset_path = await self.loader.save_dataset(records, self.request, self.output_path)

        elapsed = (datetime.now() - start_time).total_seconds()
        self._print_summary(elapsed, len(records), dataset_path)
        self._save_log()

        return {
            "success": True,
            "error": error,
            "mode": self.request.mode,
            "records": records,
            "records_saved": len(records),
            "pages_visited": self.pages_visited,
            "elapsed_seconds": elapsed,
            "dataset_path": str(dataset_path) if dataset_path else None,
        }

    def _save_log(self) -> None:
        logging_config = self.config.logging
        if not logging_config.log_to_file:
            return
        logging_config.ensure_dirs()
        log_path = logging_config.log_dir / f"run-{datetime.now():%Y%m%d-%H%M%S}.log"
        console.save_text(str(log_path))

    def _print_header(self):
        """Print pipeline header."""
        price_range = "any"
        if self.request.has_price_range:
            low = f"{self.request.min_price or 0:,.0f}"
            high = (
                f"{self.request.max_price:,.0f}"
                if self.request.max_price is not None
                else "no limit"
            )
            price_range = f"{low} - {high}"
        header = Panel(
            "[bold white]FALABELLA SEARCH SCRAPER[/bold white]\n"
            f"[dim]Query: {self.request.query}[/dim]\n"
            f"[dim]Mode: {self.request.mode} | Max results: {self.request.max_results or 'unbounded'}[/dim]\n"
            f"[dim]Price range: {price_range}[/dim]\n"
            f"[dim]Pages planned: {self.page_count()}[/dim]",
            title="Search Scraper",
            border_style="blue",
        )
        console.print(header)

    def _print_summary(self, elapsed: float, saved: int, dataset_path: Optional[Path]):
        """Print final run summary."""
        table = Table(title="Crawl Results", show_header=True)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Pages Visited", str(self.pages_visited))
        table.add_row("Records Saved", str(saved))
        table.add_row("Duplicates Skipped", str(self.accumulator.duplicates))
        table.add_row("Candidates Rejected", str(self.accumulator.rejected))
        table.add_row("Outside Price Range", str(self.accumulator.filtered))
        table.add_row("Time Elapsed", f"{elapsed:.1f} seconds")
        table.add_row("Dataset", str(dataset_path) if dataset_path else "-")

        console.print("\n")
        console.print(table)
