#!/usr/bin/env python3
"""
Falabella Search Scraper - Main Entry Point

Searches falabella.com.co, renders the result pages, and saves the products
(or linked category pages) it finds as a JSON dataset.

Usage:
    python main.py "laptop hp"                 # Up to 100 products
    python main.py "laptop hp" -n 5            # First 5 products
    python main.py --input INPUT.json          # Read run input from a file
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from rich.console import Console

from config.settings import PipelineConfig
from search_scraper.errors import InputValidationError
from search_scraper.pipeline import SearchPipeline
from search_scraper.request import SearchRequest

console = Console()


class CustomHelpFormatter(argparse.RawDescriptionHelpFormatter):
    """Custom formatter that preserves formatting and adds width."""

    def __init__(self, prog):
        super().__init__(prog, max_help_position=40, width=100)


def parse_args(argv=None):
    """Parse command line arguments."""

    epilog = """
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
EXAMPLES
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
  Products:
    python main.py "laptop hp"                      Up to 100 products
    python main.py "laptop hp" -n 5                 Quick test: 5 products
    python main.py "celular" -n 0                   Everything (up to the page cap)
    python main.py "tv" --min-price 500000 --max-price 2000000

  Category pages:
    python main.py "zapatillas" --mode pages        Linked category/brand pages

  Input file (same keys as the dataset actor input):
    python main.py --input INPUT.json
      {"searchFor": "items", "searchQuery": "laptop hp", "maxProducts": 20}

  Debugging:
    python main.py "laptop" -n 5 --headless false   Watch the browser
    python main.py "laptop" -o out/laptops.json     Choose the output file
"""

    parser = argparse.ArgumentParser(
        description="Scrape Falabella search results into a JSON dataset.",
        formatter_class=CustomHelpFormatter,
        epilog=epilog,
    )

    search_group = parser.add_argument_group("search")
    search_group.add_argument(
        "query",
        nargs="?",
        default=None,
        help="Search query (searchQuery)",
    )
    search_group.add_argument(
        "--mode",
        choices=["items", "pages"],
        default=None,
        help="What to collect: products or linked pages (default: items)",
    )
    search_group.add_argument(
        "-n",
        "--max-products",
        type=int,
        default=None,
        help="Maximum records to keep, 0 = no limit (default: 100)",
    )
    search_group.add_argument("--min-price", type=float, default=None, help="Minimum price")
    search_group.add_argument("--max-price", type=float, default=None, help="Maximum price")
    search_group.add_argument(
        "--input",
        type=Path,
        default=None,
        help="JSON file with run input; command-line values take precedence",
    )

    browser_group = parser.add_argument_group("browser")
    browser_group.add_argument(
        "--headless",
        type=lambda x: x.lower() not in ("false", "0", "no"),
        default=None,
        help="Run the browser headless (default: true)",
    )
    browser_group.add_argument(
        "--page-delay",
        type=float,
        default=None,
        help="Seconds to wait between result pages",
    )

    output_group = parser.add_argument_group("output")
    output_group.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Dataset path (default: data/datasets/<mode>-<timestamp>.json)",
    )
    output_group.add_argument(
        "--no-save",
        action="store_true",
        help="Print results only, do not write a dataset",
    )
    output_group.add_argument(
        "--log-file",
        action="store_true",
        help="Also save the run log under logs/",
    )

    return parser.parse_args(argv)


def build_run_input(args) -> dict:
    """Merge the input file (if any) with command-line values."""
    run_input = {}
    if args.input:
        try:
            run_input = json.loads(args.input.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise InputValidationError(f"Could not read input file {args.input}: {e}") from e

    overrides = {
        "searchFor": args.mode,
        "searchQuery": args.query,
        "maxProducts": args.max_products,
        "minPrice": args.min_price,
        "maxPrice": args.max_price,
    }
    run_input.update({key: value for key, value in overrides.items() if value is not None})
    return run_input


def build_config(args) -> PipelineConfig:
    pipeline_config = PipelineConfig()
    if args.headless is not None:
        pipeline_config.scraper.headless = args.headless
    if args.page_delay is not None:
        pipeline_config.scraper.page_delay_seconds = args.page_delay
    if args.log_file:
        pipeline_config.logging.log_to_file = True
    return pipeline_config


def print_records(records) -> None:
    for record in records:
        price = getattr(record, "price", "")
        console.print(f"  • [cyan]{record.title}[/cyan] {price} [dim]{record.url}[/dim]")


async def run(args) -> int:
    try:
        request = SearchRequest.from_input(build_run_input(args))
    except InputValidationError as e:
        console.print(f"[bold red]✗ {e}[/bold red]")
        return 1

    console.print(f"[cyan]Fetching {request.mode}...[/cyan]")
    pipeline = SearchPipeline(
        request,
        pipeline_config=build_config(args),
        output_path=args.output,
        save_dataset=not args.no_save,
    )
    result = await pipeline.run()

    if args.no_save:
        print_records(result["records"])

    if result["error"]:
        console.print(f"\n[yellow]Finished with a partial result: {result['error']}[/yellow]")
    else:
        console.print("\n[bold green]✓ Done.[/bold green]")
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
