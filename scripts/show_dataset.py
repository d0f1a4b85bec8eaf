#!/usr/bin/env python3
"""
Print a saved dataset as a table.

Usage:
    python scripts/show_dataset.py data/datasets/items-20260101-120000.json
    python scripts/show_dataset.py                      # Most recent dataset
    python scripts/show_dataset.py --discounted-only
"""

import argparse
import json
import sys
from pathlib import Path

# Project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from rich.console import Console
from rich.table import Table

from config.settings import config

console = Console()


def latest_dataset() -> Path | None:
    datasets = [
        p for p in config.storage.output_dir.glob("*.json") if not p.name.endswith(".summary.json")
    ]
    return max(datasets, key=lambda p: p.stat().st_mtime) if datasets else None


def main() -> int:
    parser = argparse.ArgumentParser(description="Show a scraped dataset.")
    parser.add_argument("path", nargs="?", type=Path, default=None, help="Dataset JSON file")
    parser.add_argument(
        "--discounted-only",
        action="store_true",
        help="Only show products with a discount",
    )
    args = parser.parse_args()

    path = args.path or latest_dataset()
    if not path or not path.exists():
        console.print("[red]No dataset found.[/red]")
        return 1

    records = json.loads(path.read_text(encoding="utf-8"))
    if args.discounted_only:
        records = [r for r in records if r.get("discount")]

    is_items = bool(records) and "price" in records[0]
    table = Table(title=f"{path.name} ({len(records)} records)", show_header=True)
    table.add_column("Title", style="cyan", max_width=50)
    if is_items:
        table.add_column("Price", style="green")
        table.add_column("Old Price", style="dim")
        table.add_column("Discount", style="yellow")
    else:
        table.add_column("Products", style="green")
    table.add_column("URL", style="dim", max_width=60)

    for record in records:
        if is_items:
            table.add_row(
                record["title"],
                record["price"],
                record.get("oldPrice") or "-",
                record.get("discount") or "-",
                record["url"],
            )
        else:
            table.add_row(record["title"], record.get("productCount") or "-", record["url"])

    console.print(table)
    return 0


if __name__ == "__main__":
    sys.exit(main())
