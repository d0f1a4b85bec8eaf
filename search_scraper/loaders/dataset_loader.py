"""
Dataset loader for saving run results as JSON.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence, Union

import aiofiles
from rich.console import Console

from config.settings import StorageConfig, config

from ..request import SearchRequest
from ..transformers.record_assembler import PageRecord, ProductRecord

console = Console()

Record = Union[ProductRecord, PageRecord]


class DatasetLoader:
    """Writes the run's records (and a small summary) to the datasets directory."""

    def __init__(self, storage_config: Optional[StorageConfig] = None):
        self.config = storage_config or config.storage

    def _default_path(self, request: SearchRequest) -> Path:
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        return self.config.output_dir / f"{request.mode}-{timestamp}.json"

    @staticmethod
    def serialize(records: Sequence[Record]) -> list[dict]:
        """Records as plain dicts with the dataset's camelCase keys."""
        return [record.model_dump(mode="json", by_alias=True) for record in records]

    def generate_summary(self, records: Sequence[Record], request: SearchRequest) -> dict:
        """Generate a summary of the run."""
        summary = {
            "mode": request.mode,
            "query": request.query,
            "max_results": request.max_results,
            "total_records": len(records),
            "price_range": {"min": None, "max": None},
            "discounted": 0,
        }

        for record in records:
            if not isinstance(record, ProductRecord):
                continue
            price = record.price_numeric
            if price:
                if summary["price_range"]["min"] is None or price < summary["price_range"]["min"]:
                    summary["price_range"]["min"] = price
                if summary["price_range"]["max"] is None or price > summary["price_range"]["max"]:
                    summary["price_range"]["max"] = price
            if record.discount:
                summary["discounted"] += 1

        return summary

    async def save_dataset(
        self,
        records: Sequence[Record],
        request: SearchRequest,
        output_path: Optional[Path] = None,
    ) -> Path:
        """
        Save records as a JSON array, with a summary file next to it.

        Args:
            records: Records in admission order
            request: The run's request (used for naming and the summary)
            output_path: Explicit dataset path; defaults to data/datasets/<mode>-<timestamp>.json

        Returns:
            Path to the dataset file
        """
        dataset_path = output_path or self._default_path(request)
        dataset_path.parent.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(dataset_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(self.serialize(records), indent=2, ensure_ascii=False))

        summary_path = dataset_path.with_name(f"{dataset_path.stem}.summary.json")
        async with aiofiles.open(summary_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(self.generate_summary(records, request), indent=2))

        console.print(f"[cyan]Dataset saved to {dataset_path}[/cyan]")
        return dataset_path
