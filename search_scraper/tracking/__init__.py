"""Result tracking for a single crawl run."""

from .accumulator import ResultAccumulator

__all__ = ["ResultAccumulator"]
