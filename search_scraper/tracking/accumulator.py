"""
Run-wide result accumulator with URL-keyed deduplication.

The same product often appears more than once on a results page (sponsored
slot plus organic slot) or again on the next page. Records are keyed by
their resolved URL: titles and prices repeat legitimately across distinct
variants, URLs do not.
"""

from typing import Generic, Optional, TypeVar

RecordT = TypeVar("RecordT")


class ResultAccumulator(Generic[RecordT]):
    """Ordered, append-only result set plus the seen-URL index."""

    def __init__(self):
        self._records: list[RecordT] = []
        self._seen: set[str] = set()
        self.duplicates: int = 0
        self.rejected: int = 0
        self.filtered: int = 0

    @staticmethod
    def key_for(record) -> str:
        return record.url

    def admit(self, record: RecordT) -> bool:
        """
        Append the record unless its URL was already admitted.

        Returns:
            True if the record was added, False for a duplicate
        """
        key = self.key_for(record)
        if key in self._seen:
            self.duplicates += 1
            return False
        self._seen.add(key)
        self._records.append(record)
        return True

    def record_rejection(self) -> None:
        self.rejected += 1

    def record_filtered(self) -> None:
        self.filtered += 1

    def size(self) -> int:
        return len(self._records)

    def __len__(self) -> int:
        return self.size()

    def is_full(self, max_results: int) -> bool:
        """True once a bounded run has collected ``max_results`` records (0 means unbounded)."""
        return max_results > 0 and self.size() >= max_results

    def records(self, limit: Optional[int] = None) -> list[RecordT]:
        """Records in admission order, truncated to ``limit`` when it is positive."""
        if limit and limit > 0:
            return list(self._records[:limit])
        return list(self._records)

