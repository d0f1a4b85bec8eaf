"""Record assembly and the output record models."""

from .record_assembler import PageRecord, ProductRecord, RecordAssembler

__all__ = ["PageRecord", "ProductRecord", "RecordAssembler"]
