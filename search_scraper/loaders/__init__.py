"""Dataset persistence."""

from .dataset_loader import DatasetLoader

__all__ = ["DatasetLoader"]
