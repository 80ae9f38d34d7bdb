"""Background operations (Qt worker threads)."""

from .filter_worker import FilterController, FilterWorker

__all__ = ["FilterController", "FilterWorker"]
