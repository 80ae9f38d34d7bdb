"""Photo Smith: raster image filters with cancellation, progress and undo/redo."""

__version__ = "0.1.0"
