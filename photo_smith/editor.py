"""Editing session: the current image, its history and the active filter.

``EditorSession`` is the caller side of the filter engine. Every edit first
records the current image in the history; an edit that is cancelled or fails
drops that entry again so undo never lands on a no-op.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from photo_smith.errors import InvalidDimensions, InvalidParameter, PhotoSmithError
from photo_smith.filters import FilterResult, FilterSpec, get_filter
from photo_smith.filters.hsv import parse_color
from photo_smith.filters.protocol import (
    CancelToken,
    LoggingStatusSink,
    NullProgressSink,
    ProgressSink,
    StatusSink,
)
from photo_smith.history import DEFAULT_CAPACITY, HistoryManager
from photo_smith.image_engine import PixelBuffer, load_image, save_image
from photo_smith.image_engine.metrics import metrics
from photo_smith.logger import get_logger
from photo_smith.settings_manager import SettingsManager

_logger = get_logger("editor")

_COLOR_PARAM_FILTERS = ("tint", "custom_frame")


class EditorSession:
    def __init__(
        self,
        settings: SettingsManager | None = None,
        *,
        history_capacity: int | None = None,
        progress: ProgressSink | None = None,
        status: StatusSink | None = None,
    ):
        self.settings = settings
        if history_capacity is None:
            history_capacity = settings.history_capacity if settings is not None else DEFAULT_CAPACITY
        self.history = HistoryManager(history_capacity)
        self.current = PixelBuffer()
        self.original = PixelBuffer()
        self.token = CancelToken()
        self.progress: ProgressSink = progress if progress is not None else NullProgressSink()
        self.status: StatusSink = status if status is not None else LoggingStatusSink()
        self.active_filter = ""
        self.path: str | None = None

    # ---- image lifecycle ----
    @property
    def has_image(self) -> bool:
        return not self.current.is_empty()

    def set_image(self, buffer: PixelBuffer) -> None:
        """Start a new session on an in-memory image; history is cleared."""
        self.current = buffer.copy()
        self.original = buffer.copy()
        self.history.clear()
        self.active_filter = ""

    def load(self, path: str | Path) -> PixelBuffer:
        buf = load_image(path)
        self.set_image(buf)
        self.path = str(path)
        self.status.message(f"Loaded {Path(path).name} ({buf.width}x{buf.height})")
        return self.current

    def save(self, path: str | Path, quality: int = 95) -> str:
        if not self.has_image:
            raise InvalidDimensions("no image to save")
        out = save_image(self.current, path, quality=quality)
        self.status.message(f"Saved {Path(path).name}")
        return out

    # ---- editing ----
    def _params(self, key: str, params: dict[str, Any]) -> dict[str, Any]:
        merged = self.settings.filter_defaults(key) if self.settings is not None else {}
        merged.update(params)
        if key in _COLOR_PARAM_FILTERS and "color" in merged:
            merged["color"] = parse_color(merged["color"])
        if key == "merge" and isinstance(merged.get("other"), (str, Path)):
            merged["other"] = load_image(merged["other"])
        return merged

    def _interval(self, spec: FilterSpec) -> int:
        configured = self.settings.progress_interval if self.settings is not None else 0
        return configured or spec.interval

    def apply(self, key: str, **params: Any) -> FilterResult:
        """Run the catalog filter ``key`` on the current image.

        Cancelable filters report through the session sinks and return their
        ``FilterResult``. Immediate filters raise on invalid input, leaving the
        image and history untouched.
        """
        spec = get_filter(key)
        if not self.has_image:
            raise InvalidDimensions("no image loaded")
        kwargs = self._params(key, params)
        if spec.cancelable:
            return self._run_cancelable(spec, kwargs)
        return self._run_immediate(spec, kwargs)

    def _run_cancelable(self, spec: FilterSpec, kwargs: dict[str, Any]) -> FilterResult:
        self.token.reset()
        self.history.push_undo(self.current, self.active_filter)
        try:
            result = spec.fn(
                self.current,
                **kwargs,
                token=self.token,
                progress=self.progress,
                status=self.status,
                interval=self._interval(spec),
            )
        except TypeError as e:
            self.history.discard_last()
            raise InvalidParameter(f"invalid parameters for {spec.name}: {e}") from e
        except PhotoSmithError:
            self.history.discard_last()
            raise
        if result.ok:
            self.active_filter = spec.name
        else:
            self.history.discard_last()
            _logger.debug("%s did not complete (%s); history entry discarded", spec.name, result.status.value)
        return result

    def _run_immediate(self, spec: FilterSpec, kwargs: dict[str, Any]) -> FilterResult:
        before = self.current.copy()
        self.history.push_undo(before, self.active_filter)
        self.status.message(f"Applying {spec.name} filter...")
        try:
            with metrics.timed(f"filter.{spec.name}"):
                spec.fn(self.current, **kwargs)
        except Exception as e:
            self.current.assign(before)
            self.history.discard_last()
            metrics.inc("filters.failed")
            self.status.message(f"Filter failed: {e}")
            _logger.error("%s failed: %s", spec.name, e, exc_info=True)
            if isinstance(e, TypeError):
                raise InvalidParameter(f"invalid parameters for {spec.name}: {e}") from e
            raise
        metrics.inc("filters.completed")
        self.active_filter = spec.name
        result = FilterResult.completed(spec.name)
        self.status.message(result.message)
        return result

    def merge_with(self, other: PixelBuffer | str | Path, mode: str = "overlap") -> FilterResult:
        """Blend another image (a buffer or a path) into the current one."""
        return self.apply("merge", other=other, mode=mode)

    def crop(self, left: int, top: int, width: int, height: int) -> FilterResult:
        return self.apply("crop", left=left, top=top, width=width, height=height)

    def reset_to_original(self) -> bool:
        if not self.has_image:
            return False
        self.history.push_undo(self.current, self.active_filter)
        self.current.assign(self.original)
        self.active_filter = ""
        self.status.message("Image reset to original")
        return True

    # ---- history ----
    def undo(self) -> bool:
        if not self.history.undo(self.current, self.active_filter):
            self.status.message("Nothing to undo")
            return False
        self.active_filter = self.history.restored_label
        self.status.message("Undo")
        return True

    def redo(self) -> bool:
        if not self.history.redo(self.current, self.active_filter):
            self.status.message("Nothing to redo")
            return False
        self.active_filter = self.history.restored_label
        self.status.message("Redo")
        return True

    def cancel(self) -> None:
        """Ask the running cancelable filter to stop at its next unit boundary."""
        self.token.cancel()
