"""Cooperative cancellation and progress protocol for long-running filters.

A cancelable filter is expressed as a *unit function* that transforms one row
(or one column) of the image. ``run_cancelable`` owns everything around it:

- takes the pre-operation snapshot of the working buffer,
- polls the ``CancelToken`` before every unit and, when set, restores the
  snapshot byte-for-byte before returning ``FilterStatus.CANCELLED``,
- reports ``(current, total)`` to the progress sink every ``interval`` units
  (and always on the last one),
- emits status text to the status sink and returns an explicit
  ``FilterResult`` instead of raising.

Unit functions read from the snapshot (``src``) and write the matching unit
of the working array (``dst``), so neighbourhood filters never observe their
own partial output.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

import numpy as np

from photo_smith.errors import ErrorKind, InvalidParameter, error_kind
from photo_smith.image_engine.metrics import metrics
from photo_smith.image_engine.pixel_buffer import PixelBuffer
from photo_smith.logger import get_logger

_logger = get_logger("protocol")

DEFAULT_INTERVAL = 50

UnitFn = Callable[[np.ndarray, np.ndarray, int], None]


class FilterStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class FilterResult:
    """Terminal state of one filter call."""

    status: FilterStatus
    name: str = ""
    error: ErrorKind | None = None
    message: str = ""
    units_done: int = 0

    @property
    def ok(self) -> bool:
        return self.status is FilterStatus.COMPLETED

    @property
    def cancelled(self) -> bool:
        return self.status is FilterStatus.CANCELLED

    @property
    def failed(self) -> bool:
        return self.status is FilterStatus.FAILED

    @classmethod
    def completed(cls, name: str, units_done: int = 0) -> FilterResult:
        return cls(FilterStatus.COMPLETED, name, message=f"{name} filter applied", units_done=units_done)

    @classmethod
    def canceled(cls, name: str, units_done: int = 0) -> FilterResult:
        return cls(FilterStatus.CANCELLED, name, message=f"{name} filter cancelled", units_done=units_done)

    @classmethod
    def from_error(cls, name: str, exc: BaseException) -> FilterResult:
        return cls(FilterStatus.FAILED, name, error=error_kind(exc), message=f"Filter failed: {exc}")


class CancelToken:
    """Shared abort flag: one requester sets it, the worker polls it.

    Once set it stays set until ``reset()`` is called before the next run.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def reset(self) -> None:
        self._event.clear()

    def __bool__(self) -> bool:
        return self._event.is_set()


@runtime_checkable
class ProgressSink(Protocol):
    def report(self, current: int, total: int) -> None: ...


@runtime_checkable
class StatusSink(Protocol):
    def message(self, text: str) -> None: ...


class NullProgressSink:
    def report(self, current: int, total: int) -> None:
        return None


class NullStatusSink:
    def message(self, text: str) -> None:
        return None


class RecordingProgressSink:
    """Keeps every ``(current, total)`` pair it receives."""

    def __init__(self) -> None:
        self.reports: list[tuple[int, int]] = []

    def report(self, current: int, total: int) -> None:
        self.reports.append((current, total))

    @property
    def last(self) -> tuple[int, int] | None:
        return self.reports[-1] if self.reports else None


class LoggingStatusSink:
    """Status sink that forwards messages to the project logger."""

    def __init__(self, name: str = "status"):
        self._logger = get_logger(name)

    def message(self, text: str) -> None:
        self._logger.info("%s", text)


def run_cancelable(
    buffer: PixelBuffer,
    name: str,
    unit_fn: UnitFn,
    *,
    token: CancelToken | None = None,
    progress: ProgressSink | None = None,
    status: StatusSink | None = None,
    interval: int = DEFAULT_INTERVAL,
    axis: str = "rows",
) -> FilterResult:
    """Run ``unit_fn`` over every row (or column) of ``buffer`` under the protocol."""
    if axis not in ("rows", "columns"):
        raise InvalidParameter(f"unknown axis: {axis!r}")
    token = token if token is not None else CancelToken()
    progress = progress if progress is not None else NullProgressSink()
    status = status if status is not None else NullStatusSink()
    step = max(1, int(interval))

    snapshot = buffer.copy()
    src = snapshot.pixels
    dst = buffer.pixels
    total = buffer.height if axis == "rows" else buffer.width

    status.message(f"Applying {name} filter... (Click Cancel to stop)")
    progress.report(0, total)
    _logger.debug("run_cancelable: %s axis=%s total=%d interval=%d", name, axis, total, step)

    done = 0
    try:
        with metrics.timed(f"filter.{name}"):
            for index in range(total):
                if token.is_cancelled():
                    buffer.assign(snapshot)
                    result = FilterResult.canceled(name, done)
                    status.message(result.message)
                    metrics.inc("filters.cancelled")
                    _logger.debug("%s cancelled after %d/%d units", name, done, total)
                    return result
                unit_fn(src, dst, index)
                done = index + 1
                if done % step == 0 or done == total:
                    progress.report(done, total)
    except Exception as e:
        buffer.assign(snapshot)
        result = FilterResult.from_error(name, e)
        status.message(result.message)
        metrics.inc("filters.failed")
        _logger.error("%s failed at unit %d: %s", name, done, e, exc_info=True)
        return result

    result = FilterResult.completed(name, done)
    status.message(result.message)
    metrics.inc("filters.completed")
    return result
