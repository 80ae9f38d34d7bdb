"""Run filters off the UI thread.

``FilterWorker`` wraps one ``EditorSession.apply`` call in a ``QThread`` and
relays the session's progress and status through Qt signals. Cancellation
goes through the session's token, so the filter stops at its next row or
column and restores the image itself.
"""

from __future__ import annotations

from typing import Any

from PySide6.QtCore import QObject, QThread, Signal, Slot

from photo_smith.editor import EditorSession
from photo_smith.filters import FilterResult
from photo_smith.logger import get_logger

_logger = get_logger("filter_worker")


class _SignalProgressSink:
    def __init__(self, signal: Any):
        self._signal = signal

    def report(self, current: int, total: int) -> None:
        self._signal.emit(int(current), int(total))


class _SignalStatusSink:
    def __init__(self, signal: Any):
        self._signal = signal

    def message(self, text: str) -> None:
        self._signal.emit(str(text))


class FilterWorker(QThread):
    """Worker thread for a single filter application."""

    progress = Signal(int, int)  # current, total
    status = Signal(str)
    finished = Signal(object)  # FilterResult
    error = Signal(str)

    def __init__(self, session: EditorSession, key: str, params: dict[str, Any] | None = None):
        super().__init__()
        self.session = session
        self.key = key
        self.params = dict(params or {})

    def run(self) -> None:
        session = self.session
        prev_progress, prev_status = session.progress, session.status
        session.progress = _SignalProgressSink(self.progress)
        session.status = _SignalStatusSink(self.status)
        try:
            result = session.apply(self.key, **self.params)
        except Exception as e:
            _logger.error("filter %s failed: %s", self.key, e, exc_info=True)
            self.error.emit(str(e))
            self.finished.emit(FilterResult.from_error(self.key, e))
            return
        finally:
            session.progress, session.status = prev_progress, prev_status
        self.finished.emit(result)

    def cancel(self) -> None:
        self.session.cancel()


class FilterController(QObject):
    """Owns at most one running ``FilterWorker`` for a session.

    Starting a new filter while one runs cancels the old worker and waits for
    it, since both would write the same session image. Signals still queued
    from a replaced worker are dropped, so ``finished`` only ever reports the
    current worker.
    """

    progress = Signal(int, int)
    status = Signal(str)
    finished = Signal(object)
    error = Signal(str)

    def __init__(self, session: EditorSession):
        super().__init__()
        self.session = session
        self._worker: FilterWorker | None = None
        # Replaced workers, kept alive until their queued finished arrives.
        self._retired: list[FilterWorker] = []

    def is_running(self) -> bool:
        return self._worker is not None and self._worker.isRunning()

    def start(self, key: str, **params: Any) -> FilterWorker:
        """Start ``key`` in the background; a running filter is cancelled first."""
        old = self._worker
        if old is not None:
            if old.isRunning():
                old.cancel()
                old.wait()
            self._retired.append(old)
            self._worker = None

        worker = FilterWorker(self.session, key, params)

        # Connect signals
        worker.progress.connect(self._on_worker_progress)
        worker.status.connect(self._on_worker_status)
        worker.error.connect(self._on_worker_error)
        worker.finished.connect(self._on_worker_finished)

        self._worker = worker
        worker.start()
        return worker

    def cancel(self) -> None:
        """Cancel the current filter."""
        if self._worker is not None and self._worker.isRunning():
            self._worker.cancel()
            self._worker.wait(1000)  # Wait up to 1 second

    def _is_current(self) -> bool:
        sender = self.sender()
        return sender is not None and sender is self._worker

    @Slot(int, int)
    def _on_worker_progress(self, current: int, total: int) -> None:
        if self._is_current():
            self.progress.emit(current, total)

    @Slot(str)
    def _on_worker_status(self, text: str) -> None:
        if self._is_current():
            self.status.emit(text)

    @Slot(str)
    def _on_worker_error(self, text: str) -> None:
        if self._is_current():
            self.error.emit(text)

    @Slot(object)
    def _on_worker_finished(self, result: object) -> None:
        """Forward the current worker's result and clean up."""
        sender = self.sender()
        if sender is not None and sender is self._worker:
            self._worker = None
            self.finished.emit(result)
            return
        self._retired = [w for w in self._retired if w is not sender]
        _logger.debug("dropped result from a replaced filter worker: %s", result)
