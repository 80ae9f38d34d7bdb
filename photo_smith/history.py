"""Bounded undo/redo history of full-image snapshots."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from photo_smith.errors import InvalidParameter
from photo_smith.image_engine.pixel_buffer import PixelBuffer
from photo_smith.logger import get_logger

_logger = get_logger("history")

DEFAULT_CAPACITY = 20


@dataclass(frozen=True)
class HistoryEntry:
    """A deep snapshot and the label of the operation that produced it."""

    buffer: PixelBuffer
    label: str = ""


class HistoryManager:
    """Two bounded stacks of snapshots.

    ``push_undo`` records the state before an edit and clears redo. Past
    ``capacity`` the oldest entry is evicted. ``undo``/``redo`` move the
    caller's current image onto the opposite stack and overwrite it in place.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        cap = int(capacity)
        if cap < 1:
            raise InvalidParameter(f"history capacity must be at least 1, got {capacity!r}")
        self._capacity = cap
        self._undo: deque[HistoryEntry] = deque(maxlen=cap)
        self._redo: deque[HistoryEntry] = deque(maxlen=cap)
        self._restored_label = ""

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._undo)

    def can_undo(self) -> bool:
        return bool(self._undo)

    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_labels(self) -> list[str]:
        """Labels from oldest to newest."""
        return [e.label for e in self._undo]

    @property
    def redo_labels(self) -> list[str]:
        return [e.label for e in self._redo]

    @property
    def restored_label(self) -> str:
        """Label of the entry restored by the last successful ``undo``/``redo``."""
        return self._restored_label

    def push_undo(self, buffer: PixelBuffer, label: str = "") -> None:
        if len(self._undo) == self._capacity:
            _logger.debug("history full (%d); evicting oldest entry", self._capacity)
        self._undo.append(HistoryEntry(buffer.copy(), label))
        self._redo.clear()

    def discard_last(self) -> bool:
        """Drop the newest undo entry; redo is left alone."""
        if not self._undo:
            return False
        self._undo.pop()
        return True

    def undo(self, out: PixelBuffer, label: str = "") -> bool:
        """Restore the newest snapshot into ``out``; ``label`` names the state being left."""
        if not self._undo:
            return False
        entry = self._undo.pop()
        self._redo.append(HistoryEntry(out.copy(), label))
        out.assign(entry.buffer)
        self._restored_label = entry.label
        return True

    def redo(self, out: PixelBuffer, label: str = "") -> bool:
        if not self._redo:
            return False
        entry = self._redo.pop()
        self._undo.append(HistoryEntry(out.copy(), label))
        out.assign(entry.buffer)
        self._restored_label = entry.label
        return True

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()
        self._restored_label = ""
