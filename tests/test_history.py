from __future__ import annotations

import pytest

from photo_smith.errors import InvalidParameter
from photo_smith.history import DEFAULT_CAPACITY, HistoryManager
from photo_smith.image_engine.pixel_buffer import PixelBuffer


def _state(v: int) -> PixelBuffer:
    return PixelBuffer.filled(2, 2, (v, v, v))


def test_defaults() -> None:
    h = HistoryManager()
    assert h.capacity == DEFAULT_CAPACITY == 20
    assert not h.can_undo() and not h.can_redo()
    assert len(h) == 0


def test_undo_redo_round_trip() -> None:
    h = HistoryManager()
    current = _state(1)
    h.push_undo(current, "start")
    current.assign(_state(2))

    assert h.undo(current, "Invert")
    assert current == _state(1)
    assert h.restored_label == "start"
    assert h.can_redo()

    assert h.redo(current, "start")
    assert current == _state(2)
    assert h.restored_label == "Invert"
    assert h.can_undo() and not h.can_redo()


def test_snapshot_is_independent_of_caller_buffer() -> None:
    h = HistoryManager()
    current = _state(5)
    h.push_undo(current)
    current.set(0, 0, 0, 99)
    h.undo(current)
    assert current == _state(5)


def test_undo_restores_dimensions() -> None:
    h = HistoryManager()
    current = _state(1)
    h.push_undo(current)
    current.assign(PixelBuffer(7, 3))
    h.undo(current)
    assert current.size == (2, 2)


def test_empty_stacks_return_false_and_leave_buffer() -> None:
    h = HistoryManager()
    current = _state(3)
    assert h.undo(current) is False
    assert h.redo(current) is False
    assert current == _state(3)


def test_capacity_evicts_oldest() -> None:
    h = HistoryManager(capacity=3)
    current = _state(0)
    for v in range(1, 6):
        h.push_undo(current, f"s{v - 1}")
        current.assign(_state(v))

    assert len(h) == 3
    assert h.undo_labels == ["s2", "s3", "s4"]
    restored = []
    while h.undo(current):
        restored.append(current.get(0, 0, 0))
    assert restored == [4, 3, 2]


def test_redo_is_bounded_too() -> None:
    h = HistoryManager(capacity=2)
    current = _state(0)
    for v in range(1, 3):
        h.push_undo(current)
        current.assign(_state(v))
    while h.undo(current):
        pass
    assert len(h.redo_labels) == 2


def test_push_clears_redo() -> None:
    h = HistoryManager()
    current = _state(1)
    h.push_undo(current)
    current.assign(_state(2))
    h.undo(current)
    assert h.can_redo()
    h.push_undo(current)
    assert not h.can_redo()


def test_discard_last_keeps_redo() -> None:
    h = HistoryManager()
    current = _state(1)
    h.push_undo(current)
    h.push_undo(current)
    h.undo(current)
    assert h.discard_last() is True
    assert not h.can_undo()
    assert h.can_redo()
    assert h.discard_last() is False


def test_clear() -> None:
    h = HistoryManager()
    current = _state(1)
    h.push_undo(current)
    h.push_undo(current)
    h.undo(current)
    h.clear()
    assert not h.can_undo() and not h.can_redo()


@pytest.mark.parametrize("capacity", [0, -3])
def test_invalid_capacity(capacity) -> None:
    with pytest.raises(InvalidParameter):
        HistoryManager(capacity)
