"""Pytest configuration.

The worker tests drive ``QThread`` signals and the colour helpers use
``QColor``, so a single ``QApplication`` is created for the whole session as
early as possible and shut down cleanly at the end.
"""

from __future__ import annotations

from typing import Any

import numpy as np
import pytest

from photo_smith.image_engine.pixel_buffer import PixelBuffer

_APP: Any | None = None


def pytest_configure(config) -> None:  # noqa: ARG001
    """Ensure a QApplication exists before collecting/running tests."""

    # Import lazily so non-Qt environments can still import this conftest.
    try:
        from PySide6.QtWidgets import QApplication
    except ImportError:
        return

    global _APP

    app = QApplication.instance()
    # Keep a strong ref so it isn't GC'd mid-session.
    _APP = QApplication([]) if app is None else app


def pytest_sessionfinish(session, exitstatus) -> None:  # noqa: ARG001
    try:
        from PySide6.QtWidgets import QApplication
    except ImportError:
        return

    app = QApplication.instance()
    if app is None:
        return
    app.quit()
    app.processEvents()


class RecordingStatus:
    def __init__(self) -> None:
        self.messages: list[str] = []

    def message(self, text: str) -> None:
        self.messages.append(text)


@pytest.fixture
def status_sink() -> RecordingStatus:
    return RecordingStatus()


@pytest.fixture
def noise_image():
    """Factory for reproducible random RGB buffers."""

    def _make(width: int = 17, height: int = 13, seed: int = 1234) -> PixelBuffer:
        rng = np.random.default_rng(seed)
        return PixelBuffer.from_array(rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8))

    return _make
