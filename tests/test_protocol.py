from __future__ import annotations

import numpy as np
import pytest

from photo_smith.errors import ErrorKind, InvalidParameter
from photo_smith.filters import CANCELABLE, filter_keys, get_filter
from photo_smith.filters.color import grayscale, infrared
from photo_smith.filters.protocol import (
    CancelToken,
    FilterStatus,
    RecordingProgressSink,
    run_cancelable,
)
from photo_smith.image_engine.metrics import metrics
from photo_smith.image_engine.pixel_buffer import PixelBuffer


def test_grayscale_averages_channels(status_sink) -> None:
    buf = PixelBuffer.filled(4, 4, (100, 150, 200))
    sink = RecordingProgressSink()

    result = grayscale(buf, progress=sink, status=status_sink)

    assert result.status is FilterStatus.COMPLETED
    assert result.ok and result.units_done == 4
    assert (buf.pixels == 150).all()
    assert sink.last == (4, 4)
    assert status_sink.messages[0] == "Applying Grayscale filter... (Click Cancel to stop)"
    assert status_sink.messages[-1] == "Grayscale filter applied"


def test_progress_cadence_is_bounded() -> None:
    buf = PixelBuffer(2, 120)
    sink = RecordingProgressSink()

    grayscale(buf, progress=sink, interval=50)

    assert sink.reports == [(0, 120), (50, 120), (100, 120), (120, 120)]


def test_progress_is_monotonic_with_fixed_total(noise_image) -> None:
    buf = noise_image(5, 37)
    sink = RecordingProgressSink()
    grayscale(buf, progress=sink, interval=7)

    currents = [c for c, _ in sink.reports]
    assert currents == sorted(currents)
    assert {t for _, t in sink.reports} == {37}
    assert sink.last == (37, 37)


def test_preset_token_cancels_before_first_row(noise_image, status_sink) -> None:
    buf = noise_image()
    before = buf.copy()
    token = CancelToken()
    token.cancel()

    result = grayscale(buf, token=token, status=status_sink)

    assert result.cancelled
    assert result.units_done == 0
    assert buf == before
    assert status_sink.messages[-1] == "Grayscale filter cancelled"


def test_cancel_at_any_row_restores_exactly(noise_image) -> None:
    original = noise_image(6, 9)
    for stop_after in range(original.height):
        buf = original.copy()
        token = CancelToken()

        def _unit(src, dst, y, token=token, stop_after=stop_after):
            dst[y] = 255 - src[y]
            if y == stop_after:
                token.cancel()

        result = run_cancelable(buf, "Test", _unit, token=token)

        if stop_after == original.height - 1:
            # The last row already ran; nothing is left to poll.
            assert result.ok
        else:
            assert result.cancelled
            assert result.units_done == stop_after + 1
            assert buf == original


def test_units_read_the_snapshot(noise_image) -> None:
    buf = noise_image(4, 6)
    expected = np.roll(buf.pixels, 1, axis=0)

    def _shift_down(src, dst, y):
        dst[y] = src[y - 1]

    run_cancelable(buf, "Shift", _shift_down)
    assert np.array_equal(buf.pixels, expected)


def test_failure_restores_and_reports_kind(noise_image, status_sink) -> None:
    buf = noise_image()
    before = buf.copy()

    def _unit(src, dst, y):
        dst[y] = 0
        if y == 2:
            raise InvalidParameter("bad row")

    result = run_cancelable(buf, "Broken", _unit, status=status_sink)

    assert result.status is FilterStatus.FAILED
    assert result.error is ErrorKind.INVALID_PARAMETER
    assert buf == before
    assert status_sink.messages[-1] == "Filter failed: bad row"


def test_unexpected_exception_is_internal(noise_image) -> None:
    buf = noise_image()

    def _unit(src, dst, y):
        raise RuntimeError("boom")

    result = run_cancelable(buf, "Broken", _unit)
    assert result.failed
    assert result.error is ErrorKind.INTERNAL


def test_column_axis_counts_width() -> None:
    buf = PixelBuffer.filled(7, 3, (30, 60, 90))
    sink = RecordingProgressSink()

    infrared(buf, progress=sink, interval=50)

    assert sink.reports == [(0, 7), (7, 7)]
    assert buf.pixels[0, 0].tolist() == [255, 195, 195]


def test_unknown_axis_rejected() -> None:
    with pytest.raises(InvalidParameter):
        run_cancelable(PixelBuffer(1, 1), "X", lambda s, d, i: None, axis="diagonal")


def test_empty_buffer_completes_immediately() -> None:
    sink = RecordingProgressSink()
    result = grayscale(PixelBuffer(), progress=sink)
    assert result.ok
    assert sink.reports == [(0, 0)]


def test_token_reset() -> None:
    token = CancelToken()
    assert not token
    token.cancel()
    assert token.is_cancelled() and bool(token)
    token.reset()
    assert not token.is_cancelled()


def test_metrics_count_outcomes(noise_image) -> None:
    metrics.reset()
    grayscale(noise_image())
    token = CancelToken()
    token.cancel()
    grayscale(noise_image(), token=token)

    snap = metrics.snapshot()
    assert snap["counters"]["filters.completed"] == 1
    assert snap["counters"]["filters.cancelled"] == 1
    assert "filter.Grayscale" in snap["timings"]


class _CancelAfter:
    """Sets the token once ``units`` rows/columns are done and notes whether they changed the image."""

    def __init__(self, token: CancelToken, buf: PixelBuffer, before: PixelBuffer, units: int):
        self.token = token
        self.buf = buf
        self.before = before
        self.units = units
        self.saw_partial_write = False

    def report(self, current: int, total: int) -> None:
        if current >= self.units and not self.token.is_cancelled():
            self.saw_partial_write = self.buf != self.before
            self.token.cancel()


_CATALOG_PARAMS = {"tint": {"color": (255, 120, 0)}, "tv": {"seed": 7}}


@pytest.mark.parametrize("key", filter_keys(CANCELABLE))
@pytest.mark.parametrize("units", [2, 5])
def test_cancel_mid_run_restores_every_catalog_filter(key, units, noise_image) -> None:
    spec = get_filter(key)
    buf = noise_image(12, 10)
    before = buf.copy()
    token = CancelToken()
    sink = _CancelAfter(token, buf, before, units)

    result = spec.fn(buf, **_CATALOG_PARAMS.get(key, {}), token=token, progress=sink, interval=1)

    assert result.cancelled
    assert result.units_done == units
    assert sink.saw_partial_write
    assert buf == before
