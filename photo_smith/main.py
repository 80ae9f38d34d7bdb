"""Headless command line entry point.

    photo-smith INPUT OUTPUT -f grayscale -f blur:strength=30 -f "frame:frame_type=Shadow Frame"

Filters run in order on one editing session. Ctrl+C cancels the running
cancelable filter and stops the chain without writing the output, also when
the interrupt arrives outside a filter's row loop.
"""

from __future__ import annotations

import argparse
import os
import re
import signal
import sys
import threading
from typing import Any

from photo_smith.errors import InvalidParameter, PhotoSmithError
from photo_smith.filters import FILTERS, filter_keys
from photo_smith.filters.frames import frame_names, solid_frame_color
from photo_smith.filters.hsv import rgb_to_hsv, to_hex
from photo_smith.image_engine.metrics import metrics
from photo_smith.logger import get_logger

logger = get_logger("main")

# Commas inside parentheses belong to the value, e.g. color=hsv(200,80,60).
_PARAM_SEP = re.compile(r",(?![^()]*\))")


def _apply_cli_logging_options(argv: list[str]) -> list[str]:
    """Export --log-level/--log-cats into the env and return the remaining args."""
    parser = argparse.ArgumentParser(description="Photo Smith", add_help=False)
    parser.add_argument("--log-level", help="Set log level")
    parser.add_argument("--log-cats", help="Set log categories")
    args, remaining = parser.parse_known_args(argv)
    if args.log_level:
        os.environ["PHOTO_SMITH_LOG_LEVEL"] = args.log_level
    if args.log_cats:
        os.environ["PHOTO_SMITH_LOG_CATS"] = args.log_cats
    # Re-read the env so the options take effect for loggers created at import.
    get_logger()
    return remaining


def _coerce(value: str) -> Any:
    text = value.strip()
    if text.lower() in ("none", "null"):
        return None
    for cast in (int, float):
        try:
            return cast(text)
        except ValueError:
            continue
    return text


def parse_filter_arg(arg: str) -> tuple[str, dict[str, Any]]:
    """``"blur:strength=30"`` -> ``("blur", {"strength": 30})``."""
    key, _, rest = arg.partition(":")
    key = key.strip()
    if key not in FILTERS:
        raise InvalidParameter(f"unknown filter: {key!r}")
    params: dict[str, Any] = {}
    if rest.strip():
        for item in _PARAM_SEP.split(rest):
            name, sep, value = item.partition("=")
            if not sep or not name.strip():
                raise InvalidParameter(f"malformed filter parameter {item!r} in {arg!r}")
            params[name.strip()] = _coerce(value)
    return key, params


class _StderrProgress:
    def __init__(self) -> None:
        self.label = ""

    def report(self, current: int, total: int) -> None:
        pct = (current * 100 // total) if total else 100
        sys.stderr.write(f"\r{self.label} {current}/{total} ({pct}%)")
        if current >= total:
            sys.stderr.write("\n")
        sys.stderr.flush()


def _print_frames() -> None:
    print()
    print("frame types (frame:frame_type=...):")
    for name in frame_names():
        rgb = solid_frame_color(name)
        if rgb is None:
            print(f"  {name}")
        else:
            h, s, v = rgb_to_hsv(*rgb)
            print(f"  {name:24} {to_hex(rgb)}  hsv({h},{s},{v})")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="photo-smith", description="Apply image filters from the command line")
    parser.add_argument("input", nargs="?", help="Source image")
    parser.add_argument("output", nargs="?", help="Destination image (format from suffix)")
    parser.add_argument(
        "-f",
        "--filter",
        action="append",
        default=[],
        metavar="KEY[:k=v,...]",
        help="Filter to apply; repeat for a chain",
    )
    parser.add_argument("--settings", help="Path to a JSON settings file")
    parser.add_argument("--quality", type=int, default=95, help="JPEG/WebP quality")
    parser.add_argument("--list", action="store_true", help="List filter keys and exit")
    parser.add_argument("--quiet", action="store_true", help="Do not print progress")
    return parser


def run(argv: list[str] | None = None) -> int:
    """Application entrypoint (packaging-friendly)."""
    if argv is None:
        argv = sys.argv[1:]
    remaining = _apply_cli_logging_options(list(argv))
    args = build_parser().parse_args(remaining)

    if args.list:
        for key in filter_keys():
            spec = FILTERS[key]
            print(f"{key:16} {spec.mode:10} {spec.name}")
        _print_frames()
        return 0
    if not args.input or not args.output:
        build_parser().print_usage(sys.stderr)
        return 2

    from photo_smith.editor import EditorSession
    from photo_smith.settings_manager import SettingsManager

    try:
        chain = [parse_filter_arg(a) for a in args.filter]
    except InvalidParameter as e:
        logger.error("%s", e)
        return 2

    settings = SettingsManager(args.settings) if args.settings else None
    progress = None if args.quiet else _StderrProgress()
    session = EditorSession(settings, progress=progress)

    # The session token is reset by every cancelable filter, so an interrupt
    # that lands outside a row loop is remembered here as well.
    interrupted = threading.Event()

    def _on_sigint(*_: Any) -> None:
        interrupted.set()
        session.cancel()

    previous = signal.signal(signal.SIGINT, _on_sigint)
    try:
        session.load(args.input)
        for key, params in chain:
            if interrupted.is_set():
                logger.warning("Interrupted; stopping before %s", FILTERS[key].name)
                return 130
            if progress is not None:
                progress.label = FILTERS[key].name
            result = session.apply(key, **params)
            if result.cancelled or interrupted.is_set():
                logger.warning("%s interrupted; %s not written", FILTERS[key].name, args.output)
                return 130
            if result.failed:
                logger.error("%s", result.message)
                return 1
        if interrupted.is_set():
            logger.warning("Interrupted; %s not written", args.output)
            return 130
        session.save(args.output, quality=args.quality)
        logger.debug("filter runs: %s", metrics.outcomes())
    except PhotoSmithError as e:
        logger.error("%s", e)
        return 1
    finally:
        signal.signal(signal.SIGINT, previous)
    return 0


if __name__ == "__main__":
    sys.exit(run())
