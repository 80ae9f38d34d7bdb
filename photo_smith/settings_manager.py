from __future__ import annotations

import json
import os
from typing import Any

from .errors import InvalidParameter
from .filters.hsv import parse_color, to_hex
from .logger import get_logger

_logger = get_logger("settings")


class SettingsManager:
    def __init__(self, settings_path: str):
        self.settings_path = settings_path
        self._settings: dict[str, Any] = {}
        self.load()

    DEFAULTS: dict[str, Any] = {
        "history_capacity": 20,
        "progress_interval": 0,
        "blur_strength": 60,
        "skew_angle": 40,
        "oil_radius": 3,
        "oil_intensity": 30,
        "double_vision_offset": 15,
        "tint_intensity": 0.5,
        "frame_color": "#1e3a8a",
        "frame_width": 20,
        "tv_seed": None,
    }

    # filter key -> {parameter name: settings key}
    FILTER_PARAMS: dict[str, dict[str, str]] = {
        "blur": {"strength": "blur_strength"},
        "skew": {"angle_degrees": "skew_angle"},
        "oil_painting": {"radius": "oil_radius", "intensity": "oil_intensity"},
        "double_vision": {"offset": "double_vision_offset"},
        "tint": {"intensity": "tint_intensity"},
        "tv": {"seed": "tv_seed"},
    }

    def load(self) -> None:
        try:
            if os.path.exists(self.settings_path):
                with open(self.settings_path, encoding="utf-8") as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        self._settings = data
                        _logger.debug("settings loaded: %s", self.settings_path)
                        return
        except Exception as e:
            _logger.warning("settings load failed: %s", e)
        self._settings = {}

    def save(self) -> None:
        try:
            parent = os.path.dirname(self.settings_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, ensure_ascii=False, indent=2)
            _logger.debug("settings saved: %s", self.settings_path)
        except Exception as e:
            _logger.error("settings save failed: %s", e)

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._settings:
            return self._settings[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    def has(self, key: str) -> bool:
        return key in self._settings

    def set(self, key: str, value: Any) -> None:
        self._settings[key] = value
        self.save()

    @property
    def data(self) -> dict[str, Any]:
        return self._settings

    def _int(self, key: str, minimum: int) -> int:
        try:
            return max(minimum, int(self.get(key)))
        except (TypeError, ValueError):
            _logger.warning("saved %s invalid: %r", key, self._settings.get(key))
            return int(self.DEFAULTS[key])

    @property
    def history_capacity(self) -> int:
        return self._int("history_capacity", 1)

    @property
    def progress_interval(self) -> int:
        """0 means each filter uses its own reporting interval."""
        return self._int("progress_interval", 0)

    @property
    def tv_seed(self) -> int | None:
        val = self.get("tv_seed")
        return val if isinstance(val, int) and not isinstance(val, bool) else None

    def frame_color(self) -> tuple[int, int, int]:
        value = self.get("frame_color")
        try:
            return parse_color(value)
        except InvalidParameter as e:
            _logger.warning("saved frame_color invalid: %r (%s)", value, e)
        return parse_color(self.DEFAULTS["frame_color"])

    def set_frame_color(self, color: Any) -> None:
        """Store any colour ``parse_color`` accepts, normalised to ``#rrggbb``."""
        self.set("frame_color", to_hex(parse_color(color)))

    def filter_defaults(self, key: str) -> dict[str, Any]:
        """Configured keyword defaults for the filter ``key``."""
        params = {name: self.get(setting) for name, setting in self.FILTER_PARAMS.get(key, {}).items()}
        if key == "tv":
            params["seed"] = self.tv_seed
        if key == "custom_frame":
            params = {"width": self._int("frame_width", 1), "color": self.frame_color()}
        return params
