"""
User settings: default palette, animation and iteration cap, last view.

Settings live in a JSON object on disk. Missing or unreadable files give
the defaults; bad individual values are replaced or clamped so a stale file
never stops the viewer from starting.
"""

import json
import math
import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional

from .colormaps import DEFAULT_PALETTE, get_palette
from .compute import MAX_FIELD_VALUE
from .engine import FieldEngine, ViewState
from .util.logging_setup import get_logger

logger = get_logger("config")

DEFAULT_DIR = os.path.join(os.path.expanduser("~"), ".fractald")
DEFAULT_SETTINGS_PATH = os.path.join(DEFAULT_DIR, "settings.json")
DEFAULT_BOOKMARKS_PATH = os.path.join(DEFAULT_DIR, "bookmarks.json")

ITERATION_OPTIONS = (128, 256, 512, 1024, 2048, 4096, 8192, 16384, 32768, 65536, 100000)
MIN_ANIMATION_SPEED = 0.1
MAX_ANIMATION_SPEED = 2.0


@dataclass
class Settings:
    palette: str = DEFAULT_PALETTE.value
    animated: bool = True
    animation_speed: float = 0.5
    max_iterations: int = FieldEngine.DEFAULT_MAX_ITER
    last_center_x: float = FieldEngine.DEFAULT_CENTER_X
    last_center_y: float = FieldEngine.DEFAULT_CENTER_Y
    last_zoom: float = FieldEngine.DEFAULT_ZOOM
    restore_last_view: bool = True

    def last_view(self) -> ViewState:
        return ViewState(self.last_center_x, self.last_center_y, self.last_zoom,
                         self.max_iterations, self.palette)

    def remember_view(self, state: ViewState) -> None:
        self.last_center_x = state.center_x
        self.last_center_y = state.center_y
        self.last_zoom = state.zoom


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return default


def _as_float(value: Any, default: float) -> float:
    try:
        out = float(value)
    except (TypeError, ValueError):
        return default
    return out if math.isfinite(out) else default


def normalise_settings(raw: Dict[str, Any]) -> Settings:
    if not isinstance(raw, dict):
        raise ValueError("Settings JSON must be an object.")
    defaults = Settings()
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(raw) - known)
    if unknown:
        logger.warning("Ignoring unknown settings keys: %s", ", ".join(unknown))

    speed = _as_float(raw.get("animation_speed"), defaults.animation_speed)
    speed = min(max(speed, MIN_ANIMATION_SPEED), MAX_ANIMATION_SPEED)

    try:
        max_iterations = int(raw.get("max_iterations", defaults.max_iterations))
    except (TypeError, OverflowError, ValueError):
        max_iterations = defaults.max_iterations
    if not 0 < max_iterations <= MAX_FIELD_VALUE:
        max_iterations = defaults.max_iterations

    zoom = _as_float(raw.get("last_zoom"), defaults.last_zoom)
    if zoom <= 0:
        zoom = defaults.last_zoom

    return Settings(
        palette=get_palette(raw.get("palette", defaults.palette)).value,
        animated=_as_bool(raw.get("animated"), defaults.animated),
        animation_speed=speed,
        max_iterations=max_iterations,
        last_center_x=_as_float(raw.get("last_center_x"), defaults.last_center_x),
        last_center_y=_as_float(raw.get("last_center_y"), defaults.last_center_y),
        last_zoom=zoom,
        restore_last_view=_as_bool(raw.get("restore_last_view"), defaults.restore_last_view),
    )


def load_settings(path: Optional[str] = None) -> Settings:
    path = path or DEFAULT_SETTINGS_PATH
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        logger.info("No settings at %s, using defaults", path)
        return Settings()
    except (OSError, ValueError) as e:
        logger.warning("Could not read settings %s: %s; using defaults", path, e)
        return Settings()
    try:
        return normalise_settings(raw)
    except ValueError as e:
        logger.warning("Invalid settings %s: %s; using defaults", path, e)
        return Settings()


def save_settings(settings: Settings, path: Optional[str] = None) -> None:
    path = path or DEFAULT_SETTINGS_PATH
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    tmp = path + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(asdict(settings), f, indent=2, sort_keys=True)
    os.replace(tmp, path)
    logger.info("Settings written: %s", path)
