"""
User settings for rendering, history and the commit bridge.

Settings come from ``settings.json`` in the user config directory, then
``INKREDACT_<FIELD>`` environment variables override individual values.
"""
import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .utils.resource_loader import get_config_dir

logger = logging.getLogger(__name__)

SETTINGS_FILE = "settings.json"
ENV_PREFIX = "INKREDACT_"


@dataclass
class Settings:
    render_scale: float = 1.5
    history_limit: int = 0  # 0 keeps the full history

    # Commit bridge
    whiteout_fill: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    apply_redactions: bool = False
    stamp_font: str = "hebo"  # PyMuPDF alias for Helvetica-Bold
    stamp_font_size: float = 12.0
    stamp_color: Tuple[float, float, float] = (0.7, 0.7, 0.7)

    # Drawing defaults
    stroke_color: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    stroke_width: float = 2.0
    stroke_opacity: float = 1.0

    # Drags smaller than this many screen pixels do not create a whiteout
    min_drag_size: float = 5.0

    def __post_init__(self):
        if not self.render_scale > 0:
            raise ValueError(f"render_scale must be positive, got {self.render_scale}")
        if self.history_limit < 0:
            raise ValueError(f"history_limit must be >= 0, got {self.history_limit}")
        for name in ("whiteout_fill", "stamp_color", "stroke_color"):
            color = tuple(float(c) for c in getattr(self, name))
            if len(color) != 3 or not all(0.0 <= c <= 1.0 for c in color):
                raise ValueError(f"{name} must be an RGB triple in [0, 1], got {color!r}")
            setattr(self, name, color)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """Build settings from a mapping, ignoring unknown keys and invalid values."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown setting(s): %s", ", ".join(unknown))

        values = {}
        for key, value in data.items():
            if key not in known:
                continue
            # Each field validates independently, so test them one at a time
            try:
                cls(**{key: value})
            except (TypeError, ValueError) as e:
                logger.warning("Ignoring invalid setting %s=%r: %s", key, value, e)
                continue
            values[key] = value
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _coerce(raw: str, default: Any) -> Any:
    if isinstance(default, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    if isinstance(default, tuple):
        return tuple(float(part) for part in raw.split(","))
    return raw


def _env_overrides(environ) -> Dict[str, Any]:
    defaults = Settings()
    overrides = {}
    for f in fields(Settings):
        raw = environ.get(ENV_PREFIX + f.name.upper())
        if raw is None:
            continue
        try:
            overrides[f.name] = _coerce(raw, getattr(defaults, f.name))
        except ValueError:
            logger.warning("Ignoring invalid %s%s=%r", ENV_PREFIX, f.name.upper(), raw)
    return overrides


def load_settings(path: Optional[Path] = None, environ=None) -> Settings:
    """
    Load settings from disk and the environment.

    Args:
        path: Settings file; defaults to settings.json in the config dir
        environ: Environment mapping; defaults to os.environ

    Returns:
        Settings with defaults filled in for anything not configured
    """
    if environ is None:
        environ = os.environ
    if path is None:
        path = get_config_dir() / SETTINGS_FILE

    data: Dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read settings from %s: %s", path, e)
            data = {}
        if not isinstance(data, dict):
            logger.warning("Settings file %s is not a JSON object", path)
            data = {}

    data.update(_env_overrides(environ))
    return Settings.from_dict(data)


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    if path is None:
        path = get_config_dir() / SETTINGS_FILE
    with open(path, "w", encoding="utf-8") as f:
        json.dump(settings.to_dict(), f, indent=2)
    return path
