"""Helpers for persisting the client's lightweight preferences."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

_ENV_PREFERENCES_PATH = "METADATAZERO_PREFERENCES_PATH"

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreservationOptions:
    """Which metadata survives a clean."""

    orientation: bool = False
    color_profile: bool = False
    modification_date: bool = False


@dataclass(frozen=True)
class Preferences:
    """Serializable preferences persisted between application launches."""

    auto_update: bool = True
    preservation: PreservationOptions = field(default_factory=PreservationOptions)


def default_preferences_path() -> Path:
    """Return the configured preferences path, falling back to the user home."""

    override = os.environ.get(_ENV_PREFERENCES_PATH)
    if override:
        return Path(override)
    return Path.home() / ".metadatazero" / "preferences.json"


def _coerce_flag(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def load_preferences(path: Path | None = None) -> Preferences:
    """Load persisted preferences, returning defaults when missing or invalid."""

    location = path or default_preferences_path()
    try:
        raw = location.read_text(encoding="utf-8")
    except OSError:
        return Preferences()

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        _LOGGER.warning("Ignoring unreadable preferences file %s", location)
        return Preferences()
    if not isinstance(data, dict):
        return Preferences()

    raw_preservation = data.get("preservation")
    if not isinstance(raw_preservation, dict):
        raw_preservation = {}
    defaults = PreservationOptions()
    preservation = PreservationOptions(
        orientation=_coerce_flag(raw_preservation.get("orientation"), defaults.orientation),
        color_profile=_coerce_flag(raw_preservation.get("color_profile"), defaults.color_profile),
        modification_date=_coerce_flag(
            raw_preservation.get("modification_date"), defaults.modification_date
        ),
    )
    return Preferences(
        auto_update=_coerce_flag(data.get("auto_update"), True),
        preservation=preservation,
    )


def save_preferences(preferences: Preferences, path: Path | None = None) -> None:
    """Persist preferences to disk, ignoring errors to keep the UI responsive."""

    location = path or default_preferences_path()
    data: Dict[str, Any] = {
        "auto_update": preferences.auto_update,
        "preservation": {
            "orientation": preferences.preservation.orientation,
            "color_profile": preferences.preservation.color_profile,
            "modification_date": preferences.preservation.modification_date,
        },
    }
    try:
        location.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(data, indent=2, sort_keys=True) + "\n"
        location.write_text(payload, encoding="utf-8")
    except OSError as exc:
        _LOGGER.warning("Failed to save preferences to %s: %s", location, exc)


__all__ = [
    "Preferences",
    "PreservationOptions",
    "default_preferences_path",
    "load_preferences",
    "save_preferences",
]
