"""In-memory cache for app settings."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

from utils.log_utils import tprint

SETTINGS_PATH = Path("config/app_settings.json")

_lock = threading.Lock()
_settings_cache: dict[str, Any] = {}
_loaded = False


def _read_settings_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text())
    except (OSError, ValueError) as exc:
        tprint(f"[SETTINGS][WARN] Ignoring unreadable settings file {path}: {exc}")
        return {}
    return data if isinstance(data, dict) else {}


def refresh_settings(path: str | Path | None = None) -> dict[str, Any]:
    """Reload settings from disk and replace the cache."""
    global _loaded
    data = _read_settings_file(Path(path) if path else SETTINGS_PATH)
    with _lock:
        _loaded = True
        _settings_cache.clear()
        _settings_cache.update(data)
        return dict(_settings_cache)


def get_settings() -> dict[str, Any]:
    """Return a copy of the cached settings."""
    with _lock:
        if _loaded:
            return dict(_settings_cache)
    return refresh_settings()


def is_deep_logging() -> bool:
    """Return True when log_level requests deep tracing."""
    level = str(get_settings().get("log_level", "")).upper()
    return level in {"DEEP"}


def deep_log(message: str) -> None:
    """Emit a trace line only when deep logging is enabled."""
    if is_deep_logging():
        tprint(message)
