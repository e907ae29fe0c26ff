"""Configuration persistence for Jukebox."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from jukebox.history import HISTORY_SIZE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppConfig:
    """Immutable user configuration loaded from disk."""

    library_dir: Optional[str] = None
    poll_interval_ms: int = 200
    history_size: int = HISTORY_SIZE
    last_playlist: Optional[str] = None


def get_config_dir(app_name: str = "jukebox") -> Path:
    """Return the per-user config directory for the current platform."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            root = Path(base)
        else:
            root = Path.home() / "AppData" / "Roaming"
        return _ensure_dir(root / app_name)
    elif os.name == "posix":
        if _is_macos():
            return _ensure_dir(
                Path.home() / "Library" / "Application Support" / app_name
            )
        base = os.environ.get("XDG_CONFIG_HOME")
        root = Path(base) if base else Path.home() / ".config"
        return _ensure_dir(root / app_name)
    else:
        return _ensure_dir(Path.home() / ".config" / app_name)


def load_config() -> AppConfig:
    """Load configuration from disk, falling back to defaults on error."""
    path = get_config_path()
    if not path.exists():
        return AppConfig()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        logger.exception("Failed to load config from %s", path)
        return AppConfig()
    if not isinstance(raw, dict):
        return AppConfig()
    return _config_from_mapping(raw)


def save_config(cfg: AppConfig) -> None:
    """Persist configuration to disk atomically."""
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(".tmp")
    data = {
        "library_dir": cfg.library_dir,
        "poll_interval_ms": cfg.poll_interval_ms,
        "history_size": cfg.history_size,
        "last_playlist": cfg.last_playlist,
    }
    temp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    os.replace(temp_path, path)


def get_config_path() -> Path:
    """Return the full config file path."""
    return get_config_dir() / "config.json"


def resolve_library_dir(cfg: AppConfig) -> Path:
    """Directory holding the master index and playlist files."""
    if cfg.library_dir:
        return Path(cfg.library_dir).expanduser()
    return get_config_dir() / "library"


def _ensure_dir(path: Path) -> Path:
    """Create the directory if needed and return the path."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def _is_macos() -> bool:
    """Return True when running on macOS."""
    return os.uname().sysname == "Darwin" if hasattr(os, "uname") else False  # pyright: ignore[reportAttributeAccessIssue]


def _get_int(
    raw: dict[str, Any],
    key: str,
    default: int,
    *,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    """Fetch an integer value with optional clamping."""
    value = raw.get(key, default)
    if not isinstance(value, int) or isinstance(value, bool):
        value = default
    if min_value is not None:
        value = max(min_value, value)
    if max_value is not None:
        value = min(max_value, value)
    return value


def _get_optional_str(raw: dict[str, Any], key: str) -> Optional[str]:
    """Fetch a non-empty string value or None."""
    value = raw.get(key)
    if not isinstance(value, str) or not value:
        return None
    return value


def _config_from_mapping(raw: dict[str, Any]) -> AppConfig:
    """Normalize raw JSON data into an AppConfig."""
    return AppConfig(
        library_dir=_get_optional_str(raw, "library_dir"),
        poll_interval_ms=_get_int(
            raw, "poll_interval_ms", 200, min_value=50, max_value=2000
        ),
        history_size=_get_int(
            raw, "history_size", HISTORY_SIZE, min_value=1, max_value=200
        ),
        last_playlist=_get_optional_str(raw, "last_playlist"),
    )
