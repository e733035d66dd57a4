"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/Tickdown/settings.json

The ``TICKDOWN_HOME`` environment variable relocates the whole data
directory (settings, database and cached sounds).

Usage::

    settings = load_settings()
    settings.persist_policy = "minute_boundary"
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path

logger = logging.getLogger(__name__)


def data_dir() -> Path:
    """Directory holding every file Tickdown writes."""
    override = os.environ.get("TICKDOWN_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / "Library" / "Application Support" / "Tickdown"


def settings_path() -> Path:
    return data_dir() / "settings.json"


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── countdown ─────────────────────────────────────────────────────
    tick_interval_ms: int = 1000
    persist_policy: str = "every_tick"     # every_tick | minute_boundary

    # ── notifications ─────────────────────────────────────────────────
    notifications_enabled: bool = True
    minute_notifications: bool = True

    # ── alarm ─────────────────────────────────────────────────────────
    alarm_enabled: bool = True
    alarm_volume: int = 80                 # 0-100

    # ── diagnostics ───────────────────────────────────────────────────
    log_level: str = "INFO"


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from disk, falling back to defaults."""
    path = path or settings_path()
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return Settings(**filtered)
    except (OSError, ValueError, TypeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
    return Settings()


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Write settings to disk as JSON."""
    path = path or settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
