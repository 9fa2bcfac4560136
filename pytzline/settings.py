from __future__ import annotations

import logging
from dataclasses import dataclass, fields

from .storage import KeyValueStore

logger = logging.getLogger(__name__)

SETTING_KEYS = {
    "is_24_hour_format": "is24HourFormat",
    "show_time_zone_names": "showTimeZoneNames",
    "dark_mode": "isDarkMode",
}


@dataclass
class Settings:
    is_24_hour_format: bool = False
    show_time_zone_names: bool = False
    dark_mode: bool = False


def _parse_bool(text: str | None) -> bool | None:
    if text is None:
        return None
    low = text.strip().lower()
    if low in ("1", "true", "yes", "on"):
        return True
    if low in ("0", "false", "no", "off", ""):
        return False
    return None


def load_settings(store: KeyValueStore) -> Settings:
    settings = Settings()
    for f in fields(Settings):
        key = SETTING_KEYS[f.name]
        raw = store.get(key)
        value = _parse_bool(raw)
        if value is None:
            if raw is not None:
                logger.warning("Ignoring bad value %r for %s", raw, key)
            continue
        setattr(settings, f.name, value)
    return settings


def save_settings(store: KeyValueStore, settings: Settings) -> None:
    for f in fields(Settings):
        store.set(SETTING_KEYS[f.name], "true" if getattr(settings, f.name) else "false")
