"""
Time zone catalog.

Thin read-only view over the IANA database that ``zoneinfo`` exposes
(system tzdata, or the ``tzdata`` package where the OS has none).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError, available_timezones

from tzlocal import get_localzone_name

from .errors import UnresolvableZoneIdentifier

logger = logging.getLogger(__name__)

CURRENT_LOCATION = "Current Location"
FALLBACK_ZONE = "UTC"


@dataclass(frozen=True)
class City:
    name: str
    zone_id: str | None  # None means the system zone


POPULAR_CITIES = [
    City(CURRENT_LOCATION, None),
    City("New York", "America/New_York"),
    City("London", "Europe/London"),
    City("Tokyo", "Asia/Tokyo"),
    City("Paris", "Europe/Paris"),
    City("Sydney", "Australia/Sydney"),
    City("Dubai", "Asia/Dubai"),
    City("Los Angeles", "America/Los_Angeles"),
    City("Singapore", "Asia/Singapore"),
    City("Hong Kong", "Asia/Hong_Kong"),
    City("Berlin", "Europe/Berlin"),
]


class TimeZoneCatalog:
    def __init__(self, local_zone_id: str | None = None) -> None:
        if local_zone_id is not None and self.resolve(local_zone_id) is None:
            logger.warning("Ignoring unknown system timezone %r", local_zone_id)
            local_zone_id = FALLBACK_ZONE
        self._local_zone_id = local_zone_id
        self._known: list[str] | None = None

    def resolve(self, identifier: str | None) -> ZoneInfo | None:
        if not identifier:
            return None
        try:
            return ZoneInfo(identifier)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            return None

    def require(self, identifier: str) -> ZoneInfo:
        tz = self.resolve(identifier)
        if tz is None:
            raise UnresolvableZoneIdentifier(identifier)
        return tz

    def all_known_identifiers(self) -> list[str]:
        if self._known is None:
            self._known = sorted(available_timezones())
        return list(self._known)

    def local_zone_id(self) -> str:
        if self._local_zone_id is None:
            self._local_zone_id = _detect_local_zone()
        return self._local_zone_id

    def normalize(self, identifier: str | None) -> str:
        """Return ``identifier`` if it resolves, else the system zone id."""
        try:
            self.require(identifier or "")
        except UnresolvableZoneIdentifier as exc:
            local = self.local_zone_id()
            logger.warning("%s; falling back to %s", exc, local)
            return local
        return identifier  # type: ignore[return-value]

    def zone(self, identifier: str | None) -> ZoneInfo:
        return self.require(self.normalize(identifier))

    def city_zone_id(self, city: City) -> str:
        if city.zone_id is None:
            return self.local_zone_id()
        return self.normalize(city.zone_id)


def _detect_local_zone() -> str:
    try:
        name = get_localzone_name()
    except Exception as exc:
        logger.warning("Could not determine system timezone: %s", exc)
        return FALLBACK_ZONE
    if not name:
        return FALLBACK_ZONE
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        logger.warning("System timezone %r is not in the catalog", name)
        return FALLBACK_ZONE
    return name
