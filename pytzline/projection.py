"""
Shared instant <-> per-zone wall clock.

An absolute instant is projected into each zone with that zone's offset
at the instant, so DST transitions are honoured per zone. A wall-clock
edit made in one zone is solved back into a single UTC instant that the
caller then re-projects everywhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .catalog import TimeZoneCatalog
from .settings import Settings

DAY_START_HOUR = 6
NIGHT_START_HOUR = 18


@dataclass(frozen=True)
class Projection:
    hour: int
    minute: int
    is_daytime: bool
    abbreviation: str
    local: datetime


def as_aware(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant


def is_daytime_hour(hour: int) -> bool:
    return DAY_START_HOUR <= hour < NIGHT_START_HOUR


def format_offset(offset: timedelta | None, with_colon: bool = True) -> str:
    if offset is None:
        return "+00:00" if with_colon else "+0000"
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    total = abs(total)
    hours, rem = divmod(total, 3600)
    minutes = rem // 60
    if with_colon:
        return f"{sign}{hours:02d}:{minutes:02d}"
    return f"{sign}{hours:02d}{minutes:02d}"


def format_clock(hour: int, minute: int, is_24_hour: bool) -> str:
    if is_24_hour:
        return f"{hour:02d}:{minute:02d}"
    suffix = "AM" if hour < 12 else "PM"
    h12 = hour % 12 or 12
    return f"{h12}:{minute:02d} {suffix}"


def format_projection(projection: Projection, settings: Settings) -> str:
    text = format_clock(projection.hour, projection.minute, settings.is_24_hour_format)
    if settings.show_time_zone_names:
        return f"{text} {projection.abbreviation}"
    return text


class TimeProjector:
    def __init__(self, catalog: TimeZoneCatalog) -> None:
        self.catalog = catalog

    def project(self, instant: datetime, zone_id: str) -> Projection:
        local = as_aware(instant).astimezone(self.catalog.zone(zone_id))
        return Projection(
            hour=local.hour,
            minute=local.minute,
            is_daytime=is_daytime_hour(local.hour),
            abbreviation=local.tzname() or "UTC",
            local=local,
        )

    def apply_wall_clock_edit(
        self,
        current_instant: datetime,
        zone_id: str,
        new_hour: int,
        new_minute: int,
    ) -> datetime:
        """Instant whose wall clock in ``zone_id`` reads ``new_hour:new_minute``.

        The local date of ``current_instant`` in that zone is kept. Ambiguous
        wall clocks resolve to their first occurrence; wall clocks skipped by
        a DST gap come back as whatever zoneinfo constructs for them.
        """
        if not (0 <= new_hour <= 23 and 0 <= new_minute <= 59):
            raise ValueError(f"Invalid HH:MM: {new_hour:02d}:{new_minute:02d}")
        local = as_aware(current_instant).astimezone(self.catalog.zone(zone_id))
        edited = local.replace(hour=new_hour, minute=new_minute, second=0, microsecond=0, fold=0)
        return edited.astimezone(timezone.utc)
