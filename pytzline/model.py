from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]

_ids = itertools.count(1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def next_id() -> int:
    return next(_ids)


@dataclass
class Location:
    name: str
    zone_id: str
    reference_instant: datetime = field(default_factory=utc_now)
    id: int = field(default_factory=next_id)

    def to_pair(self) -> tuple[str, str]:
        return self.name, self.zone_id


class TimelineSelection:
    """The one instant every location is projected from.

    Starts live (tracking the clock). ``set`` and ``shift`` pin it to a
    what-if instant until ``reset_to_now``.
    """

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._pinned: datetime | None = None

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def is_live(self) -> bool:
        return self._pinned is None

    @property
    def instant(self) -> datetime:
        if self._pinned is None:
            return self._clock()
        return self._pinned

    def set(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._pinned = instant

    def shift(self, delta: timedelta) -> datetime:
        self.set(self.instant + delta)
        return self.instant

    def reset_to_now(self) -> None:
        self._pinned = None
