"""
Meeting scheduler board.

A scratch list of zones kept apart from the saved locations. Every row
is shown at the board's selected instant. Shifting one row's anchor
moves every anchor and the selected instant by the same amount.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Iterator

from .catalog import TimeZoneCatalog
from .collaborators import CalendarStore
from .errors import IndexOutOfRange
from .model import Clock, next_id, utc_now
from .projection import Projection, TimeProjector, as_aware

logger = logging.getLogger(__name__)

MEETING_TITLE = "Scheduled Meeting"
MEETING_DURATION = timedelta(hours=1)

DEFAULT_BOARD = [
    ("New York", "America/New_York"),
    ("London", "Europe/London"),
    ("Tokyo", "Asia/Tokyo"),
]


@dataclass
class MeetingBoardEntry:
    name: str
    zone_id: str
    anchor_time: datetime
    id: int = field(default_factory=next_id)


@dataclass(frozen=True)
class MeetingRequest:
    title: str
    start: datetime
    end: datetime


def produce_meeting_request(selected_instant: datetime, title: str = MEETING_TITLE) -> MeetingRequest:
    start = as_aware(selected_instant)
    return MeetingRequest(title=title, start=start, end=start + MEETING_DURATION)


class MeetingTimeBoard:
    def __init__(self, catalog: TimeZoneCatalog, clock: Clock = utc_now) -> None:
        self.catalog = catalog
        self.clock = clock
        self.entries: list[MeetingBoardEntry] = []
        self.selected_instant = clock()

    @classmethod
    def with_defaults(cls, catalog: TimeZoneCatalog, clock: Clock = utc_now) -> "MeetingTimeBoard":
        board = cls(catalog, clock)
        board.add_zone("Local", catalog.local_zone_id())
        for name, zone_id in DEFAULT_BOARD:
            board.add_zone(name, zone_id)
        return board

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[MeetingBoardEntry]:
        return iter(self.entries)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.entries):
            raise IndexOutOfRange(index, len(self.entries))

    def add_zone(self, name: str, zone_id: str | None) -> MeetingBoardEntry:
        entry = MeetingBoardEntry(name=name, zone_id=self.catalog.normalize(zone_id), anchor_time=self.clock())
        self.entries.append(entry)
        return entry

    def remove_zone(self, index: int) -> MeetingBoardEntry:
        self._check_index(index)
        return self.entries.pop(index)

    def shift_all_by_delta(self, new_anchor_for_row: datetime, row_index: int) -> timedelta:
        self._check_index(row_index)
        delta = as_aware(new_anchor_for_row) - self.entries[row_index].anchor_time
        for entry in self.entries:
            entry.anchor_time = entry.anchor_time + delta
        self.selected_instant = self.selected_instant + delta
        return delta

    def reset_to_now(self) -> None:
        now = self.clock()
        for entry in self.entries:
            entry.anchor_time = now
        self.selected_instant = now

    def project_rows(self, projector: TimeProjector, instant: datetime | None = None) -> list[tuple[MeetingBoardEntry, Projection]]:
        at = self.selected_instant if instant is None else instant
        return [
            (entry, projector.project(at, entry.zone_id))
            for entry in self.entries
        ]

    def produce_meeting_request(self, selected_instant: datetime | None = None) -> MeetingRequest:
        at = self.selected_instant if selected_instant is None else selected_instant
        return produce_meeting_request(at)


def schedule_meeting(
    calendar: CalendarStore,
    selected_instant: datetime,
    on_result: Callable[[MeetingRequest | None, str | None], None] | None = None,
) -> None:
    """Ask for calendar access, then create a one hour meeting.

    ``on_result`` gets ``(request, event_id)`` on success and
    ``(None, None)`` when access is refused or errors out.
    """
    request = produce_meeting_request(selected_instant)

    def handle(granted: bool, error: Exception | None) -> None:
        if granted and error is None:
            event_id = calendar.create_event(request)
            if on_result is not None:
                on_result(request, event_id)
            return
        if error is not None:
            logger.warning("Calendar access failed: %s", error)
        else:
            logger.info("Calendar access denied")
        if on_result is not None:
            on_result(None, None)

    calendar.request_access(handle)
