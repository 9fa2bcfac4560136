"""
Platform-facing collaborators: location permission and calendar access.

Both deliver their answers through callbacks that may fire after
unrelated state changes; nothing here checks for staleness.
"""

from __future__ import annotations

import json
import logging
import uuid
from enum import Enum
from typing import TYPE_CHECKING, Callable

from .storage import KeyValueStore

if TYPE_CHECKING:
    from .meeting import MeetingRequest

logger = logging.getLogger(__name__)

EVENTS_KEY = "ScheduledMeetings"


class PermissionStatus(Enum):
    NOT_DETERMINED = "not_determined"
    GRANTED = "granted"
    DENIED = "denied"
    RESTRICTED = "restricted"


class LocationPermission:
    def __init__(self, requester: Callable[["LocationPermission"], None] | None = None) -> None:
        self._requester = requester
        self.permission_granted = False
        self.permission_denied = False
        self.requests = 0

    def request_authorization(self) -> None:
        self.requests += 1
        logger.info("Requesting location authorization")
        if self._requester is not None:
            self._requester(self)

    def authorization_changed(self, status: PermissionStatus) -> None:
        if status is PermissionStatus.GRANTED:
            self.permission_denied = False
            self.permission_granted = True
        elif status in (PermissionStatus.DENIED, PermissionStatus.RESTRICTED):
            self.permission_denied = True
            self.permission_granted = False
        logger.info("Location authorization is now %s", status.value)


AccessCallback = Callable[[bool, Exception | None], None]


class CalendarStore:
    def request_access(self, callback: AccessCallback) -> None:
        raise NotImplementedError

    def create_event(self, request: "MeetingRequest") -> str:
        raise NotImplementedError


class MemoryCalendar(CalendarStore):
    def __init__(self, granted: bool = True, error: Exception | None = None, deferred: bool = False) -> None:
        self.granted = granted
        self.error = error
        self.deferred = deferred
        self.pending: list[AccessCallback] = []
        self.events: dict[str, "MeetingRequest"] = {}

    def request_access(self, callback: AccessCallback) -> None:
        if self.deferred:
            self.pending.append(callback)
            return
        callback(self.granted, self.error)

    def deliver(self) -> None:
        pending, self.pending = self.pending, []
        for callback in pending:
            callback(self.granted, self.error)

    def create_event(self, request: "MeetingRequest") -> str:
        event_id = uuid.uuid4().hex
        self.events[event_id] = request
        return event_id


class StoredCalendar(CalendarStore):
    """Keeps scheduled meetings in the key/value store under one key."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def request_access(self, callback: AccessCallback) -> None:
        callback(True, None)

    def events(self) -> list[dict[str, str]]:
        raw = self.store.get(EVENTS_KEY)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError as exc:
            logger.warning("Discarding unreadable %s: %s", EVENTS_KEY, exc)
            return []
        if not isinstance(data, list):
            return []
        return [item for item in data if isinstance(item, dict)]

    def create_event(self, request: "MeetingRequest") -> str:
        event_id = uuid.uuid4().hex
        events = self.events()
        events.append({
            "id": event_id,
            "title": request.title,
            "start": request.start.isoformat(),
            "end": request.end.isoformat(),
        })
        self.store.set(EVENTS_KEY, json.dumps(events))
        logger.info("Created event %s at %s", event_id, request.start.isoformat())
        return event_id
