"""Shared-instant world clock: saved locations, timeline edits, meetings."""

from .catalog import TimeZoneCatalog
from .meeting import MeetingTimeBoard
from .model import Location, TimelineSelection
from .projection import TimeProjector, format_clock
from .store import LocationStore

__version__ = "0.1.0"

__all__ = [
    "Location",
    "LocationStore",
    "MeetingTimeBoard",
    "TimeProjector",
    "TimeZoneCatalog",
    "TimelineSelection",
    "format_clock",
]
