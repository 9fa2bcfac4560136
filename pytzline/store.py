"""
Ordered location list with write-through persistence.

Only ``(name, zone_id)`` pairs are stored, in display order, as a JSON
list under a single key. Ids and reference instants are rebuilt on load.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Iterable, Iterator, Sequence

from .catalog import CURRENT_LOCATION, TimeZoneCatalog
from .collaborators import LocationPermission
from .errors import IndexOutOfRange, LocationNotFound, PersistenceDecodeFailure
from .model import Clock, Location, utc_now
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

LOCATIONS_KEY = "SavedLocations"

DEFAULT_SEED = [
    ("London", "Europe/London"),
    ("New York", "America/New_York"),
    ("Tokyo", "Asia/Tokyo"),
]


def default_seed() -> list[tuple[str, str]]:
    return list(DEFAULT_SEED)


def encode_locations(pairs: Iterable[tuple[str, str]]) -> str:
    return json.dumps([{"name": name, "timeZone": zone_id} for name, zone_id in pairs])


def decode_locations(blob: str | bytes | None) -> list[tuple[str, str]]:
    if blob is None:
        raise PersistenceDecodeFailure("No saved locations")
    try:
        if isinstance(blob, bytes):
            blob = blob.decode("utf-8")
        data = json.loads(blob)
    except (UnicodeDecodeError, ValueError) as exc:
        raise PersistenceDecodeFailure(f"Saved locations are not JSON: {exc}") from exc
    if not isinstance(data, list):
        raise PersistenceDecodeFailure("Saved locations must be a list")
    pairs: list[tuple[str, str]] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise PersistenceDecodeFailure(f"Entry {i} is not an object")
        name = item.get("name")
        zone_id = item.get("timeZone")
        if not isinstance(name, str) or not isinstance(zone_id, str):
            raise PersistenceDecodeFailure(f"Entry {i} needs string name and timeZone")
        pairs.append((name, zone_id))
    return pairs


class LocationStore:
    def __init__(
        self,
        backend: KeyValueStore,
        catalog: TimeZoneCatalog,
        clock: Clock = utc_now,
    ) -> None:
        self.backend = backend
        self.catalog = catalog
        self.clock = clock
        self._items: list[Location] = []

    @classmethod
    def load(
        cls,
        backend: KeyValueStore,
        catalog: TimeZoneCatalog,
        clock: Clock = utc_now,
    ) -> "LocationStore":
        store = cls(backend, catalog, clock)
        try:
            pairs = decode_locations(backend.get(LOCATIONS_KEY))
        except PersistenceDecodeFailure as exc:
            logger.info("Using default locations: %s", exc)
            pairs = default_seed()
        store._items = [store.new_location(name, zone_id) for name, zone_id in pairs]
        return store

    # -----------------------------
    # Read access
    # -----------------------------

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Location]:
        return iter(self._items)

    def __getitem__(self, index: int) -> Location:
        self._check_index(index)
        return self._items[index]

    def names(self) -> list[str]:
        return [loc.name for loc in self._items]

    def pairs(self) -> list[tuple[str, str]]:
        return [loc.to_pair() for loc in self._items]

    def index_of(self, location_id: int) -> int:
        for i, loc in enumerate(self._items):
            if loc.id == location_id:
                return i
        raise LocationNotFound(location_id)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._items):
            raise IndexOutOfRange(index, len(self._items))

    # -----------------------------
    # Mutations (each saves once)
    # -----------------------------

    def new_location(self, name: str, zone_id: str | None) -> Location:
        return Location(name=name, zone_id=self.catalog.normalize(zone_id), reference_instant=self.clock())

    def create(self, name: str, zone_id: str | None) -> Location:
        location = self.new_location(name, zone_id)
        self.add(location)
        return location

    def add(self, location: Location) -> None:
        location.zone_id = self.catalog.normalize(location.zone_id)
        self._items.append(location)
        self.save()

    def remove(self, index: int) -> Location:
        self._check_index(index)
        location = self._items.pop(index)
        self.save()
        return location

    def remove_by_id(self, location_id: int) -> Location:
        return self.remove(self.index_of(location_id))

    def rename(self, index: int, new_name: str) -> None:
        self._check_index(index)
        self._items[index].name = new_name
        self.save()

    def rename_by_id(self, location_id: int, new_name: str) -> None:
        self.rename(self.index_of(location_id), new_name)

    def reorder(self, from_indices: Sequence[int], to_index: int) -> None:
        """Move the entries at ``from_indices`` to ``to_index``.

        Moved entries keep their relative order. ``to_index`` counts
        positions in the list with the moved entries already taken out.
        """
        picked = sorted(set(from_indices))
        picked_set = set(picked)
        for index in picked:
            self._check_index(index)
        moving = [self._items[i] for i in picked]
        remaining = [loc for i, loc in enumerate(self._items) if i not in picked_set]
        if not 0 <= to_index <= len(remaining):
            raise IndexOutOfRange(to_index, len(remaining) + 1)
        self._items = remaining[:to_index] + moving + remaining[to_index:]
        self.save()

    def apply_instant(self, instant: datetime) -> None:
        for loc in self._items:
            loc.reference_instant = instant

    def save(self) -> None:
        self.backend.set(LOCATIONS_KEY, encode_locations(self.pairs()))


def add_current_location(store: LocationStore, permission: LocationPermission) -> Location | None:
    if permission.permission_granted:
        return store.create(CURRENT_LOCATION, store.catalog.local_zone_id())
    if not permission.permission_denied:
        permission.request_authorization()
        if permission.permission_granted:
            return store.create(CURRENT_LOCATION, store.catalog.local_zone_id())
    return None
