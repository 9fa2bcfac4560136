from __future__ import annotations


class PytzlineError(Exception):
    pass


class IndexOutOfRange(PytzlineError, IndexError):
    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"Index {index} out of range for {size} entries")
        self.index = index
        self.size = size


class LocationNotFound(PytzlineError, LookupError):
    def __init__(self, location_id: int) -> None:
        super().__init__(f"No location with id {location_id}")
        self.location_id = location_id


class UnresolvableZoneIdentifier(PytzlineError, ValueError):
    def __init__(self, identifier: str) -> None:
        super().__init__(f"Invalid timezone identifier: {identifier!r}")
        self.identifier = identifier


class PersistenceDecodeFailure(PytzlineError, ValueError):
    pass
