"""
Tests for permission state, the stored calendar and key/value storage.
"""

import json
from datetime import datetime, timezone

from pytzline.collaborators import EVENTS_KEY, LocationPermission, PermissionStatus, StoredCalendar
from pytzline.meeting import produce_meeting_request
from pytzline.settings import Settings, load_settings, save_settings
from pytzline.storage import JsonFileStore, MemoryStore


class TestLocationPermission:
    def test_starts_undetermined(self):
        permission = LocationPermission()
        assert permission.permission_granted is False
        assert permission.permission_denied is False

    def test_flags_are_exclusive(self):
        permission = LocationPermission()
        permission.authorization_changed(PermissionStatus.DENIED)
        assert (permission.permission_granted, permission.permission_denied) == (False, True)
        permission.authorization_changed(PermissionStatus.GRANTED)
        assert (permission.permission_granted, permission.permission_denied) == (True, False)
        permission.authorization_changed(PermissionStatus.RESTRICTED)
        assert (permission.permission_granted, permission.permission_denied) == (False, True)

    def test_not_determined_keeps_previous_answer(self):
        permission = LocationPermission()
        permission.authorization_changed(PermissionStatus.GRANTED)
        permission.authorization_changed(PermissionStatus.NOT_DETERMINED)
        assert permission.permission_granted is True

    def test_request_calls_platform(self):
        calls = []
        permission = LocationPermission(calls.append)
        permission.request_authorization()
        assert calls == [permission]


class TestStoredCalendar:
    def test_events_persist(self):
        backend = MemoryStore()
        calendar = StoredCalendar(backend)
        start = datetime(2024, 6, 15, 15, 0, tzinfo=timezone.utc)
        event_id = calendar.create_event(produce_meeting_request(start))
        (event,) = StoredCalendar(backend).events()
        assert event["id"] == event_id
        assert event["title"] == "Scheduled Meeting"
        assert event["start"] == "2024-06-15T15:00:00+00:00"
        assert event["end"] == "2024-06-15T16:00:00+00:00"

    def test_unreadable_events_are_dropped(self):
        calendar = StoredCalendar(MemoryStore({EVENTS_KEY: "not json"}))
        assert calendar.events() == []


class TestSettings:
    def test_defaults(self):
        assert load_settings(MemoryStore()) == Settings()

    def test_round_trip(self):
        backend = MemoryStore()
        save_settings(backend, Settings(is_24_hour_format=True, dark_mode=True))
        assert backend.get("is24HourFormat") == "true"
        assert load_settings(backend) == Settings(is_24_hour_format=True, dark_mode=True)

    def test_bad_value_is_ignored(self):
        backend = MemoryStore({"is24HourFormat": "maybe", "showTimeZoneNames": "1"})
        assert load_settings(backend) == Settings(show_time_zone_names=True)


class TestJsonFileStore:
    def test_round_trip(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        JsonFileStore(path).set("SavedLocations", "[]")
        JsonFileStore(path).set("is24HourFormat", "true")
        store = JsonFileStore(path)
        assert store.get("SavedLocations") == "[]"
        assert store.get("is24HourFormat") == "true"
        assert json.loads(path.read_text(encoding="utf-8")) == {
            "SavedLocations": "[]",
            "is24HourFormat": "true",
        }

    def test_missing_file(self, tmp_path):
        assert JsonFileStore(tmp_path / "none.json").get("SavedLocations") is None

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_bytes(b"\x00garbage")
        assert JsonFileStore(path).get("SavedLocations") is None

    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PYTZLINE_CONFIG", str(tmp_path / "custom.json"))
        assert JsonFileStore().path == tmp_path / "custom.json"
