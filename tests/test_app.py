"""
Tests for the terminal front end's key handling (no screen needed).
"""

import curses
from datetime import datetime, timedelta, timezone

import pytest

from pytzline.app import LOCATION_HINT, build_state, footer_text, handle_input, needs_location_prompt, parse_hhmm
from pytzline.collaborators import LocationPermission, MemoryCalendar, PermissionStatus
from pytzline.model import TimelineSelection
from pytzline.settings import load_settings
from pytzline.storage import MemoryStore
from pytzline.store import LOCATIONS_KEY, decode_locations, encode_locations

UTC = timezone.utc


def press(state, *keys):
    for key in keys:
        handle_input(ord(key) if isinstance(key, str) else key, state)


@pytest.fixture
def state(backend, catalog, clock):
    return build_state(
        backend,
        catalog=catalog,
        calendar=MemoryCalendar(),
        timeline=TimelineSelection(clock),
    )


class TestTimelineKeys:
    def test_shift_moves_every_location(self, state, clock):
        press(state, "]", "}")
        expected = clock() + timedelta(minutes=75)
        assert state["timeline"].instant == expected
        assert all(loc.reference_instant == expected for loc in state["store"])

    def test_shift_back_and_reset(self, state, clock):
        press(state, "[", "{")
        assert state["timeline"].instant == clock() - timedelta(minutes=75)
        press(state, "n")
        assert state["timeline"].is_live
        assert all(loc.reference_instant == clock() for loc in state["store"])

    def test_wall_clock_edit_in_london(self, state):
        press(state, "e", "0", "9", "3", "0", 10)
        assert state["mode"] == ""
        assert state["timeline"].instant == datetime(2024, 6, 15, 8, 30, tzinfo=UTC)

    def test_bad_wall_clock_is_reported(self, state, clock):
        press(state, "e", "9", "9", 10)
        assert "Invalid HH:MM" in state["msg"]
        assert state["timeline"].is_live

    def test_escape_cancels_edit(self, state):
        press(state, "e", "0", 27)
        assert state["mode"] == ""
        assert state["timeline"].is_live


class TestListKeys:
    def test_move_down_and_up(self, state):
        press(state, "j")
        assert state["store"].names() == ["New York", "London", "Tokyo"]
        assert state["sel_idx"] == 1
        press(state, "u")
        assert state["store"].names() == ["London", "New York", "Tokyo"]
        assert state["sel_idx"] == 0

    def test_move_past_edges_is_ignored(self, state):
        press(state, "u")
        assert state["store"].names() == ["London", "New York", "Tokyo"]

    def test_delete_selected(self, state, backend):
        press(state, curses.KEY_DOWN, curses.KEY_DOWN, "d")
        assert state["store"].names() == ["London", "New York"]
        assert state["sel_idx"] == 1
        assert decode_locations(backend.get(LOCATIONS_KEY)) == state["store"].pairs()

    def test_rename(self, state):
        press(state, curses.KEY_DOWN, "r", 127, 127, 127, 127, 127, 127, 127, 127, "N", "Y", "C", 10)
        assert state["store"].names() == ["London", "NYC", "Tokyo"]

    def test_add_from_picker(self, state):
        press(state, "a", curses.KEY_DOWN, curses.KEY_DOWN, 10)
        assert state["screen"] == "locations"
        assert state["store"].pairs()[-1] == ("London", "Europe/London")
        assert state["sel_idx"] == 3

    def test_add_current_location(self, state):
        press(state, "a", 10)
        assert state["store"].pairs()[-1] == ("Current Location", "UTC")

    def test_toggles_are_saved(self, state, backend):
        press(state, "t", "z")
        settings = load_settings(backend)
        assert settings.is_24_hour_format is True
        assert settings.show_time_zone_names is True

    def test_quit(self, state):
        press(state, "q")
        assert state["quit"] is True


class TestMeetingKeys:
    def test_shift_and_create(self, state):
        press(state, "g")
        assert state["screen"] == "meeting"
        board = state["board"]
        before = board.selected_instant
        press(state, curses.KEY_DOWN, "}")
        assert board.selected_instant == before + timedelta(hours=1)
        press(state, "c")
        assert state["msg"].startswith("Meeting created")
        (request,) = state["calendar"].events.values()
        assert request.start == board.selected_instant

    def test_now_resets_every_row(self, state, clock):
        press(state, "g", "}", "}", "n")
        board = state["board"]
        assert board.selected_instant == clock()
        assert all(entry.anchor_time == clock() for entry in board)

    def test_add_and_delete_rows(self, state):
        press(state, "g", "a", curses.KEY_DOWN, curses.KEY_DOWN, curses.KEY_DOWN, 10)
        assert [e.name for e in state["board"]][-1] == "Tokyo"
        press(state, "d")
        assert len(state["board"]) == 4
        press(state, 27)
        assert state["screen"] == "locations"


def picker_row(state, zone_id):
    return next(i for i, row in enumerate(state["picker_rows"]) if row.kind == "tz" and row.zone_id == zone_id and row.name == zone_id)


class TestPicker:
    def test_lists_every_known_zone(self, state, catalog):
        labels = [row.label for row in state["picker_rows"]]
        assert "All Time Zones" in labels
        raw = [row.zone_id for row in state["picker_rows"][labels.index("All Time Zones") + 1:]]
        assert raw == catalog.all_known_identifiers()

    def test_add_raw_zone(self, state):
        press(state, "a")
        state["picker_idx"] = picker_row(state, "Asia/Kolkata")
        press(state, 10)
        assert state["screen"] == "locations"
        assert state["store"].pairs()[-1] == ("Asia/Kolkata", "Asia/Kolkata")

    def test_add_raw_zone_to_meeting_board(self, state):
        press(state, "g", "a")
        state["picker_idx"] = picker_row(state, "America/Chicago")
        press(state, 10)
        assert state["screen"] == "meeting"
        last = list(state["board"])[-1]
        assert (last.name, last.zone_id) == ("America/Chicago", "America/Chicago")

    def test_headers_are_skipped(self, state):
        press(state, "a")
        first = state["picker_idx"]
        assert state["picker_rows"][first].kind == "tz"
        press(state, curses.KEY_UP)
        assert state["picker_idx"] == first
        header = [row.label for row in state["picker_rows"]].index("All Time Zones")
        state["picker_idx"] = header - 1
        press(state, curses.KEY_DOWN)
        assert state["picker_idx"] == header + 1
        press(state, curses.KEY_UP)
        assert state["picker_idx"] == header - 1

    def test_page_down_stops_at_last_zone(self, state):
        press(state, "a")
        last = len(state["picker_rows"]) - 1
        state["picker_idx"] = last - 3
        press(state, curses.KEY_NPAGE)
        assert state["picker_idx"] == last


class TestLocationPrompt:
    @pytest.fixture
    def answers(self):
        return [PermissionStatus.DENIED]

    @pytest.fixture
    def denied_state(self, catalog, clock, answers):
        blob = encode_locations([("Current Location", "UTC"), ("Tokyo", "Asia/Tokyo")])
        permission = LocationPermission(lambda p: p.authorization_changed(answers.pop(0)))
        permission.request_authorization()
        return build_state(
            MemoryStore({LOCATIONS_KEY: blob}),
            catalog=catalog,
            permission=permission,
            calendar=MemoryCalendar(),
            timeline=TimelineSelection(clock),
        )

    def test_hint_shown_when_denied(self, denied_state):
        assert needs_location_prompt(denied_state) is True
        assert footer_text(denied_state) == LOCATION_HINT

    def test_hint_hidden_when_current_location_is_not_first(self, denied_state):
        press(denied_state, "j")
        assert needs_location_prompt(denied_state) is False
        assert footer_text(denied_state) == ""

    def test_key_requests_again(self, denied_state, answers):
        answers.append(PermissionStatus.GRANTED)
        press(denied_state, "p")
        permission = denied_state["permission"]
        assert permission.requests == 2
        assert permission.permission_granted is True
        assert footer_text(denied_state) == ""

    def test_still_denied(self, denied_state, answers):
        answers.append(PermissionStatus.DENIED)
        press(denied_state, "p")
        assert denied_state["permission"].requests == 2
        assert "still denied" in footer_text(denied_state)

    def test_no_hint_when_granted(self, state):
        assert needs_location_prompt(state) is False


def test_parse_hhmm():
    assert parse_hhmm("07:45") == (7, 45)
    with pytest.raises(ValueError):
        parse_hhmm("24:00")
    with pytest.raises(ValueError):
        parse_hhmm("ab:cd")
