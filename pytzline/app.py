#!/usr/bin/env python3
"""
pytzline terminal front end (curses + zoneinfo).

- ASCII-only UI
- Saved locations, each shown at one shared instant
- Timeline nudging, wall-clock edits, rename, delete, reorder
- Meeting board with one-hour meeting creation
"""

from __future__ import annotations

import curses
import locale
import logging
import os
import sys
import time
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from .catalog import CURRENT_LOCATION, POPULAR_CITIES, TimeZoneCatalog
from .collaborators import CalendarStore, LocationPermission, PermissionStatus, StoredCalendar
from .errors import PytzlineError
from .meeting import MeetingRequest, MeetingTimeBoard, schedule_meeting
from .model import TimelineSelection
from .projection import TimeProjector, format_clock, format_offset, format_projection
from .settings import Settings, load_settings, save_settings
from .storage import JsonFileStore, KeyValueStore
from .store import LocationStore, add_current_location

logger = logging.getLogger(__name__)

APP_ENV_LOG = "PYTZLINE_LOG"
APP_ENV_LOG_LEVEL = "PYTZLINE_LOG_LEVEL"

SMALL_STEP = timedelta(minutes=15)
LARGE_STEP = timedelta(hours=1)

TIME_TEMPLATE = "00:00"
DIGIT_POSITIONS = [i for i, ch in enumerate(TIME_TEMPLATE) if ch.isdigit()]
DIGIT_SET = set(DIGIT_POSITIONS)
FIRST_DIGIT = DIGIT_POSITIONS[0]
LAST_DIGIT = DIGIT_POSITIONS[-1]

NAME_WIDTH = 24

BOX_STYLE = {
    "tl": "+",
    "tr": "+",
    "bl": "+",
    "br": "+",
    "h": "-",
    "v": "|",
}

CP_HEADER = 1
CP_DAY = 2
CP_NIGHT = 3

KEY_ENTER = (curses.KEY_ENTER, 10, 13)
KEY_BACKSPACE = (curses.KEY_BACKSPACE, 127, 8)
KEY_ESC = 27
PAGE_STEP = 10

LOCATION_HINT = "Please allow your location usage (p)"


@dataclass
class Row:
    kind: str  # 'header' or 'tz'
    label: str
    name: str = ""
    zone_id: str | None = None  # None means the system zone


# -----------------------------
# Picker rows
# -----------------------------

def build_picker_rows(catalog: TimeZoneCatalog) -> list[Row]:
    rows = [Row("header", "Popular Cities")]
    for city in POPULAR_CITIES:
        rows.append(Row("tz", f"  {city.name}", name=city.name, zone_id=city.zone_id))
    rows.append(Row("header", "All Time Zones"))
    for tz in catalog.all_known_identifiers():
        rows.append(Row("tz", f"  {tz}", name=tz, zone_id=tz))
    return rows


def next_selectable_index(rows: list[Row], start_idx: int, direction: int) -> int:
    if not rows:
        return 0
    idx = max(0, min(start_idx, len(rows) - 1))
    while 0 <= idx < len(rows):
        if rows[idx].kind == "tz":
            return idx
        idx += direction
    return max(0, min(start_idx, len(rows) - 1))


def move_picker(state: dict, step: int) -> None:
    rows: list[Row] = state["picker_rows"]
    direction = 1 if step > 0 else -1
    idx = next_selectable_index(rows, state["picker_idx"] + step, direction)
    if rows[idx].kind != "tz":
        idx = next_selectable_index(rows, idx, -direction)
    if rows[idx].kind == "tz":
        state["picker_idx"] = idx


# -----------------------------
# Helpers: digits
# -----------------------------

def next_digit_pos(pos: int) -> int:
    for d in DIGIT_POSITIONS:
        if d >= pos:
            return d
    return LAST_DIGIT


def prev_digit_before(pos: int) -> int:
    for d in reversed(DIGIT_POSITIONS):
        if d < pos:
            return d
    return pos


def next_digit_after(pos: int) -> int:
    for d in DIGIT_POSITIONS:
        if d > pos:
            return d
    return pos


def parse_hhmm(text: str) -> tuple[int, int]:
    hh_s, _, mm_s = text.partition(":")
    if not (hh_s.isdigit() and mm_s.isdigit()):
        raise ValueError(f"Invalid HH:MM: {text!r}")
    hh, mm = int(hh_s), int(mm_s)
    if not (0 <= hh <= 23 and 0 <= mm <= 59):
        raise ValueError(f"Invalid HH:MM: {text!r}")
    return hh, mm


# -----------------------------
# State
# -----------------------------

def build_state(
    backend: KeyValueStore,
    catalog: TimeZoneCatalog | None = None,
    permission: LocationPermission | None = None,
    calendar: CalendarStore | None = None,
    timeline: TimelineSelection | None = None,
) -> dict:
    catalog = catalog or TimeZoneCatalog()
    timeline = timeline or TimelineSelection()
    if permission is None:
        # A terminal has no location prompt; the system zone is always readable.
        permission = LocationPermission(lambda p: p.authorization_changed(PermissionStatus.GRANTED))
    store = LocationStore.load(backend, catalog)
    state = {
        "backend": backend,
        "catalog": catalog,
        "projector": TimeProjector(catalog),
        "store": store,
        "board": MeetingTimeBoard.with_defaults(catalog, timeline.clock),
        "timeline": timeline,
        "settings": load_settings(backend),
        "permission": permission,
        "calendar": calendar or StoredCalendar(backend),
        "screen": "locations",
        "mode": "",
        "field_text": "",
        "field_cursor": 0,
        "edit_id": None,
        "sel_idx": 0,
        "scroll": 0,
        "board_idx": 0,
        "board_scroll": 0,
        "picker_rows": build_picker_rows(catalog),
        "picker_idx": 0,
        "picker_scroll": 0,
        "picker_target": "locations",
        "msg": "",
        "colors": False,
        "colors_dirty": True,
        "quit": False,
    }
    sync_timeline(state)
    return state


def sync_timeline(state: dict) -> None:
    state["store"].apply_instant(state["timeline"].instant)


def clamp_selection(state: dict) -> None:
    n = len(state["store"])
    state["sel_idx"] = max(0, min(state["sel_idx"], n - 1))
    m = len(state["board"])
    state["board_idx"] = max(0, min(state["board_idx"], m - 1))


def selected_location(state: dict):
    store = state["store"]
    if not len(store):
        return None
    return store[state["sel_idx"]]


def needs_location_prompt(state: dict) -> bool:
    store: LocationStore = state["store"]
    if not state["permission"].permission_denied or not len(store):
        return False
    return store[0].name == CURRENT_LOCATION


def persist_settings(state: dict) -> None:
    save_settings(state["backend"], state["settings"])


# -----------------------------
# Rendering helpers
# -----------------------------

def safe_addstr(stdscr: curses.window, y: int, x: int, text: str, attr: int = 0) -> None:
    h, w = stdscr.getmaxyx()
    if y < 0 or y >= h or x < 0 or x >= w:
        return
    # Avoid writing into the bottom-right cell; it can raise ERR on some terminals.
    if y == h - 1 and x == w - 1:
        return
    max_len = w - x
    if y == h - 1:
        max_len -= 1
    if max_len <= 0:
        return
    stdscr.addstr(y, x, text[:max_len], attr)


def draw_hline(stdscr: curses.window, y: int, x: int, length: int, ch: str) -> None:
    if length <= 0:
        return
    safe_addstr(stdscr, y, x, ch * length)


def draw_vline(stdscr: curses.window, y: int, x: int, length: int, ch: str) -> None:
    for i in range(max(0, length)):
        safe_addstr(stdscr, y + i, x, ch)


def draw_box(stdscr: curses.window, y: int, x: int, h: int, w: int, style: dict) -> None:
    if h < 2 or w < 2:
        return
    draw_hline(stdscr, y, x + 1, w - 2, style["h"])
    draw_hline(stdscr, y + h - 1, x + 1, w - 2, style["h"])
    draw_vline(stdscr, y + 1, x, h - 2, style["v"])
    draw_vline(stdscr, y + 1, x + w - 1, h - 2, style["v"])
    for yy, xx, key in ((y, x, "tl"), (y, x + w - 1, "tr"), (y + h - 1, x, "bl"), (y + h - 1, x + w - 1, "br")):
        try:
            safe_addstr(stdscr, yy, xx, style[key])
        except curses.error:
            pass


def draw_field(
    stdscr: curses.window,
    y: int,
    x: int,
    label: str,
    value: str,
    width: int,
    cursor_pos: int,
) -> tuple[int, int]:
    label_text = f"{label}: ["
    safe_addstr(stdscr, y, x, label_text)
    x += len(label_text)
    display = (value + " " * width)[:width]
    safe_addstr(stdscr, y, x, display)
    cur_idx = max(0, min(cursor_pos, width - 1))
    safe_addstr(stdscr, y, x + cur_idx, display[cur_idx], curses.A_REVERSE)
    safe_addstr(stdscr, y, x + width, "]")
    return y, x + cur_idx


def ensure_visible(idx: int, scroll: int, height: int, total: int) -> int:
    if total <= height:
        return 0
    if idx < scroll:
        return idx
    if idx >= scroll + height:
        return max(0, idx - height + 1)
    return scroll


def clamp_scroll(scroll: int, height: int, total: int) -> int:
    if total <= height:
        return 0
    return max(0, min(scroll, total - height))


def init_colors(state: dict) -> None:
    state["colors"] = False
    state["colors_dirty"] = False
    if not curses.has_colors():
        return
    try:
        curses.start_color()
        curses.use_default_colors()
        bg = curses.COLOR_BLACK if state["settings"].dark_mode else -1
        curses.init_pair(CP_HEADER, curses.COLOR_CYAN, bg)
        curses.init_pair(CP_DAY, curses.COLOR_YELLOW, bg)
        curses.init_pair(CP_NIGHT, curses.COLOR_BLUE, bg)
        state["colors"] = True
    except curses.error:
        state["colors"] = False


def color(state: dict, pair: int) -> int:
    return curses.color_pair(pair) if state.get("colors") else 0


# -----------------------------
# Screens
# -----------------------------

def timeline_label(state: dict) -> str:
    timeline: TimelineSelection = state["timeline"]
    if timeline.is_live:
        return "Timeline: live (now)"
    pinned = timeline.instant
    return f"Timeline: {pinned.strftime('%Y-%m-%d %H:%M')} UTC (n=now)"


def draw_rows(
    stdscr: curses.window,
    state: dict,
    top: int,
    height: int,
    width: int,
    rows: list[tuple[str, object, str]],
    sel_idx: int,
    scroll_key: str,
) -> None:
    settings: Settings = state["settings"]
    draw_box(stdscr, top, 0, height, width, BOX_STYLE)
    inner = max(1, height - 2)
    state[scroll_key] = clamp_scroll(state[scroll_key], inner, len(rows))
    state[scroll_key] = ensure_visible(sel_idx, state[scroll_key], inner, len(rows))
    start = state[scroll_key]
    for i in range(start, min(len(rows), start + inner)):
        name, proj, zone_id = rows[i]
        y = top + 1 + (i - start)
        marker = "day  " if proj.is_daytime else "night"
        clock = format_projection(proj, settings)
        off = format_offset(proj.local.utcoffset())
        text = f" {marker} {name[:NAME_WIDTH]:<{NAME_WIDTH}} {clock:>12}  {zone_id} ({off})"
        attr = curses.A_REVERSE if i == sel_idx else 0
        safe_addstr(stdscr, y, 1, text[: width - 2].ljust(width - 2), attr)
        safe_addstr(stdscr, y, 2, marker, attr | color(state, CP_DAY if proj.is_daytime else CP_NIGHT))


def render_locations(stdscr: curses.window, state: dict, h: int, w: int) -> tuple[int, int] | None:
    projector: TimeProjector = state["projector"]
    store: LocationStore = state["store"]
    safe_addstr(stdscr, 0, 0, "pytzline - one moment, every zone", color(state, CP_HEADER))
    safe_addstr(stdscr, 1, 0, "a=add d=del r=rename e=edit time u/j=move [ ]=15m { }=1h n=now g=meeting p=location q=quit")
    safe_addstr(stdscr, 2, 0, "t=12/24h z=zone names k=dark  " + timeline_label(state))
    rows = [
        (loc.name, projector.project(loc.reference_instant, loc.zone_id), loc.zone_id)
        for loc in store
    ]
    if not rows:
        safe_addstr(stdscr, 4, 0, "No locations. Press a to add one.")
    else:
        draw_rows(stdscr, state, 3, h - 5, w, rows, state["sel_idx"], "scroll")
    return render_footer(stdscr, state, h)


def render_meeting(stdscr: curses.window, state: dict, h: int, w: int) -> tuple[int, int] | None:
    projector: TimeProjector = state["projector"]
    board: MeetingTimeBoard = state["board"]
    safe_addstr(stdscr, 0, 0, "pytzline - meeting scheduler", color(state, CP_HEADER))
    safe_addstr(stdscr, 1, 0, "a=add d=del [ ]=15m { }=1h n=now c=create meeting g/Esc=back q=quit")
    start = board.selected_instant
    safe_addstr(stdscr, 2, 0, f"Meeting: {start.strftime('%Y-%m-%d %H:%M')} UTC, 1 hour")
    rows = [(entry.name, proj, entry.zone_id) for entry, proj in board.project_rows(projector)]
    if not rows:
        safe_addstr(stdscr, 4, 0, "No zones. Press a to add one.")
    else:
        draw_rows(stdscr, state, 3, h - 5, w, rows, state["board_idx"], "board_scroll")
    return render_footer(stdscr, state, h)


def render_picker(stdscr: curses.window, state: dict, h: int, w: int) -> None:
    safe_addstr(stdscr, 0, 0, "Add a location (Enter=add, PgUp/PgDn=page, Esc=cancel)", color(state, CP_HEADER))
    rows: list[Row] = state["picker_rows"]
    height = h - 3
    width = min(w, NAME_WIDTH + 16)
    draw_box(stdscr, 1, 0, height, width, BOX_STYLE)
    inner = max(1, height - 2)
    total = len(rows)
    state["picker_scroll"] = ensure_visible(state["picker_idx"], clamp_scroll(state["picker_scroll"], inner, total), inner, total)
    start = state["picker_scroll"]
    for i in range(start, min(total, start + inner)):
        row = rows[i]
        attr = 0
        if row.kind == "header":
            attr = curses.A_BOLD | color(state, CP_HEADER)
        elif i == state["picker_idx"]:
            attr = curses.A_REVERSE
        safe_addstr(stdscr, 2 + i - start, 1, row.label[: width - 2].ljust(width - 2), attr)
    render_footer(stdscr, state, h)


def footer_text(state: dict) -> str:
    if state["msg"]:
        return state["msg"]
    if state["screen"] == "locations" and needs_location_prompt(state):
        return LOCATION_HINT
    return ""


def render_footer(stdscr: curses.window, state: dict, h: int) -> tuple[int, int] | None:
    if state["mode"] == "rename":
        width = NAME_WIDTH
        return draw_field(stdscr, h - 2, 0, "Rename", state["field_text"], width, state["field_cursor"])
    if state["mode"] == "edit_time":
        return draw_field(stdscr, h - 2, 0, "Time (HH:MM)", state["field_text"], len(TIME_TEMPLATE), state["field_cursor"])
    text = footer_text(state)
    if text:
        safe_addstr(stdscr, h - 2, 0, text)
    return None


def render(stdscr: curses.window, state: dict) -> None:
    stdscr.erase()
    h, w = stdscr.getmaxyx()
    if w < 60 or h < 10:
        safe_addstr(stdscr, 0, 0, "Window too small. Need at least 60x10.")
        stdscr.refresh()
        return
    cursor = None
    if state["screen"] == "locations":
        cursor = render_locations(stdscr, state, h, w)
    elif state["screen"] == "meeting":
        cursor = render_meeting(stdscr, state, h, w)
    else:
        render_picker(stdscr, state, h, w)
    try:
        curses.curs_set(1 if cursor else 0)
    except curses.error:
        pass
    if cursor:
        stdscr.move(cursor[0], cursor[1])
    stdscr.refresh()


# -----------------------------
# Actions
# -----------------------------

def shift_timeline(state: dict, delta: timedelta) -> None:
    state["timeline"].shift(delta)
    sync_timeline(state)


def reset_timeline(state: dict) -> None:
    state["timeline"].reset_to_now()
    sync_timeline(state)


def move_selected(state: dict, step: int) -> None:
    store: LocationStore = state["store"]
    idx = state["sel_idx"]
    target = idx + step
    if not len(store) or target < 0 or target >= len(store):
        return
    store.reorder([idx], target)
    state["sel_idx"] = target


def delete_selected(state: dict) -> None:
    loc = selected_location(state)
    if loc is None:
        return
    state["store"].remove_by_id(loc.id)
    state["msg"] = f"Removed {loc.name}."
    clamp_selection(state)


def start_field(state: dict, mode: str) -> None:
    loc = selected_location(state)
    if loc is None:
        return
    state["mode"] = mode
    state["edit_id"] = loc.id
    if mode == "rename":
        state["field_text"] = loc.name
        state["field_cursor"] = len(loc.name)
    else:
        proj = state["projector"].project(loc.reference_instant, loc.zone_id)
        state["field_text"] = format_clock(proj.hour, proj.minute, True)
        state["field_cursor"] = FIRST_DIGIT


def commit_field(state: dict) -> None:
    store: LocationStore = state["store"]
    mode = state["mode"]
    state["mode"] = ""
    try:
        index = store.index_of(state["edit_id"])
    except PytzlineError:
        state["msg"] = "Location no longer exists."
        return
    loc = store[index]
    if mode == "rename":
        name = state["field_text"].strip()
        if name:
            store.rename_by_id(loc.id, name)
        return
    try:
        hh, mm = parse_hhmm(state["field_text"])
    except ValueError as exc:
        state["msg"] = str(exc)
        return
    new_instant = state["projector"].apply_wall_clock_edit(state["timeline"].instant, loc.zone_id, hh, mm)
    state["timeline"].set(new_instant)
    sync_timeline(state)


def open_picker(state: dict, target: str) -> None:
    state["screen"] = "picker"
    state["picker_target"] = target
    state["picker_idx"] = next_selectable_index(state["picker_rows"], 0, 1)
    state["picker_scroll"] = 0


def pick_city(state: dict) -> None:
    row: Row = state["picker_rows"][state["picker_idx"]]
    if row.kind != "tz":
        return
    catalog: TimeZoneCatalog = state["catalog"]
    zone_id = catalog.local_zone_id() if row.zone_id is None else catalog.normalize(row.zone_id)
    target = state["picker_target"]
    state["screen"] = target
    if target == "meeting":
        state["board"].add_zone(row.name, zone_id)
        state["board_idx"] = len(state["board"]) - 1
        return
    if row.zone_id is None:
        loc = add_current_location(state["store"], state["permission"])
        if loc is None:
            state["msg"] = "Location permission needed for Current Location."
            return
    else:
        state["store"].create(row.name, zone_id)
    state["sel_idx"] = len(state["store"]) - 1
    sync_timeline(state)


def create_meeting(state: dict) -> None:
    def done(request: MeetingRequest | None, event_id: str | None) -> None:
        if request is None:
            state["msg"] = "Calendar access denied."
        else:
            state["msg"] = f"Meeting created: {request.start.strftime('%Y-%m-%d %H:%M')} UTC."

    schedule_meeting(state["calendar"], state["board"].selected_instant, done)


def shift_board(state: dict, delta: timedelta) -> None:
    board: MeetingTimeBoard = state["board"]
    if not len(board):
        return
    idx = state["board_idx"]
    board.shift_all_by_delta(board.entries[idx].anchor_time + delta, idx)


# -----------------------------
# Input handling
# -----------------------------

def handle_field_input(key: int, state: dict) -> bool:
    text = state["field_text"]
    cursor = state["field_cursor"]
    if key == KEY_ESC:
        state["mode"] = ""
        return True
    if key in KEY_ENTER:
        commit_field(state)
        return True

    if state["mode"] == "rename":
        if key in KEY_BACKSPACE:
            if cursor > 0:
                state["field_text"] = text[: cursor - 1] + text[cursor:]
                state["field_cursor"] -= 1
            return True
        if key == curses.KEY_LEFT:
            state["field_cursor"] = max(0, cursor - 1)
            return True
        if key == curses.KEY_RIGHT:
            state["field_cursor"] = min(len(text), cursor + 1)
            return True
        if 32 <= key <= 126:
            state["field_text"] = text[:cursor] + chr(key) + text[cursor:]
            state["field_cursor"] += 1
            return True
        return False

    if key == curses.KEY_LEFT:
        state["field_cursor"] = prev_digit_before(cursor)
        return True
    if key == curses.KEY_RIGHT:
        state["field_cursor"] = next_digit_after(cursor)
        return True
    if key in KEY_BACKSPACE:
        pos = prev_digit_before(cursor)
        state["field_text"] = text[:pos] + "0" + text[pos + 1:]
        state["field_cursor"] = pos
        return True
    if ord("0") <= key <= ord("9"):
        pos = cursor if cursor in DIGIT_SET else next_digit_pos(cursor)
        state["field_text"] = text[:pos] + chr(key) + text[pos + 1:]
        state["field_cursor"] = next_digit_after(pos)
        return True
    return False


def handle_common_input(key: int, state: dict) -> bool:
    settings: Settings = state["settings"]
    if key in (ord("q"), ord("Q")):
        state["quit"] = True
        return False
    if key in (ord("t"), ord("T")):
        settings.is_24_hour_format = not settings.is_24_hour_format
        persist_settings(state)
        return True
    if key in (ord("z"), ord("Z")):
        settings.show_time_zone_names = not settings.show_time_zone_names
        persist_settings(state)
        return True
    if key in (ord("k"), ord("K")):
        settings.dark_mode = not settings.dark_mode
        state["colors_dirty"] = True
        persist_settings(state)
        return True
    return False


def handle_main_input(key: int, state: dict) -> bool:
    if key == -1:
        return False
    if state["mode"]:
        return handle_field_input(key, state)
    state["msg"] = ""
    if handle_common_input(key, state) or state["quit"]:
        return True

    store: LocationStore = state["store"]
    if key == curses.KEY_UP:
        state["sel_idx"] = max(0, state["sel_idx"] - 1)
        return True
    if key == curses.KEY_DOWN:
        state["sel_idx"] = min(max(0, len(store) - 1), state["sel_idx"] + 1)
        return True
    if key == ord("]"):
        shift_timeline(state, SMALL_STEP)
        return True
    if key == ord("["):
        shift_timeline(state, -SMALL_STEP)
        return True
    if key == ord("}"):
        shift_timeline(state, LARGE_STEP)
        return True
    if key == ord("{"):
        shift_timeline(state, -LARGE_STEP)
        return True
    if key in (ord("n"), ord("N")):
        reset_timeline(state)
        return True
    if key in (ord("u"), ord("U")):
        move_selected(state, -1)
        return True
    if key in (ord("j"), ord("J")):
        move_selected(state, 1)
        return True
    if key in (ord("d"), ord("D"), curses.KEY_DC):
        delete_selected(state)
        return True
    if key in (ord("r"), ord("R")):
        start_field(state, "rename")
        return True
    if key in (ord("e"), ord("E")):
        start_field(state, "edit_time")
        return True
    if key in (ord("a"), ord("A")):
        open_picker(state, "locations")
        return True
    if key in (ord("g"), ord("G")):
        state["screen"] = "meeting"
        return True
    if key in (ord("p"), ord("P")):
        state["permission"].request_authorization()
        if state["permission"].permission_denied:
            state["msg"] = "Location permission is still denied."
        return True
    return False


def handle_meeting_input(key: int, state: dict) -> bool:
    if key == -1:
        return False
    state["msg"] = ""
    if handle_common_input(key, state) or state["quit"]:
        return True

    board: MeetingTimeBoard = state["board"]
    if key in (ord("g"), ord("G"), KEY_ESC):
        state["screen"] = "locations"
        return True
    if key == curses.KEY_UP:
        state["board_idx"] = max(0, state["board_idx"] - 1)
        return True
    if key == curses.KEY_DOWN:
        state["board_idx"] = min(max(0, len(board) - 1), state["board_idx"] + 1)
        return True
    steps = {ord("]"): SMALL_STEP, ord("["): -SMALL_STEP, ord("}"): LARGE_STEP, ord("{"): -LARGE_STEP}
    if key in steps:
        shift_board(state, steps[key])
        return True
    if key in (ord("n"), ord("N")):
        board.reset_to_now()
        return True
    if key in (ord("d"), ord("D"), curses.KEY_DC) and len(board):
        entry = board.remove_zone(state["board_idx"])
        state["msg"] = f"Removed {entry.name}."
        clamp_selection(state)
        return True
    if key in (ord("a"), ord("A")):
        open_picker(state, "meeting")
        return True
    if key in (ord("c"), ord("C")):
        create_meeting(state)
        return True
    return False


def handle_picker_input(key: int, state: dict) -> bool:
    if key == -1:
        return False
    if key == KEY_ESC:
        state["screen"] = state["picker_target"]
        return True
    if key == curses.KEY_UP:
        move_picker(state, -1)
        return True
    if key == curses.KEY_DOWN:
        move_picker(state, 1)
        return True
    if key == curses.KEY_PPAGE:
        move_picker(state, -PAGE_STEP)
        return True
    if key == curses.KEY_NPAGE:
        move_picker(state, PAGE_STEP)
        return True
    if key in KEY_ENTER:
        pick_city(state)
        return True
    return False


def handle_input(key: int, state: dict) -> bool:
    if state["screen"] == "meeting":
        return handle_meeting_input(key, state)
    if state["screen"] == "picker":
        return handle_picker_input(key, state)
    return handle_main_input(key, state)


# -----------------------------
# Main loop
# -----------------------------

def main(stdscr: curses.window) -> None:
    stdscr.timeout(200)
    stdscr.keypad(True)

    state = build_state(JsonFileStore())

    last_tick = 0.0
    while not state["quit"]:
        now = time.monotonic()
        key = stdscr.getch()
        changed = handle_input(key, state)
        if state["colors_dirty"]:
            init_colors(state)
        if int(now) != int(last_tick) or changed:
            last_tick = now
            if state["timeline"].is_live:
                sync_timeline(state)
            render(stdscr, state)


def configure_logging() -> None:
    path = Path(os.environ.get(APP_ENV_LOG) or Path.home() / ".pytzline.log").expanduser()
    level = os.environ.get(APP_ENV_LOG_LEVEL, "WARNING").upper()
    logging.basicConfig(
        filename=str(path),
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run() -> int:
    configure_logging()
    try:
        # Enable wide-char support in curses based on the current locale.
        try:
            locale.setlocale(locale.LC_ALL, "")
        except locale.Error:
            pass
        curses.wrapper(main)
        return 0
    except KeyboardInterrupt:
        return 0
    except Exception as exc:
        logger.exception("Fatal error")
        print(f"Fatal error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(run())
