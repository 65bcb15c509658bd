"""Tests for the habit document format and the load/save protocol."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest

from habitgrid.calendar_window import compute_window
from habitgrid.habits import add_habit, toggle_day
from habitgrid.models import MAX_EXTRA_WEEKS, Color, HabitCollection
from habitgrid.persistence import (
    UNNAMED_HABIT,
    collection_from_dict,
    collection_to_dict,
    load_collection,
    save_collection,
)
from habitgrid.storage import JsonFileBackend, MemoryBackend

PRIMARY = Color(70.0, 130.0, 180.0, 255.0)
NOW = int(datetime(2026, 6, 10, 12).timestamp())


def _ts(y: int, m: int, d: int, h: int = 0) -> int:
    return int(datetime(y, m, d, h).timestamp())


@pytest.fixture()
def path(tmp_path: Path) -> Path:
    return tmp_path / "habits.json"


def _sample() -> HabitCollection:
    col = HabitCollection()
    add_habit(col, PRIMARY)
    add_habit(col, Color(220.0, 20.0, 60.0, 200.0))
    col.habits[0].name = "Meditation"
    toggle_day(col.habits[0], _ts(2026, 6, 9, 8))
    toggle_day(col.habits[0], _ts(2026, 6, 10, 8))
    toggle_day(col.habits[0], _ts(2026, 6, 10, 9))
    col.active_habit_id = 1
    col.is_calendar_expanded = True
    col.extra_weeks = 4
    col.calendar_offset_weeks = 1
    return col


# ---- fallback ----


def test_load_missing_file_yields_default(path):
    col = load_collection(JsonFileBackend(path), PRIMARY)
    assert len(col.habits) == 1
    assert col.habits[0].name == "Meditation"
    assert col.habits[0].days == []
    assert col.habits[0].color == PRIMARY
    assert col.active_habit_id == 0


def test_load_missing_file_writes_default(path):
    load_collection(JsonFileBackend(path), PRIMARY)
    doc = json.loads(path.read_text())
    assert [h["name"] for h in doc["habits"]] == ["Meditation"]
    assert doc["calendar_offset_weeks"] == 0


def test_load_corrupt_file_falls_back(path):
    path.write_text("{ nope", encoding="utf-8")
    col = load_collection(JsonFileBackend(path), PRIMARY)
    assert [h.name for h in col.habits] == ["Meditation"]
    assert json.loads(path.read_text())["habits"][0]["name"] == "Meditation"


@pytest.mark.parametrize(
    "raw",
    [b'{"habits": [{"name": "Run\xff"}]}', json.dumps([{"name": "Run"}]).encode("utf-8")],
)
def test_load_unusable_file_keeps_original_bytes(path, raw):
    path.write_bytes(raw)
    col = load_collection(JsonFileBackend(path), PRIMARY)
    assert [h.name for h in col.habits] == ["Meditation"]
    backups = list(path.parent.glob("*.corrupt-*.json"))
    assert len(backups) == 1
    assert backups[0].read_bytes() == raw


def test_load_empty_habits_synthesizes_in_memory_only():
    backend = MemoryBackend({"habits": [], "active_habit_id": 3})
    col = load_collection(backend, PRIMARY)
    assert [h.name for h in col.habits] == ["Meditation"]
    assert col.active_habit_id == 0
    assert backend.saves == 0


# ---- round-trip ----


def test_roundtrip_persisted_fields(path):
    original = _sample()
    backend = JsonFileBackend(path)
    save_collection(backend, original)
    loaded = load_collection(backend, PRIMARY)

    assert collection_to_dict(loaded) == collection_to_dict(original)
    assert loaded.habits[0].days == original.habits[0].days
    assert loaded.habits[1].color == Color(220.0, 20.0, 60.0, 200.0)


def test_document_shape():
    doc = collection_to_dict(_sample())
    assert set(doc) == {"active_habit_id", "is_calendar_expanded", "extra_weeks", "calendar_offset_weeks", "habits"}
    habit = doc["habits"][0]
    assert set(habit) == {"id", "name", "color", "calendar_days"}
    assert set(habit["color"]) == {"r", "g", "b", "a"}
    assert habit["calendar_days"][1] == {"date": _ts(2026, 6, 10, 9), "completed": False}


# ---- session state on reload ----


def test_reload_keeps_live_session_fields():
    backend = MemoryBackend()
    save_collection(backend, _sample())

    live = _sample()
    live.active_habit_id = 0
    live.is_editing_new_habit = True
    live.has_done_initial_scroll = True
    handle = object()
    live.habit_name_input = handle

    col = load_collection(backend, PRIMARY, live=live)
    assert col.active_habit_id == 0
    assert col.is_editing_new_habit is True
    assert col.has_done_initial_scroll is True
    assert col.habit_name_input is handle
    # persisted fields still come from storage
    assert col.extra_weeks == 4


def test_first_load_takes_stored_active_id():
    backend = MemoryBackend()
    save_collection(backend, _sample())
    assert load_collection(backend, PRIMARY).active_habit_id == 1


# ---- defensive field parsing ----


def test_missing_calendar_offset_defaults_to_zero():
    doc = collection_to_dict(_sample())
    del doc["calendar_offset_weeks"]
    assert collection_from_dict(doc, PRIMARY).calendar_offset_weeks == 0


def test_negative_calendar_offset_clamped():
    doc = collection_to_dict(_sample())
    doc["calendar_offset_weeks"] = -3
    assert load_collection(MemoryBackend(doc), PRIMARY).calendar_offset_weeks == 0


def test_huge_extra_weeks_capped():
    doc = collection_to_dict(_sample())
    doc["is_calendar_expanded"] = True
    doc["extra_weeks"] = 10**9
    col = load_collection(MemoryBackend(doc), PRIMARY)
    assert col.extra_weeks == MAX_EXTRA_WEEKS
    assert compute_window(col, col.habits[0], NOW).total_days == 36 + MAX_EXTRA_WEEKS * 7


def test_wrong_typed_top_level_fields_keep_defaults():
    doc = {
        "active_habit_id": "1",
        "is_calendar_expanded": 1,
        "extra_weeks": "lots",
        "calendar_offset_weeks": None,
        "habits": [{"name": "Run"}],
    }
    col = collection_from_dict(doc, PRIMARY)
    assert col.active_habit_id == 0
    assert col.is_calendar_expanded is False
    assert col.extra_weeks == 0
    assert col.calendar_offset_weeks == 0
    assert [h.name for h in col.habits] == ["Run"]


def test_habits_not_a_list():
    col = load_collection(MemoryBackend({"habits": {"0": {}}}), PRIMARY)
    assert [h.name for h in col.habits] == ["Meditation"]


def test_habit_field_defaults():
    col = collection_from_dict({"habits": [{"id": "x", "name": 42}]}, PRIMARY)
    habit = col.habits[0]
    assert habit.id == 0
    assert habit.name == UNNAMED_HABIT
    assert habit.color == PRIMARY
    assert habit.days == []


def test_incomplete_color_falls_back_whole():
    raw = {"habits": [{"id": 0, "name": "Run", "color": {"r": 1, "g": 2, "b": 3}}]}
    assert collection_from_dict(raw, PRIMARY).habits[0].color == PRIMARY


def test_long_name_truncated_to_31_bytes():
    raw = {"habits": [{"id": 0, "name": "n" * 50}]}
    assert collection_from_dict(raw, PRIMARY).habits[0].name == "n" * 31


def test_days_need_both_fields():
    t1, t2, t3 = _ts(2026, 6, 1), _ts(2026, 6, 2), _ts(2026, 6, 3)
    raw = {"habits": [{"id": 0, "name": "Run", "calendar_days": [
        {"date": t1, "completed": True},
        {"date": t2},
        {"completed": True},
        {"date": t3, "completed": False},
        "junk",
    ]}]}
    days = collection_from_dict(raw, PRIMARY).habits[0].days
    assert [(d.date, d.completed) for d in days] == [(t1, True), (t3, False)]


def test_float_dates_truncated():
    t = _ts(2026, 6, 1)
    raw = {"habits": [{"id": 0, "calendar_days": [{"date": t + 0.5, "completed": True}]}]}
    assert collection_from_dict(raw, PRIMARY).habits[0].days[0].date == t


def test_duplicate_days_keep_first():
    raw = {"habits": [{"id": 0, "calendar_days": [
        {"date": _ts(2026, 6, 1, 8), "completed": True},
        {"date": _ts(2026, 6, 1, 20), "completed": False},
    ]}]}
    days = collection_from_dict(raw, PRIMARY).habits[0].days
    assert [(d.date, d.completed) for d in days] == [(_ts(2026, 6, 1, 8), True)]


def test_only_ten_habits_loaded():
    raw = {"habits": [{"id": i, "name": f"H{i}"} for i in range(14)]}
    assert len(collection_from_dict(raw, PRIMARY).habits) == 10


def test_ids_renumbered_to_positions():
    raw = {"habits": [{"id": 4, "name": "A"}, {"name": "B"}, {"id": 9, "name": "C"}]}
    col = collection_from_dict(raw, PRIMARY)
    assert [h.id for h in col.habits] == [0, 1, 2]


def test_dangling_active_id_repaired():
    raw = {"active_habit_id": 7, "habits": [{"id": 0, "name": "A"}, {"id": 1, "name": "B"}]}
    assert load_collection(MemoryBackend(raw), PRIMARY).active_habit_id == 0
