"""Tests for the calendar window calculator and expand/collapse controls."""

from __future__ import annotations

from datetime import date, datetime

from habitgrid import dates
from habitgrid.calendar_window import collapse, compute_window, expand
from habitgrid.habits import toggle_day
from habitgrid.models import MAX_EXTRA_WEEKS, Color, Habit, HabitCollection

# Wednesday
NOW = int(datetime(2026, 6, 10, 12, 30).timestamp())


def _ts(y: int, m: int, d: int, h: int = 0) -> int:
    return int(datetime(y, m, d, h).timestamp())


def _habit() -> Habit:
    return Habit(id=0, name="Meditation", color=Color(70.0, 130.0, 180.0))


def test_default_window_spans_36_days():
    w = compute_window(HabitCollection(), _habit(), NOW)
    assert w.total_days == 14 + 21 + 1
    assert w.start == _ts(2026, 5, 27)
    assert w.end == _ts(2026, 7, 1)
    assert w.today == _ts(2026, 6, 10)


def test_grid_shape_rounds_up_to_whole_weeks():
    w = compute_window(HabitCollection(), _habit(), NOW)
    assert w.total_weeks == 6
    assert len(w.rows) == 6
    assert all(len(r) == 7 for r in w.rows)


def test_cells_walk_day_by_day_from_start():
    w = compute_window(HabitCollection(), _habit(), NOW)
    cells = w.cells()
    for i, cell in enumerate(cells):
        assert cell.date == dates.add_days(w.start, i)
        assert cell.row == i // 7
        assert cell.column == i % 7


def test_column_zero_is_start_weekday():
    w = compute_window(HabitCollection(), _habit(), NOW)
    # 2026-05-27 is a Wednesday, so every column-0 cell is a Wednesday
    assert date(2026, 5, 27).weekday() == 2
    for row in w.rows:
        assert dates.weekday(row[0].date) == 2
        assert dates.weekday(row[6].date) == 1


def test_today_past_future_flags():
    w = compute_window(HabitCollection(), _habit(), NOW)
    today = w.cell_for(NOW)
    assert (today.row, today.column) == (2, 0)
    assert today.is_today and not today.is_past and not today.is_future
    assert w.rows[0][0].is_past and w.rows[0][0].is_editable
    assert w.rows[5][6].is_future and not w.rows[5][6].is_editable
    assert sum(c.is_today for c in w.cells()) == 1
    assert sum(c.is_past for c in w.cells()) == 14


def test_completed_flag_reflects_records():
    habit = _habit()
    toggle_day(habit, _ts(2026, 6, 8, 19))
    toggle_day(habit, _ts(2026, 6, 9, 7))
    toggle_day(habit, _ts(2026, 6, 9, 8))  # flipped back off
    w = compute_window(HabitCollection(), habit, NOW)
    done = [c.date for c in w.cells() if c.is_completed]
    assert done == [_ts(2026, 6, 8)]


def test_no_habit_means_nothing_completed():
    w = compute_window(HabitCollection(), None, NOW)
    assert not any(c.is_completed for c in w.cells())


def test_day_numbers():
    w = compute_window(HabitCollection(), _habit(), NOW)
    assert w.rows[0][0].day_number == 27
    assert w.rows[0][5].day_number == 1  # June 1


def test_expand_adds_two_weeks_of_lookback():
    col = HabitCollection()
    base = compute_window(col, _habit(), NOW)
    expand(col)
    assert col.is_calendar_expanded and col.extra_weeks == 2
    w = compute_window(col, _habit(), NOW)
    assert w.total_days == base.total_days + 14
    assert w.start == dates.add_days(base.start, -14)
    assert w.end == base.end


def test_expand_again_grows_by_two():
    col = HabitCollection()
    expand(col)
    expand(col)
    expand(col)
    assert col.extra_weeks == 6


def test_extra_weeks_ignored_when_not_expanded():
    col = HabitCollection(extra_weeks=4, is_calendar_expanded=False)
    assert compute_window(col, _habit(), NOW).total_days == 36


def test_collapse_resets():
    col = HabitCollection()
    expand(col)
    expand(col)
    collapse(col)
    assert not col.is_calendar_expanded
    assert col.extra_weeks == 0
    assert compute_window(col, _habit(), NOW).total_days == 36


def test_expand_stops_at_cap():
    col = HabitCollection(is_calendar_expanded=True, extra_weeks=MAX_EXTRA_WEEKS - 1)
    expand(col)
    assert col.extra_weeks == MAX_EXTRA_WEEKS
    expand(col)
    assert col.extra_weeks == MAX_EXTRA_WEEKS


def test_out_of_range_extra_weeks_still_renders():
    col = HabitCollection(is_calendar_expanded=True, extra_weeks=10**9)
    w = compute_window(col, _habit(), NOW)
    assert w.total_days == 36 + MAX_EXTRA_WEEKS * 7
    assert w.end == dates.add_days(dates.normalize(NOW), 21)
