"""
Calendar window: which days the active habit's grid shows.

    start = today - (14 + extra_weeks * 7 if expanded else 14) days
    end   = today + 21 days
    rows  = ceil((days_between(start, end) + 1) / 7), 7 columns each

extra_weeks counts up to MAX_EXTRA_WEEKS. Column 0 is start's weekday, not a
fixed weekday. Cells are walked day by day from start, so the last row can
run past ``end``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from . import dates
from .habits import is_completed
from .models import MAX_EXTRA_WEEKS, Habit, HabitCollection

LOOKBACK_DAYS = 14
LOOKAHEAD_DAYS = 21
EXPAND_STEP_WEEKS = 2


@dataclass
class CalendarCell:
    date: int
    row: int
    column: int
    day_number: int
    is_today: bool
    is_past: bool
    is_completed: bool

    @property
    def is_future(self) -> bool:
        return not (self.is_past or self.is_today)

    @property
    def is_editable(self) -> bool:
        # future days render but don't take clicks
        return self.is_past or self.is_today


@dataclass
class CalendarWindow:
    today: int
    start: int
    end: int
    total_days: int
    total_weeks: int
    rows: list[list[CalendarCell]] = field(default_factory=list)

    def cells(self) -> list[CalendarCell]:
        return [cell for row in self.rows for cell in row]

    def cell_for(self, ts: int) -> CalendarCell | None:
        target = dates.normalize(ts)
        for cell in self.cells():
            if cell.date == target:
                return cell
        return None


def lookback_days(collection: HabitCollection) -> int:
    weeks = min(max(collection.extra_weeks, 0), MAX_EXTRA_WEEKS)
    extra = weeks * 7 if collection.is_calendar_expanded else 0
    return LOOKBACK_DAYS + extra


def compute_window(collection: HabitCollection, habit: Habit | None, now: float) -> CalendarWindow:
    today = dates.normalize(now)
    start = dates.add_days(today, -lookback_days(collection))
    end = dates.add_days(today, LOOKAHEAD_DAYS)
    total_days = dates.days_between(start, end) + 1
    total_weeks = (total_days + 6) // 7

    window = CalendarWindow(
        today=today,
        start=start,
        end=end,
        total_days=total_days,
        total_weeks=total_weeks,
    )
    offset = 0
    for row in range(total_weeks):
        cells = []
        for column in range(7):
            day = dates.add_days(start, offset)
            cells.append(
                CalendarCell(
                    date=day,
                    row=row,
                    column=column,
                    day_number=dates.day_of_month(day),
                    is_today=day == today,
                    is_past=day < today,
                    is_completed=is_completed(habit, day),
                )
            )
            offset += 1
        window.rows.append(cells)
    return window


def expand(collection: HabitCollection) -> None:
    if not collection.is_calendar_expanded:
        collection.is_calendar_expanded = True
        collection.extra_weeks = EXPAND_STEP_WEEKS
    else:
        collection.extra_weeks = min(collection.extra_weeks + EXPAND_STEP_WEEKS, MAX_EXTRA_WEEKS)


def collapse(collection: HabitCollection) -> None:
    collection.is_calendar_expanded = False
    collection.extra_weeks = 0
