from __future__ import annotations

import argparse
import os
import stat

from . import dates
from ._util import _fmt_day, _now_local
from .calendar_window import CalendarWindow
from .config import load_settings, setup_logging
from .models import MAX_CALENDAR_DAYS, MAX_HABITS, Habit
from .paths import DATA_ENV
from .safety import assert_safe_data_path
from .storage import make_backend, read_json
from .theme import PALETTE, parse_rgba
from .timeparse import parse_day
from .tracker import HabitTracker

WEEKDAY_LABELS = ("M", "T", "W", "T", "F", "S", "S")


# -------------------------
# Print blocks
# -------------------------

def _fmt_color(habit: Habit) -> str:
    c = habit.color
    return f"rgba({c.r:g}, {c.g:g}, {c.b:g}, {c.a:g})"


def _print_habit_line(habit: Habit, active: bool) -> None:
    done = sum(1 for d in habit.days if d.completed)
    marker = "▶" if active else " "
    print(f"{marker} [{habit.id}] {habit.name} — {done} done, "
          f"{len(habit.days)}/{MAX_CALENDAR_DAYS} records, {_fmt_color(habit)}")


def _cell_glyph(cell) -> str:
    if cell.is_completed:
        return "■"
    if cell.is_today:
        return "◆"
    if cell.is_past:
        return "·"
    return " "


def _print_grid(window: CalendarWindow) -> None:
    first = dates.weekday(window.start)
    labels = [WEEKDAY_LABELS[(first + i) % 7] for i in range(7)]
    print("   " + "".join(f"{lab:>4}" for lab in labels))
    for row in window.rows:
        nums = "".join(f"{c.day_number:>3}{_cell_glyph(c)}" for c in row)
        print(f"{row[0].row:>2} {nums}")
    print("\n■ done  ◆ today  · past")


def _print_block(window: CalendarWindow) -> None:
    print("```")
    for cell in window.cells():
        if cell.is_future:
            continue
        mark = "✅" if cell.is_completed else "⬜"
        suffix = " (today)" if cell.is_today else ""
        print(f"- {mark} {_fmt_day(cell.date)}{suffix}")
    print("```")


def _open(args: argparse.Namespace) -> HabitTracker:
    backend = make_backend(args.settings.backend, args.settings.data_path)
    return HabitTracker(backend, debounce_seconds=args.settings.debounce_seconds).open()


# -------------------------
# Habit commands
# -------------------------

def cmd_list(args: argparse.Namespace) -> None:
    with _open(args) as tracker:
        col = tracker.collection
        print(f"=== Habits ({len(col.habits)}/{MAX_HABITS}) ===")
        for h in col.habits:
            _print_habit_line(h, h.id == col.active_habit_id)


def cmd_show(args: argparse.Namespace) -> None:
    with _open(args) as tracker:
        habit = tracker.active_habit
        if habit is None:
            raise SystemExit("No active habit.")
        window = tracker.calendar()
        span = f"{_fmt_day(window.start)} → {_fmt_day(window.end)}"
        print(f"=== {habit.name} ({span}, {window.total_days} days) ===")
        if args.format == "block":
            _print_block(window)
        else:
            _print_grid(window)


def cmd_toggle(args: argparse.Namespace) -> None:
    ts = parse_day(args.date)
    if not dates.is_valid_timestamp(ts):
        raise SystemExit(f"Invalid date {args.date!r}: days before 1970 can't be stored.")
    if dates.normalize(ts) > dates.normalize(_now_local().timestamp()):
        raise SystemExit("Future days can't be marked yet.")
    with _open(args) as tracker:
        habit = tracker.active_habit
        if not tracker.toggle_day(ts):
            raise SystemExit(
                f"Could not toggle {_fmt_day(ts)} (day-record limit of {MAX_CALENDAR_DAYS} reached)."
            )
        state = "done ✅" if tracker.is_day_completed(ts) else "not done ⬜"
        print(f"{habit.name}: {_fmt_day(ts)} → {state}")


def cmd_add(args: argparse.Namespace) -> None:
    with _open(args) as tracker:
        habit = tracker.add_habit()
        if habit is None:
            raise SystemExit(f"Habit limit reached ({MAX_HABITS}).")
        if args.name and not tracker.rename_active_habit(args.name):
            print(f"⚠️ Name {args.name!r} rejected (empty or over 31 bytes); kept {habit.name!r}")
        print(f"➕ Added [{habit.id}] {habit.name}")


def cmd_delete(args: argparse.Namespace) -> None:
    if not args.yes:
        raise SystemExit("Refusing to delete without --yes (this removes the habit's history).")
    with _open(args) as tracker:
        habit = tracker.habit(args.id)
        if habit is None:
            raise SystemExit(f"No habit with id {args.id}.")
        name = habit.name
        tracker.delete_habit(args.id)
        print(f"🗑️ Deleted {name!r}; ids after it shifted down by one.")


def cmd_rename(args: argparse.Namespace) -> None:
    with _open(args) as tracker:
        old = tracker.active_habit.name
        if not tracker.rename_active_habit(args.name):
            raise SystemExit("Name must be non-empty and at most 31 bytes.")
        print(f"✏️ Renamed {old!r} → {args.name!r}")


def cmd_color(args: argparse.Namespace) -> None:
    with _open(args) as tracker:
        if args.palette is not None:
            ok = tracker.recolor_active_habit_from_palette(args.palette)
            if not ok:
                raise SystemExit(f"--palette must be 0–{len(PALETTE) - 1}")
        else:
            try:
                color = parse_rgba(args.rgba)
            except ValueError as e:
                raise SystemExit(f"--rgba: {e}") from e
            tracker.recolor_active_habit(color)
        print(f"🎨 {tracker.active_habit.name} → {_fmt_color(tracker.active_habit)}")


def cmd_select(args: argparse.Namespace) -> None:
    with _open(args) as tracker:
        if not tracker.set_active_habit(args.id):
            raise SystemExit(f"No habit with id {args.id}.")
        print(f"▶ Active habit: {tracker.active_habit.name}")


def cmd_expand(args: argparse.Namespace) -> None:
    with _open(args) as tracker:
        tracker.expand_calendar()
        print(f"📅 Showing {tracker.collection.extra_weeks} extra week(s) of history")


def cmd_collapse(args: argparse.Namespace) -> None:
    with _open(args) as tracker:
        tracker.collapse_calendar()
        print("📅 Back to the default two weeks of history")


# -------------------------
# Core commands
# -------------------------

def cmd_init(args: argparse.Namespace) -> None:
    with _open(args):
        pass
    print(f"✅ Initialized data file: {args.settings.data_path}")


def cmd_where(args: argparse.Namespace) -> None:
    env = os.environ.get(DATA_ENV)
    if args.data:
        reason = "because you passed --data"
    elif env:
        reason = f"because {DATA_ENV} is set"
    elif args.profile:
        reason = f"because you used --profile {args.profile!r}"
    else:
        reason = "default per-platform config location"

    print(args.settings.data_path)
    print(f"↳ using {reason}")


def cmd_doctor(args: argparse.Namespace) -> None:
    print("=== HabitGrid Doctor ===")
    path = args.settings.data_path

    assert_safe_data_path(path, args.allow_repo_data_path)
    print("✅ Data path safety guard: OK")

    if not path.exists():
        print("⚠️ Data file missing (run `hg init`)")
        print("=== Done ===")
        return

    doc = read_json(path)
    if doc is None:
        print("❌ JSON unreadable (a .corrupt-*.json backup was written if it was damaged)")
    else:
        raw_habits = doc.get("habits")
        count = len(raw_habits) if isinstance(raw_habits, list) else 0
        print(f"✅ JSON readable: OK ({count} habit(s))")
        if "calendar_offset_weeks" not in doc:
            print("ℹ️ Older file without calendar_offset_weeks (loads as 0)")

    perms = stat.S_IMODE(path.stat().st_mode)
    print(f"🔐 File permissions: {oct(perms)} (target 0o600)")
    print("=== Done ===")


def main(argv=None) -> None:
    p = argparse.ArgumentParser(prog="hg", description="HabitGrid habit calendar")
    p.add_argument("--data", default=None, help="Path to data JSON (overrides env/default)")
    p.add_argument("--profile", default=None, help="Profile name (e.g. dev/test)")
    p.add_argument("--backend", choices=["file", "memory"], default=None,
                   help="Storage backend (default: $HABITGRID_BACKEND or file)")
    p.add_argument("--allow-repo-data-path", action="store_true", help="Override safety guard (not recommended)")
    p.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")

    sub = p.add_subparsers(dest="cmd", required=True)
    sub.add_parser("init", help="Initialize data store safely").set_defaults(func=cmd_init)
    sub.add_parser("where", help="Show which data file is active and why").set_defaults(func=cmd_where)
    sub.add_parser("doctor", help="Run safety + health checks").set_defaults(func=cmd_doctor)
    sub.add_parser("list", help="List habits").set_defaults(func=cmd_list)

    show = sub.add_parser("show", help="Show the active habit's calendar")
    show.add_argument("--format", choices=["grid", "block"], default="grid")
    show.set_defaults(func=cmd_show)

    toggle = sub.add_parser("toggle", help="Toggle a day for the active habit")
    toggle.add_argument("--date", default=None, help="today, yesterday, '3 days ago', or 2026-02-25")
    toggle.set_defaults(func=cmd_toggle)

    add = sub.add_parser("add", help="Add a habit and make it active")
    add.add_argument("--name", default=None)
    add.set_defaults(func=cmd_add)

    delete = sub.add_parser("delete", help="Delete a habit (requires --yes)")
    delete.add_argument("--id", type=int, required=True)
    delete.add_argument("--yes", action="store_true", help="Confirm destructive delete")
    delete.set_defaults(func=cmd_delete)

    rename = sub.add_parser("rename", help="Rename the active habit")
    rename.add_argument("name")
    rename.set_defaults(func=cmd_rename)

    color = sub.add_parser("color", help="Recolor the active habit")
    which = color.add_mutually_exclusive_group(required=True)
    which.add_argument("--palette", type=int, default=None, help=f"Palette index 0–{len(PALETTE) - 1}")
    which.add_argument("--rgba", default=None, help="R,G,B[,A] with 0–255 channels")
    color.set_defaults(func=cmd_color)

    select = sub.add_parser("select", help="Make a habit active")
    select.add_argument("id", type=int)
    select.set_defaults(func=cmd_select)

    sub.add_parser("expand", help="Show two more weeks of history").set_defaults(func=cmd_expand)
    sub.add_parser("collapse", help="Back to two weeks of history").set_defaults(func=cmd_collapse)

    args = p.parse_args(argv)
    args.settings = load_settings(args.data, args.profile, args.backend, args.verbose)
    setup_logging(args.settings.log_level, args.settings.log_file)

    if args.settings.backend == "file":
        assert_safe_data_path(args.settings.data_path, args.allow_repo_data_path)

    args.func(args)


if __name__ == "__main__":
    main()
