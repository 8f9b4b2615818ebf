"""
State controller.

The whole application state is one explicit ``AppState`` value
({profile, shifts}); edits and imports return a new state instead of
mutating a shared blob. Storage is the repository's business.
"""

import logging
from datetime import date
from typing import Iterable

from pydantic import TypeAdapter

from shiftlock.schemas.profile import AppState, ProfileUpdate
from shiftlock.schemas.shift import DayRecord, DayUpdate, ImportedDay, OffDay
from shiftlock.services.timecalc import parse_quick_time

logger = logging.getLogger(__name__)

_day_adapter: TypeAdapter[DayRecord] = TypeAdapter(DayRecord)


def empty_day(day: date) -> DayRecord:
    return OffDay(date=day, status="EMPTY")


def apply_update(existing: DayRecord, update: DayUpdate) -> DayRecord:
    """
    Merge a partial edit into a day. Times go through the quick-entry parser;
    switching away from WORKED drops the clock data, switching to WORKED
    starts from blank times.
    """
    data = existing.model_dump()
    changes = update.model_dump(exclude_unset=True, exclude={"date"})
    for field in ("start", "end"):
        if field in changes and changes[field] is not None:
            changes[field] = parse_quick_time(changes[field])
    if "pauses" in changes and changes["pauses"] is not None:
        for pause in changes["pauses"]:
            pause["start"] = parse_quick_time(pause.get("start"))
            pause["end"] = parse_quick_time(pause.get("end"))
    data.update({k: v for k, v in changes.items() if v is not None})
    return _day_adapter.validate_python(data)


def get_day(state: AppState, day: date) -> DayRecord:
    return state.shifts.get(day) or empty_day(day)


def update_day(state: AppState, day: date, update: DayUpdate) -> AppState:
    shifts = dict(state.shifts)
    shifts[day] = apply_update(get_day(state, day), update)
    return state.model_copy(update={"shifts": shifts})


def import_days(state: AppState, imported: Iterable[ImportedDay]) -> tuple[AppState, int]:
    """Merge importer output into the shift map. Returns (new_state, merged_count)."""
    shifts = dict(state.shifts)
    merged = 0
    for item in imported:
        shifts[item.date] = apply_update(shifts.get(item.date) or empty_day(item.date), item)
        merged += 1
    logger.info("Import: %d jours fusionnés", merged)
    return state.model_copy(update={"shifts": shifts}), merged


def update_profile(state: AppState, update: ProfileUpdate) -> AppState:
    changes = update.model_dump(exclude_unset=True, exclude_none=True)
    profile = state.profile.model_copy(update=changes)
    return state.model_copy(update={"profile": profile})
