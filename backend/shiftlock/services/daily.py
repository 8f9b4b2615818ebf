"""
Daily calculation: one DayRecord in, one DayResult out.

Amplitude is the span from start to end, TTE (temps de travail effectif) is
the amplitude minus breaks. The meal/night allowance is decided by an ordered
rule list where the first matching rule wins:

  a. the shift runs through 21:30                      → IR (full meal)
  b. night shift with ≥ 4h inside 22:00–07:00          → IRU (reduced)
  c. an off-site break overlaps a meal window          → IR
  d. no on-site break at all                           → IR
  e. on-site breaks: < 60 min in total                 → IRU
                     < 30 min inside meal windows      → IRU
                     < 60 min inside meal windows      → IS (special)
                     otherwise                         → nothing

Rules are mutually exclusive by construction, so at most one allowance
amount is non-zero.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterator

from shiftlock.core.rules import DEFAULT_RULES, LaborRules
from shiftlock.schemas.payroll import Alert, AllowanceKind, DayResult
from shiftlock.schemas.shift import DayRecord, WorkedDay
from shiftlock.services.timecalc import (
    MINUTES_PER_DAY,
    is_valid_time,
    minutes_to_duration,
    overlap_minutes,
    span_minutes,
    time_to_minutes,
)

logger = logging.getLogger(__name__)

_SUNDAY = 6


def has_times(record: DayRecord) -> bool:
    return (
        isinstance(record, WorkedDay)
        and is_valid_time(record.start)
        and is_valid_time(record.end)
    )


def shift_bounds(record: WorkedDay) -> tuple[int, int]:
    """(start, end) in minutes from the shift's own midnight; end may exceed 1440."""
    start = time_to_minutes(record.start)
    return start, start + span_minutes(start, time_to_minutes(record.end))


def positioned_pauses(record: WorkedDay, shift_start: int) -> Iterator[tuple[int, int, str]]:
    """
    Yield (start, end, location) of each complete pause on the shift's
    timeline. A pause clocked before the shift start belongs to the next day
    (night shift); each pause gets its own midnight rollover.
    """
    for pause in record.pauses:
        if not (is_valid_time(pause.start) and is_valid_time(pause.end)):
            continue
        p_start = time_to_minutes(pause.start)
        p_end = time_to_minutes(pause.end)
        duration = span_minutes(p_start, p_end)
        if p_start < shift_start:
            p_start += MINUTES_PER_DAY
        yield p_start, p_start + duration, pause.location


def pause_minutes(record: DayRecord) -> int:
    if not isinstance(record, WorkedDay):
        return 0
    return sum(
        span_minutes(time_to_minutes(p.start), time_to_minutes(p.end))
        for p in record.pauses
        if is_valid_time(p.start) and is_valid_time(p.end)
    )


def meal_overlap(start: int, end: int, rules: LaborRules = DEFAULT_RULES) -> int:
    """Minutes of [start, end] inside the meal windows of the shift day and the next."""
    total = 0
    for w_start, w_end in rules.MEAL_WINDOWS:
        for off in (0, MINUTES_PER_DAY):
            total += overlap_minutes(start, end, w_start + off, w_end + off)
    return total


def night_overlap(start: int, end: int, rules: LaborRules = DEFAULT_RULES) -> int:
    """Minutes of [start, end] inside 22:00–07:00, for the night before and the night after."""
    length = span_minutes(rules.NIGHT_WINDOW_START, rules.NIGHT_WINDOW_END)
    n_start = rules.NIGHT_WINDOW_START
    return sum(
        overlap_minutes(start, end, ws, ws + length)
        for ws in (n_start - MINUTES_PER_DAY, n_start)
    )


def decide_allowance(
    record: WorkedDay, rules: LaborRules = DEFAULT_RULES
) -> AllowanceKind:
    start, end = shift_bounds(record)
    pauses = list(positioned_pauses(record, start))

    # a. dinner rule
    if start < rules.DINNER_CUTOFF <= end:
        return "FULL"

    # b. night rule
    if record.is_night and night_overlap(start, end, rules) >= rules.NIGHT_MIN_OVERLAP:
        return "REDUCED"

    # c. meal taken off site
    for p_start, p_end, location in pauses:
        if location == "OFF_SITE" and meal_overlap(p_start, p_end, rules) > 0:
            return "FULL"

    on_site = [(s, e) for s, e, location in pauses if location == "ON_SITE"]

    # d. no break on the premises
    if not on_site:
        return "FULL"

    # e. on-site break duration and placement
    total_dur = sum(e - s for s, e in on_site)
    total_overlap = sum(meal_overlap(s, e, rules) for s, e in on_site)
    if total_dur < rules.MEAL_BREAK_MIN_DURATION:
        return "REDUCED"
    if total_overlap < rules.MEAL_BREAK_PARTIAL_OVERLAP:
        return "REDUCED"
    if total_overlap < rules.MEAL_BREAK_FULL_OVERLAP:
        return "SPECIAL"
    return "NONE"


def calculate_day(
    record: DayRecord,
    rules: LaborRules = DEFAULT_RULES,
    public_holidays: frozenset[date] = frozenset(),
) -> DayResult:
    result = DayResult(
        date=record.date,
        status=record.status,
        is_sunday=record.date.weekday() == _SUNDAY,
        is_public_holiday=record.date in public_holidays,
    )
    if not has_times(record):
        return result

    start, end = shift_bounds(record)
    amplitude = end - start
    result.amplitude = amplitude
    result.tte = max(0, amplitude - pause_minutes(record))
    result.is_night_work = night_overlap(start, end, rules) >= rules.NIGHT_MIN_OVERLAP

    allowance = decide_allowance(record, rules)
    result.allowance = allowance
    if allowance == "FULL":
        result.meal_allowance = rules.MEAL_ALLOWANCE
    elif allowance == "REDUCED":
        result.reduced_allowance = rules.REDUCED_ALLOWANCE
    elif allowance == "SPECIAL":
        result.special_allowance = rules.SPECIAL_ALLOWANCE

    if amplitude > rules.MAX_AMPLITUDE:
        result.alerts.append(
            Alert(
                severity="warning",
                message=f"Amplitude {minutes_to_duration(amplitude)} > "
                f"{minutes_to_duration(rules.MAX_AMPLITUDE)}",
            )
        )

    logger.debug(
        "%s: amplitude=%d tte=%d allowance=%s", record.date, amplitude, result.tte, allowance
    )
    return result


def break_alerts(
    record: DayRecord, result: DayResult, rules: LaborRules = DEFAULT_RULES
) -> list[Alert]:
    """Warn when a long day has less break time than the agreement requires."""
    if result.tte <= rules.BREAK_REQUIRED_AFTER:
        return []
    taken = pause_minutes(record)
    if taken >= rules.BREAK_MIN_DURATION:
        return []
    return [
        Alert(
            severity="warning",
            message=f"Pause {taken} min < {rules.BREAK_MIN_DURATION} min "
            f"au-delà de {minutes_to_duration(rules.BREAK_REQUIRED_AFTER)} de travail",
        )
    ]


def rest_alerts(
    previous: DayRecord | None, record: DayRecord, rules: LaborRules = DEFAULT_RULES
) -> list[Alert]:
    """
    Daily rest between the end of ``previous`` (the calendar day before) and
    the start of ``record``.
    """
    if previous is None or not (has_times(previous) and has_times(record)):
        return []
    if (record.date - previous.date).days != 1:
        return []
    _, prev_end = shift_bounds(previous)
    rest = MINUTES_PER_DAY + time_to_minutes(record.start) - prev_end
    if rest >= rules.DAILY_REST_MIN:
        return []
    return [
        Alert(
            severity="error",
            message=f"Repos quotidien {minutes_to_duration(rest)} < "
            f"{minutes_to_duration(rules.DAILY_REST_MIN)}",
        )
    ]
