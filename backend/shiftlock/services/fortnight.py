"""
Fortnight (quatorzaine) windows and overtime bands.

Windows are 14 consecutive days starting at the root Monday plus a multiple
of 14 days. Each window is sovereign: thresholds reset at its boundary and
nothing carries over to the next one.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterator, Mapping

from shiftlock.core.rules import DEFAULT_RULES, LaborRules
from shiftlock.schemas.payroll import DayAlerts, FortnightResult
from shiftlock.schemas.shift import DayRecord
from shiftlock.services.daily import break_alerts, calculate_day, has_times, rest_alerts

logger = logging.getLogger(__name__)

FORTNIGHT_DAYS = 14

Shifts = Mapping[date, DayRecord]


def iter_days(start: date, end: date) -> Iterator[date]:
    cur = start
    while cur <= end:
        yield cur
        cur += timedelta(days=1)


def anchor_monday(root: date) -> date:
    """The Monday of the root date's week."""
    return root - timedelta(days=root.weekday())


def fortnight_start_for(root: date, day: date) -> date:
    anchor = anchor_monday(root)
    offset = (day - anchor).days // FORTNIGHT_DAYS
    return anchor + timedelta(days=offset * FORTNIGHT_DAYS)


def fortnight_windows(root: date, start: date, end: date) -> list[tuple[date, date]]:
    """Every full fortnight window intersecting [start, end], in order."""
    windows: list[tuple[date, date]] = []
    if end < start:
        return windows
    cur = fortnight_start_for(root, start)
    while cur <= end:
        windows.append((cur, cur + timedelta(days=FORTNIGHT_DAYS - 1)))
        cur += timedelta(days=FORTNIGHT_DAYS)
    return windows


def overtime_bands(total_tte: int, rules: LaborRules = DEFAULT_RULES) -> tuple[int, int]:
    """(band1, band2) minutes for one fortnight's TTE."""
    t25 = rules.FORTNIGHT_BAND1_MINUTES
    t50 = rules.FORTNIGHT_BAND2_MINUTES
    band1 = max(0, min(total_tte, t50) - t25)
    band2 = max(0, total_tte - t50)
    return band1, band2


def aggregate_fortnight(
    shifts: Shifts,
    start: date,
    end: date,
    rules: LaborRules = DEFAULT_RULES,
    clipped: bool = False,
) -> FortnightResult:
    """
    Sum TTE and allowances over [start, end] (inclusive) and derive the two
    overtime bands. The range is a full window or a sub-range of one clipped
    to a pay period boundary; days absent from ``shifts`` count as zero.
    """
    if end < start:
        raise ValueError(f"Fortnight end {end} is before start {start}")
    if (end - start).days >= FORTNIGHT_DAYS:
        raise ValueError(f"Range {start}..{end} is longer than {FORTNIGHT_DAYS} days")

    result = FortnightResult(start_date=start, end_date=end, clipped=clipped)
    for day in iter_days(start, end):
        record = shifts.get(day)
        if record is None:
            continue
        res = calculate_day(record, rules)
        result.total_tte += res.tte
        result.total_meal += res.meal_allowance
        result.total_reduced += res.reduced_allowance
        result.total_special += res.special_allowance
        result.days_worked += int(has_times(record))

    result.overtime_band1, result.overtime_band2 = overtime_bands(result.total_tte, rules)
    result.total_meal = round(result.total_meal, 2)
    result.total_reduced = round(result.total_reduced, 2)
    result.total_special = round(result.total_special, 2)
    logger.debug(
        "Quatorzaine %s..%s: tte=%d hs25=%d hs50=%d",
        start, end, result.total_tte, result.overtime_band1, result.overtime_band2,
    )
    return result


def collect_alerts(
    shifts: Shifts,
    start: date,
    end: date,
    rules: LaborRules = DEFAULT_RULES,
) -> list[DayAlerts]:
    """Daily, break and rest alerts for every day in [start, end] that has any."""
    out: list[DayAlerts] = []
    for day in iter_days(start, end):
        record = shifts.get(day)
        if record is None:
            continue
        res = calculate_day(record, rules)
        alerts = list(res.alerts)
        alerts += break_alerts(record, res, rules)
        alerts += rest_alerts(shifts.get(day - timedelta(days=1)), record, rules)
        if alerts:
            out.append(DayAlerts(date=day, alerts=alerts))
    return out
