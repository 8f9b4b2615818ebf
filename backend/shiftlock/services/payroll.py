"""
Pay period summary.

Pay periods come from the published yearly table, which already applies the
Monday rule (a week is paid with the month of its Monday). The fortnight
windows intersecting a period are clipped to it; overtime bands are computed
on each clipped sub-range, so days outside the period never count towards
its totals.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Mapping, Sequence

from shiftlock.core.rules import DEFAULT_RULES, LaborRules
from shiftlock.schemas.payroll import FortnightResult, PayPeriod, PeriodSummary
from shiftlock.schemas.profile import Profile
from shiftlock.schemas.shift import DayRecord
from shiftlock.services.daily import calculate_day, has_times
from shiftlock.services.fortnight import aggregate_fortnight, fortnight_windows, iter_days

logger = logging.getLogger(__name__)


def _period(pay_month: str, label: str, start: str, end: str) -> PayPeriod:
    return PayPeriod(
        pay_month=pay_month,
        label=label,
        start=date.fromisoformat(start),
        end=date.fromisoformat(end),
    )


PAY_PERIODS_2026: tuple[PayPeriod, ...] = (
    _period("2026-01", "Janvier", "2025-12-29", "2026-01-25"),
    _period("2026-02", "Février", "2026-01-26", "2026-02-22"),
    _period("2026-03", "Mars", "2026-02-23", "2026-03-29"),
    _period("2026-04", "Avril", "2026-03-30", "2026-04-26"),
    _period("2026-05", "Mai", "2026-04-27", "2026-05-31"),
    _period("2026-06", "Juin", "2026-06-01", "2026-06-28"),
    _period("2026-07", "Juillet", "2026-06-29", "2026-07-26"),
    _period("2026-08", "Août", "2026-07-27", "2026-08-30"),
    _period("2026-09", "Septembre", "2026-08-31", "2026-09-27"),
    _period("2026-10", "Octobre", "2026-09-28", "2026-10-25"),
    _period("2026-11", "Novembre", "2026-10-26", "2026-11-29"),
    _period("2026-12", "Décembre", "2026-11-30", "2026-12-27"),
)


def get_pay_period(
    pay_month: str, table: Iterable[PayPeriod] = PAY_PERIODS_2026
) -> PayPeriod | None:
    return next((p for p in table if p.pay_month == pay_month), None)


def pay_period_for_date(
    day: date, table: Iterable[PayPeriod] = PAY_PERIODS_2026
) -> PayPeriod | None:
    return next((p for p in table if p.start <= day <= p.end), None)


def clip_windows(
    windows: Sequence[tuple[date, date]], start: date, end: date
) -> list[tuple[date, date, bool]]:
    """
    Intersect each window with [start, end]. Returns (from, to, clipped) for
    every window that overlaps, ``clipped`` telling whether days were cut.
    """
    out: list[tuple[date, date, bool]] = []
    for w_start, w_end in windows:
        lo, hi = max(w_start, start), min(w_end, end)
        if lo > hi:
            continue
        out.append((lo, hi, (lo, hi) != (w_start, w_end)))
    return out


def summarize_period(
    pay_month: str,
    shifts: Mapping[date, DayRecord],
    profile: Profile,
    windows: Sequence[tuple[date, date]] | None = None,
    rules: LaborRules = DEFAULT_RULES,
    table: Iterable[PayPeriod] = PAY_PERIODS_2026,
    public_holidays: frozenset[date] = frozenset(),
) -> PeriodSummary:
    """
    Aggregate a pay period and estimate its gross and net pay.

    Args:
        pay_month: Table key, "YYYY-MM".
        shifts: Self-reported days keyed by date.
        profile: Supplies the salary grid level and the fortnight root date.
        windows: Ordered fortnight boundaries; generated from
                 ``profile.root_date`` when omitted.

    Returns:
        ``found=False`` zero summary for an unknown pay month; zero amounts
        (with the period dates) when nothing was worked in the period.
    """
    period = get_pay_period(pay_month, table)
    if period is None:
        logger.info("Période de paie inconnue: %s", pay_month)
        return PeriodSummary(found=False, pay_month=pay_month)

    summary = PeriodSummary(
        found=True,
        pay_month=pay_month,
        label=period.label,
        start_date=period.start,
        end_date=period.end,
    )

    for day in iter_days(period.start, period.end):
        record = shifts.get(day)
        if record is None or not has_times(record):
            continue
        res = calculate_day(record, rules, public_holidays)
        summary.days_worked += 1
        summary.sundays_worked += int(res.is_sunday)
        summary.holidays_worked += int(res.is_public_holiday)

    if summary.days_worked == 0:
        return summary

    if windows is None:
        windows = fortnight_windows(profile.root_date, period.start, period.end)

    fortnights: list[FortnightResult] = [
        aggregate_fortnight(shifts, lo, hi, rules, clipped=clipped)
        for lo, hi, clipped in clip_windows(windows, period.start, period.end)
    ]
    summary.fortnights = fortnights
    summary.total_tte = sum(f.total_tte for f in fortnights)
    summary.total_band1 = sum(f.overtime_band1 for f in fortnights)
    summary.total_band2 = sum(f.overtime_band2 for f in fortnights)
    summary.total_allowances = round(sum(f.allowance_total for f in fortnights), 2)

    rate = rules.hourly_rate(profile.role)
    base_salary = rules.MONTHLY_BASE_HOURS * rate
    overtime_pay = (
        summary.total_band1 / 60 * rate * rules.BAND1_MULTIPLIER
        + summary.total_band2 / 60 * rate * rules.BAND2_MULTIPLIER
    )
    gross = base_salary + overtime_pay + summary.total_allowances

    summary.base_salary = round(base_salary, 2)
    summary.overtime_pay = round(overtime_pay, 2)
    summary.gross_salary = round(gross, 2)
    summary.estimated_net = round(gross * rules.NET_RATIO, 2)

    logger.info(
        "Paie %s: tte=%d hs25=%d hs50=%d brut=%.2f net=%.2f",
        pay_month, summary.total_tte, summary.total_band1, summary.total_band2,
        summary.gross_salary, summary.estimated_net,
    )
    return summary
