"""
Pay period summary tests.

Tests:
  - pay period table lookups
  - unknown period and empty period
  - fortnights clipped to the period, overtime and money estimate
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from shiftlock.core.rules import DEFAULT_RULES
from shiftlock.schemas.profile import Profile
from shiftlock.services.payroll import (
    PAY_PERIODS_2026,
    clip_windows,
    get_pay_period,
    pay_period_for_date,
    summarize_period,
)
from tests.conftest import worked

PROFILE = Profile(role="N3", root_date=date(2026, 1, 19))


def _days(first: date, count: int, start: str, end: str) -> dict:
    return {
        first + timedelta(days=i): worked(first + timedelta(days=i), start, end)
        for i in range(count)
    }


class TestPeriods:
    def test_table_is_contiguous(self):
        for prev, nxt in zip(PAY_PERIODS_2026, PAY_PERIODS_2026[1:]):
            assert nxt.start == prev.end + timedelta(days=1)
            assert nxt.start.weekday() == 0

    def test_lookup(self):
        period = get_pay_period("2026-02")
        assert period.label == "Février"
        assert period.start == date(2026, 1, 26)
        assert period.end == date(2026, 2, 22)
        assert get_pay_period("2027-01") is None

    def test_for_date(self):
        assert pay_period_for_date(date(2026, 1, 26)).pay_month == "2026-02"
        assert pay_period_for_date(date(2025, 12, 29)).pay_month == "2026-01"

    def test_clip(self):
        windows = [(date(2026, 1, 19), date(2026, 2, 1)), (date(2026, 2, 2), date(2026, 2, 15))]
        assert clip_windows(windows, date(2026, 1, 26), date(2026, 2, 22)) == [
            (date(2026, 1, 26), date(2026, 2, 1), True),
            (date(2026, 2, 2), date(2026, 2, 15), False),
        ]


class TestSummary:
    def test_unknown_period(self):
        summary = summarize_period("2030-01", {}, PROFILE)
        assert summary.found is False
        assert summary.start_date is None
        assert summary.gross_salary == 0

    def test_no_worked_day(self):
        summary = summarize_period("2026-02", {}, PROFILE)
        assert summary.found is True
        assert summary.start_date == date(2026, 1, 26)
        assert summary.end_date == date(2026, 2, 22)
        assert summary.total_tte == 0
        assert summary.gross_salary == 0
        assert summary.estimated_net == 0

    def test_money_estimate(self):
        shifts = _days(date(2026, 2, 2), 10, "08:00", "16:00")
        # Outside the February period
        shifts.update(_days(date(2026, 1, 20), 1, "06:00", "16:00"))

        summary = summarize_period("2026-02", shifts, PROFILE)

        assert summary.found
        assert summary.total_tte == 4800
        assert summary.total_band1 == 600
        assert summary.total_band2 == 0
        assert summary.days_worked == 10
        assert summary.sundays_worked == 1
        assert summary.total_allowances == pytest.approx(155.4)

        rate = DEFAULT_RULES.hourly_rate("N3")
        base = 151.67 * rate
        overtime = 10 * rate * 1.25
        gross = base + overtime + 155.4
        assert summary.base_salary == pytest.approx(base, abs=0.01)
        assert summary.overtime_pay == pytest.approx(overtime, abs=0.01)
        assert summary.gross_salary == pytest.approx(gross, abs=0.01)
        assert summary.estimated_net == pytest.approx(gross * 0.78, abs=0.01)

    def test_second_band_paid_at_fifty_percent(self):
        # 98h over the full window 02/02–15/02
        shifts = _days(date(2026, 2, 2), 14, "08:00", "15:00")
        summary = summarize_period("2026-02", shifts, PROFILE)
        assert summary.total_tte == 5880
        assert summary.total_band1 == 960
        assert summary.total_band2 == 720

        rate = DEFAULT_RULES.hourly_rate("N3")
        assert summary.overtime_pay == pytest.approx(16 * rate * 1.25 + 12 * rate * 1.5, abs=0.01)

    def test_day_with_zero_tte_keeps_allowance(self):
        day = date(2026, 2, 3)
        shifts = {day: worked(day, "08:00", "09:00", [("08:00", "10:30")])}
        summary = summarize_period("2026-02", shifts, PROFILE)
        assert summary.total_tte == 0
        assert summary.days_worked == 1
        assert summary.total_allowances == pytest.approx(DEFAULT_RULES.REDUCED_ALLOWANCE)
        assert summary.gross_salary == pytest.approx(
            summary.base_salary + DEFAULT_RULES.REDUCED_ALLOWANCE, abs=0.01
        )

    def test_fortnights_are_clipped(self):
        summary = summarize_period("2026-02", _days(date(2026, 2, 2), 1, "08:00", "16:00"), PROFILE)
        assert [(f.start_date, f.end_date, f.clipped) for f in summary.fortnights] == [
            (date(2026, 1, 26), date(2026, 2, 1), True),
            (date(2026, 2, 2), date(2026, 2, 15), False),
            (date(2026, 2, 16), date(2026, 2, 22), True),
        ]

    def test_bands_computed_on_clipped_range(self):
        # 98h over the window 19/01–01/02, but only 49h fall in February's period
        shifts = _days(date(2026, 1, 19), 14, "08:00", "15:00")
        summary = summarize_period("2026-02", shifts, PROFILE)
        assert summary.total_tte == 7 * 420
        assert summary.total_band1 == 0
        assert summary.total_band2 == 0

    def test_role_changes_rate(self):
        shifts = _days(date(2026, 2, 2), 1, "08:00", "16:00")
        n1 = summarize_period("2026-02", shifts, PROFILE.model_copy(update={"role": "N1"}))
        n3 = summarize_period("2026-02", shifts, PROFILE)
        assert n1.base_salary < n3.base_salary

    def test_holidays_counted(self):
        day = date(2026, 5, 1)
        summary = summarize_period(
            "2026-05", _days(day, 1, "08:00", "16:00"), PROFILE, public_holidays=frozenset({day})
        )
        assert summary.holidays_worked == 1
