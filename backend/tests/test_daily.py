"""
Daily calculation tests.

Tests:
  - amplitude / TTE with midnight rollover and the TTE floor
  - allowance rules a–e and their mutual exclusivity
  - amplitude, break and daily-rest alerts
"""

from __future__ import annotations

from datetime import date

import pytest

from shiftlock.core.rules import DEFAULT_RULES
from shiftlock.schemas.shift import WorkedDay
from shiftlock.services.daily import break_alerts, calculate_day, rest_alerts
from tests.conftest import off, worked

TUESDAY = date(2026, 1, 20)
SUNDAY = date(2026, 1, 25)


class TestTimes:
    def test_twelve_hour_day_has_no_amplitude_alert(self):
        res = calculate_day(worked(TUESDAY, "07:00", "19:00"))
        assert res.amplitude == 720
        assert res.tte == 720
        assert res.alerts == []

    def test_amplitude_above_ceiling_warns(self):
        res = calculate_day(worked(TUESDAY, "07:00", "19:30"))
        assert res.amplitude == 750
        assert len(res.alerts) == 1
        assert res.alerts[0].severity == "warning"

    def test_night_shift_rolls_over(self):
        res = calculate_day(
            worked(TUESDAY, "22:00", "06:00", [("02:00", "02:30")], is_night=True)
        )
        assert res.amplitude == 480
        assert res.tte == 450
        assert res.is_night_work

    def test_pause_crossing_midnight(self):
        res = calculate_day(worked(TUESDAY, "20:00", "04:00", [("23:30", "00:30")]))
        assert res.amplitude == 480
        assert res.tte == 420

    def test_tte_never_negative(self):
        res = calculate_day(worked(TUESDAY, "08:00", "09:00", [("08:00", "10:30")]))
        assert res.amplitude == 60
        assert res.tte == 0

    def test_incomplete_pause_ignored(self):
        res = calculate_day(worked(TUESDAY, "08:00", "16:00", [("12:00", "")]))
        assert res.tte == 480

    def test_missing_end_gives_zeros(self):
        res = calculate_day(WorkedDay(date=TUESDAY, start="08:00", end=""))
        assert res.tte == 0
        assert res.amplitude == 0
        assert res.allowance == "NONE"

    @pytest.mark.parametrize("status", ["REST", "PAID_LEAVE", "SICK", "TRAINING", "HOLIDAY", "EMPTY"])
    def test_non_worked_contributes_nothing(self, status):
        res = calculate_day(off(TUESDAY, status))
        assert res.tte == 0
        assert res.allowance == "NONE"
        assert res.allowance_amount == 0
        assert res.alerts == []

    def test_sunday_and_holiday_flags(self):
        res = calculate_day(worked(SUNDAY, "08:00", "12:00"), public_holidays=frozenset({SUNDAY}))
        assert res.is_sunday
        assert res.is_public_holiday


class TestAllowance:
    def test_dinner_rule(self):
        res = calculate_day(worked(TUESDAY, "14:00", "22:00", [("18:30", "19:30")]))
        assert res.allowance == "FULL"
        assert res.meal_allowance == DEFAULT_RULES.MEAL_ALLOWANCE

    def test_dinner_rule_after_midnight_end(self):
        res = calculate_day(worked(TUESDAY, "20:00", "04:00", [("23:30", "00:30")]))
        assert res.allowance == "FULL"

    def test_night_rule(self):
        res = calculate_day(
            worked(TUESDAY, "22:00", "06:00", [("02:00", "02:30")], is_night=True)
        )
        assert res.allowance == "REDUCED"
        assert res.reduced_allowance == DEFAULT_RULES.REDUCED_ALLOWANCE
        assert res.meal_allowance == 0
        assert res.special_allowance == 0

    def test_off_site_meal_break(self):
        res = calculate_day(worked(TUESDAY, "08:00", "17:00", [("12:00", "13:00", "OFF_SITE")]))
        assert res.allowance == "FULL"

    def test_no_on_site_break(self):
        res = calculate_day(worked(TUESDAY, "08:00", "17:00"))
        assert res.allowance == "FULL"

    def test_full_meal_break_on_site(self):
        res = calculate_day(worked(TUESDAY, "08:00", "17:00", [("12:00", "13:00")]))
        assert res.allowance == "NONE"
        assert res.allowance_amount == 0

    def test_short_on_site_break(self):
        res = calculate_day(worked(TUESDAY, "08:00", "17:00", [("12:00", "12:45")]))
        assert res.allowance == "REDUCED"

    def test_break_half_inside_meal_window(self):
        res = calculate_day(worked(TUESDAY, "08:00", "17:00", [("14:00", "15:00")]))
        assert res.allowance == "SPECIAL"
        assert res.special_allowance == DEFAULT_RULES.SPECIAL_ALLOWANCE

    def test_break_outside_meal_windows(self):
        res = calculate_day(worked(TUESDAY, "08:00", "17:00", [("15:00", "16:00")]))
        assert res.allowance == "REDUCED"

    def test_late_start_is_not_dinner(self):
        # Starts after 21:30: the break sits outside both meal windows
        res = calculate_day(worked(TUESDAY, "21:45", "23:45", [("22:00", "23:00")]))
        assert res.allowance == "REDUCED"

        res = calculate_day(worked(TUESDAY, "21:00", "23:00", [("22:00", "23:00")]))
        assert res.allowance == "FULL"

    def test_early_start_counts_previous_night(self):
        res = calculate_day(worked(TUESDAY, "03:00", "11:00", is_night=True))
        assert res.is_night_work
        assert res.allowance == "REDUCED"

    def test_pause_before_start_is_next_day(self):
        res = calculate_day(worked(TUESDAY, "22:00", "06:00", [("01:00", "02:00")]))
        assert res.tte == 420
        assert res.allowance == "REDUCED"

    def test_pause_in_next_day_lunch_window(self):
        res = calculate_day(worked(TUESDAY, "21:30", "13:30", [("12:00", "13:00")]))
        assert res.tte == 900
        assert res.allowance == "NONE"

    @pytest.mark.parametrize(
        "record",
        [
            worked(TUESDAY, "14:00", "22:00"),
            worked(TUESDAY, "22:00", "06:00", [("02:00", "02:30")], is_night=True),
            worked(TUESDAY, "08:00", "17:00", [("12:00", "13:00", "OFF_SITE")]),
            worked(TUESDAY, "08:00", "17:00", [("12:00", "13:00")]),
            worked(TUESDAY, "08:00", "17:00", [("12:00", "12:45")]),
            worked(TUESDAY, "08:00", "17:00", [("14:00", "15:00")]),
        ],
    )
    def test_at_most_one_amount(self, record):
        res = calculate_day(record)
        amounts = [res.meal_allowance, res.reduced_allowance, res.special_allowance]
        assert sum(1 for a in amounts if a > 0) <= 1


class TestExtraAlerts:
    def test_long_day_without_break(self):
        record = worked(TUESDAY, "08:00", "15:00")
        alerts = break_alerts(record, calculate_day(record))
        assert len(alerts) == 1
        assert alerts[0].severity == "warning"

    def test_long_day_with_break(self):
        record = worked(TUESDAY, "08:00", "15:00", [("12:00", "12:20")])
        assert break_alerts(record, calculate_day(record)) == []

    def test_short_daily_rest(self):
        previous = worked(date(2026, 1, 20), "14:00", "23:00")
        record = worked(date(2026, 1, 21), "07:00", "15:00")
        alerts = rest_alerts(previous, record)
        assert len(alerts) == 1
        assert alerts[0].severity == "error"

    def test_sufficient_daily_rest(self):
        previous = worked(date(2026, 1, 20), "08:00", "17:00")
        record = worked(date(2026, 1, 21), "07:00", "15:00")
        assert rest_alerts(previous, record) == []

    def test_rest_day_before(self):
        assert rest_alerts(off(date(2026, 1, 20)), worked(date(2026, 1, 21), "07:00", "15:00")) == []
