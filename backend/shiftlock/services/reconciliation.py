"""
Reconciliation of self-reported days against the employer's time sheet.

Clock entries and PDF/OCR-derived times carry rounding noise, so every
comparison uses the same tolerance: a difference strictly greater than
``MATCH_TOLERANCE`` minutes is a discrepancy, and strictly greater than
``MATCH_ERROR_THRESHOLD`` makes it an error instead of a warning. Start, end
and both bounds of each pause are judged by that one rule.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Mapping, Protocol, Sequence

from shiftlock.core.rules import DEFAULT_RULES, LaborRules
from shiftlock.schemas.employer import (
    DayDiscrepancies,
    Discrepancy,
    EmployerDayRecord,
    MatchResult,
)
from shiftlock.schemas.shift import DayRecord, WorkedDay
from shiftlock.services.daily import calculate_day
from shiftlock.services.timecalc import (
    clock_distance,
    is_valid_time,
    minutes_to_time,
    time_to_minutes,
)

logger = logging.getLogger(__name__)

_DAY_NAMES = ("Lun", "Mar", "Mer", "Jeu", "Ven", "Sam", "Dim")
_NOT_ENTERED = "NON SAISI"
_DASH = "—"


class _Span(Protocol):
    start: str
    end: str


def day_label(day: date) -> str:
    """'Mar 20/01'."""
    return f"{_DAY_NAMES[day.weekday()]} {day:%d/%m}"


def _delta(a: str, b: str) -> int | None:
    if not (is_valid_time(a) and is_valid_time(b)):
        return None
    return clock_distance(time_to_minutes(a), time_to_minutes(b))


def _severity(delta: int, rules: LaborRules) -> str:
    return "error" if delta > rules.MATCH_ERROR_THRESHOLD else "warning"


def _pause_matches(a: _Span, b: _Span, tolerance: int) -> bool:
    d_start = _delta(a.start, b.start)
    d_end = _delta(a.end, b.end)
    return (
        d_start is not None
        and d_end is not None
        and d_start <= tolerance
        and d_end <= tolerance
    )


def _complete(pauses: Iterable[_Span]) -> list[_Span]:
    return [p for p in pauses if p.start and p.end]


def unmatched_pauses(
    ours: Sequence[_Span], theirs: Sequence[_Span], tolerance: int
) -> list[_Span]:
    """Complete pauses of ``ours`` with no tolerance-match in ``theirs``."""
    candidates = _complete(theirs)
    return [
        p for p in _complete(ours)
        if not any(_pause_matches(p, q, tolerance) for q in candidates)
    ]


def _fmt(p: _Span) -> str:
    return f"{p.start}–{p.end}"


def compare_day(
    mine: DayRecord | None,
    employer: EmployerDayRecord,
    rules: LaborRules = DEFAULT_RULES,
) -> list[Discrepancy]:
    """Discrepancies for one date. ``employer`` must not be an OTHER record."""
    found: list[Discrepancy] = []

    if employer.status == "REST":
        if isinstance(mine, WorkedDay):
            found.append(Discrepancy(
                kind="status",
                message="Jour déclaré REPOS par l'employeur, mais TRAVAIL saisi",
                self_value="WORKED",
                employer_value="REST",
                severity="error",
            ))
        return found

    if not isinstance(mine, WorkedDay):
        found.append(Discrepancy(
            kind="status",
            message="Journée travaillée chez l'employeur, non saisie",
            self_value=mine.status if mine is not None else _NOT_ENTERED,
            employer_value="WORKED",
            severity="error",
        ))
        return found

    for kind, label, ours, theirs in (
        ("start", "début", mine.start, employer.start),
        ("end", "fin", mine.end, employer.end),
    ):
        delta = _delta(ours, theirs)
        if delta is not None and delta > rules.MATCH_TOLERANCE:
            found.append(Discrepancy(
                kind=kind,
                message=f"Heure de {label} différente (±{delta} min)",
                self_value=ours or _DASH,
                employer_value=theirs or _DASH,
                severity=_severity(delta, rules),
            ))

    for pause in unmatched_pauses(employer.pauses, mine.pauses, rules.MATCH_TOLERANCE):
        found.append(Discrepancy(
            kind="missing_pause",
            message="Pause employeur non saisie",
            self_value=_DASH,
            employer_value=_fmt(pause),
            severity="warning",
        ))
    for pause in unmatched_pauses(mine.pauses, employer.pauses, rules.MATCH_TOLERANCE):
        found.append(Discrepancy(
            kind="extra_pause",
            message="Pause saisie absente du relevé employeur",
            self_value=_fmt(pause),
            employer_value=_DASH,
            severity="warning",
        ))

    if employer.reported_tte and is_valid_time(employer.reported_tte):
        ours_tte = calculate_day(mine, rules).tte
        theirs_tte = time_to_minutes(employer.reported_tte)
        delta = abs(ours_tte - theirs_tte)
        if delta > rules.MATCH_TOLERANCE:
            found.append(Discrepancy(
                kind="tte",
                message=f"TTE différent (±{delta} min)",
                self_value=minutes_to_time(ours_tte),
                employer_value=employer.reported_tte,
                severity="warning",
            ))

    return found


def match_shifts(
    shifts: Mapping[date, DayRecord],
    employer_days: Iterable[EmployerDayRecord],
    rules: LaborRules = DEFAULT_RULES,
) -> MatchResult:
    """
    Compare every actionable employer day with the self-reported one.

    OTHER records are skipped and not counted. A day without discrepancy is
    concordant; the others are reported grouped per date, in input order.
    """
    result = MatchResult()
    for emp in employer_days:
        if emp.status == "OTHER":
            continue
        result.total += 1
        found = compare_day(shifts.get(emp.date), emp, rules)
        if found:
            result.days.append(
                DayDiscrepancies(date=emp.date, label=day_label(emp.date), discrepancies=found)
            )
        else:
            result.concordant += 1

    logger.info(
        "Rapprochement: %d jours comparés, %d concordants, %d avec écarts",
        result.total, result.concordant, len(result.days),
    )
    return result
