"""CSV rendering of a date range (one row per day), semicolon-separated."""

import logging
from datetime import date
from typing import Mapping

import pandas as pd

from shiftlock.core.rules import DEFAULT_RULES, LaborRules
from shiftlock.schemas.shift import DayRecord, WorkedDay
from shiftlock.services.daily import calculate_day
from shiftlock.services.fortnight import iter_days
from shiftlock.services.timecalc import minutes_to_duration

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ["Date", "Jour", "Statut", "Debut", "Fin", "Pauses", "TTE", "Indemnites", "Note"]

_WEEKDAYS = ("Lundi", "Mardi", "Mercredi", "Jeudi", "Vendredi", "Samedi", "Dimanche")

STATUS_LABELS: dict[str, str] = {
    "WORKED": "Travail",
    "REST": "Repos",
    "PAID_LEAVE": "Congé payé",
    "SICK": "Maladie",
    "TRAINING": "Formation",
    "HOLIDAY": "Férié",
    "EMPTY": "",
}


def export_rows(
    shifts: Mapping[date, DayRecord],
    start: date,
    end: date,
    rules: LaborRules = DEFAULT_RULES,
) -> pd.DataFrame:
    rows = []
    for day in iter_days(start, end):
        record = shifts.get(day)
        worked = isinstance(record, WorkedDay)
        res = calculate_day(record, rules) if record is not None else None
        rows.append({
            "Date": day.strftime("%d/%m/%Y"),
            "Jour": _WEEKDAYS[day.weekday()],
            "Statut": STATUS_LABELS.get(record.status, record.status) if record else "",
            "Debut": record.start if worked else "",
            "Fin": record.end if worked else "",
            "Pauses": " / ".join(
                f"{p.start}-{p.end}" for p in record.pauses if p.start and p.end
            ) if worked else "",
            "TTE": minutes_to_duration(res.tte) if res and res.tte > 0 else "",
            "Indemnites": f"{res.allowance_amount:.2f}" if res and res.allowance_amount else "",
            "Note": (record.note or "") if record else "",
        })
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def export_csv(
    shifts: Mapping[date, DayRecord],
    start: date,
    end: date,
    rules: LaborRules = DEFAULT_RULES,
) -> str:
    df = export_rows(shifts, start, end, rules)
    logger.info("Export CSV %s..%s: %d lignes", start, end, len(df))
    return df.to_csv(sep=";", index=False)
