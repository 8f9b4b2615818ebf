"""
Employer time sheet (décompte) parser.

Two inputs are supported:

* text lines as extracted from the printed sheet, one day per line:
  ``20/01/2026 mar AR T3 07:15 11:25 12:25 18:00 10:45 100 09:45 11:25 - 12:25 / 09:55 - 10:15``
  (AR = activité réelle, RH = repos hebdomadaire);
* spreadsheet exports (.xlsx/.xls/.csv) with one row per day.

Expected spreadsheet columns (case-insensitive, any of the aliases; close
misspellings from OCR'd headers are accepted through thefuzz):
  Date / jour
  Statut / code / activité
  Heu.D / début / heure début
  Heu.F / fin / heure fin
  Pauses / coupures           (optional, "11:25 - 12:25 / 09:55 - 10:15")
  TTE / T.T.E                 (optional)
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import IO, Iterable

import pandas as pd
from pydantic import ValidationError
from thefuzz import fuzz

from shiftlock.core.config import settings
from shiftlock.schemas.employer import EmployerDayRecord, TimeRange
from shiftlock.schemas.shift import ImportedDay, Pause
from shiftlock.services.timecalc import time_to_minutes

logger = logging.getLogger(__name__)

COLUMN_ALIASES: dict[str, list[str]] = {
    "date": ["date", "jour", "journée", "day"],
    "status": ["statut", "code", "activité", "activite", "status"],
    "start": ["heu.d", "début", "debut", "heure début", "heure debut", "start"],
    "end": ["heu.f", "fin", "heure fin", "end"],
    "pauses": ["pauses", "pause", "coupures", "breaks"],
    "tte": ["tte", "t.t.e", "temps de travail effectif"],
}

_REQUIRED = ("date", "status", "start", "end")

STATUS_MAP: dict[str, str] = {
    "ar": "WORKED",
    "travail": "WORKED",
    "worked": "WORKED",
    "rh": "REST",
    "repos": "REST",
    "rest": "REST",
}

# Lignes d'en-tête et de pied de page du décompte imprimé
_SKIP_MARKERS: tuple[str, ...] = (
    "DECOMPTE", "Salarié", "Semaine", "Prévu", "Total", "AR :", "RH :",
    "Signatures", "Employeur", "permis", "atteste", "Edité",
)

_date_re = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
_time_re = re.compile(r"\b(\d{1,2}):(\d{2})\b")
_pause_re = re.compile(r"(\d{1,2}:\d{2})\s*[-–]\s*(\d{1,2}:\d{2})")
_tte_re = re.compile(r"\b100\s+(\d{1,2}:\d{2})")
_cell_time_re = re.compile(r"^\s*(\d{1,2})[:hH](\d{2})")


def normalize_time(raw: str | None) -> str:
    """'7:15', '07:15:00', '7h15' → '07:15'; anything else → ''."""
    if not raw:
        return ""
    m = _cell_time_re.match(str(raw))
    if not m:
        return ""
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        return ""
    return f"{hours:02d}:{minutes:02d}"


def parse_pause_list(raw: str) -> list[TimeRange]:
    pauses: list[TimeRange] = []
    for start, end in _pause_re.findall(raw or ""):
        ps, pe = normalize_time(start), normalize_time(end)
        if ps and pe:
            pauses.append(TimeRange(start=ps, end=pe))
    return pauses


# --- Text lines ---


def parse_employer_lines(lines: Iterable[str]) -> list[EmployerDayRecord]:
    """Parse the text lines of a printed time sheet. Lines without a date are ignored."""
    days: list[EmployerDayRecord] = []
    for line in lines:
        if any(marker in line for marker in _SKIP_MARKERS):
            continue
        dm = _date_re.search(line)
        if not dm:
            continue
        try:
            day = date(int(dm.group(3)), int(dm.group(2)), int(dm.group(1)))
        except ValueError:
            logger.debug("Date invalide ignorée: '%s'", dm.group(0))
            continue

        if " RH " in f" {line} ":
            days.append(EmployerDayRecord(date=day, status="REST"))
            continue

        if " AR " not in f" {line} ":
            days.append(EmployerDayRecord(date=day, status="OTHER"))
            continue

        times = [f"{int(h):02d}:{m}" for h, m in _time_re.findall(line)]
        times = [t for t in times if normalize_time(t)]
        if len(times) < 2:
            logger.debug("Ligne AR sans horaires exploitables: '%s'", line)
            continue

        # Heu.D [Rep.D Rep.F] Heu.F Ampl 100 TTE <pauses>
        if len(times) >= 4:
            end = times[3]
        elif len(times) == 3:
            end = times[2]
        else:
            end = times[1]

        tm = _tte_re.search(line)
        reported_tte = normalize_time(tm.group(1)) if tm else None
        pause_section = line.split(" 100 ", 1)[1] if " 100 " in line else ""

        days.append(
            EmployerDayRecord(
                date=day,
                status="WORKED",
                start=times[0],
                end=end,
                pauses=parse_pause_list(pause_section),
                reported_tte=reported_tte or None,
            )
        )

    logger.info("Décompte texte: %d jours lus", len(days))
    return days


# --- Spreadsheets ---


def _match_alias(cell: str) -> str | None:
    """Canonical column for a header cell: exact alias first, then fuzzy."""
    label = cell.lower().strip()
    if not label:
        return None
    for canonical, aliases in COLUMN_ALIASES.items():
        if label in aliases:
            return canonical

    best_score, best_col = 0, None
    for canonical, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            score = fuzz.ratio(label, alias)
            if score > best_score:
                best_score, best_col = score, canonical
    if best_score >= settings.FUZZY_MATCH_THRESHOLD:
        logger.debug("En-tête '%s' → %s (score=%d)", cell, best_col, best_score)
        return best_col
    return None


def _read(file: IO[bytes], filename: str, **kwargs) -> pd.DataFrame:
    if filename.lower().endswith(".csv"):
        return pd.read_csv(file, dtype=str, sep=None, engine="python", **kwargs)
    return pd.read_excel(file, engine="openpyxl", dtype=str, **kwargs)


def _find_header_row(file: IO[bytes], filename: str) -> int:
    """
    Scan the first 20 rows for the one with the most recognised column
    headers. Returns the 0-based index to pass as ``header=``.
    """
    try:
        head = _read(file, filename, nrows=20, header=None)
    except Exception:
        return 0
    finally:
        try:
            file.seek(0)
        except Exception:
            pass

    best_row, best_score = 0, 0
    for row_idx, row in head.iterrows():
        score = sum(
            1 for cell in row
            if isinstance(cell, str) and _match_alias(cell) is not None
        )
        if score > best_score:
            best_score = score
            best_row = int(row_idx)

    return best_row if best_score >= 2 else 0


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    rename_map: dict[str, str] = {}
    taken: set[str] = set()
    for col in df.columns:
        canonical = _match_alias(str(col))
        if canonical and canonical not in taken:
            rename_map[col] = canonical
            taken.add(canonical)
    return df.rename(columns=rename_map)


def _clean_cell(value: object) -> str:
    text = "" if value is None else str(value).strip()
    return "" if text.lower() in ("nan", "none", "nat") else text


def parse_employer_sheet(
    file: IO[bytes], filename: str = "decompte.xlsx"
) -> tuple[list[EmployerDayRecord], list[str]]:
    """Parse a spreadsheet export and return (records, error_messages)."""
    header_row = _find_header_row(file, filename)

    try:
        df = _read(file, filename, header=header_row)
    except Exception as exc:
        return [], [f"Impossible d'ouvrir le fichier : {exc}"]

    df = _normalize_columns(df)
    missing = [c for c in _REQUIRED if c not in df.columns]
    if missing:
        return [], [f"Colonnes obligatoires manquantes : {', '.join(missing)}"]

    records: list[EmployerDayRecord] = []
    errors: list[str] = []
    data_row_offset = header_row + 2

    for i, row in enumerate(df.itertuples(index=False), start=data_row_offset):
        raw_date = _clean_cell(getattr(row, "date", ""))
        raw_status = _clean_cell(getattr(row, "status", ""))
        if not raw_date and not raw_status:
            continue
        if _match_alias(raw_date) == "date":
            logger.debug("Ligne %d: en-tête répété, ignorée", i)
            continue

        try:
            stamp = pd.to_datetime(raw_date, dayfirst=True)
            if pd.isna(stamp):
                raise ValueError("empty or unparseable date")
        except Exception:
            msg = f"Ligne {i}: date invalide '{raw_date}'"
            logger.warning("Ignorée — %s", msg)
            errors.append(msg)
            continue

        status = STATUS_MAP.get(raw_status.lower(), "OTHER")
        start = normalize_time(_clean_cell(getattr(row, "start", "")))
        end = normalize_time(_clean_cell(getattr(row, "end", "")))
        if status == "WORKED" and not (start and end):
            msg = f"Ligne {i}: horaires manquants pour un jour travaillé"
            logger.warning("Ignorée — %s", msg)
            errors.append(msg)
            continue

        try:
            records.append(
                EmployerDayRecord(
                    date=stamp.date(),
                    status=status,
                    start=start if status == "WORKED" else "",
                    end=end if status == "WORKED" else "",
                    pauses=parse_pause_list(_clean_cell(getattr(row, "pauses", ""))),
                    reported_tte=normalize_time(_clean_cell(getattr(row, "tte", ""))) or None,
                )
            )
        except ValidationError as exc:
            for err in exc.errors():
                msg = f"Ligne {i}: {err['loc'][0]} — {err['msg']}"
                logger.warning("Ignorée — %s", msg)
                errors.append(msg)

    logger.info("Décompte tableur: valides=%d, erreurs=%d", len(records), len(errors))
    return records, errors


def to_imported_days(records: Iterable[EmployerDayRecord]) -> list[ImportedDay]:
    """
    Turn accepted employer days into edits of the self-reported schedule.
    Employer breaks are taken as on-site; a shift ending before it starts is
    flagged as a night shift.
    """
    out: list[ImportedDay] = []
    for rec in records:
        if rec.status == "REST":
            out.append(ImportedDay(date=rec.date, status="REST"))
        elif rec.status == "WORKED":
            out.append(
                ImportedDay(
                    date=rec.date,
                    status="WORKED",
                    start=rec.start,
                    end=rec.end,
                    pauses=[Pause(start=p.start, end=p.end, location="ON_SITE") for p in rec.pauses],
                    is_night=time_to_minutes(rec.end) < time_to_minutes(rec.start),
                )
            )
    return out
