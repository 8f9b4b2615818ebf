import io
import logging

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from shiftlock.core.config import settings
from shiftlock.core.dependencies import get_state
from shiftlock.db.repository import save_days
from shiftlock.db.session import get_db
from shiftlock.schemas.employer import EmployerDayRecord, EmployerImportResponse, MatchResult
from shiftlock.schemas.profile import AppState
from shiftlock.services.reconciliation import match_shifts
from shiftlock.services.state import import_days
from shiftlock.services.timesheet_parser import (
    parse_employer_lines,
    parse_employer_sheet,
    to_imported_days,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_SHEET_EXTENSIONS = {".xlsx", ".xls", ".csv"}
_TEXT_EXTENSIONS = {".txt"}


class TimesheetText(BaseModel):
    text: str


class AcceptResult(BaseModel):
    merged: int


def _file_extension(filename: str | None) -> str:
    if not filename:
        return ""
    idx = filename.rfind(".")
    return filename[idx:].lower() if idx != -1 else ""


@router.post("", response_model=MatchResult, summary="Reconcile employer day records")
async def match_records(
    body: list[EmployerDayRecord],
    state: AppState = Depends(get_state),
) -> MatchResult:
    return match_shifts(state.shifts, body, settings.RULES)


@router.post("/text", response_model=EmployerImportResponse, summary="Reconcile pasted time sheet text")
async def match_text(
    body: TimesheetText,
    state: AppState = Depends(get_state),
) -> EmployerImportResponse:
    records = parse_employer_lines(body.text.splitlines())
    return EmployerImportResponse(
        filename="",
        records=records,
        errors=[],
        match=match_shifts(state.shifts, records, settings.RULES),
    )


@router.post("/upload", response_model=EmployerImportResponse, summary="Reconcile an uploaded time sheet")
async def match_upload(
    file: UploadFile,
    state: AppState = Depends(get_state),
) -> EmployerImportResponse:
    ext = _file_extension(file.filename)
    logger.info("Décompte reçu: '%s' (extension: '%s')", file.filename, ext)

    if ext not in _SHEET_EXTENSIONS | _TEXT_EXTENSIONS:
        logger.warning("Fichier '%s' refusé: extension '%s'", file.filename, ext)
        allowed = ", ".join(sorted(_SHEET_EXTENSIONS | _TEXT_EXTENSIONS))
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type '{ext}'. Allowed: {allowed}",
        )

    content = await file.read()
    if ext in _TEXT_EXTENSIONS:
        records = parse_employer_lines(content.decode("utf-8", errors="replace").splitlines())
        errors: list[str] = []
    else:
        records, errors = parse_employer_sheet(io.BytesIO(content), file.filename or "")

    for err_msg in errors:
        logger.warning("Erreur de lecture [%s]: %s", file.filename, err_msg)

    return EmployerImportResponse(
        filename=file.filename or "",
        records=records,
        errors=errors,
        match=match_shifts(state.shifts, records, settings.RULES),
    )


@router.post("/accept", response_model=AcceptResult, summary="Copy employer days into the schedule")
async def accept_records(
    body: list[EmployerDayRecord],
    state: AppState = Depends(get_state),
    db: AsyncSession = Depends(get_db),
) -> AcceptResult:
    imported = to_imported_days(body)
    new_state, merged = import_days(state, imported)
    await save_days(db, [new_state.shifts[item.date] for item in imported])
    logger.info("Décompte accepté: %d jours repris", merged)
    return AcceptResult(merged=merged)
