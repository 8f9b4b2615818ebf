import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from shiftlock.core.dependencies import get_state
from shiftlock.db.repository import clear_state, save_days
from shiftlock.db.session import get_db
from shiftlock.schemas.profile import AppState
from shiftlock.schemas.shift import DayRecord, DayUpdate, ImportedDay
from shiftlock.services.fortnight import iter_days
from shiftlock.services.state import get_day, import_days, update_day

logger = logging.getLogger(__name__)

router = APIRouter()

_MAX_RANGE_DAYS = 366


class ImportResult(BaseModel):
    merged: int


@router.get("", response_model=list[DayRecord], summary="Days of a date range")
async def list_days(
    date_from: date = Query(..., description="ISO date YYYY-MM-DD"),
    date_to: date = Query(..., description="ISO date YYYY-MM-DD"),
    state: AppState = Depends(get_state),
) -> list[DayRecord]:
    if date_to < date_from:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="date_to must not be before date_from",
        )
    if (date_to - date_from).days >= _MAX_RANGE_DAYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Range is limited to {_MAX_RANGE_DAYS} days",
        )
    return [get_day(state, d) for d in iter_days(date_from, date_to)]


@router.get("/{day}", response_model=DayRecord, summary="One day")
async def read_day(day: date, state: AppState = Depends(get_state)) -> DayRecord:
    return get_day(state, day)


@router.put("/{day}", response_model=DayRecord, summary="Edit one day")
async def edit_day(
    day: date,
    body: DayUpdate,
    state: AppState = Depends(get_state),
    db: AsyncSession = Depends(get_db),
) -> DayRecord:
    new_state = update_day(state, day, body)
    record = get_day(new_state, day)
    await save_days(db, [record])
    logger.info("Jour %s enregistré: %s", day, record.status)
    return record


@router.post("/import", response_model=ImportResult, summary="Merge imported days")
async def import_shifts(
    body: list[ImportedDay],
    state: AppState = Depends(get_state),
    db: AsyncSession = Depends(get_db),
) -> ImportResult:
    new_state, merged = import_days(state, body)
    await save_days(db, [new_state.shifts[item.date] for item in body])
    return ImportResult(merged=merged)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT, summary="Erase all local data")
async def reset_all(db: AsyncSession = Depends(get_db)) -> None:
    await clear_state(db)
