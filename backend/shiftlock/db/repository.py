"""
Persistence of the application state (profile + shift map) in SQLite.

The engine only ever sees ``AppState``; rows are converted at this boundary.
"""

import logging
from typing import Iterable

from pydantic import TypeAdapter
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from shiftlock.db.models import ProfileRow, ShiftRow
from shiftlock.schemas.profile import AppState, Profile
from shiftlock.schemas.shift import DayRecord, WorkedDay

logger = logging.getLogger(__name__)

_day_adapter: TypeAdapter[DayRecord] = TypeAdapter(DayRecord)

_PROFILE_ID = 1


def _row_to_day(row: ShiftRow) -> DayRecord:
    return _day_adapter.validate_python(
        {
            "date": row.day,
            "status": row.status,
            "start": row.start,
            "end": row.end,
            "is_night": row.is_night,
            "note": row.note,
            "pauses": row.pauses or [],
        }
    )


def _day_to_row(record: DayRecord) -> ShiftRow:
    row = ShiftRow(day=record.date, status=record.status, note=record.note)
    if isinstance(record, WorkedDay):
        row.start = record.start
        row.end = record.end
        row.is_night = record.is_night
        row.pauses = [p.model_dump() for p in record.pauses]
    else:
        row.start = ""
        row.end = ""
        row.is_night = False
        row.pauses = []
    return row


async def load_state(db: AsyncSession) -> AppState:
    profile_row = await db.get(ProfileRow, _PROFILE_ID)
    profile = (
        Profile.model_validate(
            {
                "first_name": profile_row.first_name,
                "last_name": profile_row.last_name,
                "company": profile_row.company,
                "role": profile_row.role,
                "root_date": profile_row.root_date,
                "weekly_base": profile_row.weekly_base,
                "money_mode_enabled": profile_row.money_mode_enabled,
            }
        )
        if profile_row is not None
        else Profile()
    )

    result = await db.execute(select(ShiftRow).order_by(ShiftRow.day))
    shifts = {row.day: _row_to_day(row) for row in result.scalars()}
    return AppState(profile=profile, shifts=shifts)


async def save_profile(db: AsyncSession, profile: Profile) -> None:
    await db.merge(ProfileRow(id=_PROFILE_ID, **profile.model_dump()))
    await db.commit()


async def save_days(db: AsyncSession, records: Iterable[DayRecord]) -> int:
    """Upsert days. Returns the number of rows written."""
    count = 0
    for record in records:
        await db.merge(_day_to_row(record))
        count += 1
    await db.commit()
    logger.debug("Jours enregistrés: %d", count)
    return count


async def clear_state(db: AsyncSession) -> None:
    await db.execute(delete(ShiftRow))
    await db.execute(delete(ProfileRow))
    await db.commit()
    logger.info("Données locales effacées")
