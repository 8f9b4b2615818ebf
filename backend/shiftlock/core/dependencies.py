from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shiftlock.db.repository import load_state
from shiftlock.db.session import get_db
from shiftlock.schemas.profile import AppState


async def get_state(db: AsyncSession = Depends(get_db)) -> AppState:
    """The stored profile and shift map, loaded for the current request."""
    return await load_state(db)
