import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shiftlock.core.dependencies import get_state
from shiftlock.db.repository import save_profile
from shiftlock.db.session import get_db
from shiftlock.schemas.profile import AppState, Profile, ProfileUpdate
from shiftlock.services.state import update_profile

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=Profile, summary="Current profile")
async def get_profile(state: AppState = Depends(get_state)) -> Profile:
    return state.profile


@router.put("", response_model=Profile, summary="Update profile fields")
async def put_profile(
    body: ProfileUpdate,
    state: AppState = Depends(get_state),
    db: AsyncSession = Depends(get_db),
) -> Profile:
    new_state = update_profile(state, body)
    await save_profile(db, new_state.profile)
    logger.info(
        "Profil mis à jour: niveau=%s racine=%s",
        new_state.profile.role, new_state.profile.root_date,
    )
    return new_state.profile
