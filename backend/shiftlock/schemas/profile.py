from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

from shiftlock.core.config import settings
from shiftlock.schemas.shift import DayRecord

Role = Literal["N1", "N2", "N3"]


class Profile(BaseModel):
    first_name: str = ""
    last_name: str = ""
    company: str = ""
    role: Role = Field(default_factory=lambda: settings.DEFAULT_ROLE, validate_default=True)
    root_date: date = Field(default_factory=lambda: settings.DEFAULT_ROOT_DATE)
    weekly_base: float = 35
    money_mode_enabled: bool = False


class ProfileUpdate(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    company: str | None = None
    role: Role | None = None
    root_date: date | None = None
    weekly_base: float | None = Field(default=None, gt=0)
    money_mode_enabled: bool | None = None


class AppState(BaseModel):
    profile: Profile = Field(default_factory=Profile)
    shifts: dict[date, DayRecord] = Field(default_factory=dict)
