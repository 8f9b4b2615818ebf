from datetime import date
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

PauseLocation = Literal["ON_SITE", "OFF_SITE", "HOME"]
OffStatus = Literal["REST", "PAID_LEAVE", "SICK", "TRAINING", "HOLIDAY", "EMPTY"]
DayStatus = Literal["WORKED", "REST", "PAID_LEAVE", "SICK", "TRAINING", "HOLIDAY", "EMPTY"]


def _strip_time(v: object) -> str:
    return "" if v is None else str(v).strip()


class Pause(BaseModel):
    start: str = ""
    end: str = ""
    location: PauseLocation = "ON_SITE"

    strip_times = field_validator("start", "end", mode="before")(_strip_time)


class WorkedDay(BaseModel):
    """A day with clock times. Times may still be blank after a partial import."""

    model_config = ConfigDict(extra="ignore")

    status: Literal["WORKED"] = "WORKED"
    date: date
    start: str = ""
    end: str = ""
    pauses: list[Pause] = Field(default_factory=list)
    is_night: bool = False
    note: str | None = None

    strip_times = field_validator("start", "end", mode="before")(_strip_time)


class OffDay(BaseModel):
    """Rest, leave, sickness, training, public holiday or not yet filled in."""

    model_config = ConfigDict(extra="ignore")

    status: OffStatus = "EMPTY"
    date: date
    note: str | None = None


DayRecord = Annotated[Union[WorkedDay, OffDay], Field(discriminator="status")]


class DayUpdate(BaseModel):
    """Partial edit of a day, as sent by the editor or an importer."""

    status: DayStatus | None = None
    start: str | None = None
    end: str | None = None
    pauses: list[Pause] | None = None
    is_night: bool | None = None
    note: str | None = None


class ImportedDay(DayUpdate):
    date: date
