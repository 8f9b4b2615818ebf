from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from shiftlock.schemas.payroll import Severity

DiscrepancyKind = Literal["start", "end", "missing_pause", "extra_pause", "status", "tte"]


class TimeRange(BaseModel):
    start: str
    end: str

    @field_validator("start", "end", mode="before")
    @classmethod
    def strip(cls, v: object) -> str:
        return "" if v is None else str(v).strip()


class EmployerDayRecord(BaseModel):
    """One line of the employer's time sheet (décompte)."""

    date: date
    status: Literal["WORKED", "REST", "OTHER"]
    start: str = ""
    end: str = ""
    pauses: list[TimeRange] = Field(default_factory=list)
    reported_tte: str | None = None


class Discrepancy(BaseModel):
    kind: DiscrepancyKind
    message: str
    self_value: str
    employer_value: str
    severity: Severity


class DayDiscrepancies(BaseModel):
    date: date
    label: str
    discrepancies: list[Discrepancy]


class MatchResult(BaseModel):
    days: list[DayDiscrepancies] = Field(default_factory=list)
    concordant: int = 0
    total: int = 0


class EmployerImportResponse(BaseModel):
    filename: str
    records: list[EmployerDayRecord]
    errors: list[str]
    match: MatchResult
