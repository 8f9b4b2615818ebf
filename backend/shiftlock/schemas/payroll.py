from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

Severity = Literal["warning", "error"]
AllowanceKind = Literal["FULL", "REDUCED", "SPECIAL", "NONE"]


class Alert(BaseModel):
    severity: Severity
    message: str


class DayResult(BaseModel):
    date: date
    status: str
    amplitude: int = 0
    tte: int = 0
    allowance: AllowanceKind = "NONE"
    meal_allowance: float = 0.0
    reduced_allowance: float = 0.0
    special_allowance: float = 0.0
    alerts: list[Alert] = Field(default_factory=list)
    is_sunday: bool = False
    is_public_holiday: bool = False
    is_night_work: bool = False

    @property
    def allowance_amount(self) -> float:
        return self.meal_allowance + self.reduced_allowance + self.special_allowance


class FortnightResult(BaseModel):
    start_date: date
    end_date: date
    total_tte: int = 0
    overtime_band1: int = 0
    overtime_band2: int = 0
    total_meal: float = 0.0
    total_reduced: float = 0.0
    total_special: float = 0.0
    days_worked: int = 0
    clipped: bool = False

    @property
    def allowance_total(self) -> float:
        return round(self.total_meal + self.total_reduced + self.total_special, 2)


class PayPeriod(BaseModel):
    pay_month: str
    label: str
    start: date
    end: date


class PeriodSummary(BaseModel):
    found: bool
    pay_month: str
    label: str = ""
    start_date: date | None = None
    end_date: date | None = None
    fortnights: list[FortnightResult] = Field(default_factory=list)
    total_tte: int = 0
    total_band1: int = 0
    total_band2: int = 0
    total_allowances: float = 0.0
    base_salary: float = 0.0
    overtime_pay: float = 0.0
    gross_salary: float = 0.0
    estimated_net: float = 0.0
    days_worked: int = 0
    sundays_worked: int = 0
    holidays_worked: int = 0


class DayAlerts(BaseModel):
    date: date
    alerts: list[Alert]
