"""
Payroll API routes.

Everything is recomputed from the stored day records on each request; no
derived value is persisted.
"""

from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response

from shiftlock.core.config import settings
from shiftlock.core.dependencies import get_state
from shiftlock.holidays import holidays_between, warm_cache_for_range
from shiftlock.schemas.payroll import DayAlerts, DayResult, FortnightResult, PayPeriod, PeriodSummary
from shiftlock.schemas.profile import AppState
from shiftlock.services.daily import calculate_day
from shiftlock.services.export import export_csv
from shiftlock.services.fortnight import (
    FORTNIGHT_DAYS,
    aggregate_fortnight,
    collect_alerts,
    fortnight_start_for,
)
from shiftlock.services.payroll import (
    PAY_PERIODS_2026,
    get_pay_period,
    pay_period_for_date,
    summarize_period,
)
from shiftlock.services.state import get_day

router = APIRouter()


async def _summary(pay_month: str, state: AppState) -> PeriodSummary:
    period = get_pay_period(pay_month)
    holidays: frozenset[date] = frozenset()
    if period is not None:
        await warm_cache_for_range(period.start, period.end)
        holidays = holidays_between(period.start, period.end)
    return summarize_period(
        pay_month,
        state.shifts,
        state.profile,
        rules=settings.RULES,
        public_holidays=holidays,
    )


@router.get("/day/{day}", response_model=DayResult, summary="Daily calculation")
async def day_result(day: date, state: AppState = Depends(get_state)) -> DayResult:
    await warm_cache_for_range(day, day)
    return calculate_day(get_day(state, day), settings.RULES, holidays_between(day, day))


@router.get(
    "/fortnight",
    response_model=FortnightResult,
    summary="Fortnight containing a date",
)
async def fortnight_result(
    day: date = Query(..., description="Any date inside the fortnight"),
    state: AppState = Depends(get_state),
) -> FortnightResult:
    start = fortnight_start_for(state.profile.root_date, day)
    end = start + timedelta(days=FORTNIGHT_DAYS - 1)
    return aggregate_fortnight(state.shifts, start, end, settings.RULES)


@router.get("/periods", response_model=list[PayPeriod], summary="Pay period table")
async def pay_periods() -> list[PayPeriod]:
    return list(PAY_PERIODS_2026)


@router.get("/period/{pay_month}", response_model=PeriodSummary, summary="Pay period summary")
async def period_summary(pay_month: str, state: AppState = Depends(get_state)) -> PeriodSummary:
    return await _summary(pay_month, state)


@router.get(
    "/period-of/{day}",
    response_model=PeriodSummary,
    summary="Summary of the pay period containing a date",
)
async def period_of_day(day: date, state: AppState = Depends(get_state)) -> PeriodSummary:
    period = pay_period_for_date(day)
    if period is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No pay period contains {day}",
        )
    return await _summary(period.pay_month, state)


@router.get("/period/{pay_month}/export", summary="Pay period as CSV")
async def period_export(pay_month: str, state: AppState = Depends(get_state)) -> Response:
    period = get_pay_period(pay_month)
    if period is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown pay period '{pay_month}'",
        )
    content = export_csv(state.shifts, period.start, period.end, settings.RULES)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="shiftlock-{pay_month}.csv"'},
    )


@router.get("/alerts", response_model=list[DayAlerts], summary="Alerts over a date range")
async def alerts(
    date_from: date = Query(..., description="ISO date YYYY-MM-DD"),
    date_to: date = Query(..., description="ISO date YYYY-MM-DD"),
    state: AppState = Depends(get_state),
) -> list[DayAlerts]:
    if date_to < date_from:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="date_to must not be before date_from",
        )
    return collect_alerts(state.shifts, date_from, date_to, settings.RULES)
