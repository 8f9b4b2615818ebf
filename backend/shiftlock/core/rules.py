"""
Labor-agreement parameters (IDCC 16, transport sanitaire, grille 2026).

Every hour band, currency amount, meal window and tolerance used by the
calculation engine lives here. The values change yearly; override them via
``Settings.RULES`` (env ``RULES__<FIELD>``) rather than editing the engine.
"""

from pydantic import BaseModel, ConfigDict

# Minutes since midnight
_H = 60


class LaborRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Fortnight overtime bands (minutes of TTE per 14-day window)
    FORTNIGHT_BAND1_MINUTES: int = 70 * _H
    FORTNIGHT_BAND2_MINUTES: int = 86 * _H
    BAND1_MULTIPLIER: float = 1.25
    BAND2_MULTIPLIER: float = 1.50

    # Payroll estimate
    MONTHLY_BASE_HOURS: float = 151.67
    NET_RATIO: float = 0.78
    HOURLY_RATES: dict[str, float] = {"N1": 12.04, "N2": 12.16, "N3": 12.79}

    # Allowance amounts (EUR, flat per day)
    MEAL_ALLOWANCE: float = 15.54     # IR: indemnité de repas
    REDUCED_ALLOWANCE: float = 9.59   # IRU: indemnité de repas unique
    SPECIAL_ALLOWANCE: float = 4.34   # IS: indemnité spéciale

    # Allowance decision thresholds
    DINNER_CUTOFF: int = 21 * _H + 30
    NIGHT_WINDOW_START: int = 22 * _H
    NIGHT_WINDOW_END: int = 7 * _H
    NIGHT_MIN_OVERLAP: int = 4 * _H
    MEAL_WINDOWS: tuple[tuple[int, int], ...] = (
        (11 * _H, 14 * _H + 30),
        (18 * _H + 30, 22 * _H),
    )
    MEAL_BREAK_MIN_DURATION: int = 60
    MEAL_BREAK_PARTIAL_OVERLAP: int = 30
    MEAL_BREAK_FULL_OVERLAP: int = 60

    # Alerts
    MAX_AMPLITUDE: int = 12 * _H
    DAILY_REST_MIN: int = 11 * _H
    BREAK_REQUIRED_AFTER: int = 6 * _H
    BREAK_MIN_DURATION: int = 20

    # Reconciliation
    MATCH_TOLERANCE: int = 5
    MATCH_ERROR_THRESHOLD: int = 15

    def hourly_rate(self, role: str) -> float:
        """Rate for a salary grid level; unknown levels fall back to N1."""
        return self.HOURLY_RATES.get(role, self.HOURLY_RATES["N1"])


DEFAULT_RULES = LaborRules()
