"""Validation of user-submitted goal creation fields."""

import math
from dataclasses import dataclass
from datetime import date

from nutrition_goals.domain.goal_params import (
    BodyFatParams,
    CalorieStreakParams,
    GoalParams,
    LeanMassGainParams,
    ProteinStreakParams,
    WeightParams,
)
from nutrition_goals.domain.goals import GoalInput

MISSING_END_DATE = "Let's pick an end date: choose when you want this goal to wrap up."
END_BEFORE_START = (
    "End date is before start: set an end date that's on or after today."
)
BODY_FAT_RANGE = "Choose a body fat percentage between 5% and 45%."
WEIGHT_RANGE = "Enter a weight between 30kg and 300kg."
LEAN_GAIN_RANGE = "Enter a lean mass gain between 0.5kg and 20kg."
STREAK_DAYS_RANGE = "Choose streak days between 1 and 365."
CUSTOM_CALORIES_POSITIVE = "Custom calories should be positive numbers."
CUSTOM_CALORIES_ORDER = "Make sure min calories are less than max calories."
PROTEIN_RANGE = "Set daily protein between 30g and 400g."
UNSUPPORTED_TYPE = "Unsupported goal type."


@dataclass(frozen=True)
class GoalFormFields:
    """Raw text fields collected by the goal creation form."""

    body_fat_target_pct: str | None = None
    weight_target_kg: str | None = None
    weight_direction: str | None = None
    lean_gain_kg: str | None = None
    cal_streak_days: str | None = None
    cal_basis: str | None = None
    cal_min: str | None = None
    cal_max: str | None = None
    protein_per_day: str | None = None
    protein_days: str | None = None


@dataclass(frozen=True)
class GoalInputValid:
    """Validated goal parameters."""

    goal_type: str
    params: GoalParams
    start_date: date
    end_date: date

    @property
    def ok(self) -> bool:
        return True

    def to_goal_input(self, active: bool = True) -> GoalInput:
        """Return the creation payload for the goal store."""
        return GoalInput(
            type=self.goal_type,  # type: ignore[arg-type]
            params=self.params,
            start_date=self.start_date,
            end_date=self.end_date,
            active=active,
        )


@dataclass(frozen=True)
class GoalInputInvalid:
    """A user-readable validation failure."""

    message: str

    @property
    def ok(self) -> bool:
        return False


GoalValidationResult = GoalInputValid | GoalInputInvalid


def _to_number(raw: str | None) -> float:
    if raw is None:
        return math.nan
    text = str(raw).strip()
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return math.nan


def _in_range(value: float, low: float, high: float) -> bool:
    return math.isfinite(value) and low <= value <= high


def _to_days(raw: str | None) -> int | None:
    days = _to_number(raw)
    if not _in_range(days, 1, 365) or not days.is_integer():
        return None
    return int(days)


def _parse_date(raw: str | None) -> date | None:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        return None


def validate_goal_input(
    goal_type: str,
    start_date_iso: str,
    end_date_iso: str | None,
    fields: GoalFormFields,
) -> GoalValidationResult:
    """Validate goal form fields and build the typed params for the goal type.

    Failures are returned, never raised. Checks run in order: end date present,
    end date not before start, then the per-type field ranges.
    """
    end_date = _parse_date(end_date_iso)
    if end_date is None:
        return GoalInputInvalid(MISSING_END_DATE)
    start_date = _parse_date(start_date_iso) or end_date
    if end_date < start_date:
        return GoalInputInvalid(END_BEFORE_START)

    result = _validate_params(goal_type, fields)
    if isinstance(result, GoalInputInvalid):
        return result
    return GoalInputValid(
        goal_type=goal_type, params=result, start_date=start_date, end_date=end_date
    )


def _validate_params(  # noqa: PLR0911
    goal_type: str, fields: GoalFormFields
) -> GoalParams | GoalInputInvalid:
    if goal_type == "body_fat":
        pct = _to_number(fields.body_fat_target_pct)
        if not _in_range(pct, 5, 45):
            return GoalInputInvalid(BODY_FAT_RANGE)
        return BodyFatParams(target_pct=pct)

    if goal_type == "weight":
        kg = _to_number(fields.weight_target_kg)
        if not _in_range(kg, 30, 300):
            return GoalInputInvalid(WEIGHT_RANGE)
        direction = "up" if fields.weight_direction == "up" else "down"
        return WeightParams(target_weight_kg=kg, direction=direction)

    if goal_type == "lean_mass_gain":
        gain = _to_number(fields.lean_gain_kg)
        if not math.isfinite(gain) or gain <= 0 or gain > 20:  # noqa: PLR2004
            return GoalInputInvalid(LEAN_GAIN_RANGE)
        return LeanMassGainParams(target_kg=gain)

    if goal_type == "calorie_streak":
        return _validate_calorie_streak(fields)

    if goal_type == "protein_streak":
        grams = _to_number(fields.protein_per_day)
        if not _in_range(grams, 30, 400):
            return GoalInputInvalid(PROTEIN_RANGE)
        days = _to_days(fields.protein_days)
        if days is None:
            return GoalInputInvalid(STREAK_DAYS_RANGE)
        return ProteinStreakParams(grams_per_day=grams, target_days=days)

    return GoalInputInvalid(UNSUPPORTED_TYPE)


def _validate_calorie_streak(
    fields: GoalFormFields,
) -> CalorieStreakParams | GoalInputInvalid:
    days = _to_days(fields.cal_streak_days)
    if days is None:
        return GoalInputInvalid(STREAK_DAYS_RANGE)
    if fields.cal_basis != "custom":
        return CalorieStreakParams(target_days=days, basis="recommended")

    bounds: dict[str, float] = {}
    provided = (("min_calories", fields.cal_min), ("max_calories", fields.cal_max))
    for key, raw in provided:
        if raw is None or not str(raw).strip():
            continue
        value = _to_number(raw)
        if not math.isfinite(value) or value <= 0:
            return GoalInputInvalid(CUSTOM_CALORIES_POSITIVE)
        bounds[key] = value

    if (
        "min_calories" in bounds
        and "max_calories" in bounds
        and bounds["min_calories"] >= bounds["max_calories"]
    ):
        return GoalInputInvalid(CUSTOM_CALORIES_ORDER)
    return CalorieStreakParams(target_days=days, basis="custom", **bounds)
