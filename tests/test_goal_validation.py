"""Tests for goal form validation."""

from datetime import date

import pytest

from nutrition_goals.domain.goal_params import (
    BodyFatParams,
    CalorieStreakParams,
    ProteinStreakParams,
    WeightParams,
)
from nutrition_goals.services.goal_validation import (
    BODY_FAT_RANGE,
    CUSTOM_CALORIES_ORDER,
    CUSTOM_CALORIES_POSITIVE,
    END_BEFORE_START,
    LEAN_GAIN_RANGE,
    MISSING_END_DATE,
    PROTEIN_RANGE,
    STREAK_DAYS_RANGE,
    UNSUPPORTED_TYPE,
    WEIGHT_RANGE,
    GoalFormFields,
    GoalInputInvalid,
    GoalInputValid,
    validate_goal_input,
)

START = "2025-08-01"
END = "2025-08-31"


def _validate(goal_type: str, **fields: str) -> GoalInputValid | GoalInputInvalid:
    return validate_goal_input(goal_type, START, END, GoalFormFields(**fields))


def test_missing_end_date_is_rejected_first() -> None:
    result = validate_goal_input("unknown", START, None, GoalFormFields())
    assert result == GoalInputInvalid(MISSING_END_DATE)
    assert result.ok is False


def test_end_before_start_is_rejected() -> None:
    result = validate_goal_input(
        "body_fat", "2025-08-10", "2025-08-09", GoalFormFields(body_fat_target_pct="15")
    )
    assert result == GoalInputInvalid(END_BEFORE_START)


def test_same_start_and_end_is_allowed() -> None:
    result = validate_goal_input(
        "body_fat", START, START, GoalFormFields(body_fat_target_pct="15")
    )
    assert isinstance(result, GoalInputValid)
    assert result.start_date == result.end_date == date(2025, 8, 1)


def test_body_fat_valid() -> None:
    result = _validate("body_fat", body_fat_target_pct="18.5")
    assert isinstance(result, GoalInputValid)
    assert result.ok is True
    assert result.params == BodyFatParams(target_pct=18.5)
    assert result.params.to_payload() == {"targetPct": 18.5}


@pytest.mark.parametrize("raw", ["4.9", "45.1", "abc", ""])
def test_body_fat_out_of_range(raw: str) -> None:
    assert _validate("body_fat", body_fat_target_pct=raw) == GoalInputInvalid(
        BODY_FAT_RANGE
    )


def test_body_fat_missing_field() -> None:
    assert _validate("body_fat") == GoalInputInvalid(BODY_FAT_RANGE)


def test_weight_defaults_direction_down() -> None:
    result = _validate("weight", weight_target_kg="75", weight_direction="sideways")
    assert isinstance(result, GoalInputValid)
    assert result.params == WeightParams(target_weight_kg=75, direction="down")


def test_weight_up_direction() -> None:
    result = _validate("weight", weight_target_kg="90", weight_direction="up")
    assert isinstance(result, GoalInputValid)
    assert result.params.to_payload() == {"targetWeightKg": 90, "direction": "up"}


@pytest.mark.parametrize("raw", ["29", "301"])
def test_weight_out_of_range(raw: str) -> None:
    assert _validate("weight", weight_target_kg=raw) == GoalInputInvalid(WEIGHT_RANGE)


@pytest.mark.parametrize("raw", ["0", "-1", "20.5"])
def test_lean_mass_gain_out_of_range(raw: str) -> None:
    assert _validate("lean_mass_gain", lean_gain_kg=raw) == GoalInputInvalid(
        LEAN_GAIN_RANGE
    )


def test_lean_mass_gain_valid() -> None:
    result = _validate("lean_mass_gain", lean_gain_kg="2.5")
    assert isinstance(result, GoalInputValid)
    assert result.params.to_payload() == {"targetKg": 2.5}


def test_calorie_streak_custom_bounds() -> None:
    result = _validate(
        "calorie_streak",
        cal_streak_days="14",
        cal_basis="custom",
        cal_min="1800",
        cal_max="2200",
    )
    assert isinstance(result, GoalInputValid)
    assert result.params.to_payload() == {
        "targetDays": 14,
        "basis": "custom",
        "minCalories": 1800,
        "maxCalories": 2200,
    }


def test_calorie_streak_custom_min_not_below_max() -> None:
    result = _validate(
        "calorie_streak",
        cal_streak_days="14",
        cal_basis="custom",
        cal_min="2200",
        cal_max="1800",
    )
    assert result == GoalInputInvalid(CUSTOM_CALORIES_ORDER)


def test_calorie_streak_custom_negative_bound() -> None:
    result = _validate(
        "calorie_streak", cal_streak_days="14", cal_basis="custom", cal_min="-5"
    )
    assert result == GoalInputInvalid(CUSTOM_CALORIES_POSITIVE)


def test_calorie_streak_custom_single_bound() -> None:
    result = _validate(
        "calorie_streak", cal_streak_days="7", cal_basis="custom", cal_max="2000"
    )
    assert isinstance(result, GoalInputValid)
    assert result.params == CalorieStreakParams(
        target_days=7, basis="custom", max_calories=2000
    )


def test_calorie_streak_recommended_ignores_bounds() -> None:
    result = _validate(
        "calorie_streak",
        cal_streak_days="10",
        cal_basis="recommended",
        cal_min="2200",
        cal_max="1800",
    )
    assert isinstance(result, GoalInputValid)
    assert result.params.to_payload() == {"targetDays": 10, "basis": "recommended"}


@pytest.mark.parametrize("raw", ["0", "366", "7.5", "", "x"])
def test_streak_days_out_of_range(raw: str) -> None:
    assert _validate("calorie_streak", cal_streak_days=raw) == GoalInputInvalid(
        STREAK_DAYS_RANGE
    )


def test_protein_streak_valid() -> None:
    result = _validate("protein_streak", protein_per_day="150", protein_days="21")
    assert isinstance(result, GoalInputValid)
    assert result.params == ProteinStreakParams(grams_per_day=150, target_days=21)


def test_protein_streak_checks_grams_before_days() -> None:
    result = _validate("protein_streak", protein_per_day="20", protein_days="0")
    assert result == GoalInputInvalid(PROTEIN_RANGE)


def test_protein_streak_days_range() -> None:
    result = _validate("protein_streak", protein_per_day="120", protein_days="400")
    assert result == GoalInputInvalid(STREAK_DAYS_RANGE)


def test_unsupported_goal_type() -> None:
    assert _validate("sleep") == GoalInputInvalid(UNSUPPORTED_TYPE)


def test_invalid_start_falls_back_to_end_date() -> None:
    result = validate_goal_input(
        "body_fat", "not-a-date", END, GoalFormFields(body_fat_target_pct="20")
    )
    assert isinstance(result, GoalInputValid)
    assert result.start_date == date(2025, 8, 31)


def test_to_goal_input_carries_dates_and_active_flag() -> None:
    result = _validate("body_fat", body_fat_target_pct="20")
    assert isinstance(result, GoalInputValid)
    goal_input = result.to_goal_input(active=False)
    assert goal_input.type == "body_fat"
    assert goal_input.start_date == date(2025, 8, 1)
    assert goal_input.end_date == date(2025, 8, 31)
    assert goal_input.active is False
