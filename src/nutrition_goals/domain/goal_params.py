"""Pydantic models for type-specific goal parameters.

Parameters are stored as JSON on the goal row using camelCase keys, so every
field carries an alias and models accept either spelling on input.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _GoalParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    def to_payload(self) -> dict[str, object]:
        """Return the JSON payload stored on the goal row."""
        return self.model_dump(by_alias=True, exclude_none=True)


class BodyFatParams(_GoalParams):
    """Target body fat percentage."""

    target_pct: float = Field(alias="targetPct", ge=5, le=45)


class WeightParams(_GoalParams):
    """Target body weight and the direction of travel."""

    target_weight_kg: float = Field(alias="targetWeightKg", ge=30, le=300)
    direction: Literal["down", "up"] = "down"


class LeanMassGainParams(_GoalParams):
    """Desired lean mass gain."""

    target_kg: float = Field(alias="targetKg", gt=0, le=20)


class CalorieStreakParams(_GoalParams):
    """Consecutive days within a calorie range."""

    target_days: int = Field(alias="targetDays", ge=1, le=365)
    basis: Literal["recommended", "custom"] = "recommended"
    min_calories: float | None = Field(default=None, alias="minCalories", gt=0)
    max_calories: float | None = Field(default=None, alias="maxCalories", gt=0)

    @model_validator(mode="after")
    def _check_range(self) -> "CalorieStreakParams":
        if (
            self.min_calories is not None
            and self.max_calories is not None
            and self.min_calories >= self.max_calories
        ):
            raise ValueError("minCalories must be less than maxCalories")
        return self


class ProteinStreakParams(_GoalParams):
    """Consecutive days reaching a protein minimum."""

    grams_per_day: float = Field(alias="gramsPerDay", ge=30, le=400)
    target_days: int = Field(alias="targetDays", ge=1, le=365)


GoalParams = (
    BodyFatParams
    | WeightParams
    | LeanMassGainParams
    | CalorieStreakParams
    | ProteinStreakParams
)

_PARAMS_BY_TYPE: dict[str, type[_GoalParams]] = {
    "body_fat": BodyFatParams,
    "weight": WeightParams,
    "lean_mass_gain": LeanMassGainParams,
    "calorie_streak": CalorieStreakParams,
    "protein_streak": ProteinStreakParams,
}


def parse_goal_params(goal_type: str, raw: object) -> GoalParams:
    """Parse stored params for a goal type.

    Raises ``ValueError`` for an unknown goal type and pydantic's
    ``ValidationError`` for params outside the allowed ranges.
    """
    model = _PARAMS_BY_TYPE.get(goal_type)
    if model is None:
        raise ValueError(f"Unsupported goal type: {goal_type}")
    return model.model_validate(raw or {})
