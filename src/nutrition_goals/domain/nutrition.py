"""Nutrition domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

Sex = Literal["male", "female", "other", ""]
ActivityLevel = Literal["sedentary", "light", "moderate", "heavy", "athlete"]
Metric = Literal["calories", "protein", "carbs", "fat"]


@dataclass(frozen=True)
class NutritionTotal:
    """Summed calories and macros."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0

    def value_of(self, metric: Metric) -> float:
        """Return the value of a single metric."""
        return float(getattr(self, metric, 0.0) or 0.0)


@dataclass(frozen=True)
class NutritionEntry:
    """A single logged food item."""

    name: str
    calories: float
    protein: float
    carbs: float
    fat: float
    logged_at: datetime | None = None


@dataclass(frozen=True)
class DailyNutritionRecord:
    """Totals and entries for one calendar date (YYYY-MM-DD)."""

    date: str
    total: NutritionTotal
    entries: tuple[NutritionEntry, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class UserProfile:
    """Body metrics used to compute ideal targets."""

    sex: Sex = ""
    age: str = ""
    height: str = ""
    weight: str = ""
    use_metric_units: bool = True
    activity_level: ActivityLevel | None = None


@dataclass(frozen=True)
class MacroSplit:
    """Macro split as percentages of calories."""

    protein: float
    carbs: float
    fat: float


@dataclass(frozen=True)
class MacroGrams:
    """Macro amounts in grams."""

    protein: float
    carbs: float
    fat: float
