"""Domain models for goals and goal progress."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal
from uuid import UUID

from nutrition_goals.domain.goal_params import GoalParams

GoalType = Literal[
    "body_fat", "weight", "lean_mass_gain", "calorie_streak", "protein_streak"
]
GoalStatus = Literal["active", "deactivated", "achieved"]

GOAL_TYPES: tuple[str, ...] = (
    "body_fat",
    "weight",
    "lean_mass_gain",
    "calorie_streak",
    "protein_streak",
)
STREAK_GOAL_TYPES = frozenset({"calorie_streak", "protein_streak"})
NUMERIC_GOAL_TYPES = frozenset({"body_fat", "weight", "lean_mass_gain"})

DEFAULT_TOP_N_GOALS = 3
MIN_WEEKLY_MEASUREMENTS = 2


@dataclass(frozen=True)
class GoalRecord:
    """A goal as stored by the persistence collaborator."""

    id: UUID
    user_id: UUID
    type: GoalType
    params: GoalParams
    start_date: date
    end_date: date
    active: bool
    status: GoalStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        """Return True when the goal is both flagged active and in active status."""
        return self.active and self.status == "active"

    @property
    def is_streak(self) -> bool:
        """Return True for streak-based goal types."""
        return self.type in STREAK_GOAL_TYPES


@dataclass(frozen=True)
class GoalInput:
    """Fields required to create a goal."""

    type: GoalType
    params: GoalParams
    start_date: date
    end_date: date
    active: bool = True


@dataclass(frozen=True)
class GoalMeasurement:
    """A raw body measurement attached to a numeric goal."""

    goal_id: UUID
    date: str
    value: dict[str, object]
    source: Literal["manual", "log"] = "manual"


@dataclass(frozen=True)
class CompliancePoint:
    """Whether a single calendar day met a per-day threshold."""

    date_iso: str
    compliant: bool


@dataclass(frozen=True)
class WeeklyAveragePoint:
    """Averaged numeric value for the week starting on a Monday."""

    week_start_iso: str
    value: float


@dataclass(frozen=True)
class StreakSnapshot:
    """Current streak for a streak goal with recent history."""

    current: int
    target: int
    history: tuple[CompliancePoint, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class GoalProgress:
    """Progress derived for a goal in one computation cycle."""

    goal_id: UUID
    type: GoalType
    percent: int
    achieved: bool
    computed_at_iso: str
    streak: StreakSnapshot | None = None
    trend: tuple[WeeklyAveragePoint, ...] | None = None
    label: str | None = None
