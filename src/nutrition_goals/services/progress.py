"""Goal progress computation for streak and numeric goals."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from nutrition_goals.domain.goal_params import (
    BodyFatParams,
    CalorieStreakParams,
    LeanMassGainParams,
    ProteinStreakParams,
    WeightParams,
)
from nutrition_goals.domain.goals import (
    MIN_WEEKLY_MEASUREMENTS,
    CompliancePoint,
    GoalMeasurement,
    GoalProgress,
    GoalRecord,
    StreakSnapshot,
    WeeklyAveragePoint,
)
from nutrition_goals.domain.nutrition import DailyNutritionRecord, UserProfile
from nutrition_goals.services.analytics import compute_weekly_measurement_trend
from nutrition_goals.services.goals_store import GoalRepository
from nutrition_goals.services.macros import resolve_calorie_target, round_half_up
from nutrition_goals.services.streaks import (
    RECOMMENDED_CALORIE_TOLERANCE,
    build_compliance_between,
    calorie_range_rule,
    current_streak,
    recommended_calorie_range,
)

_logger = logging.getLogger(__name__)

STREAK_HISTORY_DAYS = 30

# measurement value keys per numeric goal type, first match wins
_MEASUREMENT_KEYS = {
    "body_fat": ("bodyFatPct", "pct"),
    "weight": ("weightKg", "kg"),
    "lean_mass_gain": ("leanMassKg", "kg"),
}


class NutritionRepository(Protocol):
    """Read access to daily nutrition records and the user profile."""

    async def list_daily_records(
        self, user_id: UUID, start: date | None = None, end: date | None = None
    ) -> list[DailyNutritionRecord]:
        """Return daily records, optionally limited to an inclusive date range."""

    async def get_user_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the user's profile if one exists."""


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def resolve_streak_progress(
    goal: GoalRecord,
    history: Sequence[CompliancePoint],
    target_days: int,
    computed_at: datetime,
    history_days: int = STREAK_HISTORY_DAYS,
) -> GoalProgress:
    """Build progress for a streak goal from its day-by-day compliance."""
    current = current_streak(history)
    percent = round_half_up(_clamp01(current / max(1, target_days)) * 100)
    return GoalProgress(
        goal_id=goal.id,
        type=goal.type,
        percent=percent,
        achieved=current >= target_days,
        computed_at_iso=computed_at.isoformat(),
        streak=StreakSnapshot(
            current=current,
            target=target_days,
            history=tuple(history[-history_days:]) if history_days else (),
        ),
        label=f"{current}/{target_days} days",
    )


def resolve_numeric_progress(
    goal: GoalRecord,
    trend: Sequence[WeeklyAveragePoint],
    computed_at: datetime,
) -> GoalProgress:
    """Build progress for a numeric goal from its weekly trend.

    Progress is measured from the first week of the trend towards the target;
    an empty trend yields 0 percent.
    """
    percent, achieved, label = 0, False, ""
    if trend:
        start, current = trend[0].value, trend[-1].value
        params = goal.params
        if isinstance(params, BodyFatParams):
            raw, achieved, label = _body_fat(start, current, params.target_pct)
        elif isinstance(params, WeightParams):
            raw, achieved, label = _weight(start, current, params)
        elif isinstance(params, LeanMassGainParams):
            raw, achieved, label = _lean_mass(start, current, params.target_kg)
        else:
            raise ValueError(f"Not a numeric goal: {goal.type}")
        percent = 100 if achieved else round_half_up(_clamp01(raw) * 100)
    return GoalProgress(
        goal_id=goal.id,
        type=goal.type,
        percent=percent,
        achieved=achieved,
        computed_at_iso=computed_at.isoformat(),
        trend=tuple(trend),
        label=label,
    )


def _body_fat(start: float, current: float, target: float) -> tuple[float, bool, str]:
    label = f"{current:.1f}% → {target:.1f}%"
    if start == target:
        return 1.0, True, label
    achieved = current <= target if start > target else current >= target
    return (start - current) / (start - target), achieved, label


def _weight(
    start: float, current: float, params: WeightParams
) -> tuple[float, bool, str]:
    target = params.target_weight_kg
    denom = abs(start - target) or 1
    if params.direction == "down":
        raw, achieved, arrow = (start - current) / denom, current <= target, "↓"
    else:
        raw, achieved, arrow = (current - start) / denom, current >= target, "↑"
    return raw, achieved, f"{current:.1f}kg {arrow} {target:.1f}kg"


def _lean_mass(start: float, current: float, target: float) -> tuple[float, bool, str]:
    gained = max(0.0, current - start)
    label = f"{gained:.1f}kg / {target:.1f}kg"
    return gained / (target or 1), gained >= target, label


def measurement_value(goal_type: str, measurement: GoalMeasurement) -> float | None:
    """Extract the numeric value relevant to a goal type from a measurement."""
    for key in _MEASUREMENT_KEYS.get(goal_type, ()):
        value = measurement.value.get(key)
        if isinstance(value, int | float) and not isinstance(value, bool):
            return float(value)
    return None


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class GoalProgressService:
    """Computes goal progress locally from goals, records and measurements."""

    goal_repository: GoalRepository
    nutrition_repository: NutritionRepository
    timezone_name: str = "UTC"
    calorie_tolerance: float = RECOMMENDED_CALORIE_TOLERANCE
    history_days: int = STREAK_HISTORY_DAYS
    min_weekly_measurements: int = MIN_WEEKLY_MEASUREMENTS
    clock: Callable[[], datetime] = field(default=_utc_now)

    async def get_goal_progress(self, goal_id: UUID) -> GoalProgress | None:
        """Compute progress for a goal and finalize it when achieved."""
        goal = await self.goal_repository.get_goal(goal_id)
        if goal is None:
            return None
        if goal.is_streak:
            progress = await self._streak_progress(goal)
        else:
            progress = await self._numeric_progress(goal)

        if progress.achieved and goal.active and goal.status != "achieved":
            _logger.info("Goal achieved: goal_id=%s type=%s", goal.id, goal.type)
            await self.goal_repository.finalize_goal_as_achieved(goal.id)
        return progress

    def _now(self) -> datetime:
        return self.clock().astimezone(ZoneInfo(self.timezone_name))

    async def _streak_progress(self, goal: GoalRecord) -> GoalProgress:
        now = self._now()
        start = goal.start_date
        end = min(goal.end_date, now.date())
        records = await self.nutrition_repository.list_daily_records(
            goal.user_id, start, end
        )

        params = goal.params
        if isinstance(params, ProteinStreakParams):
            grams = params.grams_per_day
            history = build_compliance_between(
                records, start, end, lambda total: (total.protein or 0) >= grams
            )
        elif isinstance(params, CalorieStreakParams):
            rule = calorie_range_rule(*await self._calorie_bounds(goal, params))
            history = build_compliance_between(records, start, end, rule)
        else:
            raise ValueError(f"Unsupported streak goal type: {goal.type}")

        return resolve_streak_progress(
            goal, history, params.target_days, now, self.history_days
        )

    async def _calorie_bounds(
        self, goal: GoalRecord, params: CalorieStreakParams
    ) -> tuple[float | None, float | None]:
        low, high = params.min_calories, params.max_calories
        if params.basis == "recommended" and (low is None or high is None):
            profile = await self.nutrition_repository.get_user_profile(goal.user_id)
            if profile is None:
                _logger.warning(
                    "No profile for recommended calorie streak: goal_id=%s", goal.id
                )
                return None, None
            target = resolve_calorie_target(profile)
            return recommended_calorie_range(target.calories, self.calorie_tolerance)
        return low, high

    async def _numeric_progress(self, goal: GoalRecord) -> GoalProgress:
        measurements = await self.goal_repository.list_measurements(goal.id)
        values = []
        for measurement in measurements:
            value = measurement_value(goal.type, measurement)
            if value is not None:
                values.append((measurement.date, value))
        trend = compute_weekly_measurement_trend(values, self.min_weekly_measurements)
        return resolve_numeric_progress(goal, trend, self._now())
