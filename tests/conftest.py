"""Shared test fixtures."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from uuid import UUID, uuid4

import pytest

from nutrition_goals.config import Settings
from nutrition_goals.domain.errors import ActiveGoalConflictError, GoalNotFoundError
from nutrition_goals.domain.goal_params import GoalParams, ProteinStreakParams
from nutrition_goals.domain.goals import (
    GoalInput,
    GoalMeasurement,
    GoalProgress,
    GoalRecord,
)
from nutrition_goals.domain.nutrition import (
    DailyNutritionRecord,
    NutritionTotal,
    UserProfile,
)
from nutrition_goals.services.goals_store import GoalRepository
from nutrition_goals.services.progress import NutritionRepository


def make_goal(  # noqa: PLR0913
    goal_type: str = "protein_streak",
    params: GoalParams | None = None,
    *,
    goal_id: UUID | None = None,
    user_id: UUID | None = None,
    active: bool = True,
    status: str = "active",
    start_date: date = date(2025, 8, 1),
    end_date: date = date(2025, 8, 31),
) -> GoalRecord:
    """Build a goal record with sensible defaults."""
    return GoalRecord(
        id=goal_id or uuid4(),
        user_id=user_id or uuid4(),
        type=goal_type,  # type: ignore[arg-type]
        params=params or ProteinStreakParams(grams_per_day=150, target_days=2),
        start_date=start_date,
        end_date=end_date,
        active=active,
        status=status,  # type: ignore[arg-type]
    )


def make_record(
    day: str,
    calories: float = 0,
    protein: float = 0,
    carbs: float = 0,
    fat: float = 0,
) -> DailyNutritionRecord:
    """Build a daily record with the given totals."""
    return DailyNutritionRecord(
        date=day,
        total=NutritionTotal(calories=calories, protein=protein, carbs=carbs, fat=fat),
    )


def make_progress(
    goal_id: UUID, percent: int = 0, achieved: bool = False
) -> GoalProgress:
    """Build a minimal progress payload."""
    return GoalProgress(
        goal_id=goal_id,
        type="protein_streak",
        percent=percent,
        achieved=achieved,
        computed_at_iso="",
    )


@dataclass
class InMemoryGoalRepository(GoalRepository):
    """In-memory goal repository recording every call."""

    goals: dict[UUID, GoalRecord] = field(default_factory=dict)
    measurements: dict[UUID, list[GoalMeasurement]] = field(default_factory=dict)
    calls: list[tuple[str, object]] = field(default_factory=list)
    fail_with: Exception | None = None

    def add(self, *goals: GoalRecord) -> None:
        for goal in goals:
            self.goals[goal.id] = goal

    def _check(self, name: str, arg: object) -> None:
        self.calls.append((name, arg))
        if self.fail_with is not None:
            raise self.fail_with

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def list_goals(self, user_id: UUID) -> list[GoalRecord]:
        self._check("list_goals", user_id)
        return list(self.goals.values())

    async def get_goal(self, goal_id: UUID) -> GoalRecord | None:
        self.calls.append(("get_goal", goal_id))
        return self.goals.get(goal_id)

    async def create_goal(self, user_id: UUID, goal_input: GoalInput) -> GoalRecord:
        self._check("create_goal", goal_input)
        if goal_input.active and any(
            goal.type == goal_input.type and goal.active
            for goal in self.goals.values()
        ):
            raise ActiveGoalConflictError(goal_input.type)
        goal = GoalRecord(
            id=uuid4(),
            user_id=user_id,
            type=goal_input.type,
            params=goal_input.params,
            start_date=goal_input.start_date,
            end_date=goal_input.end_date,
            active=goal_input.active,
            status="active",
            created_at=datetime.now(tz=UTC),
        )
        self.goals[goal.id] = goal
        return goal

    async def set_active_goal(self, goal_id: UUID) -> GoalRecord:
        self._check("set_active_goal", goal_id)
        target = self._get(goal_id)
        for goal in list(self.goals.values()):
            if goal.type == target.type and goal.active and goal.id != goal_id:
                self.goals[goal.id] = replace(goal, active=False)
        return self._update(goal_id, active=True, status="active")

    async def deactivate_goal(self, goal_id: UUID) -> GoalRecord:
        self._check("deactivate_goal", goal_id)
        return self._update(goal_id, active=False, status="deactivated")

    async def delete_goal(self, goal_id: UUID) -> None:
        self._check("delete_goal", goal_id)
        self.goals.pop(goal_id, None)

    async def finalize_goal_as_achieved(self, goal_id: UUID) -> GoalRecord:
        self._check("finalize_goal_as_achieved", goal_id)
        return self._update(goal_id, active=False, status="achieved")

    async def list_measurements(self, goal_id: UUID) -> list[GoalMeasurement]:
        return list(self.measurements.get(goal_id, []))

    def _get(self, goal_id: UUID) -> GoalRecord:
        goal = self.goals.get(goal_id)
        if goal is None:
            raise GoalNotFoundError(goal_id)
        return goal

    def _update(self, goal_id: UUID, **changes: object) -> GoalRecord:
        updated = replace(self._get(goal_id), **changes)
        self.goals[goal_id] = updated
        return updated


@dataclass
class InMemoryNutritionRepository(NutritionRepository):
    """In-memory daily records and profile."""

    records: list[DailyNutritionRecord] = field(default_factory=list)
    profile: UserProfile | None = None
    ranges: list[tuple[date | None, date | None]] = field(default_factory=list)

    async def list_daily_records(
        self, user_id: UUID, start: date | None = None, end: date | None = None
    ) -> list[DailyNutritionRecord]:
        self.ranges.append((start, end))
        return [
            record
            for record in self.records
            if (start is None or record.date >= start.isoformat())
            and (end is None or record.date <= end.isoformat())
        ]

    async def get_user_profile(self, user_id: UUID) -> UserProfile | None:
        return self.profile


@dataclass
class FakeProgressSource:
    """Progress source returning canned results and counting calls."""

    results: dict[UUID, GoalProgress | None] = field(default_factory=dict)
    calls: list[UUID] = field(default_factory=list)
    fail_with: Exception | None = None

    async def get_goal_progress(self, goal_id: UUID) -> GoalProgress | None:
        self.calls.append(goal_id)
        if self.fail_with is not None:
            raise self.fail_with
        return self.results.get(goal_id)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
    )


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def goal_repository() -> InMemoryGoalRepository:
    return InMemoryGoalRepository()


@pytest.fixture
def nutrition_repository() -> InMemoryNutritionRepository:
    return InMemoryNutritionRepository()


@pytest.fixture
def progress_source() -> FakeProgressSource:
    return FakeProgressSource()


@pytest.fixture
def male_profile() -> UserProfile:
    return UserProfile(
        sex="male",
        age="30",
        height="180",
        weight="80",
        use_metric_units=True,
        activity_level="moderate",
    )


@pytest.fixture
def package_logger() -> Iterator[logging.Logger]:
    """Yield the package logger and restore its state afterwards."""
    logger = logging.getLogger("nutrition_goals")
    saved_handlers = list(logger.handlers)
    saved_propagate = logger.propagate
    saved_level = logger.level
    yield logger
    logger.handlers[:] = saved_handlers
    logger.propagate = saved_propagate
    logger.setLevel(saved_level)
