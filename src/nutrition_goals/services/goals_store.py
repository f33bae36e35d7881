"""In-memory goals store coordinating persistence and progress."""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from nutrition_goals.domain.errors import GoalNotFoundError, GoalReadOnlyError
from nutrition_goals.domain.goals import (
    DEFAULT_TOP_N_GOALS,
    GoalInput,
    GoalMeasurement,
    GoalProgress,
    GoalRecord,
    StreakSnapshot,
)
from nutrition_goals.services.events import (
    EventBus,
    MeasurementsChanged,
    NutritionChanged,
    Subscription,
)

_logger = logging.getLogger(__name__)


class GoalRepository(Protocol):
    """Persistence interface for goals and their measurements."""

    async def list_goals(self, user_id: UUID) -> list[GoalRecord]:
        """Return all goals of a user, newest first."""

    async def get_goal(self, goal_id: UUID) -> GoalRecord | None:
        """Return a goal by id, if present."""

    async def create_goal(self, user_id: UUID, goal_input: GoalInput) -> GoalRecord:
        """Create a goal and return the stored record."""

    async def set_active_goal(self, goal_id: UUID) -> GoalRecord:
        """Activate a goal, deactivating other active goals of its type."""

    async def deactivate_goal(self, goal_id: UUID) -> GoalRecord:
        """Deactivate a goal."""

    async def delete_goal(self, goal_id: UUID) -> None:
        """Delete a goal."""

    async def finalize_goal_as_achieved(self, goal_id: UUID) -> GoalRecord:
        """Mark a goal as achieved and inactive."""

    async def list_measurements(self, goal_id: UUID) -> list[GoalMeasurement]:
        """Return body measurements for a goal, oldest first."""


class ProgressSource(Protocol):
    """Source of computed goal progress."""

    async def get_goal_progress(self, goal_id: UUID) -> GoalProgress | None:
        """Return progress for a goal, or None when nothing can be computed."""


def partition_goals(
    goals: Iterable[GoalRecord],
) -> tuple[list[GoalRecord], list[GoalRecord]]:
    """Split goals into active ones and everything else, keeping order."""
    active: list[GoalRecord] = []
    archived: list[GoalRecord] = []
    for goal in goals:
        (active if goal.is_active else archived).append(goal)
    return active, archived


@dataclass
class GoalsStore:
    """Session-scoped goal state with active/archived partitions and progress.

    Creates and activation changes are followed by a full reload so that
    rules enforced by the persistence layer (one active goal per type) are
    reflected. Deletes patch local state without reloading.
    """

    user_id: UUID
    repository: GoalRepository
    progress_source: ProgressSource
    events: EventBus | None = None
    top_n: int = DEFAULT_TOP_N_GOALS
    goals: list[GoalRecord] = field(default_factory=list)
    archived: list[GoalRecord] = field(default_factory=list)
    progress_by_id: dict[UUID, GoalProgress | None] = field(default_factory=dict)
    is_loading: bool = False
    error: str | None = None
    _reloading_achieved: bool = field(default=False, init=False, repr=False)
    _subscriptions: list[Subscription] = field(
        default_factory=list, init=False, repr=False
    )
    _pending: set[asyncio.Task] = field(default_factory=set, init=False, repr=False)

    async def load_goals(self) -> None:
        """Fetch, partition and compute progress for active goals.

        Failures are recorded in ``error`` and leave the previous state intact.
        """
        self.is_loading = True
        self.error = None
        try:
            all_goals = await self.repository.list_goals(self.user_id)
            active, archived = partition_goals(all_goals)
            entries = await self._fetch_progress([goal.id for goal in active])
        except Exception as exc:
            _logger.exception("Failed to load goals: user_id=%s", self.user_id)
            self.error = str(exc) or "Failed to load goals"
            return
        finally:
            self.is_loading = False

        self.goals = active
        self.archived = archived
        self.progress_by_id.update(entries)
        _logger.info(
            "Loaded goals: user_id=%s active=%s archived=%s",
            self.user_id,
            len(active),
            len(archived),
        )
        await self._reload_if_achieved(entries)

    async def create_goal(self, goal_input: GoalInput) -> GoalRecord:
        """Create a goal and reload."""
        self.error = None
        created = await self.repository.create_goal(self.user_id, goal_input)
        await self.load_goals()
        return created

    async def set_active(self, goal_id: UUID) -> GoalRecord:
        """Activate a goal and reload; achieved goals are read-only."""
        self.error = None
        await self._ensure_mutable(goal_id)
        updated = await self.repository.set_active_goal(goal_id)
        await self.load_goals()
        return updated

    async def deactivate(self, goal_id: UUID) -> GoalRecord:
        """Deactivate a goal and reload; achieved goals are read-only."""
        self.error = None
        await self._ensure_mutable(goal_id)
        updated = await self.repository.deactivate_goal(goal_id)
        await self.load_goals()
        return updated

    async def delete_goal(self, goal_id: UUID) -> None:
        """Delete a goal and drop it from local state without reloading."""
        self.error = None
        await self.repository.delete_goal(goal_id)
        remaining = [goal for goal in self._all_goals() if goal.id != goal_id]
        self.goals, self.archived = partition_goals(remaining)
        self.progress_by_id.pop(goal_id, None)

    async def refresh_progress(self, goal_ids: list[UUID] | None = None) -> None:
        """Recompute progress concurrently for the given or all active goals."""
        targets = goal_ids if goal_ids is not None else [goal.id for goal in self.goals]
        if not targets:
            return
        entries = await self._fetch_progress(targets)
        self.progress_by_id.update(entries)
        await self._reload_if_achieved(entries)

    def subscribe(self) -> None:
        """Refresh progress whenever nutrition or measurement data changes."""
        if self.events is None or self._subscriptions:
            return
        self._subscriptions = [
            self.events.subscribe(NutritionChanged, self._on_data_changed),
            self.events.subscribe(MeasurementsChanged, self._on_data_changed),
        ]

    def close(self) -> None:
        """Unregister change notifications."""
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []

    async def wait_for_pending(self) -> None:
        """Wait for refreshes scheduled by change notifications."""
        while self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    def top_n_active(self, n: int | None = None) -> list[GoalRecord]:
        """Return the first ``n`` active goals in stored order."""
        return self.goals[: self.top_n if n is None else n]

    def by_type(self, goal_type: str) -> list[GoalRecord]:
        """Return active and archived goals of a type."""
        return [goal for goal in self._all_goals() if goal.type == goal_type]

    def progress_for(self, goal_id: UUID) -> GoalProgress | None:
        """Return cached progress for a goal."""
        return self.progress_by_id.get(goal_id)

    def streak_snapshot(self, goal_id: UUID) -> StreakSnapshot | None:
        """Return the cached streak snapshot for a goal."""
        progress = self.progress_by_id.get(goal_id)
        return progress.streak if progress else None

    def _all_goals(self) -> list[GoalRecord]:
        return [*self.goals, *self.archived]

    async def _fetch_progress(
        self, goal_ids: list[UUID]
    ) -> dict[UUID, GoalProgress | None]:
        results = await asyncio.gather(
            *(self.progress_source.get_goal_progress(goal_id) for goal_id in goal_ids)
        )
        return dict(zip(goal_ids, results, strict=True))

    async def _reload_if_achieved(
        self, entries: dict[UUID, GoalProgress | None]
    ) -> None:
        # one reload per achievement event; nested reloads skip reconciliation
        if self._reloading_achieved:
            return
        active_ids = {goal.id for goal in self.goals}
        achieved = [
            goal_id
            for goal_id, progress in entries.items()
            if goal_id in active_ids and progress is not None and progress.achieved
        ]
        if not achieved:
            return
        _logger.info("Reloading after achieved goals: goal_ids=%s", achieved)
        self._reloading_achieved = True
        try:
            await self.load_goals()
        finally:
            self._reloading_achieved = False

    async def _ensure_mutable(self, goal_id: UUID) -> None:
        # local copies go stale once a goal is finalized elsewhere
        goal = await self.repository.get_goal(goal_id)
        if goal is None:
            raise GoalNotFoundError(goal_id)
        if goal.status == "achieved":
            raise GoalReadOnlyError(goal_id)

    def _on_data_changed(self, event: NutritionChanged | MeasurementsChanged) -> None:
        if event.user_id is not None and event.user_id != self.user_id:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            _logger.warning(
                "No running event loop, skipping progress refresh: event=%s",
                type(event).__name__,
            )
            return
        task = loop.create_task(self.refresh_progress())
        self._pending.add(task)
        task.add_done_callback(self._on_refresh_done)

    def _on_refresh_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            _logger.error(
                "Progress refresh failed: user_id=%s",
                self.user_id,
                exc_info=task.exception(),
            )
