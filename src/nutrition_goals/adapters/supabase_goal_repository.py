"""Supabase repository for goals and goal measurements."""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from supabase import AsyncClient, PostgrestAPIError

from nutrition_goals.domain.errors import (
    ActiveGoalConflictError,
    GoalNotFoundError,
    GoalReadOnlyError,
)
from nutrition_goals.domain.goal_params import parse_goal_params
from nutrition_goals.domain.goals import GoalInput, GoalMeasurement, GoalRecord
from nutrition_goals.services.goals_store import GoalRepository

_UNIQUE_VIOLATION = "23505"
_logger = logging.getLogger(__name__)


@dataclass
class SupabaseGoalRepository(GoalRepository):
    """Supabase implementation for goals."""

    client: AsyncClient

    async def list_goals(self, user_id: UUID) -> list[GoalRecord]:
        """Return all goals for a user, newest first."""
        response = (
            await self.client.table("goals")
            .select("*")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        goals: list[GoalRecord] = []
        for row in response.data or []:
            try:
                goals.append(_parse_goal(row))
            except ValueError as exc:
                _logger.warning(
                    "Skipping unreadable goal row: goal_id=%s error=%s",
                    row.get("id"),
                    exc,
                )
        return goals

    async def get_goal(self, goal_id: UUID) -> GoalRecord | None:
        """Return a goal by id."""
        response = (
            await self.client.table("goals")
            .select("*")
            .eq("id", str(goal_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_goal(response.data[0])

    async def create_goal(self, user_id: UUID, goal_input: GoalInput) -> GoalRecord:
        """Insert a goal, rejecting a second active goal of the same type."""
        if goal_input.active and await self._has_active_goal(user_id, goal_input.type):
            raise ActiveGoalConflictError(goal_input.type)
        try:
            response = (
                await self.client.table("goals")
                .insert(
                    {
                        "user_id": str(user_id),
                        "type": goal_input.type,
                        "params": goal_input.params.to_payload(),
                        "start_date": goal_input.start_date.isoformat(),
                        "end_date": goal_input.end_date.isoformat(),
                        "active": goal_input.active,
                        "status": "active",
                    }
                )
                .execute()
            )
        except PostgrestAPIError as exc:
            if exc.code == _UNIQUE_VIOLATION:
                raise ActiveGoalConflictError(goal_input.type) from exc
            raise
        if not response.data:
            raise RuntimeError("Failed to create goal")
        return _parse_goal(response.data[0])

    async def set_active_goal(self, goal_id: UUID) -> GoalRecord:
        """Activate a goal after deactivating other active goals of its type."""
        goal = await self._get_mutable(goal_id)
        await (
            self.client.table("goals")
            .update({"active": False, "updated_at": _now_iso()})
            .eq("user_id", str(goal.user_id))
            .eq("type", goal.type)
            .eq("active", True)
            .neq("id", str(goal_id))
            .execute()
        )
        return await self._update(goal_id, {"active": True, "status": "active"})

    async def deactivate_goal(self, goal_id: UUID) -> GoalRecord:
        """Deactivate a goal."""
        await self._get_mutable(goal_id)
        return await self._update(goal_id, {"active": False, "status": "deactivated"})

    async def finalize_goal_as_achieved(self, goal_id: UUID) -> GoalRecord:
        """Mark a goal as achieved."""
        return await self._update(goal_id, {"active": False, "status": "achieved"})

    async def delete_goal(self, goal_id: UUID) -> None:
        """Delete a goal."""
        await self.client.table("goals").delete().eq("id", str(goal_id)).execute()

    async def list_measurements(self, goal_id: UUID) -> list[GoalMeasurement]:
        """Return measurements for a goal ordered by date."""
        response = (
            await self.client.table("goal_measurements")
            .select("goal_id, date, value, source")
            .eq("goal_id", str(goal_id))
            .order("date", desc=False)
            .execute()
        )
        return [
            GoalMeasurement(
                goal_id=UUID(str(row["goal_id"])),
                date=str(row.get("date") or ""),
                value=row.get("value") or {},
                source=row.get("source") or "manual",
            )
            for row in response.data or []
        ]

    async def _get_mutable(self, goal_id: UUID) -> GoalRecord:
        goal = await self.get_goal(goal_id)
        if goal is None:
            raise GoalNotFoundError(goal_id)
        if goal.status == "achieved":
            raise GoalReadOnlyError(goal_id)
        return goal

    async def _has_active_goal(self, user_id: UUID, goal_type: str) -> bool:
        response = (
            await self.client.table("goals")
            .select("id")
            .eq("user_id", str(user_id))
            .eq("type", goal_type)
            .eq("active", True)
            .limit(1)
            .execute()
        )
        return bool(response.data)

    async def _update(self, goal_id: UUID, payload: dict[str, object]) -> GoalRecord:
        response = (
            await self.client.table("goals")
            .update({**payload, "updated_at": _now_iso()})
            .eq("id", str(goal_id))
            .execute()
        )
        if not response.data:
            raise GoalNotFoundError(goal_id)
        return _parse_goal(response.data[0])


def _now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


def _parse_datetime(raw: object) -> datetime | None:
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None


def _parse_goal(row: dict[str, object]) -> GoalRecord:
    goal_type = str(row["type"])
    return GoalRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        type=goal_type,  # type: ignore[arg-type]
        params=parse_goal_params(goal_type, row.get("params")),
        start_date=date.fromisoformat(str(row["start_date"])[:10]),
        end_date=date.fromisoformat(str(row["end_date"])[:10]),
        active=bool(row.get("active")),
        status=row.get("status") or "active",  # type: ignore[arg-type]
        created_at=_parse_datetime(row.get("created_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
    )
