"""Supabase repository for daily nutrition totals and profiles."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import AsyncClient

from nutrition_goals.domain.nutrition import (
    DailyNutritionRecord,
    NutritionTotal,
    UserProfile,
)
from nutrition_goals.services.progress import NutritionRepository

_ACTIVITY_LEVELS = {"sedentary", "light", "moderate", "heavy", "athlete"}
_SEXES = {"male", "female", "other"}


@dataclass
class SupabaseNutritionRepository(NutritionRepository):
    """Supabase implementation reading the days and profiles tables."""

    client: AsyncClient

    async def list_daily_records(
        self, user_id: UUID, start: date | None = None, end: date | None = None
    ) -> list[DailyNutritionRecord]:
        """Return daily totals for a user within an inclusive date range."""
        query = (
            self.client.table("days")
            .select("date, total_calories, total_protein, total_carbs, total_fat")
            .eq("user_id", str(user_id))
        )
        if start is not None:
            query = query.gte("date", start.isoformat())
        if end is not None:
            query = query.lte("date", end.isoformat())
        response = await query.order("date", desc=False).execute()
        return [_parse_day(row) for row in response.data or []]

    async def get_user_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the user's body metrics."""
        response = (
            await self.client.table("profiles")
            .select("sex, age, height, weight, use_metric_units, activity_level")
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        sex = row.get("sex")
        activity_level = row.get("activity_level")
        age = row.get("age")
        return UserProfile(
            sex=sex if sex in _SEXES else "",
            age=str(age) if age is not None else "",
            height=str(row.get("height") or ""),
            weight=str(row.get("weight") or ""),
            use_metric_units=row.get("use_metric_units") is not False,
            activity_level=(
                activity_level if activity_level in _ACTIVITY_LEVELS else None
            ),
        )


def _parse_day(row: dict[str, object]) -> DailyNutritionRecord:
    return DailyNutritionRecord(
        date=str(row.get("date") or "")[:10],
        total=NutritionTotal(
            calories=float(row.get("total_calories") or 0.0),
            protein=float(row.get("total_protein") or 0.0),
            carbs=float(row.get("total_carbs") or 0.0),
            fat=float(row.get("total_fat") or 0.0),
        ),
    )
