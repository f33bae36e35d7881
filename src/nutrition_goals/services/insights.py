"""Analytics views over a user's stored nutrition data."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from uuid import UUID
from zoneinfo import ZoneInfo

from nutrition_goals.domain.nutrition import MacroSplit, Metric, UserProfile
from nutrition_goals.services.analytics import (
    DEFAULT_COMPARISON_DAYS,
    DEFAULT_TREND_WEEKS,
    ChartSeries,
    IdealComparison,
    build_ideal_comparison,
    build_trend_series,
    compute_avg_daily_macros,
)
from nutrition_goals.services.macros import (
    get_ideal_macros_for_user,
    grams_to_percents,
)
from nutrition_goals.services.progress import NutritionRepository
from nutrition_goals.services.radar import RadarSummary, build_radar_summary
from nutrition_goals.services.streaks import (
    DEFAULT_COMPLIANCE_DAYS,
    build_protein_compliance,
    to_weekly_grid,
)


@dataclass
class InsightsService:
    """Loads a user's records and runs the aggregators in the user's timezone."""

    repository: NutritionRepository
    timezone_name: str = "UTC"
    trend_weeks: int = DEFAULT_TREND_WEEKS
    comparison_days: int = DEFAULT_COMPARISON_DAYS
    compliance_days: int = DEFAULT_COMPLIANCE_DAYS
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(tz=UTC))

    def today(self) -> date:
        """Return today's date in the configured timezone."""
        return self.clock().astimezone(ZoneInfo(self.timezone_name)).date()

    async def weekly_trend(
        self, user_id: UUID, metric: Metric, target: float | None = None
    ) -> ChartSeries:
        """Weekly averages of a metric for the configured number of weeks."""
        today = self.today()
        start = today - timedelta(days=today.weekday(), weeks=self.trend_weeks - 1)
        records = await self.repository.list_daily_records(user_id, start, today)
        return build_trend_series(
            records, metric, weeks=self.trend_weeks, target=target, now=today
        )

    async def ideal_comparison(self, user_id: UUID) -> IdealComparison:
        """Ideal macros against the trailing daily average."""
        today = self.today()
        profile = await self._profile(user_id)
        records = await self.repository.list_daily_records(
            user_id, today - timedelta(days=self.comparison_days - 1), today
        )
        return build_ideal_comparison(profile, records, self.comparison_days, today)

    async def protein_heatmap(
        self, user_id: UUID, grams_per_day: float
    ) -> list[list[bool | None]]:
        """Monday-aligned weekly rows of protein compliance."""
        today = self.today()
        records = await self.repository.list_daily_records(
            user_id, today - timedelta(days=self.compliance_days - 1), today
        )
        points = build_protein_compliance(
            records, grams_per_day, self.compliance_days, today
        )
        return to_weekly_grid(points)

    async def macro_radar(self, user_id: UUID) -> RadarSummary:
        """Radar projection of the trailing average split against the ideal split."""
        today = self.today()
        profile = await self._profile(user_id)
        records = await self.repository.list_daily_records(
            user_id, today - timedelta(days=self.comparison_days - 1), today
        )
        actual = compute_avg_daily_macros(records, self.comparison_days, today)
        _, _, ideal_percents = get_ideal_macros_for_user(profile)
        actual_percents = (
            grams_to_percents(actual.grams)
            if actual.days_counted
            else MacroSplit(protein=0, carbs=0, fat=0)
        )
        return build_radar_summary(actual_percents, ideal_percents)

    async def _profile(self, user_id: UUID) -> UserProfile:
        return await self.repository.get_user_profile(user_id) or UserProfile()
