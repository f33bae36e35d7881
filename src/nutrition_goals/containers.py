"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from uuid import UUID

from supabase import acreate_client

from nutrition_goals.adapters.supabase_goal_repository import SupabaseGoalRepository
from nutrition_goals.adapters.supabase_nutrition_repository import (
    SupabaseNutritionRepository,
)
from nutrition_goals.app_logging import configure_logging
from nutrition_goals.config import Settings
from nutrition_goals.services.events import EventBus
from nutrition_goals.services.goals_store import GoalRepository, GoalsStore
from nutrition_goals.services.insights import InsightsService
from nutrition_goals.services.progress import GoalProgressService, NutritionRepository


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    goal_repository: GoalRepository
    nutrition_repository: NutritionRepository
    events: EventBus
    progress_service: GoalProgressService
    insights_service: InsightsService
    close_resources: Callable[[], Awaitable[None]]
    stores: dict[UUID, GoalsStore] = field(default_factory=dict)

    def goals_store(self, user_id: UUID) -> GoalsStore:
        """Return the session goals store for a user, creating it once."""
        store = self.stores.get(user_id)
        if store is None:
            store = GoalsStore(
                user_id=user_id,
                repository=self.goal_repository,
                progress_source=self.progress_service,
                events=self.events,
                top_n=self.settings.top_goals,
            )
            store.subscribe()
            self.stores[user_id] = store
        return store


def wire_container(
    settings: Settings,
    goal_repository: GoalRepository,
    nutrition_repository: NutritionRepository,
) -> AppContainer:
    """Assemble services around the given repositories."""
    progress_service = GoalProgressService(
        goal_repository=goal_repository,
        nutrition_repository=nutrition_repository,
        timezone_name=settings.timezone,
        calorie_tolerance=settings.recommended_calorie_tolerance,
        history_days=settings.streak_history_days,
        min_weekly_measurements=settings.min_weekly_measurements,
    )
    insights_service = InsightsService(
        repository=nutrition_repository,
        timezone_name=settings.timezone,
        trend_weeks=settings.trend_weeks,
        comparison_days=settings.comparison_days,
        compliance_days=settings.compliance_days,
    )
    stores: dict[UUID, GoalsStore] = {}

    async def close_resources() -> None:
        for store in stores.values():
            await store.wait_for_pending()
            store.close()
        stores.clear()

    return AppContainer(
        settings=settings,
        goal_repository=goal_repository,
        nutrition_repository=nutrition_repository,
        events=EventBus(),
        progress_service=progress_service,
        insights_service=insights_service,
        close_resources=close_resources,
        stores=stores,
    )


async def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container backed by Supabase."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    supabase_client = await acreate_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    return wire_container(
        resolved_settings,
        goal_repository=SupabaseGoalRepository(supabase_client),
        nutrition_repository=SupabaseNutritionRepository(supabase_client),
    )
