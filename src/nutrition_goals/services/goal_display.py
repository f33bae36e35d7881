"""Presentation hints for goal cards."""

from collections.abc import Sequence
from typing import Literal

from nutrition_goals.domain.goal_params import (
    BodyFatParams,
    CalorieStreakParams,
    LeanMassGainParams,
    ProteinStreakParams,
    WeightParams,
)
from nutrition_goals.domain.goals import GoalRecord, WeeklyAveragePoint

ProgressBand = Literal["achieved", "close", "progress", "needs_work"]

CLOSE_RATIO = 0.7
PROGRESS_RATIO = 0.3

BAND_COLORS: dict[ProgressBand, str] = {
    "achieved": "#22c55e",
    "close": "#b8a369",
    "progress": "#f59e0b",
    "needs_work": "#ef4444",
}


def goal_status_label(goal: GoalRecord) -> str:
    """Return the status text shown on a goal card."""
    if goal.status == "achieved":
        return "Achieved"
    if not goal.active or goal.status == "deactivated":
        return "Inactive"
    return "Active"


def band_for_ratio(ratio: float) -> ProgressBand:
    """Map a completion ratio to a presentation band."""
    if ratio >= 1:
        return "achieved"
    if ratio >= CLOSE_RATIO:
        return "close"
    if ratio >= PROGRESS_RATIO:
        return "progress"
    return "needs_work"


def progress_band(current: float, target: float) -> ProgressBand:
    """Band for a streak, using ``current / target``."""
    if target <= 0:
        return "achieved"
    return band_for_ratio(current / target)


def progress_band_for_percent(percent: float) -> ProgressBand:
    """Band for a numeric goal, using ``percent / 100``."""
    return band_for_ratio(percent / 100)


def streak_status_text(current: int, target: int) -> str:
    """Encouragement line under a streak bar."""
    band = progress_band(current, target)
    if band == "achieved":
        return "Goal achieved! 🎉"
    if band == "close":
        return "Almost there! Keep going 💪"
    if current == 0:
        return "Start your streak today"
    remaining = target - current
    return f"{remaining} more day{'' if remaining == 1 else 's'} to go"


def trend_change_text(trend: Sequence[WeeklyAveragePoint]) -> str:
    """Describe the change between the last two weeks of a trend."""
    if len(trend) < 2:  # noqa: PLR2004
        return "Building trend data..."
    change = trend[-1].value - trend[-2].value
    direction = "↗️" if change > 0 else "↘️" if change < 0 else "➡️"
    return f"{direction} {abs(change):.1f} from last week"


def goal_title(goal: GoalRecord) -> str:
    """Human-friendly title for a goal."""
    params = goal.params
    if isinstance(params, BodyFatParams):
        return f"Body fat → {params.target_pct:g}%"
    if isinstance(params, WeightParams):
        verb = "Lose" if params.direction == "down" else "Gain"
        return f"{verb} to {params.target_weight_kg:g} kg"
    if isinstance(params, LeanMassGainParams):
        return f"Gain {params.target_kg:g} kg lean mass"
    if isinstance(params, CalorieStreakParams):
        basis = "custom range" if params.basis == "custom" else "recommended"
        return f"Calories {basis} • {params.target_days}-day streak"
    if isinstance(params, ProteinStreakParams):
        return (
            f"Protein {params.grams_per_day:g}g • {params.target_days}-day streak"
        )
    return goal.type
