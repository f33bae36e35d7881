"""Weekly and windowed aggregation of daily nutrition records."""

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from nutrition_goals.domain.goals import MIN_WEEKLY_MEASUREMENTS, WeeklyAveragePoint
from nutrition_goals.domain.nutrition import (
    DailyNutritionRecord,
    MacroGrams,
    Metric,
    UserProfile,
)
from nutrition_goals.services.macros import get_ideal_macros_for_user

DEFAULT_TREND_WEEKS = 8
DEFAULT_COMPARISON_DAYS = 7


@dataclass(frozen=True)
class WeeklyAverages:
    """Per-week averages of one metric, oldest to newest."""

    labels: list[str]
    data: list[float]
    week_starts: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ChartSeries(WeeklyAverages):
    """Weekly averages with an optional constant reference line."""

    target: float | None = None


@dataclass(frozen=True)
class AverageMacros:
    """Average daily intake over the days present in a window."""

    calories: float
    grams: MacroGrams
    days_counted: int


@dataclass(frozen=True)
class IdealComparison:
    """Ideal targets against the actual daily average; deltas are actual - ideal."""

    ideal_calories: float
    ideal_grams: MacroGrams
    actual_avg_calories: float
    actual_avg_grams: MacroGrams
    delta_calories: float
    delta_grams: MacroGrams
    days_counted: int


def as_day(now: date | datetime | None) -> date:
    """Return the calendar date for a clock value, defaulting to today."""
    if now is None:
        return date.today()
    if isinstance(now, datetime):
        return now.date()
    return now


def parse_day(raw: str | None) -> date | None:
    """Parse the leading YYYY-MM-DD part of a date string."""
    if not raw or len(raw) < 10:  # noqa: PLR2004
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        return None


def week_start(day: date) -> date:
    """Return the Monday starting the week that contains ``day``."""
    return day - timedelta(days=day.weekday())


def format_week_label(day: date) -> str:
    """Format a week start as e.g. ``Aug 12``."""
    return f"{day:%b} {day.day}"


def compute_weekly_averages(
    records: Iterable[DailyNutritionRecord],
    metric: Metric,
    weeks: int = DEFAULT_TREND_WEEKS,
    now: date | datetime | None = None,
) -> WeeklyAverages:
    """Average a metric per Monday-aligned week.

    Always returns exactly ``weeks`` buckets ending with the week containing
    ``now``; weeks without records average to 0.
    """
    buckets: dict[date, list[float]] = {}
    for record in records:
        day = parse_day(record.date) if record else None
        if day is None:
            continue
        buckets.setdefault(week_start(day), []).append(record.total.value_of(metric))

    current = week_start(as_day(now))
    starts = [current - timedelta(weeks=offset) for offset in range(weeks - 1, -1, -1)]

    labels: list[str] = []
    data: list[float] = []
    for start in starts:
        values = buckets.get(start)
        labels.append(format_week_label(start))
        data.append(sum(values) / len(values) if values else 0.0)
    return WeeklyAverages(
        labels=labels, data=data, week_starts=[start.isoformat() for start in starts]
    )


def build_trend_series(
    records: Iterable[DailyNutritionRecord],
    metric: Metric,
    weeks: int = DEFAULT_TREND_WEEKS,
    target: float | None = None,
    now: date | datetime | None = None,
) -> ChartSeries:
    """Weekly averages plus a constant target line for charting."""
    base = compute_weekly_averages(records, metric, weeks, now)
    return ChartSeries(
        labels=base.labels, data=base.data, week_starts=base.week_starts, target=target
    )


def compute_avg_daily_macros(
    records: Iterable[DailyNutritionRecord] | None,
    days: int = DEFAULT_COMPARISON_DAYS,
    now: date | datetime | None = None,
) -> AverageMacros:
    """Average intake over the trailing ``days`` window, counting only logged days.

    Bounds are compared as YYYY-MM-DD strings so record dates are never shifted
    by a timezone conversion.
    """
    end = as_day(now)
    start_iso = (end - timedelta(days=days - 1)).isoformat()
    end_iso = end.isoformat()

    calories = protein = carbs = fat = 0.0
    counted = 0
    for record in records or ():
        day_iso = record.date if record else None
        if not isinstance(day_iso, str) or len(day_iso) < 10:  # noqa: PLR2004
            continue
        if day_iso < start_iso or day_iso > end_iso:
            continue
        calories += record.total.calories or 0
        protein += record.total.protein or 0
        carbs += record.total.carbs or 0
        fat += record.total.fat or 0
        counted += 1

    if counted == 0:
        return AverageMacros(
            calories=0.0, grams=MacroGrams(protein=0, carbs=0, fat=0), days_counted=0
        )
    return AverageMacros(
        calories=calories / counted,
        grams=MacroGrams(
            protein=protein / counted, carbs=carbs / counted, fat=fat / counted
        ),
        days_counted=counted,
    )


def build_ideal_comparison(
    profile: UserProfile,
    records: Iterable[DailyNutritionRecord] | None,
    days: int = DEFAULT_COMPARISON_DAYS,
    now: date | datetime | None = None,
) -> IdealComparison:
    """Compare the profile's ideal macros with the windowed actual average."""
    ideal_calories, ideal_grams, _ = get_ideal_macros_for_user(profile)
    actual = compute_avg_daily_macros(records, days, now)
    return IdealComparison(
        ideal_calories=ideal_calories,
        ideal_grams=ideal_grams,
        actual_avg_calories=actual.calories,
        actual_avg_grams=actual.grams,
        delta_calories=actual.calories - ideal_calories,
        delta_grams=MacroGrams(
            protein=actual.grams.protein - ideal_grams.protein,
            carbs=actual.grams.carbs - ideal_grams.carbs,
            fat=actual.grams.fat - ideal_grams.fat,
        ),
        days_counted=actual.days_counted,
    )


def compute_weekly_measurement_trend(
    values: Sequence[tuple[str, float]],
    min_measurements: int = MIN_WEEKLY_MEASUREMENTS,
) -> tuple[WeeklyAveragePoint, ...]:
    """Weekly averages of raw measurements, dropping thinly sampled weeks."""
    buckets: dict[date, list[float]] = {}
    for raw_day, value in values:
        day = parse_day(raw_day)
        if day is None or not math.isfinite(value):
            continue
        buckets.setdefault(week_start(day), []).append(value)

    points = []
    for start in sorted(buckets):
        bucket = buckets[start]
        if len(bucket) >= min_measurements:
            points.append(
                WeeklyAveragePoint(
                    week_start_iso=start.isoformat(),
                    value=round(sum(bucket) / len(bucket), 3),
                )
            )
    return tuple(points)
