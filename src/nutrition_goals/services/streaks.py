"""Day-by-day compliance series and heatmap grids."""

from collections.abc import Callable, Iterable, Sequence
from datetime import date, datetime, timedelta

from nutrition_goals.domain.goals import CompliancePoint
from nutrition_goals.domain.nutrition import DailyNutritionRecord, NutritionTotal
from nutrition_goals.services.analytics import as_day, parse_day
from nutrition_goals.services.macros import round_half_up

DEFAULT_COMPLIANCE_DAYS = 28
RECOMMENDED_CALORIE_TOLERANCE = 0.1
DAYS_PER_WEEK = 7

_EMPTY_TOTAL = NutritionTotal()


def _by_date(records: Iterable[DailyNutritionRecord]) -> dict[str, NutritionTotal]:
    return {record.date: record.total for record in records if record and record.date}


def build_compliance_between(
    records: Iterable[DailyNutritionRecord],
    start: date,
    end: date,
    is_compliant: Callable[[NutritionTotal], bool],
) -> list[CompliancePoint]:
    """Evaluate every calendar day in ``[start, end]``, oldest first.

    Days without a record are evaluated against an all-zero total.
    """
    totals = _by_date(records)
    points = []
    day = start
    while day <= end:
        key = day.isoformat()
        points.append(
            CompliancePoint(
                date_iso=key, compliant=is_compliant(totals.get(key, _EMPTY_TOTAL))
            )
        )
        day += timedelta(days=1)
    return points


def build_protein_compliance(
    records: Iterable[DailyNutritionRecord],
    grams_per_day: float,
    days: int = DEFAULT_COMPLIANCE_DAYS,
    now: date | datetime | None = None,
) -> list[CompliancePoint]:
    """Protein compliance (``protein >= grams_per_day``) for the trailing ``days``."""
    end = as_day(now)
    return build_compliance_between(
        records,
        end - timedelta(days=days - 1),
        end,
        lambda total: (total.protein or 0) >= grams_per_day,
    )


def build_calorie_compliance(
    records: Iterable[DailyNutritionRecord],
    min_calories: float | None,
    max_calories: float | None,
    days: int = DEFAULT_COMPLIANCE_DAYS,
    now: date | datetime | None = None,
) -> list[CompliancePoint]:
    """Calorie compliance within an inclusive range for the trailing ``days``."""
    end = as_day(now)
    return build_compliance_between(
        records,
        end - timedelta(days=days - 1),
        end,
        calorie_range_rule(min_calories, max_calories),
    )


def calorie_range_rule(
    min_calories: float | None, max_calories: float | None
) -> Callable[[NutritionTotal], bool]:
    """Return a compliance rule for an inclusive calorie range.

    A single bound leaves the other side open; without any bound no day can
    comply.
    """
    if min_calories is None and max_calories is None:
        return lambda _total: False
    low = min_calories if min_calories is not None else float("-inf")
    high = max_calories if max_calories is not None else float("inf")
    return lambda total: low <= (total.calories or 0) <= high


def recommended_calorie_range(
    calories: float, tolerance: float = RECOMMENDED_CALORIE_TOLERANCE
) -> tuple[int, int]:
    """Return the compliance window around a recommended calorie target."""
    return (
        round_half_up(calories * (1 - tolerance)),
        round_half_up(calories * (1 + tolerance)),
    )


def current_streak(points: Sequence[CompliancePoint]) -> int:
    """Count consecutive compliant days back from the newest point."""
    streak = 0
    for point in reversed(points):
        if not point.compliant:
            break
        streak += 1
    return streak


def to_weekly_grid(points: Sequence[CompliancePoint]) -> list[list[bool | None]]:
    """Reshape an oldest-to-newest series into Monday..Sunday rows.

    The first row is padded with ``None`` so the first point lands on its
    weekday column; the last row may be shorter than 7.
    """
    if not points:
        return []
    first_day = parse_day(points[0].date_iso)
    pad = first_day.weekday() if first_day else 0
    cells: list[bool | None] = [None] * pad
    cells.extend(point.compliant for point in points)
    return [cells[i : i + DAYS_PER_WEEK] for i in range(0, len(cells), DAYS_PER_WEEK)]
