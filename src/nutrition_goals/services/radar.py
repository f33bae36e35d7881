"""Radar chart projection of macro percentages."""

import math
from dataclasses import dataclass

from nutrition_goals.domain.nutrition import MacroSplit

RADAR_SIZE = 200
RADAR_RADIUS = 70
RADAR_AXES = ("protein", "carbs", "fat")


@dataclass(frozen=True)
class RadarSummary:
    """Actual and ideal radar polygons, one vertex per macro axis."""

    actual: tuple[tuple[float, float], ...]
    ideal: tuple[tuple[float, float], ...] | None


def clamp_percent(value: float | None) -> float:
    """Clamp a percentage to 0..100, treating missing or non-finite values as 0."""
    if value is None or not math.isfinite(value):
        return 0.0
    return max(0.0, min(100.0, value))


def project_radar(
    split: MacroSplit,
    radius: float = RADAR_RADIUS,
    center: float = RADAR_SIZE / 2,
) -> tuple[tuple[float, float], ...]:
    """Project a macro split onto three axes starting at 12 o'clock, clockwise."""
    points = []
    for index, axis in enumerate(RADAR_AXES):
        angle = index * 2 * math.pi / len(RADAR_AXES) - math.pi / 2
        r = clamp_percent(getattr(split, axis)) / 100 * radius
        x = round(center + r * math.cos(angle), 1)
        y = round(center + r * math.sin(angle), 1)
        points.append((x, y))
    return tuple(points)


def build_radar_summary(actual: MacroSplit, ideal: MacroSplit | None) -> RadarSummary:
    """Project actual and ideal splits for an ideal-vs-actual radar."""
    return RadarSummary(
        actual=project_radar(actual),
        ideal=project_radar(ideal) if ideal is not None else None,
    )
