"""Calorie and macro conversions, TDEE estimation."""

import math
import re
from dataclasses import dataclass
from typing import Literal

from nutrition_goals.domain.nutrition import MacroGrams, MacroSplit, Sex, UserProfile

DEFAULT_MACRO_SPLIT = MacroSplit(protein=30, carbs=40, fat=30)

KCAL_PER_GRAM = {"protein": 4, "carbs": 4, "fat": 9}

ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "heavy": 1.725,
    "athlete": 1.9,
}

DEFAULT_AGE = 30
DEFAULT_HEIGHT_CM = 170.0
DEFAULT_WEIGHT_KG = 70.0
DEFAULT_WEIGHT_LB = 160.0
LB_PER_KG = 2.205
CM_PER_FOOT = 30.48
CM_PER_INCH = 2.54

_LEADING_NUMBER = re.compile(r"^\s*[-+]?(\d+(\.\d*)?|\.\d+)")
_FEET_INCHES = re.compile(r"([0-9]+)'([0-9]+)\"?")

CalorieSource = Literal["input", "tdee", "fallback"]


@dataclass(frozen=True)
class CalorieTarget:
    """Chosen calorie target and where it came from."""

    calories: int
    source: CalorieSource


@dataclass(frozen=True)
class MacroTargets:
    """Calorie target with its macro breakdown."""

    calories: int
    grams: MacroGrams
    percents: MacroSplit
    split: MacroSplit
    source: CalorieSource


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""
    return math.floor(value + 0.5)


def _leading_float(raw: str | None) -> float:
    match = _LEADING_NUMBER.match(raw or "")
    return float(match.group(0)) if match else 0.0


def _height_cm(profile: UserProfile) -> float:
    if profile.use_metric_units:
        return _leading_float(profile.height) or DEFAULT_HEIGHT_CM
    match = _FEET_INCHES.search(profile.height or "")
    if not match:
        return DEFAULT_HEIGHT_CM
    return int(match.group(1)) * CM_PER_FOOT + int(match.group(2)) * CM_PER_INCH


def _weight_kg(profile: UserProfile) -> float:
    if profile.use_metric_units:
        return _leading_float(profile.weight) or DEFAULT_WEIGHT_KG
    return (_leading_float(profile.weight) or DEFAULT_WEIGHT_LB) / LB_PER_KG


def compute_tdee(profile: UserProfile) -> int:
    """Estimate TDEE with Mifflin-St Jeor and an activity multiplier."""
    multiplier = ACTIVITY_MULTIPLIERS[profile.activity_level or "moderate"]
    height_cm = _height_cm(profile)
    weight_kg = _weight_kg(profile)
    age = int(_leading_float(profile.age)) or DEFAULT_AGE

    bmr = 10 * weight_kg + 6.25 * height_cm - 5 * age
    bmr += 5 if profile.sex == "male" else -161
    return round_half_up(bmr * multiplier)


def get_fallback_calories_by_sex(sex: Sex | None) -> int:
    """Return average daily calories when a profile can't be evaluated."""
    if sex == "male":
        return 2500
    if sex == "female":
        return 2000
    return 2250


def get_ideal_calories(profile: UserProfile) -> int:
    """Return TDEE, falling back to the sex-based average."""
    tdee = compute_tdee(profile)
    return tdee if tdee > 0 else get_fallback_calories_by_sex(profile.sex)


def resolve_calorie_target(
    profile: UserProfile, target_calories: float | None = None
) -> CalorieTarget:
    """Pick explicit input over computed TDEE over the sex fallback."""
    if (
        isinstance(target_calories, int | float)
        and not isinstance(target_calories, bool)
        and math.isfinite(target_calories)
        and target_calories > 0
    ):
        return CalorieTarget(calories=round_half_up(target_calories), source="input")
    tdee = compute_tdee(profile)
    if tdee > 0:
        return CalorieTarget(calories=tdee, source="tdee")
    return CalorieTarget(
        calories=get_fallback_calories_by_sex(profile.sex), source="fallback"
    )


def split_to_grams(calories: float, split: MacroSplit) -> MacroGrams:
    """Convert calories into grams per macro for a percentage split."""
    return MacroGrams(
        protein=math.ceil(split.protein / 100 * calories / KCAL_PER_GRAM["protein"]),
        carbs=math.ceil(split.carbs / 100 * calories / KCAL_PER_GRAM["carbs"]),
        fat=math.ceil(split.fat / 100 * calories / KCAL_PER_GRAM["fat"]),
    )


def grams_to_calories(grams: MacroGrams) -> float:
    """Return total calories contained in macro grams."""
    return (
        grams.protein * KCAL_PER_GRAM["protein"]
        + grams.carbs * KCAL_PER_GRAM["carbs"]
        + grams.fat * KCAL_PER_GRAM["fat"]
    )


def grams_to_percents(grams: MacroGrams) -> MacroSplit:
    """Convert grams to a calorie split; fat takes the rounding remainder."""
    protein_kcal = grams.protein * KCAL_PER_GRAM["protein"]
    carbs_kcal = grams.carbs * KCAL_PER_GRAM["carbs"]
    total = grams_to_calories(grams)
    if not total:
        return DEFAULT_MACRO_SPLIT
    protein = round_half_up(protein_kcal / total * 100)
    carbs = round_half_up(carbs_kcal / total * 100)
    fat = 100 - (protein + carbs)
    if fat < 0:
        # both halves rounded up with a near-zero fat share
        carbs += fat
        fat = 0
    return MacroSplit(protein=protein, carbs=carbs, fat=fat)


def get_ideal_macros_for_user(
    profile: UserProfile, split: MacroSplit = DEFAULT_MACRO_SPLIT
) -> tuple[int, MacroGrams, MacroSplit]:
    """Return ideal calories, grams and percents for a profile."""
    calories = get_ideal_calories(profile)
    grams = split_to_grams(calories, split)
    return calories, grams, grams_to_percents(grams)


def get_macro_targets_for_user(
    profile: UserProfile,
    target_calories: float | None = None,
    split: MacroSplit | None = None,
) -> MacroTargets:
    """Resolve the calorie target and break it down into macros."""
    resolved_split = split or DEFAULT_MACRO_SPLIT
    target = resolve_calorie_target(profile, target_calories)
    grams = split_to_grams(target.calories, resolved_split)
    return MacroTargets(
        calories=target.calories,
        grams=grams,
        percents=grams_to_percents(grams),
        split=resolved_split,
        source=target.source,
    )
