"""Body composition calculator for calorie and macro targets.

Estimates BMR as the plain average of several published equations, scales
it to maintenance (TDEE) with an activity multiplier, then derives a daily
calorie target and a protein/fat/carb split for the user's goal.

Equations used:
- Mifflin-St Jeor and revised Harris-Benedict, always.
- Katch-McArdle and Cunningham, both driven by lean body mass, only when a
  body-fat percentage is known.

The population equations typically differ by 50-100 kcal; the spread is
reported as the plan's uncertainty band.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


class Sex(Enum):
    """Biological sex for BMR calculation."""
    MALE = "male"
    FEMALE = "female"


class ActivityLevel(Enum):
    """Activity level tiers for TDEE calculation."""
    SEDENTARY = "sedentary"          # Desk job + 3-6 days lifting
    LIGHT = "light"                  # Light movement + 3-6 days lifting
    MODERATE = "moderate"            # Moderate activity + 3-6 days lifting
    VERY_ACTIVE = "very_active"      # Physical job/sports + 3-6 days lifting


class Goal(Enum):
    """Body composition goal."""
    FAT_LOSS = "fat_loss"
    MUSCLE_GAIN = "muscle_gain"
    MAINTENANCE = "maintenance"


# Activity multipliers (strictly increasing with activity)
ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.35,
    ActivityLevel.LIGHT: 1.55,
    ActivityLevel.MODERATE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}

# Calorie adjustments by goal (deficit or surplus from maintenance)
GOAL_ADJUSTMENTS = {
    Goal.FAT_LOSS: -500,
    Goal.MUSCLE_GAIN: 250,
    Goal.MAINTENANCE: 0,
}

SAFETY_FLOOR_KCAL = 1200
MAX_BELOW_BMR = 200

PROTEIN_G_PER_KG = 2.0
FAT_G_PER_KG = 0.8

KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARB = 4
KCAL_PER_G_FAT = 9

MIFFLIN = "Mifflin-St Jeor"
HARRIS_BENEDICT = "Revised Harris-Benedict"
KATCH_MCARDLE = "Katch-McArdle"
CUNNINGHAM = "Cunningham"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero.

    Python's round() uses banker's rounding (round(2.5) == 2), which would
    make targets jump depending on parity.
    """
    if value < 0:
        return -int(math.floor(-value + 0.5))
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class BiometricProfile:
    """Snapshot of a user's body metrics and goal.

    Weight, height and age must be positive; the calculator does not clamp
    them. The optional trailing fields are carried for prompt building and
    stored-target overrides and do not affect the estimate.
    """

    weight_kg: float
    height_cm: float
    age_years: int
    sex: Sex
    activity_level: ActivityLevel
    goal: Goal
    body_fat_pct: Optional[float] = None

    dietary_preference: Optional[str] = None  # 'veg', 'egg', 'non-veg'
    medical_conditions: Optional[str] = None
    goal_aggressiveness: Optional[str] = None  # 'normal', 'aggressive'
    daily_calories: Optional[int] = None  # stored daily target
    weekly_calories: Optional[int] = None  # stored weekly budget

    @property
    def has_body_fat(self) -> bool:
        return self.body_fat_pct is not None and self.body_fat_pct > 0

    @property
    def lean_body_mass_kg(self) -> Optional[float]:
        """Lean body mass, or None when body fat is unknown."""
        if not self.has_body_fat:
            return None
        return self.weight_kg * (1 - self.body_fat_pct / 100)  # type: ignore[operator]

    def with_weight(self, weight_kg: float) -> "BiometricProfile":
        """Return a copy of the profile at a new body weight."""
        return replace(self, weight_kg=weight_kg)


@dataclass(frozen=True)
class EnergyEstimate:
    """BMR and maintenance estimate with per-formula audit."""

    bmr: float
    maintenance: float
    formula_estimates: dict[str, float] = field(default_factory=dict)

    @property
    def calculation_method(self) -> str:
        """Audit trail naming the formulas that contributed to the BMR."""
        names = list(self.formula_estimates)
        return f"Mean of {len(names)} formulas: " + ", ".join(names)

    @property
    def formula_spread(self) -> float:
        """Population standard deviation of the formula estimates (kcal)."""
        values = list(self.formula_estimates.values())
        if not values:
            return 0.0
        mean = sum(values) / len(values)
        return math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))


@dataclass(frozen=True)
class MacroPlan:
    """Daily calorie and macronutrient targets."""

    bmr: int
    maintenance: int
    calories: int
    protein_g: int
    fat_g: int
    carb_g: int
    calculation_method: str
    uncertainty_band: int = 0  # +/- kcal spread between formulas

    @property
    def weekly_calories(self) -> int:
        return self.calories * 7

    def to_dict(self) -> dict:
        """Convert to dict for JSON output and persistence."""
        return {
            "bmr": self.bmr,
            "maintenance": self.maintenance,
            "calories": self.calories,
            "weekly_calories": self.weekly_calories,
            "protein_g": self.protein_g,
            "fat_g": self.fat_g,
            "carb_g": self.carb_g,
            "calculation_method": self.calculation_method,
            "uncertainty_band": self.uncertainty_band,
        }

    def summary(self) -> str:
        """Human-readable summary of targets."""
        return "\n".join([
            f"BMR: {self.bmr} kcal/day (+/- {self.uncertainty_band})",
            f"Maintenance: {self.maintenance} kcal/day",
            f"Target: {self.calories} kcal/day ({self.weekly_calories} kcal/week)",
            f"Protein: {self.protein_g}g  Fat: {self.fat_g}g  Carbs: {self.carb_g}g",
            f"Method: {self.calculation_method}",
        ])


def mifflin_st_jeor(profile: BiometricProfile) -> float:
    """Mifflin-St Jeor BMR (kcal/day)."""
    bmr = (10 * profile.weight_kg) + (6.25 * profile.height_cm) - (5 * profile.age_years)
    return bmr + (5 if profile.sex == Sex.MALE else -161)


def harris_benedict_revised(profile: BiometricProfile) -> float:
    """Revised (Roza-Shizgal) Harris-Benedict BMR (kcal/day)."""
    w, h, a = profile.weight_kg, profile.height_cm, profile.age_years
    if profile.sex == Sex.MALE:
        return 88.362 + (13.397 * w) + (4.799 * h) - (5.677 * a)
    return 447.593 + (9.247 * w) + (3.098 * h) - (4.330 * a)


def katch_mcardle(lean_mass_kg: float) -> float:
    return 370 + (21.6 * lean_mass_kg)


def cunningham(lean_mass_kg: float) -> float:
    return 500 + (22 * lean_mass_kg)


def estimate_energy(profile: BiometricProfile) -> EnergyEstimate:
    """Estimate BMR and maintenance calories for a profile.

    Args:
        profile: Biometric profile (weight, height, age must be positive)

    Returns:
        EnergyEstimate with the averaged BMR, maintenance and the value of
        every formula that ran
    """
    estimates = {
        MIFFLIN: mifflin_st_jeor(profile),
        HARRIS_BENEDICT: harris_benedict_revised(profile),
    }

    lean_mass = profile.lean_body_mass_kg
    if lean_mass is not None:
        estimates[KATCH_MCARDLE] = katch_mcardle(lean_mass)
        estimates[CUNNINGHAM] = cunningham(lean_mass)

    bmr = sum(estimates.values()) / len(estimates)
    maintenance = bmr * ACTIVITY_MULTIPLIERS[profile.activity_level]

    return EnergyEstimate(bmr=bmr, maintenance=maintenance, formula_estimates=estimates)


def goal_target_calories(
    goal: Goal,
    bmr: float,
    maintenance: float,
    safety_floor: int = SAFETY_FLOOR_KCAL,
    max_below_bmr: int = MAX_BELOW_BMR,
    adjustments: Optional[dict[Goal, int]] = None,
) -> float:
    """Apply the goal adjustment and, for fat loss, the safety floor.

    The fat-loss target is never below `safety_floor` nor more than
    `max_below_bmr` under BMR. Gain and maintenance targets are not floored.
    """
    adjustments = adjustments or GOAL_ADJUSTMENTS
    target = maintenance + adjustments[goal]

    if goal == Goal.FAT_LOSS:
        target = max(target, bmr - max_below_bmr, safety_floor)

    return target


def split_macros(calories: int, weight_kg: float) -> tuple[int, int, int]:
    """Split a calorie target into (protein_g, fat_g, carb_g).

    Protein and fat are set per kg of body weight; carbs take whatever is
    left and floor at zero when protein and fat already exceed the target.
    """
    protein_g = round_half_up(PROTEIN_G_PER_KG * weight_kg)
    fat_g = round_half_up(FAT_G_PER_KG * weight_kg)

    remaining = calories - (protein_g * KCAL_PER_G_PROTEIN + fat_g * KCAL_PER_G_FAT)
    carb_g = round_half_up(max(0, remaining) / KCAL_PER_G_CARB)

    return protein_g, fat_g, carb_g


def allocate_macros(
    profile: BiometricProfile,
    energy: EnergyEstimate,
    safety_floor: int = SAFETY_FLOOR_KCAL,
    max_below_bmr: int = MAX_BELOW_BMR,
    adjustments: Optional[dict[Goal, int]] = None,
) -> MacroPlan:
    """Build the full MacroPlan from a profile and its energy estimate.

    Args:
        profile: Biometric profile
        energy: Output of estimate_energy() for the same profile
        safety_floor: Absolute minimum fat-loss target (kcal)
        max_below_bmr: Largest allowed fat-loss gap under BMR (kcal)
        adjustments: Optional per-goal calorie adjustment override

    Returns:
        MacroPlan with integer calories and gram targets
    """
    target = goal_target_calories(
        profile.goal,
        energy.bmr,
        energy.maintenance,
        safety_floor=safety_floor,
        max_below_bmr=max_below_bmr,
        adjustments=adjustments,
    )
    calories = round_half_up(target)
    protein_g, fat_g, carb_g = split_macros(calories, profile.weight_kg)

    return MacroPlan(
        bmr=round_half_up(energy.bmr),
        maintenance=round_half_up(energy.maintenance),
        calories=calories,
        protein_g=protein_g,
        fat_g=fat_g,
        carb_g=carb_g,
        calculation_method=energy.calculation_method,
        uncertainty_band=round_half_up(energy.formula_spread),
    )


def calculate_plan(profile: BiometricProfile, **kwargs) -> MacroPlan:
    """Estimate energy needs and allocate macros in one step."""
    return allocate_macros(profile, estimate_energy(profile), **kwargs)


def with_calories(plan: MacroPlan, calories: int, weight_kg: float) -> MacroPlan:
    """Return a copy of `plan` re-split for a different calorie target."""
    protein_g, fat_g, carb_g = split_macros(calories, weight_kg)
    return replace(
        plan,
        calories=calories,
        protein_g=protein_g,
        fat_g=fat_g,
        carb_g=carb_g,
    )


def apply_stored_target(plan: MacroPlan, profile: BiometricProfile) -> MacroPlan:
    """Use the profile's stored daily target when one has been saved.

    The stored value keeps the weekly budget consistent between check-ins.
    Only the calorie target is replaced; gram targets stay as computed.
    """
    if not profile.daily_calories:
        return plan
    return replace(plan, calories=int(profile.daily_calories))

