"""Body metrics, energy estimation and macro targets."""

from __future__ import annotations

from mealman.profiles.body_calc import (
    ActivityLevel,
    BiometricProfile,
    EnergyEstimate,
    Goal,
    MacroPlan,
    Sex,
    allocate_macros,
    calculate_plan,
    estimate_energy,
)

__all__ = [
    "ActivityLevel",
    "BiometricProfile",
    "EnergyEstimate",
    "Goal",
    "MacroPlan",
    "Sex",
    "allocate_macros",
    "calculate_plan",
    "estimate_energy",
]
