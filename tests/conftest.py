"""Pytest fixtures for mealman tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from helpers import write_yaml
from mealman.config import reload_settings
from mealman.profiles.body_calc import (
    ActivityLevel,
    BiometricProfile,
    Goal,
    MacroPlan,
    Sex,
)


@pytest.fixture(autouse=True)
def default_settings(tmp_path):
    """Isolate every test from a user's ~/.mealman/config.yaml."""
    settings = reload_settings(tmp_path / "no-config.yaml")
    yield settings
    reload_settings(tmp_path / "no-config.yaml")


@pytest.fixture
def profile() -> BiometricProfile:
    """80 kg, 180 cm, 30 y sedentary male cutting."""
    return BiometricProfile(
        weight_kg=80,
        height_cm=180,
        age_years=30,
        sex=Sex.MALE,
        activity_level=ActivityLevel.SEDENTARY,
        goal=Goal.FAT_LOSS,
    )


@pytest.fixture
def profile_dict() -> dict:
    return {
        "weight_kg": 80,
        "height_cm": 180,
        "age_years": 30,
        "sex": "male",
        "activity_level": "sedentary",
        "goal": "fat_loss",
        "dietary_preference": "egg",
    }


@pytest.fixture
def plan() -> MacroPlan:
    return MacroPlan(
        bmr=1817,
        maintenance=2453,
        calories=1953,
        protein_g=160,
        fat_g=64,
        carb_g=184,
        calculation_method="Mean of 2 formulas: Mifflin-St Jeor, Revised Harris-Benedict",
    )


@pytest.fixture
def profile_file(tmp_path, profile_dict) -> Path:
    return write_yaml(tmp_path / "profile.yaml", profile_dict)


@pytest.fixture
def week_file(tmp_path) -> Path:
    """Mon-Wed of 2024-01-01's week, each 300 kcal over a 2000 target."""
    days = [
        {
            "date": f"2024-01-0{d}",
            "meals": [
                {"name": "lunch", "macros": {"p": 40, "c": 100, "f": 20, "cal": 1200}, "isCompleted": True},
                {"name": "dinner", "macros": {"p": 40, "c": 80, "f": 20, "cal": 1100}, "isCompleted": True},
                {"name": "snack", "macros": {"p": 5, "c": 20, "f": 5, "cal": 150}, "isCompleted": False},
            ],
        }
        for d in (1, 2, 3)
    ]
    return write_yaml(tmp_path / "week.yaml", {"days": days})


@pytest.fixture
def weights_file(tmp_path) -> Path:
    entries = [
        {"timestamp": "2024-01-01T08:00:00", "weight_kg": 80.0, "body_fat_pct": 25.0},
        {"timestamp": "2024-01-08T08:00:00", "weight_kg": 79.5},
        {"timestamp": "2024-01-15T08:00:00", "weight_kg": 79.0, "body_fat_pct": 24.0},
    ]
    return write_yaml(tmp_path / "weights.yaml", {"entries": entries})
