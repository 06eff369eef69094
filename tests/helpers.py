"""Builders shared by the test modules."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Optional

import yaml

from mealman.tracking.models import DailyAdherenceRecord, Macros, MealEntry, WeightLogEntry


def make_meal(kcal: float, completed: bool = True, protein: float = 0.0) -> MealEntry:
    return MealEntry(
        target_macros=Macros(protein_g=protein, carb_g=0.0, fat_g=0.0, kcal=kcal),
        is_completed=completed,
    )


def make_record(day: date, *kcals: float, completed: bool = True) -> DailyAdherenceRecord:
    return DailyAdherenceRecord(date=day, meals=[make_meal(k, completed) for k in kcals])


def make_log(day: date, weight: float, body_fat: Optional[float] = None) -> WeightLogEntry:
    return WeightLogEntry(
        timestamp=datetime(day.year, day.month, day.day, 8, 0),
        weight_kg=weight,
        body_fat_pct=body_fat,
    )


def write_yaml(path: Path, data) -> Path:
    path.write_text(yaml.safe_dump(data, sort_keys=False))
    return path
