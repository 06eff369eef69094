"""Adherence tracking, weekly budget correction and weight projection.

Key components:
- Adherence ledger (checked meals only count as eaten)
- Zigzag corrector (spreads this week's surplus/deficit over remaining days)
- Trajectory predictor (least-squares weight trend and projections)
- Check-in recalibration (plan update after a new weigh-in)
"""

from __future__ import annotations

from mealman.tracking.adherence import consumed_for_day, consumed_for_week
from mealman.tracking.models import (
    DailyAdherenceRecord,
    Macros,
    MealEntry,
    WeeklyBudget,
    WeightLogEntry,
)
from mealman.tracking.trajectory import WeightPrediction, predict_weight_trajectory
from mealman.tracking.zigzag import ZigzagResult, calculate_zigzag_target

__all__ = [
    "DailyAdherenceRecord",
    "Macros",
    "MealEntry",
    "WeeklyBudget",
    "WeightLogEntry",
    "WeightPrediction",
    "ZigzagResult",
    "calculate_zigzag_target",
    "consumed_for_day",
    "consumed_for_week",
    "predict_weight_trajectory",
]
