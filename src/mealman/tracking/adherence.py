"""Consumption totals derived from meal completion flags.

A meal counts as eaten only when the user checked it off. Unchecked meals
contribute nothing, even if the food was logged somewhere else.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from mealman.profiles.body_calc import MacroPlan, round_half_up
from mealman.tracking.models import DailyAdherenceRecord, Macros, MealEntry, WeeklyBudget

# Number of most recent days averaged for the refeed check
REFEED_WINDOW_DAYS = 3


def week_start(day: date) -> date:
    """Return the Monday of the ISO week containing `day`."""
    return day - timedelta(days=day.weekday())


def consumed_for_day(record: Optional[DailyAdherenceRecord]) -> Macros:
    """Sum target macros over the completed meals of one day.

    Missing records, empty or None meal lists and entries that are not
    MealEntry objects contribute zero.
    """
    total = Macros.zero()
    if record is None:
        return total

    for meal in record.meals or []:
        if not isinstance(meal, MealEntry) or not meal.is_completed:
            continue
        if isinstance(meal.target_macros, Macros):
            total = total + meal.target_macros

    return total


def consumed_for_week(records: Iterable[DailyAdherenceRecord], anchor: date) -> Macros:
    """Sum per-day consumption across the ISO week containing `anchor`.

    Records dated outside the Monday-to-Sunday window are ignored; days with
    no record simply contribute zero.
    """
    start = week_start(anchor)
    end = start + timedelta(days=7)

    total = Macros.zero()
    for record in records:
        if start <= record.date < end:
            total = total + consumed_for_day(record)
    return total


def _pct(value: float, target: float) -> int:
    if target <= 0:
        return 0
    return min(100, round_half_up(value / target * 100))


@dataclass
class WeeklyBudgetStatus:
    """Checked-meal consumption against the weekly calorie limit."""

    week_start: date
    consumed_kcal: float
    weekly_limit: int
    percent_used: float  # capped at 100
    over_budget: bool

    @property
    def remaining_kcal(self) -> float:
        return self.weekly_limit - self.consumed_kcal

    def to_dict(self) -> dict:
        return {
            "week_start": self.week_start.isoformat(),
            "consumed_kcal": self.consumed_kcal,
            "weekly_limit": self.weekly_limit,
            "remaining_kcal": self.remaining_kcal,
            "percent_used": self.percent_used,
            "over_budget": self.over_budget,
        }


def weekly_budget_status(
    records: Iterable[DailyAdherenceRecord],
    budget: WeeklyBudget,
    anchor: date,
) -> WeeklyBudgetStatus:
    """Compare this ISO week's checked intake with the weekly limit."""
    consumed = consumed_for_week(records, anchor).kcal
    limit = budget.weekly_limit
    percent = min(100.0, consumed / limit * 100) if limit > 0 else 0.0

    return WeeklyBudgetStatus(
        week_start=week_start(anchor),
        consumed_kcal=consumed,
        weekly_limit=limit,
        percent_used=percent,
        over_budget=consumed > limit,
    )


@dataclass
class DailyProgress:
    """Consumed macros for a day and percentage of each plan target."""

    consumed: Macros
    calories_pct: int
    protein_pct: int
    carb_pct: int
    fat_pct: int

    def to_dict(self) -> dict:
        return {
            "consumed": self.consumed.to_dict(),
            "calories_pct": self.calories_pct,
            "protein_pct": self.protein_pct,
            "carb_pct": self.carb_pct,
            "fat_pct": self.fat_pct,
        }


def daily_progress(
    record: Optional[DailyAdherenceRecord],
    plan: MacroPlan,
) -> DailyProgress:
    """Progress toward today's targets from checked meals only."""
    consumed = consumed_for_day(record)
    return DailyProgress(
        consumed=consumed,
        calories_pct=_pct(consumed.kcal, plan.calories),
        protein_pct=_pct(consumed.protein_g, plan.protein_g),
        carb_pct=_pct(consumed.carb_g, plan.carb_g),
        fat_pct=_pct(consumed.fat_g, plan.fat_g),
    )


def adherence_streak(records: Iterable[DailyAdherenceRecord], today: date) -> int:
    """Count consecutive logged days with at least one checked meal.

    Records are walked newest first. A day without any checked meal ends the
    streak, except today's record, which may still be in progress.
    """
    streak = 0
    for record in sorted(records, key=lambda r: r.date, reverse=True):
        if record.date > today:
            continue
        if record.has_activity:
            streak += 1
        elif record.date != today:
            break
    return streak


def needs_refeed(
    records: Iterable[DailyAdherenceRecord],
    bmr: float,
    window: int = REFEED_WINDOW_DAYS,
) -> bool:
    """True when recent checked intake averages below BMR.

    Averages the `window` most recent records. Zero intake (nothing checked
    at all) is not treated as under-eating.
    """
    recent = sorted(records, key=lambda r: r.date, reverse=True)[:window]
    if len(recent) < window:
        return False

    avg_intake = sum(consumed_for_day(r).kcal for r in recent) / window
    return 0 < avg_intake < bmr
