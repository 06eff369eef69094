"""Zigzag weekly calorie-budget correction.

Rather than making a single day absorb the whole week's deviation, the
surplus or deficit accumulated since Monday is spread evenly over the days
left in the ISO week (today included):

    expected  = days_elapsed × standard_target
    actual    = Σ checked kcal, Monday .. yesterday
    surplus   = actual - expected
    per_day   = round(surplus / (7 - days_elapsed))
    corrected = standard_target - per_day

Only meals marked as completed count toward `actual`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from mealman.profiles.body_calc import round_half_up
from mealman.tracking.adherence import consumed_for_day
from mealman.tracking.models import DailyAdherenceRecord

DAYS_PER_WEEK = 7

# Adjustments at or below this magnitude (kcal/day) produce no context note
NOTE_THRESHOLD_KCAL = 30


@dataclass
class ZigzagResult:
    """Today's corrected calorie target and how it was derived."""

    corrected_target_kcal: int
    context_note: str
    standard_daily_target: int
    days_elapsed: int
    days_remaining: int
    expected_total: float
    actual_total: float
    net_surplus: float
    adjustment_per_day: int

    @property
    def is_adjusted(self) -> bool:
        return self.adjustment_per_day != 0

    def to_dict(self) -> dict:
        return {
            "corrected_target_kcal": self.corrected_target_kcal,
            "context_note": self.context_note,
            "standard_daily_target": self.standard_daily_target,
            "days_elapsed": self.days_elapsed,
            "days_remaining": self.days_remaining,
            "expected_total": self.expected_total,
            "actual_total": self.actual_total,
            "net_surplus": self.net_surplus,
            "adjustment_per_day": self.adjustment_per_day,
        }


def _format_kcal(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.0f}"


def build_context_note(net_surplus: float, adjustment_per_day: int) -> str:
    """Describe the correction for the content generator."""
    if adjustment_per_day > 0:
        return (
            f"ALERT: User is currently {_format_kcal(net_surplus)} kcal OVER weekly budget.\n"
            f"STRATEGY: Reduce daily target by {adjustment_per_day} kcal."
        )
    return (
        f"NOTICE: User is {_format_kcal(abs(net_surplus))} kcal UNDER weekly budget.\n"
        f"STRATEGY: Increase daily target by {abs(adjustment_per_day)} kcal (refeed)."
    )


def select_week_history(
    history: Iterable[DailyAdherenceRecord],
    today: date,
) -> list[DailyAdherenceRecord]:
    """Records from Monday of today's ISO week up to, not including, today."""
    monday = today - timedelta(days=today.weekday())
    return [r for r in history if monday <= r.date < today]


def calculate_zigzag_target(
    today: date,
    standard_daily_target: int,
    history: Iterable[DailyAdherenceRecord],
    note_threshold: int = NOTE_THRESHOLD_KCAL,
) -> ZigzagResult:
    """Compute today's calorie target corrected for this week's adherence.

    Args:
        today: The day being planned
        standard_daily_target: Uncorrected daily target (kcal)
        history: Adherence records; anything outside Monday..yesterday of
                 today's ISO week is ignored
        note_threshold: Minimum |adjustment| (kcal/day) that produces a note

    Returns:
        ZigzagResult with the corrected target and an optional context note
    """
    days_elapsed = today.weekday()
    week_history = select_week_history(history, today)

    expected_total = days_elapsed * standard_daily_target
    actual_total = sum(consumed_for_day(r).kcal for r in week_history)
    net_surplus = actual_total - expected_total

    days_remaining = DAYS_PER_WEEK - days_elapsed
    adjustment_per_day = 0
    if days_remaining > 0:
        adjustment_per_day = round_half_up(net_surplus / days_remaining)

    context_note = ""
    if abs(adjustment_per_day) > note_threshold:
        context_note = build_context_note(net_surplus, adjustment_per_day)

    return ZigzagResult(
        corrected_target_kcal=standard_daily_target - adjustment_per_day,
        context_note=context_note,
        standard_daily_target=standard_daily_target,
        days_elapsed=days_elapsed,
        days_remaining=days_remaining,
        expected_total=expected_total,
        actual_total=actual_total,
        net_surplus=net_surplus,
        adjustment_per_day=adjustment_per_day,
    )
