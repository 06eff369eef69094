"""Weigh-in reminders and plan recalibration after a check-in.

When a new weight is logged the plan is recomputed for that weight, then
nudged if the observed rate of change is off-goal. The weight delta is
normalized to a weekly rate only when the gap is longer than a week, so
rapid swings between close check-ins are still caught.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from mealman.profiles.body_calc import (
    MAX_BELOW_BMR,
    SAFETY_FLOOR_KCAL,
    BiometricProfile,
    Goal,
    MacroPlan,
    calculate_plan,
    with_calories,
)
from mealman.tracking.models import WeightLogEntry

CHECK_IN_DUE_DAYS = 14
CHECK_IN_REMINDER_DAYS = 3

# Normalized weekly-rate triggers (kg/week) and corrections (kcal)
FAT_LOSS_GAIN_TRIGGER = 0.4
FAT_LOSS_GAIN_CORRECTION = -350
FAT_LOSS_RAPID_TRIGGER = -1.2
FAT_LOSS_RAPID_CORRECTION = 250
MUSCLE_GAIN_FAST_TRIGGER = 0.8
MUSCLE_GAIN_FAST_CORRECTION = -200


@dataclass
class CheckInStatus:
    """How long since the last weigh-in and whether to prompt for one."""

    days_since_last: Optional[int]
    is_due: bool
    needs_reminder: bool
    message: str

    def to_dict(self) -> dict:
        return {
            "days_since_last": self.days_since_last,
            "is_due": self.is_due,
            "needs_reminder": self.needs_reminder,
            "message": self.message,
        }


def check_in_status(
    entries: Iterable[WeightLogEntry],
    today: date,
    due_after_days: int = CHECK_IN_DUE_DAYS,
    reminder_after_days: int = CHECK_IN_REMINDER_DAYS,
) -> CheckInStatus:
    """Evaluate weigh-in recency.

    Args:
        entries: Weight log in any order
        today: Reference day
        due_after_days: Days after which a full check-in is due
        reminder_after_days: Days after which a reminder is shown

    Returns:
        CheckInStatus
    """
    ordered = sorted(entries, key=lambda e: e.measured_at)
    if not ordered:
        return CheckInStatus(
            days_since_last=None,
            is_due=False,
            needs_reminder=False,
            message="Log your first weight entry to unlock predictions.",
        )

    last = ordered[-1].measured_at.date()
    days = abs((today - last).days)

    if days >= due_after_days:
        message = f"Check-in due: {days} days since your last weigh-in."
    elif days > reminder_after_days:
        message = f"It's been {days} days since your last weigh-in. Log now to keep targets accurate."
    else:
        message = "Weigh-ins are up to date."

    return CheckInStatus(
        days_since_last=days,
        is_due=days >= due_after_days,
        needs_reminder=days > reminder_after_days,
        message=message,
    )


def normalized_weekly_delta(weight_delta_kg: float, days_since_last_log: int) -> float:
    """Scale a weight delta to a weekly rate for gaps longer than a week.

    Gaps of a week or less keep the raw delta.
    """
    return weight_delta_kg * 7 / max(days_since_last_log, 7)


@dataclass
class Recalibration:
    """Updated plan after a check-in, with the reason for any adaptation."""

    plan: MacroPlan
    adaptation_reason: Optional[str] = None
    normalized_weekly_delta: float = 0.0

    @property
    def adapted(self) -> bool:
        return self.adaptation_reason is not None

    def to_dict(self) -> dict:
        return {
            "plan": self.plan.to_dict(),
            "adapted": self.adapted,
            "adaptation_reason": self.adaptation_reason,
            "normalized_weekly_delta": round(self.normalized_weekly_delta, 2),
        }


def recalibrate_after_check_in(
    profile: BiometricProfile,
    new_weight_kg: float,
    previous_weight_kg: float,
    previous_calories: Optional[int],
    days_since_last_log: int = 7,
    safety_floor: int = SAFETY_FLOOR_KCAL,
    max_below_bmr: int = MAX_BELOW_BMR,
    adjustments: Optional[dict[Goal, int]] = None,
) -> Recalibration:
    """Recompute the plan for a new weight and correct off-goal trends.

    Every corrected target is held at or above `max(safety_floor,
    bmr - max_below_bmr)` of the fresh plan.

    Args:
        profile: Profile as stored before the check-in
        new_weight_kg: Weight just logged
        previous_weight_kg: Weight at the previous check-in
        previous_calories: Daily target in force until now (None skips the
                           adaptive step)
        days_since_last_log: Days between the two check-ins
        safety_floor: Absolute minimum target (kcal)
        max_below_bmr: Largest allowed gap under BMR (kcal)
        adjustments: Optional per-goal calorie adjustment override

    Returns:
        Recalibration whose plan.calories and plan.weekly_calories the caller
        persists
    """
    updated = profile.with_weight(new_weight_kg)
    plan = calculate_plan(
        updated,
        safety_floor=safety_floor,
        max_below_bmr=max_below_bmr,
        adjustments=adjustments,
    )

    delta = normalized_weekly_delta(new_weight_kg - previous_weight_kg, days_since_last_log)
    if not previous_calories:
        return Recalibration(plan=plan, normalized_weekly_delta=delta)

    floor = max(safety_floor, plan.bmr - max_below_bmr)
    target = plan.calories
    reason = None

    if profile.goal == Goal.FAT_LOSS:
        if delta > FAT_LOSS_GAIN_TRIGGER:
            corrective = max(floor, previous_calories + FAT_LOSS_GAIN_CORRECTION)
            if corrective < target:
                target = corrective
                reason = "Zig Zag correction: weekly gain trend detected. Deficit increased."
        elif delta < FAT_LOSS_RAPID_TRIGGER:
            recovery = previous_calories + FAT_LOSS_RAPID_CORRECTION
            if recovery > target:
                target = recovery
                reason = "Metabolic guard: weight loss too rapid (>1.2 kg/week). Calories increased."

    elif profile.goal == Goal.MUSCLE_GAIN:
        if delta > MUSCLE_GAIN_FAST_TRIGGER:
            trimmed = max(floor, previous_calories + MUSCLE_GAIN_FAST_CORRECTION)
            if trimmed < target:
                target = trimmed
                reason = "Lean gains: rate of gain above 0.8 kg/week. Calories trimmed."

    if reason is not None:
        plan = with_calories(plan, target, new_weight_kg)

    return Recalibration(plan=plan, adaptation_reason=reason, normalized_weekly_delta=delta)
