"""Tests for weigh-in reminders and check-in recalibration."""

from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from helpers import make_log
from mealman.profiles.body_calc import ActivityLevel, BiometricProfile, Goal, Sex
from mealman.tracking.recalibration import (
    check_in_status,
    normalized_weekly_delta,
    recalibrate_after_check_in,
)

TODAY = date(2024, 2, 1)


class TestCheckInStatus:
    """Tests for check_in_status."""

    def test_no_entries(self) -> None:
        status = check_in_status([], TODAY)

        assert status.days_since_last is None
        assert not status.is_due
        assert not status.needs_reminder
        assert "first weight entry" in status.message

    def test_recent_weigh_in(self) -> None:
        status = check_in_status([make_log(date(2024, 1, 30), 80.0)], TODAY)

        assert status.days_since_last == 2
        assert not status.needs_reminder
        assert not status.is_due

    def test_reminder(self) -> None:
        status = check_in_status([make_log(date(2024, 1, 27), 80.0)], TODAY)

        assert status.days_since_last == 5
        assert status.needs_reminder
        assert not status.is_due

    def test_due_after_two_weeks(self) -> None:
        entries = [make_log(date(2024, 1, 4), 81.0), make_log(date(2024, 1, 18), 80.0)]
        status = check_in_status(entries, TODAY)

        assert status.days_since_last == 14
        assert status.is_due
        assert status.message.startswith("Check-in due")

    def test_custom_thresholds(self) -> None:
        status = check_in_status(
            [make_log(date(2024, 1, 27), 80.0)], TODAY, due_after_days=5, reminder_after_days=1
        )
        assert status.is_due


class TestNormalizedWeeklyDelta:
    """Tests for normalized_weekly_delta."""

    def test_short_gap_keeps_raw_delta(self) -> None:
        assert normalized_weekly_delta(1.0, 3) == pytest.approx(1.0)
        assert normalized_weekly_delta(1.0, 7) == pytest.approx(1.0)

    def test_long_gap_scaled(self) -> None:
        assert normalized_weekly_delta(1.0, 14) == pytest.approx(0.5)


class TestRecalibrateAfterCheckIn:
    """Tests for recalibrate_after_check_in."""

    def test_plan_follows_new_weight(self, profile) -> None:
        result = recalibrate_after_check_in(profile, 81.0, 80.0, None)

        assert result.plan.calories == 1968
        assert not result.adapted

    def test_gain_on_cut_deepens_deficit(self, profile) -> None:
        result = recalibrate_after_check_in(profile, 81.0, 80.0, 2100)

        assert result.adapted
        assert result.adaptation_reason.startswith("Zig Zag correction")
        assert result.plan.calories == 1750
        assert result.plan.protein_g == 162
        assert result.plan.fat_g == 65
        assert result.plan.carb_g == 129
        assert result.plan.weekly_calories == 1750 * 7

    def test_gain_correction_held_near_bmr(self, profile) -> None:
        """A deep correction stops 200 kcal under the fresh plan's BMR."""
        result = recalibrate_after_check_in(profile, 81.0, 80.0, 1900)

        assert result.adapted
        assert result.plan.bmr == 1829
        assert result.plan.calories == 1629
        assert result.plan.carb_g == 99

    def test_gain_correction_respects_floor(self, profile) -> None:
        result = recalibrate_after_check_in(profile, 81.0, 80.0, 1400)
        assert result.plan.calories >= max(1200, result.plan.bmr - 200)

    def test_small_profile_keeps_safety_floor(self) -> None:
        """When BMR - 200 is under 1200 the absolute floor wins."""
        small = BiometricProfile(
            weight_kg=45,
            height_cm=150,
            age_years=60,
            sex=Sex.FEMALE,
            activity_level=ActivityLevel.SEDENTARY,
            goal=Goal.FAT_LOSS,
        )
        result = recalibrate_after_check_in(small, 46.0, 45.0, 1300)

        assert not result.adapted
        assert result.plan.calories == 1200

    def test_custom_budget_settings(self, profile) -> None:
        adjustments = {Goal.FAT_LOSS: -300, Goal.MUSCLE_GAIN: 250, Goal.MAINTENANCE: 0}
        result = recalibrate_after_check_in(profile, 80.0, 80.0, None, adjustments=adjustments)

        assert result.plan.calories == 2153

    def test_trim_on_bulk_held_near_bmr(self, profile) -> None:
        bulking = replace(profile, goal=Goal.MUSCLE_GAIN)
        result = recalibrate_after_check_in(bulking, 81.0, 80.0, 1500)

        assert result.adaptation_reason.startswith("Lean gains")
        assert result.plan.calories == 1629

    def test_rapid_loss_raises_calories(self, profile) -> None:
        result = recalibrate_after_check_in(profile, 78.0, 80.0, 1900)

        assert result.adaptation_reason.startswith("Metabolic guard")
        assert result.plan.calories == 2150

    def test_long_gap_normalizes_delta(self, profile) -> None:
        result = recalibrate_after_check_in(profile, 81.0, 80.0, 1900, days_since_last_log=28)

        assert result.normalized_weekly_delta == pytest.approx(0.25)
        assert not result.adapted
        assert result.plan.calories == 1968

    def test_fast_lean_gain_trimmed(self, profile) -> None:
        bulking = replace(profile, goal=Goal.MUSCLE_GAIN)
        result = recalibrate_after_check_in(bulking, 81.0, 80.0, 2600)

        assert result.adaptation_reason.startswith("Lean gains")
        assert result.plan.calories == 2400

    def test_correction_never_loosens_target(self, profile) -> None:
        """A correction above the fresh plan's target is not applied."""
        bulking = replace(profile, goal=Goal.MUSCLE_GAIN)
        result = recalibrate_after_check_in(bulking, 81.0, 80.0, 3000)

        assert not result.adapted
        assert result.plan.calories == 2718

    def test_maintenance_never_adapts(self, profile) -> None:
        steady = replace(profile, goal=Goal.MAINTENANCE)
        result = recalibrate_after_check_in(steady, 83.0, 80.0, 2400)
        assert not result.adapted

    def test_to_dict(self, profile) -> None:
        data = recalibrate_after_check_in(profile, 81.0, 80.0, 2100).to_dict()

        assert data["adapted"] is True
        assert data["plan"]["calories"] == 1750
        assert data["normalized_weekly_delta"] == 1.0
