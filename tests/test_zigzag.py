"""Tests for the zigzag weekly budget correction."""

from __future__ import annotations

from datetime import date

import pytest

from helpers import make_record
from mealman.tracking.zigzag import calculate_zigzag_target, select_week_history

MONDAY = date(2024, 1, 1)
WEDNESDAY = date(2024, 1, 3)
THURSDAY = date(2024, 1, 4)
SUNDAY = date(2024, 1, 7)


class TestCalculateZigzagTarget:
    """Tests for calculate_zigzag_target."""

    def test_surplus_spread_over_remaining_days(self) -> None:
        """Three days 300 over, four days left: 225 kcal/day cut."""
        history = [make_record(date(2024, 1, d), 1200, 1100) for d in (1, 2, 3)]
        result = calculate_zigzag_target(THURSDAY, 2000, history)

        assert result.days_elapsed == 3
        assert result.days_remaining == 4
        assert result.expected_total == 6000
        assert result.actual_total == pytest.approx(6900)
        assert result.net_surplus == pytest.approx(900)
        assert result.adjustment_per_day == 225
        assert result.corrected_target_kcal == 1775
        assert result.context_note == (
            "ALERT: User is currently 900 kcal OVER weekly budget.\n"
            "STRATEGY: Reduce daily target by 225 kcal."
        )

    def test_deficit_raises_target(self) -> None:
        history = [make_record(date(2024, 1, d), 1500) for d in (1, 2)]
        result = calculate_zigzag_target(WEDNESDAY, 2000, history)

        assert result.adjustment_per_day == -200
        assert result.corrected_target_kcal == 2200
        assert result.context_note == (
            "NOTICE: User is 1000 kcal UNDER weekly budget.\n"
            "STRATEGY: Increase daily target by 200 kcal (refeed)."
        )

    def test_monday_returns_standard_target(self) -> None:
        result = calculate_zigzag_target(MONDAY, 2000, [])

        assert result.days_elapsed == 0
        assert result.days_remaining == 7
        assert result.corrected_target_kcal == 2000
        assert result.context_note == ""
        assert not result.is_adjusted

    def test_on_target_week(self) -> None:
        history = [make_record(date(2024, 1, d), 2000) for d in (1, 2, 3)]
        result = calculate_zigzag_target(THURSDAY, 2000, history)

        assert result.corrected_target_kcal == 2000
        assert result.context_note == ""

    def test_missing_days_count_as_zero(self) -> None:
        """Days with no record contribute nothing to the actual total."""
        result = calculate_zigzag_target(THURSDAY, 2000, [make_record(MONDAY, 2000)])

        assert result.net_surplus == pytest.approx(-4000)
        assert result.corrected_target_kcal == 3000

    def test_small_adjustment_has_no_note(self) -> None:
        result = calculate_zigzag_target(date(2024, 1, 2), 2000, [make_record(MONDAY, 2100)])

        assert result.adjustment_per_day == 17
        assert result.corrected_target_kcal == 1983
        assert result.context_note == ""

    def test_note_threshold_is_configurable(self) -> None:
        result = calculate_zigzag_target(
            date(2024, 1, 2), 2000, [make_record(MONDAY, 2100)], note_threshold=10
        )
        assert result.context_note.startswith("ALERT")

    def test_half_rounds_up(self) -> None:
        history = [make_record(MONDAY, 2002), make_record(date(2024, 1, 2), 2000), make_record(WEDNESDAY, 2000)]
        result = calculate_zigzag_target(THURSDAY, 2000, history)

        assert result.adjustment_per_day == 1

    def test_sunday_absorbs_remaining_deviation(self) -> None:
        history = [make_record(date(2024, 1, d), 2100) for d in range(1, 7)]
        result = calculate_zigzag_target(SUNDAY, 2000, history)

        assert result.days_remaining == 1
        assert result.corrected_target_kcal == 1400

    def test_unchecked_meals_ignored(self) -> None:
        history = [make_record(date(2024, 1, d), 2000, 900, completed=False) for d in (1, 2, 3)]
        result = calculate_zigzag_target(THURSDAY, 2000, history)

        assert result.actual_total == 0
        assert result.corrected_target_kcal == 3500


class TestSelectWeekHistory:
    """Tests for select_week_history."""

    def test_excludes_today_and_previous_week(self) -> None:
        history = [
            make_record(date(2023, 12, 31), 4000),
            make_record(MONDAY, 2000),
            make_record(WEDNESDAY, 2000),
            make_record(THURSDAY, 4000),
        ]
        selected = select_week_history(history, THURSDAY)

        assert [r.date for r in selected] == [MONDAY, WEDNESDAY]

    def test_history_outside_week_does_not_shift_target(self) -> None:
        stray = [make_record(date(2023, 12, 31), 9000), make_record(THURSDAY, 9000)]
        assert calculate_zigzag_target(MONDAY, 2000, stray).corrected_target_kcal == 2000
