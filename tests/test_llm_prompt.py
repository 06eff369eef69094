"""Tests for the daily meal-plan prompt."""

from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from helpers import make_record
from mealman.export.llm_prompt import DEFAULT_TEMPLATE, DailyPlanPromptGenerator
from mealman.tracking.zigzag import calculate_zigzag_target

THURSDAY = date(2024, 1, 4)


@pytest.fixture
def generator(tmp_path) -> DailyPlanPromptGenerator:
    return DailyPlanPromptGenerator(config_dir=tmp_path)


class TestDailyPlanPrompt:
    """Tests for DailyPlanPromptGenerator.generate."""

    def test_uses_plan_without_zigzag(self, generator, profile, plan) -> None:
        text = generator.generate(profile, plan, THURSDAY)

        assert "Create a meal plan for 2024-01-04 at 1953 kcal." in text
        assert "Protein: 160g | Carbs: 184g | Fats: 64g" in text
        assert "Diet Type: non-veg. Preferences: none." in text
        assert "SUSTAINABLE" in text
        assert "No medical conditions." in text
        assert "Special Context" not in text

    def test_corrected_target_and_note(self, generator, profile, plan) -> None:
        history = [make_record(date(2024, 1, d), 2253) for d in (1, 2, 3)]
        zigzag = calculate_zigzag_target(THURSDAY, plan.calories, history)
        text = generator.generate(profile, plan, THURSDAY, zigzag=zigzag)

        assert f"at {zigzag.corrected_target_kcal} kcal" in text
        assert "Special Context: ALERT: User is currently 900 kcal OVER weekly budget." in text

    def test_profile_details(self, generator, profile, plan) -> None:
        detailed = replace(
            profile,
            dietary_preference="veg",
            medical_conditions="PCOS",
            goal_aggressiveness="aggressive",
        )
        text = generator.generate(detailed, plan, THURSDAY, preferences="no mushrooms")

        assert "Diet Type: veg. Preferences: no mushrooms." in text
        assert "AGGRESSIVE/ACCELERATED" in text
        assert "MEDICAL CONDITIONS: PCOS." in text

    def test_diet_override(self, generator, profile, plan) -> None:
        text = generator.generate(replace(profile, dietary_preference="veg"), plan, THURSDAY, diet_type="egg")
        assert "Diet Type: egg." in text

    def test_invalid_diet(self, generator, profile, plan) -> None:
        with pytest.raises(ValueError, match="diet_type"):
            generator.generate(profile, plan, THURSDAY, diet_type="keto")


class TestTemplates:
    """Tests for custom template handling."""

    def test_custom_template(self, tmp_path, profile, plan) -> None:
        (tmp_path / "daily_prompt_template.md").write_text("Plan $DATE: $CALORIES kcal $UNKNOWN")
        text = DailyPlanPromptGenerator(config_dir=tmp_path).generate(profile, plan, THURSDAY)

        assert text == "Plan 2024-01-04: 1953 kcal $UNKNOWN"

    def test_save_default_template(self, tmp_path) -> None:
        path = DailyPlanPromptGenerator(config_dir=tmp_path / "cfg").save_default_template()

        assert path.read_text() == DEFAULT_TEMPLATE
