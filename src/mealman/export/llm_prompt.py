"""Build the constraint prompt handed to the meal-content generator.

The engine decides the numbers (today's calorie target after zigzag
correction, gram targets) and any context note; the external generative
service decides the actual meals. This module only renders the request
text.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from string import Template
from typing import Optional

from mealman.profiles.body_calc import BiometricProfile, MacroPlan
from mealman.tracking.zigzag import ZigzagResult

DEFAULT_TEMPLATE = """\
Create a meal plan for $DATE at $CALORIES kcal.
Protein: ${PROTEIN}g | Carbs: ${CARBS}g | Fats: ${FATS}g
Diet Type: $DIET_TYPE. Preferences: $PREFERENCES.
Intensity: $INTENSITY.
$MEDICAL
$SPECIAL_CONTEXT
Return every meal with its protein, carbs, fats and calories so the day can
be tracked meal by meal.
"""

DIET_TYPES = ("veg", "egg", "non-veg")


class DailyPlanPromptGenerator:
    """Generate the daily meal-plan request for the content service."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize the generator.

        Args:
            config_dir: Directory that may hold daily_prompt_template.md.
                        Defaults to ~/.mealman/
        """
        self.config_dir = config_dir or Path.home() / ".mealman"
        self._template: Optional[str] = None

    @property
    def template(self) -> str:
        """Load custom template or use default."""
        if self._template is None:
            template_path = self.config_dir / "daily_prompt_template.md"
            if template_path.exists():
                self._template = template_path.read_text()
            else:
                self._template = DEFAULT_TEMPLATE
        return self._template

    def generate(
        self,
        profile: BiometricProfile,
        plan: MacroPlan,
        day: date,
        zigzag: Optional[ZigzagResult] = None,
        preferences: str = "",
        diet_type: Optional[str] = None,
    ) -> str:
        """Render the prompt.

        Args:
            profile: User profile (diet preference, medical notes, intensity)
            plan: Macro plan providing gram targets
            day: Day being planned
            zigzag: Corrected target for the day; plan calories when None
            preferences: Free-text food preferences
            diet_type: Overrides the profile's dietary preference

        Returns:
            Prompt text
        """
        calories = zigzag.corrected_target_kcal if zigzag else plan.calories

        diet = diet_type or profile.dietary_preference or "non-veg"
        if diet not in DIET_TYPES:
            raise ValueError(f"diet_type must be one of {DIET_TYPES}, got '{diet}'")

        if profile.goal_aggressiveness == "aggressive":
            intensity = "AGGRESSIVE/ACCELERATED (strict compliance required)"
        else:
            intensity = "SUSTAINABLE (balanced)"

        if profile.medical_conditions:
            medical = (
                f"MEDICAL CONDITIONS: {profile.medical_conditions}. "
                "AVOID CONTRAINDICATED FOODS."
            )
        else:
            medical = "No medical conditions."

        special = ""
        if zigzag and zigzag.context_note:
            special = f"Special Context: {zigzag.context_note}"

        template = Template(self.template)
        return template.safe_substitute(
            DATE=day.isoformat(),
            CALORIES=calories,
            PROTEIN=plan.protein_g,
            CARBS=plan.carb_g,
            FATS=plan.fat_g,
            DIET_TYPE=diet,
            PREFERENCES=preferences or "none",
            INTENSITY=intensity,
            MEDICAL=medical,
            SPECIAL_CONTEXT=special,
        )

    def save_default_template(self) -> Path:
        """Write the default template to the config dir for editing."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        path = self.config_dir / "daily_prompt_template.md"
        path.write_text(DEFAULT_TEMPLATE)
        return path
