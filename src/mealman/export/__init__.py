"""Export module for content-generation prompts."""

from __future__ import annotations

from mealman.export.llm_prompt import DailyPlanPromptGenerator

__all__ = ["DailyPlanPromptGenerator"]
