"""Adaptive calorie budgets, adherence tracking and weight projections."""

__version__ = "0.1.0"
