"""Data models for meal adherence and weight tracking."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Union


@dataclass(frozen=True)
class Macros:
    """Macronutrient totals for a meal or a day."""

    protein_g: float = 0.0
    carb_g: float = 0.0
    fat_g: float = 0.0
    kcal: float = 0.0

    @classmethod
    def zero(cls) -> "Macros":
        return cls()

    def __add__(self, other: "Macros") -> "Macros":
        return Macros(
            protein_g=self.protein_g + other.protein_g,
            carb_g=self.carb_g + other.carb_g,
            fat_g=self.fat_g + other.fat_g,
            kcal=self.kcal + other.kcal,
        )

    def to_dict(self) -> dict:
        return {
            "protein_g": self.protein_g,
            "carb_g": self.carb_g,
            "fat_g": self.fat_g,
            "kcal": self.kcal,
        }


@dataclass
class MealEntry:
    """A prescribed meal and whether the user checked it off."""

    target_macros: Macros
    is_completed: bool = False
    name: Optional[str] = None


@dataclass
class DailyAdherenceRecord:
    """One day's planned meals for a user."""

    date: date
    meals: list[MealEntry] = field(default_factory=list)

    @property
    def has_activity(self) -> bool:
        """True when at least one meal was marked as eaten."""
        return any(
            isinstance(m, MealEntry) and m.is_completed for m in (self.meals or [])
        )


@dataclass
class WeightLogEntry:
    """A single weigh-in."""

    timestamp: Union[date, datetime]
    weight_kg: float
    body_fat_pct: Optional[float] = None

    @property
    def measured_at(self) -> datetime:
        """Timestamp as a datetime; plain dates are taken at midnight."""
        if isinstance(self.timestamp, datetime):
            return self.timestamp
        return datetime(self.timestamp.year, self.timestamp.month, self.timestamp.day)


@dataclass(frozen=True)
class WeeklyBudget:
    """Standard daily target and the resulting weekly limit."""

    standard_daily_target: int
    weekly_limit: int

    @classmethod
    def from_daily_target(
        cls, standard_daily_target: int, weekly_override: Optional[int] = None
    ) -> "WeeklyBudget":
        return cls(
            standard_daily_target=standard_daily_target,
            weekly_limit=weekly_override or standard_daily_target * 7,
        )
