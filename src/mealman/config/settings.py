"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".mealman"


@dataclass
class BudgetConfig:
    """Calorie target adjustments and safety floors."""

    safety_floor_kcal: int = 1200
    fat_loss_deficit: int = 500
    muscle_gain_surplus: int = 250
    max_below_bmr: int = 200


@dataclass
class ZigzagConfig:
    """Weekly budget correction configuration."""

    note_threshold_kcal: int = 30


@dataclass
class PredictionConfig:
    """Weight trajectory projection configuration."""

    horizon_days: int = 28
    fallback_weekly_change_kg: float = -0.5


@dataclass
class CheckInConfig:
    """Weigh-in reminder configuration."""

    due_after_days: int = 14
    reminder_after_days: int = 3


@dataclass
class DefaultsConfig:
    """Default values for various operations."""

    output_format: str = "table"  # "table", "json"


@dataclass
class Settings:
    """Main application settings."""

    budget: BudgetConfig = field(default_factory=BudgetConfig)
    zigzag: ZigzagConfig = field(default_factory=ZigzagConfig)
    prediction: PredictionConfig = field(default_factory=PredictionConfig)
    check_in: CheckInConfig = field(default_factory=CheckInConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.mealman/config.yaml

        Returns:
            Settings instance
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        settings = cls()

        # Parse budget config
        if "budget" in data:
            budget_data = data["budget"]
            for key in (
                "safety_floor_kcal",
                "fat_loss_deficit",
                "muscle_gain_surplus",
                "max_below_bmr",
            ):
                if key in budget_data:
                    setattr(settings.budget, key, int(budget_data[key]))

        # Parse zigzag config
        if "zigzag" in data:
            zz_data = data["zigzag"]
            if "note_threshold_kcal" in zz_data:
                settings.zigzag.note_threshold_kcal = int(zz_data["note_threshold_kcal"])

        # Parse prediction config
        if "prediction" in data:
            pred_data = data["prediction"]
            if "horizon_days" in pred_data:
                settings.prediction.horizon_days = int(pred_data["horizon_days"])
            if "fallback_weekly_change_kg" in pred_data:
                settings.prediction.fallback_weekly_change_kg = float(
                    pred_data["fallback_weekly_change_kg"]
                )

        # Parse check-in config
        if "check_in" in data:
            ci_data = data["check_in"]
            if "due_after_days" in ci_data:
                settings.check_in.due_after_days = int(ci_data["due_after_days"])
            if "reminder_after_days" in ci_data:
                settings.check_in.reminder_after_days = int(
                    ci_data["reminder_after_days"]
                )

        # Parse defaults
        if "defaults" in data:
            def_data = data["defaults"]
            if "output_format" in def_data:
                settings.defaults.output_format = def_data["output_format"]

        return settings

    def to_dict(self) -> dict:
        """Return settings in the YAML file layout."""
        return {
            "budget": {
                "safety_floor_kcal": self.budget.safety_floor_kcal,
                "fat_loss_deficit": self.budget.fat_loss_deficit,
                "muscle_gain_surplus": self.budget.muscle_gain_surplus,
                "max_below_bmr": self.budget.max_below_bmr,
            },
            "zigzag": {
                "note_threshold_kcal": self.zigzag.note_threshold_kcal,
            },
            "prediction": {
                "horizon_days": self.prediction.horizon_days,
                "fallback_weekly_change_kg": self.prediction.fallback_weekly_change_kg,
            },
            "check_in": {
                "due_after_days": self.check_in.due_after_days,
                "reminder_after_days": self.check_in.reminder_after_days,
            },
            "defaults": {
                "output_format": self.defaults.output_format,
            },
        }

    def save(self, config_path: Optional[Path] = None) -> Path:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.mealman/config.yaml

        Returns:
            Path the settings were written to
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

        return config_path


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings(config_path: Optional[Path] = None) -> Settings:
    """Force reload settings from disk."""
    global _settings
    _settings = Settings.load(config_path)
    return _settings
