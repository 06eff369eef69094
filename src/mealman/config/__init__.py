"""Configuration module."""

from __future__ import annotations

from mealman.config.settings import Settings, get_settings, reload_settings

__all__ = ["Settings", "get_settings", "reload_settings"]
