"""Build engine models from plain dicts (parsed YAML or JSON).

Profiles and histories arrive from external storage as plain rows. Top-level
problems (unknown enum value, bad date, missing field, a day listed twice)
raise ValueError naming the field. Individual meal entries that cannot be
read (including a completion flag that is not a recognizable boolean) are
skipped, since a malformed meal contributes nothing to consumption anyway.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional, TypeVar, Union

import yaml

from mealman.profiles.body_calc import ActivityLevel, BiometricProfile, Goal, Sex
from mealman.tracking.models import DailyAdherenceRecord, Macros, MealEntry, WeightLogEntry

E = TypeVar("E", bound=Enum)

# Short keys used by stored meal rows (p/c/f/cal)
MACRO_ALIASES = {
    "protein_g": ("protein_g", "protein", "p"),
    "carb_g": ("carb_g", "carbs", "c"),
    "fat_g": ("fat_g", "fats", "fat", "f"),
    "kcal": ("kcal", "calories", "cal"),
}


def load_yaml_file(path: Path) -> Any:
    """Read a YAML (or JSON) file; empty files load as None."""
    with open(path) as f:
        return yaml.safe_load(f)


def parse_enum(enum_cls: type[E], value: Any, field_name: str) -> E:
    """Parse an enum from its value or name, case-insensitively."""
    if isinstance(value, enum_cls):
        return value

    text = str(value).strip().lower().replace(" ", "_").replace("-", "_")
    for member in enum_cls:
        if text in (member.value, member.name.lower()):
            return member

    valid = ", ".join(m.value for m in enum_cls)
    raise ValueError(f"{field_name} must be one of {valid}, got '{value}'")


def parse_date(value: Any, field_name: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as e:
        raise ValueError(f"{field_name} must be an ISO date, got '{value}'") from e


def parse_timestamp(value: Any, field_name: str = "timestamp") -> Union[date, datetime]:
    """Parse a date or datetime; date-only strings stay dates."""
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        if len(text) <= 10:
            return date.fromisoformat(text)
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValueError(f"{field_name} must be an ISO date or datetime, got '{value}'") from e
    # Compare all timestamps as naive UTC-less values
    return parsed.replace(tzinfo=None)


def _require(data: dict, key: str, *aliases: str) -> Any:
    for k in (key, *aliases):
        if k in data and data[k] is not None:
            return data[k]
    raise ValueError(f"Missing required field '{key}'")


def _optional_float(data: dict, *keys: str) -> Optional[float]:
    for k in keys:
        if data.get(k) is not None:
            return float(data[k])
    return None


def profile_from_dict(data: dict) -> BiometricProfile:
    """Build a BiometricProfile from a stored profile row.

    Accepts both the engine's field names and the short names used by the
    profile table (weight, height, age, gender, activityLevel, bodyFat).
    """
    if not isinstance(data, dict):
        raise ValueError("Profile must be a mapping")

    try:
        weight = float(_require(data, "weight_kg", "weight"))
        height = float(_require(data, "height_cm", "height"))
        age = int(_require(data, "age_years", "age"))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid profile: {e}") from e

    daily = data.get("daily_calories")
    weekly = data.get("weekly_calories")

    return BiometricProfile(
        weight_kg=weight,
        height_cm=height,
        age_years=age,
        sex=parse_enum(Sex, _require(data, "sex", "gender"), "sex"),
        activity_level=parse_enum(
            ActivityLevel, _require(data, "activity_level", "activityLevel"), "activity_level"
        ),
        goal=parse_enum(Goal, _require(data, "goal"), "goal"),
        body_fat_pct=_optional_float(data, "body_fat_pct", "body_fat", "bodyFat"),
        dietary_preference=data.get("dietary_preference"),
        medical_conditions=data.get("medical_conditions"),
        goal_aggressiveness=data.get("goal_aggressiveness"),
        daily_calories=int(daily) if daily else None,
        weekly_calories=int(weekly) if weekly else None,
    )


def macros_from_dict(data: dict) -> Macros:
    values = {}
    for field_name, aliases in MACRO_ALIASES.items():
        values[field_name] = float(next((data[a] for a in aliases if a in data), 0) or 0)
    return Macros(**values)


TRUE_FLAGS = ("true", "yes", "1")
FALSE_FLAGS = ("false", "no", "0", "")


def parse_flag(value: Any) -> Optional[bool]:
    """Read a completion flag; None when it is neither a bool nor a known word."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return {0: False, 1: True}.get(value)
    text = str(value).strip().lower()
    if text in TRUE_FLAGS:
        return True
    if text in FALSE_FLAGS:
        return False
    return None


def meal_from_dict(data: Any) -> Optional[MealEntry]:
    """Build a MealEntry, or None when the row cannot be read."""
    if not isinstance(data, dict):
        return None
    raw_macros = data.get("target_macros", data.get("macros"))
    if not isinstance(raw_macros, dict):
        return None
    try:
        macros = macros_from_dict(raw_macros)
    except (TypeError, ValueError):
        return None
    completed = parse_flag(data.get("is_completed", data.get("isCompleted", False)))
    if completed is None:
        return None
    return MealEntry(target_macros=macros, is_completed=completed, name=data.get("name"))


def record_from_dict(data: dict) -> DailyAdherenceRecord:
    if not isinstance(data, dict):
        raise ValueError("Daily record must be a mapping")
    meals_raw = data.get("meals")
    meals = []
    if isinstance(meals_raw, list):
        meals = [m for m in (meal_from_dict(r) for r in meals_raw) if m is not None]
    return DailyAdherenceRecord(date=parse_date(_require(data, "date")), meals=meals)


def records_from_dicts(rows: Any) -> list[DailyAdherenceRecord]:
    """Build adherence records from a list of rows (or a {'days': [...]} mapping)."""
    if isinstance(rows, dict):
        rows = rows.get("days", rows.get("records", []))
    if rows is None:
        return []
    if not isinstance(rows, list):
        raise ValueError("Adherence history must be a list of daily records")
    records = [record_from_dict(r) for r in rows]
    seen: set[date] = set()
    for record in records:
        if record.date in seen:
            raise ValueError(f"Duplicate daily record for {record.date.isoformat()}")
        seen.add(record.date)
    return records


def weight_log_from_dict(data: dict) -> WeightLogEntry:
    if not isinstance(data, dict):
        raise ValueError("Weight log entry must be a mapping")
    try:
        weight = float(_require(data, "weight_kg", "weight"))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid weight log entry: {e}") from e
    return WeightLogEntry(
        timestamp=parse_timestamp(_require(data, "timestamp", "created_at", "date")),
        weight_kg=weight,
        body_fat_pct=_optional_float(data, "body_fat_pct", "body_fat", "bodyFat"),
    )


def weight_logs_from_dicts(rows: Any) -> list[WeightLogEntry]:
    """Build weight log entries from a list of rows (or a {'entries': [...]} mapping)."""
    if isinstance(rows, dict):
        rows = rows.get("entries", rows.get("logs", []))
    if rows is None:
        return []
    if not isinstance(rows, list):
        raise ValueError("Weight log must be a list of entries")
    return [weight_log_from_dict(r) for r in rows]
