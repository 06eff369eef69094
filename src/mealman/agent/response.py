"""JSON envelope for CLI output consumed by scripts and agents.

Numbers live in `data`. Conditions that do not stop a command but should
change what the caller does next (a fallback projection, an over-budget
week, a recommended refeed, a due weigh-in, an unhealthy pace) are typed
`Notice` entries so callers can branch on `kind` instead of parsing text.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

SCHEMA_VERSION = "1.1"


class NoticeKind(Enum):
    """Machine-readable category of a warning."""
    FALLBACK_PREDICTION = "fallback_prediction"
    UNHEALTHY_PACE = "unhealthy_pace"
    OVER_BUDGET = "over_budget"
    REFEED_RECOMMENDED = "refeed_recommended"
    CHECK_IN_DUE = "check_in_due"
    CHECK_IN_REMINDER = "check_in_reminder"


@dataclass
class Notice:
    """A non-fatal warning with an optional follow-up suggestion."""

    kind: NoticeKind
    message: str
    suggestion: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data = {"kind": self.kind.value, "message": self.message}
        if self.suggestion:
            data["suggestion"] = self.suggestion
        return data


def fallback_notice() -> Notice:
    return Notice(
        NoticeKind.FALLBACK_PREDICTION,
        "Fewer than two weigh-ins: projection uses an assumed rate",
        suggestion="Log at least two weigh-ins",
    )


def pace_notice(recommendation: str) -> Notice:
    return Notice(NoticeKind.UNHEALTHY_PACE, recommendation)


def over_budget_notice(excess_kcal: float) -> Notice:
    return Notice(
        NoticeKind.OVER_BUDGET,
        f"Over weekly budget by {excess_kcal:.0f} kcal",
        suggestion="Run `mealman zigzag` for today's corrected target",
    )


def refeed_notice() -> Notice:
    return Notice(
        NoticeKind.REFEED_RECOMMENDED,
        "Consistent low intake detected: consider a refeed day at maintenance",
    )


def check_in_notice(message: str, is_due: bool) -> Notice:
    """Reminder or due notice for a weigh-in, carrying the status message."""
    if is_due:
        return Notice(
            NoticeKind.CHECK_IN_DUE,
            message,
            suggestion="Log a weight and run `mealman recalibrate`",
        )
    return Notice(NoticeKind.CHECK_IN_REMINDER, message)


@dataclass
class AgentResponse:
    """Result envelope shared by every command."""

    success: bool
    command: str
    data: dict[str, Any] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    notices: list[Notice] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    human_summary: str = ""

    @property
    def warnings(self) -> list[str]:
        return [n.message for n in self.notices]

    def all_suggestions(self) -> list[str]:
        """Explicit suggestions followed by those attached to notices."""
        extra = [n.suggestion for n in self.notices if n.suggestion]
        return self.suggestions + [s for s in extra if s not in self.suggestions]

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "command": self.command,
            "data": self.data,
            "errors": self.errors,
            "warnings": self.warnings,
            "notices": [n.to_dict() for n in self.notices],
            "suggestions": self.all_suggestions(),
            "human_summary": self.human_summary,
            "timestamp": datetime.now().isoformat(),
            "schema_version": SCHEMA_VERSION,
        }

    def to_json(self, indent: int = 2) -> str:
        # dates and enums inside `data` fall back to str()
        return json.dumps(self.to_dict(), indent=indent, default=str)


def create_response(
    command: str,
    data: Optional[dict[str, Any]] = None,
    notices: Optional[list[Notice]] = None,
    suggestions: Optional[list[str]] = None,
    human_summary: str = "",
) -> AgentResponse:
    """Build a successful response.

    Args:
        command: CLI command name
        data: Command results
        notices: Non-fatal warnings
        suggestions: Next steps not tied to a notice
        human_summary: One-line description for humans

    Returns:
        AgentResponse with success=True
    """
    return AgentResponse(
        success=True,
        command=command,
        data=data or {},
        notices=notices or [],
        suggestions=suggestions or [],
        human_summary=human_summary,
    )


def error_response(
    command: str,
    error: str,
    suggestions: Optional[list[str]] = None,
) -> AgentResponse:
    """Build a failed response for a command that could not run."""
    return AgentResponse(
        success=False,
        command=command,
        errors=[error],
        suggestions=suggestions or [],
        human_summary=f"Error: {error}",
    )
