"""Agent interface module for JSON tool output."""

from __future__ import annotations

from mealman.agent.response import (
    AgentResponse,
    Notice,
    NoticeKind,
    create_response,
    error_response,
)

__all__ = [
    "AgentResponse",
    "Notice",
    "NoticeKind",
    "create_response",
    "error_response",
]
