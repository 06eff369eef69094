"""Tests for the JSON response envelope and typed notices."""

from __future__ import annotations

import json
from datetime import date

from mealman.agent.response import (
    NoticeKind,
    check_in_notice,
    create_response,
    error_response,
    fallback_notice,
    over_budget_notice,
    refeed_notice,
)


class TestNotices:
    """Tests for the notice constructors."""

    def test_over_budget_message(self) -> None:
        notice = over_budget_notice(1899.6)

        assert notice.kind == NoticeKind.OVER_BUDGET
        assert notice.message == "Over weekly budget by 1900 kcal"
        assert "zigzag" in notice.suggestion

    def test_check_in_due_vs_reminder(self) -> None:
        assert check_in_notice("due", is_due=True).kind == NoticeKind.CHECK_IN_DUE
        reminder = check_in_notice("soon", is_due=False)
        assert reminder.kind == NoticeKind.CHECK_IN_REMINDER
        assert reminder.to_dict() == {"kind": "check_in_reminder", "message": "soon"}

    def test_refeed_has_no_suggestion(self) -> None:
        assert "suggestion" not in refeed_notice().to_dict()


class TestAgentResponse:
    """Tests for AgentResponse serialization."""

    def test_create_response(self) -> None:
        data = json.loads(create_response("plan", data={"calories": 1953}).to_json())

        assert data["success"] is True
        assert data["data"] == {"calories": 1953}
        assert data["warnings"] == []
        assert data["schema_version"] == "1.1"

    def test_notices_feed_warnings_and_suggestions(self) -> None:
        response = create_response(
            "predict",
            notices=[fallback_notice(), refeed_notice()],
            suggestions=["Log at least two weigh-ins", "Check your profile"],
        )
        data = response.to_dict()

        assert data["warnings"] == [fallback_notice().message, refeed_notice().message]
        assert [n["kind"] for n in data["notices"]] == ["fallback_prediction", "refeed_recommended"]
        assert data["suggestions"] == ["Log at least two weigh-ins", "Check your profile"]

    def test_dates_serialize(self) -> None:
        data = json.loads(create_response("budget", data={"week_start": date(2024, 1, 1)}).to_json())
        assert data["data"]["week_start"] == "2024-01-01"

    def test_error_response(self) -> None:
        response = error_response("plan", "boom", ["try again"])

        assert response.success is False
        assert response.errors == ["boom"]
        assert response.notices == []
        assert response.human_summary == "Error: boom"
