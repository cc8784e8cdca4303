# FILE: tests/test_adversary_review.py
"""Tests for app/agents/adversary_review.py"""

from unittest.mock import AsyncMock, Mock

import pytest

from app.agents.adversary_review import AdversaryReviewResult, run_adversary_review
from app.observability.outcome_evaluator import score_adversarial


def _backend(payload=None, side_effect=None):
    backend = Mock()
    backend.reason = AsyncMock(return_value=payload, side_effect=side_effect)
    return backend


class TestRunAdversaryReview:
    @pytest.mark.asyncio
    async def test_parses_backend_report(self, good_spec):
        backend = _backend({
            "approved": True,
            "issues": [{
                "severity": "warning",
                "category": "security",
                "description": "Restore endpoint has no auth check",
                "location": "verification[2]",
                "suggestion": "Require admin role for restore",
            }],
            "overallVerdict": "Close to ready.",
        })
        result = await run_adversary_review(good_spec, backend)
        assert result.approved is True
        assert result.issues[0].category == "security"
        assert result.overall_verdict == "Close to ready."

    @pytest.mark.asyncio
    async def test_blocker_forces_rejection(self, good_spec):
        backend = _backend({
            "approved": True,
            "issues": [{"severity": "blocker", "description": "No auth model"}],
        })
        result = await run_adversary_review(good_spec, backend)
        assert result.approved is False

    @pytest.mark.asyncio
    async def test_backend_failure_asks_for_manual_review(self, good_spec):
        result = await run_adversary_review(good_spec, _backend(side_effect=TimeoutError()))
        assert result.approved is False
        assert [i.severity for i in result.issues] == ["warning"]
        assert score_adversarial(result) == 95

    @pytest.mark.asyncio
    async def test_malformed_report_degrades(self, good_spec):
        result = await run_adversary_review(good_spec, _backend({"issues": [{"severity": "fatal"}]}))
        assert [i.severity for i in result.issues] == ["warning"]

    @pytest.mark.asyncio
    async def test_no_backend(self, good_spec):
        result = await run_adversary_review(good_spec, None)
        assert result.approved is False
        assert len(result.issues) == 1

    @pytest.mark.asyncio
    async def test_audit_entry(self, good_spec):
        sink = Mock()
        await run_adversary_review(good_spec, _backend({"approved": True, "issues": []}), spec_id="s1", audit_sink=sink)
        entry = sink.append.call_args[0][0]
        assert entry.agent_name == "AdversaryReview"
        assert entry.action == "agent.adversaryReview"
        assert entry.details["blockerCount"] == 0


class TestFromDict:
    def test_unknown_severities_dropped(self):
        result = AdversaryReviewResult.from_dict({
            "approved": False,
            "issues": [{"severity": "blocker", "description": "a"}, {"severity": "meh"}, "junk"],
            "overallVerdict": "x",
        })
        assert [i.severity for i in result.issues] == ["blocker"]
        assert result.to_dict()["overallVerdict"] == "x"
