# FILE: tests/test_completeness.py
"""Tests for app/simulator/completeness.py"""

import pytest

from app.simulator.completeness import COMPLETENESS_PENALTIES, check_completeness
from app.specs.schema import ExecutableSpec


def _spec(data, **overrides):
    merged = dict(data)
    merged.update(overrides)
    return ExecutableSpec.from_dict(merged)


class TestCompletenessScoring:
    """Penalty deductions from 100."""

    def test_full_spec_scores_100(self, good_spec):
        result = check_completeness(good_spec)
        assert result.score == 100
        assert result.passed is True
        assert result.issues == []
        assert result.suggestions == []

    def test_empty_spec_floors_at_zero(self, empty_spec):
        result = check_completeness(empty_spec)
        # 15 + 15 + 10 + 20 + 20 + 20 = 100
        assert result.score == 0
        assert result.passed is False
        assert len(result.issues) == 6

    def test_single_pointer_costs_five(self, good_spec_data):
        pointers = good_spec_data["contextPointers"][:1]
        result = check_completeness(_spec(good_spec_data, contextPointers=pointers))
        assert result.score == 100 - COMPLETENESS_PENALTIES["single_context_pointer"]
        assert result.passed is True

    def test_no_critical_constraint(self, good_spec_data):
        result = check_completeness(_spec(good_spec_data, constraints=[
            {"rule": "Deletion is soft for 30 days", "severity": "warning", "rationale": "recovery"},
        ]))
        assert result.score == 90
        assert "no critical constraints" in result.issues[0]

    def test_single_scenario_costs_ten(self, good_spec_data):
        result = check_completeness(_spec(good_spec_data, verification=good_spec_data["verification"][:1]))
        assert result.score == 90

    def test_short_narrative_fields_sit_on_the_pass_line(self, good_spec_data):
        result = check_completeness(_spec(
            good_spec_data,
            narrative={"title": "Bulk", "objective": "Delete", "rationale": "Slow"},
        ))
        assert result.score == 60
        assert result.passed is True
        assert len(result.issues) == 3


class TestIssueSuggestionPairing:
    """Every issue has exactly one suggestion at the same index."""

    @pytest.mark.parametrize("overrides", [
        {},
        {"narrative": {}},
        {"contextPointers": []},
        {"constraints": []},
        {"verification": []},
        {"narrative": {}, "contextPointers": [], "constraints": [], "verification": []},
    ])
    def test_lengths_match(self, good_spec_data, overrides):
        result = check_completeness(_spec(good_spec_data, **overrides))
        assert len(result.issues) == len(result.suggestions)

    def test_score_always_in_range(self, empty_spec, good_spec):
        for spec in (empty_spec, good_spec):
            assert 0 <= check_completeness(spec).score <= 100
