# FILE: app/simulator/completeness.py
"""
Completeness check - are all four spec layers present and non-trivially populated?

Deterministic, synchronous, no I/O. Starts at 100 and subtracts fixed
penalties from COMPLETENESS_PENALTIES. Each penalty appends exactly one issue
and one suggestion, so issues[i] always pairs with suggestions[i].
"""
from __future__ import annotations

from typing import List

from app.specs.schema import ConstraintSeverity, ExecutableSpec

from .types import CheckResult

# =============================================================================
# Configuration
# =============================================================================

PASS_THRESHOLD = 60

MIN_TITLE_CHARS = 5
MIN_OBJECTIVE_CHARS = 20
MIN_RATIONALE_CHARS = 20

COMPLETENESS_PENALTIES = {
    "title_short": 15,
    "objective_short": 15,
    "rationale_short": 10,
    "no_context_pointers": 20,
    "single_context_pointer": 5,
    "no_constraints": 20,
    "no_critical_constraint": 10,
    "no_scenarios": 20,
    "single_scenario": 10,
}


def check_completeness(spec: ExecutableSpec) -> CheckResult:
    """Score structural completeness with penalty deductions (floored at 0)."""
    issues: List[str] = []
    suggestions: List[str] = []
    score = 100

    def penalize(key: str, issue: str, suggestion: str) -> None:
        nonlocal score
        issues.append(issue)
        suggestions.append(suggestion)
        score -= COMPLETENESS_PENALTIES[key]

    narrative = spec.narrative

    if len(narrative.title or "") < MIN_TITLE_CHARS:
        penalize(
            "title_short",
            "Narrative: title is missing or too short",
            "Add a descriptive title (5+ words) to the narrative layer",
        )
    if len(narrative.objective or "") < MIN_OBJECTIVE_CHARS:
        penalize(
            "objective_short",
            "Narrative: objective is missing or too vague",
            "Write a specific, measurable objective (1 sentence)",
        )
    if len(narrative.rationale or "") < MIN_RATIONALE_CHARS:
        penalize(
            "rationale_short",
            "Narrative: rationale is missing",
            "Add a rationale explaining why this feature matters",
        )

    pointer_count = len(spec.context_pointers)
    if pointer_count == 0:
        penalize(
            "no_context_pointers",
            "Context Pointers: no sources linked",
            "Add at least 2 context pointers linking to source data (Slack, Jira, etc.)",
        )
    elif pointer_count < 2:
        penalize(
            "single_context_pointer",
            "Context Pointers: only 1 source, consider adding more evidence",
            "Add more context pointers to strengthen traceability",
        )

    if not spec.constraints:
        penalize(
            "no_constraints",
            "Constraints: no constraints defined",
            "Add at least 1 critical constraint (what must NOT happen)",
        )
    elif not any(c.severity == ConstraintSeverity.CRITICAL.value for c in spec.constraints):
        penalize(
            "no_critical_constraint",
            "Constraints: no critical constraints. Is there really nothing critical?",
            "Review for security, data integrity, or compliance constraints",
        )

    scenario_count = len(spec.verification)
    if scenario_count == 0:
        penalize(
            "no_scenarios",
            "Verification: no test scenarios defined",
            "Add at least 2 Gherkin scenarios (happy path + failure case)",
        )
    elif scenario_count < 2:
        penalize(
            "single_scenario",
            "Verification: only 1 scenario, missing failure/edge case coverage",
            "Add a failure scenario (what happens when something goes wrong?)",
        )

    return CheckResult(
        passed=score >= PASS_THRESHOLD,
        score=max(0, score),
        issues=issues,
        suggestions=suggestions,
    )


__all__ = ["COMPLETENESS_PENALTIES", "PASS_THRESHOLD", "check_completeness"]
