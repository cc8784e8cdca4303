# FILE: app/simulator/testability.py
"""
Testability check - can the verification scenarios be automated or measured?

Per scenario, against the joined `then` text:
- vague adjective present       -10
- unmeasurable phrasing present -15
- given/when/then step missing  -20

Vague and unmeasurable patterns are independent and additive; one scenario
can lose both (it needs a numeric threshold AND an objective verb). Each
pattern class deducts once per scenario. Scenario deductions accumulate into
one running score that is floored at 0 only at the end.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from app.specs.schema import ExecutableSpec, VerificationScenario

from .types import CheckResult

# =============================================================================
# Configuration
# =============================================================================

PASS_THRESHOLD = 60

TESTABILITY_PENALTIES = {
    "vague_adjective": 10,
    "unmeasurable": 15,
    "missing_step": 20,
}

VAGUE_ADJECTIVES = (
    "appropriate", "intuitive", "nice", "fast", "smooth",
    "reasonable", "proper", "good", "better",
)
UNMEASURABLE_MARKERS = (
    r"feel", r"seems?", r"looks?", r"appears?",
    r"should be", r"kind of", r"sort of",
)

_VAGUE_RE = re.compile(r"\b(" + "|".join(VAGUE_ADJECTIVES) + r")\b", re.IGNORECASE)
_UNMEASURABLE_RE = re.compile(r"\b(" + "|".join(UNMEASURABLE_MARKERS) + r")\b", re.IGNORECASE)


def scenario_findings(index: int, scenario: VerificationScenario) -> Tuple[int, List[str], List[str]]:
    """(deduction, issues, suggestions) for one scenario. Deduction is not floored."""
    then_text = " ".join(scenario.then)
    name = scenario.scenario
    deduction = 0
    issues: List[str] = []
    suggestions: List[str] = []

    if _VAGUE_RE.search(then_text):
        issues.append(f'Scenario "{name}": "then" contains vague words (appropriate/intuitive/fast/etc.)')
        suggestions.append(
            f'Replace vague terms in scenario {index} with measurable criteria (e.g., "< 200ms" instead of "fast")'
        )
        deduction += TESTABILITY_PENALTIES["vague_adjective"]

    if _UNMEASURABLE_RE.search(then_text):
        issues.append(f'Scenario "{name}": "then" contains unmeasurable language')
        suggestions.append(f"Rewrite outcome {index} to be objectively verifiable")
        deduction += TESTABILITY_PENALTIES["unmeasurable"]

    if not scenario.given or not scenario.when or not scenario.then:
        issues.append(f'Scenario "{name}": missing given, when, or then steps')
        suggestions.append(f"Complete all three steps (given/when/then) for scenario {index}")
        deduction += TESTABILITY_PENALTIES["missing_step"]

    return deduction, issues, suggestions


def check_testability(spec: ExecutableSpec) -> CheckResult:
    issues: List[str] = []
    suggestions: List[str] = []
    score = 100

    for i, scenario in enumerate(spec.verification, 1):
        deduction, scenario_issues, scenario_suggestions = scenario_findings(i, scenario)
        score -= deduction
        issues.extend(scenario_issues)
        suggestions.extend(scenario_suggestions)

    return CheckResult(
        passed=score >= PASS_THRESHOLD,
        score=max(0, score),
        issues=issues,
        suggestions=suggestions,
    )


# =============================================================================
# Requirement -> Gherkin traceability (compiled document path)
# =============================================================================

@dataclass
class TestabilityMapping:
    testable: List[str] = field(default_factory=list)
    untestable: List[str] = field(default_factory=list)


MIN_KEYWORD_LEN = 5
MIN_KEYWORD_MATCHES = 2


def validate_testability(requirements: List[Dict[str, str]], gherkin_scenarios: List[str]) -> TestabilityMapping:
    """
    Map requirements to scenarios by shared vocabulary.

    A requirement counts as tested when at least two of its words longer
    than four characters appear in a single scenario.
    """
    mapping = TestabilityMapping()
    lowered = [s.lower() for s in gherkin_scenarios]

    for req in requirements:
        words = [w for w in re.split(r"\W+", (req.get("text") or "").lower()) if len(w) >= MIN_KEYWORD_LEN]
        has_test = any(
            sum(1 for w in words if w in scenario) >= MIN_KEYWORD_MATCHES
            for scenario in lowered
        )
        (mapping.testable if has_test else mapping.untestable).append(req.get("id", ""))

    return mapping


__all__ = [
    "PASS_THRESHOLD",
    "TESTABILITY_PENALTIES",
    "VAGUE_ADJECTIVES",
    "UNMEASURABLE_MARKERS",
    "scenario_findings",
    "check_testability",
    "TestabilityMapping",
    "validate_testability",
]
