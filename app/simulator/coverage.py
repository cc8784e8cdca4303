# FILE: app/simulator/coverage.py
"""
Requirement coverage for compiled SpecDocuments.

This is the compiler-facing counterpart of the pre-code checks: it works on
requirements/constraints of a SpecDocument instead of the four-layer
ExecutableSpec, and uses only the deterministic tiers.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from app.helpers.scoring import clamp_score, round_half_up
from app.specs.schema import RequirementPriority, SpecDocument

from .ambiguity import detect_ambiguity
from .contradiction import RULE_PENALTIES, detect_contradictions
from .testability import validate_testability
from .types import CheckResult

logger = logging.getLogger(__name__)


@dataclass
class RequirementCoverage:
    id: str
    text: str
    has_acceptance_criteria: bool
    has_source_citation: bool
    has_gherkin_test: bool
    priority: str = RequirementPriority.SHOULD.value


@dataclass
class CoverageResult:
    score: int
    breakdown: Dict[str, int] = field(default_factory=dict)
    missing: Dict[str, List[str]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "breakdown": dict(self.breakdown), "missing": dict(self.missing)}


def _empty_coverage() -> CoverageResult:
    return CoverageResult(
        score=0,
        breakdown={
            "acceptance_criteria_coverage": 0,
            "source_citation_coverage": 0,
            "gherkin_test_coverage": 0,
            "must_requirements_covered": 0,
        },
        missing={"no_acceptance_criteria": [], "no_source_citation": [], "no_gherkin_test": []},
    )


def calculate_coverage_score(requirements: Sequence[RequirementCoverage]) -> CoverageResult:
    """
    Four equally weighted ratios: acceptance criteria, citations, gherkin
    tests, and MUST requirements having both criteria and a test.

    With no MUST requirements the last ratio counts as fully covered.
    """
    if not requirements:
        return _empty_coverage()

    n = len(requirements)
    musts = [r for r in requirements if r.priority == RequirementPriority.MUST.value]

    ac = sum(1 for r in requirements if r.has_acceptance_criteria) / n
    citation = sum(1 for r in requirements if r.has_source_citation) / n
    gherkin = sum(1 for r in requirements if r.has_gherkin_test) / n
    must = (
        sum(1 for r in musts if r.has_acceptance_criteria and r.has_gherkin_test) / len(musts)
        if musts else 1.0
    )

    return CoverageResult(
        score=round_half_up((ac + citation + gherkin + must) * 0.25 * 100),
        breakdown={
            "acceptance_criteria_coverage": round_half_up(ac * 100),
            "source_citation_coverage": round_half_up(citation * 100),
            "gherkin_test_coverage": round_half_up(gherkin * 100),
            "must_requirements_covered": round_half_up(must * 100),
        },
        missing={
            "no_acceptance_criteria": [r.id for r in requirements if not r.has_acceptance_criteria],
            "no_source_citation": [r.id for r in requirements if not r.has_source_citation],
            "no_gherkin_test": [r.id for r in requirements if not r.has_gherkin_test],
        },
    )


_ACTION_RE = re.compile(r"\b(login|submit|create|update|delete|upload|download|send|pay|checkout)\b")
_ERROR_RE = re.compile(r"\b(error|fail|invalid|rejected|timeout|exception|unauthorized|forbidden)\b")


def detect_missing_error_paths(requirements: Sequence[Any]) -> List[str]:
    """Ids of action requirements that never mention a failure outcome."""
    missing = []
    for req in requirements:
        text = (getattr(req, "text", None) or "").lower()
        if _ACTION_RE.search(text) and not _ERROR_RE.search(text):
            missing.append(req.id)
    return missing


# =============================================================================
# Document simulation
# =============================================================================

PASS_THRESHOLD = 70
AMBIGUOUS_REQUIREMENT_PENALTY = 5


def _criterion_text(scenario: str, given: str, when: str, then: str) -> str:
    return f"Scenario: {scenario}\nGiven {given}\nWhen {when}\nThen {then}"


def requirement_coverage(doc: SpecDocument) -> List[RequirementCoverage]:
    """Derive coverage flags; a gherkin test is an acceptance criterion sharing the requirement's vocabulary."""
    requirements = doc.layers.requirements
    scenarios = [
        _criterion_text(a.scenario, a.given, a.when, a.then)
        for r in requirements
        for a in r.acceptance_criteria
    ]
    mapping = validate_testability([{"id": r.id, "text": r.text} for r in requirements], scenarios)
    tested = set(mapping.testable)

    return [
        RequirementCoverage(
            id=r.id,
            text=r.text,
            has_acceptance_criteria=bool(r.acceptance_criteria),
            has_source_citation=bool((r.source_citation or "").strip()),
            has_gherkin_test=r.id in tested,
            priority=r.priority,
        )
        for r in requirements
    ]


def simulate_document(doc: SpecDocument) -> CheckResult:
    """
    Deterministic quality pass over a compiled document.

    Starts from the requirement coverage score, then deducts for rule
    contradictions and ambiguous requirements. Passes at 70 with no
    critical contradiction.
    """
    issues: List[str] = []
    suggestions: List[str] = []

    coverage = calculate_coverage_score(requirement_coverage(doc))
    score = coverage.score

    for req_id in coverage.missing["no_acceptance_criteria"]:
        issues.append(f"REQ {req_id} has no acceptance criteria")
        suggestions.append(f"Add at least one Given/When/Then criterion to {req_id}")
    for req_id in coverage.missing["no_source_citation"]:
        issues.append(f"REQ {req_id} has no source citation")
        suggestions.append(f"Cite the raw input that justifies {req_id}")
    for req_id in coverage.missing["no_gherkin_test"]:
        issues.append(f"REQ {req_id} is not exercised by any scenario")
        suggestions.append(f"Write a scenario that uses the vocabulary of {req_id}")

    for req_id in detect_missing_error_paths(doc.layers.requirements):
        issues.append(f"REQ {req_id} describes an action with no error path")
        suggestions.append(f"Specify what happens when {req_id} fails (invalid input, timeout, unauthorized)")

    contradictions = detect_contradictions(
        [{"id": r.id, "text": r.text} for r in doc.layers.requirements],
        [{"id": c.id, "text": c.text} for c in doc.layers.constraints],
    )
    for c in contradictions:
        issues.append(f"[{c.severity}] {c.description}")
        suggestions.append(f"Reconcile {c.requirement_id} with {c.constraint_id} or relax one of them")
        score -= RULE_PENALTIES[c.severity]

    for req in doc.layers.requirements:
        suggestion_by_term = {a.term: a.suggestion for a in detect_ambiguity(req.text)}
        if suggestion_by_term:
            terms = sorted(suggestion_by_term)
            issues.append(f"REQ {req.id} uses ambiguous terms: {', '.join(terms)}")
            suggestions.append(suggestion_by_term[terms[0]])
            score -= AMBIGUOUS_REQUIREMENT_PENALTY

    score = clamp_score(score)
    passed = score >= PASS_THRESHOLD and not any(c.severity == "critical" for c in contradictions)

    logger.info("[simulator] Document %s score=%s passed=%s issues=%s", doc.id, score, passed, len(issues))
    return CheckResult(passed=passed, score=score, issues=issues, suggestions=suggestions)


__all__ = [
    "RequirementCoverage",
    "CoverageResult",
    "calculate_coverage_score",
    "detect_missing_error_paths",
    "requirement_coverage",
    "simulate_document",
]
