# FILE: app/simulator/ambiguity.py
"""
Ambiguity check - would two engineers implement this spec differently?

Two tiers:
1. Dictionary: named ambiguous terms, each with its own remediation. Pure,
   always runs, needs nothing external.
2. Reasoning backend: returns located findings plus an overall level.
   When healthy its verdict is authoritative.

INVARIANT: backend trouble never escapes. A missing backend, or unavailable,
           slow or malformed output, degrades to passed=True, score=70
           with an explanatory issue.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from app.specs.errors import BackendUnavailableError
from app.specs.schema import ExecutableSpec

from .backend import AmbiguityReport, ReasoningBackend, reason_structured
from .prompts import AMBIGUITY_SYSTEM_PROMPT, build_ambiguity_prompt
from .types import CheckResult

logger = logging.getLogger(__name__)


# =============================================================================
# Dictionary tier
# =============================================================================

AMBIGUOUS_TERMS: Dict[str, str] = {
    "fast": 'Specify exact response time (e.g., "within 200ms at P99")',
    "slow": "Specify exact threshold",
    "quick": "Specify exact response time",
    "simple": "Define specific simplicity criteria or user task completion rate",
    "easy": 'Define measurable usability metric (e.g., "90% of users complete task in <60s")',
    "intuitive": 'Define specific UX metric (e.g., "SUS score > 80")',
    "good": "Specify measurable quality criteria",
    "better": "Specify measurable improvement over baseline",
    "nice": "Remove subjective qualifier; add objective criteria",
    "scalable": 'Specify exact scale targets (e.g., "handle 10,000 concurrent users")',
    "performant": "Specify measurable performance metrics",
    "efficient": "Specify measurable efficiency criteria",
    "secure": "Specify which security standards (e.g., OWASP Top 10, SOC2)",
    "modern": "Remove subjective term; describe concrete design criteria",
    "robust": "Define error rate and recovery criteria",
    "flexible": "Specify which dimensions of flexibility are required",
}

_TERM_PATTERNS = {term: re.compile(rf"\b{term}\b", re.IGNORECASE) for term in AMBIGUOUS_TERMS}


@dataclass
class AmbiguityIssue:
    term: str
    position: int
    suggestion: str
    type: str = "ambiguous_term"


def detect_ambiguity(text: str) -> List[AmbiguityIssue]:
    """Every whole-word, case-insensitive dictionary hit in `text`."""
    issues: List[AmbiguityIssue] = []
    for term, pattern in _TERM_PATTERNS.items():
        for match in pattern.finditer(text or ""):
            issues.append(AmbiguityIssue(
                term=match.group(0).lower(),
                position=match.start(),
                suggestion=AMBIGUOUS_TERMS[term],
            ))
    return issues


def is_ambiguous(text: str) -> bool:
    return bool(detect_ambiguity(text))


# =============================================================================
# Scoring
# =============================================================================

LEVEL_SCORES = {"low": 90, "medium": 60, "high": 30}
DEGRADED_SCORE = 70

DEGRADED_ISSUE = "Ambiguity check could not be completed (reasoning backend unavailable)"
DEGRADED_SUGGESTION = "Re-run the simulation once the reasoning backend is reachable"


def spec_text_fields(spec: ExecutableSpec) -> List[Tuple[str, str]]:
    """
    (location, text) for every free-text field an implementer reads.

    Context pointer snippets are quoted source material, not spec prose, so
    they are not scanned.
    """
    fields: List[Tuple[str, str]] = [
        ("narrative.title", spec.narrative.title),
        ("narrative.objective", spec.narrative.objective),
        ("narrative.rationale", spec.narrative.rationale),
    ]
    for i, c in enumerate(spec.constraints):
        fields.append((f"constraints[{i}].rule", c.rule))
        fields.append((f"constraints[{i}].rationale", c.rationale))
    for i, s in enumerate(spec.verification):
        fields.append((f"verification[{i}].scenario", s.scenario))
        for step in ("given", "when", "then"):
            for j, text in enumerate(getattr(s, step)):
                fields.append((f"verification[{i}].{step}[{j}]", text))
    return [(loc, text) for loc, text in fields if text]


def _dictionary_findings(spec: ExecutableSpec) -> List[Tuple[str, AmbiguityIssue]]:
    findings = []
    for location, text in spec_text_fields(spec):
        for issue in detect_ambiguity(text):
            findings.append((location, issue))
    return findings


def _dictionary_pairs(
    findings: List[Tuple[str, AmbiguityIssue]],
    skip_terms: Optional[Set[str]] = None,
) -> Tuple[List[str], List[str]]:
    issues: List[str] = []
    suggestions: List[str] = []
    for location, finding in findings:
        if skip_terms and finding.term in skip_terms:
            continue
        issues.append(f'[{location}] "{finding.term}" is ambiguous')
        suggestions.append(finding.suggestion)
    return issues, suggestions


def _degraded(findings: List[Tuple[str, AmbiguityIssue]]) -> CheckResult:
    issues, suggestions = _dictionary_pairs(findings)
    return CheckResult(
        passed=True,
        score=DEGRADED_SCORE,
        issues=[DEGRADED_ISSUE] + issues,
        suggestions=[DEGRADED_SUGGESTION] + suggestions,
    )


def _mentioned_terms(report: AmbiguityReport) -> Set[str]:
    blob = " ".join(f"{a.text} {a.reason}" for a in report.ambiguities)
    return {t.term for t in detect_ambiguity(blob)}


# =============================================================================
# Check
# =============================================================================

async def check_ambiguity(
    spec: ExecutableSpec,
    backend: Optional[ReasoningBackend] = None,
    timeout_seconds: Optional[float] = None,
) -> CheckResult:
    findings = _dictionary_findings(spec)

    if backend is None:
        logger.warning("[simulator] Ambiguity check has no reasoning backend; degrading")
        return _degraded(findings)

    try:
        report = await reason_structured(
            backend,
            AmbiguityReport,
            AMBIGUITY_SYSTEM_PROMPT,
            build_ambiguity_prompt(spec.to_dict()),
            timeout_seconds=timeout_seconds,
        )
    except BackendUnavailableError as e:
        logger.warning("[simulator] Ambiguity backend degraded: %s", e)
        return _degraded(findings)

    issues = [f"[{a.location}] {a.reason}" for a in report.ambiguities]
    suggestions = [a.suggestion for a in report.ambiguities]

    extra_issues, extra_suggestions = _dictionary_pairs(findings, skip_terms=_mentioned_terms(report))
    issues.extend(extra_issues)
    suggestions.extend(extra_suggestions)

    level = report.overallAmbiguityLevel
    return CheckResult(
        passed=level != "high",
        score=LEVEL_SCORES[level],
        issues=issues,
        suggestions=suggestions,
    )


__all__ = [
    "AMBIGUOUS_TERMS",
    "LEVEL_SCORES",
    "DEGRADED_SCORE",
    "AmbiguityIssue",
    "detect_ambiguity",
    "is_ambiguous",
    "spec_text_fields",
    "check_ambiguity",
]
