# FILE: app/simulator/types.py
"""Result contracts shared by every pre-code check."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class CheckResult:
    """
    Uniform check output.

    INVARIANT: issues[i] pairs with suggestions[i]. Report rendering zips them.
    """
    passed: bool
    score: int  # 0-100
    issues: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "score": self.score,
            "issues": list(self.issues),
            "suggestions": list(self.suggestions),
        }


@dataclass
class ScenarioFailure:
    scenario: str  # check name the issue came from
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"scenario": self.scenario, "reason": self.reason}


@dataclass
class SimulatorChecks:
    completeness: CheckResult
    ambiguity: CheckResult
    contradiction: CheckResult
    testability: CheckResult

    def items(self):
        return [
            ("Completeness", self.completeness),
            ("Ambiguity", self.ambiguity),
            ("Contradiction", self.contradiction),
            ("Testability", self.testability),
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completeness": self.completeness.to_dict(),
            "ambiguity": self.ambiguity.to_dict(),
            "contradiction": self.contradiction.to_dict(),
            "testability": self.testability.to_dict(),
        }


@dataclass
class SimulatorResult:
    """Pre-code simulation verdict. Distinct from outcome quality scores."""
    passed: bool
    total_scenarios: int
    passed_scenarios: int
    failed_scenarios: int
    coverage_score: int
    checks: SimulatorChecks
    failures: List[ScenarioFailure] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    audit_log_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "totalScenarios": self.total_scenarios,
            "passedScenarios": self.passed_scenarios,
            "failedScenarios": self.failed_scenarios,
            "failures": [f.to_dict() for f in self.failures],
            "suggestions": list(self.suggestions),
            "coverageScore": self.coverage_score,
            "checks": self.checks.to_dict(),
            "auditLogId": self.audit_log_id,
        }


__all__ = ["CheckResult", "ScenarioFailure", "SimulatorChecks", "SimulatorResult"]
