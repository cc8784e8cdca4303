# FILE: app/simulator/prompts.py
"""Prompt templates for the reasoning-backed checks.

Each template documents the exact JSON shape the matching pydantic model in
backend.py validates.
"""
import json
from typing import Any, Dict

AMBIGUITY_SYSTEM_PROMPT = "You are an expert code specification reviewer. Output only valid JSON."

CONTRADICTION_SYSTEM_PROMPT = "You are a logical consistency expert. Output only valid JSON."

_AMBIGUITY_TEMPLATE = """You are a code implementation expert. Analyze this Executable Spec for ambiguities that would cause different engineers to implement it differently.

Focus on:
- Vague words (e.g., "fast", "intuitive", "appropriate", "should")
- Undefined scope ("all users" - which users exactly?)
- Missing quantification ("results appear" - within how many ms?)
- Conditional logic without explicit branches

Spec:
{spec_json}

Respond with valid JSON only (no markdown fences):
{{
  "ambiguities": [
    {{
      "location": "narrative.objective|constraints[0].rule|verification[1].then[0]",
      "text": "The ambiguous text",
      "reason": "Why this is ambiguous",
      "suggestion": "How to make it concrete"
    }}
  ],
  "overallAmbiguityLevel": "low|medium|high"
}}"""

_CONTRADICTION_TEMPLATE = """You are a logical consistency checker. Analyze this spec for contradictions.

Look for:
- Constraints that contradict each other
- Verification scenarios that violate stated constraints
- Objectives that conflict with constraints
- Impossible given/when/then combinations

Spec:
{spec_json}

Respond with valid JSON only:
{{
  "contradictions": [
    {{
      "itemA": "constraints[0].rule",
      "itemB": "verification[1].then[0]",
      "description": "Why these contradict each other",
      "resolution": "How to resolve this contradiction"
    }}
  ],
  "hasContradictions": false
}}"""


def _dump(spec_dict: Dict[str, Any]) -> str:
    return json.dumps(spec_dict, indent=2, ensure_ascii=False)


def build_ambiguity_prompt(spec_dict: Dict[str, Any]) -> str:
    return _AMBIGUITY_TEMPLATE.format(spec_json=_dump(spec_dict))


def build_contradiction_prompt(spec_dict: Dict[str, Any]) -> str:
    return _CONTRADICTION_TEMPLATE.format(spec_json=_dump(spec_dict))
