"""Helper utilities shared across the spec engine."""

from .scoring import (
    round_half_up,
    clamp_score,
)

__all__ = [
    "round_half_up",
    "clamp_score",
]
