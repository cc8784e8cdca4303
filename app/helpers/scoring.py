# FILE: app/helpers/scoring.py
"""Score arithmetic shared by the simulator and the outcome evaluator."""
import math


def round_half_up(value: float) -> int:
    """Round to the nearest int, halves away from zero for positives (2.5 -> 3).

    Python's round() uses banker's rounding (2.5 -> 2); scores must not.
    """
    return int(math.floor(value + 0.5))


def clamp_score(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))
