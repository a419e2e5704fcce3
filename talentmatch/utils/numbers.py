"""Numeric helpers shared by the score evaluators."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    The built-in round() rounds halves to even (round(62.5) == 62).

    Example:
        >>> round_half_up(62.5)
        63
        >>> round_half_up(62.4)
        62
    """
    return int(math.floor(value + 0.5))


def clamp_score(value: float, lower: int = 0, upper: int = 100) -> int:
    """Round ``value`` half-up and clamp it into ``[lower, upper]``."""
    return max(lower, min(upper, round_half_up(value)))
