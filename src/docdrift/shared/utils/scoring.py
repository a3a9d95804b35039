"""
Score helpers shared by the health scorer, batch aggregation and history.

Centralizes rounding and clamping so every component reports 0-100 scores
the same way.
"""

import math


def round_score(value: float) -> int:
    """Round half up (76.5 -> 77, not 76)."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp a score into [low, high]."""
    return max(low, min(high, value))


def percentage(part: float, whole: float, *, empty: int = 100) -> int:
    """
    Rounded percentage of part/whole.

    Args:
        part: Numerator
        whole: Denominator
        empty: Value returned when whole is zero (no negative signal)

    Returns:
        Integer percentage between 0 and 100.
    """
    if whole <= 0:
        return empty
    return round_score(clamp_score(part / whole * 100.0))


def weighted_average(pairs: list[tuple[float, float]]) -> float | None:
    """
    Weighted average of (value, weight) pairs.

    Pairs with a non-positive weight are ignored. Returns None when no pair
    carries weight.
    """
    total_weight = sum(w for _, w in pairs if w > 0)
    if total_weight <= 0:
        return None
    return sum(v * w for v, w in pairs if w > 0) / total_weight
