"""Small numeric helpers."""

import math


def _round_half_away(value: float) -> int:
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


def nearest_power_of_2(value: float) -> float:
    """Return the power of two closest to ``value`` on a log scale, or 0."""
    if value <= 0:
        return 0.0
    return 2.0 ** _round_half_away(math.log2(value))


def sign(value: float) -> int:
    """Return -1, 0 or 1 according to the sign of ``value``."""
    if value < 0:
        return -1
    if value > 0:
        return 1
    return 0


def clamp(value, lower, upper):
    """Limit ``value`` to the closed range ``[lower, upper]``."""
    if value < lower:
        return lower
    if value > upper:
        return upper
    return value