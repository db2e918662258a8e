"""Small numeric helpers shared by the scoring and valuation engines."""

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up (2.5 -> 3), unlike Python's banker's rounding."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    return int(round_half_up(value))


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def format_number(value: float) -> str:
    """Render 75.0 as '75' and 12.5 as '12.5' for insight text."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)
