"""
Numeric helpers shared by scoring and reporting.
"""
import math


def round_half_up(value: float, digits: int = 0):
    """
    Round halves upward (2.5 -> 3, -2.5 -> -2).

    The built-in round() uses banker's rounding, which would turn an
    intensity of 0.25 into 2 points instead of 3. Returns an int when
    digits is 0.
    """
    factor = 10 ** digits
    # Trim float noise first so 0.125 * 100 (12.4999...) still rounds up
    scaled = round(value * factor, 9)
    result = math.floor(scaled + 0.5)
    if digits == 0:
        return int(result)
    return result / factor


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into [lower, upper]."""
    return max(lower, min(upper, value))
