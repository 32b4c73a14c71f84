"""Rounding helpers shared by the engines."""

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with ties going up (2.5 -> 3, 0.125 -> 0.13 at 2 digits).

    The built-in round() sends ties to the even neighbour (2.5 -> 2).
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor
