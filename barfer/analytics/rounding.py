import math


def round_half_up(value: float, ndigits: int = 0) -> float | int:
    """Round halves away from zero for positives (2.5 -> 3), like dashboards expect."""
    if ndigits == 0:
        return int(math.floor(value + 0.5))
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor
