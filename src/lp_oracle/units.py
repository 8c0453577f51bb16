from __future__ import annotations

import math


def from_base_units(value: int, decimals: int) -> float:
    """Convert a raw integer amount into human units.

    Args:
        value: Integer amount expressed with ``decimals`` decimal places.
        decimals: Decimal precision of ``value``.

    Returns:
        ``value / 10**decimals`` as a float, or ``math.inf`` when the amount
        is too large to be represented as one.

    Raises:
        ValueError: If ``decimals`` is negative.
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    try:
        if decimals == 0:
            return float(value)
        return value / (10**decimals)
    except OverflowError:
        return math.inf
