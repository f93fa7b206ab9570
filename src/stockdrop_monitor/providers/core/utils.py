"""Shared utilities for providers."""

DECIMALS = 2


def round2(x: float | None) -> float | None:
    """Round a value to 2 decimal places; preserve None."""
    if x is None:
        return None
    return round(float(x), DECIMALS)


def as_float(value: object, default: float | None = None) -> float | None:
    """Coerce a JSON number to float; bools and non-numerics give `default`."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return float(value)
