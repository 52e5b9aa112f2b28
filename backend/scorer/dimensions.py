"""
Signal dimensions for opportunity scoring.
Each dimension is a 0-100 value except timeline_days, which is measured in days.
"""

from dataclasses import dataclass, fields
from typing import Any, Optional


@dataclass(frozen=True)
class Dimensions:
    """
    The eight scoring inputs of one opportunity.

    Defaults are the domain fallbacks used when neither the adapter nor the
    source profile provides a value.
    """
    revenue_potential: float = 50
    timeline_days: float = 14  # actual days, normalized by the engine
    skill_match: float = 70
    momentum: float = 40
    competition: float = 50
    improvement_margin: float = 60
    distribution_leverage: float = 50
    margin_potential: float = 60


DEFAULT_DIMENSIONS = Dimensions()

DIMENSION_NAMES = tuple(f.name for f in fields(Dimensions))


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def _coerce(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # NaN never compares equal to itself
    if number != number:
        return None
    return number


def resolve_dimensions(source: Any) -> Dimensions:
    """
    Build a complete, clamped Dimensions from a record or mapping.

    Missing or non-numeric values take the domain default. Timeline is only
    floored at 0; every other dimension is clamped to 0-100.

    Args:
        source: Object with dimension attributes, or a mapping of them

    Returns:
        Dimensions safe to pass to the scoring engine
    """
    values = {}
    for name in DIMENSION_NAMES:
        if isinstance(source, dict):
            raw = source.get(name)
        else:
            raw = getattr(source, name, None)
        number = _coerce(raw)
        if number is None:
            number = getattr(DEFAULT_DIMENSIONS, name)
        if name == "timeline_days":
            values[name] = max(0.0, number)
        else:
            values[name] = clamp(number)
    return Dimensions(**values)
