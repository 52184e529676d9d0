"""
DQQ Engine - Food Pyramid Percentages
=====================================
Maps a consumed amount against a {min, max} target range:

- inside the range          -> 100
- above the range           -> 100 + the share above max
- below the range           -> 100 - the share missing to min
"""

from typing import Any, Dict, Hashable, Mapping, Optional


def _target_bound(targets: Mapping[Hashable, Any], category: Hashable, bound: str) -> float:
    target = targets.get(category) or {}
    value = target.get(bound)
    if value is None:
        return 0.0
    return float(value)


def calculate_percentage(
    category: Hashable,
    consumed_amount: float,
    aimed_amounts_by_category: Mapping[Hashable, Mapping[str, Optional[float]]],
    offset_multiplier_above: float = 1,
    offset_multiplier_below: float = 1,
) -> float:
    """
    Percentage of target reached for one category.

    The offset multipliers widen (or narrow) the target range before the
    comparison. A non-positive upper bound means "no upper bound" and a
    non-positive lower bound means nothing is required, so both avoid a
    division by zero and report 100.
    """
    aimed_low = _target_bound(aimed_amounts_by_category, category, "min") * offset_multiplier_below
    aimed_high = _target_bound(aimed_amounts_by_category, category, "max") * offset_multiplier_above

    if aimed_high <= 0:
        if consumed_amount > aimed_low:
            return 100.0
    elif aimed_low < consumed_amount <= aimed_high:
        return 100.0
    elif consumed_amount > aimed_high:
        return 100 + ((consumed_amount - aimed_high) / aimed_high) * 100

    if aimed_low <= 0:
        return 100.0
    return 100 - ((aimed_low - consumed_amount) / aimed_low) * 100


def calculate_pyramid_percentages(
    consumed_by_category: Mapping[Hashable, float],
    aimed_amounts_by_category: Mapping[Hashable, Mapping[str, Optional[float]]],
    offset_multiplier_above: float = 1,
    offset_multiplier_below: float = 1,
) -> Dict[Hashable, float]:
    """Percentages for every consumed category."""
    return {
        category: calculate_percentage(
            category,
            float(amount or 0),
            aimed_amounts_by_category,
            offset_multiplier_above,
            offset_multiplier_below,
        )
        for category, amount in consumed_by_category.items()
    }
