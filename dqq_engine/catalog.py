"""
DQQ Engine - Indicator Catalog
==============================
Display metadata for the composite indicators and the formatting rules
used when rendering them as badges.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class IndicatorKind(str, Enum):
    SCORE = "SCORE"
    BINARY = "BINARY"


class IndicatorSection(str, Enum):
    ALL5 = "all5"
    DIVERSITY = "diversity"
    VEGETABLES_FRUIT = "vegetables_fruit"
    PROTECTIVE = "protective"
    ANIMAL_SOURCE = "animal_source"
    RISK = "risk"
    SCORES = "scores"


class DiversityBand(str, Enum):
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"


@dataclass(frozen=True)
class IndicatorRow:
    row_id: str
    key: str
    label: str
    section: IndicatorSection
    kind: IndicatorKind = IndicatorKind.BINARY


SCORE_KEYS = frozenset(["gdr", "ncdp", "ncdr", "fgds"])

S = IndicatorSection

INDICATOR_ROWS = (
    IndicatorRow("1", "all5", "All-5", S.ALL5),
    IndicatorRow("1a", "all5a", "At least one vegetable", S.ALL5),
    IndicatorRow("1b", "all5b", "At least one fruit", S.ALL5),
    IndicatorRow("1c", "all5c", "At least one pulse, nut or seed", S.ALL5),
    IndicatorRow("1d", "all5d", "At least one animal-source food", S.ALL5),
    IndicatorRow("1e", "all5e", "At least one starchy staple", S.ALL5),
    IndicatorRow("2", "mddw", "MDD-W (Min. Dietary Diversity for Women)", S.DIVERSITY),
    IndicatorRow("3", "fgds", "Food Group Diversity Score (FGDS)", S.DIVERSITY, IndicatorKind.SCORE),
    IndicatorRow("4", "zvegfr", "Zero Vegetables or Fruit", S.VEGETABLES_FRUIT),
    IndicatorRow("4a", "vegfr", "At least one Vegetable or Fruit", S.VEGETABLES_FRUIT),
    IndicatorRow("4b", "dveg_consumption", "Dark Green Leafy Veg Consumption", S.VEGETABLES_FRUIT),
    IndicatorRow("4c", "oveg_consumption", "Other Vegetables Consumption", S.VEGETABLES_FRUIT),
    IndicatorRow("4d", "ofr_consumption", "Other Fruits Consumption", S.VEGETABLES_FRUIT),
    IndicatorRow("5", "pulse_consumption", "Pulse Consumption", S.PROTECTIVE),
    IndicatorRow("6", "nuts_seeds_consumption", "Nuts or Seeds Consumption", S.PROTECTIVE),
    IndicatorRow("7", "whole_grain_consumption", "Whole Grain Consumption", S.PROTECTIVE),
    IndicatorRow("8", "anml", "Meat, Poultry, or Fish Consumption", S.ANIMAL_SOURCE),
    IndicatorRow("8a", "processed_meat_consumption", "Processed Meat Consumption", S.ANIMAL_SOURCE),
    IndicatorRow("8b", "umeat", "Unprocessed Red Meat Consumption", S.ANIMAL_SOURCE),
    IndicatorRow("8c", "dairy", "Dairy Consumption", S.ANIMAL_SOURCE),
    IndicatorRow("9", "safd", "Salty or Fried Snack Consumption", S.RISK),
    IndicatorRow("9a", "snf", "Salty Snacks, Noodles, or Fast Food", S.RISK),
    IndicatorRow("10", "deep_fried_consumption", "Deep Fried Food Consumption", S.RISK),
    IndicatorRow("11", "swtfd", "Sweet Foods Consumption", S.RISK),
    IndicatorRow("12", "soft_drink_consumption", "Soft Drink Consumption", S.RISK),
    IndicatorRow("12a", "swtbev", "Sweet Beverages Consumption", S.RISK),
    IndicatorRow("13", "ncdp", "NCD-Protect Score", S.SCORES, IndicatorKind.SCORE),
    IndicatorRow("14", "ncdr", "NCD-Risk Score", S.SCORES, IndicatorKind.SCORE),
    IndicatorRow("15", "gdr", "GDR Score", S.SCORES, IndicatorKind.SCORE),
)


def get_indicator_row(key: str) -> Optional[IndicatorRow]:
    for row in INDICATOR_ROWS:
        if row.key == key:
            return row
    return None


def format_indicator_value(key: Optional[str], value: Any) -> Optional[str]:
    """
    Badge text for an indicator value.

    None shows as "N/A" for mddw and as nothing for the rest. Scores get
    one decimal, 0/1 flags read "Yes"/"No".
    """
    if value is None:
        if key == "mddw":
            return "N/A"
        return None
    if key in SCORE_KEYS and isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{value:.1f}"
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value in (0, 1):
        return "Yes" if value == 1 else "No"
    if isinstance(value, float) and not value.is_integer():
        return f"{value:.2f}"
    return str(value)


def diversity_band(fgds: Any) -> DiversityBand:
    """Low (0-3), moderate (4-7) or high (8-10) food group diversity."""
    if isinstance(fgds, bool) or not isinstance(fgds, (int, float)) or fgds != fgds:
        score = 0
    else:
        score = max(0, min(10, fgds))

    if score <= 3:
        return DiversityBand.LOW
    if score <= 7:
        return DiversityBand.MODERATE
    return DiversityBand.HIGH


def render_indicator_rows(results: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Catalog rows paired with raw and formatted values from a result set."""
    return [
        {
            "id": row.row_id,
            "key": row.key,
            "label": row.label,
            "section": row.section.value,
            "kind": row.kind.value,
            "value": results.get(row.key),
            "display": format_indicator_value(row.key, results.get(row.key)),
        }
        for row in INDICATOR_ROWS
    ]
