"""
DQQ Engine - Indicator Calculator
=================================
Derives the DQQ dietary-diversity and NCD indicators from one merged
answer set plus demographics, following the published FAO/FHI360 DQQ
scoring rules.

This module MUST NOT:
- Raise on missing, partial or malformed input
- Keep state between calls
- Re-derive the question-to-indicator mapping
"""

import logging
from typing import Any, Dict, Mapping, Optional, Union

from dqq_engine.questions import (
    DQQ_QUESTIONS,
    FEMALE,
    MDDW_MAX_AGE,
    MDDW_MIN_AGE,
    Demographics,
    coerce_age,
    coerce_gender,
)

logger = logging.getLogger("dqq_engine.indicators")

DemographicsLike = Union[Demographics, Mapping[str, Any], None]

# Composite indicators in result order; per-question values follow them.
INDICATOR_KEYS = (
    "gdr",
    "ncdp",
    "ncdr",
    "all5",
    "all5a",
    "all5b",
    "all5c",
    "all5d",
    "all5e",
    "mddw",
    "fgds",
    "zvegfr",
    "vegfr",
    "pulse_consumption",
    "nuts_seeds_consumption",
    "whole_grain_consumption",
    "processed_meat_consumption",
    "snf",
    "safd",
    "deep_fried_consumption",
    "swtfd",
    "swtbev",
    "soft_drink_consumption",
    "anml",
    "umeat",
    "dairy",
    "dveg_consumption",
    "oveg_consumption",
    "ofr_consumption",
)


def num(value: Any) -> int:
    """1 if value is exactly True, else 0."""
    return 1 if value is True else 0


def as_demographics(demographics: DemographicsLike) -> Optional[Demographics]:
    """Normalize a Demographics, a plain mapping or None."""
    if demographics is None:
        return None
    if isinstance(demographics, Demographics):
        return Demographics(
            age=coerce_age(demographics.age),
            gender=coerce_gender(demographics.gender),
        )
    if isinstance(demographics, Mapping):
        return Demographics.from_mapping(demographics)
    return None


def is_mddw_eligible(demographics: Optional[Demographics]) -> bool:
    """MDD-W applies to women aged 15 to 49 inclusive."""
    if demographics is None or demographics.age is None:
        return False
    return (
        demographics.gender == FEMALE
        and MDDW_MIN_AGE <= demographics.age <= MDDW_MAX_AGE
    )


def calculate_dqq_indicators(
    answers: Optional[Mapping[str, Any]],
    demographics: DemographicsLike,
) -> Dict[str, Optional[int]]:
    """
    Calculate every DQQ indicator for one answer set.

    Args:
        answers: Map of question key (DQQ1..DQQ29) to consumed flag.
            Absent keys and anything other than True count as not consumed.
        demographics: Demographics, a mapping with age/gender (or Age/Gender),
            or None.

    Returns:
        Indicator map. Empty when answers or demographics is None. Only
        mddw is None when demographics are incomplete or not eligible.
    """
    if answers is None or demographics is None:
        return {}
    if not isinstance(answers, Mapping):
        return {}

    demo = as_demographics(demographics)
    if demo is None:
        return {}

    def q(n: int) -> bool:
        return answers.get(f"DQQ{n}") is True

    def any_of(*numbers: int) -> int:
        return num(any(q(n) for n in numbers))

    # NCD-Protect: healthy food groups, 9 max
    ncdp = (
        any_of(2)
        + any_of(4)
        + any_of(21)
        + any_of(5)
        + any_of(6)
        + any_of(7)
        + any_of(8)
        + any_of(9)
        + any_of(10)
    )

    # NCD-Risk: 8 max.
    # NOTE: DQQ22/23/29 also feed snf below. Kept exactly as the published
    # scoring computes them pending nutrition review of the overlap.
    ncdr = (
        any_of(28)
        + any_of(11)
        + any_of(12)
        + any_of(16)
        + any_of(17, 18)
        + any_of(24)
        + any_of(23, 29)
        + any_of(22)
    )

    gdr = ncdp - ncdr + 9

    fgds = (
        any_of(1, 2, 3)
        + any_of(4)
        + any_of(21)
        + any_of(14, 15, 25)
        + any_of(16, 17, 18, 19, 20)
        + any_of(13)
        + any_of(6)
        + any_of(5, 8)
        + any_of(7)
        + any_of(9, 10)
    )

    mddw = None
    if is_mddw_eligible(demo):
        mddw = num(fgds >= 5)

    logger.debug(f"MDD-W: gender={demo.gender} age={demo.age} fgds={fgds} mddw={mddw}")

    all5a = any_of(5, 6, 7)
    all5b = any_of(8, 9, 10)
    all5c = any_of(4, 21)
    all5d = any_of(13, 14, 15, 16, 17, 18, 19, 20, 25)
    all5e = any_of(1, 2, 3)
    all5 = num(all5a == 1 and all5b == 1 and all5c == 1 and all5d == 1 and all5e == 1)

    vegfr = any_of(5, 6, 7, 8, 9, 10)
    zvegfr = num(vegfr == 0)

    results: Dict[str, Optional[int]] = {
        "gdr": gdr,
        "ncdp": ncdp,
        "ncdr": ncdr,
        "all5": all5,
        "all5a": all5a,
        "all5b": all5b,
        "all5c": all5c,
        "all5d": all5d,
        "all5e": all5e,
        "mddw": mddw,
        "fgds": fgds,
        "zvegfr": zvegfr,
        "vegfr": vegfr,
        "pulse_consumption": any_of(4),
        "nuts_seeds_consumption": any_of(21),
        "whole_grain_consumption": any_of(2),
        "processed_meat_consumption": any_of(16),
        "snf": any_of(22, 23, 29),
        "safd": any_of(22, 23, 24),
        "deep_fried_consumption": any_of(24),
        "swtfd": any_of(11, 12),
        "swtbev": any_of(26, 27, 28),
        "soft_drink_consumption": any_of(28),
        "anml": any_of(16, 17, 18, 19, 20),
        "umeat": any_of(17, 18),
        "dairy": any_of(14, 15, 25),
        "dveg_consumption": any_of(6),
        "oveg_consumption": any_of(7),
        "ofr_consumption": any_of(10),
    }

    for question in DQQ_QUESTIONS:
        results[question.key.value] = num(answers.get(question.key.value))

    return results
