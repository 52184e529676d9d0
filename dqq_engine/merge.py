"""
DQQ Engine - Answer Set Merging
===============================
Combines the answer sets of several meals into one set for a day (or any
analysis window). A food group counts as consumed if any meal reports it.
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from dqq_engine.questions import QUESTION_KEYS

logger = logging.getLogger("dqq_engine.merge")


def merge_all(answer_sets: Sequence[Optional[Mapping[str, Any]]]) -> Dict[str, bool]:
    """
    Logical OR of answer sets across the declared question schema.

    An empty sequence returns an empty dict, which callers should read as
    "no data" rather than "nothing consumed". None entries (meals without
    answers) count as empty sets. Only values that are exactly True mark a
    group as consumed. Inputs are not mutated.
    """
    if len(answer_sets) == 0:
        return {}

    merged = {key: False for key in QUESTION_KEYS}

    for answers in answer_sets:
        if not answers:
            continue
        for key, value in answers.items():
            if key not in merged:
                logger.debug(f"Ignoring unknown question key '{key}' during merge")
                continue
            if value is True:
                merged[key] = True

    return merged


def merge_answer_documents(meals: Iterable[Mapping[str, Any]]) -> Dict[str, bool]:
    """
    Merge the ``dqqData.answers`` maps stored on meal documents.

    Meals without DQQ data still count as inputs, so a day with meals but
    no answers merges to an all-false set.
    """
    answer_sets = []
    for meal in meals:
        dqq_data = meal.get("dqqData") or {}
        answer_sets.append(dqq_data.get("answers"))
    return merge_all(answer_sets)
