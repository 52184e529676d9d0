"""
DQQ Engine - Evaluation Envelope
================================
Wraps the pure indicator calculator with input validation flags, a
summary and determinism hashes, the way results are handed to the API,
the daily aggregation and the result store.

Validation only annotates. Nothing here raises on bad answer data.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence

from app.shared.hashing import canonicalize_and_hash
from dqq_engine.indicators import (
    DemographicsLike,
    as_demographics,
    calculate_dqq_indicators,
    is_mddw_eligible,
)
from dqq_engine.merge import merge_all
from dqq_engine.questions import QUESTION_KEYS, Demographics, is_question_key

logger = logging.getLogger("dqq_engine")

RULESET_VERSION = "dqq_v1.0"


# ============================================================
# ENUMS AND DATA CLASSES
# ============================================================

class ValidationFlag(str, Enum):
    """Annotations raised while validating inputs."""
    NO_ANSWERS = "NO_ANSWERS"
    NO_DEMOGRAPHICS = "NO_DEMOGRAPHICS"
    DEMOGRAPHICS_INCOMPLETE = "DEMOGRAPHICS_INCOMPLETE"
    UNKNOWN_QUESTION = "UNKNOWN_QUESTION"  # suffixed with :<key>
    NON_BOOLEAN_VALUE = "NON_BOOLEAN_VALUE"  # suffixed with :<key>


class MddwStatus(str, Enum):
    """Why MDD-W has (or lacks) a value."""
    ELIGIBLE = "ELIGIBLE"
    NOT_ELIGIBLE = "NOT_ELIGIBLE"  # male, or outside 15-49
    DEMOGRAPHICS_INCOMPLETE = "DEMOGRAPHICS_INCOMPLETE"
    NO_DATA = "NO_DATA"


@dataclass
class DqqResult:
    """Complete result of one DQQ evaluation."""
    evaluated_at: str
    indicators: Dict[str, Optional[int]]
    demographics: Optional[Dict[str, Any]]
    mddw_status: MddwStatus
    flags: List[str] = field(default_factory=list)
    summary: Dict[str, int] = field(default_factory=dict)
    ruleset_version: str = RULESET_VERSION
    input_hash: str = ""
    output_hash: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "evaluated_at": self.evaluated_at,
            "indicators": self.indicators,
            "demographics": self.demographics,
            "mddw_status": self.mddw_status.value,
            "flags": list(self.flags),
            "summary": dict(self.summary),
            "ruleset_version": self.ruleset_version,
            "input_hash": self.input_hash,
            "output_hash": self.output_hash,
        }


# ============================================================
# ENGINE
# ============================================================

class DqqEngine:
    """
    Stateless DQQ evaluator.

    Responsibilities:
    - Flag unknown question keys and non-boolean answer values
    - Delegate indicator calculation to calculate_dqq_indicators
    - Report MDD-W eligibility
    - Hash inputs and outputs for determinism checks
    """

    ruleset_version = RULESET_VERSION

    def evaluate(
        self,
        answers: Optional[Mapping[str, Any]],
        demographics: DemographicsLike,
    ) -> DqqResult:
        """
        Evaluate one answer set.

        Args:
            answers: Map of DQQ1..DQQ29 to consumed flags, or None
            demographics: Demographics, mapping with age/gender, or None

        Returns:
            DqqResult. indicators is empty when either input is missing.
        """
        flags: List[str] = []
        unknown_keys = 0
        coerced_values = 0

        demo = as_demographics(demographics)

        if answers is None or not isinstance(answers, Mapping):
            flags.append(ValidationFlag.NO_ANSWERS.value)
            answers = None
        else:
            for key, value in answers.items():
                if not is_question_key(key):
                    unknown_keys += 1
                    logger.warning(f"UNKNOWN question key: '{key}' - not in DQQ schema")
                    flags.append(f"{ValidationFlag.UNKNOWN_QUESTION.value}:{key}")
                elif value is not None and not isinstance(value, bool):
                    coerced_values += 1
                    flags.append(f"{ValidationFlag.NON_BOOLEAN_VALUE.value}:{_key_str(key)}")

        if demo is None:
            flags.append(ValidationFlag.NO_DEMOGRAPHICS.value)
        elif not demo.is_complete:
            flags.append(ValidationFlag.DEMOGRAPHICS_INCOMPLETE.value)

        indicators = calculate_dqq_indicators(answers, demo)

        if not indicators:
            mddw_status = MddwStatus.NO_DATA
        elif is_mddw_eligible(demo):
            mddw_status = MddwStatus.ELIGIBLE
        elif not demo.is_complete:
            mddw_status = MddwStatus.DEMOGRAPHICS_INCOMPLETE
        else:
            mddw_status = MddwStatus.NOT_ELIGIBLE

        consumed = sum(indicators.get(key) or 0 for key in QUESTION_KEYS)
        answered = 0
        if answers is not None:
            answered = sum(1 for key in answers if is_question_key(key))

        summary = {
            "answered": answered,
            "consumed": consumed,
            "unknown_keys": unknown_keys,
            "coerced_values": coerced_values,
            "food_groups": indicators.get("fgds", 0),
        }

        result = DqqResult(
            evaluated_at=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            indicators=indicators,
            demographics=demo.to_dict() if demo is not None else None,
            mddw_status=mddw_status,
            flags=flags,
            summary=summary,
            input_hash=self._compute_input_hash(answers, demo, flags),
        )
        result.output_hash = self._compute_output_hash(result)

        logger.info(
            f"DQQ evaluated: fgds={summary['food_groups']} consumed={consumed} "
            f"mddw_status={mddw_status.value} flags={len(flags)}"
        )
        return result

    def evaluate_many(
        self,
        answer_sets: Sequence[Optional[Mapping[str, Any]]],
        demographics: DemographicsLike,
    ) -> DqqResult:
        """Merge several answer sets (e.g. one day of meals) and evaluate."""
        merged = merge_all(answer_sets)
        if not merged:
            return self.evaluate(None, demographics)
        return self.evaluate(merged, demographics)

    def _compute_input_hash(
        self,
        answers: Optional[Mapping[str, Any]],
        demographics: Optional[Demographics],
        flags: Sequence[str],
    ) -> str:
        # Only the consumed flag of each known key is hashed; anything else
        # already shows up in flags
        consumed = None
        if answers is not None:
            consumed = {_key_str(k): v is True for k, v in answers.items() if is_question_key(k)}
        data = {
            "answers": consumed,
            "flags": sorted(flags),
            "demographics": demographics.to_dict() if demographics is not None else None,
            "ruleset_version": self.ruleset_version,
        }
        return canonicalize_and_hash(data)

    def _compute_output_hash(self, result: DqqResult) -> str:
        # evaluated_at is excluded so equal inputs hash equally
        data = {
            "indicators": result.indicators,
            "mddw_status": result.mddw_status.value,
            "flags": sorted(result.flags),
            "ruleset_version": result.ruleset_version,
        }
        return canonicalize_and_hash(data)


def _key_str(key: Any) -> str:
    if isinstance(key, Enum):
        return str(key.value)
    return str(key)


# ============================================================
# MODULE-LEVEL ACCESSOR
# ============================================================

_engine: Optional[DqqEngine] = None


def get_engine() -> DqqEngine:
    """Get the shared DqqEngine instance."""
    global _engine
    if _engine is None:
        _engine = DqqEngine()
    return _engine
