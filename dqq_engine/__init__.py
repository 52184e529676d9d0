"""
DQQ Engine v1.0
===============
Diet Quality Questionnaire indicator engine.

Usage:
    from dqq_engine import calculate_dqq_indicators, merge_all, get_engine
    from dqq_engine.api import register_dqq_endpoints
"""

from dqq_engine.questions import (
    DQQ_QUESTIONS,
    QUESTION_KEYS,
    Demographics,
    DqqQuestion,
    DqqQuestionKey,
    default_answers,
    get_question,
)
from dqq_engine.merge import merge_all, merge_answer_documents
from dqq_engine.indicators import INDICATOR_KEYS, calculate_dqq_indicators, num
from dqq_engine.pyramid import calculate_percentage, calculate_pyramid_percentages
from dqq_engine.engine import (
    DqqEngine,
    DqqResult,
    MddwStatus,
    ValidationFlag,
    RULESET_VERSION,
    get_engine,
)

__version__ = "1.0.0"
__all__ = [
    "DQQ_QUESTIONS",
    "QUESTION_KEYS",
    "Demographics",
    "DqqQuestion",
    "DqqQuestionKey",
    "default_answers",
    "get_question",
    "merge_all",
    "merge_answer_documents",
    "INDICATOR_KEYS",
    "calculate_dqq_indicators",
    "num",
    "calculate_percentage",
    "calculate_pyramid_percentages",
    "DqqEngine",
    "DqqResult",
    "MddwStatus",
    "ValidationFlag",
    "RULESET_VERSION",
    "get_engine",
]
