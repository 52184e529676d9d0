"""
DQQ Engine - Question Schema
============================
The fixed universe of 29 Diet Quality Questionnaire food/drink groups.

Keys are stable and never renumbered: indicator formulas reference
specific question numbers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


# ============================================================
# QUESTION KEYS
# ============================================================

class DqqQuestionKey(str, Enum):
    """Stable DQQ question keys."""
    DQQ1 = "DQQ1"
    DQQ2 = "DQQ2"
    DQQ3 = "DQQ3"
    DQQ4 = "DQQ4"
    DQQ5 = "DQQ5"
    DQQ6 = "DQQ6"
    DQQ7 = "DQQ7"
    DQQ8 = "DQQ8"
    DQQ9 = "DQQ9"
    DQQ10 = "DQQ10"
    DQQ11 = "DQQ11"
    DQQ12 = "DQQ12"
    DQQ13 = "DQQ13"
    DQQ14 = "DQQ14"
    DQQ15 = "DQQ15"
    DQQ16 = "DQQ16"
    DQQ17 = "DQQ17"
    DQQ18 = "DQQ18"
    DQQ19 = "DQQ19"
    DQQ20 = "DQQ20"
    DQQ21 = "DQQ21"
    DQQ22 = "DQQ22"
    DQQ23 = "DQQ23"
    DQQ24 = "DQQ24"
    DQQ25 = "DQQ25"
    DQQ26 = "DQQ26"
    DQQ27 = "DQQ27"
    DQQ28 = "DQQ28"
    DQQ29 = "DQQ29"


@dataclass(frozen=True)
class DqqQuestion:
    """A single questionnaire item."""
    key: DqqQuestionKey
    label: str


K = DqqQuestionKey

DQQ_QUESTIONS: Tuple[DqqQuestion, ...] = (
    DqqQuestion(K.DQQ1, "01 Foods made from grains (like maize, rice, wheat, bread, pasta, porridge)"),
    DqqQuestion(K.DQQ2, "02 Whole grains (like brown rice, whole wheat bread, whole grain cereal)"),
    DqqQuestion(K.DQQ3, "03 White roots or tubers (like potatoes, yams, cassava, manioc - not orange inside)"),
    DqqQuestion(K.DQQ4, "04 Pulses (beans, peas, lentils)"),
    DqqQuestion(K.DQQ5, "05 Vitamin A-rich orange vegetables (like carrots, pumpkin, orange sweet potatoes)"),
    DqqQuestion(K.DQQ6, "06 Dark green leafy vegetables (like spinach, kale, local greens)"),
    DqqQuestion(K.DQQ7, "07 Other vegetables (like tomatoes, onions, eggplant)"),
    DqqQuestion(K.DQQ8, "08 Vitamin A-rich fruits (like ripe mangoes, papayas)"),
    DqqQuestion(K.DQQ9, "09 Citrus fruits (like oranges, lemons, tangerines)"),
    DqqQuestion(K.DQQ10, "10 Other fruits (like apples, bananas, grapes)"),
    DqqQuestion(K.DQQ11, "11 Baked or grain-based sweets (like cakes, cookies, pastries, sweet biscuits)"),
    DqqQuestion(K.DQQ12, "12 Other sweets (like chocolate, candies, sugar)"),
    DqqQuestion(K.DQQ13, "13 Eggs"),
    DqqQuestion(K.DQQ14, "14 Cheese"),
    DqqQuestion(K.DQQ15, "15 Yogurt (including yogurt drinks)"),
    DqqQuestion(K.DQQ16, "16 Processed meats (like sausages, hot dogs, salami, canned meat)"),
    DqqQuestion(K.DQQ17, "17 Unprocessed red meat (ruminant - beef, lamb, goat)"),
    DqqQuestion(K.DQQ18, "18 Unprocessed red meat (non-ruminant - pork)"),
    DqqQuestion(K.DQQ19, "19 Poultry (chicken, turkey, duck)"),
    DqqQuestion(K.DQQ20, "20 Fish or seafood"),
    DqqQuestion(K.DQQ21, "21 Nuts or seeds"),
    DqqQuestion(K.DQQ22, "22 Packaged ultra-processed salty snacks (like chips, crisps)"),
    DqqQuestion(K.DQQ23, "23 Instant noodles"),
    DqqQuestion(K.DQQ24, "24 Deep fried foods (from restaurants or street vendors)"),
    DqqQuestion(K.DQQ25, "25 Milk (fluid milk, powdered milk reconstituted)"),
    DqqQuestion(K.DQQ26, "26 Sweet tea, coffee, or cocoa (with sugar added)"),
    DqqQuestion(K.DQQ27, "27 Fruit juice or fruit drinks (packaged or freshly made)"),
    DqqQuestion(K.DQQ28, "28 Soft drinks, energy drinks, or sports drinks"),
    DqqQuestion(K.DQQ29, "29 Fast food (purchased from fast-food outlets)"),
)

QUESTION_KEYS: Tuple[str, ...] = tuple(q.key.value for q in DQQ_QUESTIONS)

_QUESTIONS_BY_KEY: Dict[str, DqqQuestion] = {q.key.value: q for q in DQQ_QUESTIONS}


def is_question_key(key: Any) -> bool:
    """True if key names one of the 29 questions."""
    if isinstance(key, DqqQuestionKey):
        return True
    return isinstance(key, str) and key in _QUESTIONS_BY_KEY


def get_question(key: Any) -> Optional[DqqQuestion]:
    """Look up a question by key string or enum member."""
    if isinstance(key, DqqQuestionKey):
        key = key.value
    if not isinstance(key, str):
        return None
    return _QUESTIONS_BY_KEY.get(key)


def default_answers() -> Dict[str, bool]:
    """A fresh answer set with every food group marked as not consumed."""
    return {key: False for key in QUESTION_KEYS}


# ============================================================
# DEMOGRAPHICS
# ============================================================

MALE = 0
FEMALE = 1

# MDD-W applies to women of reproductive age only
MDDW_MIN_AGE = 15
MDDW_MAX_AGE = 49


def coerce_age(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if value != value:  # NaN
            return None
        return value
    return None


def coerce_gender(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int) and value in (MALE, FEMALE):
        return value
    return None


@dataclass(frozen=True)
class Demographics:
    """
    Per-user demographics used by the MDD-W indicator.

    gender: 1 = female, 0 = male, None = unknown.
    """
    age: Optional[float] = None
    gender: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        return self.age is not None and self.gender is not None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "Demographics":
        """
        Build from a plain mapping.

        Accepts both ``age``/``gender`` and the stored document form
        ``Age``/``Gender``. Values of the wrong type normalize to None.
        """
        if not data:
            return cls()
        age = data.get("age", data.get("Age"))
        gender = data.get("gender", data.get("Gender"))
        return cls(age=coerce_age(age), gender=coerce_gender(gender))

    def to_dict(self) -> Dict[str, Any]:
        return {"age": self.age, "gender": self.gender}
