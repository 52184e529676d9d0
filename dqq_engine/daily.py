"""
DQQ Engine - Daily Aggregation
==============================
Groups meals by calendar day, merges each day's answers and computes the
indicators per day. Also builds trend points for charts, summaries over
a selected range of days, and the offline analysis of a full data export.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from dqq_engine.indicators import DemographicsLike, calculate_dqq_indicators
from dqq_engine.merge import merge_all
from dqq_engine.questions import Demographics

logger = logging.getLogger("dqq_engine.daily")

DEFAULT_MIN_DAYS = 8
DEFAULT_MIN_MEALS = 14


# ============================================================
# DATA CLASSES
# ============================================================

@dataclass
class MealRecord:
    """One meal with its DQQ answers."""
    meal_id: str
    created_at: datetime
    answers: Optional[Dict[str, Any]] = None
    user_id: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self):
        # Naive times are UTC; aware and naive times must stay comparable
        self.created_at = parse_timestamp(self.created_at)

    @classmethod
    def from_document(cls, meal_id: str, doc: Mapping[str, Any]) -> "MealRecord":
        """
        Parse an exported meal document.

        createdAt may be a {"seconds": ..., "nanoseconds": ...} timestamp,
        epoch seconds, an ISO string or a datetime.
        """
        dqq_data = doc.get("dqqData") or {}
        return cls(
            meal_id=meal_id,
            created_at=parse_timestamp(doc.get("createdAt")),
            answers=dqq_data.get("answers"),
            user_id=doc.get("userId"),
            name=doc.get("name"),
        )


@dataclass
class DailySummary:
    """Merged answers and indicators for one day (or a range of days)."""
    day: str
    meal_count: int
    answers: Dict[str, bool]
    results: Dict[str, Optional[int]]
    meal_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day": self.day,
            "meal_count": self.meal_count,
            "meal_ids": list(self.meal_ids),
            "answers": self.answers,
            "results": self.results,
        }


@dataclass
class TrendPoint:
    """One point of the scores-over-time chart."""
    result_id: int
    day: str
    fgds: Optional[int]
    ncdp: Optional[int]
    gdr: Optional[int]
    ncdr: Optional[int]
    meal_count: int


# ============================================================
# HELPERS
# ============================================================

def parse_timestamp(value: Any) -> datetime:
    """Normalize stored timestamps to an aware UTC datetime."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, Mapping):
        seconds = value.get("seconds", value.get("_seconds"))
        if seconds is None:
            raise ValueError(f"Timestamp mapping without seconds: {value!r}")
        return datetime.fromtimestamp(float(seconds), tz=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    raise ValueError(f"Unsupported timestamp: {value!r}")


def day_key(value: Union[datetime, date]) -> str:
    """YYYY-MM-DD, in UTC for aware datetimes."""
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%d")


def group_meals_by_day(meals: Iterable[MealRecord]) -> "OrderedDict[str, List[MealRecord]]":
    """Meals grouped by day key, days and meals in chronological order."""
    grouped: Dict[str, List[MealRecord]] = {}
    for meal in sorted(meals, key=lambda meal: meal.created_at):
        grouped.setdefault(day_key(meal.created_at), []).append(meal)
    return OrderedDict(sorted(grouped.items()))


def _summarize(label: str, meals: Sequence[MealRecord], demographics: DemographicsLike) -> DailySummary:
    answers = merge_all([meal.answers for meal in meals])
    return DailySummary(
        day=label,
        meal_count=len(meals),
        answers=answers,
        results=calculate_dqq_indicators(answers, demographics),
        meal_ids=[meal.meal_id for meal in meals],
    )


# ============================================================
# DAILY SUMMARIES
# ============================================================

def build_daily_summaries(
    meals: Iterable[MealRecord],
    demographics: DemographicsLike,
) -> List[DailySummary]:
    """One DailySummary per day with meals, sorted by day."""
    return [
        _summarize(day, day_meals, demographics)
        for day, day_meals in group_meals_by_day(meals).items()
    ]


def summarize_range(
    summaries: Sequence[DailySummary],
    demographics: DemographicsLike,
) -> Optional[DailySummary]:
    """
    Merge the selected days into one summary.

    Each day already holds the OR of its meals, so OR-ing the days gives
    the same answers as merging every meal. The summary is labelled
    "<first day> - <last day>". Returns None when nothing is selected.
    """
    if not summaries:
        return None
    selected = sorted(summaries, key=lambda s: s.day)
    answers = merge_all([s.answers for s in selected])
    return DailySummary(
        day=f"{selected[0].day} - {selected[-1].day}",
        meal_count=sum(s.meal_count for s in selected),
        answers=answers,
        results=calculate_dqq_indicators(answers, demographics),
        meal_ids=[meal_id for s in selected for meal_id in s.meal_ids],
    )


def trend_points(summaries: Sequence[DailySummary]) -> List[TrendPoint]:
    return [
        TrendPoint(
            result_id=index,
            day=summary.day,
            fgds=summary.results.get("fgds"),
            ncdp=summary.results.get("ncdp"),
            gdr=summary.results.get("gdr"),
            ncdr=summary.results.get("ncdr"),
            meal_count=summary.meal_count,
        )
        for index, summary in enumerate(summaries)
    ]


# ============================================================
# EXPORT ANALYSIS
# ============================================================

def analyze_export(
    export: Mapping[str, Any],
    cutoff: Optional[datetime] = None,
    min_days: int = DEFAULT_MIN_DAYS,
    min_meals: int = DEFAULT_MIN_MEALS,
) -> List[Dict[str, Any]]:
    """
    Daily DQQ for every sufficiently active user in a data export.

    The export has the shape {"collections": {"users": {...}, "meals": {...}}}.
    A user is kept when they logged meals on more than min_days distinct
    days and more than min_meals meals since cutoff.
    """
    collections = export.get("collections") or {}
    users = collections.get("users") or {}
    meal_docs = collections.get("meals") or {}

    if cutoff is not None and cutoff.tzinfo is None:
        cutoff = cutoff.replace(tzinfo=timezone.utc)

    meals_by_user: Dict[str, List[MealRecord]] = {}
    skipped = 0
    for meal_id, doc in meal_docs.items():
        try:
            meal = MealRecord.from_document(meal_id, doc)
        except ValueError as e:
            skipped += 1
            logger.warning(f"Skipping meal {meal_id}: {e}")
            continue
        if cutoff is not None and meal.created_at < cutoff:
            continue
        meals_by_user.setdefault(meal.user_id, []).append(meal)

    logger.info(f"Export: {len(meal_docs)} meals, {len(users)} users, {skipped} unparseable meals")

    analyzed = []
    for user_id, user in users.items():
        meals = meals_by_user.get(user_id, [])
        days = group_meals_by_day(meals)
        if len(days) <= min_days or len(meals) <= min_meals:
            continue

        if not user.get("demographics"):
            logger.warning(f"No demographics found for user {user.get('displayName', user_id)}")
        demographics = Demographics.from_mapping(user.get("demographics"))

        summaries = [_summarize(day, day_meals, demographics) for day, day_meals in days.items()]
        analyzed.append({
            "user_id": user_id,
            "display_name": user.get("displayName"),
            "role": user.get("role"),
            "demographics": demographics.to_dict(),
            "meal_count": len(meals),
            "day_count": len(days),
            "days": [s.to_dict() for s in summaries],
        })

    logger.info(f"Users with enough meals: {len(analyzed)}")
    return analyzed
