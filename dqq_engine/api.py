"""
DQQ Engine - API Endpoints
==========================
FastAPI endpoints for the question schema, indicator calculation, merging,
daily aggregation and pyramid percentages.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from fastapi import HTTPException
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger("dqq_engine.api")

# Registered on the main FastAPI app
# Import: from dqq_engine.api import register_dqq_endpoints

# ============================================================
# REQUEST/RESPONSE MODELS
# ============================================================

class DemographicsInput(BaseModel):
    """Age and gender (1 = female, 0 = male). Accepts Age/Gender too."""
    age: Optional[float] = Field(default=None, alias="Age", ge=0, description="Age in years")
    gender: Optional[Literal[0, 1]] = Field(default=None, alias="Gender", description="1 = female, 0 = male")

    model_config = ConfigDict(populate_by_name=True)


class CalculateRequest(BaseModel):
    """Answers for one meal or one merged day."""
    answers: Optional[Dict[str, Any]] = Field(default=None, description="Map of DQQ1..DQQ29 to consumed flags")
    demographics: Optional[DemographicsInput] = None


class IndicatorRowResponse(BaseModel):
    id: str
    key: str
    label: str
    section: str
    kind: str
    value: Optional[int]
    display: Optional[str]


class CalculateResponse(BaseModel):
    evaluated_at: str
    indicators: Dict[str, Optional[int]]
    demographics: Optional[Dict[str, Any]]
    mddw_status: str
    flags: List[str]
    summary: Dict[str, int]
    diversity_band: Optional[str]
    rows: List[IndicatorRowResponse]
    ruleset_version: str
    input_hash: str
    output_hash: str


class MergeRequest(BaseModel):
    answer_sets: List[Optional[Dict[str, Any]]] = Field(..., description="Answer sets to combine")


class MealInput(BaseModel):
    meal_id: str
    created_at: datetime
    answers: Optional[Dict[str, Any]] = None
    name: Optional[str] = None


class DailyRequest(BaseModel):
    meals: List[MealInput]
    demographics: Optional[DemographicsInput] = None
    range_days: Optional[List[str]] = Field(
        default=None,
        description="Days (YYYY-MM-DD) to merge into one range summary"
    )


class TargetRange(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None


class PercentageRequest(BaseModel):
    category: str
    consumed_amount: float
    targets: Dict[str, TargetRange]
    offset_multiplier_above: float = Field(default=1, gt=0)
    offset_multiplier_below: float = Field(default=1, gt=0)


def _demographics_dict(demographics: Optional[DemographicsInput]) -> Optional[Dict[str, Any]]:
    if demographics is None:
        return None
    return demographics.model_dump()


# ============================================================
# ENDPOINT REGISTRATION
# ============================================================

def register_dqq_endpoints(app):
    """
    Register all DQQ engine endpoints on a FastAPI app.

    Usage:
        from dqq_engine.api import register_dqq_endpoints
        register_dqq_endpoints(app)
    """
    from dataclasses import asdict

    from dqq_engine.catalog import INDICATOR_ROWS, diversity_band, render_indicator_rows
    from dqq_engine.daily import MealRecord, build_daily_summaries, summarize_range, trend_points
    from dqq_engine.engine import RULESET_VERSION, get_engine
    from dqq_engine.indicators import calculate_dqq_indicators
    from dqq_engine.merge import merge_all
    from dqq_engine.pyramid import calculate_percentage
    from dqq_engine.questions import DQQ_QUESTIONS, default_answers, get_question

    # ---------------------------------------------------------
    # GET /api/v1/dqq/questions
    # ---------------------------------------------------------
    @app.get("/api/v1/dqq/questions", tags=["DQQ Engine"])
    def list_questions():
        """
        List the 29 DQQ food/drink groups in questionnaire order,
        plus the all-false default answer set used to initialize forms.
        """
        return {
            "question_count": len(DQQ_QUESTIONS),
            "questions": [{"key": q.key.value, "label": q.label} for q in DQQ_QUESTIONS],
            "default_answers": default_answers(),
        }

    # ---------------------------------------------------------
    # GET /api/v1/dqq/questions/{key}
    # ---------------------------------------------------------
    @app.get("/api/v1/dqq/questions/{key}", tags=["DQQ Engine"])
    def get_question_details(key: str):
        question = get_question(key.upper())
        if question is None:
            raise HTTPException(status_code=404, detail=f"Question '{key}' not found in DQQ schema")
        return {"key": question.key.value, "label": question.label}

    # ---------------------------------------------------------
    # GET /api/v1/dqq/indicators
    # ---------------------------------------------------------
    @app.get("/api/v1/dqq/indicators", tags=["DQQ Engine"])
    def list_indicators():
        """Indicator catalog with display ids, labels and sections."""
        return {
            "indicator_count": len(INDICATOR_ROWS),
            "indicators": [
                {
                    "id": row.row_id,
                    "key": row.key,
                    "label": row.label,
                    "section": row.section.value,
                    "kind": row.kind.value,
                }
                for row in INDICATOR_ROWS
            ],
        }

    # ---------------------------------------------------------
    # POST /api/v1/dqq/calculate
    # ---------------------------------------------------------
    @app.post("/api/v1/dqq/calculate", tags=["DQQ Engine"], response_model=CalculateResponse)
    def calculate(request: CalculateRequest):
        """
        Calculate DQQ indicators for one answer set.

        Missing answers or demographics return an empty indicator map with
        flags explaining why. MDD-W is only set for women aged 15-49.
        """
        result = get_engine().evaluate(request.answers, _demographics_dict(request.demographics))
        indicators = result.indicators

        return CalculateResponse(
            **result.to_dict(),
            diversity_band=diversity_band(indicators["fgds"]).value if indicators else None,
            rows=[IndicatorRowResponse(**row) for row in render_indicator_rows(indicators)] if indicators else [],
        )

    # ---------------------------------------------------------
    # POST /api/v1/dqq/merge
    # ---------------------------------------------------------
    @app.post("/api/v1/dqq/merge", tags=["DQQ Engine"])
    def merge(request: MergeRequest):
        """Combine answer sets: a group is consumed if any set reports it."""
        merged = merge_all(request.answer_sets)
        return {
            "input_count": len(request.answer_sets),
            "has_data": bool(merged),
            "answers": merged,
        }

    # ---------------------------------------------------------
    # POST /api/v1/dqq/daily
    # ---------------------------------------------------------
    @app.post("/api/v1/dqq/daily", tags=["DQQ Engine"])
    def daily(request: DailyRequest):
        """
        Group meals by day and calculate indicators per day.

        Optionally merges the days listed in range_days into one summary.
        """
        meals = [
            MealRecord(meal_id=m.meal_id, created_at=m.created_at, answers=m.answers, name=m.name)
            for m in request.meals
        ]
        demographics = _demographics_dict(request.demographics)
        summaries = build_daily_summaries(meals, demographics)

        range_summary = None
        if request.range_days:
            wanted = set(request.range_days)
            selected = [s for s in summaries if s.day in wanted]
            if not selected:
                raise HTTPException(status_code=404, detail="None of the requested days have meals")
            range_summary = summarize_range(selected, demographics)

        logger.info(f"Daily DQQ: {len(meals)} meals over {len(summaries)} days")

        return {
            "day_count": len(summaries),
            "days": [s.to_dict() for s in summaries],
            "trend": [asdict(p) for p in trend_points(summaries)],
            "range": range_summary.to_dict() if range_summary else None,
        }

    # ---------------------------------------------------------
    # POST /api/v1/dqq/pyramid/percentage
    # ---------------------------------------------------------
    @app.post("/api/v1/dqq/pyramid/percentage", tags=["DQQ Engine"])
    def pyramid_percentage(request: PercentageRequest):
        """Percentage of the target range reached for one category."""
        if request.category not in request.targets:
            raise HTTPException(status_code=404, detail=f"No target defined for category '{request.category}'")
        targets = {name: t.model_dump() for name, t in request.targets.items()}
        return {
            "category": request.category,
            "consumed_amount": request.consumed_amount,
            "percentage": calculate_percentage(
                request.category,
                request.consumed_amount,
                targets,
                request.offset_multiplier_above,
                request.offset_multiplier_below,
            ),
        }

    # ---------------------------------------------------------
    # GET /api/v1/dqq/status
    # ---------------------------------------------------------
    @app.get("/api/v1/dqq/status", tags=["DQQ Engine"])
    def dqq_engine_status():
        """DQQ engine status and baseline self-check."""
        baseline = calculate_dqq_indicators(default_answers(), {"age": 30, "gender": 1})
        baseline_ok = baseline.get("fgds") == 0 and baseline.get("mddw") == 0 and baseline.get("gdr") == 9
        return {
            "engine_version": "1.0",
            "status": "operational" if baseline_ok else "degraded",
            "ruleset_version": RULESET_VERSION,
            "question_count": len(DQQ_QUESTIONS),
            "indicator_count": len(INDICATOR_ROWS),
            "baseline_check": baseline_ok,
        }

    return app
