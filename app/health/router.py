"""
Deployment Health Check Endpoint
================================
Returns the status of the deployed DietQuality API.
"""

from fastapi import APIRouter
from datetime import datetime, timezone
import os

router = APIRouter(prefix="/api/v1/health", tags=["Health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get("/deployment")
def deployment_health():
    """
    Comprehensive deployment health check.
    Verifies all components are operational.
    """
    status = {
        "timestamp": _now(),
        "environment": os.environ.get("ENVIRONMENT", "unknown"),
        "components": {}
    }

    # Check DQQ engine with the all-false baseline
    try:
        from dqq_engine import __version__ as dqq_version
        from dqq_engine import DQQ_QUESTIONS, RULESET_VERSION, default_answers, get_engine

        result = get_engine().evaluate(default_answers(), {"age": 30, "gender": 1})
        baseline_ok = (
            result.indicators.get("fgds") == 0
            and result.indicators.get("mddw") == 0
            and result.indicators.get("gdr") == 9
        )
        status["components"]["dqq_engine"] = {
            "status": "healthy" if baseline_ok else "error",
            "version": dqq_version,
            "questions": len(DQQ_QUESTIONS),
            "ruleset_version": RULESET_VERSION,
            "baseline_output_hash": result.output_hash
        }
    except Exception as e:
        status["components"]["dqq_engine"] = {
            "status": "error",
            "error": str(e)
        }

    # Check result store (disabled counts as healthy)
    try:
        from dqq_engine.store import DqqResultStore
        store_status = DqqResultStore.get_instance().ping()
        status["components"]["result_store"] = store_status
    except Exception as e:
        status["components"]["result_store"] = {"status": "error", "error": str(e)}

    all_healthy = all(
        c.get("status") in ["healthy", "disabled"]
        for c in status["components"].values()
    )
    status["overall_status"] = "healthy" if all_healthy else "degraded"

    return status


@router.get("/quick")
def quick_health():
    """Quick health check for load balancers."""
    return {"status": "ok", "timestamp": _now()}
