"""
DQQ Engine - API Endpoint Tests
===============================
Exercises the registered endpoints through FastAPI's TestClient.
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.health.router import router as health_router
from dqq_engine.api import DemographicsInput, register_dqq_endpoints
from dqq_engine.store import DqqResultStore


@pytest.fixture
def client(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    DqqResultStore.reset()
    app = FastAPI()
    register_dqq_endpoints(app)
    app.include_router(health_router)
    yield TestClient(app)
    DqqResultStore.reset()


class TestSchemaEndpoints:

    def test_list_questions(self, client):
        data = client.get("/api/v1/dqq/questions").json()
        assert data["question_count"] == 29
        assert data["questions"][0]["key"] == "DQQ1"
        assert data["default_answers"]["DQQ29"] is False

    def test_get_question(self, client):
        response = client.get("/api/v1/dqq/questions/dqq23")
        assert response.status_code == 200
        assert response.json()["label"] == "23 Instant noodles"

    def test_unknown_question_404(self, client):
        assert client.get("/api/v1/dqq/questions/DQQ42").status_code == 404

    def test_list_indicators(self, client):
        data = client.get("/api/v1/dqq/indicators").json()
        keys = [i["key"] for i in data["indicators"]]
        assert "mddw" in keys and "gdr" in keys


class TestCalculate:

    def test_scenario(self, client):
        response = client.post("/api/v1/dqq/calculate", json={
            "answers": {"DQQ6": True},
            "demographics": {"age": 30, "gender": 1},
        })
        assert response.status_code == 200
        data = response.json()
        assert data["indicators"]["fgds"] == 1
        assert data["indicators"]["mddw"] == 0
        assert data["mddw_status"] == "ELIGIBLE"
        assert data["diversity_band"] == "LOW"
        rows = {r["key"]: r for r in data["rows"]}
        assert rows["dveg_consumption"]["display"] == "Yes"

    def test_stored_document_demographics(self, client):
        data = client.post("/api/v1/dqq/calculate", json={
            "answers": {"DQQ6": True},
            "demographics": {"Age": 60, "Gender": 0},
        }).json()
        assert data["indicators"]["mddw"] is None
        assert data["mddw_status"] == "NOT_ELIGIBLE"

    def test_empty_request(self, client):
        data = client.post("/api/v1/dqq/calculate", json={}).json()
        assert data["indicators"] == {}
        assert data["rows"] == []
        assert data["diversity_band"] is None
        assert "NO_ANSWERS" in data["flags"]

    def test_malformed_answer_values_flagged(self, client):
        data = client.post("/api/v1/dqq/calculate", json={
            "answers": {"DQQ1": "yes", "DQQ2": True},
            "demographics": {"age": 30, "gender": 1},
        }).json()
        assert data["indicators"]["DQQ1"] == 0
        assert "NON_BOOLEAN_VALUE:DQQ1" in data["flags"]

    def test_invalid_gender_rejected(self, client):
        response = client.post("/api/v1/dqq/calculate", json={
            "answers": {},
            "demographics": {"age": 30, "gender": 2},
        })
        assert response.status_code == 422


class TestMerge:

    def test_merge(self, client):
        data = client.post("/api/v1/dqq/merge", json={
            "answer_sets": [{"DQQ1": True}, {"DQQ6": True}, None],
        }).json()
        assert data["has_data"] is True
        assert data["answers"]["DQQ1"] is True
        assert data["answers"]["DQQ6"] is True
        assert data["answers"]["DQQ2"] is False

    def test_merge_empty(self, client):
        data = client.post("/api/v1/dqq/merge", json={"answer_sets": []}).json()
        assert data == {"input_count": 0, "has_data": False, "answers": {}}


class TestDaily:

    MEALS = [
        {"meal_id": "m1", "created_at": "2025-04-10T08:00:00Z", "answers": {"DQQ1": True}},
        {"meal_id": "m2", "created_at": "2025-04-10T13:00:00Z", "answers": {"DQQ6": True}},
        {"meal_id": "m3", "created_at": "2025-04-11T19:00:00Z", "answers": {"DQQ19": True}},
    ]

    def test_daily(self, client):
        data = client.post("/api/v1/dqq/daily", json={
            "meals": self.MEALS,
            "demographics": {"age": 30, "gender": 1},
        }).json()
        assert data["day_count"] == 2
        assert data["days"][0]["day"] == "2025-04-10"
        assert data["days"][0]["results"]["fgds"] == 2
        assert data["trend"][1]["meal_count"] == 1
        assert data["range"] is None

    def test_range(self, client):
        data = client.post("/api/v1/dqq/daily", json={
            "meals": self.MEALS,
            "demographics": {"age": 30, "gender": 1},
            "range_days": ["2025-04-10", "2025-04-11"],
        }).json()
        assert data["range"]["day"] == "2025-04-10 - 2025-04-11"
        assert data["range"]["results"]["fgds"] == 3

    def test_range_with_naive_and_aware_times(self, client):
        response = client.post("/api/v1/dqq/daily", json={
            "meals": [
                {"meal_id": "n", "created_at": "2025-04-06T10:00:00", "answers": {"DQQ1": True}},
                {"meal_id": "a", "created_at": "2025-04-06T12:00:00Z", "answers": {"DQQ6": True}},
            ],
            "demographics": {"age": 30, "gender": 1},
            "range_days": ["2025-04-06"],
        })
        assert response.status_code == 200
        data = response.json()
        assert data["day_count"] == 1
        assert data["days"][0]["meal_ids"] == ["n", "a"]
        assert data["range"]["day"] == "2025-04-06 - 2025-04-06"
        assert data["range"]["results"]["fgds"] == 2

    def test_range_without_meals_404(self, client):
        response = client.post("/api/v1/dqq/daily", json={
            "meals": self.MEALS,
            "range_days": ["2024-01-01"],
        })
        assert response.status_code == 404


class TestPyramidAndStatus:

    def test_percentage(self, client):
        data = client.post("/api/v1/dqq/pyramid/percentage", json={
            "category": "Vegetables",
            "consumed_amount": 10,
            "targets": {"Vegetables": {"min": 3, "max": 5}},
        }).json()
        assert data["percentage"] == pytest.approx(200)

    def test_percentage_unknown_category(self, client):
        response = client.post("/api/v1/dqq/pyramid/percentage", json={
            "category": "Fish",
            "consumed_amount": 1,
            "targets": {"Vegetables": {"min": 3, "max": 5}},
        })
        assert response.status_code == 404

    def test_status(self, client):
        data = client.get("/api/v1/dqq/status").json()
        assert data["status"] == "operational"
        assert data["baseline_check"] is True
        assert data["question_count"] == 29

    def test_deployment_health(self, client):
        data = client.get("/api/v1/health/deployment").json()
        assert data["components"]["dqq_engine"]["status"] == "healthy"
        assert data["components"]["result_store"]["status"] == "disabled"
        assert data["overall_status"] == "healthy"


class TestRequestModels:

    def test_demographics_by_field_name_or_alias(self):
        assert DemographicsInput.model_config["populate_by_name"] is True
        by_name = DemographicsInput(age=30, gender=1)
        by_alias = DemographicsInput.model_validate({"Age": 30, "Gender": 1})
        assert by_name.model_dump() == by_alias.model_dump() == {"age": 30.0, "gender": 1}
