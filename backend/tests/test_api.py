"""Tests for the FastAPI application — all pipeline calls are mocked."""

from __future__ import annotations

import io
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from estimo.api.app import create_app
from estimo.exceptions import EstimationFailedError
from estimo.models.enums import PipelineState
from estimo.models.estimate import (
    Estimate,
    EstimateMetadata,
    EstimateSummary,
    LineItem,
    Trade,
)
from estimo.services.pipeline import EstimationPipeline, PassEvent, PipelineResult
from estimo.services.pricing import build_cost_breakdown

# ---------------------------------------------------------------------------
# Fixtures / helpers
# ---------------------------------------------------------------------------


def _make_estimate() -> Estimate:
    item = LineItem(
        description="Structural steel medium",
        quantity=10,
        unit="ton",
        unit_rate=3000.0,
        line_total=30000.0,
    )
    breakdown = build_cost_breakdown(30000.0, {"profit": 10.0})
    return Estimate(
        summary=EstimateSummary(
            project_name="Test Project",
            location="Houston, TX",
            grand_total=breakdown.total_with_markups,
        ),
        trades=[Trade(trade_name="Structural Steel", subtotal=30000.0, line_items=[item])],
        cost_breakdown=breakdown,
        metadata=EstimateMetadata(engine_version="0.1.0", rate_data_version="test"),
    )


def _make_pipeline_result(fallback_reason: str | None = None) -> PipelineResult:
    return PipelineResult(
        estimate=_make_estimate(),
        state=(
            PipelineState.FALLBACK_COMPLETED if fallback_reason else PipelineState.COMPLETED
        ),
        events=[PassEvent("pass1", "in_progress", {"description": "x"}, 0.0)],
        processing_time_seconds=2.5,
        fallback_reason=fallback_reason,
    )


def _make_mock_pipeline(result: PipelineResult | None = None) -> MagicMock:
    mock = MagicMock(spec=EstimationPipeline)
    mock.run = AsyncMock(return_value=result or _make_pipeline_result())
    return mock


def _create_test_client(pipeline: EstimationPipeline | None = None) -> TestClient:
    return TestClient(create_app(pipeline=pipeline))


# ---------------------------------------------------------------------------
# Health and rates
# ---------------------------------------------------------------------------


class TestHealth:
    def test_health_returns_200(self) -> None:
        response = _create_test_client().get("/api/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": "0.1.0"}


class TestRates:
    def test_known_currency(self) -> None:
        response = _create_test_client().get("/api/rates/usd")

        assert response.status_code == 200
        data = response.json()
        assert data["currency"] == "USD"
        medium = data["rates"]["structural_steel"]["medium"]
        assert medium["rate"] == 3000
        assert medium["unit"] == "ton"

    def test_unknown_currency_returns_404(self) -> None:
        response = _create_test_client().get("/api/rates/XYZ")
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# Estimate endpoint
# ---------------------------------------------------------------------------


class TestEstimateSuccess:
    def test_returns_estimate_and_events(self) -> None:
        client = _create_test_client(pipeline=_make_mock_pipeline())

        response = client.post(
            "/api/estimate",
            files={"files": ("plan.pdf", io.BytesIO(b"%PDF-1.4"), "application/pdf")},
            data={"project_name": "Test Project", "location": "Houston, TX"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["estimate"]["summary"]["project_name"] == "Test Project"
        assert data["state"] == "completed"
        assert data["fallback"] is False
        assert data["processing_time_seconds"] == 2.5
        assert data["events"][0] == {
            "pass": "pass1",
            "status": "in_progress",
            "payload": {"description": "x"},
            "elapsed_seconds": 0.0,
        }
        assert "summary_dict" in data

    def test_project_and_files_passed_to_pipeline(self) -> None:
        pipeline = _make_mock_pipeline()
        client = _create_test_client(pipeline=pipeline)

        client.post(
            "/api/estimate",
            files={
                "files": ("plan.pdf", io.BytesIO(b"%PDF-1.4"), "application/octet-stream")
            },
            data={
                "project_name": "Plant",
                "location": "Pune, India",
                "project_type": "industrial",
                "total_area": "2000",
                "area_unit": "sqm",
                "markups": json.dumps({"profit": 10}),
            },
        )

        project, sources = pipeline.run.call_args.args
        assert project.project_name == "Plant"
        assert project.total_area == 2000
        assert project.area_unit == "sqm"
        assert project.markups == {"profit": 10.0}
        assert sources[0].filename == "plan.pdf"
        assert sources[0].media_type == "application/pdf"

    def test_without_files(self) -> None:
        pipeline = _make_mock_pipeline()
        client = _create_test_client(pipeline=pipeline)

        response = client.post("/api/estimate", data={"project_name": "Concept"})

        assert response.status_code == 200
        _project, sources = pipeline.run.call_args.args
        assert sources == []

    def test_fallback_flagged(self) -> None:
        pipeline = _make_mock_pipeline(_make_pipeline_result("pass3: boom"))
        response = _create_test_client(pipeline=pipeline).post(
            "/api/estimate", data={"project_name": "Test"}
        )
        data = response.json()
        assert data["fallback"] is True
        assert data["fallback_reason"] == "pass3: boom"
        assert data["state"] == "fallback_completed"


class TestEstimateErrors:
    def test_bad_markups_returns_422(self) -> None:
        client = _create_test_client(pipeline=_make_mock_pipeline())
        response = client.post(
            "/api/estimate", data={"project_name": "Test", "markups": "[1, 2]"}
        )
        assert response.status_code == 422

    def test_non_numeric_markup_returns_422(self) -> None:
        client = _create_test_client(pipeline=_make_mock_pipeline())
        response = client.post(
            "/api/estimate",
            data={"project_name": "Test", "markups": json.dumps({"profit": "lots"})},
        )
        assert response.status_code == 422

    def test_negative_area_returns_422(self) -> None:
        client = _create_test_client(pipeline=_make_mock_pipeline())
        response = client.post(
            "/api/estimate", data={"project_name": "Test", "total_area": "-5"}
        )
        assert response.status_code == 422

    def test_missing_api_key_returns_400(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        response = _create_test_client().post("/api/estimate", data={"project_name": "Test"})

        assert response.status_code == 400
        assert "ANTHROPIC_API_KEY" in response.json()["detail"]

    def test_pipeline_error_returns_500(self) -> None:
        pipeline = _make_mock_pipeline()
        pipeline.run.side_effect = EstimationFailedError("pass1: down", "no trades")
        client = _create_test_client(pipeline=pipeline)

        response = client.post("/api/estimate", data={"project_name": "Test"})

        assert response.status_code == 500
        assert "Fallback failed: no trades" in response.json()["detail"]
