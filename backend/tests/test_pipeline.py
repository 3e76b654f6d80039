"""Tests for the estimation pipeline orchestrator."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from estimo.exceptions import CostEstimationError, EstimationFailedError
from estimo.models.enums import PipelineState, SheetType
from estimo.models.estimate import (
    Estimate,
    EstimateMetadata,
    EstimateSummary,
    LineItem,
    Trade,
)
from estimo.models.project import ProjectInfo, SourceFile
from estimo.models.takeoff import BillOfQuantities, ExtractionMeta, ExtractionRecord, SheetInfo
from estimo.services.decomposition import CostDecompositionPostProcessor
from estimo.services.pipeline import EstimationPipeline
from estimo.services.pricing import build_cost_breakdown
from estimo.services.validation import ValidationEngine

# ---------------------------------------------------------------------------
# Fixtures / helpers
# ---------------------------------------------------------------------------

_PASSES = ["pass1", "pass2", "pass3", "pass4", "pass5"]


def _make_estimate(total: float = 30000.0) -> Estimate:
    item = LineItem(
        description="Structural steel medium",
        quantity=total / 3000,
        unit="ton",
        unit_rate=3000.0,
        line_total=total,
    )
    breakdown = build_cost_breakdown(total, {"profit": 8.0})
    return Estimate(
        summary=EstimateSummary(
            project_name="Warehouse",
            grand_total=breakdown.total_with_markups,
        ),
        trades=[Trade(trade_name="Structural Steel", subtotal=total, line_items=[item])],
        cost_breakdown=breakdown,
        metadata=EstimateMetadata(engine_version="0.1.0", rate_data_version="test"),
    )


def _make_pipeline(
    *,
    takeoff_error: Exception | None = None,
    fallback: Any = "default",
    post_processor: Any = None,
    measurement_extractor: Any = None,
) -> EstimationPipeline:
    classifier = MagicMock()
    classifier.classify = AsyncMock(
        return_value=[SheetInfo(page_number=1, sheet_type=SheetType.STRUCTURAL)]
    )
    coordinator = MagicMock()
    coordinator.extract = AsyncMock(
        return_value=ExtractionRecord(
            structural={"beams": [{"mark": "B1"}]},
            extraction_meta=ExtractionMeta(sheet_count=1, groups_processed=["structural"]),
        )
    )
    takeoff = MagicMock()
    if takeoff_error is not None:
        takeoff.compute.side_effect = takeoff_error
    else:
        takeoff.compute.return_value = BillOfQuantities()
    pricing = MagicMock()
    pricing.apply.return_value = _make_estimate()

    if fallback == "default":
        fallback = MagicMock()
        fallback.estimate = AsyncMock(return_value=_make_estimate(50000.0))

    return EstimationPipeline(
        classifier=classifier,
        coordinator=coordinator,
        takeoff=takeoff,
        pricing=pricing,
        validator=ValidationEngine(),
        post_processor=post_processor or CostDecompositionPostProcessor(),
        fallback_estimator=fallback,
        measurement_extractor=measurement_extractor,
    )


@pytest.fixture()
def project() -> ProjectInfo:
    return ProjectInfo(project_name="Warehouse", project_type="warehouse")


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestMultiPass:
    def test_completes_all_passes(self, project: ProjectInfo) -> None:
        result = asyncio.run(_make_pipeline().run(project))

        assert result.state == PipelineState.COMPLETED
        assert result.fallback_reason is None
        estimate = result.estimate
        assert estimate.metadata.passes_completed == _PASSES
        assert estimate.validation_report is not None
        assert estimate.material_schedule is not None
        assert estimate.summary.confidence_score is not None
        assert estimate.metadata.processing_time_seconds is not None

    def test_events_in_pass_order(self, project: ProjectInfo) -> None:
        result = asyncio.run(_make_pipeline().run(project))

        pairs = [(e.pass_name, e.status) for e in result.events]
        expected = [(p, s) for p in _PASSES for s in ("in_progress", "completed")]
        assert pairs == expected
        assert result.events[1].payload["sheet_types"] == {"structural": 1}
        assert result.events[3].payload["structural_members"] == 1

    def test_sync_and_async_callbacks(self, project: ProjectInfo) -> None:
        seen: list[tuple[str, str]] = []

        def on_update(pass_name: str, status: str, payload: dict[str, Any]) -> None:
            seen.append((pass_name, status))

        async def on_update_async(pass_name: str, status: str, payload: dict[str, Any]) -> None:
            seen.append((pass_name, status))

        asyncio.run(_make_pipeline().run(project, on_pass_update=on_update))
        asyncio.run(_make_pipeline().run(project, on_pass_update=on_update_async))
        assert len(seen) == 20

    def test_failing_callback_does_not_abort(self, project: ProjectInfo) -> None:
        def on_update(pass_name: str, status: str, payload: dict[str, Any]) -> None:
            raise RuntimeError("socket closed")

        result = asyncio.run(_make_pipeline().run(project, on_pass_update=on_update))
        assert result.state == PipelineState.COMPLETED

    def test_decomposition_failure_is_skipped(self, project: ProjectInfo) -> None:
        broken = MagicMock()
        broken.process.side_effect = ValueError("bad table")

        result = asyncio.run(_make_pipeline(post_processor=broken).run(project))

        assert result.state == PipelineState.COMPLETED
        assert result.estimate.material_schedule is None
        assert result.estimate.validation_report is not None

    def test_measurement_failure_is_skipped(self, project: ProjectInfo) -> None:
        extractor = MagicMock()
        extractor.extract.side_effect = RuntimeError("damaged content stream")
        pipeline = _make_pipeline(measurement_extractor=extractor)

        result = asyncio.run(pipeline.run(project, [SourceFile("S-101.pdf", b"%PDF-1.7")]))

        extractor.extract.assert_called_once()
        assert result.state == PipelineState.COMPLETED
        assert result.measurements is None
        assert "text_confidence" not in result.events[3].payload


class TestFallback:
    def test_failure_switches_to_fallback(self, project: ProjectInfo) -> None:
        pipeline = _make_pipeline(takeoff_error=RuntimeError("boom"))

        result = asyncio.run(pipeline.run(project))

        assert result.state == PipelineState.FALLBACK_COMPLETED
        assert result.fallback_reason == "pass3: RuntimeError: boom"
        metadata = result.estimate.metadata
        assert metadata.analysis_method == "single_pass_fallback"
        assert metadata.fallback
        assert metadata.fallback_reason == "pass3: RuntimeError: boom"
        assert metadata.passes_completed == ["pass1", "pass2"]
        assert result.estimate.material_schedule is not None
        statuses = [(e.pass_name, e.status) for e in result.events[-2:]]
        assert statuses == [("engine", "failed"), ("engine", "fallback_completed")]

    def test_both_fail(self, project: ProjectInfo) -> None:
        fallback = MagicMock()
        fallback.estimate = AsyncMock(side_effect=CostEstimationError("no trades"))
        pipeline = _make_pipeline(takeoff_error=RuntimeError("boom"), fallback=fallback)

        with pytest.raises(EstimationFailedError) as excinfo:
            asyncio.run(pipeline.run(project))

        assert excinfo.value.primary_error == "pass3: RuntimeError: boom"
        assert excinfo.value.fallback_error == "no trades"

    def test_no_fallback_configured(self, project: ProjectInfo) -> None:
        pipeline = _make_pipeline(takeoff_error=RuntimeError("boom"), fallback=None)
        with pytest.raises(EstimationFailedError, match="no fallback estimator configured"):
            asyncio.run(pipeline.run(project))
