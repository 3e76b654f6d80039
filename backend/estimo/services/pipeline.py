"""Estimation pipeline — orchestrates the five passes and the fallback.

pass1 classify sheets → pass2 extract structural data → pass3 quantity
takeoff → pass4 cost application → pass5 validation, then cost
decomposition. Any unrecovered failure switches to the single-pass
fallback estimator.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections import Counter
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from estimo.exceptions import EstimationFailedError, EstimoError, PipelineStageError
from estimo.models.enums import PassStatus, PipelineState
from estimo.services.extraction import summarize_extraction

if TYPE_CHECKING:
    from collections.abc import Sequence

    from estimo.models.estimate import Estimate
    from estimo.models.project import ProjectInfo, SourceFile
    from estimo.models.takeoff import BillOfQuantities, RawMeasurements, SheetInfo
    from estimo.services.decomposition import CostDecompositionPostProcessor
    from estimo.services.extraction import ExtractionCoordinator
    from estimo.services.measurements import RawMeasurementExtractor
    from estimo.services.pricing import CostApplicationEngine
    from estimo.services.quick_estimator import QuickEstimator
    from estimo.services.sheet_classifier import SheetClassifier
    from estimo.services.takeoff import QuantityTakeoffEngine
    from estimo.services.validation import ValidationEngine

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str, dict[str, Any]], Any]

PASS_DESCRIPTIONS: dict[str, str] = {
    PipelineState.PASS1: "Classifying drawing sheets...",
    PipelineState.PASS2: "Extracting structural details from drawings...",
    PipelineState.PASS3: "Computing quantity takeoff (BOQ)...",
    PipelineState.PASS4: "Applying cost rates and generating estimate...",
    PipelineState.PASS5: "Validating estimate and computing confidence...",
}


@dataclass(frozen=True)
class PassEvent:
    """One progress event, as delivered to the callback."""

    pass_name: str
    status: str
    payload: dict[str, Any]
    elapsed_seconds: float


@dataclass(frozen=True)
class PipelineResult:
    """Result of one pipeline run (multi-pass or fallback)."""

    estimate: Estimate
    state: PipelineState
    events: list[PassEvent]
    processing_time_seconds: float
    sheets: list[SheetInfo] = field(default_factory=list)
    boq: BillOfQuantities | None = None
    measurements: RawMeasurements | None = None
    fallback_reason: str | None = None


class _Progress:
    """Delivers progress events; a failing callback never affects the run."""

    def __init__(self, callback: ProgressCallback | None, start: float) -> None:
        self._callback = callback
        self._start = start
        self.events: list[PassEvent] = []
        self.completed: list[str] = []
        self.state: PipelineState = PipelineState.PASS1

    def elapsed(self) -> float:
        return round(time.monotonic() - self._start, 2)

    async def emit(self, pass_name: str, status: PassStatus, payload: dict[str, Any]) -> None:
        self.events.append(PassEvent(pass_name, status.value, payload, self.elapsed()))
        if status == PassStatus.COMPLETED and pass_name in PASS_DESCRIPTIONS:
            self.completed.append(pass_name)
        if self._callback is None:
            return
        try:
            outcome = self._callback(pass_name, status.value, payload)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:  # noqa: BLE001 - progress reporting is best effort
            logger.exception("Progress callback failed for %s/%s", pass_name, status.value)

    async def begin(self, state: PipelineState) -> None:
        self.state = state
        await self.emit(
            state.value,
            PassStatus.IN_PROGRESS,
            {
                "description": PASS_DESCRIPTIONS[state],
                "started_at": datetime.now().isoformat(),
            },
        )


class EstimationPipeline:
    """Runs the multi-pass estimation flow for one project.

    Parameters
    ----------
    classifier, coordinator, takeoff, pricing, validator, post_processor:
        The pass implementations, in flow order.
    fallback_estimator:
        Drafts an estimate from project metadata when the passes fail.
    measurement_extractor:
        Optional raw-text extractor whose findings feed takeoff and
        validation.
    """

    def __init__(
        self,
        classifier: SheetClassifier,
        coordinator: ExtractionCoordinator,
        takeoff: QuantityTakeoffEngine,
        pricing: CostApplicationEngine,
        validator: ValidationEngine,
        post_processor: CostDecompositionPostProcessor,
        fallback_estimator: QuickEstimator | None = None,
        measurement_extractor: RawMeasurementExtractor | None = None,
    ) -> None:
        self._classifier = classifier
        self._coordinator = coordinator
        self._takeoff = takeoff
        self._pricing = pricing
        self._validator = validator
        self._post_processor = post_processor
        self._fallback_estimator = fallback_estimator
        self._measurement_extractor = measurement_extractor

    async def run(
        self,
        project: ProjectInfo,
        files: Sequence[SourceFile] = (),
        on_pass_update: ProgressCallback | None = None,
    ) -> PipelineResult:
        """Estimate *project* from *files*.

        The result always holds a validated estimate or a fallback-tagged
        one.

        Raises
        ------
        EstimationFailedError
            If the passes fail and the fallback fails too.
        """
        start = time.monotonic()
        progress = _Progress(on_pass_update, start)
        try:
            return await self._run_passes(project, files, progress, start)
        except Exception as exc:  # noqa: BLE001 - every failure goes to the fallback
            return await self._run_fallback(project, exc, progress, start)

    # ------------------------------------------------------------------
    # Multi-pass flow
    # ------------------------------------------------------------------

    async def _run_passes(
        self,
        project: ProjectInfo,
        files: Sequence[SourceFile],
        progress: _Progress,
        start: float,
    ) -> PipelineResult:
        # 1. Classify sheets
        await progress.begin(PipelineState.PASS1)
        with _stage(PipelineState.PASS1):
            sheets = await self._classifier.classify(files)
        await progress.emit(
            PipelineState.PASS1.value,
            PassStatus.COMPLETED,
            {
                "sheet_inventory": [s.model_dump(mode="json") for s in sheets],
                "sheet_count": len(sheets),
                "sheet_types": dict(Counter(s.sheet_type.value for s in sheets)),
            },
        )

        # 2. Extract structural data (and raw text measurements)
        await progress.begin(PipelineState.PASS2)
        with _stage(PipelineState.PASS2):
            record = await self._coordinator.extract(files, sheets)
            measurements = await self._extract_measurements(files)
        summary = summarize_extraction(record)
        if measurements is not None:
            summary["text_confidence"] = measurements.confidence_level
        await progress.emit(PipelineState.PASS2.value, PassStatus.COMPLETED, summary)

        # 3. Quantity takeoff
        await progress.begin(PipelineState.PASS3)
        with _stage(PipelineState.PASS3):
            boq = self._takeoff.compute(record, project, measurements)
        await progress.emit(
            PipelineState.PASS3.value,
            PassStatus.COMPLETED,
            {**boq.item_counts(), "unit_system": boq.unit_system.value},
        )

        # 4. Cost application
        await progress.begin(PipelineState.PASS4)
        with _stage(PipelineState.PASS4):
            estimate = self._pricing.apply(boq, project)
        await progress.emit(
            PipelineState.PASS4.value,
            PassStatus.COMPLETED,
            {
                "grand_total": estimate.summary.grand_total,
                "currency": estimate.summary.currency,
                "trade_count": len(estimate.trades),
                "rate_source_breakdown": dict(estimate.metadata.rate_source_breakdown),
            },
        )

        # 5. Validation, then cost decomposition
        await progress.begin(PipelineState.PASS5)
        with _stage(PipelineState.PASS5):
            estimate = self._validator.validate(
                estimate,
                project,
                measurements,
                drawings_analyzed=bool(record.extraction_meta.groups_processed),
            )
            estimate = self._decompose(estimate, project)

        report = estimate.validation_report
        elapsed = progress.elapsed()
        await progress.emit(
            PipelineState.PASS5.value,
            PassStatus.COMPLETED,
            {
                "confidence_score": estimate.summary.confidence_score,
                "confidence_level": (
                    estimate.summary.confidence_level.value
                    if estimate.summary.confidence_level
                    else None
                ),
                "errors": report.error_count if report else 0,
                "warnings": report.warning_count if report else 0,
                "auto_fixes": report.auto_fix_count if report else 0,
                "total_duration_seconds": elapsed,
            },
        )

        estimate.metadata.passes_completed = list(progress.completed)
        estimate.metadata.processing_time_seconds = round(time.monotonic() - start, 2)
        logger.info(
            "Estimation completed in %.2fs: %.2f %s",
            estimate.metadata.processing_time_seconds,
            estimate.summary.grand_total,
            estimate.summary.currency,
        )
        return PipelineResult(
            estimate=estimate,
            state=PipelineState.COMPLETED,
            events=progress.events,
            processing_time_seconds=estimate.metadata.processing_time_seconds,
            sheets=list(sheets),
            boq=boq,
            measurements=measurements,
        )

    async def _extract_measurements(
        self, files: Sequence[SourceFile]
    ) -> RawMeasurements | None:
        if self._measurement_extractor is None or not any(f.is_pdf for f in files):
            return None
        # pymupdf is synchronous; keep it off the event loop.
        try:
            return await asyncio.to_thread(self._measurement_extractor.extract, files)
        except Exception as exc:  # noqa: BLE001 - text measurements are optional
            logger.warning("Raw measurement extraction skipped: %s", exc)
            return None

    def _decompose(self, estimate: Estimate, project: ProjectInfo) -> Estimate:
        try:
            return self._post_processor.process(estimate, project)
        except Exception as exc:  # noqa: BLE001 - the estimate stands without a schedule
            logger.warning("Cost decomposition skipped: %s", exc)
            return estimate

    # ------------------------------------------------------------------
    # Fallback
    # ------------------------------------------------------------------

    async def _run_fallback(
        self,
        project: ProjectInfo,
        error: Exception,
        progress: _Progress,
        start: float,
    ) -> PipelineResult:
        failed_after = progress.elapsed()
        reason = str(error)
        logger.warning(
            "Multi-pass estimation failed in %s after %.2fs, running fallback: %s",
            progress.state.value,
            failed_after,
            reason,
        )
        await progress.emit(
            "engine",
            PassStatus.FAILED,
            {"error": reason, "failed_after_seconds": failed_after},
        )

        if self._fallback_estimator is None:
            raise EstimationFailedError(reason, "no fallback estimator configured") from error
        try:
            estimate = await self._fallback_estimator.estimate(project)
        except Exception as exc:
            raise EstimationFailedError(reason, str(exc)) from exc

        estimate = self._decompose(estimate, project)
        estimate.metadata.analysis_method = "single_pass_fallback"
        estimate.metadata.fallback = True
        estimate.metadata.fallback_reason = reason
        estimate.metadata.passes_completed = list(progress.completed)
        estimate.metadata.processing_time_seconds = round(time.monotonic() - start, 2)

        await progress.emit(
            "engine",
            PassStatus.FALLBACK_COMPLETED,
            {"grand_total": estimate.summary.grand_total, "fallback_reason": reason},
        )
        return PipelineResult(
            estimate=estimate,
            state=PipelineState.FALLBACK_COMPLETED,
            events=progress.events,
            processing_time_seconds=estimate.metadata.processing_time_seconds,
            fallback_reason=reason,
        )


@contextmanager
def _stage(state: PipelineState) -> Iterator[None]:
    """Wrap untyped errors raised inside a pass in :class:`PipelineStageError`."""
    try:
        yield
    except EstimoError:
        raise
    except Exception as exc:
        msg = f"{type(exc).__name__}: {exc}"
        raise PipelineStageError(state.value, msg) from exc
