"""Estimo construction cost estimation pipeline.

Usage::

    from estimo import DocumentOracle, ProjectInfo, SourceFile, create_default_pipeline

    pipeline = create_default_pipeline(DocumentOracle(api_key="..."))
    result = await pipeline.run(
        ProjectInfo(project_name="Warehouse", location="Pune, India"),
        [SourceFile("S-101.pdf", pdf_bytes)],
    )
    print(result.estimate.summary.grand_total)
"""

from estimo.data.repository import RateRepository
from estimo.exceptions import EstimationFailedError, EstimoError
from estimo.factory import create_default_pipeline
from estimo.models.enums import ConfidenceLevel, PipelineState, RateSource, Severity
from estimo.models.estimate import (
    CostBreakdown,
    Estimate,
    EstimateMetadata,
    EstimateSummary,
    LineItem,
    MaterialSchedule,
    Trade,
    ValidationIssue,
    ValidationReport,
)
from estimo.models.project import ProjectInfo, SourceFile
from estimo.services.decomposition import CostDecompositionPostProcessor
from estimo.services.oracle import DocumentOracle
from estimo.services.pipeline import EstimationPipeline, PipelineResult
from estimo.services.validation import ValidationEngine

__all__ = [
    "ConfidenceLevel",
    "CostBreakdown",
    "CostDecompositionPostProcessor",
    "DocumentOracle",
    "Estimate",
    "EstimateMetadata",
    "EstimateSummary",
    "EstimationFailedError",
    "EstimationPipeline",
    "EstimoError",
    "LineItem",
    "MaterialSchedule",
    "PipelineResult",
    "PipelineState",
    "ProjectInfo",
    "RateRepository",
    "RateSource",
    "Severity",
    "SourceFile",
    "Trade",
    "ValidationEngine",
    "ValidationIssue",
    "ValidationReport",
    "create_default_pipeline",
]
