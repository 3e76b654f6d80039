"""Domain models for the Estimo estimation pipeline."""

from estimo.models.enums import (
    BenchmarkStatus,
    ConfidenceLevel,
    IssueCategory,
    PassStatus,
    PipelineState,
    RateSource,
    Severity,
    SheetType,
    UnitSystem,
)
from estimo.models.estimate import (
    CostBreakdown,
    Estimate,
    EstimateMetadata,
    EstimateSummary,
    LineItem,
    MarkupLine,
    MaterialSchedule,
    Trade,
    ValidationIssue,
    ValidationReport,
)
from estimo.models.project import ProjectInfo, SourceFile
from estimo.models.takeoff import (
    BillOfQuantities,
    BoqItem,
    Discrepancy,
    ExtractionRecord,
    RawMeasurements,
    SheetInfo,
)

__all__ = [
    "BenchmarkStatus",
    "BillOfQuantities",
    "BoqItem",
    "ConfidenceLevel",
    "CostBreakdown",
    "Discrepancy",
    "Estimate",
    "EstimateMetadata",
    "EstimateSummary",
    "ExtractionRecord",
    "IssueCategory",
    "LineItem",
    "MarkupLine",
    "MaterialSchedule",
    "PassStatus",
    "PipelineState",
    "ProjectInfo",
    "RateSource",
    "RawMeasurements",
    "Severity",
    "SheetInfo",
    "SheetType",
    "SourceFile",
    "Trade",
    "UnitSystem",
    "ValidationIssue",
    "ValidationReport",
]
