"""Cost estimate models for the Estimo estimation pipeline."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from estimo.models.enums import (
    BenchmarkStatus,
    ConfidenceLevel,
    IssueCategory,
    RateSource,
    Severity,
)

MARKUP_FIELDS: tuple[str, ...] = (
    "general_conditions",
    "overhead",
    "profit",
    "contingency",
    "escalation",
)


# ---------------------------------------------------------------------------
# Priced items
# ---------------------------------------------------------------------------


class LineItem(BaseModel):
    """A single priced row: quantity × unit rate.

    The optional cost components are extended amounts for the whole line,
    filled in by the cost-decomposition post-processor.
    """

    description: str
    quantity: float = 0.0
    unit: str = "ls"
    unit_rate: float = 0.0
    line_total: float = 0.0
    rate_source: RateSource = RateSource.EST
    calculation: str | None = None
    material_cost: float | None = None
    labor_cost: float | None = None
    equipment_cost: float | None = None
    labor_hours: float | None = None

    def component_sum(self) -> float:
        return sum(
            c or 0.0 for c in (self.material_cost, self.labor_cost, self.equipment_cost)
        )


class Trade(BaseModel):
    """A group of line items (e.g. Structural Steel, MEP)."""

    trade_name: str
    subtotal: float = 0.0
    percent_of_total: float = 0.0
    line_items: list[LineItem] = Field(default_factory=list)


class MarkupLine(BaseModel):
    percent: float = 0.0
    amount: float = 0.0


class CostBreakdown(BaseModel):
    """Direct costs plus the five percentage markups."""

    direct_costs: float = 0.0
    general_conditions: MarkupLine = Field(default_factory=MarkupLine)
    overhead: MarkupLine = Field(default_factory=MarkupLine)
    profit: MarkupLine = Field(default_factory=MarkupLine)
    contingency: MarkupLine = Field(default_factory=MarkupLine)
    escalation: MarkupLine = Field(default_factory=MarkupLine)
    total_markups: float = 0.0
    total_with_markups: float = 0.0

    def markups(self) -> dict[str, MarkupLine]:
        return {name: getattr(self, name) for name in MARKUP_FIELDS}

    def total_markup_percent(self) -> float:
        return sum(m.percent for m in self.markups().values())


class EstimateSummary(BaseModel):
    project_name: str
    location: str = ""
    project_type: str = "commercial"
    total_area: float | None = None
    area_unit: str = "sf"
    currency: str = "USD"
    grand_total: float = 0.0
    cost_per_unit_area: float | None = None
    confidence_score: float | None = None
    confidence_level: ConfidenceLevel | None = None


# ---------------------------------------------------------------------------
# Validation report
# ---------------------------------------------------------------------------


class ValidationIssue(BaseModel):
    """A problem found by the validation engine, or a correction it made."""

    severity: Severity
    category: IssueCategory
    message: str
    auto_fixed: bool = False


class ConfidenceFactor(BaseModel):
    name: str
    score: float
    weight: float
    detail: str = ""


class ConfidenceReport(BaseModel):
    """Weighted composite confidence over named factors."""

    factors: list[ConfidenceFactor] = Field(default_factory=list)
    confidence_score: float = 0.0
    confidence_level: ConfidenceLevel = ConfidenceLevel.VERY_LOW


class BenchmarkComparison(BaseModel):
    project_type: str
    label: str
    low: float
    mid: float
    high: float
    unit: str = "sqft"
    cost_per_sf: float
    status: BenchmarkStatus
    rescaled: bool = False
    scale_factor: float | None = None
    adjusted_cost_per_sf: float | None = None


class RateSourceSummary(BaseModel):
    db_backed: int = 0
    estimated: int = 0
    total: int = 0
    db_percentage: float = 0.0


class TradeCompleteness(BaseModel):
    expected: list[str] = Field(default_factory=list)
    present: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)


class ValidationReport(BaseModel):
    """Everything the validation engine found and changed."""

    issues: list[ValidationIssue] = Field(default_factory=list)
    validation_score: float = 100.0
    confidence: ConfidenceReport | None = None
    rate_source_summary: RateSourceSummary | None = None
    trade_completeness: TradeCompleteness | None = None
    benchmark: BenchmarkComparison | None = None
    engine_error: str | None = None

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == Severity.CRITICAL)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == Severity.WARNING)

    @property
    def auto_fix_count(self) -> int:
        return sum(1 for i in self.issues if i.auto_fixed)


# ---------------------------------------------------------------------------
# Material schedule (cost decomposition)
# ---------------------------------------------------------------------------


class ScheduleItem(BaseModel):
    """A priced line item split into material, labor and equipment."""

    trade: str
    description: str
    category: str
    quantity: float
    unit: str
    line_total: float
    material_cost: float
    labor_cost: float
    equipment_cost: float
    labor_hours: float
    labor_rate: float
    crew: str


class CrewEntry(BaseModel):
    crew_trade: str
    description: str
    headcount: int
    labor_hours: float
    duration_weeks: int
    hourly_rate: float
    labor_cost: float


class ManpowerSummary(BaseModel):
    crews: list[CrewEntry] = Field(default_factory=list)
    peak_headcount: int = 0
    total_labor_hours: float = 0.0
    total_labor_cost: float = 0.0
    project_duration_weeks: int = 0
    duration_label: str = "TBD"


class MachineryEntry(BaseModel):
    equipment: str
    description: str
    quantity: int = 1
    daily_rate: float
    duration_days: int
    total_cost: float


class MarkupSummaryLine(BaseModel):
    name: str
    percent: float
    amount: float
    source: str


class ProcurementSummary(BaseModel):
    currency: str = "USD"
    is_peb: bool = False
    steel_tonnage: float = 0.0
    steel_unit: str = "ton"
    concrete_volume: float = 0.0
    concrete_unit: str = "cy"
    rebar_tonnage: float = 0.0
    rebar_unit: str = "ton"
    rebar_estimated: bool = False
    concrete_by_element: dict[str, float] = Field(default_factory=dict)
    rebar_by_element: dict[str, float] = Field(default_factory=dict)


class MaterialSchedule(BaseModel):
    items: list[ScheduleItem] = Field(default_factory=list)
    manpower: ManpowerSummary = Field(default_factory=ManpowerSummary)
    machinery: list[MachineryEntry] = Field(default_factory=list)
    total_machinery_cost: float = 0.0
    markups: list[MarkupSummaryLine] = Field(default_factory=list)
    total_markups: float = 0.0
    procurement: ProcurementSummary = Field(default_factory=ProcurementSummary)


# ---------------------------------------------------------------------------
# Estimate
# ---------------------------------------------------------------------------


class EstimateMetadata(BaseModel):
    """Provenance of an estimate."""

    engine_version: str
    rate_data_version: str
    analysis_method: str = "multi_pass"
    location_factor: float = 1.0
    location_country: str = "US"
    rate_source_breakdown: dict[str, int] = Field(default_factory=dict)
    passes_completed: list[str] = Field(default_factory=list)
    fallback: bool = False
    fallback_reason: str | None = None
    processing_time_seconds: float | None = None
    generated_at: datetime = Field(default_factory=datetime.now)


class Estimate(BaseModel):
    """Root aggregate of an estimation run.

    Produced fresh by the cost application pass and refined by validation
    and cost decomposition; the final document is what gets persisted.
    """

    summary: EstimateSummary
    trades: list[Trade] = Field(default_factory=list)
    cost_breakdown: CostBreakdown = Field(default_factory=CostBreakdown)
    material_schedule: MaterialSchedule | None = None
    validation_report: ValidationReport | None = None
    metadata: EstimateMetadata
    assumptions: list[str] = Field(default_factory=list)

    def line_items(self) -> Iterator[tuple[Trade, LineItem]]:
        for trade in self.trades:
            for item in trade.line_items:
                yield trade, item

    def to_summary_dict(self) -> dict[str, Any]:
        """Produce a flat summary dict for display."""
        from estimo.formatting import format_currency

        currency = self.summary.currency
        top_trades = sorted(self.trades, key=lambda t: t.subtotal, reverse=True)[:3]
        report = self.validation_report
        return {
            "project_name": self.summary.project_name,
            "location": self.summary.location,
            "currency": currency,
            "grand_total_formatted": format_currency(self.summary.grand_total, currency),
            "direct_costs_formatted": format_currency(
                self.cost_breakdown.direct_costs, currency
            ),
            "cost_per_unit_area": self.summary.cost_per_unit_area,
            "confidence_level": (
                self.summary.confidence_level.value
                if self.summary.confidence_level
                else None
            ),
            "num_trades": len(self.trades),
            "top_trades": [
                {
                    "trade_name": t.trade_name,
                    "subtotal_formatted": format_currency(t.subtotal, currency),
                    "percent_of_total": t.percent_of_total,
                }
                for t in top_trades
            ],
            "issues": len(report.issues) if report else 0,
            "fallback": self.metadata.fallback,
        }
