"""Tests for confidence scoring."""

from __future__ import annotations

from estimo.models.enums import BenchmarkStatus, ConfidenceLevel, IssueCategory, Severity
from estimo.models.estimate import (
    BenchmarkComparison,
    Estimate,
    EstimateMetadata,
    EstimateSummary,
    RateSourceSummary,
    Trade,
    ValidationIssue,
    ValidationReport,
)
from estimo.models.takeoff import RawMeasurements
from estimo.services.confidence import (
    benchmark_score,
    compute_confidence,
    confidence_level,
    validation_score,
)
from estimo.services.pricing import build_cost_breakdown


def _issue(severity: Severity, *, auto_fixed: bool = False) -> ValidationIssue:
    return ValidationIssue(
        severity=severity,
        category=IssueCategory.ARITHMETIC,
        message="x",
        auto_fixed=auto_fixed,
    )


def _bench(cost: float, status: BenchmarkStatus, *, rescaled: bool = False) -> BenchmarkComparison:
    return BenchmarkComparison(
        project_type="commercial",
        label="Commercial Office",
        low=150,
        mid=250,
        high=350,
        cost_per_sf=cost,
        status=status,
        rescaled=rescaled,
    )


def _estimate(trade_count: int = 3, total_area: float | None = 10000) -> Estimate:
    trades = [Trade(trade_name=f"Trade {n}", subtotal=1000.0) for n in range(trade_count)]
    breakdown = build_cost_breakdown(1000.0 * trade_count, {})
    return Estimate(
        summary=EstimateSummary(
            project_name="Test",
            total_area=total_area,
            grand_total=breakdown.total_with_markups,
        ),
        trades=trades,
        cost_breakdown=breakdown,
        metadata=EstimateMetadata(engine_version="0.1.0", rate_data_version="test"),
    )


class TestValidationScore:
    def test_clean(self) -> None:
        assert validation_score([]) == 100.0

    def test_auto_fixed_issues_do_not_count(self) -> None:
        issues = [_issue(Severity.CRITICAL, auto_fixed=True), _issue(Severity.WARNING, auto_fixed=True)]
        assert validation_score(issues) == 100.0

    def test_penalties(self) -> None:
        issues = [
            _issue(Severity.CRITICAL),
            _issue(Severity.WARNING),
            _issue(Severity.INFO, auto_fixed=True),
        ]
        assert validation_score(issues) == 82.0

    def test_floored_at_zero(self) -> None:
        assert validation_score([_issue(Severity.CRITICAL)] * 20) == 0.0


class TestLevels:
    def test_thresholds(self) -> None:
        assert confidence_level(80) == ConfidenceLevel.HIGH
        assert confidence_level(79.9) == ConfidenceLevel.MEDIUM
        assert confidence_level(60) == ConfidenceLevel.MEDIUM
        assert confidence_level(40) == ConfidenceLevel.LOW
        assert confidence_level(39) == ConfidenceLevel.VERY_LOW


class TestBenchmarkScore:
    def test_unknown(self) -> None:
        assert benchmark_score(None)[0] == 50.0

    def test_within(self) -> None:
        assert benchmark_score(_bench(250, BenchmarkStatus.WITHIN))[0] == 90.0

    def test_near_bound(self) -> None:
        assert benchmark_score(_bench(140, BenchmarkStatus.BELOW))[0] == 70.0

    def test_rescaled(self) -> None:
        assert benchmark_score(_bench(500, BenchmarkStatus.ABOVE, rescaled=True))[0] == 70.0

    def test_far_outside(self) -> None:
        assert benchmark_score(_bench(600, BenchmarkStatus.ABOVE))[0] == 40.0


class TestComputeConfidence:
    def test_weighted_composite(self) -> None:
        report = ValidationReport(
            issues=[],
            validation_score=100.0,
            rate_source_summary=RateSourceSummary(
                db_backed=7, estimated=3, total=10, db_percentage=70.0
            ),
            benchmark=_bench(250, BenchmarkStatus.WITHIN),
        )

        result = compute_confidence(_estimate(), report, drawings_analyzed=True)

        # (100*30 + 40*25 + 100*20 + 90*15 + 100*10) / 100
        assert result.confidence_score == 84.0
        assert result.confidence_level == ConfidenceLevel.HIGH
        assert [f.weight for f in result.factors] == [30, 25, 20, 15, 10]

    def test_no_drawings(self) -> None:
        report = ValidationReport(issues=[], validation_score=100.0)
        result = compute_confidence(_estimate(), report)
        drawing = next(f for f in result.factors if f.name == "Drawing Data")
        assert drawing.score == 20.0
        assert drawing.detail == "no drawings analyzed"

    def test_text_measurements_raise_drawing_score(self) -> None:
        report = ValidationReport(issues=[], validation_score=100.0)
        measurements = RawMeasurements(confidence_score=75, dimension_count=4)
        result = compute_confidence(_estimate(), report, measurements)
        drawing = next(f for f in result.factors if f.name == "Drawing Data")
        assert drawing.score == 75.0

    def test_completeness_factor(self) -> None:
        report = ValidationReport(issues=[], validation_score=0.0)
        result = compute_confidence(_estimate(trade_count=1, total_area=None), report)
        completeness = next(f for f in result.factors if f.name == "Completeness")
        assert completeness.score == 60.0
        assert 0 <= result.confidence_score <= 100
