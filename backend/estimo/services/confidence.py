"""Confidence scoring — a weighted composite over five named factors.

| Factor              | Weight |
|---------------------|--------|
| Validation checks   | 30     |
| Drawing data        | 25     |
| Rate coverage       | 20     |
| Benchmark alignment | 15     |
| Completeness        | 10     |

The composite is clamped to [0, 100]; there is no minimum floor above 0.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from estimo.models.enums import BenchmarkStatus, ConfidenceLevel, Severity
from estimo.models.estimate import ConfidenceFactor, ConfidenceReport

if TYPE_CHECKING:
    from collections.abc import Sequence

    from estimo.models.estimate import (
        BenchmarkComparison,
        Estimate,
        ValidationIssue,
        ValidationReport,
    )
    from estimo.models.takeoff import RawMeasurements

VALIDATION_WEIGHT = 30
DRAWING_WEIGHT = 25
RATE_WEIGHT = 20
BENCHMARK_WEIGHT = 15
COMPLETENESS_WEIGHT = 10

# Score deductions per unfixed issue (info issues always count).
_CRITICAL_PENALTY = 12
_WARNING_PENALTY = 5
_INFO_PENALTY = 1

# Outside the benchmark range but this close to a bound counts as "near".
_NEAR_BOUND = 0.15


def validation_score(issues: Sequence[ValidationIssue]) -> float:
    """100 minus penalties for unfixed critical/warning and all info issues, floored at 0."""
    criticals = sum(1 for i in issues if i.severity == Severity.CRITICAL and not i.auto_fixed)
    warnings = sum(1 for i in issues if i.severity == Severity.WARNING and not i.auto_fixed)
    infos = sum(1 for i in issues if i.severity == Severity.INFO)
    score = 100 - criticals * _CRITICAL_PENALTY - warnings * _WARNING_PENALTY - infos * _INFO_PENALTY
    return float(max(0, score))


def confidence_level(score: float) -> ConfidenceLevel:
    if score >= 80:
        return ConfidenceLevel.HIGH
    if score >= 60:
        return ConfidenceLevel.MEDIUM
    if score >= 40:
        return ConfidenceLevel.LOW
    return ConfidenceLevel.VERY_LOW


def benchmark_score(benchmark: BenchmarkComparison | None) -> tuple[float, str]:
    """Score benchmark alignment: 90 within, 70 near or rescaled, 40 outside, 50 unknown."""
    if benchmark is None:
        return 50.0, "no benchmark available"
    if benchmark.rescaled:
        return 70.0, f"rescaled into range ({benchmark.label})"
    if benchmark.status == BenchmarkStatus.WITHIN:
        return 90.0, f"within {benchmark.label} range"
    bound = benchmark.low if benchmark.status == BenchmarkStatus.BELOW else benchmark.high
    if bound and abs(benchmark.cost_per_sf - bound) / bound <= _NEAR_BOUND:
        return 70.0, f"slightly {benchmark.status.value} {benchmark.label} range"
    return 40.0, f"{benchmark.status.value} {benchmark.label} range"


def compute_confidence(
    estimate: Estimate,
    report: ValidationReport,
    measurements: RawMeasurements | None = None,
    *,
    drawings_analyzed: bool = False,
) -> ConfidenceReport:
    """Combine the five factors into a :class:`ConfidenceReport`."""
    factors: list[ConfidenceFactor] = []

    factors.append(
        ConfidenceFactor(
            name="Validation",
            score=report.validation_score,
            weight=VALIDATION_WEIGHT,
            detail=f"{report.error_count} errors, {report.warning_count} warnings",
        )
    )

    measured = measurements.confidence_score if measurements is not None else 0
    if drawings_analyzed or measured > 0:
        drawing, detail = float(max(measured, 40)), f"drawing text confidence {measured}"
    else:
        drawing, detail = 20.0, "no drawings analyzed"
    factors.append(
        ConfidenceFactor(name="Drawing Data", score=drawing, weight=DRAWING_WEIGHT, detail=detail)
    )

    db_pct = report.rate_source_summary.db_percentage if report.rate_source_summary else 0.0
    factors.append(
        ConfidenceFactor(
            name="Rate Quality",
            score=min(100.0, db_pct + 30),
            weight=RATE_WEIGHT,
            detail=f"{db_pct:.0f}% database-backed rates",
        )
    )

    bench, detail = benchmark_score(report.benchmark)
    factors.append(
        ConfidenceFactor(
            name="Benchmark Alignment", score=bench, weight=BENCHMARK_WEIGHT, detail=detail
        )
    )

    completeness = _completeness_score(estimate, measurements)
    factors.append(
        ConfidenceFactor(
            name="Completeness", score=completeness, weight=COMPLETENESS_WEIGHT
        )
    )

    total_weight = sum(f.weight for f in factors)
    raw = sum(f.score * f.weight for f in factors) / total_weight
    score = float(min(100, max(0, round(raw))))
    return ConfidenceReport(
        factors=factors,
        confidence_score=score,
        confidence_level=confidence_level(score),
    )


def zero_confidence_report() -> ConfidenceReport:
    """The report used when validation could not run at all."""
    return ConfidenceReport(
        factors=[],
        confidence_score=0.0,
        confidence_level=ConfidenceLevel.VERY_LOW,
    )


def _completeness_score(estimate: Estimate, measurements: RawMeasurements | None) -> float:
    score = 0.0
    if estimate.trades:
        score += 20
    if len(estimate.trades) >= 3:
        score += 20
    if estimate.cost_breakdown.direct_costs > 0:
        score += 20
    if estimate.summary.grand_total > 0:
        score += 20
    if estimate.summary.total_area or (measurements is not None and measurements.dimension_count):
        score += 20
    return score
