"""Validation engine (pass 5) — checks, auto-corrects and scores an estimate.

Checks run in order over a private copy of the estimate:

1. **Arithmetic** — line totals, subtotals, direct costs, markups and the
   grand total are recomputed; mismatches are corrected.
2. **Quantity reasonableness** — steel lb/SF, concrete CF/SF, rebar lb/CY
   and the foundation share of structural cost against engineering bands.
3. **Unit rates** — every matched rate is compared to the database range,
   replaced when outside it and blended toward it when it drifts.
4. **Benchmark** — cost per square foot against the market range; an
   estimate above the range is rescaled as a whole.
5. **Trade completeness** — expected trades per project type.
6. **Cross-trade consistency** — bucket shares of direct cost.
7. **Raw measurements** (optional) — drawing-text findings against the
   estimate.

Every correction is recorded as an auto-fixed :class:`ValidationIssue`.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING

from estimo.data.repository import RateRepository
from estimo.exceptions import AutoFixError
from estimo.models.enums import (
    BenchmarkStatus,
    ConfidenceLevel,
    IssueCategory,
    RateSource,
    Severity,
)
from estimo.models.estimate import (
    BenchmarkComparison,
    RateSourceSummary,
    TradeCompleteness,
    ValidationIssue,
    ValidationReport,
)
from estimo.services.confidence import (
    compute_confidence,
    validation_score,
    zero_confidence_report,
)
from estimo.services.rate_rules import match_rate, resolve_db_rate
from estimo.units import convert_quantity, dimension

if TYPE_CHECKING:
    from estimo.models.estimate import Estimate, LineItem, Trade
    from estimo.models.project import ProjectInfo
    from estimo.models.takeoff import RawMeasurements

logger = logging.getLogger(__name__)

_TOLERANCE = 0.005
MAX_SINGLE_MARKUP = 15.0
MAX_TOTAL_MARKUP = 40.0
RATE_BLEND_THRESHOLD = 0.10

# ---------------------------------------------------------------------------
# Trade tables
# ---------------------------------------------------------------------------

_COMMERCIAL_TRADES = [
    "Structural Steel",
    "Concrete",
    "Foundation",
    "Roofing",
    "MEP",
    "Finishes",
    "Exterior Cladding",
    "Elevator",
    "Fire Protection",
]

EXPECTED_TRADES: dict[str, list[str]] = {
    "industrial": [
        "Structural Steel", "Concrete", "Foundation", "Roofing", "MEP", "Sitework",
        "Exterior Cladding",
    ],
    "warehouse": [
        "Structural Steel", "Concrete", "Foundation", "Roofing", "MEP", "Sitework",
        "Exterior Cladding",
    ],
    "commercial": _COMMERCIAL_TRADES,
    "retail": [
        "Structural Steel", "Concrete", "Foundation", "Roofing", "MEP", "Finishes",
        "Exterior Cladding", "Sitework",
    ],
    "residential_single": [
        "Foundation", "Framing", "Roofing", "MEP", "Finishes", "Exterior Cladding",
        "Sitework",
    ],
    "residential_multi": [
        "Structural Steel", "Concrete", "Foundation", "Roofing", "MEP", "Finishes",
        "Elevator", "Fire Protection", "Sitework",
    ],
    "healthcare": [*_COMMERCIAL_TRADES, "Specialty Systems"],
    "hospitality": [*_COMMERCIAL_TRADES, "Specialty Systems"],
    "educational": [
        "Structural Steel", "Concrete", "Foundation", "Roofing", "MEP", "Finishes",
        "Exterior Cladding", "Sitework", "Fire Protection",
    ],
    "peb": [
        "Structural Steel", "Foundation", "Roofing", "MEP", "Exterior Cladding",
        "Sitework",
    ],
    "mixed_use": [*_COMMERCIAL_TRADES, "Sitework"],
    "data_center": [
        "Structural Steel", "Concrete", "Foundation", "Roofing", "MEP",
        "Fire Protection", "Specialty Systems", "Exterior Cladding", "Sitework",
    ],
    "parking": ["Structural Steel", "Concrete", "Foundation", "MEP", "Sitework"],
}

# Trade-name synonyms, matched on whole words.
_TRADE_SYNONYMS: list[tuple[str, re.Pattern[str]]] = [
    ("mep", re.compile(r"\b(?:mechanical|electrical|plumbing|hvac|mep)\b")),
    ("exterior cladding", re.compile(r"\b(?:cladding|enclosure|envelope|siding|curtain wall)")),
    (
        "finishes",
        re.compile(r"\b(?:finish|interior|drywall|paint|flooring|floor finish|ceiling)"),
    ),
    ("fire protection", re.compile(r"\b(?:fire|sprinkler)")),
    ("framing", re.compile(r"\b(?:framing|wood frame|timber)")),
    ("elevator", re.compile(r"\b(?:elevator|lift|vertical transport)")),
    ("specialty systems", re.compile(r"\b(?:specialty|special systems|clean ?room|data|security)")),
    ("structural steel", re.compile(r"\bstructural steel\b|\bsteel (?:frame|structure)|\bpeb\b")),
    ("concrete", re.compile(r"\b(?:concrete|masonry)\b")),
    ("foundation", re.compile(r"\b(?:foundation|footing|pile)")),
    ("roofing", re.compile(r"\broof")),
    ("sitework", re.compile(r"\b(?:site|earthwork|excavat|paving|grading|landscap)")),
]

# Trades that are often carried as line items inside another trade.
_LINE_ITEM_TRADES = frozenset({"fire protection", "elevator", "specialty systems"})

_CRITICAL_TRADE_RE = re.compile(r"foundation|structural|concrete|roofing|mep", re.IGNORECASE)

# Share of direct costs, percent (low, high).
TRADE_PCT_RANGES: dict[str, tuple[float, float]] = {
    "foundation": (5, 15),
    "mep": (25, 35),
    "structural": (20, 40),
    "finishes": (10, 25),
    "sitework": (3, 12),
    "roofing": (3, 10),
}

_BUCKET_PATTERNS: dict[str, re.Pattern[str]] = {
    "foundation": re.compile(r"foundation|footing|pile"),
    "mep": re.compile(r"mep|mechanical|electrical|plumbing|hvac|fire.prot|sprinkler"),
    "structural": re.compile(r"structural|steel|concrete|rebar|reinforc|masonry"),
    "finishes": re.compile(r"finish|interior|drywall|paint|floor|ceiling|carpet"),
    "sitework": re.compile(r"site|earth|excavat|paving|grading|landscape"),
    "roofing": re.compile(r"roof"),
}

# ---------------------------------------------------------------------------
# Quantity bands
# ---------------------------------------------------------------------------

_STEEL_LINE_RE = re.compile(r"steel|w\d+x|hss|joist", re.IGNORECASE)
_REBAR_LINE_RE = re.compile(r"rebar|reinforc|tmt|wwf", re.IGNORECASE)
_CONCRETE_LINE_RE = re.compile(
    r"concrete|slab|footing|foundation|grade beam|pile cap", re.IGNORECASE
)
_STRUCTURAL_TRADE_RE = re.compile(
    r"structural|steel|concrete|rebar|reinforc|foundation", re.IGNORECASE
)
_FOUNDATION_TRADE_RE = re.compile(r"foundation", re.IGNORECASE)

STEEL_PSF_BAND = (5.0, 15.0)
STEEL_PSF_LIMITS = (3.0, 25.0)
CONCRETE_CFSF_BAND = (0.5, 2.0)
CONCRETE_CFSF_CRITICAL = 4.0
REBAR_LB_PER_CY_BAND = (80.0, 150.0)
REBAR_LB_PER_CY_CRITICAL = 300.0
FOUNDATION_PCT_BAND = (5.0, 15.0)


@dataclass(frozen=True)
class QuantityTotals:
    """Structural quantities summed from an estimate's line items."""

    steel_tons: float
    concrete_cy: float
    rebar_tons: float


class ValidationEngine:
    """Runs all checks over an estimate and attaches a :class:`ValidationReport`.

    Parameters
    ----------
    repository:
        Rate, location and benchmark lookups. Defaults to the built-in
        reference tables.
    """

    def __init__(self, repository: RateRepository | None = None) -> None:
        self._repository = repository or RateRepository()

    def validate(
        self,
        estimate: Estimate,
        project: ProjectInfo,
        measurements: RawMeasurements | None = None,
        *,
        drawings_analyzed: bool = False,
    ) -> Estimate:
        """Return a validated, corrected copy of *estimate*.

        Never raises: an internal error yields the untouched input with a
        zero-confidence report.
        """
        try:
            return self._validate(estimate, project, measurements, drawings_analyzed)
        except Exception as exc:  # noqa: BLE001 - reported on the estimate instead
            logger.exception("Validation engine error")
            return _engine_error_result(estimate, str(exc))

    def check_totals(self, estimate: Estimate) -> Estimate:
        """Arithmetic-only validation, used for fallback estimates."""
        result = estimate.model_copy(deep=True)
        issues = check_arithmetic(result)
        report = ValidationReport(issues=issues, validation_score=validation_score(issues))
        report.confidence = compute_confidence(result, report)
        _attach_report(result, report)
        return result

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def _validate(
        self,
        estimate: Estimate,
        project: ProjectInfo,
        measurements: RawMeasurements | None,
        drawings_analyzed: bool,
    ) -> Estimate:
        result = estimate.model_copy(deep=True)
        area_sf = _area_sf(result, project)
        issues: list[ValidationIssue] = []

        # 1. Arithmetic
        issues += check_arithmetic(result)

        # 2. Quantities
        issues += check_quantities(result, area_sf)

        # 3. Unit rates
        rate_issues, rate_summary = self._check_unit_rates(result)
        issues += rate_issues
        recompute_rollups(result)

        # 4. Benchmark
        bench_issues, benchmark = self._check_benchmark(result, project, area_sf)
        issues += bench_issues

        # 5. Completeness
        completeness_issues, completeness = check_trade_completeness(
            result, self._repository.normalize_project_type(project.project_type)
        )
        issues += completeness_issues

        # 6. Consistency
        issues += check_consistency(result)

        # 7. Raw measurements
        if measurements is not None and measurements.has_data:
            issues += check_measurements(result, measurements, area_sf)

        report = ValidationReport(
            issues=issues,
            validation_score=validation_score(issues),
            rate_source_summary=rate_summary,
            trade_completeness=completeness,
            benchmark=benchmark,
        )
        report.confidence = compute_confidence(
            result, report, measurements, drawings_analyzed=drawings_analyzed
        )
        _attach_report(result, report)

        logger.info(
            "Validation: %d errors, %d warnings, %d auto-fixed; confidence %.0f (%s)",
            report.error_count,
            report.warning_count,
            report.auto_fix_count,
            report.confidence.confidence_score,
            report.confidence.confidence_level,
        )
        return result

    # ------------------------------------------------------------------
    # 3. Unit rates
    # ------------------------------------------------------------------

    def _check_unit_rates(
        self, estimate: Estimate
    ) -> tuple[list[ValidationIssue], RateSourceSummary]:
        currency = estimate.summary.currency
        factor = estimate.metadata.location_factor
        issues: list[ValidationIssue] = []
        db_backed = estimated = 0

        for _trade, item in estimate.line_items():
            match = match_rate(item.description, item.unit, currency, self._repository)
            resolved = resolve_db_rate(match, item.unit, currency, factor, self._repository)
            if resolved is None or resolved.low is None or resolved.high is None:
                item.rate_source = RateSource.EST
                estimated += 1
                continue

            db_backed += 1
            low, high = resolved.low, resolved.high
            target = resolved.rate
            issue = _attempt_fix(
                f"unit rate for {item.description!r}",
                partial(_fix_rate, item, target, low, high),
            )
            if issue is not None:
                issues.append(issue)

        total = db_backed + estimated
        summary = RateSourceSummary(
            db_backed=db_backed,
            estimated=estimated,
            total=total,
            db_percentage=round(db_backed / total * 100, 1) if total else 0.0,
        )
        return issues, summary

    # ------------------------------------------------------------------
    # 4. Benchmark
    # ------------------------------------------------------------------

    def _check_benchmark(
        self, estimate: Estimate, project: ProjectInfo, area_sf: float | None
    ) -> tuple[list[ValidationIssue], BenchmarkComparison | None]:
        grand_total = estimate.summary.grand_total
        if grand_total <= 0:
            return [], None
        if not area_sf:
            return [
                _issue(Severity.INFO, IssueCategory.BENCHMARK, "Cannot benchmark: no area specified.")
            ], None

        currency = estimate.summary.currency
        found = self._repository.lookup_benchmark(currency, project.project_type)
        if found is None:
            return [
                _issue(
                    Severity.INFO,
                    IssueCategory.BENCHMARK,
                    f'No {currency} benchmark for project type "{project.project_type}".',
                )
            ], None

        key, bench = found
        cost_per_sf = grand_total / area_sf
        if cost_per_sf > bench.high:
            status = BenchmarkStatus.ABOVE
        elif cost_per_sf < bench.low:
            status = BenchmarkStatus.BELOW
        else:
            status = BenchmarkStatus.WITHIN
        comparison = BenchmarkComparison(
            project_type=key,
            label=bench.label,
            low=bench.low,
            mid=bench.mid,
            high=bench.high,
            unit=bench.unit,
            cost_per_sf=round(cost_per_sf, 2),
            status=status,
        )
        shown = f"{cost_per_sf:,.2f} {currency}/sf"
        band = f"{bench.label} range {bench.low:,.0f}-{bench.high:,.0f}"

        issues: list[ValidationIssue] = []
        if status == BenchmarkStatus.ABOVE:
            target = bench.mid + 0.5 * (bench.high - bench.mid)
            factor = target / cost_per_sf
            fixed = _attempt_fix("benchmark rescale", lambda: rescale_estimate(estimate, factor))
            if fixed is not None:
                adjusted = estimate.summary.grand_total / area_sf
                comparison.rescaled = True
                comparison.scale_factor = round(factor, 4)
                comparison.adjusted_cost_per_sf = round(adjusted, 2)
                severity = Severity.CRITICAL if cost_per_sf > bench.high * 1.5 else Severity.WARNING
                issues.append(
                    _issue(
                        severity,
                        IssueCategory.BENCHMARK,
                        f"Cost {shown} above {band}; all rates scaled by {factor:.3f} "
                        f"to {adjusted:,.2f} {currency}/sf.",
                        auto_fixed=True,
                    )
                )
            else:
                issues.append(
                    _issue(Severity.CRITICAL, IssueCategory.BENCHMARK, f"Cost {shown} above {band}.")
                )
        elif status == BenchmarkStatus.BELOW:
            severity = Severity.CRITICAL if cost_per_sf < bench.low / 1.5 else Severity.WARNING
            issues.append(
                _issue(
                    severity,
                    IssueCategory.BENCHMARK,
                    f"Cost {shown} below {band}; scope may be missing.",
                )
            )
        return issues, comparison


# ---------------------------------------------------------------------------
# 1. Arithmetic
# ---------------------------------------------------------------------------


def check_arithmetic(estimate: Estimate) -> list[ValidationIssue]:
    """Recompute every total bottom-up, correcting *estimate* in place.

    Running it a second time finds nothing to correct.
    """
    issues: list[ValidationIssue] = []
    if not estimate.trades:
        issues.append(
            _issue(Severity.CRITICAL, IssueCategory.ARITHMETIC, "Estimate has no trades.")
        )

    for trade in estimate.trades:
        for item in trade.line_items:
            issues += _check_line(item)
        subtotal = round(sum(li.line_total for li in trade.line_items), 2)
        if abs(subtotal - trade.subtotal) > _TOLERANCE:
            issues.append(_money_issue(f"{trade.trade_name} subtotal", trade.subtotal, subtotal))
            trade.subtotal = subtotal

    breakdown = estimate.cost_breakdown
    direct = round(sum(t.subtotal for t in estimate.trades), 2)
    if abs(direct - breakdown.direct_costs) > _TOLERANCE:
        issues.append(_money_issue("Direct costs", breakdown.direct_costs, direct))
        breakdown.direct_costs = direct

    issues += _check_markup_percents(estimate)

    for name, line in breakdown.markups().items():
        amount = round(direct * line.percent / 100, 2)
        if abs(amount - line.amount) > _TOLERANCE:
            issues.append(_money_issue(f"{_label(name)} amount", line.amount, amount))
            line.amount = amount

    total_markups = round(sum(m.amount for m in breakdown.markups().values()), 2)
    if abs(total_markups - breakdown.total_markups) > _TOLERANCE:
        issues.append(_money_issue("Total markups", breakdown.total_markups, total_markups))
        breakdown.total_markups = total_markups

    total_with = round(direct + total_markups, 2)
    if abs(total_with - breakdown.total_with_markups) > _TOLERANCE:
        issues.append(
            _money_issue("Total with markups", breakdown.total_with_markups, total_with)
        )
        breakdown.total_with_markups = total_with

    if abs(total_with - estimate.summary.grand_total) > _TOLERANCE:
        issues.append(
            _money_issue("Grand total", estimate.summary.grand_total, total_with, grand=True)
        )
        estimate.summary.grand_total = total_with

    _refresh_derived(estimate)
    return issues


def _check_line(item: LineItem) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if item.quantity <= 0 and item.line_total > 0:
        issues.append(
            _issue(
                Severity.WARNING,
                IssueCategory.ARITHMETIC,
                f'"{item.description}" has no quantity; converted to 1 LS at '
                f"{item.line_total:,.2f}.",
                auto_fixed=True,
            )
        )
        item.quantity = 1.0
        item.unit = "ls"
        item.unit_rate = item.line_total

    if item.unit_rate <= 0 and item.quantity > 0:
        components = item.component_sum()
        basis = components if components > 0 else item.line_total
        if basis > 0:
            item.unit_rate = round(basis / item.quantity, 2)
            source = "cost components" if components > 0 else "line total"
            issues.append(
                _issue(
                    Severity.INFO,
                    IssueCategory.ARITHMETIC,
                    f'"{item.description}" unit rate backfilled from {source}: '
                    f"{item.unit_rate:,.2f}/{item.unit}.",
                    auto_fixed=True,
                )
            )

    line_total = round(item.quantity * item.unit_rate, 2)
    if abs(line_total - item.line_total) > _TOLERANCE:
        issues.append(_money_issue(f'"{item.description}" line total', item.line_total, line_total))
        item.line_total = line_total
    return issues


def _check_markup_percents(estimate: Estimate) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    markups = estimate.cost_breakdown.markups()
    for name, line in markups.items():
        if line.percent > MAX_SINGLE_MARKUP:
            issues.append(
                _issue(
                    Severity.WARNING,
                    IssueCategory.ARITHMETIC,
                    f"{_label(name)} {line.percent:g}% capped at {MAX_SINGLE_MARKUP:g}%.",
                    auto_fixed=True,
                )
            )
            line.percent = MAX_SINGLE_MARKUP

    total = sum(line.percent for line in markups.values())
    if total > MAX_TOTAL_MARKUP:
        for line in markups.values():
            # Floored to cents so the scaled sum never exceeds the cap.
            line.percent = math.floor(line.percent * MAX_TOTAL_MARKUP / total * 100 + 1e-9) / 100
        issues.append(
            _issue(
                Severity.WARNING,
                IssueCategory.ARITHMETIC,
                f"Combined markups {total:g}% scaled down to {MAX_TOTAL_MARKUP:g}%.",
                auto_fixed=True,
            )
        )
    return issues


def recompute_rollups(estimate: Estimate) -> None:
    """Silently re-derive every aggregate from the line items."""
    for trade in estimate.trades:
        trade.subtotal = round(sum(li.line_total for li in trade.line_items), 2)
    breakdown = estimate.cost_breakdown
    direct = round(sum(t.subtotal for t in estimate.trades), 2)
    breakdown.direct_costs = direct
    for line in breakdown.markups().values():
        line.amount = round(direct * line.percent / 100, 2)
    breakdown.total_markups = round(sum(m.amount for m in breakdown.markups().values()), 2)
    breakdown.total_with_markups = round(direct + breakdown.total_markups, 2)
    estimate.summary.grand_total = breakdown.total_with_markups
    _refresh_derived(estimate)


def _refresh_derived(estimate: Estimate) -> None:
    direct = estimate.cost_breakdown.direct_costs
    for trade in estimate.trades:
        trade.percent_of_total = round(trade.subtotal / direct * 100, 1) if direct else 0.0
    area = estimate.summary.total_area
    estimate.summary.cost_per_unit_area = (
        round(estimate.summary.grand_total / area, 2) if area else None
    )


# ---------------------------------------------------------------------------
# 2. Quantities
# ---------------------------------------------------------------------------


def sum_quantities(estimate: Estimate) -> QuantityTotals:
    """Steel tons, concrete CY and rebar tons across all line items."""
    steel = concrete = rebar = 0.0
    for _trade, item in estimate.line_items():
        dim = dimension(item.unit)
        if dim == "mass":
            tons = convert_quantity(item.quantity, item.unit, "ton") or 0.0
            if _REBAR_LINE_RE.search(item.description):
                rebar += tons
            elif _STEEL_LINE_RE.search(item.description):
                steel += tons
        elif dim == "volume" and _CONCRETE_LINE_RE.search(item.description):
            concrete += convert_quantity(item.quantity, item.unit, "cy") or 0.0
    return QuantityTotals(steel_tons=steel, concrete_cy=concrete, rebar_tons=rebar)


def check_quantities(estimate: Estimate, area_sf: float | None) -> list[ValidationIssue]:
    """Compare structural quantities and the foundation share to engineering bands."""
    issues: list[ValidationIssue] = []
    totals = sum_quantities(estimate)

    if area_sf and totals.steel_tons > 0:
        psf = totals.steel_tons * 2000 / area_sf
        low, high = STEEL_PSF_BAND
        floor, ceiling = STEEL_PSF_LIMITS
        if psf > ceiling:
            issues.append(
                _issue(
                    Severity.CRITICAL,
                    IssueCategory.QUANTITY,
                    f"Steel intensity {psf:.1f} lb/SF exceeds {ceiling:g} lb/SF; "
                    "check member counts and lengths.",
                )
            )
        elif psf < floor:
            issues.append(
                _issue(
                    Severity.WARNING,
                    IssueCategory.QUANTITY,
                    f"Steel intensity {psf:.1f} lb/SF is below {floor:g} lb/SF; "
                    "members may be missing.",
                )
            )
        elif not low <= psf <= high:
            issues.append(
                _issue(
                    Severity.INFO,
                    IssueCategory.QUANTITY,
                    f"Steel intensity {psf:.1f} lb/SF outside typical {low:g}-{high:g} lb/SF.",
                )
            )

    if area_sf and totals.concrete_cy > 0:
        cfsf = totals.concrete_cy * 27 / area_sf
        low, high = CONCRETE_CFSF_BAND
        if cfsf > CONCRETE_CFSF_CRITICAL:
            issues.append(
                _issue(
                    Severity.CRITICAL,
                    IssueCategory.QUANTITY,
                    f"Concrete {cfsf:.2f} CF/SF exceeds {CONCRETE_CFSF_CRITICAL:g} CF/SF.",
                )
            )
        elif not low <= cfsf <= high:
            issues.append(
                _issue(
                    Severity.WARNING,
                    IssueCategory.QUANTITY,
                    f"Concrete {cfsf:.2f} CF/SF outside typical {low:g}-{high:g} CF/SF.",
                )
            )

    if totals.concrete_cy > 0 and totals.rebar_tons > 0:
        lb_per_cy = totals.rebar_tons * 2000 / totals.concrete_cy
        low, high = REBAR_LB_PER_CY_BAND
        if lb_per_cy > REBAR_LB_PER_CY_CRITICAL:
            issues.append(
                _issue(
                    Severity.CRITICAL,
                    IssueCategory.QUANTITY,
                    f"Rebar {lb_per_cy:.0f} lb/CY exceeds {REBAR_LB_PER_CY_CRITICAL:g} lb/CY.",
                )
            )
        elif not low <= lb_per_cy <= high:
            issues.append(
                _issue(
                    Severity.WARNING,
                    IssueCategory.QUANTITY,
                    f"Rebar {lb_per_cy:.0f} lb/CY outside typical {low:g}-{high:g} lb/CY.",
                )
            )

    structural = sum(
        t.subtotal for t in estimate.trades if _STRUCTURAL_TRADE_RE.search(t.trade_name)
    )
    foundation = sum(
        t.subtotal for t in estimate.trades if _FOUNDATION_TRADE_RE.search(t.trade_name)
    )
    if structural > 0 and foundation > 0:
        pct = foundation / structural * 100
        low, high = FOUNDATION_PCT_BAND
        if pct < low:
            issues.append(
                _issue(
                    Severity.WARNING,
                    IssueCategory.QUANTITY,
                    f"Foundation is {pct:.1f}% of structural cost, below {low:g}%.",
                )
            )
        elif pct > high:
            issues.append(
                _issue(
                    Severity.INFO,
                    IssueCategory.QUANTITY,
                    f"Foundation is {pct:.1f}% of structural cost, above {high:g}%.",
                )
            )
    return issues


# ---------------------------------------------------------------------------
# 3. Unit rates
# ---------------------------------------------------------------------------


def _fix_rate(item: LineItem, target: float, low: float, high: float) -> ValidationIssue | None:
    if target <= 0:
        msg = f"database rate for {item.description!r} is not positive"
        raise AutoFixError(msg)

    rate = item.unit_rate
    deviation = abs(rate - target) / target
    target = round(target, 2)
    if rate < low or rate > high:
        severity = Severity.CRITICAL if deviation > 1.0 else Severity.WARNING
        _set_rate(item, target)
        item.rate_source = RateSource.DB_FIX
        return _issue(
            severity,
            IssueCategory.UNIT_RATE,
            f'"{item.description}" rate {rate:,.2f}/{item.unit} outside '
            f"{low:,.2f}-{high:,.2f}; replaced with {target:,.2f}.",
            auto_fixed=True,
        )

    item.rate_source = RateSource.DB
    if deviation > RATE_BLEND_THRESHOLD:
        blended = round((rate + target) / 2, 2)
        _set_rate(item, blended)
        return _issue(
            Severity.INFO,
            IssueCategory.UNIT_RATE,
            f'"{item.description}" rate {rate:,.2f}/{item.unit} deviates '
            f"{deviation:.0%} from {target:,.2f}; blended to {blended:,.2f}.",
            auto_fixed=True,
        )
    return None


def _set_rate(item: LineItem, rate: float) -> None:
    old_total = item.line_total
    item.unit_rate = rate
    item.line_total = round(item.quantity * rate, 2)
    if old_total:
        _scale_components(item, item.line_total / old_total)


# ---------------------------------------------------------------------------
# 4. Benchmark rescale
# ---------------------------------------------------------------------------


def rescale_estimate(estimate: Estimate, factor: float) -> bool:
    """Scale every unit rate and line total by *factor* and recompute aggregates."""
    if not math.isfinite(factor) or factor <= 0:
        msg = f"invalid rescale factor {factor!r}"
        raise AutoFixError(msg)
    for _trade, item in estimate.line_items():
        item.unit_rate = round(item.unit_rate * factor, 2)
        item.line_total = round(item.quantity * item.unit_rate, 2)
        _scale_components(item, factor)
    recompute_rollups(estimate)
    return True


def _scale_components(item: LineItem, factor: float) -> None:
    for name in ("material_cost", "labor_cost", "equipment_cost"):
        value = getattr(item, name)
        if value is not None:
            setattr(item, name, round(value * factor, 2))


# ---------------------------------------------------------------------------
# 5. Completeness
# ---------------------------------------------------------------------------


def check_trade_completeness(
    estimate: Estimate, project_type: str
) -> tuple[list[ValidationIssue], TradeCompleteness]:
    """Compare the estimate's trades to those expected for *project_type*."""
    expected = EXPECTED_TRADES.get(project_type, EXPECTED_TRADES["commercial"])
    present = [name for name in expected if _trade_present(name, estimate.trades)]
    missing = [name for name in expected if name not in present]

    issues: list[ValidationIssue] = []
    critical = [m for m in missing if _CRITICAL_TRADE_RE.search(m)]
    other = [m for m in missing if m not in critical]
    if critical:
        issues.append(
            _issue(
                Severity.CRITICAL,
                IssueCategory.COMPLETENESS,
                f"Missing critical trades: {', '.join(critical)}.",
            )
        )
    if other:
        issues.append(
            _issue(
                Severity.WARNING,
                IssueCategory.COMPLETENESS,
                f"Missing trades: {', '.join(other)}.",
            )
        )
    return issues, TradeCompleteness(expected=list(expected), present=present, missing=missing)


def _trade_present(expected: str, trades: list[Trade]) -> bool:
    key = expected.lower()
    pattern = next((p for name, p in _TRADE_SYNONYMS if name == key), None)
    for trade in trades:
        name = trade.trade_name.strip().lower()
        if not name:
            continue
        if _contains_words(name, key) or _contains_words(key, name):
            return True
        if pattern is not None and pattern.search(name):
            return True
        if pattern is not None and key in _LINE_ITEM_TRADES:
            if any(pattern.search(li.description.lower()) for li in trade.line_items):
                return True
    return False


def _contains_words(text: str, words: str) -> bool:
    return re.search(rf"\b{re.escape(words)}\b", text) is not None


# ---------------------------------------------------------------------------
# 6. Consistency
# ---------------------------------------------------------------------------


def check_consistency(estimate: Estimate) -> list[ValidationIssue]:
    """Warn when a bucket's share of direct cost is far outside its band."""
    direct = estimate.cost_breakdown.direct_costs
    if direct <= 0:
        return []

    shares = dict.fromkeys(TRADE_PCT_RANGES, 0.0)
    for trade in estimate.trades:
        name = trade.trade_name.lower()
        bucket = next((b for b, p in _BUCKET_PATTERNS.items() if p.search(name)), None)
        if bucket is not None:
            shares[bucket] += trade.subtotal / direct * 100

    issues: list[ValidationIssue] = []
    for bucket, pct in shares.items():
        if pct <= 0:
            continue
        low, high = TRADE_PCT_RANGES[bucket]
        if pct < low * 0.5 or pct > high * 1.5:
            issues.append(
                _issue(
                    Severity.WARNING,
                    IssueCategory.CONSISTENCY,
                    f"{bucket.capitalize()} is {pct:.1f}% of direct costs "
                    f"(typical {low:g}-{high:g}%).",
                )
            )
    return issues


# ---------------------------------------------------------------------------
# 7. Raw measurements
# ---------------------------------------------------------------------------


def check_measurements(
    estimate: Estimate, measurements: RawMeasurements, area_sf: float | None
) -> list[ValidationIssue]:
    """Cross-check drawing-text findings against the estimate."""
    issues: list[ValidationIssue] = []
    totals = sum_quantities(estimate)

    sections = measurements.steel_sections
    if sections and totals.steel_tons <= 0:
        issues.append(
            _issue(
                Severity.CRITICAL,
                IssueCategory.MEASUREMENT,
                f"Drawing text shows steel sections ({', '.join(sections[:5])}) "
                "but the estimate has no structural steel.",
            )
        )
    elif sections:
        described = " ".join(li.description.upper().replace(" ", "") for _t, li in estimate.line_items())
        unmatched = [s for s in sections if s.upper().replace(" ", "") not in described]
        if unmatched:
            issues.append(
                _issue(
                    Severity.INFO,
                    IssueCategory.MEASUREMENT,
                    f"{len(unmatched)} section(s) in the drawing text not itemized: "
                    f"{', '.join(unmatched[:5])}.",
                )
            )

    if measurements.concrete_grades and totals.concrete_cy <= 0:
        issues.append(
            _issue(
                Severity.WARNING,
                IssueCategory.MEASUREMENT,
                f"Drawing text specifies concrete ({', '.join(measurements.concrete_grades[:3])}) "
                "but the estimate has no concrete.",
            )
        )

    if area_sf and measurements.areas_sf:
        text_area = max(measurements.areas_sf)
        if abs(text_area - area_sf) / area_sf > 0.25:
            issues.append(
                _issue(
                    Severity.WARNING,
                    IssueCategory.MEASUREMENT,
                    f"Largest area in the drawing text ({text_area:,.0f} SF) differs from "
                    f"the stated area ({area_sf:,.0f} SF) by more than 25%.",
                )
            )
    return issues


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _attempt_fix(
    label: str, fix: Callable[[], ValidationIssue | bool | None]
) -> ValidationIssue | bool | None:
    """Run one auto-fix; a fix that fails is logged and skipped."""
    try:
        return fix()
    except (AutoFixError, ArithmeticError, ValueError) as exc:
        logger.warning("Auto-fix skipped (%s): %s", label, exc)
        return None


def _issue(
    severity: Severity, category: IssueCategory, message: str, *, auto_fixed: bool = False
) -> ValidationIssue:
    return ValidationIssue(
        severity=severity, category=category, message=message, auto_fixed=auto_fixed
    )


def _money_issue(label: str, old: float, new: float, *, grand: bool = False) -> ValidationIssue:
    if abs(new - old) <= 1:
        severity = Severity.INFO
    else:
        severity = Severity.CRITICAL if grand else Severity.WARNING
    return _issue(
        severity,
        IssueCategory.ARITHMETIC,
        f"{label} corrected from {old:,.2f} to {new:,.2f}.",
        auto_fixed=True,
    )


def _label(markup: str) -> str:
    return markup.replace("_", " ").capitalize()


def _area_sf(estimate: Estimate, project: ProjectInfo) -> float | None:
    area = project.area_sf()
    if area:
        return area
    summary = estimate.summary
    if summary.total_area:
        return convert_quantity(summary.total_area, summary.area_unit, "sf")
    return None


def _attach_report(estimate: Estimate, report: ValidationReport) -> None:
    estimate.validation_report = report
    if report.confidence is not None:
        estimate.summary.confidence_score = report.confidence.confidence_score
        estimate.summary.confidence_level = report.confidence.confidence_level


def _engine_error_result(estimate: Estimate, error: str) -> Estimate:
    result = estimate.model_copy(deep=True)
    result.validation_report = ValidationReport(
        issues=[
            _issue(Severity.CRITICAL, IssueCategory.ENGINE, f"Validation engine error: {error}")
        ],
        validation_score=0.0,
        confidence=zero_confidence_report(),
        engine_error=error,
    )
    result.summary.confidence_score = 0.0
    result.summary.confidence_level = ConfidenceLevel.VERY_LOW
    return result

