"""Cost decomposition — splits installed costs into material, labor and equipment.

Deterministic and local: no oracle calls. Produces the material schedule
attached to a validated estimate (itemized splits, crews, machinery, a
markup summary and procurement quantities).
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from estimo.data.labor import (
    CREW_TEMPLATES,
    DEFAULT_MARKUPS,
    HOURLY_LABOR_RATES,
    LABOR_PRODUCTIVITY,
    LABOR_SPLIT,
    MACHINERY_RATES,
    PRODUCTIVITY_BASIS,
    REBAR_INTENSITY,
    classify_concrete_element,
)
from estimo.models.estimate import (
    CrewEntry,
    MachineryEntry,
    ManpowerSummary,
    MarkupSummaryLine,
    MaterialSchedule,
    ProcurementSummary,
    ScheduleItem,
)
from estimo.services.validation import sum_quantities
from estimo.units import convert_quantity, dimension

if TYPE_CHECKING:
    from estimo.data.labor import MachineryRate
    from estimo.models.estimate import Estimate, LineItem
    from estimo.models.project import ProjectInfo

logger = logging.getLogger(__name__)

HOURS_PER_WEEK = 40
DURATION_SPREAD = 1.3


@dataclass(frozen=True)
class DecompositionRule:
    """Maps a line item to its split, productivity, hourly rate and crew."""

    pattern: re.Pattern[str]
    category: str
    productivity_key: str
    rate_key: str
    crew: str
    dimension: str | None = None


def _rule(
    pattern: str,
    category: str,
    rate_key: str,
    crew: str,
    *,
    productivity_key: str | None = None,
    dim: str | None = None,
) -> DecompositionRule:
    return DecompositionRule(
        re.compile(pattern), category, productivity_key or category, rate_key, crew, dim
    )


# First match wins.
DECOMPOSITION_RULES: list[DecompositionRule] = [
    _rule(r"rebar|reinforc|\btmt\b|\bwwf\b|welded wire", "rebar", "rebar", "Rebar"),
    _rule(
        r"connection|plate|angle|misc.*steel",
        "connections",
        "structural",
        "Structural Steel",
        productivity_key="structural_steel",
    ),
    _rule(r"\bpeb\b|pre.?engineered|built.?up|tapered|rafter", "peb_steel", "peb", "PEB Erection"),
    _rule(
        r"steel|w\d+x|hss|joist|deck|is[mlw][bc]|ipe|he[ab]|purlin|girt",
        "structural_steel",
        "structural",
        "Structural Steel",
    ),
    _rule(
        r"pile cap|concrete|slab|footing|foundation|grade beam|retaining|column|wall",
        "concrete",
        "concrete",
        "Concrete",
        dim="volume",
    ),
    _rule(r"pile|caisson|bored", "piling", "piling", "Sitework - Piling"),
    _rule(r"masonry|cmu|block|brick|\baac\b", "masonry", "masonry", "Masonry"),
    _rule(r"roof|insulation", "roofing", "roofing", "Roofing"),
    _rule(
        r"cladding|siding|wall panel|eifs|envelope|sheeting|curtain",
        "cladding",
        "cladding",
        "Cladding/Envelope",
    ),
    _rule(r"plumb|drain|sanit", "mep_plumbing", "plumbing", "MEP - Plumbing"),
    _rule(r"hvac|mechanical|duct|chiller", "mep_hvac", "hvac", "MEP - HVAC"),
    _rule(r"electr|lighting|power", "mep_electrical", "electrical", "MEP - Electrical"),
    _rule(r"fire|sprinkler", "mep_fire", "fire", "MEP - Fire Protection"),
    _rule(r"elevator|\blift\b|escalat", "elevator", "elevator", "MEP - Elevator"),
    _rule(r"floor|tile|carpet|\bvct\b|vinyl|epoxy", "flooring", "flooring", "Flooring"),
    _rule(r"paint|coating", "painting", "painting", "Painting"),
    _rule(r"ceiling|soffit", "ceiling", "ceiling", "Ceiling"),
    _rule(r"partition|drywall|gypsum|plaster", "partitions", "partitions", "Partitions/Drywall"),
    _rule(r"pav|asphalt|curb|kerb|road", "paving", "paving", "Sitework - Paving"),
    _rule(r"excavat|backfill|grading|earth|site", "sitework", "sitework", "Sitework - Earthwork"),
]

_GENERAL_RULE = _rule(r".", "general", "general", "General Labor")

_PEB_TEXT_RE = re.compile(r"\bpeb\b|pre.?eng", re.IGNORECASE)
_PEB_MEMBER_RE = re.compile(r"\bpeb\b|built.?up|tapered|rafter", re.IGNORECASE)
_STEEL_RE = re.compile(r"steel|w\d+x|hss|joist", re.IGNORECASE)
_REBAR_RE = re.compile(r"rebar|reinforc|\btmt\b|\bwwf\b", re.IGNORECASE)
_CONCRETE_RE = re.compile(
    r"concrete|slab|footing|foundation|grade beam|pile cap|retaining", re.IGNORECASE
)


def classify_line_item(item: LineItem) -> DecompositionRule:
    """Return the first decomposition rule matching *item*."""
    text = item.description.lower()
    dim = dimension(item.unit)
    for rule in DECOMPOSITION_RULES:
        if rule.dimension is not None and rule.dimension != dim:
            continue
        if rule.pattern.search(text):
            return rule
    return _GENERAL_RULE


class CostDecompositionPostProcessor:
    """Attaches a :class:`MaterialSchedule` to an estimate.

    Parameters
    ----------
    productivity, hourly_rates, machinery_rates:
        Reference tables keyed by currency. Default to :mod:`estimo.data.labor`.
    """

    def __init__(
        self,
        productivity: dict[str, dict[str, float]] | None = None,
        hourly_rates: dict[str, dict[str, float]] | None = None,
        machinery_rates: dict[str, dict[str, MachineryRate]] | None = None,
    ) -> None:
        self._productivity = productivity or LABOR_PRODUCTIVITY
        self._hourly_rates = hourly_rates or HOURLY_LABOR_RATES
        self._machinery_rates = machinery_rates or MACHINERY_RATES

    def process(self, estimate: Estimate, project: ProjectInfo | None = None) -> Estimate:
        """Return a copy of *estimate* with cost components and a material schedule."""
        result = estimate.model_copy(deep=True)
        currency = result.summary.currency
        factor = result.metadata.location_factor
        productivity = self._productivity.get(currency, self._productivity["USD"])
        hourly = self._hourly_rates.get(currency, self._hourly_rates["USD"])

        items: list[ScheduleItem] = []
        crew_hours: dict[str, float] = {}
        crew_costs: dict[str, float] = {}
        for trade, line in result.line_items():
            rule = classify_line_item(line)
            scheduled = _decompose(trade.trade_name, line, rule, productivity, hourly, factor)
            if scheduled is None:
                continue
            items.append(scheduled)
            crew_hours[rule.crew] = crew_hours.get(rule.crew, 0.0) + scheduled.labor_hours
            crew_costs[rule.crew] = crew_costs.get(rule.crew, 0.0) + scheduled.labor_cost

        manpower = build_manpower(crew_hours, crew_costs, hourly, factor)
        procurement = build_procurement(result, project)
        machinery = build_machinery_schedule(
            self._machinery_rates.get(currency),
            manpower.project_duration_weeks,
            _to_tons(procurement.steel_tonnage, procurement.steel_unit),
            _to_cy(procurement.concrete_volume, procurement.concrete_unit),
        )
        markups = build_markup_summary(result)

        result.material_schedule = MaterialSchedule(
            items=items,
            manpower=manpower,
            machinery=machinery,
            total_machinery_cost=round(sum(m.total_cost for m in machinery), 2),
            markups=markups,
            total_markups=round(sum(m.amount for m in markups), 2),
            procurement=procurement,
        )
        logger.info(
            "Decomposed %d items: %.0f labor hours, %d crews, %s",
            len(items),
            manpower.total_labor_hours,
            len(manpower.crews),
            manpower.duration_label,
        )
        return result


# ---------------------------------------------------------------------------
# Line items
# ---------------------------------------------------------------------------


def _decompose(
    trade: str,
    item: LineItem,
    rule: DecompositionRule,
    productivity: dict[str, float],
    hourly: dict[str, float],
    factor: float,
) -> ScheduleItem | None:
    total = item.line_total
    if total <= 0:
        return None

    material_ratio, labor_ratio, _ = LABOR_SPLIT.get(rule.category, LABOR_SPLIT["general"])
    material = round(total * material_ratio, 2)
    labor = round(total * labor_ratio, 2)
    # Equipment takes the remainder so the parts add up to the line total.
    equipment = round(total - material - labor, 2)

    rate = hourly.get(rule.rate_key, hourly["general"]) * factor
    basis = PRODUCTIVITY_BASIS.get(rule.productivity_key)
    quantity = convert_quantity(item.quantity, item.unit, basis) if basis else None
    if quantity is not None and rule.productivity_key in productivity:
        hours = quantity * productivity[rule.productivity_key]
    else:
        hours = labor / rate if rate else 0.0
    hours = round(hours, 1)

    item.material_cost = material
    item.labor_cost = labor
    item.equipment_cost = equipment
    item.labor_hours = hours
    return ScheduleItem(
        trade=trade,
        description=item.description,
        category=rule.category,
        quantity=item.quantity,
        unit=item.unit,
        line_total=total,
        material_cost=material,
        labor_cost=labor,
        equipment_cost=equipment,
        labor_hours=hours,
        labor_rate=round(rate, 2),
        crew=rule.crew,
    )


# ---------------------------------------------------------------------------
# Manpower
# ---------------------------------------------------------------------------


def build_manpower(
    crew_hours: dict[str, float],
    crew_costs: dict[str, float],
    hourly: dict[str, float],
    factor: float = 1.0,
) -> ManpowerSummary:
    """Crew entries in template order; duration is the longest crew."""
    crews: list[CrewEntry] = []
    for name, template in CREW_TEMPLATES.items():
        hours = crew_hours.get(name, 0.0)
        if hours <= 0:
            continue
        headcount = template.base_headcount
        crews.append(
            CrewEntry(
                crew_trade=name,
                description=template.crew,
                headcount=headcount,
                labor_hours=round(hours, 1),
                duration_weeks=max(1, math.ceil(hours / (headcount * HOURS_PER_WEEK))),
                hourly_rate=round(hourly.get(template.rate_key, hourly["general"]) * factor, 2),
                labor_cost=round(crew_costs.get(name, 0.0), 2),
            )
        )

    weeks = max((c.duration_weeks for c in crews), default=0)
    return ManpowerSummary(
        crews=crews,
        peak_headcount=sum(c.headcount for c in crews),
        total_labor_hours=round(sum(c.labor_hours for c in crews), 1),
        total_labor_cost=round(sum(c.labor_cost for c in crews), 2),
        project_duration_weeks=weeks,
        duration_label=duration_label(weeks),
    )


def duration_label(weeks: int) -> str:
    if weeks <= 0:
        return "TBD"
    return f"{weeks}-{math.ceil(weeks * DURATION_SPREAD)} weeks"


# ---------------------------------------------------------------------------
# Machinery
# ---------------------------------------------------------------------------


def build_machinery_schedule(
    rates: dict[str, MachineryRate] | None,
    project_weeks: int,
    steel_tons: float,
    concrete_cy: float,
) -> list[MachineryEntry]:
    """Machinery from tonnage, volume and project-duration heuristics.

    Empty when the currency has no machinery rates or nothing is scheduled.
    """
    if not rates or project_weeks <= 0:
        return []
    working_days = max(1, project_weeks * 5)
    schedule: list[MachineryEntry] = []

    def add(key: str, days: int, quantity: int = 1) -> None:
        rate = rates.get(key)
        if rate is None:
            return
        schedule.append(
            MachineryEntry(
                equipment=key,
                description=rate.description,
                quantity=quantity,
                daily_rate=rate.rate,
                duration_days=days,
                total_cost=round(quantity * days * rate.rate, 2),
            )
        )

    if steel_tons > 0:
        crane = "mobile_crane_50t" if steel_tons > 50 else "mobile_crane_25t"
        add(crane, max(5, math.ceil(steel_tons / 3)))
    if concrete_cy > 0:
        pump_days = max(3, math.ceil(concrete_cy / 30))
        add("concrete_pump", pump_days)
        add("transit_mixer", pump_days, quantity=2)
    add("excavator_20t", max(5, math.ceil(working_days * 0.15)))
    add("backhoe_loader", max(10, math.ceil(working_days * 0.3)))
    add("boom_lift", max(5, math.ceil(working_days * 0.2)))
    if steel_tons > 0:
        add("welding_machine", max(10, math.ceil(steel_tons * 2)), quantity=2)
    add("generator", working_days)
    add("compactor", max(5, math.ceil(working_days * 0.1)))
    if concrete_cy > 0:
        add("bar_bending", max(5, math.ceil(working_days * 0.2)))
        add("bar_cutting", max(5, math.ceil(working_days * 0.2)))
    add("forklift", max(10, math.ceil(working_days * 0.4)))
    return schedule


# ---------------------------------------------------------------------------
# Markups
# ---------------------------------------------------------------------------


def build_markup_summary(estimate: Estimate) -> list[MarkupSummaryLine]:
    """Markups on direct cost: the estimate's non-zero percent, else the default."""
    direct = estimate.cost_breakdown.direct_costs
    lines: list[MarkupSummaryLine] = []
    for name, markup in estimate.cost_breakdown.markups().items():
        if markup.percent:
            percent, source = markup.percent, "estimate"
        else:
            percent, source = DEFAULT_MARKUPS[name], "default"
        lines.append(
            MarkupSummaryLine(
                name=name,
                percent=percent,
                amount=round(direct * percent / 100, 2),
                source=source,
            )
        )
    return lines


# ---------------------------------------------------------------------------
# Procurement
# ---------------------------------------------------------------------------


def build_procurement(estimate: Estimate, project: ProjectInfo | None = None) -> ProcurementSummary:
    """Steel, concrete and rebar quantities to buy, in the estimate's unit system."""
    currency = estimate.summary.currency
    metric = currency != "USD"
    mass_unit, volume_unit = ("mt", "cum") if metric else ("ton", "cy")
    totals = sum_quantities(estimate)

    concrete_by_element: dict[str, float] = {}
    rebar_by_element: dict[str, float] = {}
    has_rebar_lines = False
    for _trade, item in estimate.line_items():
        dim = dimension(item.unit)
        if dim == "volume" and _CONCRETE_RE.search(item.description):
            volume = convert_quantity(item.quantity, item.unit, volume_unit) or 0.0
            element = classify_concrete_element(item.description)
            concrete_by_element[element] = concrete_by_element.get(element, 0.0) + volume
        elif dim == "mass" and _REBAR_RE.search(item.description):
            has_rebar_lines = True
            mass = convert_quantity(item.quantity, item.unit, mass_unit) or 0.0
            element = classify_concrete_element(item.description)
            rebar_by_element[element] = rebar_by_element.get(element, 0.0) + mass

    rebar_estimated = False
    if not has_rebar_lines and concrete_by_element:
        rebar_estimated = True
        for element, volume in concrete_by_element.items():
            intensity = REBAR_INTENSITY.get(element, REBAR_INTENSITY["footing"])
            if metric:
                mass = volume * intensity.kg_per_cum / 1000
            else:
                mass = volume * intensity.lb_per_cy / 2000
            rebar_by_element[element] = mass

    return ProcurementSummary(
        currency=currency,
        is_peb=detect_peb(estimate, project),
        steel_tonnage=round(_from_tons(totals.steel_tons, mass_unit), 2),
        steel_unit=mass_unit,
        concrete_volume=round(sum(concrete_by_element.values()), 1),
        concrete_unit=volume_unit,
        rebar_tonnage=round(sum(rebar_by_element.values()), 2),
        rebar_unit=mass_unit,
        rebar_estimated=rebar_estimated,
        concrete_by_element={k: round(v, 1) for k, v in concrete_by_element.items()},
        rebar_by_element={k: round(v, 2) for k, v in rebar_by_element.items()},
    )


def detect_peb(estimate: Estimate, project: ProjectInfo | None = None) -> bool:
    """Whether the building is a pre-engineered (PEB) steel structure."""
    texts = [estimate.summary.project_type]
    if project is not None:
        texts += [project.project_type, project.structural_system or ""]
    if any(_PEB_TEXT_RE.search(t or "") for t in texts):
        return True
    return any(
        _STEEL_RE.search(item.description) and _PEB_MEMBER_RE.search(item.description)
        for _trade, item in estimate.line_items()
    )


def _from_tons(tons: float, unit: str) -> float:
    return convert_quantity(tons, "ton", unit) or 0.0


def _to_tons(value: float, unit: str) -> float:
    return convert_quantity(value, unit, "ton") or 0.0


def _to_cy(value: float, unit: str) -> float:
    return convert_quantity(value, unit, "cy") or 0.0
