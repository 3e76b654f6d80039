"""Quantity takeoff (pass 3) — turns extracted structural data into a bill of quantities.

Every quantity is computed here, deterministically, from what the drawings
show: member counts × unit weight × length for steel, element dimensions
for concrete, and intensity tables for rebar. Each item carries the
arithmetic that produced it so an estimator can audit the number.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from estimo.data.labor import REBAR_INTENSITY, classify_concrete_element
from estimo.data.repository import RateRepository
from estimo.data.steel_sections import (
    KG_PER_M_TO_LB_PER_FT,
    classify_steel_weight,
    lookup_section_weight,
    normalize_section,
)
from estimo.formatting import format_number, format_quantity
from estimo.models.enums import UnitSystem
from estimo.models.takeoff import BillOfQuantities, BoqItem, Discrepancy
from estimo.units import (
    FT_PER_M,
    cy_to_cum,
    parse_area_sf,
    parse_dimensions_ft,
    parse_length_ft,
    sqft_to_sqm,
)

if TYPE_CHECKING:
    from estimo.models.project import ProjectInfo
    from estimo.models.takeoff import ExtractionRecord, RawMeasurements

logger = logging.getLogger(__name__)

STEEL_WASTE = 0.03
CONCRETE_WASTE = 0.05
REBAR_WASTE = 0.07
CONNECTION_ALLOWANCE = 0.10

LB_PER_TON = 2000.0
CF_PER_CY = 27.0

# (kind, structural key) for members read off the framing plans.
_PLAN_MEMBER_KEYS: tuple[tuple[str, str], ...] = (
    ("beam", "beams"),
    ("column", "columns"),
    ("bracing", "bracing"),
    ("joist", "joists"),
    ("member", "members"),
)
# (kind, schedule key) for members transcribed from schedules.
_SCHEDULE_MEMBER_KEYS: tuple[tuple[str, str], ...] = (
    ("beam", "beamSchedule"),
    ("column", "columnSchedule"),
    ("joist", "joistSchedule"),
    ("member", "memberList"),
)
_KIND_LABELS: dict[str, str] = {
    "beam": "beams",
    "column": "columns",
    "bracing": "bracing",
    "joist": "joists",
    "member": "members",
}

FOUNDATION_ELEMENTS = frozenset({"footing", "pile_cap", "grade_beam", "retaining_wall", "raft"})

_ELEMENT_LABELS: dict[str, str] = {
    "footing": "footings",
    "slab_on_grade": "slab on grade",
    "elevated_slab": "elevated slabs",
    "grade_beam": "grade beams",
    "retaining_wall": "retaining walls",
    "column": "columns",
    "pile_cap": "piles & pile caps",
    "raft": "raft foundation",
    "beam": "beams",
}

_REBAR_GRADE_LABELS: dict[str, str] = {
    "grade60": "Grade 60",
    "grade75": "Grade 75",
    "Fe500": "Fe500",
    "Fe500D": "Fe500D",
    "grade460": "Grade 460",
    "grade500": "Grade 500",
}

_CONCRETE_GRADE_RE = re.compile(r"\d{4}\s*-?\s*psi|\bM\s?\d{2}\b|\bC\s?\d{2}", re.IGNORECASE)

# Gross-area MEP allowances: (description, sub-trade keyword).
_MEP_ALLOWANCES: tuple[str, ...] = (
    "HVAC (mechanical) allowance",
    "Plumbing allowance",
    "Electrical allowance",
    "Fire protection (sprinklers) allowance",
)


@dataclass(frozen=True)
class MemberTakeoff:
    """One steel member line, from a plan, a schedule, or both."""

    kind: str
    mark: str | None
    size: str | None
    count: int | None
    length_ft: float | None
    weight_per_ft: float | None = None
    source: str = "plan"

    @property
    def label(self) -> str:
        return " ".join(p for p in (self.mark, self.size) if p) or "(unmarked)"


@dataclass
class _Run:
    """Per-call state of one takeoff."""

    boq: BillOfQuantities
    repository: RateRepository
    grade_hint: str | None

    @property
    def metric(self) -> bool:
        return self.boq.unit_system == UnitSystem.METRIC

    def note(self, message: str) -> None:
        self.boq.notes.append(message)


class QuantityTakeoffEngine:
    """Computes a :class:`BillOfQuantities` from an extraction record.

    Units follow the project currency: imperial (tons, CY, SF) for USD,
    metric (MT, m³, m²) for everything else.
    """

    def __init__(self, repository: RateRepository | None = None) -> None:
        self._repository = repository or RateRepository()

    def compute(
        self,
        record: ExtractionRecord,
        project: ProjectInfo,
        measurements: RawMeasurements | None = None,
    ) -> BillOfQuantities:
        currency = project.currency or self._repository.detect_currency(project.location)
        boq = BillOfQuantities(
            unit_system=UnitSystem.IMPERIAL if currency == "USD" else UnitSystem.METRIC,
            currency=currency,
        )
        run = _Run(
            boq=boq,
            repository=self._repository,
            grade_hint=_concrete_grade_hint(record, measurements),
        )

        self._steel(run, record)
        self._concrete(run, record)
        self._rebar(run)
        self._allowances(run, record, project, measurements)
        self._cross_check_measurements(run, measurements)

        logger.info(
            "Takeoff complete: %d steel, %d concrete, %d rebar, %d other, %d discrepancies",
            len(boq.steel_items),
            len(boq.concrete_items),
            len(boq.rebar_items),
            len(boq.other_items),
            len(boq.discrepancies),
        )
        return boq

    # ------------------------------------------------------------------
    # Steel
    # ------------------------------------------------------------------

    def _steel(self, run: _Run, record: ExtractionRecord) -> None:
        plan = list(_read_members(record.structural, _PLAN_MEMBER_KEYS, "plan"))
        schedule = list(_read_members(record.schedule, _SCHEDULE_MEMBER_KEYS, "schedule"))
        members, discrepancies = reconcile_members(plan, schedule)
        run.boq.discrepancies.extend(discrepancies)

        fallback_height = _first_length(record.elevation.get("heights"), "floorToFloor", "eaveHeight")
        for member in members:
            if member.length_ft is None and member.kind == "column" and fallback_height:
                member = replace(member, length_ft=fallback_height)
                run.note(f"Column {member.label}: height taken from elevations")
            item = _steel_item(run, member)
            if item is not None:
                run.boq.steel_items.append(item)

        main = sum(i.quantity for i in run.boq.steel_items)
        if main > 0:
            unit = "mt" if run.metric else "ton"
            qty = round(main * CONNECTION_ALLOWANCE, 2)
            run.boq.steel_items.append(
                BoqItem(
                    description="Misc steel connections, plates & angles",
                    quantity=qty,
                    unit=unit,
                    category="structural_steel",
                    trade="Structural Steel",
                    calculation=(
                        f"{CONNECTION_ALLOWANCE:.0%} of main steel "
                        f"{format_quantity(round(main, 2), unit)} = {format_quantity(qty, unit)}"
                    ),
                    source="allowance",
                    element="connections",
                )
            )

        deck = record.structural.get("deck")
        if isinstance(deck, dict):
            area_sf = parse_area_sf(deck.get("area"))
            if area_sf:
                qty, unit, shown = _area_in_run_units(run, area_sf)
                deck_type = str(deck.get("type") or "").strip()
                run.boq.steel_items.append(
                    BoqItem(
                        description=f"Metal deck {deck_type}".strip(),
                        quantity=qty,
                        unit=unit,
                        category="structural_steel",
                        trade="Structural Steel",
                        calculation=f"Deck area from drawings: {shown}",
                        element="deck",
                    )
                )

    # ------------------------------------------------------------------
    # Concrete
    # ------------------------------------------------------------------

    def _concrete(self, run: _Run, record: ExtractionRecord) -> None:
        foundation = record.foundation
        default_grade = foundation.get("concreteGrade")

        footings = _entries(foundation.get("footings"))
        for entry in footings:
            dims = _dims(entry, "width", "length", "depth")
            kind = str(entry.get("type") or "spread").strip()
            _add_volume(
                run, f"Concrete {kind} footings", entry, dims,
                grade_text=entry.get("concreteGrade") or default_grade,
            )
        if not footings:
            for entry in _entries(record.schedule.get("footingSchedule")):
                dims = parse_dimensions_ft(entry.get("size"))
                if len(dims) == 3:
                    entry = {**entry, "count": entry.get("quantity") or entry.get("count")}
                    _add_volume(
                        run, "Concrete footings", entry, list(zip(("width", "length", "depth"), dims)),
                        grade_text=default_grade, source="schedule",
                    )

        for entry in _entries(foundation.get("pileCaps")):
            _add_volume(
                run, "Concrete pile caps", entry, _dims(entry, "width", "length", "depth"),
                grade_text=default_grade,
            )
        for entry in _entries(foundation.get("gradeBeams")):
            entry = {**entry, "count": entry.get("count") or 1}
            length = entry.get("totalLength") or entry.get("length")
            dims = _dims(entry, "width", "depth") + _named_length("length", length)
            _add_volume(run, "Concrete grade beams", entry, dims, grade_text=default_grade)
        for entry in _entries(foundation.get("retainingWalls")):
            entry = {**entry, "count": entry.get("count") or 1}
            _add_volume(
                run, "Concrete retaining walls", entry,
                _dims(entry, "height", "thickness", "length"), grade_text=default_grade,
            )
        for entry in _entries(foundation.get("piles")):
            _add_piles(run, entry, default_grade)

        slab = foundation.get("slabOnGrade")
        if isinstance(slab, dict):
            thickness = parse_length_ft(slab.get("thickness"))
            area_sf = parse_area_sf(slab.get("area"))
            if thickness and area_sf:
                _add_volume(
                    run, "Concrete slab on grade", {"count": 1},
                    [("area", area_sf), ("thickness", thickness)],
                    grade_text=slab.get("concreteStrength") or default_grade,
                )
            elif slab:
                run.note("Slab on grade shown without thickness and area; not quantified")

    # ------------------------------------------------------------------
    # Rebar
    # ------------------------------------------------------------------

    def _rebar(self, run: _Run) -> None:
        volumes: dict[str, float] = {}
        for item in run.boq.concrete_items:
            element = classify_concrete_element(item.description)
            volumes[element] = volumes.get(element, 0.0) + item.quantity

        grade = run.repository.default_rebar_grade(run.boq.currency)
        grade_label = _REBAR_GRADE_LABELS.get(grade or "", "")
        for element, volume in volumes.items():
            intensity = REBAR_INTENSITY[element]
            if run.metric:
                mass = volume * intensity.kg_per_cum
                net = mass / 1000
                trace = (
                    f"{volume:,.2f} m³ × {format_number(intensity.kg_per_cum)} kg/m³ = "
                    f"{mass:,.0f} kg = {net:.2f} MT"
                )
                unit = "mt"
            else:
                mass = volume * intensity.lb_per_cy
                net = mass / LB_PER_TON
                trace = (
                    f"{volume:,.2f} CY × {format_number(intensity.lb_per_cy)} lb/CY = "
                    f"{mass:,.0f} lbs = {net:.2f} tons"
                )
                unit = "ton"
            qty = round(net * (1 + REBAR_WASTE), 2)
            description = f"Reinforcing steel for {_ELEMENT_LABELS[element]}"
            if grade_label:
                description += f" ({grade_label})"
            run.boq.rebar_items.append(
                BoqItem(
                    description=description,
                    quantity=qty,
                    unit=unit,
                    category="rebar",
                    trade="Foundation" if element in FOUNDATION_ELEMENTS else "Concrete",
                    calculation=(
                        f"{trace}; +{REBAR_WASTE:.0%} waste = {format_quantity(qty, unit)}"
                    ),
                    source="derived",
                    element=element,
                    grade=grade,
                )
            )

    # ------------------------------------------------------------------
    # Area-based allowances
    # ------------------------------------------------------------------

    def _allowances(
        self,
        run: _Run,
        record: ExtractionRecord,
        project: ProjectInfo,
        measurements: RawMeasurements | None,
    ) -> None:
        area_sf = project.area_sf()
        if area_sf is None:
            area_sf = parse_area_sf(record.dimensions.get("totalArea"))
            if area_sf:
                run.note("Gross area taken from drawing dimensions")
        if area_sf is None and measurements is not None and measurements.areas_sf:
            area_sf = max(measurements.areas_sf)
            run.note("Gross area taken from drawing text")
        if not area_sf:
            run.note("Gross area unknown; area-based allowances omitted")
            return

        stories = project.stories or _to_int(record.dimensions.get("stories")) or 1
        footprint_sf = area_sf / stories

        roof = record.elevation.get("roofInfo")
        roof = roof if isinstance(roof, dict) else {}
        roof_sf = parse_area_sf(roof.get("area")) or footprint_sf
        roof_type = str(roof.get("type") or "metal roof").strip()
        _add_area(
            run, f"Roofing ({roof_type})", roof_sf, "Roofing", "roofing",
            basis="roof area" if roof.get("area") else f"footprint ({stories} storey)",
        )

        for wall in _entries(record.elevation.get("wallConstruction")):
            wall_sf = parse_area_sf(wall.get("area"))
            if wall_sf:
                wall_type = str(wall.get("type") or "metal panel").strip()
                _add_area(
                    run, f"Exterior cladding - {wall_type}", wall_sf,
                    "Exterior Cladding", "cladding", basis="wall area",
                )

        for description in _MEP_ALLOWANCES:
            _add_area(run, description, area_sf, "MEP", "mep", basis="gross floor area")

        _add_area(
            run, "Site grading allowance", footprint_sf, "Sitework", "sitework",
            basis="building footprint",
        )

    # ------------------------------------------------------------------
    # Raw-text cross-check
    # ------------------------------------------------------------------

    @staticmethod
    def _cross_check_measurements(run: _Run, measurements: RawMeasurements | None) -> None:
        if measurements is None or not measurements.steel_sections:
            return
        taken = {normalize_section(i.section) for i in run.boq.steel_items if i.section}
        missing = [s for s in measurements.steel_sections if s not in taken]
        if missing:
            shown = ", ".join(missing[:8]) + ("..." if len(missing) > 8 else "")
            run.note(f"Sections in drawing text without extracted counts: {shown}")


# ---------------------------------------------------------------------------
# Member reconciliation
# ---------------------------------------------------------------------------


def reconcile_members(
    plan: list[MemberTakeoff], schedule: list[MemberTakeoff]
) -> tuple[list[MemberTakeoff], list[Discrepancy]]:
    """Cross-reference plan counts against schedule counts.

    Entries are matched by mark, or by size when either side has no mark.
    The higher count wins and a disagreement is recorded as a
    :class:`Discrepancy`. Schedule entries with no plan counterpart are
    kept as schedule-sourced members.
    """
    remaining = list(schedule)
    members: list[MemberTakeoff] = []
    discrepancies: list[Discrepancy] = []

    for member in plan:
        match = _pop_match(remaining, member)
        if match is None:
            members.append(member)
            continue

        plan_count, schedule_count = member.count or 0, match.count or 0
        used = max(plan_count, schedule_count) or None
        if plan_count and schedule_count and plan_count != schedule_count:
            discrepancies.append(
                Discrepancy(
                    mark=member.mark or match.mark or member.size or "?",
                    size=member.size or match.size,
                    plan_count=plan_count,
                    schedule_count=schedule_count,
                    used_count=used or 0,
                    message=(
                        f"{member.label}: plan shows {plan_count}, schedule shows "
                        f"{schedule_count}; using {used}"
                    ),
                )
            )
        members.append(
            replace(
                member,
                count=used,
                mark=member.mark or match.mark,
                size=member.size or match.size,
                length_ft=member.length_ft or match.length_ft,
                weight_per_ft=member.weight_per_ft or match.weight_per_ft,
                source="plan+schedule",
            )
        )

    members.extend(remaining)
    return members, discrepancies


def _pop_match(candidates: list[MemberTakeoff], member: MemberTakeoff) -> MemberTakeoff | None:
    for idx, candidate in enumerate(candidates):
        if member.mark and candidate.mark:
            if member.mark.upper() == candidate.mark.upper():
                return candidates.pop(idx)
        elif member.size and candidate.size:
            if normalize_section(member.size) == normalize_section(candidate.size):
                return candidates.pop(idx)
    return None


def _read_members(
    section: dict[str, Any], keys: tuple[tuple[str, str], ...], source: str
) -> Iterable[MemberTakeoff]:
    for kind, key in keys:
        for entry in section.get(key) or []:
            if isinstance(entry, str):
                yield MemberTakeoff(kind, None, entry.strip(), None, None, source=source)
                continue
            if not isinstance(entry, dict):
                continue
            size = entry.get("size") or entry.get("section") or entry.get("memberSize")
            mark = str(entry.get("mark") or "").strip() or None
            yield MemberTakeoff(
                kind=kind,
                mark=mark,
                size=str(size).strip() if size else None,
                count=_to_int(entry.get("count") or entry.get("quantity")),
                length_ft=_first_length(
                    entry, "typicalLength", "length", "span", "typicalHeight", "height"
                ),
                weight_per_ft=_to_float(entry.get("weightPerFoot")),
                source=source,
            )


def _steel_item(run: _Run, member: MemberTakeoff) -> BoqItem | None:
    if not member.count:
        run.note(f"Steel {member.kind} {member.label}: no count shown; not quantified")
        return None
    if member.length_ft is None:
        run.note(f"Steel {member.kind} {member.label}: no length shown; not quantified")
        return None

    section = lookup_section_weight(member.size)
    if member.weight_per_ft:
        lb_per_ft = member.weight_per_ft
        kg_per_m = lb_per_ft / KG_PER_M_TO_LB_PER_FT
    elif section is not None:
        lb_per_ft, kg_per_m = section.lb_per_ft, section.kg_per_m
    else:
        run.note(f"Steel {member.kind} {member.label}: unit weight unknown; not quantified")
        return None

    weight_class = classify_steel_weight(lb_per_ft)
    count = member.count
    if run.metric:
        length_m = member.length_ft / FT_PER_M
        kg = count * kg_per_m * length_m
        net = kg / 1000
        qty = round(net * (1 + STEEL_WASTE), 2)
        weight_text = f"{format_number(round(kg_per_m, 1))} kg/m"
        trace = (
            f"{count} × {weight_text} × {format_number(round(length_m, 2))} m = "
            f"{kg:,.0f} kg = {net:.2f} MT; "
            f"+{STEEL_WASTE:.0%} waste = {format_quantity(qty, 'mt')}"
        )
        unit = "mt"
    else:
        lbs = count * lb_per_ft * member.length_ft
        net = lbs / LB_PER_TON
        qty = round(net * (1 + STEEL_WASTE), 2)
        weight_text = f"{format_number(lb_per_ft)} lb/ft"
        trace = (
            f"{count} × {weight_text} × {format_number(round(member.length_ft, 2))} ft = "
            f"{lbs:,.0f} lbs = {net:.2f} tons; "
            f"+{STEEL_WASTE:.0%} waste = {format_quantity(qty, 'ton')}"
        )
        unit = "ton"

    prefix = "Steel" if member.kind == "joist" else "Structural steel"
    return BoqItem(
        description=f"{prefix} {_KIND_LABELS[member.kind]} {member.label} ({weight_class}, {weight_text})",
        quantity=qty,
        unit=unit,
        category="structural_steel",
        trade="Structural Steel",
        calculation=trace,
        source=member.source,
        mark=member.mark,
        section=member.size,
        element=member.kind,
    )


# ---------------------------------------------------------------------------
# Concrete helpers
# ---------------------------------------------------------------------------


def _add_volume(
    run: _Run,
    base: str,
    entry: dict[str, Any],
    dims: list[tuple[str, float | None]],
    *,
    grade_text: Any = None,
    source: str = "plan",
) -> None:
    mark = str(entry.get("mark") or "").strip() or None
    label = f"{base} {mark}" if mark else base
    missing = [name for name, value in dims if not value]
    count = _to_int(entry.get("count")) or None
    if missing or count is None:
        what = ", ".join(missing) if missing else "count"
        run.note(f"{label}: {what} not shown; not quantified")
        return

    cf = count * math.prod(value for _, value in dims)  # type: ignore[misc]
    _append_concrete(run, label, mark, count, dims, cf, grade_text, source)


def _add_piles(run: _Run, entry: dict[str, Any], grade_text: Any) -> None:
    diameter = parse_length_ft(entry.get("diameter"))
    depth = parse_length_ft(entry.get("depth") or entry.get("length"))
    count = _to_int(entry.get("count"))
    kind = str(entry.get("type") or "").strip()
    label = f"Concrete {kind} piles".replace("  ", " ")
    if not (diameter and depth and count):
        run.note(f"{label}: diameter, depth or count not shown; not quantified")
        return
    cf = count * math.pi * (diameter / 2) ** 2 * depth
    dims: list[tuple[str, float | None]] = [("radius", diameter / 2), ("depth", depth)]
    _append_concrete(run, label, None, count, dims, cf, grade_text, "plan")


def _append_concrete(
    run: _Run,
    label: str,
    mark: str | None,
    count: int,
    dims: list[tuple[str, float | None]],
    cf: float,
    grade_text: Any,
    source: str,
) -> None:
    grade = run.repository.map_concrete_grade(
        str(grade_text or run.grade_hint or ""), run.boq.currency
    )
    description = f"{label} ({grade})" if grade else label

    if run.metric:
        shown = " × ".join(_fmt_dim(name, value, metric=True) for name, value in dims)
        volume = cy_to_cum(cf / CF_PER_CY)
        qty = round(volume * (1 + CONCRETE_WASTE), 2)
        trace = (
            f"{count} × {shown} = {volume:,.2f} m³; "
            f"+{CONCRETE_WASTE:.0%} waste = {format_quantity(qty, 'cum')}"
        )
        unit = "cum"
    else:
        shown = " × ".join(_fmt_dim(name, value, metric=False) for name, value in dims)
        volume = cf / CF_PER_CY
        qty = round(volume * (1 + CONCRETE_WASTE), 2)
        trace = (
            f"{count} × {shown} = {cf:,.1f} CF = {volume:.2f} CY; "
            f"+{CONCRETE_WASTE:.0%} waste = {format_quantity(qty, 'cy')}"
        )
        unit = "cy"

    element = classify_concrete_element(description)
    run.boq.concrete_items.append(
        BoqItem(
            description=description,
            quantity=qty,
            unit=unit,
            category="concrete",
            trade="Foundation" if element in FOUNDATION_ELEMENTS else "Concrete",
            calculation=trace,
            source=source,
            mark=mark,
            element=element,
            grade=grade,
        )
    )


def _fmt_dim(name: str, value: float | None, *, metric: bool) -> str:
    value = value or 0.0
    if name == "radius":
        return f"π × ({_fmt_dim('length', value, metric=metric)})²"
    if name == "area":
        if metric:
            return format_quantity(round(sqft_to_sqm(value), 1), "sqm")
        return f"{format_number(round(value, 1))} SF"
    if metric:
        return f"{format_number(round(value / FT_PER_M, 2))} m"
    return f"{format_number(round(value, 2))} ft"


def _add_area(
    run: _Run, description: str, area_sf: float, trade: str, category: str, *, basis: str
) -> None:
    qty, unit, shown = _area_in_run_units(run, area_sf)
    run.boq.other_items.append(
        BoqItem(
            description=description,
            quantity=qty,
            unit=unit,
            category=category,
            trade=trade,
            calculation=f"Allowance on {basis}: {shown}",
            source="allowance",
        )
    )


def _area_in_run_units(run: _Run, area_sf: float) -> tuple[float, str, str]:
    unit = "sqm" if run.metric else "sf"
    qty = round(sqft_to_sqm(area_sf) if run.metric else area_sf, 2)
    return qty, unit, format_quantity(qty, unit)


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def _entries(value: Any) -> list[dict[str, Any]]:
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list):
        return [v for v in value if isinstance(v, dict)]
    return []


def _dims(entry: dict[str, Any], *names: str) -> list[tuple[str, float | None]]:
    return [(name, parse_length_ft(entry.get(name))) for name in names]


def _named_length(name: str, value: Any) -> list[tuple[str, float | None]]:
    return [(name, parse_length_ft(value))]


def _first_length(source: Any, *keys: str) -> float | None:
    if not isinstance(source, dict):
        return None
    for key in keys:
        length = parse_length_ft(source.get(key))
        if length:
            return length
    return None


def _to_int(value: Any) -> int | None:
    number = _to_float(value)
    if number is None or number <= 0:
        return None
    return int(round(number))


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = re.search(r"\d+(?:\.\d+)?", str(value).replace(",", ""))
    return float(match.group(0)) if match else None


def _concrete_grade_hint(
    record: ExtractionRecord, measurements: RawMeasurements | None
) -> str | None:
    """First concrete grade stated anywhere in the drawings."""
    candidates: list[Any] = [record.foundation.get("concreteGrade")]
    slab = record.foundation.get("slabOnGrade")
    if isinstance(slab, dict):
        candidates.append(slab.get("concreteStrength"))
    candidates += [s for s in record.material_specs if isinstance(s, str)]
    if measurements is not None:
        candidates += measurements.concrete_grades
    for candidate in candidates:
        if candidate and _CONCRETE_GRADE_RE.search(str(candidate)):
            return str(candidate)
    return None
