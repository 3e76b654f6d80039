"""Rate matching — maps a priced item onto a rate-database record.

An ordered rule table keyed on description keywords and the physical
dimension of the item's unit. Shared by cost application (to price items)
and validation (to check them), so both always agree on which reference
rate an item belongs to.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from estimo.data.rates import CURRENCY_PER_USD
from estimo.data.steel_sections import (
    classify_steel_weight,
    find_sections,
    lookup_section_weight,
)
from estimo.models.enums import RateSource
from estimo.units import convert_rate, dimension

if TYPE_CHECKING:
    from estimo.data.rates import RateRecord
    from estimo.data.repository import RateRepository

SubtypeResolver = Callable[[str, str, "RateRepository"], "str | None"]

_PAREN_RE = re.compile(r"\(([^()]*)\)")


@dataclass(frozen=True)
class RateRule:
    pattern: re.Pattern[str]
    dimension: str
    category: str
    subtype: str | SubtypeResolver


@dataclass(frozen=True)
class RateMatch:
    category: str
    subtype: str | None


@dataclass(frozen=True)
class ResolvedRate:
    """A reference rate converted into an item's unit and location."""

    rate: float
    source: RateSource
    record: RateRecord | None = None
    low: float | None = None
    high: float | None = None


# ---------------------------------------------------------------------------
# Subtype resolvers
# ---------------------------------------------------------------------------


def _steel_subtype(text: str, currency: str, repository: RateRepository) -> str | None:
    if re.search(r"hss|tube|hollow|pipe", text):
        return "hss"
    if "joist" in text:
        return "joists"
    if re.search(r"misc|connection|plate|angle", text):
        return "misc_steel"
    if re.search(r"peb|pre.?engineered|built.?up|tapered|rafter", text) and (
        repository.lookup_rate(currency, "structural_steel", "peb")
    ):
        return "peb"
    for weight_class in ("light", "heavy", "medium"):
        if re.search(rf"\b{weight_class}\b", text):
            return weight_class
    for section in find_sections(text.upper()):
        weight = lookup_section_weight(section)
        if weight is not None:
            return classify_steel_weight(weight.lb_per_ft)
    return "medium"


def _concrete_grade(text: str, currency: str, repository: RateRepository) -> str | None:
    # Grades are written in parentheses; marks elsewhere must not match.
    hints = _PAREN_RE.findall(text)
    hint = hints[-1] if hints else text
    return repository.map_concrete_grade(hint.upper(), currency)


def _rebar_grade(text: str, currency: str, repository: RateRepository) -> str | None:
    if re.search(r"fe\s?500d", text) and repository.lookup_rate(currency, "rebar", "Fe500D"):
        return "Fe500D"
    if re.search(r"grade\s?75", text) and repository.lookup_rate(currency, "rebar", "grade75"):
        return "grade75"
    return repository.default_rebar_grade(currency)


def _first_of(category: str, *subtypes: str) -> SubtypeResolver:
    def resolve(text: str, currency: str, repository: RateRepository) -> str | None:
        available = repository.category_rates(currency, category)
        return next((s for s in subtypes if s in available), None)

    return resolve


def _rule(pattern: str, dim: str, category: str, subtype: str | SubtypeResolver) -> RateRule:
    return RateRule(re.compile(pattern), dim, category, subtype)


# First match wins.
RATE_RULES: list[RateRule] = [
    # mass
    _rule(r"rebar|reinforc|\btmt\b|\bbars?\b", "mass", "rebar", _rebar_grade),
    _rule(
        r"steel|w\d+x|hss|joist|is[mlw][bc]|ipe|he[ab]|\bu[bc]\s?\d|purlin|girt|rafter|peb",
        "mass",
        "structural_steel",
        _steel_subtype,
    ),
    # volume
    _rule(r"excavat", "volume", "sitework", "excavation"),
    _rule(r"backfill", "volume", "sitework", "backfill"),
    _rule(
        r"concrete|slab|footing|foundation|grade beam|pile|pier|column|wall",
        "volume",
        "concrete",
        _concrete_grade,
    ),
    # area
    _rule(r"slab.on.grade|\bsog\b", "area", "concrete", "slab_on_grade"),
    _rule(r"elevated slab|suspended slab", "area", "concrete", "elevated_slab"),
    _rule(r"formwork.*column|column.*formwork", "area", "concrete", "formwork_column"),
    _rule(r"formwork", "area", "concrete", "formwork_wall"),
    _rule(r"\bwwf\b|welded wire", "area", "rebar", "wwf"),
    _rule(r"deck", "area", "structural_steel", "deck"),
    _rule(r"standing.seam|metal.roof", "area", "roofing", _first_of("roofing", "standing_seam", "metal_sheet")),
    _rule(r"\btpo\b|single.ply", "area", "roofing", "tpo_single_ply"),
    _rule(r"roof.*built.?up|built.?up.*roof", "area", "roofing", "built_up"),
    _rule(r"roof.*sandwich|sandwich.*roof", "area", "roofing", "sandwich_panel"),
    _rule(r"rcc.*roof|roof.*slab", "area", "roofing", "rcc_slab"),
    _rule(r"insulation", "area", "roofing", "insulation"),
    _rule(
        r"roof",
        "area",
        "roofing",
        _first_of("roofing", "standing_seam", "metal_sheet", "tpo_single_ply"),
    ),
    _rule(r"hvac|mechanical", "area", "mep", "hvac"),
    _rule(r"plumbing", "area", "mep", "plumbing"),
    _rule(r"fire.prot|sprinkler", "area", "mep", "fire_protection"),
    _rule(r"electrical", "area", "mep", "electrical"),
    _rule(r"\baac\b", "area", "masonry", "aac_200"),
    _rule(r"(cmu|block).*12|12.*(cmu|block)", "area", "masonry", "cmu_12"),
    _rule(r"cmu|block|masonry", "area", "masonry", _first_of("masonry", "cmu_8", "aac_200")),
    _rule(r"brick veneer", "area", "masonry", "brick_veneer"),
    _rule(r"brick", "area", "masonry", _first_of("masonry", "brick_230", "brick_veneer")),
    _rule(r"eifs", "area", "cladding", "eifs"),
    _rule(
        r"(cladding|wall panel|siding|envelope|sheeting).*(insulated|sandwich)"
        r"|(insulated|sandwich).*(cladding|wall panel|siding|envelope|sheeting)",
        "area",
        "cladding",
        _first_of("cladding", "insulated_panel", "sandwich_panel"),
    ),
    _rule(
        r"cladding|wall panel|siding|envelope|sheeting",
        "area",
        "cladding",
        _first_of("cladding", "metal_panel", "profile_sheet"),
    ),
    _rule(r"grading", "area", "sitework", "grading"),
    _rule(r"asphalt", "area", "sitework", "paving_asphalt"),
    _rule(r"paving", "area", "sitework", "paving_concrete"),
    _rule(r"drywall|gypsum|partition", "area", "finishes", "drywall"),
    _rule(r"paint", "area", "finishes", "painting"),
    _rule(r"\bvct\b|vinyl", "area", "finishes", "flooring_vct"),
    _rule(r"carpet", "area", "finishes", "flooring_carpet"),
    _rule(r"ceiling", "area", "finishes", "ceiling_act"),
]


def match_rate(
    description: str, unit: str, currency: str, repository: RateRepository
) -> RateMatch | None:
    """Return the rate category and subtype an item belongs to, or None.

    ``subtype`` is None when the category is recognized but the currency
    has no suitable record for it.
    """
    dim = dimension(unit)
    if dim is None:
        return None
    text = (description or "").lower()
    for rule in RATE_RULES:
        if rule.dimension != dim or not rule.pattern.search(text):
            continue
        subtype = (
            rule.subtype
            if isinstance(rule.subtype, str)
            else rule.subtype(text, currency, repository)
        )
        return RateMatch(rule.category, subtype)
    return None


def resolve_db_rate(
    match: RateMatch | None,
    unit: str,
    currency: str,
    location_factor: float,
    repository: RateRepository,
) -> ResolvedRate | None:
    """The database rate for *match*, in *unit*, adjusted for location.

    Returns None when there is no record or its unit is not convertible.
    """
    if match is None or match.subtype is None:
        return None
    record = repository.lookup_rate(currency, match.category, match.subtype)
    if record is None:
        return None
    rate = convert_rate(record.rate * location_factor, record.unit, unit)
    if rate is None:
        return None
    low = convert_rate(record.range[0] * location_factor, record.unit, unit)
    high = convert_rate(record.range[1] * location_factor, record.unit, unit)
    return ResolvedRate(rate=rate, source=RateSource.DB, record=record, low=low, high=high)


def estimate_rate(
    match: RateMatch | None,
    unit: str,
    currency: str,
    location_factor: float,
    repository: RateRepository,
) -> ResolvedRate:
    """An estimated (EST) rate when no exact database record applies.

    Taken from the first convertible record of the same category in the
    currency, then from the USD record at a fixed currency parity. Zero when
    neither exists.
    """
    if match is not None:
        for record in repository.category_rates(currency, match.category).values():
            rate = convert_rate(record.rate * location_factor, record.unit, unit)
            if rate is not None:
                return ResolvedRate(rate=rate, source=RateSource.EST, record=record)

        parity = CURRENCY_PER_USD.get(currency)
        if parity is not None:
            usd_rates = repository.category_rates("USD", match.category)
            candidates = [usd_rates[match.subtype]] if match.subtype in usd_rates else []
            candidates += list(usd_rates.values())
            for record in candidates:
                rate = convert_rate(record.rate * parity * location_factor, record.unit, unit)
                if rate is not None:
                    return ResolvedRate(rate=rate, source=RateSource.EST, record=record)
    return ResolvedRate(rate=0.0, source=RateSource.EST)
