"""Labor, crew, machinery and markup reference data.

Used by the cost-decomposition post-processor to split installed costs into
material, labor and equipment, derive labor hours and crews, and schedule
machinery.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Material / labor / equipment split of an installed cost
# ---------------------------------------------------------------------------

LABOR_SPLIT: dict[str, tuple[float, float, float]] = {
    # (material, labor, equipment)
    "structural_steel": (0.45, 0.40, 0.15),
    "peb_steel": (0.55, 0.30, 0.15),
    "connections": (0.50, 0.40, 0.10),
    "concrete": (0.35, 0.50, 0.15),
    "rebar": (0.50, 0.45, 0.05),
    "masonry": (0.40, 0.50, 0.10),
    "roofing": (0.50, 0.40, 0.10),
    "cladding": (0.55, 0.35, 0.10),
    "mep_plumbing": (0.55, 0.40, 0.05),
    "mep_hvac": (0.50, 0.40, 0.10),
    "mep_electrical": (0.55, 0.40, 0.05),
    "mep_fire": (0.50, 0.40, 0.10),
    "elevator": (0.65, 0.25, 0.10),
    "flooring": (0.50, 0.45, 0.05),
    "painting": (0.35, 0.60, 0.05),
    "ceiling": (0.50, 0.45, 0.05),
    "partitions": (0.50, 0.45, 0.05),
    "sitework": (0.20, 0.40, 0.40),
    "piling": (0.35, 0.30, 0.35),
    "paving": (0.45, 0.30, 0.25),
    "general": (0.45, 0.45, 0.10),
}

# ---------------------------------------------------------------------------
# Labor productivity (hours per basis unit)
# ---------------------------------------------------------------------------

# Unit each productivity figure is expressed per. None means the figure is
# per line-item unit, whatever that is.
PRODUCTIVITY_BASIS: dict[str, str | None] = {
    "structural_steel": "ton",
    "peb_steel": "ton",
    "concrete": "cy",
    "rebar": "ton",
    "masonry": "sf",
    "roofing": "sf",
    "cladding": "sf",
    "mep_plumbing": "sf",
    "mep_hvac": "sf",
    "mep_electrical": "sf",
    "mep_fire": "sf",
    "elevator": "ea",
    "flooring": "sf",
    "painting": "sf",
    "ceiling": "sf",
    "partitions": "sf",
    "sitework": "cy",
    "piling": "lf",
    "paving": "sf",
    "general": None,
}

_PRODUCTIVITY_US: dict[str, float] = {
    "structural_steel": 24, "peb_steel": 18, "concrete": 3.0, "rebar": 20,
    "masonry": 0.06, "roofing": 0.025, "cladding": 0.03,
    "mep_plumbing": 0.015, "mep_hvac": 0.025, "mep_electrical": 0.02,
    "mep_fire": 0.008, "elevator": 200, "flooring": 0.03, "painting": 0.015,
    "ceiling": 0.02, "partitions": 0.035, "sitework": 0.08, "piling": 0.15,
    "paving": 0.02, "general": 2,
}

_PRODUCTIVITY_IN: dict[str, float] = {
    "structural_steel": 40, "peb_steel": 30, "concrete": 5.0, "rebar": 32,
    "masonry": 0.08, "roofing": 0.04, "cladding": 0.045,
    "mep_plumbing": 0.02, "mep_hvac": 0.035, "mep_electrical": 0.025,
    "mep_fire": 0.012, "elevator": 300, "flooring": 0.05, "painting": 0.025,
    "ceiling": 0.03, "partitions": 0.05, "sitework": 0.12, "piling": 0.20,
    "paving": 0.03, "general": 3,
}

_PRODUCTIVITY_GULF: dict[str, float] = {
    "structural_steel": 28, "peb_steel": 22, "concrete": 3.5, "rebar": 24,
    "masonry": 0.07, "roofing": 0.03, "cladding": 0.035,
    "mep_plumbing": 0.018, "mep_hvac": 0.03, "mep_electrical": 0.022,
    "mep_fire": 0.01, "elevator": 250, "flooring": 0.035, "painting": 0.02,
    "ceiling": 0.025, "partitions": 0.04, "sitework": 0.1, "piling": 0.18,
    "paving": 0.025, "general": 2.5,
}

_PRODUCTIVITY_EU: dict[str, float] = {
    "structural_steel": 22, "peb_steel": 16, "concrete": 2.8, "rebar": 18,
    "masonry": 0.055, "roofing": 0.022, "cladding": 0.028,
    "mep_plumbing": 0.014, "mep_hvac": 0.024, "mep_electrical": 0.018,
    "mep_fire": 0.008, "elevator": 180, "flooring": 0.028, "painting": 0.013,
    "ceiling": 0.018, "partitions": 0.032, "sitework": 0.07, "piling": 0.13,
    "paving": 0.018, "general": 2,
}

_PRODUCTIVITY_SG: dict[str, float] = {
    "structural_steel": 26, "peb_steel": 20, "concrete": 3.2, "rebar": 22,
    "masonry": 0.065, "roofing": 0.027, "cladding": 0.032,
    "mep_plumbing": 0.016, "mep_hvac": 0.027, "mep_electrical": 0.021,
    "mep_fire": 0.009, "elevator": 220, "flooring": 0.032, "painting": 0.016,
    "ceiling": 0.021, "partitions": 0.037, "sitework": 0.09, "piling": 0.16,
    "paving": 0.021, "general": 2.2,
}

LABOR_PRODUCTIVITY: dict[str, dict[str, float]] = {
    "USD": _PRODUCTIVITY_US,
    "CAD": _PRODUCTIVITY_US,
    "AUD": _PRODUCTIVITY_US,
    "INR": _PRODUCTIVITY_IN,
    "AED": _PRODUCTIVITY_GULF,
    "SAR": _PRODUCTIVITY_GULF,
    "GBP": _PRODUCTIVITY_EU,
    "EUR": _PRODUCTIVITY_EU,
    "SGD": _PRODUCTIVITY_SG,
}

# ---------------------------------------------------------------------------
# Hourly labor rates (per hour, national average, before location factor)
# ---------------------------------------------------------------------------

_RATE_KEYS = (
    "structural", "peb", "concrete", "rebar", "masonry", "roofing",
    "cladding", "plumbing", "hvac", "electrical", "fire", "elevator",
    "flooring", "painting", "ceiling", "partitions", "sitework", "piling",
    "paving", "general",
)


def _rates(*values: float) -> dict[str, float]:
    return dict(zip(_RATE_KEYS, values, strict=True))


HOURLY_LABOR_RATES: dict[str, dict[str, float]] = {
    "USD": _rates(65, 55, 50, 55, 48, 50, 52, 58, 62, 60, 55, 70, 42, 38, 42, 42, 45, 55, 42, 40),
    "INR": _rates(350, 280, 280, 300, 220, 250, 280, 320, 380, 350, 300, 500, 220, 180, 220, 220, 220, 350, 200, 200),
    "AED": _rates(45, 38, 35, 40, 32, 35, 38, 42, 48, 45, 40, 55, 30, 25, 30, 30, 30, 42, 28, 28),
    "GBP": _rates(55, 48, 42, 48, 40, 42, 45, 48, 52, 50, 45, 60, 35, 32, 35, 35, 38, 48, 35, 35),
    "EUR": _rates(52, 45, 40, 45, 38, 40, 42, 45, 50, 48, 42, 58, 33, 30, 33, 33, 36, 45, 33, 33),
    "SAR": _rates(42, 35, 32, 38, 30, 32, 35, 40, 45, 42, 38, 52, 28, 22, 28, 28, 28, 40, 25, 25),
    "CAD": _rates(72, 60, 55, 60, 52, 55, 58, 62, 68, 65, 60, 75, 46, 42, 46, 46, 50, 60, 46, 44),
    "AUD": _rates(78, 65, 60, 65, 56, 60, 62, 68, 72, 70, 65, 80, 50, 45, 50, 50, 55, 65, 50, 48),
    "SGD": _rates(48, 40, 38, 42, 35, 38, 40, 45, 50, 48, 42, 58, 32, 28, 32, 32, 32, 45, 30, 30),
}

# ---------------------------------------------------------------------------
# Crew templates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CrewTemplate:
    trade: str
    crew: str
    base_headcount: int
    rate_key: str


CREW_TEMPLATES: dict[str, CrewTemplate] = {
    t.trade: t
    for t in (
        CrewTemplate("Structural Steel", "Ironworkers + Crane Operator", 6, "structural"),
        CrewTemplate("PEB Erection", "PEB erectors + Crane Operator", 8, "peb"),
        CrewTemplate("Concrete", "Concrete crew + Finishers + Pump operator", 10, "concrete"),
        CrewTemplate("Rebar", "Rod busters / Bar benders + Helpers", 6, "rebar"),
        CrewTemplate("Masonry", "Masons + Helpers", 6, "masonry"),
        CrewTemplate("MEP - Plumbing", "Plumbers + Pipe fitters + Helpers", 4, "plumbing"),
        CrewTemplate("MEP - HVAC", "HVAC Technicians + Sheet metal workers", 4, "hvac"),
        CrewTemplate("MEP - Electrical", "Electricians + Cable pullers + Helpers", 5, "electrical"),
        CrewTemplate("MEP - Fire Protection", "Sprinkler fitters + Helpers", 3, "fire"),
        CrewTemplate("MEP - Elevator", "Elevator technicians", 2, "elevator"),
        CrewTemplate("Roofing", "Roofers + Sheet metal workers", 5, "roofing"),
        CrewTemplate("Cladding/Envelope", "Cladding installers + Crane", 4, "cladding"),
        CrewTemplate("Flooring", "Tile layers + Helpers", 6, "flooring"),
        CrewTemplate("Painting", "Painters + Helpers", 6, "painting"),
        CrewTemplate("Ceiling", "Ceiling installers", 4, "ceiling"),
        CrewTemplate("Partitions/Drywall", "Drywall crew", 4, "partitions"),
        CrewTemplate("Sitework - Earthwork", "Equipment operators + Laborers", 5, "sitework"),
        CrewTemplate("Sitework - Piling", "Piling crew + Rig operator", 5, "piling"),
        CrewTemplate("Sitework - Paving", "Paving crew + Equipment", 5, "paving"),
        CrewTemplate("General Labor", "Helpers + Cleanup", 4, "general"),
    )
}

# ---------------------------------------------------------------------------
# Machinery day rates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MachineryRate:
    rate: float
    description: str


MACHINERY_RATES: dict[str, dict[str, MachineryRate]] = {
    "USD": {
        "mobile_crane_25t": MachineryRate(1200, "Mobile crane 25T"),
        "mobile_crane_50t": MachineryRate(1800, "Mobile crane 50T"),
        "concrete_pump": MachineryRate(1400, "Concrete boom pump"),
        "transit_mixer": MachineryRate(650, "Transit mixer 8 CY"),
        "excavator_20t": MachineryRate(900, "Hydraulic excavator 20T"),
        "backhoe_loader": MachineryRate(450, "Backhoe loader"),
        "boom_lift": MachineryRate(350, "Boom lift 60 ft"),
        "welding_machine": MachineryRate(85, "Welding machine 400A"),
        "generator": MachineryRate(150, "Diesel generator 100 kVA"),
        "compactor": MachineryRate(250, "Plate / roller compactor"),
        "forklift": MachineryRate(300, "Telehandler / forklift"),
    },
    "INR": {
        "mobile_crane_25t": MachineryRate(18000, "Hydra / mobile crane 25T"),
        "mobile_crane_50t": MachineryRate(30000, "Mobile crane 50T"),
        "concrete_pump": MachineryRate(15000, "Concrete pump"),
        "transit_mixer": MachineryRate(6000, "Transit mixer 6 cum"),
        "excavator_20t": MachineryRate(12000, "Excavator (PC200 class)"),
        "backhoe_loader": MachineryRate(6000, "JCB backhoe loader"),
        "boom_lift": MachineryRate(5000, "Boom lift / scissor lift"),
        "welding_machine": MachineryRate(1500, "Welding machine"),
        "generator": MachineryRate(3000, "DG set 62.5 kVA"),
        "compactor": MachineryRate(3500, "Vibratory roller / plate compactor"),
        "forklift": MachineryRate(4000, "Forklift 3T"),
        "bar_bending": MachineryRate(1200, "Bar bending machine"),
        "bar_cutting": MachineryRate(1000, "Bar cutting machine"),
    },
    "AED": {
        "mobile_crane_25t": MachineryRate(3500, "Mobile crane 25T"),
        "mobile_crane_50t": MachineryRate(5500, "Mobile crane 50T"),
        "concrete_pump": MachineryRate(4000, "Concrete boom pump"),
        "transit_mixer": MachineryRate(1800, "Transit mixer"),
        "excavator_20t": MachineryRate(2500, "Hydraulic excavator 20T"),
        "backhoe_loader": MachineryRate(1200, "Backhoe loader"),
        "boom_lift": MachineryRate(900, "Boom lift"),
        "welding_machine": MachineryRate(250, "Welding machine"),
        "generator": MachineryRate(450, "Diesel generator 100 kVA"),
        "compactor": MachineryRate(700, "Compactor"),
        "forklift": MachineryRate(850, "Forklift / telehandler"),
    },
    "GBP": {
        "mobile_crane_25t": MachineryRate(950, "Mobile crane 25T"),
        "mobile_crane_50t": MachineryRate(1450, "Mobile crane 50T"),
        "concrete_pump": MachineryRate(1100, "Concrete boom pump"),
        "transit_mixer": MachineryRate(500, "Truck mixer"),
        "excavator_20t": MachineryRate(700, "Tracked excavator 20T"),
        "backhoe_loader": MachineryRate(350, "Backhoe loader"),
        "boom_lift": MachineryRate(280, "Cherry picker / boom lift"),
        "welding_machine": MachineryRate(65, "Welding set"),
        "generator": MachineryRate(120, "Site generator"),
        "compactor": MachineryRate(200, "Roller / plate compactor"),
        "forklift": MachineryRate(240, "Telehandler"),
    },
    "EUR": {
        "mobile_crane_25t": MachineryRate(1100, "Mobile crane 25T"),
        "mobile_crane_50t": MachineryRate(1650, "Mobile crane 50T"),
        "concrete_pump": MachineryRate(1250, "Concrete boom pump"),
        "transit_mixer": MachineryRate(580, "Truck mixer"),
        "excavator_20t": MachineryRate(800, "Excavator 20T"),
        "backhoe_loader": MachineryRate(400, "Backhoe loader"),
        "boom_lift": MachineryRate(320, "Boom lift"),
        "welding_machine": MachineryRate(75, "Welding set"),
        "generator": MachineryRate(140, "Site generator"),
        "compactor": MachineryRate(230, "Compactor"),
        "forklift": MachineryRate(270, "Telehandler"),
    },
}

# ---------------------------------------------------------------------------
# Markups
# ---------------------------------------------------------------------------

DEFAULT_MARKUPS: dict[str, float] = {
    "general_conditions": 7.0,
    "overhead": 6.0,
    "profit": 8.0,
    "contingency": 7.0,
    "escalation": 2.0,
}

# ---------------------------------------------------------------------------
# Rebar intensity by concrete element
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RebarIntensity:
    lb_per_cy: float
    kg_per_cum: float


REBAR_INTENSITY: dict[str, RebarIntensity] = {
    "footing": RebarIntensity(120, 80),
    "slab_on_grade": RebarIntensity(80, 55),
    "elevated_slab": RebarIntensity(150, 100),
    "grade_beam": RebarIntensity(150, 100),
    "retaining_wall": RebarIntensity(180, 120),
    "column": RebarIntensity(200, 135),
    "pile_cap": RebarIntensity(160, 107),
    "raft": RebarIntensity(130, 87),
    "beam": RebarIntensity(170, 113),
}

_ELEMENT_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"slab.*(grade|ground)|sog|(grade|ground).*slab"), "slab_on_grade"),
    (re.compile(r"slab|elevated"), "elevated_slab"),
    (re.compile(r"grade\s*beam|plinth"), "grade_beam"),
    (re.compile(r"retaining|shear\s*wall"), "retaining_wall"),
    (re.compile(r"column|pedestal"), "column"),
    (re.compile(r"pile|caisson"), "pile_cap"),
    (re.compile(r"raft|mat\b"), "raft"),
    (re.compile(r"beam|lintel"), "beam"),
]


def classify_concrete_element(text: str | None) -> str:
    """Map a concrete item description to a rebar-intensity element key."""
    lowered = (text or "").lower()
    for pattern, element in _ELEMENT_RULES:
        if pattern.search(lowered):
            return element
    return "footing"
