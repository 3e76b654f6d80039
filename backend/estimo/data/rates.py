"""Installed unit rates by currency, category and subtype.

All rates are INSTALLED costs (material + labor + equipment) at national
average pricing, before the location factor is applied. Ranges are the
market band used by the unit-rate validation check.
"""

from __future__ import annotations

from dataclasses import dataclass

RATE_DATA_VERSION = "2025.2"


@dataclass(frozen=True)
class RateRecord:
    """One reference unit rate."""

    rate: float
    unit: str
    range: tuple[float, float]
    description: str


def _rate(rate: float, unit: str, low: float, high: float, description: str) -> RateRecord:
    return RateRecord(rate=rate, unit=unit, range=(low, high), description=description)


# Maps currency -> category -> subtype -> RateRecord.
UNIT_RATES: dict[str, dict[str, dict[str, RateRecord]]] = {
    "USD": {
        "structural_steel": {
            "light": _rate(3800, "ton", 3000, 4500, "Light W-shapes (<50 lb/ft), installed"),
            "medium": _rate(3000, "ton", 2500, 3500, "Medium W-shapes (50-100 lb/ft), installed"),
            "heavy": _rate(2600, "ton", 2200, 3000, "Heavy W-shapes (>100 lb/ft), installed"),
            "hss": _rate(4200, "ton", 3500, 5000, "HSS/Tube steel, installed"),
            "misc_steel": _rate(5000, "ton", 4000, 6000, "Misc steel (connections, plates, angles)"),
            "joists": _rate(2200, "ton", 1800, 2800, "Open web steel joists, installed"),
            "deck": _rate(5.50, "sf", 4.00, 7.50, 'Metal deck (1.5" - 3"), installed'),
        },
        "concrete": {
            "3000psi": _rate(180, "cy", 150, 220, "3000 PSI concrete, placed & finished"),
            "4000psi": _rate(200, "cy", 170, 250, "4000 PSI concrete, placed & finished"),
            "5000psi": _rate(230, "cy", 190, 280, "5000 PSI concrete, placed & finished"),
            "slab_on_grade": _rate(8.50, "sf", 6.50, 12.00, '4-6" SOG with WWF, complete'),
            "elevated_slab": _rate(18.00, "sf", 14.00, 24.00, "Elevated concrete slab, formed & placed"),
            "formwork_wall": _rate(12.00, "sf", 9.00, 16.00, "Wall formwork (foundation/retaining)"),
            "formwork_column": _rate(15.00, "sf", 11.00, 20.00, "Column formwork"),
        },
        "rebar": {
            "grade60": _rate(1500, "ton", 1200, 2000, "#3-#11 Grade 60 rebar, placed"),
            "grade75": _rate(1800, "ton", 1400, 2200, "#6-#11 Grade 75 rebar, placed"),
            "wwf": _rate(0.80, "sf", 0.50, 1.20, "Welded wire fabric, placed"),
        },
        "masonry": {
            "cmu_8": _rate(14.00, "sf", 11.00, 18.00, '8" CMU wall, grouted & reinforced'),
            "cmu_12": _rate(18.00, "sf", 14.00, 23.00, '12" CMU wall, grouted & reinforced'),
            "brick_veneer": _rate(22.00, "sf", 17.00, 28.00, "Brick veneer on backup"),
        },
        "roofing": {
            "standing_seam": _rate(14.00, "sf", 10.00, 20.00, "Standing seam metal roof"),
            "tpo_single_ply": _rate(9.00, "sf", 6.50, 12.00, "TPO single-ply roofing"),
            "built_up": _rate(11.00, "sf", 8.00, 15.00, "Built-up roofing (4-ply)"),
            "insulation": _rate(3.50, "sf", 2.50, 5.00, "Rigid insulation (R-20)"),
        },
        "sitework": {
            "excavation": _rate(8.00, "cy", 5.00, 14.00, "Bulk excavation"),
            "backfill": _rate(12.00, "cy", 8.00, 18.00, "Structural backfill, compacted"),
            "grading": _rate(2.50, "sf", 1.50, 4.00, "Fine grading"),
            "paving_asphalt": _rate(5.50, "sf", 4.00, 8.00, '3" asphalt paving'),
            "paving_concrete": _rate(9.00, "sf", 7.00, 13.00, '6" concrete paving'),
        },
        "mep": {
            "hvac": _rate(22.00, "sf", 15.00, 35.00, "HVAC (commercial, per building SF)"),
            "plumbing": _rate(12.00, "sf", 8.00, 18.00, "Plumbing (commercial, per building SF)"),
            "electrical": _rate(18.00, "sf", 12.00, 28.00, "Electrical (commercial, per building SF)"),
            "fire_protection": _rate(5.00, "sf", 3.50, 7.50, "Fire sprinkler system"),
        },
        "cladding": {
            "metal_panel": _rate(16.00, "sf", 12.00, 22.00, "Single-skin metal wall panel"),
            "insulated_panel": _rate(28.00, "sf", 22.00, 36.00, "Insulated metal wall panel"),
            "eifs": _rate(18.00, "sf", 14.00, 24.00, "EIFS over sheathing"),
        },
        "finishes": {
            "drywall": _rate(4.50, "sf", 3.50, 6.00, '5/8" drywall, taped & finished'),
            "painting": _rate(2.50, "sf", 1.80, 3.50, "Interior paint (2 coats)"),
            "flooring_vct": _rate(5.00, "sf", 3.50, 7.00, "VCT flooring"),
            "flooring_carpet": _rate(6.00, "sf", 4.00, 9.00, "Commercial carpet tile"),
            "ceiling_act": _rate(5.50, "sf", 4.00, 8.00, "Acoustic ceiling tile (2x4)"),
        },
    },
    "INR": {
        "structural_steel": {
            "light": _rate(75000, "mt", 60000, 90000, "Light sections, fabricated & erected"),
            "medium": _rate(68000, "mt", 55000, 82000, "Medium sections, fabricated & erected"),
            "heavy": _rate(62000, "mt", 50000, 75000, "Heavy sections, fabricated & erected"),
            "hss": _rate(82000, "mt", 65000, 95000, "Hollow sections, fabricated & erected"),
            "misc_steel": _rate(90000, "mt", 72000, 110000, "Misc steel (connections, plates)"),
            "peb": _rate(55000, "mt", 45000, 68000, "Pre-engineered building steel"),
        },
        "concrete": {
            "M25": _rate(5500, "cum", 4500, 6800, "M25 concrete, placed & finished"),
            "M30": _rate(6000, "cum", 5000, 7500, "M30 concrete, placed & finished"),
            "M40": _rate(7000, "cum", 5800, 8500, "M40 concrete, placed & finished"),
            "M50": _rate(8500, "cum", 7000, 10000, "M50 concrete, placed & finished"),
        },
        "rebar": {
            "Fe500": _rate(58000, "mt", 50000, 68000, "Fe500 TMT rebar, cut/bent & placed"),
            "Fe500D": _rate(62000, "mt", 54000, 72000, "Fe500D TMT rebar, cut/bent & placed"),
        },
        "masonry": {
            "brick_230": _rate(850, "sqm", 650, 1100, "230mm brick wall with plaster"),
            "aac_200": _rate(750, "sqm", 600, 950, "200mm AAC block wall"),
        },
        "roofing": {
            "metal_sheet": _rate(450, "sqm", 350, 600, "Color coated profile sheet"),
            "sandwich_panel": _rate(1200, "sqm", 900, 1600, "Insulated sandwich panel (50mm PUF)"),
            "rcc_slab": _rate(2800, "sqm", 2200, 3500, "RCC roof slab (150mm)"),
        },
        "cladding": {
            "profile_sheet": _rate(550, "sqm", 400, 750, "Colour coated wall sheeting"),
            "sandwich_panel": _rate(1400, "sqm", 1000, 1800, "Insulated wall panel (50mm PUF)"),
        },
        "mep": {
            "hvac": _rate(1200, "sqm", 800, 1800, "HVAC (commercial)"),
            "plumbing": _rate(600, "sqm", 400, 900, "Plumbing"),
            "electrical": _rate(900, "sqm", 600, 1400, "Electrical"),
            "fire_protection": _rate(350, "sqm", 250, 500, "Fire protection"),
        },
    },
    "AED": {
        "structural_steel": {
            "light": _rate(12000, "mt", 9500, 14500, "Light sections, fabricated & erected"),
            "medium": _rate(10500, "mt", 8500, 13000, "Medium sections, fabricated & erected"),
            "heavy": _rate(9500, "mt", 8000, 11500, "Heavy sections, fabricated & erected"),
            "hss": _rate(13000, "mt", 10000, 16000, "Hollow sections"),
        },
        "concrete": {
            "C30": _rate(750, "cum", 600, 950, "C30 concrete, placed & finished"),
            "C40": _rate(850, "cum", 700, 1050, "C40 concrete, placed & finished"),
            "C50": _rate(1000, "cum", 800, 1200, "C50 concrete, placed & finished"),
        },
        "rebar": {
            "grade460": _rate(4500, "mt", 3500, 5800, "Grade 460 rebar, placed"),
            "grade500": _rate(5000, "mt", 4000, 6200, "Grade 500 rebar, placed"),
        },
    },
    "GBP": {
        "structural_steel": {
            "light": _rate(3200, "mt", 2600, 3800, "Light sections, installed"),
            "medium": _rate(2800, "mt", 2200, 3400, "Medium sections, installed"),
            "heavy": _rate(2500, "mt", 2000, 3000, "Heavy sections, installed"),
        },
        "concrete": {
            "C30": _rate(120, "cum", 95, 150, "C30 concrete, placed"),
            "C40": _rate(140, "cum", 110, 175, "C40 concrete, placed"),
        },
    },
}

# Approximate units of currency per USD, used only to derive estimated
# (EST) rates when a currency has no record for a category.
CURRENCY_PER_USD: dict[str, float] = {
    "USD": 1.0,
    "INR": 83.0,
    "AED": 3.67,
    "SAR": 3.75,
    "QAR": 3.64,
    "OMR": 0.385,
    "KWD": 0.31,
    "BHD": 0.377,
    "GBP": 0.79,
    "EUR": 0.92,
    "CAD": 1.36,
    "AUD": 1.52,
    "SGD": 1.34,
}
