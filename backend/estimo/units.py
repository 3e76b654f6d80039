"""Unit normalization and conversion for quantities and unit rates.

Quantities and rates arrive with free-text units ("sq ft", "m³", "MT",
"tonnes", ...). Everything is normalized to a small canonical vocabulary
before any comparison:

    area:    sf, sqm
    volume:  cy, cum, cf
    mass:    ton (short), mt (metric tonne), lb, kg
    length:  lf, m
    count:   ea, ls
"""

from __future__ import annotations

import re

SQFT_PER_SQM = 10.7639
CUM_PER_CY = 0.7646
MT_PER_TON = 0.907185
LB_PER_KG = 2.20462
FT_PER_M = 3.28084

# Canonical unit -> (dimension, size in the dimension's base unit).
# Base units: sf, cy, ton, lf, ea.
_UNITS: dict[str, tuple[str, float]] = {
    "sf": ("area", 1.0),
    "sqm": ("area", SQFT_PER_SQM),
    "cy": ("volume", 1.0),
    "cum": ("volume", 1.0 / CUM_PER_CY),
    "cf": ("volume", 1.0 / 27.0),
    "ton": ("mass", 1.0),
    "mt": ("mass", 1.0 / MT_PER_TON),
    "lb": ("mass", 1.0 / 2000.0),
    "kg": ("mass", LB_PER_KG / 2000.0),
    "lf": ("length", 1.0),
    "m": ("length", FT_PER_M),
    "ea": ("count", 1.0),
    "ls": ("lump", 1.0),
}

_ALIASES: dict[str, str] = {
    "sf": "sf",
    "sqft": "sf",
    "sq ft": "sf",
    "sq.ft": "sf",
    "sq. ft": "sf",
    "ft2": "sf",
    "ft²": "sf",
    "square feet": "sf",
    "sqm": "sqm",
    "sq m": "sqm",
    "sq.m": "sqm",
    "m2": "sqm",
    "m²": "sqm",
    "square meter": "sqm",
    "square metre": "sqm",
    "cy": "cy",
    "cu yd": "cy",
    "cu. yd": "cy",
    "yd3": "cy",
    "yd³": "cy",
    "cubic yard": "cy",
    "cum": "cum",
    "cu m": "cum",
    "cu.m": "cum",
    "m3": "cum",
    "m³": "cum",
    "cubic meter": "cum",
    "cubic metre": "cum",
    "cf": "cf",
    "cu ft": "cf",
    "ft3": "cf",
    "ton": "ton",
    "tons": "ton",
    "tn": "ton",
    "short ton": "ton",
    "mt": "mt",
    "tonne": "mt",
    "tonnes": "mt",
    "metric ton": "mt",
    "metric tons": "mt",
    "t": "mt",
    "lb": "lb",
    "lbs": "lb",
    "kg": "kg",
    "lf": "lf",
    "ft": "lf",
    "lin ft": "lf",
    "rm": "m",
    "m": "m",
    "rmt": "m",
    "ea": "ea",
    "each": "ea",
    "nos": "ea",
    "no": "ea",
    "pcs": "ea",
    "ls": "ls",
    "lump sum": "ls",
    "lot": "ls",
}


def normalize_unit(unit: str | None) -> str:
    """Return the canonical name for *unit*, or the cleaned input if unknown."""
    if not unit:
        return ""
    cleaned = re.sub(r"\s+", " ", unit.strip().lower()).rstrip(".")
    if cleaned.startswith("per "):
        cleaned = cleaned[4:]
    if cleaned.startswith("/"):
        cleaned = cleaned[1:].strip()
    return _ALIASES.get(cleaned, cleaned)


def dimension(unit: str | None) -> str | None:
    """Return the physical dimension of *unit* ("area", "mass", ...)."""
    entry = _UNITS.get(normalize_unit(unit))
    return entry[0] if entry else None


def convert_quantity(value: float, from_unit: str, to_unit: str) -> float | None:
    """Convert *value* between units of the same dimension.

    Returns None when either unit is unknown or the dimensions differ.
    """
    src = _UNITS.get(normalize_unit(from_unit))
    dst = _UNITS.get(normalize_unit(to_unit))
    if src is None or dst is None or src[0] != dst[0]:
        return None
    return value * src[1] / dst[1]


def convert_rate(rate: float, from_unit: str, to_unit: str) -> float | None:
    """Convert a price per *from_unit* into a price per *to_unit*.

    A rate per m² becomes a rate per ft² by dividing by 10.7639, and so on.
    Returns None when the units are not convertible.
    """
    per_unit = convert_quantity(1.0, to_unit, from_unit)
    if per_unit is None:
        return None
    return rate * per_unit


def sqft_to_sqm(value: float) -> float:
    return value / SQFT_PER_SQM


def sqm_to_sqft(value: float) -> float:
    return value * SQFT_PER_SQM


def cy_to_cum(value: float) -> float:
    return value * CUM_PER_CY


def cum_to_cy(value: float) -> float:
    return value / CUM_PER_CY


# ---------------------------------------------------------------------------
# Parsing drawing dimensions
# ---------------------------------------------------------------------------

_FEET_INCHES_RE = re.compile(
    r"(\d+(?:\.\d+)?)\s*(?:'|′|ft\b|feet\b|foot\b)\s*[-–]?\s*(?:(\d+(?:\.\d+)?)\s*(?:\"|″|''|in\b))?",
    re.IGNORECASE,
)
_INCHES_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:\"|″|''|in\b|inch)", re.IGNORECASE)
_METRIC_LENGTH_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(mm|cm|m)\b", re.IGNORECASE)
_NUMBER_RE = re.compile(r"\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?")

# A bare length above this is read as millimetres, otherwise feet.
_BARE_MM_THRESHOLD = 300.0


def parse_length_ft(value: object) -> float | None:
    """Parse a drawing length ("30'-6\"", "9144mm", "3.5 m", 30) into feet.

    Returns None when no length can be read.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _bare_length_ft(float(value))

    text = str(value).strip()
    if not text:
        return None
    match = _FEET_INCHES_RE.search(text)
    if match:
        inches = float(match.group(2)) if match.group(2) else 0.0
        return float(match.group(1)) + inches / 12
    match = _METRIC_LENGTH_RE.search(text)
    if match:
        number = float(match.group(1))
        scale = {"mm": 0.001, "cm": 0.01, "m": 1.0}[match.group(2).lower()]
        return number * scale * FT_PER_M
    match = _INCHES_RE.search(text)
    if match:
        return float(match.group(1)) / 12
    match = _NUMBER_RE.search(text)
    if match:
        return _bare_length_ft(float(match.group(0).replace(",", "")))
    return None


def parse_area_sf(value: object, default_unit: str = "sf") -> float | None:
    """Parse an area ("12,000 sf", "1,115 m²", 12000) into square feet."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number, unit = float(value), default_unit
    else:
        text = str(value).strip()
        match = _NUMBER_RE.search(text)
        if not match:
            return None
        number = float(match.group(0).replace(",", ""))
        rest = text[match.end():].strip().lower()
        metric = rest.startswith(("sqm", "sq m", "sq.m", "m2", "m²", "square met"))
        unit = "sqm" if metric else ("sf" if rest else default_unit)
    if number <= 0:
        return None
    return convert_quantity(number, unit, "sf")


def _bare_length_ft(number: float) -> float | None:
    if number <= 0:
        return None
    if number > _BARE_MM_THRESHOLD:
        return number / 1000 * FT_PER_M
    return number


def parse_dimensions_ft(value: object) -> list[float]:
    """Parse a size like ``6'-0" x 6'-0" x 2'-0"`` into lengths in feet."""
    if value is None:
        return []
    parts = re.split(r"\s*[x×X]\s*", str(value))
    return [ft for part in parts if (ft := parse_length_ft(part)) is not None]
