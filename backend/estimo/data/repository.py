"""Rate repository — read-only lookups over the reference data tables."""

from __future__ import annotations

import re

from estimo.data.benchmarks import BENCHMARK_RANGES, BenchmarkRange
from estimo.data.locations import (
    COUNTRY_PATTERNS,
    DEFAULT_LOCATION,
    LOCATION_FACTORS,
    LocationFactor,
)
from estimo.data.rates import UNIT_RATES, RateRecord

# Default concrete grade per currency when a drawing gives none.
_DEFAULT_CONCRETE_GRADE: dict[str, str] = {
    "USD": "4000psi",
    "INR": "M30",
    "AED": "C40",
    "GBP": "C30",
}

# Default rebar subtype per currency.
_DEFAULT_REBAR_GRADE: dict[str, str] = {
    "USD": "grade60",
    "INR": "Fe500",
    "AED": "grade460",
}

# Approximate cylinder strength (MPa) for cross-system grade mapping.
_PSI_TO_MPA = 0.00689476

_GRADE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(\d{4})\s*-?\s*psi", re.IGNORECASE), "psi"),
    (re.compile(r"\bM\s?(\d{2})\b"), "M"),
    (re.compile(r"\bC\s?(\d{2})(?:/\d{2})?\b"), "C"),
    (re.compile(r"f'?c\s*=?\s*(\d{4})", re.IGNORECASE), "psi"),
]


class RateRepository:
    """Repository for unit rates, location factors and benchmarks.

    Wraps the in-memory reference tables and provides lookups with the
    fallback logic each table needs (gazetteer then country then default
    for locations, direct then partial match for project types).
    """

    def __init__(
        self,
        unit_rates: dict[str, dict[str, dict[str, RateRecord]]] | None = None,
        location_factors: dict[str, LocationFactor] | None = None,
        benchmarks: dict[str, dict[str, BenchmarkRange]] | None = None,
    ) -> None:
        self._unit_rates = unit_rates if unit_rates is not None else UNIT_RATES
        self._locations = (
            location_factors if location_factors is not None else LOCATION_FACTORS
        )
        self._benchmarks = benchmarks if benchmarks is not None else BENCHMARK_RANGES

    # ------------------------------------------------------------------
    # Unit rates
    # ------------------------------------------------------------------

    def lookup_rate(
        self, currency: str, category: str, subtype: str
    ) -> RateRecord | None:
        """Return the rate record for (currency, category, subtype), or None."""
        return self._unit_rates.get(currency, {}).get(category, {}).get(subtype)

    def category_rates(self, currency: str, category: str) -> dict[str, RateRecord]:
        return dict(self._unit_rates.get(currency, {}).get(category, {}))

    def currency_rates(self, currency: str) -> dict[str, dict[str, RateRecord]]:
        return {
            cat: dict(subs) for cat, subs in self._unit_rates.get(currency, {}).items()
        }

    def has_currency(self, currency: str) -> bool:
        return currency in self._unit_rates

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------

    def lookup_location_factor(self, location: str | None) -> LocationFactor:
        """Resolve a free-text location to a cost factor.

        Lookup order:
        1. First gazetteer city contained in the location (case-insensitive)
        2. Country-level pattern (factor 1.0)
        3. Neutral default (1.0, USD, US)
        """
        if not location or not location.strip():
            return DEFAULT_LOCATION

        normalized = location.lower().strip()
        for city, data in self._locations.items():
            if city in normalized:
                return data

        for pattern, data in COUNTRY_PATTERNS:
            if pattern.search(location):
                return data

        return DEFAULT_LOCATION

    def detect_currency(self, location: str | None) -> str:
        return self.lookup_location_factor(location).currency

    # ------------------------------------------------------------------
    # Benchmarks
    # ------------------------------------------------------------------

    @staticmethod
    def normalize_project_type(project_type: str | None) -> str:
        """Normalize a free-text project type to a benchmark key."""
        normalized = re.sub(r"[\s\-/]+", "_", (project_type or "").strip().lower())
        normalized = re.sub(r"pre_engineered|pre_eng|peb", "peb", normalized, count=1)
        normalized = normalized.replace("office", "commercial", 1)
        return re.sub(r"factory|manufacturing", "industrial", normalized, count=1)

    def lookup_benchmark(
        self, currency: str, project_type: str | None
    ) -> tuple[str, BenchmarkRange] | None:
        """Return ``(key, range)`` for the project type, or None.

        Tries a direct key match first, then the first key that contains or
        is contained in the normalized project type.
        """
        table = self._benchmarks.get(currency)
        if not table:
            return None
        normalized = self.normalize_project_type(project_type)
        if not normalized:
            return None
        if normalized in table:
            return normalized, table[normalized]
        for key, data in table.items():
            if key in normalized or normalized in key:
                return key, data
        return None

    # ------------------------------------------------------------------
    # Grades
    # ------------------------------------------------------------------

    def map_concrete_grade(self, text: str | None, currency: str) -> str | None:
        """Map a concrete grade mention to the currency's rate subtype.

        "4000 psi", "M30", "C30/37" and "f'c = 4000" are understood and
        converted across systems by nearest strength. Returns the currency's
        default grade when *text* names no grade, or None when the currency
        has no concrete rates.
        """
        grades = self.category_rates(currency, "concrete")
        strengths = {
            sub: mpa for sub in grades if (mpa := _grade_strength_mpa(sub)) is not None
        }
        if not strengths:
            return None

        target = None
        for pattern, system in _GRADE_PATTERNS:
            match = pattern.search(text or "")
            if match:
                value = float(match.group(1))
                target = value * _PSI_TO_MPA if system == "psi" else value
                break

        if target is None:
            default = _DEFAULT_CONCRETE_GRADE.get(currency)
            return default if default in grades else next(iter(strengths))
        return min(strengths, key=lambda sub: abs(strengths[sub] - target))

    def default_rebar_grade(self, currency: str) -> str | None:
        grade = _DEFAULT_REBAR_GRADE.get(currency)
        if grade and self.lookup_rate(currency, "rebar", grade):
            return grade
        return None


def _grade_strength_mpa(subtype: str) -> float | None:
    psi = re.fullmatch(r"(\d{4})psi", subtype)
    if psi:
        return float(psi.group(1)) * _PSI_TO_MPA
    metric = re.fullmatch(r"[MC](\d{2})", subtype)
    if metric:
        return float(metric.group(1))
    return None
