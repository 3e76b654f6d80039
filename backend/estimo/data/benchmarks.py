"""Cost-per-area benchmark ranges by currency and project type.

All ranges are expressed per square foot of gross building area.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BenchmarkRange:
    low: float
    mid: float
    high: float
    label: str
    unit: str = "sqft"


BENCHMARK_RANGES: dict[str, dict[str, BenchmarkRange]] = {
    "USD": {
        "industrial": BenchmarkRange(80, 140, 200, "Industrial / Manufacturing"),
        "warehouse": BenchmarkRange(60, 110, 180, "Warehouse / Distribution"),
        "commercial": BenchmarkRange(150, 250, 350, "Commercial Office"),
        "retail": BenchmarkRange(100, 175, 280, "Retail"),
        "residential_single": BenchmarkRange(120, 185, 250, "Single-Family Residential"),
        "residential_multi": BenchmarkRange(150, 220, 300, "Multi-Family Residential"),
        "healthcare": BenchmarkRange(300, 500, 700, "Healthcare / Hospital"),
        "educational": BenchmarkRange(200, 300, 400, "Educational"),
        "hospitality": BenchmarkRange(200, 350, 500, "Hospitality / Hotel"),
        "peb": BenchmarkRange(40, 80, 120, "Pre-Engineered Building"),
        "mixed_use": BenchmarkRange(150, 250, 380, "Mixed Use"),
        "data_center": BenchmarkRange(400, 700, 1200, "Data Center"),
        "parking": BenchmarkRange(40, 65, 100, "Parking Structure"),
    },
    "INR": {
        "industrial": BenchmarkRange(2000, 3500, 5000, "Industrial / Manufacturing"),
        "warehouse": BenchmarkRange(1500, 2800, 4500, "Warehouse / Logistics"),
        "commercial": BenchmarkRange(3000, 5500, 8000, "Commercial Office"),
        "retail": BenchmarkRange(2500, 4000, 6500, "Retail / Mall"),
        "residential_single": BenchmarkRange(1500, 3000, 4500, "Independent House / Villa"),
        "residential_multi": BenchmarkRange(2000, 3500, 5500, "Apartment / Multi-Family"),
        "healthcare": BenchmarkRange(5000, 10000, 15000, "Hospital / Healthcare"),
        "educational": BenchmarkRange(3000, 5000, 7000, "School / College"),
        "hospitality": BenchmarkRange(4000, 7000, 10000, "Hotel / Hospitality"),
        "peb": BenchmarkRange(1200, 2000, 3000, "Pre-Engineered Building"),
        "mixed_use": BenchmarkRange(2500, 4500, 7000, "Mixed Use"),
    },
    "AED": {
        "industrial": BenchmarkRange(300, 550, 800, "Industrial / Manufacturing"),
        "warehouse": BenchmarkRange(250, 450, 700, "Warehouse / Logistics"),
        "commercial": BenchmarkRange(600, 1000, 1400, "Commercial Office"),
        "retail": BenchmarkRange(400, 700, 1100, "Retail"),
        "residential_single": BenchmarkRange(400, 700, 1000, "Villa"),
        "residential_multi": BenchmarkRange(500, 800, 1200, "Apartment Building"),
        "healthcare": BenchmarkRange(1000, 1800, 2500, "Healthcare"),
        "hospitality": BenchmarkRange(800, 1400, 2000, "Hotel"),
        "peb": BenchmarkRange(150, 300, 450, "Pre-Engineered Building"),
    },
    "GBP": {
        "industrial": BenchmarkRange(70, 120, 180, "Industrial"),
        "commercial": BenchmarkRange(130, 220, 320, "Commercial Office"),
        "residential": BenchmarkRange(100, 180, 260, "Residential"),
        "healthcare": BenchmarkRange(250, 420, 600, "Healthcare"),
        "educational": BenchmarkRange(170, 260, 360, "Educational"),
    },
}
