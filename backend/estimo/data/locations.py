"""Location factors for regional cost adjustment.

Factors are relative to each currency's national average (1.00) and are
matched by substring against free-text locations ("Houston, TX",
"Andheri East, Mumbai"). Based on RSMeans / CPWD / industry city cost
index data.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class LocationFactor:
    factor: float
    currency: str
    country: str


def _us(factor: float) -> LocationFactor:
    return LocationFactor(factor, "USD", "US")


def _in(factor: float) -> LocationFactor:
    return LocationFactor(factor, "INR", "IN")


def _uk(factor: float) -> LocationFactor:
    return LocationFactor(factor, "GBP", "GB")


# Insertion order matters: the first gazetteer key contained in the
# location wins, so more specific names come before shorter ones.
LOCATION_FACTORS: dict[str, LocationFactor] = {
    # United States
    "manhattan": _us(1.38),
    "new york": _us(1.32),
    "nyc": _us(1.32),
    "los angeles": _us(1.12),
    "san francisco": _us(1.28),
    "chicago": _us(1.15),
    "houston": _us(0.92),
    "dallas": _us(0.90),
    "phoenix": _us(0.93),
    "philadelphia": _us(1.18),
    "san antonio": _us(0.88),
    "san diego": _us(1.10),
    "austin": _us(0.91),
    "jacksonville": _us(0.87),
    "charlotte": _us(0.86),
    "seattle": _us(1.15),
    "denver": _us(1.02),
    "boston": _us(1.24),
    "nashville": _us(0.92),
    "atlanta": _us(0.93),
    "miami": _us(0.98),
    "tampa": _us(0.91),
    "portland": _us(1.08),
    "las vegas": _us(1.05),
    "detroit": _us(1.05),
    "pittsburgh": _us(1.04),
    "washington": _us(1.08),
    "minneapolis": _us(1.10),
    "cleveland": _us(1.02),
    "st louis": _us(1.03),
    "kansas city": _us(0.98),
    "raleigh": _us(0.87),
    "salt lake city": _us(0.95),
    "honolulu": _us(1.35),
    "anchorage": _us(1.28),
    # India
    "mumbai": _in(1.15),
    "new delhi": _in(1.10),
    "delhi": _in(1.10),
    "bangalore": _in(1.08),
    "bengaluru": _in(1.08),
    "hyderabad": _in(1.00),
    "chennai": _in(1.02),
    "pune": _in(1.05),
    "kolkata": _in(0.95),
    "ahmedabad": _in(0.95),
    "jaipur": _in(0.90),
    "lucknow": _in(0.88),
    "surat": _in(0.92),
    "chandigarh": _in(0.98),
    "gurgaon": _in(1.12),
    "gurugram": _in(1.12),
    "noida": _in(1.08),
    "indore": _in(0.85),
    "nagpur": _in(0.88),
    "bhopal": _in(0.85),
    "visakhapatnam": _in(0.90),
    "coimbatore": _in(0.92),
    "kochi": _in(0.98),
    "thiruvananthapuram": _in(0.95),
    # Gulf
    "dubai": LocationFactor(1.10, "AED", "AE"),
    "abu dhabi": LocationFactor(1.15, "AED", "AE"),
    "sharjah": LocationFactor(0.95, "AED", "AE"),
    "ajman": LocationFactor(0.90, "AED", "AE"),
    "riyadh": LocationFactor(1.05, "SAR", "SA"),
    "jeddah": LocationFactor(1.00, "SAR", "SA"),
    "dammam": LocationFactor(0.95, "SAR", "SA"),
    "doha": LocationFactor(1.20, "QAR", "QA"),
    "muscat": LocationFactor(1.00, "OMR", "OM"),
    "kuwait city": LocationFactor(1.10, "KWD", "KW"),
    "manama": LocationFactor(1.05, "BHD", "BH"),
    # United Kingdom
    "london": _uk(1.25),
    "manchester": _uk(0.92),
    "birmingham": _uk(0.90),
    "leeds": _uk(0.88),
    "edinburgh": _uk(0.95),
    "glasgow": _uk(0.90),
    "bristol": _uk(0.95),
    # Other
    "toronto": LocationFactor(1.10, "CAD", "CA"),
    "vancouver": LocationFactor(1.15, "CAD", "CA"),
    "sydney": LocationFactor(1.15, "AUD", "AU"),
    "melbourne": LocationFactor(1.10, "AUD", "AU"),
    "singapore": LocationFactor(1.20, "SGD", "SG"),
}

# Country-level fallbacks, tried in order when no city matches.
COUNTRY_PATTERNS: list[tuple[re.Pattern[str], LocationFactor]] = [
    (re.compile(r"\bindia\b", re.IGNORECASE), LocationFactor(1.0, "INR", "IN")),
    (
        re.compile(r"\buae\b|\bunited arab\b", re.IGNORECASE),
        LocationFactor(1.0, "AED", "AE"),
    ),
    (
        re.compile(r"\buk\b|\bunited kingdom\b|\bengland\b", re.IGNORECASE),
        LocationFactor(1.0, "GBP", "GB"),
    ),
    (re.compile(r"\bcanada\b", re.IGNORECASE), LocationFactor(1.0, "CAD", "CA")),
    (re.compile(r"\baustralia\b", re.IGNORECASE), LocationFactor(1.0, "AUD", "AU")),
    (re.compile(r"\bsaudi\b", re.IGNORECASE), LocationFactor(1.0, "SAR", "SA")),
]

DEFAULT_LOCATION = LocationFactor(1.0, "USD", "US")
