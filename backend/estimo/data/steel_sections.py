"""Steel section weight tables for four regional naming conventions.

- US AISC W-shapes: designation carries the weight (W24x68 = 68 lb/ft).
- Indian IS sections (ISMB/ISMC/ISLB/ISWB): kg/m, from IS 808.
- European IPE/HEA/HEB: kg/m, from EN 10365.
- British UB/UC: designation carries the mass (UB457x191x67 = 67 kg/m).

Lookups return a :class:`SectionWeight` in the table's native unit;
``lb_per_ft`` gives the imperial equivalent.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

KG_PER_M_TO_LB_PER_FT = 0.671969


@dataclass(frozen=True)
class SectionWeight:
    section: str
    weight: float
    unit: str
    standard: str

    @property
    def lb_per_ft(self) -> float:
        if self.unit == "lb/ft":
            return self.weight
        return self.weight * KG_PER_M_TO_LB_PER_FT

    @property
    def kg_per_m(self) -> float:
        if self.unit == "kg/m":
            return self.weight
        return self.weight / KG_PER_M_TO_LB_PER_FT


# Common AISC W-shapes; any W designation also resolves by pattern.
AISC_W_SHAPES: dict[str, float] = {
    "W8X10": 10, "W8X18": 18, "W8X24": 24, "W8X31": 31,
    "W10X12": 12, "W10X22": 22, "W10X33": 33, "W10X49": 49,
    "W12X14": 14, "W12X19": 19, "W12X26": 26, "W12X35": 35,
    "W12X50": 50, "W12X65": 65, "W12X87": 87,
    "W14X22": 22, "W14X30": 30, "W14X48": 48, "W14X68": 68,
    "W14X90": 90, "W14X120": 120,
    "W16X26": 26, "W16X31": 31, "W16X40": 40, "W16X57": 57,
    "W18X35": 35, "W18X50": 50, "W18X71": 71, "W18X97": 97,
    "W21X44": 44, "W21X62": 62, "W21X83": 83,
    "W24X55": 55, "W24X68": 68, "W24X84": 84, "W24X104": 104,
    "W27X84": 84, "W27X114": 114,
    "W30X90": 90, "W30X116": 116, "W30X148": 148,
    "W33X118": 118, "W33X141": 141,
    "W36X135": 135, "W36X160": 160, "W36X194": 194,
}

INDIAN_SECTIONS: dict[str, float] = {
    "ISMB100": 11.5, "ISMB125": 13.0, "ISMB150": 14.9, "ISMB175": 19.3,
    "ISMB200": 25.4, "ISMB225": 31.2, "ISMB250": 37.3, "ISMB300": 44.2,
    "ISMB350": 52.4, "ISMB400": 61.6, "ISMB450": 72.4, "ISMB500": 86.9,
    "ISMB550": 103.7, "ISMB600": 122.6,
    "ISMC75": 6.8, "ISMC100": 9.2, "ISMC125": 12.7, "ISMC150": 16.0,
    "ISMC175": 19.1, "ISMC200": 22.1, "ISMC225": 25.9, "ISMC250": 30.4,
    "ISMC300": 36.3, "ISMC350": 42.1, "ISMC400": 49.4,
    "ISLB150": 14.2, "ISLB175": 16.7, "ISLB200": 19.8, "ISLB225": 23.5,
    "ISLB250": 27.9, "ISLB300": 33.0, "ISLB325": 36.7, "ISLB350": 40.9,
    "ISLB400": 45.7, "ISLB450": 52.4, "ISLB500": 58.8, "ISLB550": 65.3,
    "ISLB600": 72.8,
    "ISWB150": 17.0, "ISWB175": 21.3, "ISWB200": 28.4, "ISWB225": 33.9,
    "ISWB250": 40.9, "ISWB300": 48.1, "ISWB350": 56.9, "ISWB400": 66.7,
    "ISWB450": 79.4, "ISWB500": 95.2, "ISWB550": 112.5, "ISWB600": 133.7,
}

EUROPEAN_SECTIONS: dict[str, float] = {
    "IPE80": 6.0, "IPE100": 8.1, "IPE120": 10.4, "IPE140": 12.9,
    "IPE160": 15.8, "IPE180": 18.8, "IPE200": 22.4, "IPE220": 26.2,
    "IPE240": 30.7, "IPE270": 36.1, "IPE300": 42.2, "IPE330": 49.1,
    "IPE360": 57.1, "IPE400": 66.3, "IPE450": 77.6, "IPE500": 90.7,
    "IPE550": 106.0, "IPE600": 122.0,
    "HEA100": 16.7, "HEA120": 19.9, "HEA140": 24.7, "HEA160": 30.4,
    "HEA180": 35.5, "HEA200": 42.3, "HEA220": 50.5, "HEA240": 60.3,
    "HEA260": 68.2, "HEA280": 76.4, "HEA300": 88.3, "HEA320": 97.6,
    "HEA340": 105.0, "HEA360": 112.0, "HEA400": 125.0, "HEA450": 140.0,
    "HEA500": 155.0, "HEA550": 166.0, "HEA600": 178.0,
    "HEB100": 20.4, "HEB120": 26.7, "HEB140": 33.7, "HEB160": 42.6,
    "HEB180": 51.2, "HEB200": 61.3, "HEB220": 71.5, "HEB240": 83.2,
    "HEB260": 93.0, "HEB280": 103.0, "HEB300": 117.0, "HEB320": 127.0,
    "HEB340": 134.0, "HEB360": 142.0, "HEB400": 155.0, "HEB450": 171.0,
    "HEB500": 187.0, "HEB550": 199.0, "HEB600": 212.0,
}

_W_SHAPE_RE = re.compile(r"^W(\d+)X(\d+(?:\.\d+)?)$")
_BRITISH_RE = re.compile(r"^(UB|UC)(\d+)X(\d+)X(\d+(?:\.\d+)?)$")
_SECTION_RE = re.compile(
    r"\b(W\s?\d{1,2}\s?[xX×]\s?\d{1,3}(?:\.\d+)?"
    r"|IS[MLW][BC]\s?\d{2,3}"
    r"|(?:IPE|HEA|HEB)\s?\d{2,4}"
    r"|U[BC]\s?\d{3}\s?[xX×]\s?\d{3}\s?[xX×]\s?\d{2,3}(?:\.\d+)?)\b"
)


def normalize_section(section: str) -> str:
    """Canonical form of a section designation: no spaces, uppercase, 'X'."""
    return re.sub(r"\s+", "", section).upper().replace("×", "X")


def find_sections(text: str) -> list[str]:
    """Return every steel section designation mentioned in *text*."""
    return [normalize_section(m.group(1)) for m in _SECTION_RE.finditer(text or "")]


def lookup_section_weight(section: str | None) -> SectionWeight | None:
    """Look up the unit weight of a section designation.

    Returns None when the designation is not recognized.
    """
    if not section:
        return None
    key = normalize_section(section)

    if key in AISC_W_SHAPES:
        return SectionWeight(key, AISC_W_SHAPES[key], "lb/ft", "AISC")
    if key in INDIAN_SECTIONS:
        return SectionWeight(key, INDIAN_SECTIONS[key], "kg/m", "IS")
    if key in EUROPEAN_SECTIONS:
        return SectionWeight(key, EUROPEAN_SECTIONS[key], "kg/m", "EN")

    w_match = _W_SHAPE_RE.match(key)
    if w_match:
        return SectionWeight(key, float(w_match.group(2)), "lb/ft", "AISC")
    uk_match = _BRITISH_RE.match(key)
    if uk_match:
        return SectionWeight(key, float(uk_match.group(4)), "kg/m", "BS")
    return None


def classify_steel_weight(lb_per_ft: float) -> str:
    """Classify a member as light (<50 lb/ft), medium (≤100) or heavy."""
    if lb_per_ft < 50:
        return "light"
    if lb_per_ft <= 100:
        return "medium"
    return "heavy"
