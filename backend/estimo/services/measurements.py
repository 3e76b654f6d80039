"""Raw measurement extractor — pattern-matches the text layer of drawing PDFs.

Runs independently of the oracle so its findings can cross-check the
oracle's structured extraction. Scanned drawings have no text layer and
yield an empty, LOW-confidence result.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from estimo.data.steel_sections import find_sections
from estimo.models.takeoff import RawMeasurements
from estimo.services.pdf_text import PdfTextExtractor
from estimo.units import FT_PER_M, SQFT_PER_SQM

if TYPE_CHECKING:
    from collections.abc import Sequence

    from estimo.models.project import SourceFile

logger = logging.getLogger(__name__)

_MIN_TEXT_CHARS = 20

_IMPERIAL_DIM_RE = re.compile(r"\b(\d{1,4})\s*['′]\s*[-–]?\s*(\d{1,2})\s*(?:[\"″]|'')")
_METRIC_DIM_RE = re.compile(r"\b(\d+(?:\.\d+)?)\s*(mm|cm|m)\b", re.IGNORECASE)
_GRID_RE = re.compile(
    r"(\d{1,4})\s*['′]\s*[-–]?\s*(\d{0,2})\s*(?:[\"″]|'')?\s*[x×X]\s*"
    r"(\d{1,4})\s*['′]\s*[-–]?\s*(\d{0,2})"
)
_AREA_RE = re.compile(
    r"\b(\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?\s*"
    r"(SF|SQ\.?\s*FT|FT2|SQUARE\s*FEET|SQ\.?\s*M|M2|m²|SQUARE\s*METERS?|SQUARE\s*METRES?)\b",
    re.IGNORECASE,
)
_HEIGHT_RE = re.compile(
    r"\b(?:EAVE|RIDGE|FLOOR[\s-]*TO[\s-]*FLOOR|STORY|CLEAR|CEILING)\s*"
    r"(?:HEIGHT|HT\.?|H)\s*[=:]?\s*(\d+(?:\.\d+)?)\s*(['′]|M\b|MM\b)\s*[-–]?\s*(\d{0,2})",
    re.IGNORECASE,
)
_CONCRETE_PSI_RE = re.compile(r"\b(?:f['’]?c\s*=?\s*)?(\d{4})\s*PSI\b", re.IGNORECASE)
_CONCRETE_GRADE_RE = re.compile(r"\b([MC])\s?(\d{2})(?:\s*/\s*(\d{2}))?\b")
_STEEL_SPEC_RE = re.compile(r"\b(?:ASTM\s*)?(A992|A572|A36|A500|IS\s*2062|S275|S355)\b", re.IGNORECASE)
_LOAD_RE = re.compile(
    r"\b(D\.?L\.?|L\.?L\.?|DEAD\s*LOAD|LIVE\s*LOAD|SNOW\s*LOAD|WIND|SEISMIC)\s*[=:]\s*"
    r"(\d+(?:\.\d+)?)\s*(PSF|KPA|KN/M2|MPH|M/S)",
    re.IGNORECASE,
)
_SCALE_RE = re.compile(
    r"SCALE\s*:?\s*(?:\d/\d+\s*[\"″]\s*=\s*1\s*['′]|1\s*:\s*\d{1,4})", re.IGNORECASE
)
_SCHEDULE_ENTRY_RE = re.compile(
    r"\b[BCJ]\d{1,3}\s*[=:\-–]\s*(?:W|HSS|ISMB|ISMC|IPE|HEA|HEB)\s*\d", re.IGNORECASE
)

# (label, weight) of each evidence kind in the confidence score.
_EVIDENCE_WEIGHTS: tuple[tuple[str, int], ...] = (
    ("dimensions", 20),
    ("grid_spacings", 15),
    ("areas", 10),
    ("heights", 10),
    ("member_sizes", 20),
    ("steel_grades", 10),
    ("concrete_grades", 5),
    ("design_loads", 5),
    ("scales", 5),
    ("schedule_entries", 15),
)


class RawMeasurementExtractor:
    """Extracts raw measurements from the PDFs among the source files."""

    def __init__(self, text_extractor: PdfTextExtractor | None = None) -> None:
        self._text_extractor = text_extractor or PdfTextExtractor()

    def extract(self, files: Sequence[SourceFile]) -> RawMeasurements:
        text = self._text_extractor.extract_all(files)
        result = extract_measurements_from_text(text)
        logger.info(
            "Raw measurements: %d sections, %d grades, %d areas (confidence %s)",
            len(result.steel_sections),
            len(result.concrete_grades),
            len(result.areas_sf),
            result.confidence_level,
        )
        return result


def extract_measurements_from_text(text: str) -> RawMeasurements:
    """Pattern-match one block of drawing text into :class:`RawMeasurements`."""
    if not text or len(text.strip()) < _MIN_TEXT_CHARS:
        return RawMeasurements(
            confidence_note="No usable text layer (likely scanned drawings)"
        )

    dimensions = _unique(
        [f"{m.group(1)}'-{m.group(2)}\"" for m in _IMPERIAL_DIM_RE.finditer(text)]
        + [f"{m.group(1)} {m.group(2).lower()}" for m in _METRIC_DIM_RE.finditer(text)]
    )
    grids = _unique([m.group(0) for m in _GRID_RE.finditer(text)])
    sections = _unique(find_sections(text))
    steel_grades = _unique(
        [" ".join(m.group(1).upper().split()) for m in _STEEL_SPEC_RE.finditer(text)]
    )
    scales = _unique([m.group(0) for m in _SCALE_RE.finditer(text)])
    schedule_entries = len(_SCHEDULE_ENTRY_RE.findall(text))

    result = RawMeasurements(
        steel_sections=sections,
        concrete_grades=_concrete_grades(text),
        areas_sf=_areas_sf(text),
        heights_ft=_heights_ft(text),
        loads=_unique(
            [
                f"{' '.join(m.group(1).upper().split())} = {m.group(2)} {m.group(3).upper()}"
                for m in _LOAD_RE.finditer(text)
            ]
        ),
        dimension_count=len(dimensions),
    )

    evidence = {
        "dimensions": len(dimensions),
        "grid_spacings": len(grids),
        "areas": len(result.areas_sf),
        "heights": len(result.heights_ft),
        "member_sizes": len(sections),
        "steel_grades": len(steel_grades),
        "concrete_grades": len(result.concrete_grades),
        "design_loads": len(result.loads),
        "scales": len(scales),
        "schedule_entries": schedule_entries,
    }
    score, level, note = score_evidence(evidence)
    result.confidence_score = score
    result.confidence_level = level
    result.confidence_note = note
    return result


def score_evidence(evidence: dict[str, int]) -> tuple[int, str, str]:
    """Score how much evidence the text holds, as ``(score, level, note)``.

    Each evidence kind earns a third of its weight per item found, capped at
    its weight. HIGH at 70 or above, MEDIUM at 35 or above, else LOW.
    """
    total = 0.0
    max_score = 0
    for label, weight in _EVIDENCE_WEIGHTS:
        max_score += weight
        found = evidence.get(label, 0)
        if found > 0:
            total += min(weight, found * weight / 3)

    score = round(total / max_score * 100)
    if score >= 70:
        return score, "HIGH", "Rich dimensional data in the drawing text"
    if score >= 35:
        return score, "MEDIUM", "Partial dimensional data in the drawing text"
    return score, "LOW", "Minimal text data (likely scanned drawings)"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _concrete_grades(text: str) -> list[str]:
    grades = [f"{m.group(1)} psi" for m in _CONCRETE_PSI_RE.finditer(text)]
    for m in _CONCRETE_GRADE_RE.finditer(text):
        prefix, strength, cube = m.group(1), int(m.group(2)), m.group(3)
        # M10/C10 and below are not structural grades; most hits are noise.
        if not 15 <= strength <= 80:
            continue
        grades.append(f"C{strength}/{cube}" if prefix == "C" and cube else f"{prefix}{strength}")
    return _unique(grades)


def _areas_sf(text: str) -> list[float]:
    areas: list[float] = []
    for m in _AREA_RE.finditer(text):
        value = float(m.group(1).replace(",", ""))
        if value <= 0:
            continue
        unit = m.group(2).upper().replace(".", "").replace(" ", "")
        metric = unit.startswith(("SQM", "M2", "M²", "SQUAREMET"))
        areas.append(round(value * SQFT_PER_SQM if metric else value, 2))
    return areas


def _heights_ft(text: str) -> list[float]:
    heights: list[float] = []
    for m in _HEIGHT_RE.finditer(text):
        value = float(m.group(1))
        unit = m.group(2).upper()
        if unit == "M":
            heights.append(round(value * FT_PER_M, 2))
        elif unit == "MM":
            heights.append(round(value / 1000 * FT_PER_M, 2))
        else:
            inches = int(m.group(3)) if m.group(3) else 0
            heights.append(round(value + inches / 12, 2))
    return heights
