"""Instruction templates for the document oracle.

Each template spells out the exact JSON format expected back; the parsers
downstream read these keys and tolerate anything missing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from estimo.models.project import ProjectInfo
    from estimo.models.takeoff import SheetInfo


CLASSIFICATION_PROMPT = (
    "Classify every page of the attached construction drawings.\n\n"
    "For each page give its sheet type, using one of: STRUCTURAL_PLAN, "
    "FOUNDATION_PLAN, ROOF_PLAN, FRAMING_PLAN, PEB_LAYOUT, SCHEDULE, "
    "BAR_BENDING, ELEVATION, SECTION, DETAIL, GENERAL_NOTES, COVER_SHEET, "
    "ARCHITECTURAL_PLAN, MEP_MECHANICAL, MEP_ELECTRICAL, MEP_PLUMBING, "
    "SITE_PLAN.\n\n"
    "Return JSON in this format:\n"
    "```json\n"
    "{\n"
    '  "sheetInventory": [\n'
    '    {"pageNumber": 1, "sheetType": "STRUCTURAL_PLAN", '
    '"sheetName": "S-101 Framing Plan", "scale": "1/8\\" = 1\'-0\\""}\n'
    "  ],\n"
    '  "drawingSetSummary": "<one sentence>"\n'
    "}\n"
    "```"
)

_SHARED_FORMAT = (
    '  "dimensions": {"length": "<e.g. 120\'-0\\">", "width": "...", '
    '"totalArea": "<number with unit>", "stories": null},\n'
    '  "materialSpecs": ["<e.g. ASTM A992 Gr.50>", "..."],\n'
    '  "designLoads": {"liveLoad": null, "windSpeed": null, '
    '"seismicCategory": null}\n'
)

EXTRACTION_TEMPLATES: dict[str, str] = {
    "structural": (
        "Extract every structural steel member shown on the framing plans. "
        "Count members per mark; give lengths as shown (feet-inches or mm).\n\n"
        "```json\n"
        "{\n"
        '  "beams": [{"mark": "B1", "size": "W24x68", "count": 12, '
        '"typicalLength": "30\'-0\\"", "location": "Level 2"}],\n'
        '  "columns": [{"mark": "C1", "size": "W14x48", "count": 20, '
        '"typicalHeight": "14\'-0\\""}],\n'
        '  "bracing": [{"mark": "BR1", "size": "HSS6x6x3/8", "count": 8, '
        '"typicalLength": "18\'-0\\""}],\n'
        '  "joists": [{"mark": "J1", "size": "24K7", "count": 40, '
        '"span": "40\'-0\\"", "weightPerFoot": 10.1}],\n'
        '  "deck": {"type": "1.5B 20ga", "area": "<number with unit>"},\n'
        '  "memberSizes": {"B1": "W24x68"},\n'
        '  "gridSystem": "<e.g. A-F x 1-8 at 25\'-0\\">",\n'
        '  "steelGrade": "<e.g. ASTM A992>",\n'
        + _SHARED_FORMAT
        + "}\n```"
    ),
    "foundation": (
        "Extract every foundation element shown.\n\n"
        "```json\n"
        "{\n"
        '  "footings": [{"mark": "F1", "type": "spread", "width": "6\'-0\\"", '
        '"length": "6\'-0\\"", "depth": "2\'-0\\"", "count": 12, '
        '"concreteGrade": "4000 psi"}],\n'
        '  "pileCaps": [{"mark": "PC1", "width": "...", "length": "...", '
        '"depth": "...", "count": 4}],\n'
        '  "piles": [{"type": "bored", "diameter": "600mm", "depth": "18m", '
        '"count": 24}],\n'
        '  "gradeBeams": [{"mark": "GB1", "width": "1\'-6\\"", "depth": '
        '"2\'-6\\"", "totalLength": "320\'"}],\n'
        '  "slabOnGrade": {"thickness": "6\\"", "area": "<number with unit>", '
        '"concreteStrength": "4000 psi", "reinforcement": "6x6 W2.9xW2.9"},\n'
        '  "retainingWalls": [{"height": "...", "thickness": "...", '
        '"length": "..."}],\n'
        '  "concreteGrade": "<default grade for foundations>",\n'
        '  "soilBearing": "<e.g. 3000 psf>",\n'
        + _SHARED_FORMAT
        + "}\n```"
    ),
    "schedule": (
        "Transcribe every member schedule on these sheets exactly as shown.\n\n"
        "```json\n"
        "{\n"
        '  "beamSchedule": [{"mark": "B1", "size": "W24x68", "length": '
        '"30\'-0\\"", "quantity": 14, "grade": "A992"}],\n'
        '  "columnSchedule": [{"mark": "C1", "size": "W14x48", "height": '
        '"14\'-0\\"", "quantity": 20}],\n'
        '  "joistSchedule": [{"mark": "J1", "size": "24K7", "span": "...", '
        '"quantity": 40}],\n'
        '  "footingSchedule": [{"mark": "F1", "size": "6\'-0\\" x 6\'-0\\" x '
        '2\'-0\\"", "quantity": 12}],\n'
        '  "memberList": [{"mark": "...", "size": "...", "length": "...", '
        '"quantity": 0}],\n'
        + _SHARED_FORMAT
        + "}\n```"
    ),
    "elevation": (
        "Extract building heights, roof and wall construction.\n\n"
        "```json\n"
        "{\n"
        '  "heights": {"overallHeight": null, "eaveHeight": null, '
        '"floorToFloor": null},\n'
        '  "roofInfo": {"type": "<e.g. standing seam metal, TPO>", '
        '"slope": null, "area": "<number with unit>"},\n'
        '  "wallConstruction": [{"type": "<e.g. brick veneer, metal panel>", '
        '"area": "<number with unit>"}],\n'
        '  "openings": [{"type": "door|window", "count": 0}],\n'
        + _SHARED_FORMAT
        + "}\n```"
    ),
}


def build_extraction_prompt(group: str, sheets: list[SheetInfo]) -> str:
    """Return the extraction instruction for one sheet-type group."""
    pages = ", ".join(
        f"page {s.page_number}" + (f" ({s.sheet_name})" if s.sheet_name else "")
        for s in sheets
    )
    return (
        f"Focus only on these {group} sheets: {pages}.\n\n"
        f"{EXTRACTION_TEMPLATES[group]}"
    )


def build_fallback_estimate_prompt(project: ProjectInfo, currency: str) -> str:
    """Return the instruction for a single-pass estimate from metadata alone."""
    lines = [
        "Prepare a conceptual construction cost estimate from the project "
        "information below. No drawings are available.",
        "",
        f"Project name: {project.project_name}",
        f"Project type: {project.project_type}",
        f"Location: {project.location or 'not given'}",
        f"Currency: {currency}",
    ]
    if project.total_area:
        lines.append(f"Total area: {project.total_area:,.0f} {project.area_unit}")
    if project.stories:
        lines.append(f"Stories: {project.stories}")
    if project.structural_system:
        lines.append(f"Structural system: {project.structural_system}")
    if project.notes:
        lines.append(f"Notes: {project.notes}")
    lines += [
        "",
        "Return JSON in this format (all amounts in the project currency):",
        "```json",
        "{",
        '  "trades": [{"tradeName": "Structural Steel", "lineItems": '
        '[{"description": "...", "quantity": 0, "unit": "ton", '
        '"unitRate": 0}]}],',
        '  "markups": {"generalConditions": 7, "overhead": 6, "profit": 8, '
        '"contingency": 7, "escalation": 2},',
        '  "assumptions": ["..."]',
        "}",
        "```",
    ]
    return "\n".join(lines)
