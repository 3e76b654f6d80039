"""Extraction coordinator (pass 2) — parallel per-sheet-type extraction and merge.

Sheets are grouped by type and one extraction request is issued per
populated group, concurrently. Results are merged in group order (not
completion order), so the merged record is independent of network timing.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from estimo.models.enums import SheetType
from estimo.models.takeoff import ExtractionRecord, SheetInfo
from estimo.services.prompts import EXTRACTION_TEMPLATES, build_extraction_prompt

if TYPE_CHECKING:
    from collections.abc import Sequence

    from estimo.models.project import SourceFile
    from estimo.services.oracle import DocumentOracle

logger = logging.getLogger(__name__)

# Deep-extracted groups, in merge order. mep/site/general are not
# deep-extracted.
EXTRACTION_GROUPS: tuple[SheetType, ...] = (
    SheetType.STRUCTURAL,
    SheetType.FOUNDATION,
    SheetType.SCHEDULE,
    SheetType.ELEVATION,
)

# Response keys shared by every group, mapped to record attributes.
_SHARED_KEYS: dict[str, str] = {
    "dimensions": "dimensions",
    "overallDimensions": "dimensions",
    "materialSpecs": "material_specs",
    "materials": "material_specs",
    "designLoads": "design_loads",
    "loads": "design_loads",
}

_EMPTY_STRINGS = frozenset({"", "null", "none", "n/a", "na", "unknown", "-"})


@dataclass(frozen=True)
class GroupResult:
    """Outcome of one group's extraction request."""

    group: str
    data: dict[str, Any] | None
    error: str | None = None


def group_sheets(sheets: Sequence[SheetInfo]) -> dict[str, list[SheetInfo]]:
    """Group sheets by type, keeping only deep-extracted groups with a template."""
    groups: dict[str, list[SheetInfo]] = {}
    for sheet_type in EXTRACTION_GROUPS:
        members = [s for s in sheets if s.sheet_type == sheet_type]
        if members and sheet_type.value in EXTRACTION_TEMPLATES:
            groups[sheet_type.value] = members
    return groups


class ExtractionCoordinator:
    """Fans extraction requests out across sheet-type groups and merges them."""

    def __init__(self, oracle: DocumentOracle) -> None:
        self._oracle = oracle

    async def extract(
        self, files: Sequence[SourceFile], sheets: Sequence[SheetInfo]
    ) -> ExtractionRecord:
        groups = group_sheets(sheets)
        if not groups:
            logger.info("No extractable sheet groups among %d sheets", len(sheets))

        # gather() returns results in argument order regardless of completion.
        results = await asyncio.gather(
            *(
                self._extract_group(group, members, files)
                for group, members in groups.items()
            )
        )
        record = merge_group_results(results, sheet_count=len(sheets))
        logger.info(
            "Extraction merged: %d groups processed, %d failed",
            len(record.extraction_meta.groups_processed),
            len(record.extraction_meta.groups_failed),
        )
        return record

    async def _extract_group(
        self,
        group: str,
        sheets: list[SheetInfo],
        files: Sequence[SourceFile],
    ) -> GroupResult:
        prompt = build_extraction_prompt(group, sheets)
        try:
            data = await self._oracle.invoke_json(prompt, files)
        except Exception as exc:  # noqa: BLE001 - a failed group contributes nothing
            logger.warning("Extraction for %s sheets failed: %s", group, exc)
            return GroupResult(group=group, data=None, error=str(exc))
        return GroupResult(group=group, data=data)


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


def merge_group_results(
    results: Sequence[GroupResult], sheet_count: int = 0
) -> ExtractionRecord:
    """Merge group results, in the order given, into one canonical record.

    - list fields are concatenated (duplicates kept)
    - mapping fields are combined key by key, last non-empty value wins
    - scalar fields: last non-empty value wins
    - material specs are de-duplicated
    """
    record = ExtractionRecord()
    record.extraction_meta.sheet_count = sheet_count

    for result in results:
        if result.data is None:
            record.extraction_meta.groups_failed.append(result.group)
            continue
        record.extraction_meta.groups_processed.append(result.group)
        section: dict[str, Any] = getattr(record, result.group)

        for key, value in result.data.items():
            target = _SHARED_KEYS.get(key)
            if target == "material_specs":
                _merge_specs(record.material_specs, value)
            elif target is not None:
                shared: dict[str, Any] = getattr(record, target)
                if isinstance(value, dict):
                    _merge_mapping(shared, value)
                elif isinstance(value, list):
                    shared.setdefault("items", []).extend(value)
            else:
                _merge_field(section, key, value)
    return record


def summarize_extraction(record: ExtractionRecord) -> dict[str, Any]:
    """Counts describing an extraction record, for progress reporting."""

    def count(section: dict[str, Any], *keys: str) -> int:
        return sum(len(section.get(k) or []) for k in keys if isinstance(section.get(k), list))

    return {
        "sheet_count": record.extraction_meta.sheet_count,
        "structural_members": count(record.structural, "beams", "columns", "bracing", "joists"),
        "foundation_elements": count(
            record.foundation, "footings", "pileCaps", "piles", "gradeBeams"
        ),
        "schedule_entries": count(
            record.schedule, "beamSchedule", "columnSchedule", "joistSchedule", "memberList"
        ),
        "dimensions": len([v for v in record.dimensions.values() if not is_empty(v)]),
        "material_specs": len(record.material_specs),
        "has_design_loads": any(not is_empty(v) for v in record.design_loads.values()),
        "groups_processed": list(record.extraction_meta.groups_processed),
        "groups_failed": list(record.extraction_meta.groups_failed),
    }


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip().lower() in _EMPTY_STRINGS
    if isinstance(value, (list, dict)):
        return not value
    return False


def _merge_field(container: dict[str, Any], key: str, value: Any) -> None:
    if isinstance(value, list):
        existing = container.get(key)
        if isinstance(existing, list):
            existing.extend(value)
        else:
            container[key] = list(value)
    elif isinstance(value, dict):
        existing = container.get(key)
        if isinstance(existing, dict):
            _merge_mapping(existing, value)
        else:
            container[key] = {k: v for k, v in value.items() if not is_empty(v)}
    elif not is_empty(value):
        container[key] = value


def _merge_mapping(target: dict[str, Any], value: dict[str, Any]) -> None:
    for k, v in value.items():
        if not is_empty(v):
            target[k] = v


def _merge_specs(specs: list[Any], value: Any) -> None:
    items = value if isinstance(value, list) else [value]
    seen = {_spec_key(s) for s in specs}
    for item in items:
        if is_empty(item):
            continue
        key = _spec_key(item)
        if key not in seen:
            seen.add(key)
            specs.append(item)


def _spec_key(spec: Any) -> str:
    if isinstance(spec, str):
        return " ".join(spec.lower().split())
    return json.dumps(spec, sort_keys=True, default=str)
