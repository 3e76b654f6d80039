"""Sheet classifier (pass 1) — labels each drawing page with a sheet type."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

from estimo.exceptions import JsonExtractionError, OracleCallError
from estimo.models.enums import SheetType
from estimo.models.takeoff import SheetInfo
from estimo.services.prompts import CLASSIFICATION_PROMPT

if TYPE_CHECKING:
    from collections.abc import Sequence

    from estimo.models.project import SourceFile
    from estimo.services.oracle import DocumentOracle

logger = logging.getLogger(__name__)

# Ordered (pattern, sheet type) rules over the oracle's free-text type.
# First match wins, so schedules and foundations come before the generic
# "plan"/"structural" rules.
SHEET_TYPE_RULES: list[tuple[re.Pattern[str], SheetType]] = [
    (re.compile(r"schedule|bar[\s_-]*bending|bbs|member[\s_-]*list"), SheetType.SCHEDULE),
    (re.compile(r"foundation|footing|pile|piling"), SheetType.FOUNDATION),
    (re.compile(r"\bmep\b|mechanical|electrical|plumbing|hvac|\bfire\b"), SheetType.MEP),
    (re.compile(r"\bsite\b|civil|grading|landscap"), SheetType.SITE),
    (re.compile(r"elevation|section|detail"), SheetType.ELEVATION),
    (
        re.compile(r"structural|framing|roof|peb|steel|truss|purlin|column|beam"),
        SheetType.STRUCTURAL,
    ),
]


def normalize_sheet_type(raw_type: str | None) -> SheetType:
    """Map a free-text sheet classification onto :class:`SheetType`."""
    text = re.sub(r"[_\-]+", " ", (raw_type or "").lower())
    for pattern, sheet_type in SHEET_TYPE_RULES:
        if pattern.search(text):
            return sheet_type
    return SheetType.GENERAL


def default_inventory() -> list[SheetInfo]:
    """A single unclassified sheet, used when classification is impossible."""
    return [SheetInfo(page_number=1, sheet_type=SheetType.GENERAL, sheet_name="Unclassified")]


class SheetClassifier:
    """Classifies drawing pages via the document oracle.

    Classification failure is never fatal: the result degrades to a single
    ``general`` sheet and later passes treat the drawings as unclassified.
    """

    def __init__(self, oracle: DocumentOracle) -> None:
        self._oracle = oracle

    async def classify(self, files: Sequence[SourceFile]) -> list[SheetInfo]:
        if not files:
            logger.info("No drawings supplied, using default sheet inventory")
            return default_inventory()

        try:
            data = await self._oracle.invoke_json(CLASSIFICATION_PROMPT, files)
        except (OracleCallError, JsonExtractionError) as exc:
            logger.warning("Sheet classification failed, using default: %s", exc)
            return default_inventory()

        sheets = self._parse_inventory(data)
        if not sheets:
            logger.warning("Sheet classification returned no sheets, using default")
            return default_inventory()
        logger.info("Classified %d sheets", len(sheets))
        return sheets

    @staticmethod
    def _parse_inventory(data: dict[str, Any]) -> list[SheetInfo]:
        entries = data.get("sheetInventory") or data.get("sheets") or []
        if not isinstance(entries, list):
            return []

        sheets: list[SheetInfo] = []
        for idx, entry in enumerate(entries, start=1):
            if not isinstance(entry, dict):
                continue
            raw_type = str(entry.get("sheetType") or entry.get("type") or "")
            try:
                page_number = int(entry.get("pageNumber") or idx)
            except (TypeError, ValueError):
                page_number = idx
            scale = entry.get("scale")
            sheets.append(
                SheetInfo(
                    page_number=page_number,
                    sheet_type=normalize_sheet_type(raw_type),
                    sheet_name=str(entry.get("sheetName") or ""),
                    scale=str(scale) if scale else None,
                    raw_type=raw_type or None,
                )
            )
        return sheets
