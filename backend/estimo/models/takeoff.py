"""Drawing-extraction and bill-of-quantities models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from estimo.models.enums import SheetType, UnitSystem


class SheetInfo(BaseModel):
    """One classified drawing sheet."""

    page_number: int = 1
    sheet_type: SheetType = SheetType.GENERAL
    sheet_name: str = ""
    scale: str | None = None
    raw_type: str | None = None


class ExtractionMeta(BaseModel):
    sheet_count: int = 0
    groups_processed: list[str] = Field(default_factory=list)
    groups_failed: list[str] = Field(default_factory=list)


class ExtractionRecord(BaseModel):
    """Canonical structural-data record merged from all extraction groups.

    Section contents are kept as the oracle returned them (camelCase keys,
    loosely typed values); the takeoff engine reads them defensively.
    """

    structural: dict[str, Any] = Field(default_factory=dict)
    foundation: dict[str, Any] = Field(default_factory=dict)
    schedule: dict[str, Any] = Field(default_factory=dict)
    elevation: dict[str, Any] = Field(default_factory=dict)
    dimensions: dict[str, Any] = Field(default_factory=dict)
    material_specs: list[Any] = Field(default_factory=list)
    design_loads: dict[str, Any] = Field(default_factory=dict)
    extraction_meta: ExtractionMeta = Field(default_factory=ExtractionMeta)


class RawMeasurements(BaseModel):
    """Measurements pulled from drawing text by pattern matching alone.

    Independent of the oracle's structured output, so it can be used to
    cross-check it.
    """

    steel_sections: list[str] = Field(default_factory=list)
    concrete_grades: list[str] = Field(default_factory=list)
    areas_sf: list[float] = Field(default_factory=list)
    heights_ft: list[float] = Field(default_factory=list)
    loads: list[str] = Field(default_factory=list)
    dimension_count: int = 0
    confidence_score: int = 0
    confidence_level: str = "LOW"
    confidence_note: str = ""

    @property
    def has_data(self) -> bool:
        return bool(
            self.steel_sections
            or self.concrete_grades
            or self.areas_sf
            or self.dimension_count
        )


class BoqItem(BaseModel):
    """A single bill-of-quantities row with its calculation trace."""

    description: str
    quantity: float
    unit: str
    category: str
    trade: str
    calculation: str
    source: str = "plan"
    mark: str | None = None
    section: str | None = None
    element: str | None = None
    grade: str | None = None


class Discrepancy(BaseModel):
    """A plan-vs-schedule count disagreement found during takeoff."""

    mark: str
    size: str | None = None
    plan_count: int
    schedule_count: int
    used_count: int
    message: str


class BillOfQuantities(BaseModel):
    """Quantities derived from the drawings, before pricing."""

    unit_system: UnitSystem = UnitSystem.IMPERIAL
    currency: str = "USD"
    steel_items: list[BoqItem] = Field(default_factory=list)
    concrete_items: list[BoqItem] = Field(default_factory=list)
    rebar_items: list[BoqItem] = Field(default_factory=list)
    other_items: list[BoqItem] = Field(default_factory=list)
    discrepancies: list[Discrepancy] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)

    @property
    def all_items(self) -> list[BoqItem]:
        return [
            *self.steel_items,
            *self.concrete_items,
            *self.rebar_items,
            *self.other_items,
        ]

    def item_counts(self) -> dict[str, int]:
        return {
            "steel_items": len(self.steel_items),
            "concrete_items": len(self.concrete_items),
            "rebar_items": len(self.rebar_items),
            "other_items": len(self.other_items),
            "discrepancies": len(self.discrepancies),
        }
