"""Project input models for the Estimo estimation pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath

from pydantic import BaseModel, Field, field_validator

from estimo.units import convert_quantity, normalize_unit

_MEDIA_TYPES: dict[str, str] = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


class ProjectInfo(BaseModel):
    """Project metadata supplied alongside the drawings.

    This is the only input the single-pass fallback needs; everything else
    in the pipeline is derived from the drawings.
    """

    project_name: str = "Untitled Project"
    location: str = ""
    project_type: str = "commercial"
    total_area: float | None = Field(default=None, gt=0)
    area_unit: str = "sf"
    currency: str | None = None
    structural_system: str | None = None
    stories: int | None = Field(default=None, ge=1)
    markups: dict[str, float] = Field(default_factory=dict)
    notes: str | None = None

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str | None) -> str | None:
        return v.strip().upper() if v else None

    @field_validator("area_unit")
    @classmethod
    def canonical_area_unit(cls, v: str) -> str:
        unit = normalize_unit(v)
        if unit not in ("sf", "sqm"):
            msg = f"area_unit must be square feet or square metres, got {v!r}"
            raise ValueError(msg)
        return unit

    def area_sf(self) -> float | None:
        """Return the total area in square feet, or None if unknown."""
        if not self.total_area:
            return None
        return convert_quantity(self.total_area, self.area_unit, "sf")


@dataclass(frozen=True)
class SourceFile:
    """A drawing or document handed to the pipeline."""

    filename: str
    content: bytes
    media_type: str = ""

    def __post_init__(self) -> None:
        if not self.media_type:
            suffix = PurePath(self.filename).suffix.lower()
            object.__setattr__(
                self, "media_type", _MEDIA_TYPES.get(suffix, "application/octet-stream")
            )

    @property
    def is_pdf(self) -> bool:
        return self.media_type == "application/pdf"

    @property
    def is_image(self) -> bool:
        return self.media_type.startswith("image/")
