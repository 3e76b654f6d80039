"""Tests for project, takeoff and estimate models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from estimo.models.enums import IssueCategory, Severity
from estimo.models.estimate import CostBreakdown, MarkupLine, ValidationIssue, ValidationReport
from estimo.models.project import ProjectInfo, SourceFile
from estimo.models.takeoff import BillOfQuantities, BoqItem, RawMeasurements


def _boq_item(description: str, category: str) -> BoqItem:
    return BoqItem(
        description=description,
        quantity=1.0,
        unit="ton",
        category=category,
        trade="Structural Steel",
        calculation="1 ton",
    )


class TestProjectInfo:
    def test_defaults(self) -> None:
        project = ProjectInfo()
        assert project.project_name == "Untitled Project"
        assert project.area_sf() is None

    def test_currency_uppercased(self) -> None:
        assert ProjectInfo(currency=" inr ").currency == "INR"
        assert ProjectInfo(currency="").currency is None

    def test_area_unit_normalized(self) -> None:
        project = ProjectInfo(total_area=1000, area_unit="m2")
        assert project.area_unit == "sqm"
        assert project.area_sf() == pytest.approx(10763.9)

    def test_area_unit_must_be_an_area(self) -> None:
        with pytest.raises(ValidationError):
            ProjectInfo(area_unit="cy")

    def test_positive_area_and_stories(self) -> None:
        with pytest.raises(ValidationError):
            ProjectInfo(total_area=0)
        with pytest.raises(ValidationError):
            ProjectInfo(stories=0)


class TestSourceFile:
    def test_media_type_from_suffix(self) -> None:
        assert SourceFile("S-101.PDF", b"%PDF").is_pdf
        assert SourceFile("photo.jpg", b"").media_type == "image/jpeg"
        assert SourceFile("notes.txt", b"").media_type == "application/octet-stream"

    def test_explicit_media_type_kept(self) -> None:
        source = SourceFile("scan", b"", media_type="image/png")
        assert source.is_image
        assert not source.is_pdf


class TestBillOfQuantities:
    def test_all_items_in_category_order(self) -> None:
        boq = BillOfQuantities(
            other_items=[_boq_item("Roofing", "other")],
            steel_items=[_boq_item("Beams", "steel")],
        )
        assert [i.description for i in boq.all_items] == ["Beams", "Roofing"]
        assert boq.item_counts()["steel_items"] == 1
        assert boq.item_counts()["discrepancies"] == 0


class TestReports:
    def test_issue_counts(self) -> None:
        issues = [
            ValidationIssue(
                severity=severity,
                category=IssueCategory.ARITHMETIC,
                message="m",
                auto_fixed=fixed,
            )
            for severity, fixed in [
                (Severity.CRITICAL, True),
                (Severity.CRITICAL, False),
                (Severity.WARNING, False),
                (Severity.INFO, True),
            ]
        ]
        report = ValidationReport(issues=issues)
        assert (report.error_count, report.warning_count, report.auto_fix_count) == (2, 1, 2)

    def test_markup_percent_total(self) -> None:
        breakdown = CostBreakdown(
            overhead=MarkupLine(percent=6.0), profit=MarkupLine(percent=8.5)
        )
        assert breakdown.total_markup_percent() == 14.5
        assert list(breakdown.markups()) == [
            "general_conditions",
            "overhead",
            "profit",
            "contingency",
            "escalation",
        ]

    def test_raw_measurements_has_data(self) -> None:
        assert not RawMeasurements().has_data
        assert RawMeasurements(dimension_count=3).has_data
