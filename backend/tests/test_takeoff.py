"""Tests for pass 3 quantity takeoff — deterministic, no mocks needed."""

from __future__ import annotations

from typing import Any

import pytest

from estimo.models.enums import UnitSystem
from estimo.models.project import ProjectInfo
from estimo.models.takeoff import ExtractionRecord, RawMeasurements
from estimo.services.takeoff import (
    MemberTakeoff,
    QuantityTakeoffEngine,
    reconcile_members,
)

# ---------------------------------------------------------------------------
# Fixtures / helpers
# ---------------------------------------------------------------------------


def _make_record(**sections: Any) -> ExtractionRecord:
    return ExtractionRecord(**sections)


def _make_project(**overrides: Any) -> ProjectInfo:
    defaults: dict[str, Any] = {
        "project_name": "Test Warehouse",
        "location": "Houston, TX",
        "project_type": "warehouse",
    }
    defaults.update(overrides)
    return ProjectInfo(**defaults)


_COLUMNS_PLAN = {"columns": [{"mark": "C1", "size": "W14x90", "count": 12, "typicalHeight": "20'"}]}
_COLUMNS_SCHEDULE = {"columnSchedule": [{"mark": "C1", "size": "W14X90", "count": 14}]}
_FOOTINGS = {
    "concreteGrade": "4000 psi",
    "footings": [
        {"mark": "F1", "width": "6'-0\"", "length": "6'-0\"", "depth": "2'-0\"", "count": 10}
    ],
}


@pytest.fixture()
def engine() -> QuantityTakeoffEngine:
    return QuantityTakeoffEngine()


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestReconcileMembers:
    def test_higher_count_wins_with_discrepancy(self) -> None:
        plan = [MemberTakeoff("column", "C1", "W14x90", 12, 20.0)]
        schedule = [MemberTakeoff("column", "C1", "W14X90", 14, None, source="schedule")]

        members, discrepancies = reconcile_members(plan, schedule)

        assert len(members) == 1
        assert members[0].count == 14
        assert members[0].source == "plan+schedule"
        assert len(discrepancies) == 1
        d = discrepancies[0]
        assert (d.plan_count, d.schedule_count, d.used_count) == (12, 14, 14)
        assert d.message == "C1 W14x90: plan shows 12, schedule shows 14; using 14"

    def test_matching_counts_have_no_discrepancy(self) -> None:
        plan = [MemberTakeoff("beam", "B1", "W24x68", 8, 30.0)]
        schedule = [MemberTakeoff("beam", "b1", None, 8, None, source="schedule")]
        members, discrepancies = reconcile_members(plan, schedule)
        assert members[0].count == 8
        assert discrepancies == []

    def test_match_by_size_when_unmarked(self) -> None:
        plan = [MemberTakeoff("beam", None, "W24 x 68", 4, 30.0)]
        schedule = [MemberTakeoff("beam", None, "W24X68", 6, None, source="schedule")]
        members, discrepancies = reconcile_members(plan, schedule)
        assert members[0].count == 6
        assert len(discrepancies) == 1

    def test_schedule_only_member_kept(self) -> None:
        schedule = [MemberTakeoff("joist", "J1", "W12x26", 20, 25.0, source="schedule")]
        members, _ = reconcile_members([], schedule)
        assert members == schedule


class TestSteelTakeoff:
    def test_column_count_reconciled_and_traced(self, engine: QuantityTakeoffEngine) -> None:
        record = _make_record(structural=_COLUMNS_PLAN, schedule=_COLUMNS_SCHEDULE)

        boq = engine.compute(record, _make_project())

        assert boq.unit_system == UnitSystem.IMPERIAL
        assert len(boq.discrepancies) == 1
        column = boq.steel_items[0]
        assert column.quantity == pytest.approx(12.98)
        assert column.unit == "ton"
        assert column.description == "Structural steel columns C1 W14x90 (medium, 90 lb/ft)"
        assert column.calculation == (
            "14 × 90 lb/ft × 20 ft = 25,200 lbs = 12.60 tons; +3% waste = 12.98 tons"
        )

    def test_connection_allowance(self, engine: QuantityTakeoffEngine) -> None:
        record = _make_record(structural=_COLUMNS_PLAN)
        boq = engine.compute(record, _make_project())

        connections = boq.steel_items[-1]
        assert connections.element == "connections"
        main = boq.steel_items[0].quantity
        assert connections.quantity == pytest.approx(round(main * 0.10, 2))

    def test_column_height_from_elevations(self, engine: QuantityTakeoffEngine) -> None:
        record = _make_record(
            structural={"columns": [{"mark": "C2", "size": "W12x50", "count": 4}]},
            elevation={"heights": {"eaveHeight": "24'"}},
        )
        boq = engine.compute(record, _make_project())
        assert boq.steel_items[0].quantity == pytest.approx(round(4 * 50 * 24 / 2000 * 1.03, 2))
        assert any("height taken from elevations" in n for n in boq.notes)

    def test_missing_count_is_noted_not_guessed(self, engine: QuantityTakeoffEngine) -> None:
        record = _make_record(structural={"beams": [{"mark": "B9", "size": "W24x68"}]})
        boq = engine.compute(record, _make_project())
        assert boq.steel_items == []
        assert any("B9" in n and "no count" in n for n in boq.notes)

    def test_metric_units_for_non_usd(self, engine: QuantityTakeoffEngine) -> None:
        record = _make_record(
            structural={"columns": [{"mark": "C1", "size": "ISMB300", "count": 10, "height": "6 m"}]}
        )
        boq = engine.compute(record, _make_project(location="Pune, India"))

        assert boq.unit_system == UnitSystem.METRIC
        assert boq.currency == "INR"
        assert boq.steel_items[0].unit == "mt"
        assert boq.steel_items[0].quantity == pytest.approx(2.73)

    def test_sections_in_text_without_counts_noted(self, engine: QuantityTakeoffEngine) -> None:
        record = _make_record(structural=_COLUMNS_PLAN)
        measurements = RawMeasurements(steel_sections=["W14X90", "W24X68"])
        boq = engine.compute(record, _make_project(), measurements)
        assert any("W24X68" in n and "W14X90" not in n for n in boq.notes)


class TestConcreteAndRebar:
    def test_footing_volume_and_trace(self, engine: QuantityTakeoffEngine) -> None:
        boq = engine.compute(_make_record(foundation=_FOOTINGS), _make_project())

        footing = boq.concrete_items[0]
        assert footing.description == "Concrete spread footings F1 (4000psi)"
        assert footing.quantity == pytest.approx(28.0)
        assert footing.unit == "cy"
        assert footing.trade == "Foundation"
        assert footing.calculation == (
            "10 × 6 ft × 6 ft × 2 ft = 720.0 CF = 26.67 CY; +5% waste = 28 CY"
        )

    def test_metric_footing_volume_and_trace(self, engine: QuantityTakeoffEngine) -> None:
        boq = engine.compute(
            _make_record(foundation=_FOOTINGS), _make_project(location="Pune, India")
        )

        footing = boq.concrete_items[0]
        assert footing.unit == "cum"
        assert footing.quantity == pytest.approx(21.41)
        assert footing.calculation == (
            "10 × 1.83 m × 1.83 m × 0.61 m = 20.39 m³; +5% waste = 21.41 m³"
        )

    def test_rebar_from_intensity(self, engine: QuantityTakeoffEngine) -> None:
        boq = engine.compute(_make_record(foundation=_FOOTINGS), _make_project())

        assert len(boq.rebar_items) == 1
        rebar = boq.rebar_items[0]
        assert rebar.description == "Reinforcing steel for footings (Grade 60)"
        assert rebar.quantity == pytest.approx(1.80)
        assert rebar.grade == "grade60"

    def test_missing_dimension_is_noted(self, engine: QuantityTakeoffEngine) -> None:
        record = _make_record(
            foundation={"footings": [{"mark": "F2", "width": "5'", "length": "5'", "count": 4}]}
        )
        boq = engine.compute(record, _make_project())
        assert boq.concrete_items == []
        assert any("F2" in n and "depth" in n for n in boq.notes)

    def test_slab_on_grade(self, engine: QuantityTakeoffEngine) -> None:
        record = _make_record(
            foundation={"slabOnGrade": {"thickness": "6\"", "area": "10,800 sf"}}
        )
        boq = engine.compute(record, _make_project())
        slab = boq.concrete_items[0]
        assert slab.element == "slab_on_grade"
        assert slab.quantity == pytest.approx(round(10800 * 0.5 / 27 * 1.05, 2))


class TestAllowances:
    def test_area_allowances(self, engine: QuantityTakeoffEngine) -> None:
        boq = engine.compute(_make_record(), _make_project(total_area=12000, stories=2))

        descriptions = [i.description for i in boq.other_items]
        assert len(boq.other_items) == 6
        assert descriptions[0].startswith("Roofing")
        assert boq.other_items[0].quantity == 6000
        assert "Plumbing allowance" in descriptions
        assert boq.other_items[-1].quantity == 6000

    def test_no_area_no_allowances(self, engine: QuantityTakeoffEngine) -> None:
        boq = engine.compute(_make_record(), _make_project())
        assert boq.other_items == []
        assert any("area unknown" in n for n in boq.notes)

    def test_area_from_drawing_text(self, engine: QuantityTakeoffEngine) -> None:
        measurements = RawMeasurements(areas_sf=[8000.0, 12000.0])
        boq = engine.compute(_make_record(), _make_project(), measurements)
        mep = [i for i in boq.other_items if i.category == "mep"]
        assert mep[0].quantity == 12000
