"""Tests for unit normalization, conversion and drawing-dimension parsing."""

from __future__ import annotations

import pytest

from estimo.units import (
    convert_quantity,
    convert_rate,
    cum_to_cy,
    cy_to_cum,
    dimension,
    normalize_unit,
    parse_area_sf,
    parse_dimensions_ft,
    parse_length_ft,
    sqft_to_sqm,
    sqm_to_sqft,
)


class TestNormalizeUnit:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Sq. Ft.", "sf"),
            ("SQFT", "sf"),
            ("m²", "sqm"),
            ("per m³", "cum"),
            ("/ton", "ton"),
            ("Tonnes", "mt"),
            ("MT", "mt"),
            ("Nos", "ea"),
            ("Lump Sum", "ls"),
        ],
    )
    def test_aliases(self, raw: str, expected: str) -> None:
        assert normalize_unit(raw) == expected

    def test_empty_is_empty(self) -> None:
        assert normalize_unit(None) == ""
        assert normalize_unit("") == ""

    def test_unknown_is_cleaned_not_dropped(self) -> None:
        assert normalize_unit("  Bags ") == "bags"


class TestConversion:
    def test_dimension(self) -> None:
        assert dimension("sqm") == "area"
        assert dimension("kg") == "mass"
        assert dimension("bags") is None

    def test_cubic_yard_to_cubic_feet(self) -> None:
        assert convert_quantity(1.0, "cy", "cf") == pytest.approx(27.0)

    def test_tonne_to_short_ton(self) -> None:
        assert convert_quantity(1.0, "mt", "ton") == pytest.approx(1.10231, rel=1e-4)

    def test_different_dimensions_return_none(self) -> None:
        assert convert_quantity(1.0, "sf", "cy") is None
        assert convert_quantity(1.0, "ls", "ea") is None

    def test_rate_per_sqm_to_per_sf(self) -> None:
        assert convert_rate(107.639, "sqm", "sf") == pytest.approx(10.0)

    def test_rate_not_convertible(self) -> None:
        assert convert_rate(10.0, "ton", "sf") is None

    def test_sqft_to_sqm(self) -> None:
        assert sqft_to_sqm(10.7639) == pytest.approx(1.0)
        assert cy_to_cum(1.0) == pytest.approx(0.7646)

    @pytest.mark.parametrize("value", [1.0, 1234.5, 98765.4321])
    def test_area_round_trip(self, value: float) -> None:
        assert sqm_to_sqft(sqft_to_sqm(value)) == pytest.approx(value, rel=1e-4)
        assert sqft_to_sqm(sqm_to_sqft(value)) == pytest.approx(value, rel=1e-4)

    @pytest.mark.parametrize("value", [1.0, 1234.5, 98765.4321])
    def test_volume_round_trip(self, value: float) -> None:
        assert cum_to_cy(cy_to_cum(value)) == pytest.approx(value, rel=1e-4)
        assert cy_to_cum(cum_to_cy(value)) == pytest.approx(value, rel=1e-4)


class TestParseLength:
    def test_feet_and_inches(self) -> None:
        assert parse_length_ft("30'-6\"") == pytest.approx(30.5)

    def test_millimetres(self) -> None:
        assert parse_length_ft("9144mm") == pytest.approx(30.0, rel=1e-3)

    def test_bare_numbers(self) -> None:
        assert parse_length_ft(30) == 30.0
        assert parse_length_ft(9144) == pytest.approx(30.0, rel=1e-3)

    def test_unreadable(self) -> None:
        assert parse_length_ft("TBD") is None
        assert parse_length_ft(None) is None
        assert parse_length_ft(True) is None

    def test_area_metric_text(self) -> None:
        assert parse_area_sf("1,115 m²") == pytest.approx(1115 * 10.7639)

    def test_area_rejects_non_positive(self) -> None:
        assert parse_area_sf(0) is None

    def test_dimensions(self) -> None:
        assert parse_dimensions_ft("6'-0\" x 6'-0\" x 2'-0\"") == pytest.approx([6.0, 6.0, 2.0])
