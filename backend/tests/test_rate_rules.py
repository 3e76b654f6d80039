"""Tests for matching priced items onto rate-database records."""

from __future__ import annotations

import pytest

from estimo.data.repository import RateRepository
from estimo.models.enums import RateSource
from estimo.services.rate_rules import (
    RateMatch,
    estimate_rate,
    match_rate,
    resolve_db_rate,
)


@pytest.fixture()
def repo() -> RateRepository:
    return RateRepository()


class TestMatchRate:
    @pytest.mark.parametrize(
        ("description", "unit", "expected"),
        [
            ("Structural steel medium", "ton", RateMatch("structural_steel", "medium")),
            ("Structural steel beams B1 W24x68", "ton", RateMatch("structural_steel", "medium")),
            ("Structural steel columns C3 W14x120", "ton", RateMatch("structural_steel", "heavy")),
            ("HSS braces", "ton", RateMatch("structural_steel", "hss")),
            ("Misc steel connections, plates & angles", "ton", RateMatch("structural_steel", "misc_steel")),
            ("Concrete spread footings F1 (4000psi)", "cy", RateMatch("concrete", "4000psi")),
            ("Reinforcing steel for footings (Grade 60)", "ton", RateMatch("rebar", "grade60")),
            ("Concrete slab on grade", "sf", RateMatch("concrete", "slab_on_grade")),
            ("HVAC (mechanical) allowance", "sf", RateMatch("mep", "hvac")),
            ("Fire protection (sprinklers) allowance", "sqm", RateMatch("mep", "fire_protection")),
        ],
    )
    def test_rules(
        self, repo: RateRepository, description: str, unit: str, expected: RateMatch
    ) -> None:
        assert match_rate(description, unit, "USD", repo) == expected

    def test_dimension_must_agree(self, repo: RateRepository) -> None:
        # A steel description priced per square foot is not a tonnage rate.
        assert match_rate("Structural steel framing", "sf", "USD", repo) is None

    def test_unknown_unit(self, repo: RateRepository) -> None:
        assert match_rate("Concrete", "bags", "USD", repo) is None

    def test_grade_mapped_across_systems(self, repo: RateRepository) -> None:
        match = match_rate("Concrete footings (4000psi)", "cum", "INR", repo)
        assert match == RateMatch("concrete", "M30")

    def test_peb_only_where_rated(self, repo: RateRepository) -> None:
        assert match_rate("PEB rafters", "mt", "INR", repo) == RateMatch("structural_steel", "peb")
        assert match_rate("PEB rafters", "ton", "USD", repo) == RateMatch(
            "structural_steel", "medium"
        )


class TestResolveDbRate:
    def test_location_factor_applied(self, repo: RateRepository) -> None:
        resolved = resolve_db_rate(
            RateMatch("structural_steel", "medium"), "ton", "USD", 0.92, repo
        )
        assert resolved is not None
        assert resolved.source == RateSource.DB
        assert resolved.rate == pytest.approx(2760.0)
        assert resolved.low == pytest.approx(2300.0)
        assert resolved.high == pytest.approx(3220.0)

    def test_converted_into_item_unit(self, repo: RateRepository) -> None:
        resolved = resolve_db_rate(
            RateMatch("structural_steel", "medium"), "mt", "USD", 1.0, repo
        )
        assert resolved is not None
        assert resolved.rate == pytest.approx(3000 / 0.907185)

    def test_missing_record(self, repo: RateRepository) -> None:
        assert resolve_db_rate(RateMatch("concrete", None), "cy", "USD", 1.0, repo) is None
        assert resolve_db_rate(None, "cy", "USD", 1.0, repo) is None
        assert resolve_db_rate(RateMatch("concrete", "4000psi"), "ea", "USD", 1.0, repo) is None


class TestEstimateRate:
    def test_same_category_record(self, repo: RateRepository) -> None:
        resolved = estimate_rate(RateMatch("structural_steel", "peb"), "ton", "USD", 1.0, repo)
        assert resolved.source == RateSource.EST
        assert resolved.rate == pytest.approx(3800.0)

    def test_usd_parity_for_unrated_currency(self, repo: RateRepository) -> None:
        resolved = estimate_rate(RateMatch("structural_steel", "medium"), "ton", "SAR", 1.0, repo)
        assert resolved.source == RateSource.EST
        assert resolved.rate == pytest.approx(3000 * 3.75)

    def test_nothing_matches(self, repo: RateRepository) -> None:
        resolved = estimate_rate(None, "ea", "USD", 1.0, repo)
        assert resolved.rate == 0.0
        assert resolved.source == RateSource.EST
