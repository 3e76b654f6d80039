"""Tests for the single-pass fallback estimator."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from estimo.exceptions import CostEstimationError, OracleCallError
from estimo.models.enums import RateSource
from estimo.models.project import ProjectInfo
from estimo.services.quick_estimator import QuickEstimator, parse_markups, parse_trades

# ---------------------------------------------------------------------------
# Fixtures / helpers
# ---------------------------------------------------------------------------

_DRAFT: dict[str, Any] = {
    "trades": [
        {
            "tradeName": "Structural Steel",
            "subtotal": 30000,
            "lineItems": [
                {
                    "description": "Structural steel framing",
                    "quantity": 10,
                    "unit": "tons",
                    "unitRate": 3000,
                    "lineTotal": 30000,
                }
            ],
        },
        {"tradeName": "Empty", "lineItems": []},
        "not a trade",
    ],
    "markups": {"overheadPercent": 10},
    "grandTotal": 999,
    "assumptions": ["Steel frame assumed"],
}


def _make_oracle(response: Any = None, error: Exception | None = None) -> MagicMock:
    oracle = MagicMock()
    oracle.invoke_json = AsyncMock(return_value=response, side_effect=error)
    return oracle


def _make_project(**overrides: Any) -> ProjectInfo:
    defaults: dict[str, Any] = {
        "project_name": "Warehouse",
        "location": "Houston, TX",
        "project_type": "warehouse",
        "total_area": 10000,
    }
    defaults.update(overrides)
    return ProjectInfo(**defaults)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestParseTrades:
    def test_malformed_entries_dropped(self) -> None:
        trades = parse_trades(_DRAFT["trades"])
        assert [t.trade_name for t in trades] == ["Structural Steel"]
        item = trades[0].line_items[0]
        assert item.unit == "ton"
        assert item.rate_source == RateSource.EST

    def test_not_a_list(self) -> None:
        assert parse_trades({"tradeName": "x"}) == []
        assert parse_trades(None) == []

    def test_line_total_computed_when_missing(self) -> None:
        trades = parse_trades(
            [
                {
                    "name": "Finishes",
                    "lineItems": [
                        {"description": "Paint", "quantity": "1,000", "unitRate": "2.5"}
                    ],
                }
            ]
        )
        item = trades[0].line_items[0]
        assert (item.quantity, item.unit, item.line_total) == (1000.0, "ls", 2500.0)
        assert trades[0].subtotal == 2500.0


class TestParseMarkups:
    def test_camel_case_keys(self) -> None:
        assert parse_markups({"overheadPercent": 10, "generalConditions": "7", "bogus": 3}) == {
            "overhead": 10.0,
            "general_conditions": 7.0,
        }

    def test_not_a_dict(self) -> None:
        assert parse_markups([1, 2]) == {}


class TestQuickEstimator:
    def test_draft_is_arithmetic_checked(self) -> None:
        estimator = QuickEstimator(_make_oracle(_DRAFT))

        estimate = asyncio.run(estimator.estimate(_make_project()))

        # defaults 7/6/8/7/2 with overhead raised to 10 => 34%
        assert estimate.summary.grand_total == pytest.approx(40200.0)
        assert estimate.summary.currency == "USD"
        assert estimate.metadata.analysis_method == "single_pass"
        assert estimate.metadata.location_factor == 0.92
        assert estimate.validation_report is not None
        assert estimate.summary.confidence_score is not None
        assert "Steel frame assumed" in estimate.assumptions

    def test_currency_from_location(self) -> None:
        estimator = QuickEstimator(_make_oracle(_DRAFT))
        estimate = asyncio.run(estimator.estimate(_make_project(location="Mumbai, India")))
        assert estimate.summary.currency == "INR"

    def test_oracle_failure(self) -> None:
        estimator = QuickEstimator(_make_oracle(error=OracleCallError("timeout")))
        with pytest.raises(CostEstimationError, match="Fallback estimate request failed"):
            asyncio.run(estimator.estimate(_make_project()))

    def test_no_usable_trades(self) -> None:
        estimator = QuickEstimator(_make_oracle({"trades": []}))
        with pytest.raises(CostEstimationError, match="no priced trades"):
            asyncio.run(estimator.estimate(_make_project()))
