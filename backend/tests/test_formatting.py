"""Tests for formatting helpers and the estimate summary dict."""

from __future__ import annotations

from estimo.formatting import format_currency, format_number, format_quantity
from estimo.models.enums import ConfidenceLevel
from estimo.models.estimate import Estimate, EstimateMetadata, EstimateSummary, Trade
from estimo.services.pricing import build_cost_breakdown


class TestFormatCurrency:
    def test_large_amount_no_cents(self) -> None:
        assert format_currency(1_234_567.89) == "$1,234,568"

    def test_small_amount_with_cents(self) -> None:
        assert format_currency(9876.54) == "$9,876.54"

    def test_other_currencies(self) -> None:
        assert format_currency(78750, "INR") == "₹78,750"
        assert format_currency(500, "AED") == "AED 500.00"
        assert format_currency(500, "XYZ") == "XYZ 500.00"

    def test_negative(self) -> None:
        assert format_currency(-25_000) == "-$25,000"


class TestFormatQuantity:
    def test_integers_drop_decimals(self) -> None:
        assert format_number(25200.0) == "25,200"
        assert format_number(12.6) == "12.60"

    def test_display_units(self) -> None:
        assert format_quantity(12.98, "ton") == "12.98 tons"
        assert format_quantity(28, "cy") == "28 CY"
        assert format_quantity(3, "furlong") == "3 furlong"


class TestSummaryDict:
    def test_top_trades_and_formatting(self) -> None:
        trades = [
            Trade(trade_name=name, subtotal=amount, percent_of_total=pct)
            for name, amount, pct in [
                ("Sitework", 5000.0, 5.0),
                ("MEP", 30000.0, 30.0),
                ("Structural Steel", 40000.0, 40.0),
                ("Finishes", 25000.0, 25.0),
            ]
        ]
        breakdown = build_cost_breakdown(100000.0, {"profit": 10.0})
        estimate = Estimate(
            summary=EstimateSummary(
                project_name="Office",
                grand_total=breakdown.total_with_markups,
                confidence_level=ConfidenceLevel.MEDIUM,
            ),
            trades=trades,
            cost_breakdown=breakdown,
            metadata=EstimateMetadata(engine_version="0.1.0", rate_data_version="test"),
        )

        summary = estimate.to_summary_dict()

        assert summary["grand_total_formatted"] == "$110,000"
        assert summary["direct_costs_formatted"] == "$100,000"
        assert summary["confidence_level"] == "Medium"
        assert summary["num_trades"] == 4
        assert [t["trade_name"] for t in summary["top_trades"]] == [
            "Structural Steel",
            "MEP",
            "Finishes",
        ]
        assert summary["issues"] == 0
        assert summary["fallback"] is False
