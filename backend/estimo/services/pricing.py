"""Cost application (pass 4) — prices a bill of quantities.

The CostApplicationEngine prices a bill of quantities bottom-up:

1. **Rate matching** — Map each BOQ item to a rate category and subtype via
   the ordered rule table in :mod:`estimo.services.rate_rules`.
2. **Location adjustment** — Multiply the database rate by the location
   factor of the project's city (or country), then convert it into the
   item's unit.
3. **Estimated rates** — When no exact record applies, estimate from a
   same-category record in the currency, then from the USD record at a
   fixed parity. Estimated rates are tagged ``EST``.
4. **Roll-up** — Line totals, trade subtotals and direct costs.
5. **Markups** — General conditions, overhead, profit, contingency and
   escalation, from the project or the defaults.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from estimo.data.labor import DEFAULT_MARKUPS
from estimo.data.rates import RATE_DATA_VERSION
from estimo.data.repository import RateRepository
from estimo.models.enums import RateSource
from estimo.models.estimate import (
    MARKUP_FIELDS,
    CostBreakdown,
    Estimate,
    EstimateMetadata,
    EstimateSummary,
    LineItem,
    MarkupLine,
    Trade,
)
from estimo.services.rate_rules import estimate_rate, match_rate, resolve_db_rate

if TYPE_CHECKING:
    from estimo.models.project import ProjectInfo
    from estimo.models.takeoff import BillOfQuantities, BoqItem

logger = logging.getLogger(__name__)

ENGINE_VERSION = "0.1.0"

# Trades in presentation order; anything else follows in first-seen order.
TRADE_ORDER: tuple[str, ...] = (
    "Structural Steel",
    "Foundation",
    "Concrete",
    "Roofing",
    "Exterior Cladding",
    "MEP",
    "Sitework",
    "Finishes",
)


class CostApplicationEngine:
    """Prices a :class:`BillOfQuantities` into an :class:`Estimate`.

    Args:
        repository: Rate, location and benchmark lookups. Defaults to the
            built-in reference tables.

    Example::

        engine = CostApplicationEngine()
        estimate = engine.apply(boq, ProjectInfo(location="Houston, TX"))
    """

    def __init__(self, repository: RateRepository | None = None) -> None:
        self._repository = repository or RateRepository()

    def apply(self, boq: BillOfQuantities, project: ProjectInfo) -> Estimate:
        """Price every BOQ item and assemble trades, markups and totals.

        Args:
            boq: Quantities from the takeoff pass.
            project: Project metadata (location, area, declared markups).

        Returns:
            A fresh Estimate; ``boq`` is not modified.
        """
        currency = boq.currency
        location = self._repository.lookup_location_factor(project.location)
        # A city factor only means something in its own currency.
        factor = location.factor if location.currency == currency else 1.0

        # 1-3. Price each item
        by_trade: dict[str, list[LineItem]] = {}
        db_count = est_count = 0
        for item in boq.all_items:
            line = self._price_item(item, currency, factor)
            if line.rate_source == RateSource.DB:
                db_count += 1
            else:
                est_count += 1
            by_trade.setdefault(item.trade, []).append(line)

        # 4. Roll up
        names = [t for t in TRADE_ORDER if t in by_trade]
        names += [t for t in by_trade if t not in TRADE_ORDER]
        trades = [
            Trade(
                trade_name=name,
                subtotal=round(sum(li.line_total for li in by_trade[name]), 2),
                line_items=by_trade[name],
            )
            for name in names
        ]
        direct = round(sum(t.subtotal for t in trades), 2)
        for trade in trades:
            trade.percent_of_total = round(trade.subtotal / direct * 100, 1) if direct else 0.0

        # 5. Markups
        breakdown = build_cost_breakdown(direct, resolve_markups(project.markups))

        grand_total = breakdown.total_with_markups
        summary = EstimateSummary(
            project_name=project.project_name,
            location=project.location,
            project_type=project.project_type,
            total_area=project.total_area,
            area_unit=project.area_unit,
            currency=currency,
            grand_total=grand_total,
            cost_per_unit_area=(
                round(grand_total / project.total_area, 2) if project.total_area else None
            ),
        )
        metadata = EstimateMetadata(
            engine_version=ENGINE_VERSION,
            rate_data_version=RATE_DATA_VERSION,
            location_factor=factor,
            location_country=location.country,
            rate_source_breakdown={"database": db_count, "estimated": est_count},
        )

        logger.info(
            "Priced %d items (%d DB, %d EST): direct %.2f, total %.2f %s",
            db_count + est_count,
            db_count,
            est_count,
            direct,
            grand_total,
            currency,
        )
        return Estimate(
            summary=summary,
            trades=trades,
            cost_breakdown=breakdown,
            metadata=metadata,
            assumptions=self._assumptions(boq, factor, location.country),
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _price_item(self, item: BoqItem, currency: str, factor: float) -> LineItem:
        match = match_rate(item.description, item.unit, currency, self._repository)
        resolved = resolve_db_rate(match, item.unit, currency, factor, self._repository)
        if resolved is None:
            resolved = estimate_rate(match, item.unit, currency, factor, self._repository)
            if resolved.rate == 0:
                logger.warning("No rate for %r (%s), priced at zero", item.description, item.unit)

        unit_rate = round(resolved.rate, 2)
        return LineItem(
            description=item.description,
            quantity=item.quantity,
            unit=item.unit,
            unit_rate=unit_rate,
            line_total=round(item.quantity * unit_rate, 2),
            rate_source=resolved.source,
            calculation=item.calculation,
        )

    @staticmethod
    def _assumptions(boq: BillOfQuantities, factor: float, country: str) -> list[str]:
        assumptions = [
            "Unit rates are installed costs (material, labor and equipment).",
            f"Location factor {factor:.2f} applied ({country}).",
            "Quantities include waste: steel 3%, concrete 5%, rebar 7%; "
            "connections at 10% of main steel.",
        ]
        assumptions += [f"Count discrepancy: {d.message}" for d in boq.discrepancies]
        assumptions += boq.notes
        return assumptions


def resolve_markups(declared: dict[str, float] | None) -> dict[str, float]:
    """Declared markup percents over the defaults; zero or unknown keys ignored."""
    percents = dict(DEFAULT_MARKUPS)
    for name, value in (declared or {}).items():
        if name in MARKUP_FIELDS and value:
            percents[name] = float(value)
    return percents


def build_cost_breakdown(direct: float, percents: dict[str, float]) -> CostBreakdown:
    """Apply markup percents to *direct* and total them."""
    lines = {
        name: MarkupLine(
            percent=percents.get(name, 0.0),
            amount=round(direct * percents.get(name, 0.0) / 100, 2),
        )
        for name in MARKUP_FIELDS
    }
    total_markups = round(sum(m.amount for m in lines.values()), 2)
    return CostBreakdown(
        direct_costs=direct,
        total_markups=total_markups,
        total_with_markups=round(direct + total_markups, 2),
        **lines,
    )
