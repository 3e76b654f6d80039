"""Single-pass fallback estimator — a draft estimate from project metadata alone.

Used when the multi-pass pipeline fails. The oracle drafts trades and line
items from the project description; the draft is then put through the
arithmetic check, so its totals are consistent even though its rates are
unverified.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from estimo.data.rates import RATE_DATA_VERSION
from estimo.data.repository import RateRepository
from estimo.exceptions import CostEstimationError, JsonExtractionError, OracleCallError
from estimo.models.enums import RateSource
from estimo.models.estimate import (
    MARKUP_FIELDS,
    Estimate,
    EstimateMetadata,
    EstimateSummary,
    LineItem,
    Trade,
)
from estimo.services.pricing import ENGINE_VERSION, build_cost_breakdown, resolve_markups
from estimo.services.prompts import build_fallback_estimate_prompt
from estimo.services.validation import ValidationEngine
from estimo.units import normalize_unit

if TYPE_CHECKING:
    from estimo.models.project import ProjectInfo
    from estimo.services.oracle import DocumentOracle

logger = logging.getLogger(__name__)

_MARKUP_KEYS: dict[str, str] = {
    "generalConditions": "general_conditions",
    "generalConditionsPercent": "general_conditions",
    "overhead": "overhead",
    "overheadPercent": "overhead",
    "profit": "profit",
    "profitPercent": "profit",
    "contingency": "contingency",
    "contingencyPercent": "contingency",
    "escalation": "escalation",
    "escalationPercent": "escalation",
}


class QuickEstimator:
    """Drafts an estimate from :class:`ProjectInfo` without drawings.

    Parameters
    ----------
    oracle:
        The document oracle, called once with a text-only prompt.
    validator:
        Runs the arithmetic check over the draft.
    repository:
        Used for currency detection and the location factor.
    """

    def __init__(
        self,
        oracle: DocumentOracle,
        validator: ValidationEngine | None = None,
        repository: RateRepository | None = None,
    ) -> None:
        self._oracle = oracle
        self._repository = repository or RateRepository()
        self._validator = validator or ValidationEngine(self._repository)

    async def estimate(self, project: ProjectInfo) -> Estimate:
        """Draft and arithmetic-check an estimate for *project*.

        Raises
        ------
        CostEstimationError
            If the oracle fails or its draft has no usable trades.
        """
        currency = project.currency or self._repository.detect_currency(project.location)
        location = self._repository.lookup_location_factor(project.location)
        factor = location.factor if location.currency == currency else 1.0

        prompt = build_fallback_estimate_prompt(project, currency)
        try:
            data = await self._oracle.invoke_json(prompt)
        except (OracleCallError, JsonExtractionError) as exc:
            msg = f"Fallback estimate request failed: {exc}"
            raise CostEstimationError(msg) from exc

        trades = parse_trades(data.get("trades"))
        if not trades:
            msg = "Fallback estimate contained no priced trades"
            raise CostEstimationError(msg)

        direct = round(sum(t.subtotal for t in trades), 2)
        breakdown = build_cost_breakdown(direct, resolve_markups(parse_markups(data.get("markups"))))
        item_count = sum(len(t.line_items) for t in trades)
        draft = Estimate(
            summary=EstimateSummary(
                project_name=project.project_name,
                location=project.location,
                project_type=project.project_type,
                total_area=project.total_area,
                area_unit=project.area_unit,
                currency=currency,
                grand_total=_to_float(data.get("grandTotal")) or breakdown.total_with_markups,
            ),
            trades=trades,
            cost_breakdown=breakdown,
            metadata=EstimateMetadata(
                engine_version=ENGINE_VERSION,
                rate_data_version=RATE_DATA_VERSION,
                analysis_method="single_pass",
                location_factor=factor,
                location_country=location.country,
                rate_source_breakdown={"database": 0, "estimated": item_count},
            ),
            assumptions=[
                "Conceptual estimate from project information only; no drawings analyzed.",
                *[str(a) for a in data.get("assumptions") or [] if a],
            ],
        )

        result = self._validator.check_totals(draft)
        logger.info(
            "Fallback estimate: %d trades, total %.2f %s",
            len(result.trades),
            result.summary.grand_total,
            currency,
        )
        return result


def parse_trades(raw: Any) -> list[Trade]:
    """Build trades from the oracle's draft; malformed entries are dropped."""
    if not isinstance(raw, list):
        return []
    trades: list[Trade] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        items = [
            item
            for item in (_parse_line_item(li) for li in entry.get("lineItems") or [])
            if item is not None
        ]
        if not items:
            continue
        subtotal = _to_float(entry.get("subtotal"))
        trades.append(
            Trade(
                trade_name=str(entry.get("tradeName") or entry.get("name") or "General"),
                subtotal=subtotal if subtotal is not None else sum(li.line_total for li in items),
                line_items=items,
            )
        )
    return trades


def parse_markups(raw: Any) -> dict[str, float]:
    """Markup percents keyed by field name, from camelCase oracle keys."""
    if not isinstance(raw, dict):
        return {}
    percents: dict[str, float] = {}
    for key, value in raw.items():
        name = _MARKUP_KEYS.get(key, key)
        number = _to_float(value)
        if name in MARKUP_FIELDS and number is not None:
            percents[name] = number
    return percents


def _parse_line_item(raw: Any) -> LineItem | None:
    if not isinstance(raw, dict) or not raw.get("description"):
        return None
    quantity = _to_float(raw.get("quantity")) or 0.0
    unit_rate = _to_float(raw.get("unitRate")) or 0.0
    line_total = _to_float(raw.get("lineTotal") or raw.get("totalCost"))
    return LineItem(
        description=str(raw["description"]),
        quantity=quantity,
        unit=normalize_unit(str(raw.get("unit") or "ls")) or "ls",
        unit_rate=unit_rate,
        line_total=line_total if line_total is not None else round(quantity * unit_rate, 2),
        rate_source=RateSource.EST,
    )


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace(",", "").strip())
    except ValueError:
        return None
