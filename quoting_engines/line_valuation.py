"""
quoting_engines.line_valuation -- As-of-emission profitability of quote lines.

Responsibility:
    For every line of a quote, combine the sale values stored on the quote
    (immutable) with the cost and tax basis in force on the quote's
    emission date, and fold the lines into one profitability record per
    quote.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Uses quoting_engines.valuation for point-in-time resolution and
    quoting_engines.matching for line-to-item links.

Invariants enforced:
    - Revenue is taken from the quote, never recomputed from the catalog.
    - Costs and tax rates are resolved at ``quote.emission_date``.
    - margin = revenue - cost - tax, separately for material and labor;
      margins are never clamped and may be negative.
    - A line without a cost basis is flagged ``cost_unknown``: it keeps its
      revenue but has no margin.  Unit costs are never invented.
    - An order is eligible for detailed analysis only if it is a detailed
      quote, has at least one valued line and every valued line has a
      cost basis.  A tenant with no configuration in force is valued at zero
      tax rates; its lines report ``tax_unknown``.

Failure modes:
    - None for partial data: missing valuation data degrades the affected
      line or order and is reported through ``exclusion_reason``.

Audit relevance:
    Each LineProfitability records which snapshot source (history, live,
    earliest) supplied its cost basis and how the line was matched, so a
    margin figure can always be traced back to the values it used.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from quoting_engines.matching import ItemMatcher, MatchMethod, default_matcher
from quoting_engines.tracer import traced_engine
from quoting_engines.valuation.history import ValuationHistory
from quoting_engines.valuation.resolver import (
    PointInTimeResolver,
    Resolution,
    ResolutionSource,
)
from quoting_kernel.domain.quotes import Quote, QuoteKind, QuoteLine, QuoteStatus
from quoting_kernel.domain.valuation import (
    TENANT_CONFIG_ENTITY_ID,
    CatalogItem,
    ConfigValuation,
    ItemValuation,
    ValuationSnapshot,
)
from quoting_kernel.logging_config import get_logger

logger = get_logger("engines.line_valuation")

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class ExclusionReason(str, Enum):
    """Why an order is left out of the detailed profitability breakdown."""

    SIMPLE_QUOTE = "simple_quote"  # no material/labor split to analyze
    NO_LINES = "no_lines"
    COST_UNKNOWN = "cost_unknown"


@dataclass(frozen=True)
class LineProfitability:
    """Financial breakdown of one quote line as of the quote's emission date."""

    description: str
    quantity: Decimal
    line_total: Decimal
    item_id: str | None
    match_method: MatchMethod
    cost_source: ResolutionSource
    unit_material_cost: Decimal | None
    unit_labor_cost: Decimal | None
    material_tax_rate: Decimal | None
    labor_tax_rate: Decimal | None
    material_revenue: Decimal
    labor_revenue: Decimal
    material_cost: Decimal
    labor_cost: Decimal
    material_tax: Decimal
    labor_tax: Decimal
    material_margin: Decimal | None
    labor_margin: Decimal | None

    @property
    def cost_unknown(self) -> bool:
        return self.unit_material_cost is None and self.unit_labor_cost is None

    @property
    def tax_unknown(self) -> bool:
        return self.material_tax_rate is None

    @property
    def total_margin(self) -> Decimal | None:
        if self.material_margin is None or self.labor_margin is None:
            return None
        return self.material_margin + self.labor_margin


@dataclass(frozen=True)
class OrderProfitability:
    """Profitability of one quote, folded from its line breakdowns."""

    quote_id: str
    client_id: str
    client_name: str
    emission_date: date
    status: QuoteStatus
    kind: QuoteKind
    total_value: Decimal
    lines: tuple[LineProfitability, ...]
    material_revenue: Decimal
    labor_revenue: Decimal
    material_cost: Decimal
    labor_cost: Decimal
    material_tax: Decimal
    labor_tax: Decimal
    material_margin: Decimal | None
    labor_margin: Decimal | None
    exclusion_reason: ExclusionReason | None = None

    @property
    def eligible(self) -> bool:
        return self.exclusion_reason is None

    @property
    def unresolved_line_count(self) -> int:
        return sum(1 for line in self.lines if line.cost_unknown)

    @property
    def total_revenue(self) -> Decimal:
        return self.material_revenue + self.labor_revenue

    @property
    def total_cost(self) -> Decimal:
        return self.material_cost + self.labor_cost

    @property
    def total_tax(self) -> Decimal:
        return self.material_tax + self.labor_tax

    @property
    def total_margin(self) -> Decimal | None:
        if self.material_margin is None or self.labor_margin is None:
            return None
        return self.material_margin + self.labor_margin

    @property
    def margin_percent(self) -> Decimal | None:
        """Total margin as a percentage of line revenue (0 when revenue is 0)."""
        margin = self.total_margin
        if margin is None:
            return None
        if self.total_revenue == 0:
            return ZERO
        return margin / self.total_revenue * HUNDRED


def _sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


class LineValuationEngine:
    """
    Values quote lines against the catalog and tenant configuration history.

    Built once per report run; holds only immutable, pre-indexed inputs.

    Contract:
        value_order(quote=...) is pure: the same quote against the same
        inputs always yields the same OrderProfitability.
    """

    def __init__(
        self,
        catalog: Iterable[CatalogItem],
        item_history: Iterable[ValuationSnapshot] | ValuationHistory,
        config_history: Iterable[ValuationSnapshot] | ValuationHistory,
        config_live: ConfigValuation | None,
        *,
        matcher: ItemMatcher | None = None,
        fallback_to_earliest: bool = False,
        zero_cost_is_unknown: bool = False,
    ):
        items = tuple(catalog)
        if not isinstance(item_history, ValuationHistory):
            item_history = ValuationHistory(item_history)
        if not isinstance(config_history, ValuationHistory):
            config_history = ValuationHistory.for_tenant_config(config_history)
        self._matcher = matcher or default_matcher(items)
        self._items = PointInTimeResolver(
            item_history, fallback_to_earliest=fallback_to_earliest
        )
        self._config = PointInTimeResolver(
            config_history, fallback_to_earliest=fallback_to_earliest
        )
        self._config_live = config_live
        self._zero_cost_is_unknown = zero_cost_is_unknown

    def resolve_config(self, as_of: date) -> Resolution:
        """Tenant configuration in force on ``as_of``."""
        return self._config.resolve(TENANT_CONFIG_ENTITY_ID, as_of, self._config_live)

    def _resolve_cost_basis(
        self, line: QuoteLine, emission_date: date
    ) -> tuple[str | None, MatchMethod, Resolution | None]:
        match = self._matcher.match(line)
        if match is None:
            return None, MatchMethod.UNMATCHED, None
        # A live record without any cost entered cannot stand in for history.
        live = match.item.live if self._has_cost_basis(match.item.live) else None
        resolution = self._items.resolve(match.item.item_id, emission_date, live)
        return match.item.item_id, match.method, resolution

    def _has_cost_basis(self, values: ItemValuation) -> bool:
        if not values.has_cost_basis:
            return False
        if self._zero_cost_is_unknown:
            return values.material_cost != 0 or values.labor_cost != 0
        return True

    def value_line(
        self,
        line: QuoteLine,
        emission_date: date,
        config: ConfigValuation | None,
    ) -> LineProfitability:
        """
        Value one detailed-quote line.

        Args:
            line: The quote line; its unit prices are the sale values.
            emission_date: Date at which the cost basis is resolved.
            config: Tenant configuration in force on ``emission_date``, or
                None when no tax basis could be resolved.
        """
        item_id, method, resolution = self._resolve_cost_basis(line, emission_date)

        values: ItemValuation | None = None
        source = ResolutionSource.NONE
        if resolution is not None and resolution.is_resolved:
            candidate = resolution.payload
            if isinstance(candidate, ItemValuation) and self._has_cost_basis(candidate):
                values = candidate
                source = resolution.source

        material_revenue = line.unit_sale_price * line.quantity
        labor_revenue = line.unit_sale_labor_price * line.quantity

        if values is not None:
            unit_material_cost: Decimal | None = values.material_cost
            unit_labor_cost: Decimal | None = values.labor_cost
            material_cost = values.material_cost * line.quantity
            labor_cost = values.labor_cost * line.quantity
        else:
            unit_material_cost = unit_labor_cost = None
            material_cost = labor_cost = ZERO
            logger.info(
                "quote_line_cost_unknown",
                extra={
                    "description": line.description,
                    "item_id": item_id,
                    "match_method": method.value,
                    "emission_date": emission_date.isoformat(),
                },
            )

        if config is not None:
            material_tax_rate: Decimal | None = config.material_tax_rate
            labor_tax_rate: Decimal | None = config.service_tax_rate
            material_tax = material_revenue * config.material_tax_rate / HUNDRED
            labor_tax = labor_revenue * config.service_tax_rate / HUNDRED
        else:
            material_tax_rate = labor_tax_rate = None
            material_tax = labor_tax = ZERO

        if values is not None:
            material_margin: Decimal | None = material_revenue - material_cost - material_tax
            labor_margin: Decimal | None = labor_revenue - labor_cost - labor_tax
        else:
            material_margin = labor_margin = None

        return LineProfitability(
            description=line.description,
            quantity=line.quantity,
            line_total=line.line_total,
            item_id=item_id,
            match_method=method,
            cost_source=source,
            unit_material_cost=unit_material_cost,
            unit_labor_cost=unit_labor_cost,
            material_tax_rate=material_tax_rate,
            labor_tax_rate=labor_tax_rate,
            material_revenue=material_revenue,
            labor_revenue=labor_revenue,
            material_cost=material_cost,
            labor_cost=labor_cost,
            material_tax=material_tax,
            labor_tax=labor_tax,
            material_margin=material_margin,
            labor_margin=labor_margin,
        )

    @traced_engine("line_valuation", "1.0", fingerprint_fields=("quote",))
    def value_order(self, *, quote: Quote) -> OrderProfitability:
        """
        Value every line of ``quote`` as of its emission date.

        Simple quotes carry one blended price per line and skip the
        material/labor decomposition: they come back with no line
        breakdown and ``ExclusionReason.SIMPLE_QUOTE``.
        """
        if quote.kind == QuoteKind.SIMPLE:
            return self._order(quote, (), ExclusionReason.SIMPLE_QUOTE)

        config_resolution = self.resolve_config(quote.emission_date)
        config = config_resolution.payload if config_resolution.is_resolved else None

        lines = tuple(
            self.value_line(line, quote.emission_date, config)
            for line in quote.valued_lines
        )

        reason: ExclusionReason | None = None
        if not lines:
            reason = ExclusionReason.NO_LINES
        elif any(line.cost_unknown for line in lines):
            reason = ExclusionReason.COST_UNKNOWN

        if reason is not None and reason != ExclusionReason.NO_LINES:
            logger.info(
                "order_excluded_from_detailed_analysis",
                extra={
                    "quote_id": quote.quote_id,
                    "reason": reason.value,
                    "unresolved_lines": sum(1 for line in lines if line.cost_unknown),
                },
            )
        return self._order(quote, lines, reason)

    def _order(
        self,
        quote: Quote,
        lines: tuple[LineProfitability, ...],
        reason: ExclusionReason | None,
    ) -> OrderProfitability:
        eligible = reason is None
        return OrderProfitability(
            quote_id=quote.quote_id,
            client_id=quote.client_id,
            client_name=quote.client_name,
            emission_date=quote.emission_date,
            status=quote.status,
            kind=quote.kind,
            total_value=quote.total_value,
            lines=lines,
            material_revenue=_sum(line.material_revenue for line in lines),
            labor_revenue=_sum(line.labor_revenue for line in lines),
            material_cost=_sum(line.material_cost for line in lines),
            labor_cost=_sum(line.labor_cost for line in lines),
            material_tax=_sum(line.material_tax for line in lines),
            labor_tax=_sum(line.labor_tax for line in lines),
            material_margin=(
                _sum(line.material_margin for line in lines) if eligible else None
            ),
            labor_margin=(
                _sum(line.labor_margin for line in lines) if eligible else None
            ),
            exclusion_reason=reason,
        )
