"""
Pure period report transformation functions.

These functions turn a window's quotes plus the tenant's catalog and
configuration history into a structured PeriodReport.  ZERO I/O. ZERO
side effects.

All monetary values are Decimal. All inputs/outputs are frozen dataclasses.

Functions in this module follow the quoting_kernel/domain/ purity convention:
- No database access
- No clock access
- No file I/O
- Deterministic: same inputs always produce same outputs, whatever order
  the quotes and valuation history are supplied in
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from uuid import UUID

from quoting_engines.line_valuation import LineValuationEngine, OrderProfitability
from quoting_engines.proration import FixedCostProration, prorate_fixed_cost
from quoting_engines.tracer import traced_engine
from quoting_engines.valuation.history import ValuationHistory
from quoting_kernel.domain.quotes import Quote, QuoteStatus, normalize_description
from quoting_kernel.domain.valuation import (
    TENANT_CONFIG_ENTITY_ID,
    CatalogItem,
    ConfigValuation,
    ValuationSnapshot,
)
from quoting_kernel.exceptions import InvalidDateRangeError, MissingReportInputError
from quoting_kernel.logging_config import get_logger
from quoting_modules.reporting.config import ReportingConfig
from quoting_modules.reporting.models import (
    ClientRanking,
    DailyPoint,
    NetProfitSummary,
    PeriodReport,
    ProductRanking,
    ProfitabilitySummary,
    ProfitPrecision,
    ReportMetadata,
    StatusSummary,
    StatusTotal,
)

logger = get_logger("modules.reporting.statements")

ZERO = Decimal("0")
HUNDRED = Decimal("100")

NOTE_APPROXIMATE = (
    "No accepted order has a complete cost breakdown; cost of goods is "
    "unknown and taxes are approximated from the average configured tax rate."
)
NOTE_PARTIAL = (
    "{count} of {total} accepted orders lack a complete cost breakdown; "
    "their cost is excluded and their taxes are approximated from the "
    "average configured tax rate."
)
NOTE_NO_TAX_BASIS = (
    "No tax configuration was in force at the end of the period; "
    "approximated taxes are zero."
)


# =========================================================================
# Helpers
# =========================================================================


def _sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def _require(**inputs: object) -> None:
    for name, value in inputs.items():
        if value is None:
            raise MissingReportInputError(name)


def quotes_in_window(
    quotes: Iterable[Quote], start_date: date, end_date: date
) -> tuple[Quote, ...]:
    """Quotes emitted inside the inclusive window, ordered by date then id."""
    selected = []
    dropped = 0
    for quote in quotes:
        if start_date <= quote.emission_date <= end_date:
            selected.append(quote)
        else:
            dropped += 1
    if dropped:
        logger.info(
            "quotes_outside_window_ignored",
            extra={"dropped": dropped, "kept": len(selected)},
        )
    return tuple(sorted(selected, key=lambda q: (q.emission_date, q.quote_id)))


# =========================================================================
# 1. STATUS TOTALS
# =========================================================================


def compute_status_summary(quotes: Sequence[Quote]) -> StatusSummary:
    """
    Count and sum quotes per status.

    ``conversion_rate`` is accepted / total as a ratio (0 when there are no
    quotes); ``average_ticket`` is the mean accepted value (0 when nothing
    was accepted).
    """
    totals = []
    for status in QuoteStatus:
        bucket = [q for q in quotes if q.status == status]
        totals.append(
            StatusTotal(
                status=status,
                count=len(bucket),
                total_value=_sum(q.total_value for q in bucket),
            )
        )

    accepted = next(t for t in totals if t.status == QuoteStatus.ACCEPTED)
    quote_count = len(quotes)
    conversion_rate = (
        Decimal(accepted.count) / Decimal(quote_count) if quote_count else ZERO
    )
    average_ticket = (
        accepted.total_value / accepted.count if accepted.count else ZERO
    )
    return StatusSummary(
        totals=tuple(totals),
        quote_count=quote_count,
        total_value=_sum(q.total_value for q in quotes),
        conversion_rate=conversion_rate,
        average_ticket=average_ticket,
    )


# =========================================================================
# 2. DAILY TIME SERIES
# =========================================================================


def build_daily_series(
    quotes: Iterable[Quote], start_date: date, end_date: date
) -> tuple[DailyPoint, ...]:
    """One point per calendar day of the window; empty days are zero points."""
    if start_date > end_date:
        raise InvalidDateRangeError(start_date, end_date)

    by_day: dict[date, list[Quote]] = {}
    for quote in quotes:
        by_day.setdefault(quote.emission_date, []).append(quote)

    points = []
    day = start_date
    while day <= end_date:
        bucket = by_day.get(day, [])

        def _value(status: QuoteStatus) -> Decimal:
            return _sum(q.total_value for q in bucket if q.status == status)

        points.append(
            DailyPoint(
                day=day,
                open_value=_value(QuoteStatus.OPEN),
                accepted_value=_value(QuoteStatus.ACCEPTED),
                rejected_value=_value(QuoteStatus.REJECTED),
                expired_value=_value(QuoteStatus.EXPIRED),
                quote_count=len(bucket),
            )
        )
        day += timedelta(days=1)
    return tuple(points)


# =========================================================================
# 3. RANKINGS
# =========================================================================


def rank_clients(quotes: Iterable[Quote], size: int = 10) -> tuple[ClientRanking, ...]:
    """
    Top clients by summed accepted value.

    Ties on value go to the smallest client id.  The reported name is the
    one on the client's most recent accepted quote.
    """
    groups: dict[str, dict] = {}
    ordered = sorted(
        (q for q in quotes if q.is_accepted),
        key=lambda q: (q.emission_date, q.quote_id),
    )
    for quote in ordered:
        group = groups.setdefault(
            quote.client_id, {"name": quote.client_name, "value": ZERO, "count": 0}
        )
        group["name"] = quote.client_name
        group["value"] += quote.total_value
        group["count"] += 1

    ranked = sorted(groups.items(), key=lambda kv: (-kv[1]["value"], kv[0]))
    return tuple(
        ClientRanking(
            client_id=client_id,
            client_name=group["name"],
            total_value=group["value"],
            quote_count=group["count"],
        )
        for client_id, group in ranked[:size]
    )


def rank_products(quotes: Iterable[Quote], size: int = 10) -> tuple[ProductRanking, ...]:
    """
    Top products by summed line total over accepted quotes.

    Lines of simple and detailed quotes are grouped together by normalized
    description; ties on value go to the smallest description.
    """
    groups: dict[str, dict] = {}
    for quote in quotes:
        if not quote.is_accepted:
            continue
        for line in quote.lines:
            key = normalize_description(line.description)
            if not key:
                continue
            group = groups.setdefault(key, {"value": ZERO, "quantity": ZERO, "count": 0})
            group["value"] += line.line_total
            group["quantity"] += line.quantity
            group["count"] += 1

    ranked = sorted(groups.items(), key=lambda kv: (-kv[1]["value"], kv[0]))
    return tuple(
        ProductRanking(
            description=description,
            total_value=group["value"],
            quantity=group["quantity"],
            line_count=group["count"],
        )
        for description, group in ranked[:size]
    )


# =========================================================================
# 4. PROFITABILITY
# =========================================================================


def summarize_profitability(
    orders: Iterable[OrderProfitability],
) -> ProfitabilitySummary | None:
    """
    Aggregate the detailed breakdown of accepted, eligible orders.

    Returns None when no accepted order is eligible; the section is then
    omitted from the report rather than shown as zero.
    """
    accepted = [o for o in orders if o.status == QuoteStatus.ACCEPTED]
    eligible = [o for o in accepted if o.eligible]
    if not eligible:
        return None

    eligible.sort(key=lambda o: (-o.emission_date.toordinal(), o.quote_id))
    return ProfitabilitySummary(
        orders=tuple(eligible),
        material_revenue=_sum(o.material_revenue for o in eligible),
        labor_revenue=_sum(o.labor_revenue for o in eligible),
        material_cost=_sum(o.material_cost for o in eligible),
        labor_cost=_sum(o.labor_cost for o in eligible),
        material_tax=_sum(o.material_tax for o in eligible),
        labor_tax=_sum(o.labor_tax for o in eligible),
        material_margin=_sum(o.material_margin for o in eligible),
        labor_margin=_sum(o.labor_margin for o in eligible),
        eligible_count=len(eligible),
        excluded_count=len(accepted) - len(eligible),
        accepted_count=len(accepted),
    )


# =========================================================================
# 5. NET PROFIT
# =========================================================================


def compute_net_profit(
    orders: Iterable[OrderProfitability],
    proration: FixedCostProration,
    tax_config: ConfigValuation | None,
    configured: bool,
) -> NetProfitSummary | None:
    """
    Net profit of the company over the window.

    Args:
        orders: Profitability records of every quote in the window.
        proration: Fixed cost attributed to the window.
        tax_config: Configuration in force at the end of the window; its
            average tax rate approximates taxes of orders without a
            complete line breakdown.
        configured: Whether any tax rate or fixed cost was configured in
            the window.  When False the section is omitted (None).
    """
    if not configured:
        return None

    accepted = [o for o in orders if o.status == QuoteStatus.ACCEPTED]
    eligible = [o for o in accepted if o.eligible]
    approximated = [o for o in accepted if not o.eligible]
    revenue = _sum(o.total_value for o in accepted)

    notes: list[str] = []
    average_rate: Decimal | None = None
    approximated_tax = ZERO
    if approximated:
        if tax_config is not None:
            average_rate = tax_config.average_tax_rate
        else:
            average_rate = ZERO
            notes.append(NOTE_NO_TAX_BASIS)
        approximated_tax = _sum(o.total_value for o in approximated) * average_rate / HUNDRED

    if not approximated:
        precision = ProfitPrecision.DETAILED
        cost_of_goods: Decimal | None = _sum(o.total_cost for o in eligible)
    elif not eligible:
        precision = ProfitPrecision.APPROXIMATE
        cost_of_goods = None
        notes.insert(0, NOTE_APPROXIMATE)
    else:
        precision = ProfitPrecision.PARTIAL
        cost_of_goods = _sum(o.total_cost for o in eligible)
        notes.insert(0, NOTE_PARTIAL.format(count=len(approximated), total=len(accepted)))

    taxes = _sum(o.total_tax for o in eligible) + approximated_tax
    fixed_cost = proration.total
    net_profit = revenue - (cost_of_goods or ZERO) - taxes - fixed_cost

    return NetProfitSummary(
        revenue=revenue,
        cost_of_goods=cost_of_goods,
        taxes=taxes,
        fixed_cost=fixed_cost,
        net_profit=net_profit,
        precision=precision,
        average_tax_rate=average_rate,
        proration_method=proration.method,
        fixed_cost_segments=proration.segments,
        notes=tuple(notes),
    )


def _window_configs(
    engine: LineValuationEngine,
    config_history: ValuationHistory,
    start_date: date,
    end_date: date,
) -> list[ConfigValuation]:
    """Every tenant configuration in force at some point of the window."""
    dates = [
        start_date,
        *config_history.change_dates(TENANT_CONFIG_ENTITY_ID, start_date, end_date),
        end_date,
    ]
    configs = []
    for as_of in dates:
        resolution = engine.resolve_config(as_of)
        if resolution.is_resolved:
            configs.append(resolution.payload)
    return configs


# =========================================================================
# 6. PERIOD REPORT
# =========================================================================


@traced_engine("period_report", "1.0", fingerprint_fields=("start_date", "end_date"))
def build_period_report(
    quotes: Iterable[Quote],
    item_history: Iterable[ValuationSnapshot],
    item_catalog: Iterable[CatalogItem],
    config_history: Iterable[ValuationSnapshot],
    config_live: ConfigValuation | None,
    start_date: date,
    end_date: date,
    *,
    config: ReportingConfig | None = None,
    metadata: ReportMetadata | None = None,
) -> PeriodReport:
    """
    Build a period report for the inclusive [start_date, end_date] window.

    Args:
        quotes: Quotes of the period; any quote emitted outside the window
            is ignored.
        item_history: Valuation snapshots of every catalog item (unfiltered).
        item_catalog: Catalog items with their live values.
        config_history: Snapshots of the tenant configuration.
        config_live: Live tenant configuration, or None if never saved.
        start_date: First day of the window.
        end_date: Last day of the window.
        config: Report options; defaults to ``ReportingConfig()``.
        metadata: Metadata to stamp on the report.

    Raises:
        MissingReportInputError: A required input sequence is None.
        InvalidDateRangeError: start_date is after end_date.
    """
    _require(
        quotes=quotes,
        item_history=item_history,
        item_catalog=item_catalog,
        config_history=config_history,
        start_date=start_date,
        end_date=end_date,
    )
    if start_date > end_date:
        raise InvalidDateRangeError(start_date, end_date)

    config = config or ReportingConfig()
    metadata = metadata or ReportMetadata(start_date=start_date, end_date=end_date)

    window = quotes_in_window(quotes, start_date, end_date)
    config_hist = ValuationHistory.for_tenant_config(config_history)
    engine = LineValuationEngine(
        item_catalog,
        item_history,
        config_hist,
        config_live,
        fallback_to_earliest=config.earliest_snapshot_fallback,
        zero_cost_is_unknown=config.zero_cost_is_unknown,
    )
    orders = tuple(engine.value_order(quote=quote) for quote in window)

    proration = prorate_fixed_cost(
        config_history=config_hist,
        config_live=config_live,
        start_date=start_date,
        end_date=end_date,
        method=config.proration_method,
        days_per_month=config.proration_days_per_month,
        fallback_to_earliest=config.earliest_snapshot_fallback,
    )
    configs = _window_configs(engine, config_hist, start_date, end_date)
    end_resolution = engine.resolve_config(end_date)
    net_profit = compute_net_profit(
        orders,
        proration,
        end_resolution.payload if end_resolution.is_resolved else None,
        configured=any(c.is_configured for c in configs),
    )

    report = PeriodReport(
        metadata=metadata,
        status_summary=compute_status_summary(window),
        daily_series=build_daily_series(window, start_date, end_date),
        top_clients=rank_clients(window, config.ranking_size),
        top_products=rank_products(window, config.ranking_size),
        orders=orders,
        profitability=summarize_profitability(orders),
        net_profit=net_profit,
    )

    logger.info(
        "period_report_built",
        extra={
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
            "quote_count": len(window),
            "eligible_orders": (
                report.profitability.eligible_count if report.profitability else 0
            ),
            "net_profit_precision": (
                net_profit.precision.value if net_profit else None
            ),
        },
    )
    return report


# =========================================================================
# 7. RENDERER (dict/JSON output)
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report dataclass to a plain dict for JSON serialization.

    Handles:
    - Decimal -> str (preserving precision)
    - UUID -> str
    - date -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)
