"""
Period Reporting Domain Models (``quoting_modules.reporting.models``).

Responsibility
--------------
Frozen dataclass value objects representing a period report over issued
quotes: status totals, daily time series, client and product rankings,
aggregate profitability and the company net-profit figure.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by
``ReportingService`` and returned to callers.  No dependency on the
database or on kernel services.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* An optional section is ``None`` when it has nothing meaningful to show,
  never a zero-filled placeholder.

Failure modes
-------------
* Construction with invalid enum values raises ``ValueError``.

Audit relevance
---------------
* ``ReportMetadata`` carries the tenant, window and generation timestamp
  so a report can be reproduced from the same valuation history.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from quoting_engines.line_valuation import OrderProfitability
from quoting_engines.proration import FixedCostSegment, ProrationMethod
from quoting_kernel.domain.quotes import QuoteStatus


# =========================================================================
# Enums
# =========================================================================


class ProfitPrecision(str, Enum):
    """How much of the net-profit figure rests on per-line cost data."""

    DETAILED = "detailed"  # every accepted order has a full line breakdown
    PARTIAL = "partial"  # some accepted orders approximated
    APPROXIMATE = "approximate"  # no line breakdown available at all


# =========================================================================
# Report Metadata
# =========================================================================


@dataclass(frozen=True)
class ReportMetadata:
    """Metadata attached to every period report."""

    start_date: date
    end_date: date
    generated_at: str | None = None  # ISO format timestamp from injected clock
    tenant_id: str | None = None
    report_id: str | None = None


# =========================================================================
# Status totals and time series
# =========================================================================


@dataclass(frozen=True)
class StatusTotal:
    """Count and summed value of the quotes in one status."""

    status: QuoteStatus
    count: int
    total_value: Decimal


@dataclass(frozen=True)
class StatusSummary:
    """Per-status totals for the window, in QuoteStatus declaration order."""

    totals: tuple[StatusTotal, ...]
    quote_count: int
    total_value: Decimal
    conversion_rate: Decimal  # accepted / total, 0 when there are no quotes
    average_ticket: Decimal  # mean accepted value, 0 when none accepted

    def for_status(self, status: QuoteStatus) -> StatusTotal:
        for total in self.totals:
            if total.status == status:
                return total
        return StatusTotal(status=status, count=0, total_value=Decimal("0"))

    @property
    def accepted(self) -> StatusTotal:
        return self.for_status(QuoteStatus.ACCEPTED)


@dataclass(frozen=True)
class DailyPoint:
    """One calendar day of the chart series, values bucketed by status."""

    day: date
    open_value: Decimal
    accepted_value: Decimal
    rejected_value: Decimal
    expired_value: Decimal
    quote_count: int

    @property
    def total_value(self) -> Decimal:
        return self.open_value + self.accepted_value + self.rejected_value + self.expired_value


# =========================================================================
# Rankings
# =========================================================================


@dataclass(frozen=True)
class ClientRanking:
    """A client's accepted business in the window."""

    client_id: str
    client_name: str
    total_value: Decimal
    quote_count: int


@dataclass(frozen=True)
class ProductRanking:
    """A product's accepted sales in the window, grouped by description."""

    description: str  # normalized
    total_value: Decimal
    quantity: Decimal
    line_count: int


# =========================================================================
# Profitability
# =========================================================================


@dataclass(frozen=True)
class ProfitabilitySummary:
    """Aggregate profitability over accepted orders eligible for detail."""

    orders: tuple[OrderProfitability, ...]  # most recent first
    material_revenue: Decimal
    labor_revenue: Decimal
    material_cost: Decimal
    labor_cost: Decimal
    material_tax: Decimal
    labor_tax: Decimal
    material_margin: Decimal
    labor_margin: Decimal
    eligible_count: int
    excluded_count: int
    accepted_count: int

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
    def total_margin(self) -> Decimal:
        return self.material_margin + self.labor_margin

    @property
    def margin_percent(self) -> Decimal:
        if self.total_revenue == 0:
            return Decimal("0")
        return self.total_margin / self.total_revenue * Decimal("100")


@dataclass(frozen=True)
class NetProfitSummary:
    """
    Net profit of the company over the window.

    ``net_profit = revenue - cost_of_goods (if known) - taxes - fixed_cost``.
    """

    revenue: Decimal
    cost_of_goods: Decimal | None  # None when no order had a cost basis
    taxes: Decimal
    fixed_cost: Decimal
    net_profit: Decimal
    precision: ProfitPrecision
    average_tax_rate: Decimal | None  # rate used for approximated taxes
    proration_method: ProrationMethod
    fixed_cost_segments: tuple[FixedCostSegment, ...]
    notes: tuple[str, ...] = ()

    @property
    def net_margin_percent(self) -> Decimal:
        if self.revenue == 0:
            return Decimal("0")
        return self.net_profit / self.revenue * Decimal("100")


# =========================================================================
# Period Report
# =========================================================================


@dataclass(frozen=True)
class PeriodReport:
    """Complete period report. Built fresh on every query, never cached."""

    metadata: ReportMetadata
    status_summary: StatusSummary
    daily_series: tuple[DailyPoint, ...]
    top_clients: tuple[ClientRanking, ...]
    top_products: tuple[ProductRanking, ...]
    orders: tuple[OrderProfitability, ...]  # every quote in the window, by date
    profitability: ProfitabilitySummary | None = None
    net_profit: NetProfitSummary | None = None

    @property
    def accepted_revenue(self) -> Decimal:
        return self.status_summary.accepted.total_value
