"""
quoting_engines.proration -- Fixed monthly cost spread over a report window.

Responsibility:
    Turn the tenant's fixed monthly cost, as it stood over time, into the
    share attributable to an inclusive [start_date, end_date] window.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - DAILY: the window is split at every configuration change date inside
      it; each sub-interval is charged
      ``fixed_monthly_cost * days / days_per_month`` using the
      configuration in force on the sub-interval's first day.  The
      denominator is a parameter, never a hidden constant.
    - WHOLE_MONTHS: every calendar month the window touches is charged one
      full fixed monthly cost, using the configuration in force at the end
      of that month.
    - A sub-interval with no resolvable configuration contributes zero and
      reports ``fixed_monthly_cost=None``.

Failure modes:
    - InvalidDateRangeError if start_date is after end_date.
    - ValueError if days_per_month is not positive.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum

from quoting_engines.tracer import traced_engine
from quoting_engines.valuation.history import ValuationHistory
from quoting_engines.valuation.resolver import PointInTimeResolver, ResolutionSource
from quoting_kernel.domain.valuation import TENANT_CONFIG_ENTITY_ID, ConfigValuation
from quoting_kernel.exceptions import InvalidDateRangeError
from quoting_kernel.logging_config import get_logger

logger = get_logger("engines.proration")

ZERO = Decimal("0")
DEFAULT_DAYS_PER_MONTH = 30


class ProrationMethod(str, Enum):
    """How the fixed monthly cost is attributed to a window."""

    DAILY = "daily"
    WHOLE_MONTHS = "whole_months"


@dataclass(frozen=True)
class FixedCostSegment:
    """One sub-interval of the window charged at a single fixed cost."""

    start_date: date
    end_date: date
    days: int
    fixed_monthly_cost: Decimal | None
    contribution: Decimal
    source: ResolutionSource


@dataclass(frozen=True)
class FixedCostProration:
    """Fixed cost attributed to a window, with its per-segment breakdown."""

    method: ProrationMethod
    days_per_month: int
    segments: tuple[FixedCostSegment, ...]

    @property
    def total(self) -> Decimal:
        return sum((s.contribution for s in self.segments), ZERO)

    @property
    def is_configured(self) -> bool:
        """True if any segment carries a non-zero fixed monthly cost."""
        return any(s.fixed_monthly_cost for s in self.segments)


def _days(start: date, end: date) -> int:
    return (end - start).days + 1


def _daily_segments(
    resolver: PointInTimeResolver,
    live: ConfigValuation | None,
    start_date: date,
    end_date: date,
    days_per_month: int,
) -> list[FixedCostSegment]:
    change_dates = resolver.history.change_dates(
        TENANT_CONFIG_ENTITY_ID, start_date, end_date
    )
    starts = [start_date, *change_dates]
    ends = [d - timedelta(days=1) for d in change_dates] + [end_date]

    segments = []
    for seg_start, seg_end in zip(starts, ends):
        resolution = resolver.resolve(TENANT_CONFIG_ENTITY_ID, seg_start, live)
        days = _days(seg_start, seg_end)
        fixed = resolution.payload.fixed_monthly_cost if resolution.is_resolved else None
        contribution = fixed * days / days_per_month if fixed is not None else ZERO
        segments.append(
            FixedCostSegment(
                start_date=seg_start,
                end_date=seg_end,
                days=days,
                fixed_monthly_cost=fixed,
                contribution=contribution,
                source=resolution.source,
            )
        )
    return segments


def _month_segments(
    resolver: PointInTimeResolver,
    live: ConfigValuation | None,
    start_date: date,
    end_date: date,
) -> list[FixedCostSegment]:
    segments = []
    year, month = start_date.year, start_date.month
    while (year, month) <= (end_date.year, end_date.month):
        month_end = date(year, month, calendar.monthrange(year, month)[1])
        resolution = resolver.resolve(TENANT_CONFIG_ENTITY_ID, month_end, live)
        fixed = resolution.payload.fixed_monthly_cost if resolution.is_resolved else None
        seg_start = max(date(year, month, 1), start_date)
        seg_end = min(month_end, end_date)
        segments.append(
            FixedCostSegment(
                start_date=seg_start,
                end_date=seg_end,
                days=_days(seg_start, seg_end),
                fixed_monthly_cost=fixed,
                contribution=fixed if fixed is not None else ZERO,
                source=resolution.source,
            )
        )
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)
    return segments


@traced_engine(
    "fixed_cost_proration",
    "1.0",
    fingerprint_fields=("start_date", "end_date", "method", "days_per_month"),
)
def prorate_fixed_cost(
    *,
    config_history: ValuationHistory,
    config_live: ConfigValuation | None,
    start_date: date,
    end_date: date,
    method: ProrationMethod = ProrationMethod.DAILY,
    days_per_month: int = DEFAULT_DAYS_PER_MONTH,
    fallback_to_earliest: bool = False,
) -> FixedCostProration:
    """
    Attribute the tenant's fixed monthly cost to an inclusive window.

    Args:
        config_history: Tenant configuration history.
        config_live: Live tenant configuration, or None if never saved.
        start_date: First day of the window.
        end_date: Last day of the window.
        method: DAILY (day-count proration) or WHOLE_MONTHS.
        days_per_month: Denominator of the DAILY proration.
        fallback_to_earliest: Resolve to the earliest snapshot when nothing
            predates a segment and there is no live configuration.

    Returns:
        FixedCostProration with one segment per charged sub-interval.
    """
    if start_date > end_date:
        raise InvalidDateRangeError(start_date, end_date)
    if days_per_month <= 0:
        raise ValueError(f"days_per_month must be positive, got {days_per_month}")

    resolver = PointInTimeResolver(
        config_history, fallback_to_earliest=fallback_to_earliest
    )
    if method == ProrationMethod.WHOLE_MONTHS:
        segments = _month_segments(resolver, config_live, start_date, end_date)
    else:
        segments = _daily_segments(
            resolver, config_live, start_date, end_date, days_per_month
        )

    result = FixedCostProration(
        method=method,
        days_per_month=days_per_month,
        segments=tuple(segments),
    )
    logger.debug(
        "fixed_cost_prorated",
        extra={
            "method": method.value,
            "segment_count": len(segments),
            "total": str(result.total),
        },
    )
    return result
