"""
Module: quoting_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for higher
    layers (quoting_modules).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import quoting_kernel domain types, exceptions and logging
    (and sibling engine modules).  MUST NOT import quoting_modules.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Target dates and windows are passed in as explicit parameters.
    - Decimal-only arithmetic: all monetary amounts use ``Decimal``.
    - Determinism: identical inputs always produce identical outputs,
      whatever order the valuation history was handed over in.

Failure modes:
    - InvalidDateRangeError / ValueError propagated from individual engines
      on structurally invalid input.  Partial valuation data never raises.

Audit relevance:
    Engine entry points are traced via ``@traced_engine`` (see
    ``quoting_engines.tracer``), emitting QUOTING_ENGINE_TRACE log records
    with engine name, version, input fingerprint and duration.

Usage:
    from quoting_engines.valuation import PointInTimeResolver, ValuationHistory
    from quoting_engines.matching import default_matcher
    from quoting_engines.line_valuation import LineValuationEngine
    from quoting_engines.proration import prorate_fixed_cost
"""

from quoting_kernel.logging_config import get_logger

logger = get_logger("engines")

from quoting_engines.line_valuation import (
    ExclusionReason,
    LineProfitability,
    LineValuationEngine,
    OrderProfitability,
)
from quoting_engines.matching import (
    ById,
    ByNormalizedDescription,
    FallbackMatcher,
    ItemMatch,
    ItemMatcher,
    MatchMethod,
    default_matcher,
)
from quoting_engines.proration import (
    FixedCostProration,
    FixedCostSegment,
    ProrationMethod,
    prorate_fixed_cost,
)
from quoting_engines.tracer import compute_input_fingerprint, traced_engine
from quoting_engines.valuation import (
    PointInTimeResolver,
    Resolution,
    ResolutionSource,
    ValuationHistory,
    resolve_as_of,
    snapshot_order_key,
)

__all__ = [
    # Valuation
    "ValuationHistory",
    "snapshot_order_key",
    "PointInTimeResolver",
    "Resolution",
    "ResolutionSource",
    "resolve_as_of",
    # Matching
    "MatchMethod",
    "ItemMatch",
    "ItemMatcher",
    "ById",
    "ByNormalizedDescription",
    "FallbackMatcher",
    "default_matcher",
    # Line valuation
    "ExclusionReason",
    "LineProfitability",
    "OrderProfitability",
    "LineValuationEngine",
    # Proration
    "ProrationMethod",
    "FixedCostSegment",
    "FixedCostProration",
    "prorate_fixed_cost",
    # Tracing
    "traced_engine",
    "compute_input_fingerprint",
]
