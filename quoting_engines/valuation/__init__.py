"""
Valuation - Point-in-time access to the versioned record store.

Pure engine code only: ordering of the snapshot log and resolution of the
values in force on a given date.
"""

from quoting_engines.valuation.history import ValuationHistory, snapshot_order_key
from quoting_engines.valuation.resolver import (
    PointInTimeResolver,
    Resolution,
    ResolutionSource,
    resolve_as_of,
)

__all__ = [
    "ValuationHistory",
    "snapshot_order_key",
    "PointInTimeResolver",
    "Resolution",
    "ResolutionSource",
    "resolve_as_of",
]
