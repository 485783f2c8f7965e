"""
Pure domain layer.

This module contains immutable quote and valuation value objects with
NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Time/clock (except the injectable Clock abstraction itself)
- I/O
"""

from quoting_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from quoting_kernel.domain.quotes import (
    Quote,
    QuoteKind,
    QuoteLine,
    QuoteStatus,
    normalize_description,
)
from quoting_kernel.domain.valuation import (
    TENANT_CONFIG_ENTITY_ID,
    CatalogItem,
    ConfigValuation,
    ItemValuation,
    ValuationSnapshot,
    snapshot_on_change,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "Quote",
    "QuoteKind",
    "QuoteLine",
    "QuoteStatus",
    "normalize_description",
    "TENANT_CONFIG_ENTITY_ID",
    "CatalogItem",
    "ConfigValuation",
    "ItemValuation",
    "ValuationSnapshot",
    "snapshot_on_change",
]
