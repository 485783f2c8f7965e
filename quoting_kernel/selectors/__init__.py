"""Selectors for the quoting kernel (read side)."""

from quoting_kernel.selectors.valuation_selector import ValuationSelector

__all__ = [
    "ValuationSelector",
]
