"""Write-side services for the quoting kernel."""

from quoting_kernel.services.valuation_recorder import ValuationRecorder

__all__ = [
    "ValuationRecorder",
]
