"""
Reporting Configuration Schema.

Defines ranking, fixed-cost proration, valuation fallback and CSV
formatting options for period reports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self

from quoting_engines.proration import DEFAULT_DAYS_PER_MONTH, ProrationMethod
from quoting_kernel.logging_config import get_logger

logger = get_logger("modules.reporting.config")


@dataclass
class ReportingConfig:
    """
    Configuration schema for the reporting module.

    Controls rankings, fixed-cost proration, valuation fallbacks and
    export formatting.
    """

    # Top-N size of the client and product rankings
    ranking_size: int = 10

    # Fixed monthly cost attribution
    proration_method: ProrationMethod = ProrationMethod.DAILY
    proration_days_per_month: int = DEFAULT_DAYS_PER_MONTH

    # Resolve to the earliest snapshot when nothing predates the target
    # date and no live record exists
    earliest_snapshot_fallback: bool = False

    # Treat a resolved item with zero material and labor cost as unknown
    zero_cost_is_unknown: bool = False

    # CSV export
    csv_delimiter: str = ","
    csv_include_bom: bool = False

    # Rounding precision for display
    display_precision: int = 2

    def __post_init__(self):
        if not isinstance(self.proration_method, ProrationMethod):
            self.proration_method = ProrationMethod(self.proration_method)
        for name in ("ranking_size", "proration_days_per_month", "display_precision"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        for name in ("earliest_snapshot_fallback", "zero_cost_is_unknown", "csv_include_bom"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ValueError(f"{name} must be true or false, got {value!r}")
        if not isinstance(self.csv_delimiter, str):
            raise ValueError(f"csv_delimiter must be a string, got {self.csv_delimiter!r}")
        if self.ranking_size < 0:
            raise ValueError("ranking_size cannot be negative")
        if self.proration_days_per_month <= 0:
            raise ValueError("proration_days_per_month must be positive")
        if self.display_precision < 0:
            raise ValueError("display_precision cannot be negative")
        if len(self.csv_delimiter) != 1:
            raise ValueError("csv_delimiter must be a single character")

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("reporting_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from dictionary."""
        logger.info(
            "reporting_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
