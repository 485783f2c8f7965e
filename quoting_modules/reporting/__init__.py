"""
Period Reporting Module (``quoting_modules.reporting``).

Responsibility
--------------
Read-only module that generates period reports over a tenant's issued
quotes: per-status totals and conversion rate, daily time series, top
client and product rankings, aggregate profitability valued as of each
quote's emission date, the company's net profit, and CSV export.

Architecture position
---------------------
**Modules layer** -- pure read-only service.  All report computation is
implemented as pure functions in ``statements.py`` on top of the engines.

Invariants enforced
-------------------
* No catalog item, configuration or snapshot is written by this module.
* Reports derive entirely from the quotes and the append-only valuation
  history; they are never cached.

Failure modes
-------------
* Invalid window -> ``InvalidDateRangeError``.
* Incomplete valuation data -> reduced precision, omitted sections.

Audit relevance
---------------
Report generation is deterministic and reproducible from the valuation
history.  Report metadata includes tenant, window and generation
timestamp.
"""

from quoting_modules.reporting.config import ReportingConfig
from quoting_modules.reporting.export import CSV_COLUMNS, export_to_csv
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
from quoting_modules.reporting.service import ReportingService
from quoting_modules.reporting.statements import build_period_report, render_to_dict

__all__ = [
    # Service
    "ReportingService",
    # Config
    "ReportingConfig",
    # Pure functions
    "build_period_report",
    "render_to_dict",
    "export_to_csv",
    "CSV_COLUMNS",
    # Models
    "ReportMetadata",
    "StatusTotal",
    "StatusSummary",
    "DailyPoint",
    "ClientRanking",
    "ProductRanking",
    "ProfitabilitySummary",
    "ProfitPrecision",
    "NetProfitSummary",
    "PeriodReport",
]
