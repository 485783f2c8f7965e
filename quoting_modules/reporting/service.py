"""
Reporting Module Service (``quoting_modules.reporting.service``).

Responsibility
--------------
Orchestrates period report generation by bridging the valuation selector
(``ValuationSelector``) to the pure transformation functions in
``statements.py``, and hands finished reports to the CSV exporter.  This
is a **read-only** service: no catalog item, configuration or snapshot is
ever written.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``ReportingService`` is the sole public
entry point for period reports.  Constructor: ``session`` + ``clock`` +
``config``.  Quotes are supplied by the caller (the quote store is an
external collaborator); catalog and configuration data are loaded once
per report run.

Invariants enforced
-------------------
* Read-only -- no mutations to the record store.
* All monetary amounts use ``Decimal`` -- NEVER ``float``.
* Each run is independent: valuation data is reloaded on every call and
  never cached, so historical corrections are always reflected.
* Report metadata carries tenant, window and generation timestamp.

Failure modes
-------------
* Selector query failure  -> exception propagates (no rollback needed --
  read-only).
* Invalid window (start_date after end_date)  -> ``InvalidDateRangeError``
  raised before any query runs.
* Missing quote sequence  -> ``MissingReportInputError``.
* Partial valuation data  -> degraded report precision, never an error.

Audit relevance
---------------
Every run binds ``tenant_id`` and a fresh ``report_id`` into
``LogContext`` so all records of the run, engine traces included, can be
correlated.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from uuid import uuid4

from sqlalchemy.orm import Session

from quoting_kernel.domain.clock import Clock, SystemClock
from quoting_kernel.domain.quotes import Quote
from quoting_kernel.exceptions import InvalidDateRangeError, MissingReportInputError
from quoting_kernel.logging_config import LogContext, get_logger
from quoting_kernel.selectors.valuation_selector import ValuationSelector
from quoting_modules.reporting.config import ReportingConfig
from quoting_modules.reporting.export import export_to_csv
from quoting_modules.reporting.models import PeriodReport, ReportMetadata
from quoting_modules.reporting.statements import build_period_report

logger = get_logger("modules.reporting.service")


class ReportingService:
    """
    Period report generation service.

    Contract
    --------
    * ``period_report`` returns a freshly built ``PeriodReport``.
    * ``export_csv`` returns UTF-8 CSV bytes for a built report.
    * All methods are **read-only** -- no mutations to the database.

    Guarantees
    ----------
    * Report generation delegates to pure transformation functions in
      ``statements.py``; no valuation logic lives in this class.
    * Clock is injectable for deterministic testing.

    Non-goals
    ---------
    * Does NOT fetch quotes; the caller supplies the period's quotes.
    * Does NOT cache reports.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: ReportingConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or ReportingConfig.with_defaults()
        self._valuations = ValuationSelector(session)

        logger.info(
            "reporting_service_initialized",
            extra={
                "ranking_size": self._config.ranking_size,
                "proration_method": self._config.proration_method.value,
            },
        )

    @property
    def config(self) -> ReportingConfig:
        return self._config

    def _build_metadata(
        self, tenant_id: str, report_id: str, start_date: date, end_date: date
    ) -> ReportMetadata:
        """Build report metadata with injected clock timestamp."""
        return ReportMetadata(
            start_date=start_date,
            end_date=end_date,
            generated_at=self._clock.now().isoformat(),
            tenant_id=tenant_id,
            report_id=report_id,
        )

    def period_report(
        self,
        tenant_id: str,
        quotes: Iterable[Quote],
        start_date: date,
        end_date: date,
    ) -> PeriodReport:
        """
        Generate the period report of one tenant.

        Args:
            tenant_id: Tenant whose catalog and configuration are used.
            quotes: The tenant's quotes for the period.
            start_date: First day of the window (inclusive).
            end_date: Last day of the window (inclusive).

        Returns:
            PeriodReport valued as of each quote's emission date.
        """
        if quotes is None:
            raise MissingReportInputError("quotes")
        if start_date > end_date:
            raise InvalidDateRangeError(start_date, end_date)

        report_id = str(uuid4())
        with LogContext.bind(tenant_id=tenant_id, report_id=report_id):
            catalog = self._valuations.catalog(tenant_id)
            item_history = self._valuations.item_history(tenant_id)
            config_live = self._valuations.tenant_config(tenant_id)
            config_history = self._valuations.config_history(tenant_id)

            logger.info(
                "period_report_inputs_loaded",
                extra={
                    "catalog_size": len(catalog),
                    "item_snapshots": len(item_history),
                    "config_snapshots": len(config_history),
                    "has_live_config": config_live is not None,
                },
            )

            return build_period_report(
                quotes=quotes,
                item_history=item_history,
                item_catalog=catalog,
                config_history=config_history,
                config_live=config_live,
                start_date=start_date,
                end_date=end_date,
                config=self._config,
                metadata=self._build_metadata(tenant_id, report_id, start_date, end_date),
            )

    def export_csv(self, report: PeriodReport) -> bytes:
        """Export a built report as CSV using the configured format."""
        with LogContext.bind(
            tenant_id=report.metadata.tenant_id,
            report_id=report.metadata.report_id,
        ):
            return export_to_csv(
                report,
                delimiter=self._config.csv_delimiter,
                include_bom=self._config.csv_include_bom,
                precision=self._config.display_precision,
            )
