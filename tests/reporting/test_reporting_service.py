"""
Integration tests for ReportingService against the SQLite record store.

Covers:
- Valuation data loaded per tenant and resolved as of emission date
- Report metadata stamped from the injected clock
- Historical corrections reflected on the next run (no caching)
- LogContext binding of tenant_id and report_id
- CSV export through the service's configured format
"""

from datetime import date
from decimal import Decimal

import pytest

from quoting_kernel.domain.valuation import ConfigValuation, ItemValuation
from quoting_kernel.exceptions import InvalidDateRangeError, MissingReportInputError
from quoting_kernel.services.valuation_recorder import ValuationRecorder
from quoting_modules.reporting.config import ReportingConfig
from quoting_modules.reporting.models import ProfitPrecision
from quoting_modules.reporting.service import ReportingService

TENANT = "tenant-1"


@pytest.fixture
def recorded_item(session, deterministic_clock):
    """Item X: cost 100 from 2024-01-01, 150 from 2024-06-01; zero taxes."""
    recorder = ValuationRecorder(session, deterministic_clock)
    item = recorder.save_item(
        TENANT,
        "Item X",
        ItemValuation(unit_sale_price=Decimal("300"), unit_material_cost=Decimal("100")),
        effective_date=date(2024, 1, 1),
    )
    deterministic_clock.advance(60)
    recorder.save_item(
        TENANT,
        "Item X",
        ItemValuation(unit_sale_price=Decimal("300"), unit_material_cost=Decimal("150")),
        item_id=item.item_id,
        effective_date=date(2024, 6, 1),
    )
    recorder.save_tenant_config(
        TENANT,
        ConfigValuation(fixed_monthly_cost=Decimal("300")),
        effective_date=date(2024, 1, 1),
    )
    session.commit()
    return item


@pytest.fixture
def quotes_for(make_quote, make_line):
    def _build(item_id):
        line = make_line("Item X", "2", price="300", item_id=item_id)
        return [
            make_quote("q-march", date(2024, 3, 15), lines=(line,)),
            make_quote("q-july", date(2024, 7, 1), lines=(line,)),
        ]

    return _build


class TestPeriodReport:

    def test_margins_use_costs_in_force_at_emission(
        self, reporting_service, recorded_item, quotes_for
    ):
        report = reporting_service.period_report(
            TENANT, quotes_for(recorded_item.item_id), date(2024, 1, 1), date(2024, 12, 30)
        )

        margins = {o.quote_id: o.total_margin for o in report.orders}
        assert margins == {"q-march": Decimal("400"), "q-july": Decimal("300")}
        assert report.profitability.total_margin == Decimal("700")
        assert report.net_profit.precision == ProfitPrecision.DETAILED

    def test_metadata_stamped_from_clock(self, reporting_service, recorded_item, quotes_for):
        report = reporting_service.period_report(
            TENANT, quotes_for(recorded_item.item_id), date(2024, 3, 1), date(2024, 3, 31)
        )

        assert report.metadata.tenant_id == TENANT
        assert report.metadata.report_id
        assert report.metadata.generated_at.startswith("2024-01-01T12:01")

    def test_other_tenant_sees_no_valuation_data(self, reporting_service, recorded_item, quotes_for):
        report = reporting_service.period_report(
            "tenant-2", quotes_for(recorded_item.item_id), date(2024, 3, 1), date(2024, 3, 31)
        )

        assert report.profitability is None
        assert report.net_profit is None
        assert report.status_summary.accepted.total_value == Decimal("600")

    def test_historical_correction_is_reflected_on_next_run(
        self, session, deterministic_clock, reporting_service, recorded_item, quotes_for
    ):
        quotes = quotes_for(recorded_item.item_id)
        first = reporting_service.period_report(TENANT, quotes, date(2024, 3, 1), date(2024, 3, 31))

        deterministic_clock.advance(60)
        ValuationRecorder(session, deterministic_clock).save_item(
            TENANT,
            "Item X",
            ItemValuation(unit_sale_price=Decimal("300"), unit_material_cost=Decimal("120")),
            item_id=recorded_item.item_id,
            effective_date=date(2024, 3, 1),
        )
        second = reporting_service.period_report(TENANT, quotes, date(2024, 3, 1), date(2024, 3, 31))

        assert first.orders[0].total_margin == Decimal("400")
        assert second.orders[0].total_margin == Decimal("360")

    def test_invalid_window_fails_before_loading(self, reporting_service):
        with pytest.raises(InvalidDateRangeError):
            reporting_service.period_report(TENANT, [], date(2024, 2, 1), date(2024, 1, 1))

    def test_missing_quotes_fail(self, reporting_service):
        with pytest.raises(MissingReportInputError):
            reporting_service.period_report(TENANT, None, date(2024, 1, 1), date(2024, 1, 31))

    def test_log_records_carry_tenant_and_report_id(
        self, reporting_service, recorded_item, quotes_for, captured_logs
    ):
        report = reporting_service.period_report(
            TENANT, quotes_for(recorded_item.item_id), date(2024, 3, 1), date(2024, 3, 31)
        )

        built = next(r for r in captured_logs() if r["message"] == "period_report_built")
        assert built["tenant_id"] == TENANT
        assert built["report_id"] == report.metadata.report_id


class TestServiceExport:

    def test_export_uses_configured_format(
        self, session, deterministic_clock, recorded_item, quotes_for
    ):
        service = ReportingService(
            session,
            deterministic_clock,
            ReportingConfig(csv_delimiter=";", csv_include_bom=True),
        )
        report = service.period_report(
            TENANT, quotes_for(recorded_item.item_id), date(2024, 3, 1), date(2024, 3, 31)
        )

        data = service.export_csv(report)

        text = data.decode("utf-8")
        assert text.startswith("\ufeffquote_id;emission_date;")
        assert "q-march;2024-03-15;" in text
