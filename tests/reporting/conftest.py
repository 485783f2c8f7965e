"""
Reporting-specific test fixtures.

Provides:
- ReportingConfig and ReportingService instances
- A small tenant catalog with valuation history for report tests
"""

from datetime import date

import pytest

from quoting_modules.reporting.config import ReportingConfig
from quoting_modules.reporting.service import ReportingService


@pytest.fixture
def reporting_config() -> ReportingConfig:
    """Standard reporting configuration for tests."""
    return ReportingConfig.with_defaults()


@pytest.fixture
def reporting_service(session, deterministic_clock, reporting_config) -> ReportingService:
    """ReportingService wired to the test session."""
    return ReportingService(
        session=session,
        clock=deterministic_clock,
        config=reporting_config,
    )


@pytest.fixture
def tenant_data(catalog_item, item_snapshot, config_snapshot):
    """
    Catalog with two costed items and one item never costed.

    Item "x": material cost 100 from 2024-01-01, 150 from 2024-06-01.
    Item "y": labor cost 20 from 2024-01-01.
    Item "z": no cost ever entered.
    Tenant: 10% material tax, 5% service tax, fixed cost 3000 from 2024-01-01.
    """
    return {
        "catalog": [
            catalog_item("x", "Item X"),
            catalog_item("y", "Service Y"),
            catalog_item("z", "Item Z"),
        ],
        "item_history": [
            item_snapshot("x", date(2024, 1, 1), material_cost="100"),
            item_snapshot("x", date(2024, 6, 1), material_cost="150"),
            item_snapshot("y", date(2024, 1, 1), labor_cost="20"),
        ],
        "config_history": [
            config_snapshot(
                date(2024, 1, 1), material_tax="10", service_tax="5", fixed_cost="3000"
            ),
        ],
        "config_live": None,
    }
