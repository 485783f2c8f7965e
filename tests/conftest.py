"""
Pytest fixtures for the quoting test suite.

Provides:
- Structured logging configured once per session, with a capture fixture
- In-memory SQLite sessions for record store tests
- Builders for quotes, catalog items and valuation snapshots

No external database is needed: the record store tests run against
SQLite in memory, everything else is pure.
"""

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from quoting_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from quoting_kernel.domain.clock import DeterministicClock
from quoting_kernel.domain.quotes import Quote, QuoteKind, QuoteLine, QuoteStatus
from quoting_kernel.domain.valuation import (
    TENANT_CONFIG_ENTITY_ID,
    CatalogItem,
    ConfigValuation,
    ItemValuation,
    ValuationSnapshot,
)
from quoting_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging once for the whole test session."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture structured JSON log records emitted during a test.

    Usage:
        def test_something(captured_logs):
            ...
            records = captured_logs()
            assert any(r["message"] == "period_report_built" for r in records)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("quoting_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """Fresh in-memory SQLite database per test."""
    init_engine_from_url("sqlite:///:memory:")
    create_tables()
    session = get_session()
    try:
        yield session
    finally:
        session.close()
        drop_tables()
        reset_engine()


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    """Clock fixed at 2024-01-01 12:00 UTC."""
    return DeterministicClock()


# =============================================================================
# Builders
# =============================================================================


def _ts(day: date, seconds: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, 9, 0, seconds, tzinfo=timezone.utc)


@pytest.fixture
def item_snapshot():
    """Build an item ValuationSnapshot: item_snapshot("x", date, material_cost=...)."""

    def _build(
        entity_id: str,
        effective_date: date,
        *,
        material_cost: str | None = None,
        labor_cost: str | None = None,
        sale_price: str = "0",
        labor_price: str = "0",
        created_second: int = 0,
    ) -> ValuationSnapshot:
        return ValuationSnapshot(
            entity_id=entity_id,
            effective_date=effective_date,
            created_at=_ts(effective_date, created_second),
            payload=ItemValuation(
                unit_sale_price=Decimal(sale_price),
                unit_sale_labor_price=Decimal(labor_price),
                unit_material_cost=Decimal(material_cost) if material_cost is not None else None,
                unit_labor_cost=Decimal(labor_cost) if labor_cost is not None else None,
            ),
        )

    return _build


@pytest.fixture
def config_snapshot():
    """Build a tenant configuration ValuationSnapshot."""

    def _build(
        effective_date: date,
        *,
        material_tax: str = "0",
        service_tax: str = "0",
        fixed_cost: str = "0",
        created_second: int = 0,
    ) -> ValuationSnapshot:
        return ValuationSnapshot(
            entity_id=TENANT_CONFIG_ENTITY_ID,
            effective_date=effective_date,
            created_at=_ts(effective_date, created_second),
            payload=ConfigValuation(
                material_tax_rate=Decimal(material_tax),
                service_tax_rate=Decimal(service_tax),
                fixed_monthly_cost=Decimal(fixed_cost),
            ),
        )

    return _build


@pytest.fixture
def catalog_item():
    """Build a CatalogItem with live values (no cost basis by default)."""

    def _build(
        item_id: str,
        description: str = "",
        *,
        category_id: str | None = None,
        material_cost: str | None = None,
        labor_cost: str | None = None,
    ) -> CatalogItem:
        return CatalogItem(
            item_id=item_id,
            description=description or item_id,
            category_id=category_id,
            live=ItemValuation(
                unit_material_cost=Decimal(material_cost) if material_cost is not None else None,
                unit_labor_cost=Decimal(labor_cost) if labor_cost is not None else None,
            ),
        )

    return _build


@pytest.fixture
def make_line():
    """Build a QuoteLine; line_total defaults to quantity * (material + labor price)."""

    def _build(
        description: str,
        quantity: str = "1",
        *,
        price: str = "0",
        labor_price: str = "0",
        item_id: str | None = None,
        category_id: str | None = None,
        line_total: str | None = None,
    ) -> QuoteLine:
        qty = Decimal(quantity)
        total = (
            Decimal(line_total)
            if line_total is not None
            else qty * (Decimal(price) + Decimal(labor_price))
        )
        return QuoteLine(
            description=description,
            quantity=qty,
            line_total=total,
            unit_sale_price=Decimal(price),
            unit_sale_labor_price=Decimal(labor_price),
            item_id=item_id,
            category_id=category_id,
        )

    return _build


@pytest.fixture
def make_quote():
    """Build a Quote; total_value defaults to the sum of its line totals."""

    def _build(
        quote_id: str,
        emission_date: date,
        *,
        status: QuoteStatus = QuoteStatus.ACCEPTED,
        lines: tuple[QuoteLine, ...] = (),
        client_id: str = "client-a",
        client_name: str | None = None,
        kind: QuoteKind = QuoteKind.DETAILED,
        total_value: str | None = None,
    ) -> Quote:
        total = (
            Decimal(total_value)
            if total_value is not None
            else sum((line.line_total for line in lines), Decimal("0"))
        )
        return Quote(
            quote_id=quote_id,
            emission_date=emission_date,
            status=status,
            total_value=total,
            client_id=client_id,
            client_name=client_name or client_id.replace("-", " ").title(),
            kind=kind,
            lines=tuple(lines),
        )

    return _build
