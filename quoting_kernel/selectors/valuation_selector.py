"""
Module: quoting_kernel.selectors.valuation_selector
Responsibility: Read-only access to the versioned record store: live catalog
    items, live tenant configuration, and the full valuation history of both.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Every query is filtered by the tenant_id passed by the caller.
    - History is returned unfiltered by date; the resolver picks the
      snapshot in force for each quote.
    - Results are frozen domain DTOs (CatalogItem, ValuationSnapshot,
      ConfigValuation), never ORM instances.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select

from quoting_kernel.domain.valuation import (
    TENANT_CONFIG_ENTITY_ID,
    CatalogItem,
    ConfigValuation,
    ItemValuation,
    ValuationSnapshot,
)
from quoting_kernel.logging_config import get_logger
from quoting_kernel.models.valuation import (
    CatalogItemRecord,
    ConfigValuationSnapshotRecord,
    ItemValuationSnapshotRecord,
    TenantConfigurationRecord,
)
from quoting_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.valuation")


def _as_utc(value: datetime) -> datetime:
    """Backends without timezone support (SQLite) hand back naive UTC values."""
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class ValuationSelector(BaseSelector):
    """Loads live records and valuation history for one tenant at a time."""

    def catalog(self, tenant_id: str) -> list[CatalogItem]:
        """All live catalog items of a tenant, ordered by id."""
        rows = self.session.scalars(
            select(CatalogItemRecord).where(CatalogItemRecord.tenant_id == tenant_id)
        ).all()
        items = [
            CatalogItem(
                item_id=str(row.id),
                description=row.description,
                category_id=row.category_id,
                live=ItemValuation(
                    unit_sale_price=row.unit_sale_price,
                    unit_sale_labor_price=row.unit_sale_labor_price,
                    unit_material_cost=row.unit_material_cost,
                    unit_labor_cost=row.unit_labor_cost,
                ),
            )
            for row in rows
        ]
        items.sort(key=lambda i: i.item_id)
        logger.debug(
            "catalog_loaded",
            extra={"tenant_id": tenant_id, "item_count": len(items)},
        )
        return items

    def item_history(self, tenant_id: str) -> list[ValuationSnapshot]:
        """Every item snapshot of a tenant, oldest effective date first."""
        rows = self.session.scalars(
            select(ItemValuationSnapshotRecord)
            .where(ItemValuationSnapshotRecord.tenant_id == tenant_id)
            .order_by(
                ItemValuationSnapshotRecord.effective_date,
                ItemValuationSnapshotRecord.created_at,
            )
        ).all()
        snapshots = [
            ValuationSnapshot(
                entity_id=row.item_id,
                effective_date=row.effective_date,
                created_at=_as_utc(row.created_at),
                payload=ItemValuation(
                    unit_sale_price=row.unit_sale_price,
                    unit_sale_labor_price=row.unit_sale_labor_price,
                    unit_material_cost=row.unit_material_cost,
                    unit_labor_cost=row.unit_labor_cost,
                ),
                description=row.description,
                snapshot_id=str(row.id),
            )
            for row in rows
        ]
        logger.debug(
            "item_history_loaded",
            extra={"tenant_id": tenant_id, "snapshot_count": len(snapshots)},
        )
        return snapshots

    def tenant_config(self, tenant_id: str) -> ConfigValuation | None:
        """The live configuration, or None if the tenant never saved one."""
        row = self.session.scalars(
            select(TenantConfigurationRecord).where(
                TenantConfigurationRecord.tenant_id == tenant_id
            )
        ).one_or_none()
        if row is None:
            return None
        return ConfigValuation(
            material_tax_rate=row.material_tax_rate,
            service_tax_rate=row.service_tax_rate,
            fixed_monthly_cost=row.fixed_monthly_cost,
        )

    def config_history(self, tenant_id: str) -> list[ValuationSnapshot]:
        """Every configuration snapshot of a tenant, oldest effective date first."""
        rows = self.session.scalars(
            select(ConfigValuationSnapshotRecord)
            .where(ConfigValuationSnapshotRecord.tenant_id == tenant_id)
            .order_by(
                ConfigValuationSnapshotRecord.effective_date,
                ConfigValuationSnapshotRecord.created_at,
            )
        ).all()
        snapshots = [
            ValuationSnapshot(
                entity_id=TENANT_CONFIG_ENTITY_ID,
                effective_date=row.effective_date,
                created_at=_as_utc(row.created_at),
                payload=ConfigValuation(
                    material_tax_rate=row.material_tax_rate,
                    service_tax_rate=row.service_tax_rate,
                    fixed_monthly_cost=row.fixed_monthly_cost,
                ),
                snapshot_id=str(row.id),
            )
            for row in rows
        ]
        logger.debug(
            "config_history_loaded",
            extra={"tenant_id": tenant_id, "snapshot_count": len(snapshots)},
        )
        return snapshots
