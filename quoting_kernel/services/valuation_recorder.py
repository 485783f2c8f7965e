"""
Module: quoting_kernel.services.valuation_recorder
Responsibility: Persist edits of live catalog items and the live tenant
    configuration, appending a valuation snapshot whenever a tracked price,
    cost or tax value changes.
Architecture position: Kernel > Services.  May import from db/, models/,
    domain/.  MUST NOT import engines or modules.

Invariants enforced:
    - Append-only history: snapshot rows are inserted, never updated or
      deleted.
    - A snapshot is appended only when a tracked value changed (or when a
      new entity is created with non-zero values).
    - Tenant isolation by explicit tenant_id; an item of another tenant is
      treated as not found.

Failure modes:
    - CatalogItemNotFoundError when updating an unknown item.

Audit relevance:
    Snapshots carry the injected clock's timestamp as created_at, which is
    the tie-breaker between two changes effective on the same day.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from quoting_kernel.domain.clock import Clock, SystemClock
from quoting_kernel.domain.valuation import (
    TENANT_CONFIG_ENTITY_ID,
    CatalogItem,
    ConfigValuation,
    ItemValuation,
    snapshot_on_change,
)
from quoting_kernel.exceptions import CatalogItemNotFoundError
from quoting_kernel.logging_config import get_logger
from quoting_kernel.models.valuation import (
    CatalogItemRecord,
    ConfigValuationSnapshotRecord,
    ItemValuationSnapshotRecord,
    TenantConfigurationRecord,
)

logger = get_logger("services.valuation_recorder")


def _item_values(row: CatalogItemRecord) -> ItemValuation:
    return ItemValuation(
        unit_sale_price=row.unit_sale_price,
        unit_sale_labor_price=row.unit_sale_labor_price,
        unit_material_cost=row.unit_material_cost,
        unit_labor_cost=row.unit_labor_cost,
    )


def _config_values(row: TenantConfigurationRecord) -> ConfigValuation:
    return ConfigValuation(
        material_tax_rate=row.material_tax_rate,
        service_tax_rate=row.service_tax_rate,
        fixed_monthly_cost=row.fixed_monthly_cost,
    )


class ValuationRecorder:
    """
    Saves live records and keeps their valuation history.

    The caller owns the session and its transaction; the recorder only
    adds and flushes.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()

    def _find_item(self, item_id: str) -> CatalogItemRecord | None:
        try:
            key = UUID(item_id)
        except ValueError:
            return None
        return self._session.get(CatalogItemRecord, key)

    def save_item(
        self,
        tenant_id: str,
        description: str,
        values: ItemValuation,
        *,
        item_id: str | None = None,
        category_id: str | None = None,
        effective_date: date | None = None,
    ) -> CatalogItem:
        """
        Create (``item_id is None``) or update a catalog item.

        Raises:
            CatalogItemNotFoundError: If ``item_id`` does not exist for the tenant.
        """
        if item_id is None:
            row = CatalogItemRecord(tenant_id=tenant_id)
            before = None
            self._session.add(row)
        else:
            row = self._find_item(item_id)
            if row is None or row.tenant_id != tenant_id:
                raise CatalogItemNotFoundError(tenant_id, item_id)
            before = _item_values(row)

        row.description = description
        if category_id is not None or item_id is None:
            row.category_id = category_id
        row.unit_sale_price = values.unit_sale_price
        row.unit_sale_labor_price = values.unit_sale_labor_price
        row.unit_material_cost = values.unit_material_cost
        row.unit_labor_cost = values.unit_labor_cost
        self._session.flush()

        snapshot = snapshot_on_change(
            before,
            values,
            entity_id=str(row.id),
            effective_date=effective_date or self._clock.today(),
            created_at=self._clock.now(),
            description=description,
        )
        if snapshot is not None:
            self._session.add(
                ItemValuationSnapshotRecord(
                    tenant_id=tenant_id,
                    item_id=snapshot.entity_id,
                    description=description,
                    effective_date=snapshot.effective_date,
                    created_at=snapshot.created_at,
                    unit_sale_price=values.unit_sale_price,
                    unit_sale_labor_price=values.unit_sale_labor_price,
                    unit_material_cost=values.unit_material_cost,
                    unit_labor_cost=values.unit_labor_cost,
                )
            )
            self._session.flush()

        logger.info(
            "catalog_item_saved",
            extra={
                "tenant_id": tenant_id,
                "item_id": str(row.id),
                "is_new": before is None,
                "snapshot_appended": snapshot is not None,
            },
        )
        return CatalogItem(
            item_id=str(row.id),
            description=row.description,
            category_id=row.category_id,
            live=values,
        )

    def save_tenant_config(
        self,
        tenant_id: str,
        values: ConfigValuation,
        *,
        effective_date: date | None = None,
    ) -> ConfigValuation:
        """Create or update the tenant's live configuration."""
        row = self._session.scalars(
            select(TenantConfigurationRecord).where(
                TenantConfigurationRecord.tenant_id == tenant_id
            )
        ).one_or_none()
        if row is None:
            row = TenantConfigurationRecord(tenant_id=tenant_id)
            before = None
            self._session.add(row)
        else:
            before = _config_values(row)

        row.material_tax_rate = values.material_tax_rate
        row.service_tax_rate = values.service_tax_rate
        row.fixed_monthly_cost = values.fixed_monthly_cost

        snapshot = snapshot_on_change(
            before,
            values,
            entity_id=TENANT_CONFIG_ENTITY_ID,
            effective_date=effective_date or self._clock.today(),
            created_at=self._clock.now(),
        )
        if snapshot is not None:
            self._session.add(
                ConfigValuationSnapshotRecord(
                    tenant_id=tenant_id,
                    effective_date=snapshot.effective_date,
                    created_at=snapshot.created_at,
                    material_tax_rate=values.material_tax_rate,
                    service_tax_rate=values.service_tax_rate,
                    fixed_monthly_cost=values.fixed_monthly_cost,
                )
            )
        self._session.flush()

        logger.info(
            "tenant_config_saved",
            extra={
                "tenant_id": tenant_id,
                "is_new": before is None,
                "snapshot_appended": snapshot is not None,
            },
        )
        return values
