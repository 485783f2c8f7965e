"""
Module: quoting_kernel.models.valuation
Responsibility: ORM persistence for live catalog items, the live tenant
    configuration, and the append-only valuation history of both.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - Every row carries an explicit tenant_id; there is no ambient tenant.
    - Snapshot rows are append-only: the recorder inserts them and nothing
      updates or deletes them.
    - Unit costs of live catalog items are nullable; NULL means "never
      entered", which is not the same as zero.

Audit relevance:
    The snapshot tables are the only source for reconstructing what a
    price, cost or tax rate was on the day a quote was issued.  Rewriting
    a snapshot silently changes every historical margin that depends on it.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from quoting_kernel.db.base import Base


class CatalogItemRecord(Base):
    """Live catalog item: the current price and cost values."""

    __tablename__ = "catalog_items"

    __table_args__ = (
        Index("idx_catalog_tenant", "tenant_id"),
        Index("idx_catalog_tenant_category", "tenant_id", "category_id"),
    )

    tenant_id: Mapped[str] = mapped_column(String(100), nullable=False)
    category_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)

    unit_sale_price: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    unit_sale_labor_price: Mapped[Decimal] = mapped_column(
        nullable=False, default=Decimal("0")
    )
    unit_material_cost: Mapped[Decimal | None] = mapped_column(nullable=True)
    unit_labor_cost: Mapped[Decimal | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<CatalogItemRecord {self.id} {self.description!r}>"


class TenantConfigurationRecord(Base):
    """Live tenant configuration: tax rates (percent) and fixed monthly cost."""

    __tablename__ = "tenant_configurations"

    __table_args__ = (UniqueConstraint("tenant_id", name="uq_tenant_configuration"),)

    tenant_id: Mapped[str] = mapped_column(String(100), nullable=False)
    material_tax_rate: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    service_tax_rate: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    fixed_monthly_cost: Mapped[Decimal] = mapped_column(
        nullable=False, default=Decimal("0")
    )

    def __repr__(self) -> str:
        return f"<TenantConfigurationRecord {self.tenant_id}>"


class ItemValuationSnapshotRecord(Base):
    """One append-only history row for a catalog item's values."""

    __tablename__ = "item_valuation_history"

    __table_args__ = (
        Index("idx_item_history_tenant", "tenant_id"),
        Index("idx_item_history_lookup", "tenant_id", "item_id", "effective_date"),
    )

    tenant_id: Mapped[str] = mapped_column(String(100), nullable=False)
    item_id: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    effective_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False)

    unit_sale_price: Mapped[Decimal] = mapped_column(nullable=False)
    unit_sale_labor_price: Mapped[Decimal] = mapped_column(nullable=False)
    unit_material_cost: Mapped[Decimal | None] = mapped_column(nullable=True)
    unit_labor_cost: Mapped[Decimal | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<ItemValuationSnapshotRecord {self.item_id} @ {self.effective_date}>"


class ConfigValuationSnapshotRecord(Base):
    """One append-only history row for a tenant's financial configuration."""

    __tablename__ = "config_valuation_history"

    __table_args__ = (
        Index("idx_config_history_lookup", "tenant_id", "effective_date"),
    )

    tenant_id: Mapped[str] = mapped_column(String(100), nullable=False)
    effective_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False)

    material_tax_rate: Mapped[Decimal] = mapped_column(nullable=False)
    service_tax_rate: Mapped[Decimal] = mapped_column(nullable=False)
    fixed_monthly_cost: Mapped[Decimal] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<ConfigValuationSnapshotRecord {self.tenant_id} @ {self.effective_date}>"
