"""
Valuation -- Versioned valuation snapshots and live records.

Responsibility:
    Value objects for the append-only history of price, cost and tax
    values.  A tracked entity is either a catalog item or the tenant's
    global financial configuration; each change to a tracked value
    produces a new ``ValuationSnapshot`` stamped with an effective date.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Snapshots are frozen; the history is append-only.
    - A missing unit cost is ``None``, never zero: "$0 cost" and
      "cost never entered" stay distinguishable.

Failure modes:
    None -- construction never validates business meaning.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime
from decimal import Decimal

from quoting_kernel.domain.quotes import normalize_description

ZERO = Decimal("0")

# Entity id under which the tenant configuration history is recorded.
TENANT_CONFIG_ENTITY_ID = "tenant-config"


@dataclass(frozen=True)
class ItemValuation:
    """Price and cost values of a catalog item."""

    unit_sale_price: Decimal = ZERO
    unit_sale_labor_price: Decimal = ZERO
    unit_material_cost: Decimal | None = None
    unit_labor_cost: Decimal | None = None

    @property
    def has_cost_basis(self) -> bool:
        """True if at least one unit cost was ever entered."""
        return self.unit_material_cost is not None or self.unit_labor_cost is not None

    @property
    def material_cost(self) -> Decimal:
        return self.unit_material_cost if self.unit_material_cost is not None else ZERO

    @property
    def labor_cost(self) -> Decimal:
        return self.unit_labor_cost if self.unit_labor_cost is not None else ZERO

    def tracked_values(self) -> tuple[Decimal | None, ...]:
        return tuple(getattr(self, f.name) for f in fields(self))


@dataclass(frozen=True)
class ConfigValuation:
    """Tax rates (percent) and fixed monthly cost of a tenant."""

    material_tax_rate: Decimal = ZERO
    service_tax_rate: Decimal = ZERO
    fixed_monthly_cost: Decimal = ZERO

    @property
    def has_tax_rate(self) -> bool:
        return self.material_tax_rate != 0 or self.service_tax_rate != 0

    @property
    def is_configured(self) -> bool:
        """True if any tax rate or a fixed cost has been set."""
        return self.has_tax_rate or self.fixed_monthly_cost != 0

    @property
    def average_tax_rate(self) -> Decimal:
        return (self.material_tax_rate + self.service_tax_rate) / 2

    def tracked_values(self) -> tuple[Decimal, ...]:
        return tuple(getattr(self, f.name) for f in fields(self))


@dataclass(frozen=True)
class ValuationSnapshot:
    """
    One entry of an entity's append-only valuation history.

    ``effective_date`` is the date the values took effect; ``created_at``
    is the insertion timestamp and is only used to break ties between
    snapshots sharing an effective date (last write wins).
    """

    entity_id: str
    effective_date: date
    created_at: datetime
    payload: ItemValuation | ConfigValuation
    description: str | None = None
    snapshot_id: str | None = None

    @property
    def sort_key(self) -> tuple[date, datetime]:
        return (self.effective_date, self.created_at)


@dataclass(frozen=True)
class CatalogItem:
    """A catalog item with its live (current, non-historical) values."""

    item_id: str
    description: str
    category_id: str | None
    live: ItemValuation

    @property
    def normalized_description(self) -> str:
        return normalize_description(self.description)


def snapshot_on_change(
    before: ItemValuation | ConfigValuation | None,
    after: ItemValuation | ConfigValuation,
    entity_id: str,
    effective_date: date,
    created_at: datetime,
    description: str | None = None,
) -> ValuationSnapshot | None:
    """
    Build the history entry for an edit of a tracked entity, if one is due.

    A brand-new entity (``before is None``) gets a first snapshot only when
    it was created with at least one non-zero value.  An existing entity
    gets a snapshot only when a tracked value actually changed.

    Returns:
        The snapshot to append, or None when nothing tracked changed.
    """
    if before is None:
        if not any(after.tracked_values()):
            return None
    elif before.tracked_values() == after.tracked_values():
        return None
    return ValuationSnapshot(
        entity_id=entity_id,
        effective_date=effective_date,
        created_at=created_at,
        payload=after,
        description=description,
    )
