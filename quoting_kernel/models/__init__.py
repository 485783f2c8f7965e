"""ORM models for the versioned record store."""

from quoting_kernel.models.valuation import (
    CatalogItemRecord,
    ConfigValuationSnapshotRecord,
    ItemValuationSnapshotRecord,
    TenantConfigurationRecord,
)

__all__ = [
    "CatalogItemRecord",
    "ConfigValuationSnapshotRecord",
    "ItemValuationSnapshotRecord",
    "TenantConfigurationRecord",
]
