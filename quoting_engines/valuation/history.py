"""
quoting_engines.valuation.history -- Read-only access to the valuation log.

Responsibility:
    Wrap the unordered, append-only sequence of valuation snapshots handed
    over by the record store into a per-entity, totally ordered view.  The
    stored log itself is never mutated; ordering happens on a private copy
    once per report run.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Total order: snapshots of one entity are ordered by
      (effective_date, created_at, snapshot_id, payload values), so two
      runs over the same log in a different input order see the same
      sequence.
    - Duplicate snapshots are legal and kept.

Failure modes:
    - ValueError from change_dates() if ``after`` is later than ``through``.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from datetime import date, datetime

from quoting_kernel.domain.valuation import TENANT_CONFIG_ENTITY_ID, ValuationSnapshot


def snapshot_order_key(
    snapshot: ValuationSnapshot,
) -> tuple[date, datetime, str, tuple[str, ...]]:
    """Sort key giving a total order over one entity's snapshots.

    The greatest key among qualifying snapshots is the one in force: later
    effective date first, then later insertion (last write wins).  The
    snapshot id and payload only separate exact-timestamp duplicates.
    """
    return (
        snapshot.effective_date,
        snapshot.created_at,
        snapshot.snapshot_id or "",
        tuple(str(v) for v in snapshot.payload.tracked_values()),
    )


class ValuationHistory:
    """
    Immutable, per-entity ordered view over a valuation log.

    Built once per report run from whatever the record store returned.
    """

    def __init__(self, snapshots: Iterable[ValuationSnapshot]):
        grouped: dict[str, list[ValuationSnapshot]] = {}
        for snapshot in snapshots:
            grouped.setdefault(snapshot.entity_id, []).append(snapshot)
        self._by_entity: dict[str, tuple[ValuationSnapshot, ...]] = {
            entity_id: tuple(sorted(entries, key=snapshot_order_key))
            for entity_id, entries in grouped.items()
        }

    @classmethod
    def for_tenant_config(
        cls, snapshots: Iterable[ValuationSnapshot]
    ) -> ValuationHistory:
        """History of the tenant configuration singleton.

        Every snapshot is filed under ``TENANT_CONFIG_ENTITY_ID`` whatever
        id the store gave it, since a tenant has exactly one configuration.
        """
        return cls(
            s if s.entity_id == TENANT_CONFIG_ENTITY_ID
            else dataclasses.replace(s, entity_id=TENANT_CONFIG_ENTITY_ID)
            for s in snapshots
        )

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._by_entity.values())

    @property
    def entity_ids(self) -> tuple[str, ...]:
        return tuple(sorted(self._by_entity))

    def snapshots_for(self, entity_id: str) -> tuple[ValuationSnapshot, ...]:
        """Snapshots of one entity in ascending order (may be empty)."""
        return self._by_entity.get(entity_id, ())

    def change_dates(
        self, entity_id: str, after: date, through: date
    ) -> tuple[date, ...]:
        """Distinct effective dates of an entity in the interval (after, through]."""
        if after > through:
            raise ValueError(f"Interval start {after} is after its end {through}")
        dates = {
            s.effective_date
            for s in self.snapshots_for(entity_id)
            if after < s.effective_date <= through
        }
        return tuple(sorted(dates))
