"""
quoting_engines.valuation.resolver -- Point-in-time resolution of valuation snapshots.

Responsibility:
    Answer "which values were in force for this entity on this date?"
    given the entity's snapshot history and its live record.

Architecture position:
    Engines -- pure calculation layer, zero I/O, no clock access.

Invariants enforced:
    - Selection: the snapshot with the greatest effective_date that is
      <= the target date; ties on effective_date go to the greatest
      created_at (last write wins).
    - Fallback chain: qualifying snapshot -> live record (valid since
      always) -> earliest snapshot (only when explicitly enabled) -> no data.
    - "No data" is an explicit Resolution with source NONE, never a zero
      payload, so "$0 cost" and "cost unknown" stay distinguishable.
    - Determinism: the same (history, entity, date, live) always yields the
      same Resolution, whatever the input order of the history.

Failure modes:
    - MissingValuationDataError from Resolution.unwrap() on a no-data result.

Usage:
    history = ValuationHistory(snapshots)
    resolver = PointInTimeResolver(history)
    resolution = resolver.resolve("item-1", date(2024, 3, 15), live=item.live)
    if resolution.is_resolved:
        cost = resolution.payload.unit_material_cost
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from enum import Enum

from quoting_engines.valuation.history import ValuationHistory, snapshot_order_key
from quoting_kernel.domain.valuation import (
    ConfigValuation,
    ItemValuation,
    ValuationSnapshot,
)
from quoting_kernel.exceptions import MissingValuationDataError
from quoting_kernel.logging_config import get_logger

logger = get_logger("engines.valuation.resolver")


class ResolutionSource(str, Enum):
    """Where a resolved value came from."""

    HISTORY = "history"  # snapshot with effective_date <= target
    LIVE = "live"  # live record, standing in as "valid since always"
    EARLIEST = "earliest"  # earliest snapshot (opt-in fallback)
    NONE = "none"  # no data


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one entity at one date."""

    entity_id: str
    target_date: date
    source: ResolutionSource
    payload: ItemValuation | ConfigValuation | None = None
    snapshot: ValuationSnapshot | None = None

    @classmethod
    def no_data(cls, entity_id: str, target_date: date) -> Resolution:
        return cls(entity_id=entity_id, target_date=target_date, source=ResolutionSource.NONE)

    @property
    def is_resolved(self) -> bool:
        return self.source != ResolutionSource.NONE

    def unwrap(self) -> ItemValuation | ConfigValuation:
        """Return the payload, or raise if nothing could be resolved."""
        if self.payload is None:
            raise MissingValuationDataError(self.entity_id, self.target_date)
        return self.payload


def _fallback(
    entity_id: str,
    target_date: date,
    live: ItemValuation | ConfigValuation | None,
    earliest: ValuationSnapshot | None,
) -> Resolution:
    if live is not None:
        return Resolution(entity_id, target_date, ResolutionSource.LIVE, payload=live)
    if earliest is not None:
        return Resolution(
            entity_id,
            target_date,
            ResolutionSource.EARLIEST,
            payload=earliest.payload,
            snapshot=earliest,
        )
    return Resolution.no_data(entity_id, target_date)


def resolve_as_of(
    history: Iterable[ValuationSnapshot],
    target_date: date,
    live: ItemValuation | ConfigValuation | None = None,
    *,
    entity_id: str | None = None,
    fallback_to_earliest: bool = False,
) -> Resolution:
    """
    Resolve one entity's values on ``target_date`` by a linear scan.

    ``history`` is one entity's snapshots in any order; it is treated as a
    set and never mutated.

    Args:
        history: Snapshots of a single entity.
        target_date: Date whose values are wanted (e.g., quote emission date).
        live: The entity's live record, if any.
        entity_id: Identifier reported on the Resolution; defaults to the
            first snapshot's entity id.
        fallback_to_earliest: Use the earliest snapshot when nothing
            qualifies and no live record exists.
    """
    best: ValuationSnapshot | None = None
    earliest: ValuationSnapshot | None = None
    for snapshot in history:
        if entity_id is None:
            entity_id = snapshot.entity_id
        key = snapshot_order_key(snapshot)
        if earliest is None or key < snapshot_order_key(earliest):
            earliest = snapshot
        if snapshot.effective_date <= target_date and (
            best is None or key > snapshot_order_key(best)
        ):
            best = snapshot

    entity_id = entity_id or "unknown"
    if best is not None:
        return Resolution(
            entity_id,
            target_date,
            ResolutionSource.HISTORY,
            payload=best.payload,
            snapshot=best,
        )
    return _fallback(
        entity_id,
        target_date,
        live,
        earliest if fallback_to_earliest else None,
    )


class PointInTimeResolver:
    """
    Indexed resolver for a whole report run.

    Sorts every entity's history once (via ValuationHistory) and answers each
    lookup with a binary search.  Agrees with ``resolve_as_of`` on every input.
    """

    def __init__(
        self,
        history: ValuationHistory,
        *,
        fallback_to_earliest: bool = False,
    ):
        self._history = history
        self._fallback_to_earliest = fallback_to_earliest
        self._dates: dict[str, list[date]] = {
            entity_id: [s.effective_date for s in history.snapshots_for(entity_id)]
            for entity_id in history.entity_ids
        }

    @property
    def history(self) -> ValuationHistory:
        return self._history

    def resolve(
        self,
        entity_id: str,
        target_date: date,
        live: ItemValuation | ConfigValuation | None = None,
    ) -> Resolution:
        """Resolve ``entity_id`` on ``target_date`` against its indexed history."""
        snapshots = self._history.snapshots_for(entity_id)
        # Snapshots are ascending by (effective_date, created_at, ...), so the
        # last one at or before the target date is the one in force.
        idx = bisect_right(self._dates.get(entity_id, []), target_date)
        if idx > 0:
            chosen = snapshots[idx - 1]
            return Resolution(
                entity_id,
                target_date,
                ResolutionSource.HISTORY,
                payload=chosen.payload,
                snapshot=chosen,
            )

        earliest = snapshots[0] if snapshots and self._fallback_to_earliest else None
        resolution = _fallback(entity_id, target_date, live, earliest)
        if not resolution.is_resolved:
            logger.debug(
                "valuation_unresolved",
                extra={
                    "entity_id": entity_id,
                    "target_date": target_date.isoformat(),
                    "snapshot_count": len(snapshots),
                },
            )
        return resolution
