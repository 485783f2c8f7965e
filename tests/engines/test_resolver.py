"""
Tests for point-in-time valuation resolution.

Covers:
- Selection of the snapshot in force on a date
- Tie-break on created_at (last write wins)
- Fallback chain: history -> live record -> earliest (opt-in) -> no data
- Determinism and input-order independence (property-based)
- Agreement between resolve_as_of and the indexed PointInTimeResolver
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from quoting_engines.valuation import (
    PointInTimeResolver,
    ResolutionSource,
    ValuationHistory,
    resolve_as_of,
)
from quoting_kernel.domain.valuation import ItemValuation, ValuationSnapshot
from quoting_kernel.exceptions import MissingValuationDataError


def _cost(resolution) -> Decimal | None:
    return resolution.payload.unit_material_cost if resolution.payload else None


class TestSelection:
    """Snapshot with the greatest effective_date <= target wins."""

    def test_picks_latest_snapshot_on_or_before_target(self, item_snapshot):
        history = [
            item_snapshot("x", date(2024, 6, 1), material_cost="150"),
            item_snapshot("x", date(2024, 1, 1), material_cost="100"),
        ]

        result = resolve_as_of(history, date(2024, 3, 15))

        assert result.source == ResolutionSource.HISTORY
        assert _cost(result) == Decimal("100")

    def test_snapshot_effective_on_target_date_applies(self, item_snapshot):
        history = [
            item_snapshot("x", date(2024, 1, 1), material_cost="100"),
            item_snapshot("x", date(2024, 6, 1), material_cost="150"),
        ]

        assert _cost(resolve_as_of(history, date(2024, 6, 1))) == Decimal("150")
        assert _cost(resolve_as_of(history, date(2024, 5, 31))) == Decimal("100")

    def test_tie_on_effective_date_goes_to_later_created(self, item_snapshot):
        history = [
            item_snapshot("x", date(2024, 2, 1), material_cost="110", created_second=30),
            item_snapshot("x", date(2024, 2, 1), material_cost="90", created_second=10),
        ]

        result = resolve_as_of(history, date(2024, 2, 1))

        assert _cost(result) == Decimal("110")

    def test_history_is_not_mutated(self, item_snapshot):
        history = [
            item_snapshot("x", date(2024, 6, 1), material_cost="150"),
            item_snapshot("x", date(2024, 1, 1), material_cost="100"),
        ]
        before = list(history)

        resolve_as_of(history, date(2024, 3, 15))
        PointInTimeResolver(ValuationHistory(history)).resolve("x", date(2024, 3, 15))

        assert history == before


class TestFallback:
    """Live record, then earliest snapshot (opt-in), then explicit no data."""

    def test_falls_back_to_live_record_before_all_history(self, item_snapshot):
        live = ItemValuation(unit_material_cost=Decimal("80"))
        history = [item_snapshot("x", date(2024, 1, 1), material_cost="100")]

        result = resolve_as_of(history, date(2023, 1, 1), live)

        assert result.source == ResolutionSource.LIVE
        assert result.payload == live

    def test_live_record_used_for_empty_history(self):
        live = ItemValuation(unit_material_cost=Decimal("80"))

        result = resolve_as_of([], date(2024, 1, 1), live, entity_id="x")

        assert result.source == ResolutionSource.LIVE
        assert result.entity_id == "x"

    def test_no_data_marker_when_nothing_qualifies(self, item_snapshot):
        history = [item_snapshot("x", date(2024, 1, 1), material_cost="100")]

        result = resolve_as_of(history, date(2023, 1, 1))

        assert result.source == ResolutionSource.NONE
        assert not result.is_resolved
        assert result.payload is None

    def test_zero_cost_is_not_no_data(self, item_snapshot):
        history = [item_snapshot("x", date(2024, 1, 1), material_cost="0")]

        result = resolve_as_of(history, date(2024, 2, 1))

        assert result.is_resolved
        assert _cost(result) == Decimal("0")

    def test_earliest_fallback_is_opt_in(self, item_snapshot):
        history = [
            item_snapshot("x", date(2024, 6, 1), material_cost="150"),
            item_snapshot("x", date(2024, 1, 1), material_cost="100"),
        ]

        default = resolve_as_of(history, date(2023, 1, 1))
        opted_in = resolve_as_of(history, date(2023, 1, 1), fallback_to_earliest=True)

        assert default.source == ResolutionSource.NONE
        assert opted_in.source == ResolutionSource.EARLIEST
        assert _cost(opted_in) == Decimal("100")

    def test_live_record_takes_precedence_over_earliest(self, item_snapshot):
        live = ItemValuation(unit_material_cost=Decimal("80"))
        history = [item_snapshot("x", date(2024, 1, 1), material_cost="100")]

        resolver = PointInTimeResolver(
            ValuationHistory(history), fallback_to_earliest=True
        )

        assert resolver.resolve("x", date(2023, 1, 1), live).source == ResolutionSource.LIVE

    def test_unwrap_no_data_raises_typed_error(self):
        result = resolve_as_of([], date(2024, 1, 1), entity_id="x")

        with pytest.raises(MissingValuationDataError) as exc_info:
            result.unwrap()

        assert exc_info.value.code == "MISSING_VALUATION_DATA"
        assert exc_info.value.entity_id == "x"
        assert exc_info.value.target_date == date(2024, 1, 1)


class TestIndexedResolver:
    """PointInTimeResolver over a whole history."""

    def test_resolves_each_entity_against_its_own_history(self, item_snapshot):
        history = ValuationHistory(
            [
                item_snapshot("x", date(2024, 1, 1), material_cost="100"),
                item_snapshot("y", date(2024, 1, 1), material_cost="7"),
                item_snapshot("x", date(2024, 6, 1), material_cost="150"),
            ]
        )
        resolver = PointInTimeResolver(history)

        assert _cost(resolver.resolve("x", date(2024, 7, 1))) == Decimal("150")
        assert _cost(resolver.resolve("y", date(2024, 7, 1))) == Decimal("7")

    def test_unknown_entity_without_live_is_no_data(self, captured_logs):
        resolver = PointInTimeResolver(ValuationHistory([]))

        result = resolver.resolve("ghost", date(2024, 1, 1))

        assert result.source == ResolutionSource.NONE
        assert any(r["message"] == "valuation_unresolved" for r in captured_logs())

    def test_change_dates_within_interval(self, item_snapshot):
        history = ValuationHistory(
            [
                item_snapshot("x", date(2024, 1, 1), material_cost="100"),
                item_snapshot("x", date(2024, 3, 10), material_cost="120"),
                item_snapshot("x", date(2024, 3, 10), material_cost="125", created_second=5),
                item_snapshot("x", date(2024, 4, 1), material_cost="130"),
            ]
        )

        assert history.change_dates("x", date(2024, 1, 1), date(2024, 3, 31)) == (
            date(2024, 3, 10),
        )
        with pytest.raises(ValueError):
            history.change_dates("x", date(2024, 4, 1), date(2024, 3, 1))


# =============================================================================
# Property-based tests
# =============================================================================

BASE_DAY = date(2024, 1, 1)
BASE_TS = datetime(2024, 1, 1, tzinfo=timezone.utc)

snapshot_strategy = st.builds(
    lambda day, second, cost: ValuationSnapshot(
        entity_id="x",
        effective_date=BASE_DAY + timedelta(days=day),
        created_at=BASE_TS + timedelta(seconds=second),
        payload=ItemValuation(unit_material_cost=Decimal(cost)),
    ),
    day=st.integers(min_value=0, max_value=60),
    second=st.integers(min_value=0, max_value=5),
    cost=st.integers(min_value=0, max_value=500),
)
target_strategy = st.integers(min_value=-10, max_value=70).map(
    lambda d: BASE_DAY + timedelta(days=d)
)
live_strategy = st.none() | st.integers(min_value=0, max_value=500).map(
    lambda c: ItemValuation(unit_material_cost=Decimal(c))
)


class TestResolverProperties:

    @given(
        history=st.lists(snapshot_strategy, max_size=12),
        target=target_strategy,
        live=live_strategy,
    )
    @settings(max_examples=200)
    def test_resolution_is_deterministic(self, history, target, live):
        first = resolve_as_of(history, target, live, entity_id="x")
        second = resolve_as_of(history, target, live, entity_id="x")

        assert first == second

    @given(
        history=st.lists(snapshot_strategy, max_size=12),
        target=target_strategy,
        live=live_strategy,
        data=st.data(),
    )
    @settings(max_examples=200)
    def test_input_order_does_not_matter(self, history, target, live, data):
        shuffled = data.draw(st.permutations(history))

        assert resolve_as_of(history, target, live, entity_id="x") == resolve_as_of(
            shuffled, target, live, entity_id="x"
        )

    @given(
        history=st.lists(snapshot_strategy, max_size=12),
        target=target_strategy,
        live=live_strategy,
        fallback=st.booleans(),
    )
    @settings(max_examples=200)
    def test_indexed_resolver_agrees_with_linear_scan(self, history, target, live, fallback):
        resolver = PointInTimeResolver(
            ValuationHistory(history), fallback_to_earliest=fallback
        )

        assert resolver.resolve("x", target, live) == resolve_as_of(
            history, target, live, entity_id="x", fallback_to_earliest=fallback
        )

    @given(history=st.lists(snapshot_strategy, min_size=1, max_size=12), target=target_strategy)
    @settings(max_examples=200)
    def test_resolved_snapshot_is_never_after_target(self, history, target):
        result = resolve_as_of(history, target)

        if result.source == ResolutionSource.HISTORY:
            assert result.snapshot.effective_date <= target
            assert all(
                s.effective_date <= result.snapshot.effective_date
                for s in history
                if s.effective_date <= target
            )
        else:
            assert all(s.effective_date > target for s in history)
