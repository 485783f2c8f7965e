"""
quoting_engines.matching -- Catalog item matching for quote lines.

Responsibility:
    Locate the catalog item a quote line refers to.  Lines issued after the
    catalog gained ids carry an item id; legacy lines only carry a
    description and are matched by normalized description within their
    category.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Matching is explicit: every strategy is an ItemMatcher and reports
      the MatchMethod it used; no ad-hoc string comparisons elsewhere.
    - Description matching is case-insensitive and whitespace-trimmed.
    - Deterministic on ambiguity: when several items share a normalized
      description within the searched scope, the smallest item id wins.

Failure modes:
    - None.  An unmatched line yields None and is valued as cost unknown.

Usage:
    matcher = default_matcher(catalog)
    match = matcher.match(line)
    if match is not None:
        item = match.item
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from quoting_kernel.domain.quotes import QuoteLine
from quoting_kernel.domain.valuation import CatalogItem
from quoting_kernel.logging_config import get_logger

logger = get_logger("engines.matching")


class MatchMethod(str, Enum):
    """How a quote line was linked to a catalog item."""

    BY_ID = "by_id"
    BY_DESCRIPTION = "by_description"
    UNMATCHED = "unmatched"


@dataclass(frozen=True)
class ItemMatch:
    """A successful line-to-item link."""

    item: CatalogItem
    method: MatchMethod


class ItemMatcher(ABC):
    """Strategy for linking a quote line to a catalog item."""

    @abstractmethod
    def match(self, line: QuoteLine) -> ItemMatch | None:
        """Return the matched item, or None."""
        ...


class ById(ItemMatcher):
    """Match on the line's explicit item id."""

    def __init__(self, catalog: Iterable[CatalogItem]):
        self._items = {item.item_id: item for item in catalog}

    def match(self, line: QuoteLine) -> ItemMatch | None:
        if line.item_id is None:
            return None
        item = self._items.get(line.item_id)
        if item is None:
            return None
        return ItemMatch(item=item, method=MatchMethod.BY_ID)


class ByNormalizedDescription(ItemMatcher):
    """
    Match legacy lines by normalized description.

    A line with a category is matched only within that category; a line
    without one is matched across the whole catalog.
    """

    def __init__(self, catalog: Iterable[CatalogItem]):
        self._by_category: dict[tuple[str | None, str], CatalogItem] = {}
        self._by_description: dict[str, CatalogItem] = {}
        for item in sorted(catalog, key=lambda i: i.item_id):
            key = item.normalized_description
            if not key:
                continue
            self._by_category.setdefault((item.category_id, key), item)
            self._by_description.setdefault(key, item)

    def match(self, line: QuoteLine) -> ItemMatch | None:
        key = line.normalized_description
        if not key:
            return None
        if line.category_id is not None:
            item = self._by_category.get((line.category_id, key))
        else:
            item = self._by_description.get(key)
        if item is None:
            return None
        return ItemMatch(item=item, method=MatchMethod.BY_DESCRIPTION)


class FallbackMatcher(ItemMatcher):
    """Try each strategy in order; the first match wins."""

    def __init__(self, matchers: Sequence[ItemMatcher]):
        self._matchers = tuple(matchers)

    def match(self, line: QuoteLine) -> ItemMatch | None:
        for matcher in self._matchers:
            found = matcher.match(line)
            if found is not None:
                return found
        logger.debug(
            "quote_line_unmatched",
            extra={"description": line.description, "item_id": line.item_id},
        )
        return None


def default_matcher(catalog: Iterable[CatalogItem]) -> ItemMatcher:
    """By id first, then by normalized description within the category."""
    items = tuple(catalog)
    return FallbackMatcher([ById(items), ByNormalizedDescription(items)])
