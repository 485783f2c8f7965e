"""
Tests for catalog item matching strategies.

Covers:
- ById on explicit item ids
- ByNormalizedDescription within a category and across the catalog
- Deterministic choice among ambiguous descriptions
- FallbackMatcher ordering
"""

from quoting_engines.matching import (
    ById,
    ByNormalizedDescription,
    FallbackMatcher,
    MatchMethod,
    default_matcher,
)


class TestById:

    def test_matches_known_id(self, catalog_item, make_line):
        matcher = ById([catalog_item("item-1", "Cable")])

        match = matcher.match(make_line("whatever", item_id="item-1"))

        assert match.item.item_id == "item-1"
        assert match.method == MatchMethod.BY_ID

    def test_unknown_or_missing_id_does_not_match(self, catalog_item, make_line):
        matcher = ById([catalog_item("item-1", "Cable")])

        assert matcher.match(make_line("Cable", item_id="item-9")) is None
        assert matcher.match(make_line("Cable")) is None


class TestByNormalizedDescription:

    def test_case_and_whitespace_insensitive(self, catalog_item, make_line):
        matcher = ByNormalizedDescription(
            [catalog_item("item-1", "Copper Cable", category_id="elec")]
        )

        match = matcher.match(make_line("  copper CABLE ", category_id="elec"))

        assert match.item.item_id == "item-1"
        assert match.method == MatchMethod.BY_DESCRIPTION

    def test_category_scopes_the_match(self, catalog_item, make_line):
        matcher = ByNormalizedDescription(
            [
                catalog_item("item-1", "Installation", category_id="elec"),
                catalog_item("item-2", "Installation", category_id="plumbing"),
            ]
        )

        match = matcher.match(make_line("installation", category_id="plumbing"))

        assert match.item.item_id == "item-2"

    def test_wrong_category_does_not_match(self, catalog_item, make_line):
        matcher = ByNormalizedDescription(
            [catalog_item("item-1", "Installation", category_id="elec")]
        )

        assert matcher.match(make_line("Installation", category_id="plumbing")) is None

    def test_ambiguous_description_picks_smallest_id(self, catalog_item, make_line):
        items = [
            catalog_item("item-b", "Pipe"),
            catalog_item("item-a", "pipe"),
        ]

        forward = ByNormalizedDescription(items).match(make_line("PIPE"))
        backward = ByNormalizedDescription(list(reversed(items))).match(make_line("PIPE"))

        assert forward.item.item_id == "item-a"
        assert backward.item.item_id == "item-a"

    def test_blank_description_never_matches(self, catalog_item, make_line):
        matcher = ByNormalizedDescription([catalog_item("item-1", "Pipe")])

        assert matcher.match(make_line("   ")) is None


class TestFallbackMatcher:

    def test_id_takes_precedence_over_description(self, catalog_item, make_line):
        items = [catalog_item("item-1", "Pipe"), catalog_item("item-2", "Cable")]
        matcher = default_matcher(items)

        match = matcher.match(make_line("Cable", item_id="item-1"))

        assert match.item.item_id == "item-1"
        assert match.method == MatchMethod.BY_ID

    def test_stale_id_falls_back_to_description(self, catalog_item, make_line):
        matcher = default_matcher([catalog_item("item-2", "Cable")])

        match = matcher.match(make_line("cable", item_id="deleted-item"))

        assert match.item.item_id == "item-2"
        assert match.method == MatchMethod.BY_DESCRIPTION

    def test_unmatched_line_is_logged(self, catalog_item, make_line, captured_logs):
        matcher = FallbackMatcher([ById([catalog_item("item-1", "Pipe")])])

        assert matcher.match(make_line("Valve")) is None
        assert any(r["message"] == "quote_line_unmatched" for r in captured_logs())
