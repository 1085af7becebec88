"""Unit tests for the inverted price index and candidate resolution."""
from structlog.testing import capture_logs

from emdn_matching.services.matching import CandidateResolver, ReferencePriceIndex
from tests.helpers import make_price, make_product


class TestReferencePriceIndex:
    """Tests for ReferencePriceIndex construction."""

    def test_leaf_category_preferred(self):
        index = ReferencePriceIndex([
            make_price("rp-1", category_id="P0908", leaf_category_id="P0908030401"),
        ])
        assert [p.id for p in index.prices_for("P0908030401")] == ["rp-1"]
        assert index.prices_for("P0908") == ()

    def test_falls_back_to_category(self):
        index = ReferencePriceIndex([make_price("rp-1", category_id="P0908")])
        assert [p.id for p in index.prices_for("P0908")] == ["rp-1"]

    def test_price_without_category_is_excluded(self):
        index = ReferencePriceIndex([
            make_price("rp-1", category_id="P0908"),
            make_price("rp-2"),
            make_price("rp-3"),
        ])
        assert index.excluded_ids == ("rp-2", "rp-3")
        assert len(index) == 1
        assert index.total_prices == 3

    def test_missing_category_logged_once(self):
        with capture_logs() as logs:
            ReferencePriceIndex([
                make_price("rp-1", category_id="P0908"),
                make_price("rp-2"),
                make_price("rp-3"),
            ])

        warnings = [e for e in logs if e["event"] == "price_missing_category"]
        assert len(warnings) == 1
        assert warnings[0]["log_level"] == "warning"
        assert warnings[0]["price_ids"] == ["rp-2", "rp-3"]
        assert warnings[0]["count"] == 2

    def test_nothing_logged_when_all_prices_placed(self):
        with capture_logs() as logs:
            ReferencePriceIndex([make_price("rp-1", category_id="P0908")])

        assert not [e for e in logs if e["event"] == "price_missing_category"]


class TestCandidateResolver:
    """Tests for ancestry-restricted candidate sets."""

    def test_ancestor_price_is_candidate(self, small_tree):
        index = ReferencePriceIndex([make_price("rp-1", category_id="P09080304")])
        resolver = CandidateResolver(small_tree, index)

        product = make_product("PE liner 32mm", category_id="P0908030401")

        assert [p.id for p in resolver.candidates(product)] == ["rp-1"]

    def test_descendant_price_is_not_candidate(self, small_tree):
        index = ReferencePriceIndex([
            make_price("rp-1", category_id="P0908", leaf_category_id="P0908030401"),
        ])
        resolver = CandidateResolver(small_tree, index)

        product = make_product("PE liner 32mm", category_id="P09080304")

        assert resolver.candidates(product) == ()

    def test_sibling_branch_is_never_candidate(self, small_tree):
        index = ReferencePriceIndex([make_price("rp-knee", category_id="P0909")])
        resolver = CandidateResolver(small_tree, index)

        product = make_product("Knee-like liner", category_id="P0908030401")

        assert resolver.candidates(product) == ()

    def test_union_over_chain_in_chain_order(self, small_tree):
        index = ReferencePriceIndex([
            make_price("rp-root", category_id="P09"),
            make_price("rp-hip", category_id="P0908"),
            make_price("rp-leaf", category_id="P0908030401"),
        ])
        resolver = CandidateResolver(small_tree, index)

        product = make_product("Liner", category_id="P0908030401")

        assert [p.id for p in resolver.candidates(product)] == ["rp-leaf", "rp-hip", "rp-root"]

    def test_candidates_lie_on_ancestor_chain(self, small_tree):
        prices = [
            make_price(f"rp-{code}", category_id=code)
            for code in ["P", "P09", "P0908", "P090803", "P09080304", "P0908030401", "P0909"]
        ]
        resolver = CandidateResolver(small_tree, ReferencePriceIndex(prices))

        for node in small_tree:
            product = make_product("x", category_id=node.id)
            chain = set(small_tree.ancestors(node.id))
            for price in resolver.candidates(product):
                assert price.indexed_category_id in chain

    def test_product_without_category_has_no_candidates(self, small_tree):
        resolver = CandidateResolver(small_tree, ReferencePriceIndex([make_price("rp-1", category_id="P")]))
        assert resolver.candidates(make_product("x")) == ()

    def test_unknown_product_category_has_no_candidates(self, small_tree):
        resolver = CandidateResolver(small_tree, ReferencePriceIndex([make_price("rp-1", category_id="P")]))
        assert resolver.candidates(make_product("x", category_id="nope")) == ()
