"""Unit tests for match scoring and ranking.

Tests cover:
    - Depth proximity tiers
    - Brand keyword bonus and its precedence over the token fallback
    - Token fallback tokenization and stop words
    - Score cap and floor
    - Top-K truncation and ordering
    - Determinism
"""
import pytest

from emdn_matching.config import MatchingSettings
from emdn_matching.errors import ConfigError
from emdn_matching.services.matching import BrandTable, MatchScorer, ScoringWeights, tokenize
from tests.helpers import make_price, make_product


@pytest.fixture
def scorer(small_tree):
    return MatchScorer(small_tree, brands=BrandTable(), weights=ScoringWeights())


class TestTokenize:
    """Tests for product name tokenization."""

    def test_splits_on_whitespace_and_punctuation(self):
        assert tokenize("Trilogy Acetabular Shell 54mm") == ["trilogy", "acetabular", "shell", "54mm"]
        assert tokenize("cup/liner-neutral,32") == ["cup", "liner", "neutral"]

    def test_drops_stop_words_and_short_tokens(self):
        assert tokenize("dia 32 mm with taper for the size and") == []


class TestDepthBonus:
    """Tests for the depth proximity tiers."""

    @pytest.mark.parametrize(
        "price_category,expected",
        [
            ("P0908030401", 0.5),  # same depth
            ("P09080304", 0.45),  # one level up
            ("P090803", 0.4),  # two levels up
            ("P0908", 0.3),  # three levels up: base only
        ],
    )
    def test_tiers(self, scorer, price_category, expected):
        product = make_product("Liner", category_id="P0908030401")
        match = scorer.score(product, make_price("rp-1", category_id=price_category))
        assert match.score == expected

    def test_reason_defaults_to_category_ancestor(self, scorer):
        product = make_product("Liner", category_id="P0908030401")
        match = scorer.score(product, make_price("rp-1", category_id="P0908"))
        assert match.reasons == ()
        assert match.reason == "category ancestor"
        assert match.method == "rule"


class TestBrandBonus:
    """Tests for manufacturer brand matching."""

    def test_brand_in_name_skips_token_fallback(self, scorer):
        product = make_product("Trilogy Acetabular Shell 54mm", category_id="P090803")
        price = make_price(
            "rp-1",
            category_id="P090803",
            manufacturer_code="ZIM",
            description="Trilogy acetabular shell",
        )

        match = scorer.score(product, price)

        assert match.score == 0.8
        assert match.reasons == ("exact depth", "brand match: trilogy")
        assert not any(r.startswith("keyword") for r in match.reasons)

    def test_brand_in_vendor_name(self, scorer):
        product = make_product("Acetabular cup 54", category_id="P090803", vendor_name="Zimmer Biomet")
        price = make_price("rp-1", category_id="P090803", manufacturer_code="ZIM")

        match = scorer.score(product, price)

        assert "brand match: zimmer" in match.reasons

    def test_brand_in_description(self, scorer):
        product = make_product("Shell 54", category_id="P090803", description="Pinnacle system")
        price = make_price("rp-1", category_id="P090803", manufacturer_code="DPI")

        assert "brand match: pinnacle" in scorer.score(product, price).reasons

    def test_unknown_manufacturer_gets_no_brand_bonus(self, scorer):
        product = make_product("Trilogy shell", category_id="P090803")
        price = make_price("rp-1", category_id="P090803", manufacturer_code="???")
        assert scorer.score(product, price).score == 0.5

    def test_empty_keyword_list_is_config_error(self):
        with pytest.raises(ConfigError):
            BrandTable({"ZIM": ["zimmer"], "BAD": []})


class TestTokenFallback:
    """Tests for the name-token fallback bonus."""

    def test_token_in_price_description(self, scorer):
        product = make_product("Acetabular liner neutral 32mm", category_id="P0908030401")
        price = make_price("rp-1", category_id="P0908", description="Polyethylene LINER, neutral")

        match = scorer.score(product, price)

        assert match.score == 0.45
        assert match.reasons == ("keyword: liner",)

    def test_fallback_applies_when_brand_does_not_match(self, scorer):
        product = make_product("Acetabular liner 32mm", category_id="P0908030401")
        price = make_price(
            "rp-1", category_id="P0908", manufacturer_code="STR", description="liner"
        )
        assert scorer.score(product, price).reasons == ("keyword: liner",)

    def test_short_tokens_never_match(self, scorer):
        product = make_product("PE cup", category_id="P0908030401")
        price = make_price("rp-1", category_id="P0908", description="pe cup cemented")
        assert scorer.score(product, price).reasons == ()

    def test_bonus_awarded_once(self, scorer):
        product = make_product("liner neutral polyethylene", category_id="P0908030401")
        price = make_price("rp-1", category_id="P0908", description="liner neutral polyethylene")

        match = scorer.score(product, price)

        assert match.score == 0.45
        assert match.reasons == ("keyword: liner",)


class TestBounds:
    """Tests for the score cap and floor."""

    def test_score_capped(self, small_tree):
        weights = ScoringWeights(brand_bonus=0.9)
        scorer = MatchScorer(small_tree, weights=weights)
        product = make_product("Trilogy shell", category_id="P090803")
        price = make_price("rp-1", category_id="P090803", manufacturer_code="ZIM")

        assert scorer.score(product, price).score == 0.95

    def test_below_floor_discarded(self, small_tree):
        scorer = MatchScorer(small_tree, weights=ScoringWeights(base_score=0.1))
        product = make_product("Liner", category_id="P0908030401")
        assert scorer.score(product, make_price("rp-1", category_id="P0908")) is None

    def test_weights_from_settings(self):
        weights = ScoringWeights.from_settings(MatchingSettings(brand_bonus=0.25, max_matches_per_product=5))
        assert weights.brand_bonus == 0.25
        assert weights.max_matches_per_product == 5
        assert weights.base_score == 0.3


class TestRank:
    """Tests for top-K ranking."""

    def test_top_k_sorted_descending(self, scorer):
        product = make_product("Trilogy shell", category_id="P0908030401")
        prices = [make_price(f"rp-{i:02d}", category_id="P0908") for i in range(15)]
        prices += [
            make_price(f"rp-z{i:02d}", category_id="P0908030401", manufacturer_code="ZIM")
            for i in range(10)
        ]

        matches = scorer.rank(product, prices)

        assert len(matches) == 20
        scores = [m.score for m in matches]
        assert scores == sorted(scores, reverse=True)
        assert all(0.3 <= s <= 0.95 for s in scores)
        assert matches[0].score == 0.8
        assert len({m.reference_price_id for m in matches}) == 20

    def test_ties_keep_candidate_order(self, scorer):
        product = make_product("x", category_id="P0908030401")
        prices = [make_price(f"rp-{i}", category_id="P0908") for i in range(3)]
        assert [m.reference_price_id for m in scorer.rank(product, prices)] == ["rp-0", "rp-1", "rp-2"]

    def test_deterministic(self, scorer):
        product = make_product("Trilogy liner 32mm", category_id="P0908030401")
        prices = [
            make_price("rp-1", category_id="P0908", description="liner"),
            make_price("rp-2", category_id="P09080304", manufacturer_code="ZIM"),
            make_price("rp-3", category_id="P090803"),
        ]
        assert scorer.rank(product, prices) == scorer.rank(product, prices)

    def test_price_outside_tree_is_skipped(self, scorer):
        product = make_product("x", category_id="P0908030401")
        assert scorer.rank(product, [make_price("rp-1", category_id="elsewhere")]) == []
