"""Rule-based scoring of (product, reference price) candidates.

Every candidate already shares category ancestry with the product. The score
starts from a base value and adds bonuses for category depth proximity and
for either a brand keyword hit or, failing that, a name token found in the
price description.

Key Components:
    - ScoringWeights: Frozen set of constants used for one run
    - MatchScorer: Scores single candidates and ranks a product's candidates
"""
import re
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Sequence, Tuple

import structlog

from emdn_matching.config import MatchingSettings, matching_settings
from emdn_matching.models.matching import PriceMatch
from emdn_matching.models.records import ProductRecord, ReferencePriceRecord
from emdn_matching.services.matching.brands import BrandTable
from emdn_matching.services.taxonomy.tree import CategoryTree

logger = structlog.get_logger(__name__)

TOKEN_SPLIT = re.compile(r"[\s\-/,]+")

STOP_WORDS: FrozenSet[str] = frozenset({
    "dia", "mm", "taper", "size", "with", "for", "the", "and",
})


@dataclass(frozen=True)
class ScoringWeights:
    """Scoring constants.

    Values are empirical; see MatchingSettings for their meaning.
    """
    base_score: float = 0.3
    depth_bonus_exact: float = 0.20
    depth_bonus_one: float = 0.15
    depth_bonus_two: float = 0.10
    brand_bonus: float = 0.30
    keyword_bonus: float = 0.15
    max_score: float = 0.95
    min_score: float = 0.3
    max_matches_per_product: int = 20
    match_method: str = "rule"
    min_token_length: int = 3
    min_keyword_length: int = 4

    @classmethod
    def from_settings(cls, source: Optional[MatchingSettings] = None) -> "ScoringWeights":
        s = source or matching_settings
        return cls(
            base_score=s.base_score,
            depth_bonus_exact=s.depth_bonus_exact,
            depth_bonus_one=s.depth_bonus_one,
            depth_bonus_two=s.depth_bonus_two,
            brand_bonus=s.brand_bonus,
            keyword_bonus=s.keyword_bonus,
            max_score=s.max_score,
            min_score=s.min_score,
            max_matches_per_product=s.max_matches_per_product,
            match_method=s.match_method,
            min_token_length=s.min_token_length,
            min_keyword_length=s.min_keyword_length,
        )

    def depth_bonus(self, depth_diff: int) -> Tuple[float, Optional[str]]:
        """Bonus and reason label for an absolute depth difference."""
        if depth_diff == 0:
            return self.depth_bonus_exact, "exact depth"
        if depth_diff == 1:
            return self.depth_bonus_one, "depth ±1"
        if depth_diff == 2:
            return self.depth_bonus_two, "depth ±2"
        return 0.0, None


def tokenize(name: str, min_length: int = 3) -> List[str]:
    """Split a product name into lowercase tokens worth comparing.

    Example:
        tokenize("Trilogy Acetabular Shell 54mm")
        # ['trilogy', 'acetabular', 'shell', '54mm']
    """
    return [
        token for token in TOKEN_SPLIT.split(name.lower())
        if len(token) >= min_length and token not in STOP_WORDS
    ]


class MatchScorer:
    """Scores and ranks reference-price candidates for products.

    Instances hold only read-only state and may be shared between threads.
    """

    def __init__(
        self,
        tree: CategoryTree,
        brands: Optional[BrandTable] = None,
        weights: Optional[ScoringWeights] = None,
    ):
        self.tree = tree
        self.brands = brands or BrandTable()
        self.weights = weights or ScoringWeights.from_settings()

    def score(
        self,
        product: ProductRecord,
        price: ReferencePriceRecord,
    ) -> Optional[PriceMatch]:
        """Score one candidate.

        Returns:
            PriceMatch, or None when the candidate cannot be placed in the
            tree or falls below the minimum score
        """
        w = self.weights
        price_category = price.indexed_category_id
        if (
            product.category_id is None
            or price_category is None
            or product.category_id not in self.tree
            or price_category not in self.tree
        ):
            return None

        score = w.base_score
        reasons: List[str] = []

        depth_diff = abs(self.tree.depth(product.category_id) - self.tree.depth(price_category))
        bonus, label = w.depth_bonus(depth_diff)
        if label is not None:
            score += bonus
            reasons.append(label)

        brand = self._brand_keyword(product, price)
        if brand is not None:
            score += w.brand_bonus
            reasons.append(f"brand match: {brand}")
        else:
            keyword = self._shared_token(product, price)
            if keyword is not None:
                score += w.keyword_bonus
                reasons.append(f"keyword: {keyword}")

        score = min(w.max_score, score)
        if score < w.min_score:
            return None

        return PriceMatch(
            product_id=product.id,
            reference_price_id=price.id,
            score=round(score, 2),
            reasons=tuple(reasons),
            method=w.match_method,
        )

    def rank(
        self,
        product: ProductRecord,
        candidates: Sequence[ReferencePriceRecord],
    ) -> List[PriceMatch]:
        """Score all candidates and keep the top K, best first.

        Ties keep candidate order, so equal inputs give equal output.
        """
        matches = [m for m in (self.score(product, p) for p in candidates) if m is not None]
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[: self.weights.max_matches_per_product]

    def _brand_keyword(
        self,
        product: ProductRecord,
        price: ReferencePriceRecord,
    ) -> Optional[str]:
        keywords = self.brands.keywords(price.manufacturer_code)
        if not keywords:
            return None

        fields = [
            (product.name or "").lower(),
            (product.description or "").lower(),
            (product.vendor_name or "").lower(),
        ]
        for keyword in keywords:
            if any(keyword in text for text in fields):
                return keyword
        return None

    def _shared_token(
        self,
        product: ProductRecord,
        price: ReferencePriceRecord,
    ) -> Optional[str]:
        description = (price.component_description or "").lower()
        if not description:
            return None

        for token in tokenize(product.name or "", self.weights.min_token_length):
            if len(token) >= self.weights.min_keyword_length and token in description:
                return token
        return None
