"""Inverted reference-price index and candidate resolution."""
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Tuple

import structlog

from emdn_matching.errors.exceptions import DataQualityWarning
from emdn_matching.models.records import ProductRecord, RecordId, ReferencePriceRecord
from emdn_matching.services.taxonomy.tree import CategoryTree

logger = structlog.get_logger(__name__)


class ReferencePriceIndex:
    """Maps category id to the reference prices filed under it.

    Each price is indexed at its leaf category when it has one, otherwise at
    its broad category. Prices with neither are left out and reported once
    through ``excluded_ids``.
    """

    def __init__(self, prices: Iterable[ReferencePriceRecord]):
        self._log = logger.bind(component="ReferencePriceIndex")
        by_category: Dict[RecordId, List[ReferencePriceRecord]] = {}
        excluded: List[RecordId] = []
        total = 0

        for price in prices:
            total += 1
            category_id = price.indexed_category_id
            if category_id is None:
                excluded.append(price.id)
                continue
            by_category.setdefault(category_id, []).append(price)

        self._by_category: Mapping[RecordId, Tuple[ReferencePriceRecord, ...]] = MappingProxyType(
            {k: tuple(v) for k, v in by_category.items()}
        )
        self.excluded_ids: Tuple[RecordId, ...] = tuple(excluded)
        self.total_prices = total

        if excluded:
            self._log.warning(
                "price_missing_category",
                category=DataQualityWarning.__name__,
                count=len(excluded),
                price_ids=[str(i) for i in excluded],
            )
        self._log.info(
            "price_index_built",
            prices=total - len(excluded),
            categories=len(self._by_category),
        )

    def prices_for(self, category_id: RecordId) -> Tuple[ReferencePriceRecord, ...]:
        return self._by_category.get(category_id, ())

    def __len__(self) -> int:
        return sum(len(v) for v in self._by_category.values())


class CandidateResolver:
    """Finds the prices a product may be matched against.

    A price is a candidate only when its indexed category is the product's
    own category or one of its ancestors.
    """

    def __init__(self, tree: CategoryTree, index: ReferencePriceIndex):
        self.tree = tree
        self.index = index
        self._log = logger.bind(component="CandidateResolver")

    def candidates(self, product: ProductRecord) -> Tuple[ReferencePriceRecord, ...]:
        """Union of prices over the product's ancestor chain, one per price id.

        Order follows the chain from the product's own category upwards,
        then index insertion order.
        """
        if product.category_id is None:
            return ()
        if product.category_id not in self.tree:
            self._log.warning(
                "product_category_unknown",
                product_id=str(product.id),
                category_id=str(product.category_id),
            )
            return ()

        seen: Dict[RecordId, ReferencePriceRecord] = {}
        for ancestor_id in self.tree.ancestors(product.category_id):
            for price in self.index.prices_for(ancestor_id):
                if price.id not in seen:
                    seen[price.id] = price
        return tuple(seen.values())
