"""Map national reimbursement subcodes on reference prices to leaf categories.

Prices imported from the reimbursement list are filed under a broad category
(e.g. "hip" for every XC1.* subcode). The subcode says more than that, so a
static table narrows each known subcode to the most specific category that
describes the same class of item. The candidate resolver prefers the leaf
category, so running this before matching tightens the candidate sets.
"""
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

import structlog

from emdn_matching.errors.exceptions import ConfigError
from emdn_matching.models.records import RecordId, ReferencePriceRecord
from emdn_matching.services.taxonomy.tree import CategoryTree

logger = structlog.get_logger(__name__)

XC_TO_LEAF_CODE: Mapping[str, str] = MappingProxyType({
    # Hip primary sets
    "XC1.1": "P090803",
    "XC1.1.1": "P09080305",
    "XC1.2": "P090803",
    "XC1.2.1": "P09080305",
    "XC1.3": "P090803",
    "XC1.4": "P090803",
    "XC1.5": "P090803",
    "XC1.7": "P090803",
    "XC1.8": "P090803",
    "XC1.9": "P090803",
    # Hip revision
    "XC1.13": "P090880",
    "XC1.14": "P090880",
    "XC1.16": "P090880",
    # Hip single components
    "XC1.15": "P090804",
    "XC1.17": "P09080405",
    # Hip individual modular
    "XC1.11": "P090899",
    "XC1.18": "P090899",
    # Knee primary
    "XC2.1": "P090903",
    "XC2.2": "P090903",
    "XC2.3": "P090904",
    "XC2.4": "P090904",
    "XC2.17": "P090903",
    # Knee revision
    "XC2.5": "P090905",
    "XC2.8": "P090905",
    "XC2.11": "P090905",
    "XC2.14": "P090905",
    "XC2.15": "P090905",
    "XC2.16": "P090905",
    "XC2.18": "P090905",
    # Knee single components
    "XC2.7": "P0909030202",
    "XC2.10": "P09090702",
    "XC2.13": "P0909050202",
    "XC2.12": "P090906",
    # Shoulder
    "XC3.1": "P0901",
    "XC3.2": "P0901",
    "XC3.3": "P0901",
    "XC3.9": "P090199",
    # Elbow
    "XC3.4": "P0902",
    "XC3.6": "P090204",
    "XC3.15": "P090204",
    # Ankle
    "XC3.5": "P0905",
    # Hand
    "XC3.7": "P090404",
    # Other
    "XC3.10": "P090199",
    "XC3.12": "P090805",
    "XC3.13": "P090199",
    "XC3.14": "P091299",
})


@dataclass(frozen=True)
class LeafUpdate:
    """Leaf category to set on one reference price."""
    price_id: RecordId
    xc_subcode: str
    leaf_category_id: RecordId
    leaf_code: str


@dataclass
class LeafMappingPlan:
    """Planned leaf updates plus what was skipped."""
    updates: List[LeafUpdate]
    already_mapped: int = 0
    unmapped_subcodes: int = 0
    without_subcode: int = 0

    def depth_distribution(self, tree: CategoryTree) -> Dict[int, int]:
        counts = Counter(tree.depth(u.leaf_category_id) for u in self.updates)
        return dict(sorted(counts.items()))


class LeafCategoryMapper:
    """Resolves subcodes to leaf category ids against one category index.

    Raises:
        ConfigError: On construction, if any mapped code is not in the tree
    """

    def __init__(self, tree: CategoryTree, table: Mapping[str, str] = XC_TO_LEAF_CODE):
        self.tree = tree
        self._log = logger.bind(component="LeafCategoryMapper")

        problems = [
            f"{subcode}: unknown category code {code}"
            for subcode, code in table.items()
            if not tree.has_code(code)
        ]
        if problems:
            self._log.error("leaf_mapping_invalid", problems=problems)
            raise ConfigError(
                f"{len(problems)} subcode mapping(s) reference unknown categories",
                problems=problems,
            )
        self._table: Mapping[str, str] = MappingProxyType(dict(table))

    def leaf_for(self, xc_subcode: Optional[str]) -> Optional[RecordId]:
        if not xc_subcode:
            return None
        code = self._table.get(xc_subcode.strip())
        if code is None:
            return None
        return self.tree.by_code(code).id

    def plan(self, prices: Iterable[ReferencePriceRecord]) -> LeafMappingPlan:
        """Plan leaf updates for prices that have a known subcode and no leaf yet.

        Prices with unknown subcodes keep their broad category.
        """
        plan = LeafMappingPlan(updates=[])
        for price in prices:
            if not price.xc_subcode:
                plan.without_subcode += 1
                continue
            if price.leaf_category_id is not None:
                plan.already_mapped += 1
                continue
            leaf_id = self.leaf_for(price.xc_subcode)
            if leaf_id is None:
                plan.unmapped_subcodes += 1
                continue
            plan.updates.append(
                LeafUpdate(
                    price_id=price.id,
                    xc_subcode=price.xc_subcode.strip(),
                    leaf_category_id=leaf_id,
                    leaf_code=self.tree.code(leaf_id),
                )
            )

        self._log.info(
            "leaf_mapping_planned",
            updates=len(plan.updates),
            already_mapped=plan.already_mapped,
            unmapped=plan.unmapped_subcodes,
        )
        return plan
