"""Reference-price candidate resolution and scoring."""
from emdn_matching.services.matching.brands import BrandTable, MANUFACTURER_BRANDS
from emdn_matching.services.matching.index import CandidateResolver, ReferencePriceIndex
from emdn_matching.services.matching.leaf_mapping import (
    LeafCategoryMapper,
    LeafMappingPlan,
    LeafUpdate,
    XC_TO_LEAF_CODE,
)
from emdn_matching.services.matching.scorer import MatchScorer, ScoringWeights, tokenize

__all__ = [
    "BrandTable",
    "CandidateResolver",
    "LeafCategoryMapper",
    "LeafMappingPlan",
    "LeafUpdate",
    "MANUFACTURER_BRANDS",
    "MatchScorer",
    "ReferencePriceIndex",
    "ScoringWeights",
    "XC_TO_LEAF_CODE",
    "tokenize",
]
