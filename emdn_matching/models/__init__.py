"""Pydantic snapshot records exchanged between persistence and services."""
from emdn_matching.models.records import (
    RecordId,
    CategoryRecord,
    ProductRecord,
    ReferencePriceRecord,
)
from emdn_matching.models.matching import PriceMatch

__all__ = [
    "RecordId",
    "CategoryRecord",
    "ProductRecord",
    "ReferencePriceRecord",
    "PriceMatch",
]
