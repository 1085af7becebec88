"""Builders for snapshot records used across the unit tests.

Category ids are the codes themselves, and a code's parent is the longest
other code that is a proper prefix of it, mirroring how the nomenclature
encodes ancestry.
"""
from decimal import Decimal
from typing import Iterable, List, Optional

from emdn_matching.models.records import CategoryRecord, ProductRecord, ReferencePriceRecord
from emdn_matching.services.classification.rules import DEFAULT_RULES
from emdn_matching.services.matching.leaf_mapping import XC_TO_LEAF_CODE

# Codes the scenarios refer to that no rule or mapping targets directly
EXTRA_CODES = (
    "P",
    "P09080301",
    "P09080302",
    "P09080304",
    "P0908030102",
    "P09080401",
    "P0908040101",
    "P0909050202",
)


def category_records(codes: Iterable[str]) -> List[CategoryRecord]:
    """Category rows for ``codes`` with prefix-derived parents and depths."""
    unique = sorted(set(codes), key=lambda c: (len(c), c))
    parents = {}
    for code in unique:
        candidates = [other for other in parents if code.startswith(other) and other != code]
        parents[code] = max(candidates, key=len) if candidates else None

    def depth(code: str) -> int:
        d = 0
        parent = parents[code]
        while parent is not None:
            d += 1
            parent = parents[parent]
        return d

    return [
        CategoryRecord(
            id=code,
            code=code,
            name=f"Category {code}",
            parent_id=parents[code],
            depth=depth(code),
        )
        for code in unique
    ]


def all_known_codes() -> List[str]:
    codes = set(EXTRA_CODES)
    codes.update(rule.target_code for rule in DEFAULT_RULES)
    codes.update(XC_TO_LEAF_CODE.values())
    # Fill in every intermediate prefix so chains are contiguous
    for code in list(codes):
        for end in range(3, len(code), 2):
            codes.add(code[:end])
    return sorted(codes)


def make_product(
    name: str,
    category_id: Optional[str] = None,
    product_id: str = "prod-1",
    description: Optional[str] = None,
    vendor_name: Optional[str] = None,
) -> ProductRecord:
    return ProductRecord(
        id=product_id,
        name=name,
        description=description,
        vendor_name=vendor_name,
        category_id=category_id,
    )


def make_price(
    price_id: str,
    category_id: Optional[str] = None,
    leaf_category_id: Optional[str] = None,
    manufacturer_code: Optional[str] = None,
    description: Optional[str] = None,
    xc_subcode: Optional[str] = None,
    price: str = "100.00",
) -> ReferencePriceRecord:
    return ReferencePriceRecord(
        id=price_id,
        category_id=category_id,
        leaf_category_id=leaf_category_id,
        manufacturer_code=manufacturer_code,
        component_description=description,
        xc_subcode=xc_subcode,
        price=Decimal(price),
    )


