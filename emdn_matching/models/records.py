"""Read-only snapshot records loaded once per run.

Identifiers are opaque: UUIDs from the database, plain strings or ints in
fixtures. Records are frozen so shared snapshots can be handed to worker
threads without copying.
"""
from decimal import Decimal
from typing import Optional, Tuple, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

RecordId = Union[UUID, int, str]


class CategoryRecord(BaseModel):
    """One row of the category table.

    Attributes:
        id: Stable category identifier
        code: Hierarchical code; a child's code starts with its parent's code
        name: Display name
        parent_id: Parent category id (None only at a root)
        depth: Number of ancestors (0 at a root)
        path: Ancestor codes from the root down to this node, inclusive
    """

    model_config = ConfigDict(frozen=True)

    id: RecordId
    code: str = Field(..., min_length=1, max_length=50)
    name: str = ""
    parent_id: Optional[RecordId] = None
    depth: Optional[int] = Field(default=None, ge=0)
    path: Tuple[str, ...] = ()


class ProductRecord(BaseModel):
    """Catalog product as seen by the classifier and the matcher."""

    model_config = ConfigDict(frozen=True)

    id: RecordId
    name: str
    description: Optional[str] = None
    sku: Optional[str] = None
    vendor_name: Optional[str] = None
    manufacturer_name: Optional[str] = None
    category_id: Optional[RecordId] = None


class ReferencePriceRecord(BaseModel):
    """External reference price observation.

    Attributes:
        category_id: Broad category the price was filed under
        leaf_category_id: More specific category, preferred when present
        manufacturer_code: Short manufacturer code (e.g. "ZIM")
        component_description: Free-text description of the priced item
        xc_subcode: National reimbursement subcode (e.g. "XC1.17")
        price: Price in EUR
    """

    model_config = ConfigDict(frozen=True)

    id: RecordId
    category_id: Optional[RecordId] = None
    leaf_category_id: Optional[RecordId] = None
    manufacturer_code: Optional[str] = None
    component_description: Optional[str] = None
    xc_subcode: Optional[str] = None
    price: Optional[Decimal] = None

    @property
    def indexed_category_id(self) -> Optional[RecordId]:
        """Category the price is indexed under (leaf first)."""
        if self.leaf_category_id is not None:
            return self.leaf_category_id
        return self.category_id
