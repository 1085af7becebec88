"""Reference price ORM model."""
from sqlalchemy import String, ForeignKey, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column
from emdn_matching.db.base import Base, UUIDMixin
from decimal import Decimal
import uuid


class ReferencePrice(Base, UUIDMixin):
    """External price observation for a class of device.

    Attributes:
        emdn_category_id: Broad category the price was filed under
        emdn_leaf_category_id: Narrower category set by leaf mapping
        manufacturer_name: Short manufacturer code (e.g. "ZIM")
        component_description: Free-text description of the priced item
        xc_subcode: National reimbursement subcode
        price_eur: Price in EUR
    """

    __tablename__ = "reference_prices"

    emdn_category_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("emdn_categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    emdn_leaf_category_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("emdn_categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    manufacturer_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    component_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    xc_subcode: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    price_eur: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)

    def __repr__(self) -> str:
        return f"<ReferencePrice(id={self.id}, manufacturer='{self.manufacturer_name}')>"
