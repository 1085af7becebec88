"""Catalog product ORM model (classification-relevant columns only)."""
from sqlalchemy import String, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column
from emdn_matching.db.base import Base, UUIDMixin
import uuid


class Product(Base, UUIDMixin):
    """Catalog product.

    Attributes:
        name: Product display name, the only text the classifier reads
        description: Optional free text, used by brand matching
        vendor_name: Vendor display name, used by brand matching
        emdn_category_id: Assigned category (nullable until classified)
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    sku: Mapped[str | None] = mapped_column(String(100), nullable=True)
    vendor_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    manufacturer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    emdn_category_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("emdn_categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}')>"
