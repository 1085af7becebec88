"""Category ORM model for the hierarchical device nomenclature."""
from sqlalchemy import String, ForeignKey, Integer, CheckConstraint
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship
from emdn_matching.db.base import Base, UUIDMixin
from typing import List, Optional
import uuid


class Category(Base, UUIDMixin):
    """Nomenclature node.

    ``code`` encodes the ancestry: a child's code starts with its parent's
    code. ``path`` lists the codes from the root down to this node.
    """

    __tablename__ = "emdn_categories"
    __table_args__ = (
        CheckConstraint('id != parent_id', name='chk_emdn_no_self_reference'),
    )

    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("emdn_categories.id", ondelete="CASCADE"),
        nullable=True,
        index=True
    )
    depth: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    path: Mapped[List[str] | None] = mapped_column(ARRAY(String(50)), nullable=True)

    parent: Mapped[Optional["Category"]] = relationship(
        remote_side="Category.id",
        back_populates="children",
        foreign_keys=[parent_id]
    )
    children: Mapped[List["Category"]] = relationship(
        back_populates="parent",
        foreign_keys=[parent_id]
    )

    def __repr__(self) -> str:
        return f"<Category(code='{self.code}', depth={self.depth})>"
