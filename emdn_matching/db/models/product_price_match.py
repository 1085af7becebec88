"""Product to reference price match ORM model."""
from sqlalchemy import String, ForeignKey, Numeric, Text, DateTime, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import Mapped, mapped_column
from emdn_matching.db.base import Base, UUIDMixin
from datetime import datetime
from decimal import Decimal
import uuid


class ProductPriceMatch(Base, UUIDMixin):
    """Scored link between a product and a reference price.

    Rows for a ``match_method`` are replaced wholesale on every run of that
    method; manual matches use their own method tag and are left alone.
    """

    __tablename__ = "product_price_matches"
    __table_args__ = (
        UniqueConstraint(
            'product_id', 'reference_price_id', 'match_method',
            name='uq_product_price_match_method'
        ),
        CheckConstraint(
            'match_score >= 0 AND match_score <= 1',
            name='check_match_score_range'
        ),
    )

    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    reference_price_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("reference_prices.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    match_score: Mapped[Decimal] = mapped_column(Numeric(3, 2), nullable=False)
    match_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    match_method: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<ProductPriceMatch(product_id={self.product_id}, "
            f"reference_price_id={self.reference_price_id}, score={self.match_score})>"
        )
