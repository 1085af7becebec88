"""Pydantic models for the price matching output."""
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field

from emdn_matching.models.records import RecordId

DEFAULT_REASON = "category ancestor"


class PriceMatch(BaseModel):
    """A scored (product, reference price) pair.

    Attributes:
        product_id: Matched product
        reference_price_id: Matched reference price
        score: Match score 0.0-1.0 (automated matches never exceed the cap)
        reasons: Signals that contributed, in the order they fired
        method: Tag separating automated matches from manual ones
    """

    model_config = ConfigDict(frozen=True)

    product_id: RecordId
    reference_price_id: RecordId
    score: float = Field(..., ge=0.0, le=1.0)
    reasons: Tuple[str, ...] = ()
    method: str = "rule"

    @property
    def reason(self) -> str:
        """Human-readable reason string stored alongside the match."""
        return "; ".join(self.reasons) if self.reasons else DEFAULT_REASON

    def to_dict(self) -> dict:
        """Convert to a row dict for persistence."""
        return {
            "product_id": self.product_id,
            "reference_price_id": self.reference_price_id,
            "match_score": self.score,
            "match_reason": self.reason,
            "match_method": self.method,
        }
