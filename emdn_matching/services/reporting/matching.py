"""Matching run report."""
from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from emdn_matching.models.matching import PriceMatch
from emdn_matching.models.records import ProductRecord, RecordId, ReferencePriceRecord

HIGH_SCORE = 0.6
HIGH_SCORE_SAMPLE = 10


@dataclass(frozen=True)
class MatchSample:
    score: float
    product_name: str
    price: Optional[Decimal]
    reason: str


@dataclass
class MatchingReport:
    """Totals and samples for one matching pass."""
    products_with_matches: int = 0
    products_without_matches: int = 0
    total_matches: int = 0
    score_buckets: Counter = field(default_factory=Counter)
    excluded_price_ids: List[RecordId] = field(default_factory=list)
    samples: List[MatchSample] = field(default_factory=list)

    def record(
        self,
        product: ProductRecord,
        matches: Sequence[PriceMatch],
        prices: Dict[RecordId, ReferencePriceRecord],
    ) -> None:
        """Add one product's ranked matches."""
        if not matches:
            self.products_without_matches += 1
            return

        self.products_with_matches += 1
        self.total_matches += len(matches)
        for match in matches:
            self.score_buckets[round(match.score, 1)] += 1
            if match.score >= HIGH_SCORE and len(self.samples) < HIGH_SCORE_SAMPLE:
                price = prices.get(match.reference_price_id)
                self.samples.append(
                    MatchSample(
                        score=match.score,
                        product_name=product.name,
                        price=price.price if price is not None else None,
                        reason=match.reason,
                    )
                )

    def render(self) -> str:
        lines = [
            "=== Matching summary ===",
            f"Products with matches: {self.products_with_matches}",
            f"Products without matches: {self.products_without_matches}",
            f"Total matches: {self.total_matches}",
            f"Prices excluded (no category): {len(self.excluded_price_ids)}",
            "",
            "=== Score distribution ===",
        ]
        for bucket, count in sorted(self.score_buckets.items()):
            lines.append(f"  {bucket:.1f}: {count}")

        if self.samples:
            lines.append("")
            lines.append(f"=== Sample high-score matches (>= {HIGH_SCORE:.1f}) ===")
            for sample in self.samples:
                price = f"{sample.price:.2f}" if sample.price is not None else "-"
                lines.append(
                    f"  {sample.score:.2f} | {sample.product_name[:50]} -> EUR {price} [{sample.reason}]"
                )

        if self.excluded_price_ids:
            lines.append("")
            lines.append("=== Prices without category (excluded) ===")
            lines.extend(f"  {price_id}" for price_id in sorted(str(i) for i in self.excluded_price_ids))
        return "\n".join(lines) + "\n"
