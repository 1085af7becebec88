"""Recategorization run report and CSV export.

The report is a pure function of the planned decisions: no timestamps, no
run mode. A dry run and an apply run over the same snapshot print the same
bytes; write results are rendered separately (see PersistenceSummary).
"""
import csv
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from emdn_matching.models.records import RecordId
from emdn_matching.services.classification.decision import ReclassificationOutcome

CSV_COLUMNS = (
    "product_id",
    "product_name",
    "old_code",
    "old_name",
    "new_code",
    "new_name",
    "change_type",
    "rule",
)


@dataclass(frozen=True)
class ProductChange:
    """A category update proposed for one product."""
    product_id: RecordId
    product_name: str
    old_code: Optional[str]
    old_name: Optional[str]
    new_category_id: RecordId
    new_code: str
    new_name: str
    outcome: ReclassificationOutcome
    rule_name: str

    def to_row(self) -> Dict[str, str]:
        return {
            "product_id": str(self.product_id),
            "product_name": self.product_name,
            "old_code": self.old_code or "",
            "old_name": self.old_name or "",
            "new_code": self.new_code,
            "new_name": self.new_name,
            "change_type": self.outcome.value,
            "rule": self.rule_name,
        }


@dataclass
class RecategorizationReport:
    """Counts and samples for one classification pass.

    Attributes:
        total_products: Products seen
        outcomes: Count per reclassification outcome
        rule_hits: Count per rule over every classified product
        fixes: Count per (old code, new code) for FIX outcomes
        unclassified: Names of products no rule matched
        changes: Proposed changes in product order
        category_names: Code to display name, used in the fixes section
        sample_size: Number of changes listed in full
    """
    total_products: int = 0
    outcomes: Counter = field(default_factory=Counter)
    rule_hits: Counter = field(default_factory=Counter)
    fixes: Counter = field(default_factory=Counter)
    unclassified: List[str] = field(default_factory=list)
    changes: List[ProductChange] = field(default_factory=list)
    category_names: Dict[str, str] = field(default_factory=dict)
    sample_size: int = 30

    def record_unclassified(self, product_name: str) -> None:
        self.total_products += 1
        self.unclassified.append(product_name)

    def record(
        self,
        rule_name: str,
        outcome: ReclassificationOutcome,
        change: Optional[ProductChange] = None,
    ) -> None:
        """Count one classified product and keep its change if any."""
        self.total_products += 1
        self.rule_hits[rule_name] += 1
        self.outcomes[outcome] += 1
        if change is None:
            return
        self.changes.append(change)
        self.category_names.setdefault(change.new_code, change.new_name)
        if change.old_code:
            self.category_names.setdefault(change.old_code, change.old_name or "")
        if outcome is ReclassificationOutcome.FIX:
            self.fixes[(change.old_code or "NONE", change.new_code)] += 1

    def count(self, outcome: ReclassificationOutcome) -> int:
        return self.outcomes.get(outcome, 0)

    @property
    def unclassified_count(self) -> int:
        return len(self.unclassified)

    def sorted_rule_hits(self) -> List[Tuple[str, int]]:
        return sorted(self.rule_hits.items(), key=lambda item: (-item[1], item[0]))

    def render(self) -> str:
        o = ReclassificationOutcome
        lines = [
            "=== Recategorization summary ===",
            f"Total products: {self.total_products}",
            f"Changes proposed: {len(self.changes)}",
            f"  New (was uncategorized): {self.count(o.NEW)}",
            f"  Deepened: {self.count(o.DEEPEN)}",
            f"  Fixed (misclassification): {self.count(o.FIX)}",
            f"Already optimal (no-op): {self.count(o.NO_OP)}",
            f"No rule match: {self.unclassified_count}",
            "",
            "=== Hits by rule ===",
        ]
        for rule_name, hits in self.sorted_rule_hits():
            lines.append(f"  {hits:>5} | {rule_name}")

        if self.fixes:
            lines.append("")
            lines.append("=== Misclassification fixes ===")
            for (old_code, new_code), count in sorted(self.fixes.items()):
                lines.append(
                    f"  {old_code} ({self.category_names.get(old_code, '')}) -> "
                    f"{new_code} ({self.category_names.get(new_code, '')}): {count}"
                )

        lines.append("")
        lines.append(f"=== Sample changes (first {self.sample_size}) ===")
        for change in self.changes[: self.sample_size]:
            lines.append(
                f"  {change.outcome.value.upper():<6} {change.product_name[:50]:<50} | "
                f"{(change.old_code or 'NONE'):<15} -> {change.new_code:<15} | {change.rule_name}"
            )
        if len(self.changes) > self.sample_size:
            lines.append(f"  ... and {len(self.changes) - self.sample_size} more")

        lines.append("")
        lines.append(f"=== Unclassified products ({self.unclassified_count}) ===")
        lines.extend(f"  {name}" for name in sorted(self.unclassified))
        return "\n".join(lines) + "\n"


def write_changes_csv(changes: List[ProductChange], path: Union[str, Path]) -> Path:
    """Export proposed changes for offline review.

    Returns:
        Path the CSV was written to
    """
    path = Path(path)
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for change in changes:
            writer.writerow(change.to_row())
    return path
