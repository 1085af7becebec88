"""Outcome of a write phase."""
from dataclasses import dataclass, field
from typing import List

from emdn_matching.models.records import RecordId


@dataclass
class PersistenceSummary:
    """Rows written and rows that failed during one apply run.

    Attributes:
        operation: Name of the write phase (e.g. "replace_matches")
        written: Number of rows written successfully
        failed_ids: Ids of rows that failed even after per-row retry
        errors: One message per failed batch, row or delete
        aborted: Set when the phase stopped before writing any row
    """
    operation: str
    written: int = 0
    failed_ids: List[RecordId] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    aborted: bool = False

    @property
    def has_failures(self) -> bool:
        """True if any row is not in the database as planned."""
        return self.aborted or bool(self.failed_ids)

    def merge(self, other: "PersistenceSummary") -> "PersistenceSummary":
        self.written += other.written
        self.failed_ids.extend(other.failed_ids)
        self.errors.extend(other.errors)
        self.aborted = self.aborted or other.aborted
        return self

    def render(self) -> str:
        lines = [
            f"=== Persistence: {self.operation} ===",
            f"Written: {self.written}",
            f"Failed: {len(self.failed_ids)}",
        ]
        if self.aborted:
            lines.append("Aborted before writing")
        for error in self.errors:
            lines.append(f"  ! {error}")
        if self.failed_ids:
            lines.append("Failed ids:")
            lines.extend(f"  {row_id}" for row_id in self.failed_ids)
        return "\n".join(lines) + "\n"
