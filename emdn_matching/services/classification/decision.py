"""Reclassification decision over category codes.

The decision is a plain string-prefix comparison. It deliberately does not
consult the tree, so it stays correct when parent links are stale or partial.
"""
from enum import Enum
from typing import Optional


class ReclassificationOutcome(str, Enum):
    """What to do with a product's current category."""
    NEW = "new"
    DEEPEN = "deepen"
    FIX = "fix"
    NO_OP = "no-op"

    @property
    def writes(self) -> bool:
        """True when the outcome updates the product's category."""
        return self is not ReclassificationOutcome.NO_OP


def decide(current_code: Optional[str], candidate_code: str) -> ReclassificationOutcome:
    """Compare the current code with the classifier's candidate.

    Args:
        current_code: Code of the product's current category, None if unset
        candidate_code: Code proposed by the classifier

    Returns:
        NEW if there is no current code, DEEPEN if the current code is a
        proper prefix of the candidate, NO_OP if the candidate is a prefix of
        (or equal to) the current code, FIX otherwise.
    """
    if not current_code:
        return ReclassificationOutcome.NEW
    if candidate_code.startswith(current_code):
        if len(candidate_code) > len(current_code):
            return ReclassificationOutcome.DEEPEN
        return ReclassificationOutcome.NO_OP
    if current_code.startswith(candidate_code):
        return ReclassificationOutcome.NO_OP
    return ReclassificationOutcome.FIX
