"""Custom exception hierarchy for recategorization and price matching."""
from typing import List, Optional, Sequence


class MatchingPipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, *args, **kwargs):
        """Initialize error with message."""
        self.message = message
        super().__init__(message, *args, **kwargs)


class ConfigError(MatchingPipelineError):
    """Raised when static configuration references unknown categories.

    Fatal: raised before any product is processed.
    """

    def __init__(self, message: str, problems: Optional[Sequence[str]] = None):
        self.problems: List[str] = list(problems or [])
        super().__init__(message)


class CycleError(MatchingPipelineError):
    """Raised when an ancestor walk does not reach a root."""

    def __init__(self, message: str, category_id=None, chain: Optional[Sequence] = None):
        self.category_id = category_id
        self.chain = list(chain or [])
        super().__init__(message)


class PersistenceError(MatchingPipelineError):
    """Raised when a database write fails."""

    def __init__(self, message: str, row_ids: Optional[Sequence] = None):
        self.row_ids = list(row_ids or [])
        super().__init__(message)


class DataQualityWarning(UserWarning):
    """Label for non-fatal data problems (e.g. a price without a category)."""
    pass
