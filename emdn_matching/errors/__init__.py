"""Error handling module."""
from emdn_matching.errors.exceptions import (
    MatchingPipelineError,
    ConfigError,
    CycleError,
    PersistenceError,
    DataQualityWarning,
)

__all__ = [
    "MatchingPipelineError",
    "ConfigError",
    "CycleError",
    "PersistenceError",
    "DataQualityWarning",
]
