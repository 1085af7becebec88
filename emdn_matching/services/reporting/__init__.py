"""Run reports printed to stdout."""
from emdn_matching.services.reporting.matching import MatchingReport, MatchSample
from emdn_matching.services.reporting.persistence import PersistenceSummary
from emdn_matching.services.reporting.recategorization import (
    CSV_COLUMNS,
    ProductChange,
    RecategorizationReport,
    write_changes_csv,
)

__all__ = [
    "CSV_COLUMNS",
    "MatchSample",
    "MatchingReport",
    "PersistenceSummary",
    "ProductChange",
    "RecategorizationReport",
    "write_changes_csv",
]
