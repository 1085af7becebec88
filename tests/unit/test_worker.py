"""Unit tests for worker configuration and settings."""
import pytest
from pydantic import ValidationError

from emdn_matching.config import MatchingSettings
from emdn_matching.worker import WorkerSettings, on_job_end


class TestWorkerSettings:
    """Tests for WorkerSettings."""

    def test_registers_all_tasks(self):
        names = [fn.__name__ for fn in WorkerSettings.functions]
        assert names == [
            "recategorize_products_task",
            "map_leaf_categories_task",
            "match_products_to_prices_task",
        ]

    def test_runs_never_overlap_or_retry(self):
        assert WorkerSettings.max_jobs == 1
        assert WorkerSettings.max_tries == 1

    @pytest.mark.asyncio
    async def test_on_job_end_tolerates_empty_context(self):
        await on_job_end({})


class TestMatchingSettings:
    """Tests for MATCH_ environment settings."""

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("MATCH_BRAND_BONUS", "0.25")
        assert MatchingSettings().brand_bonus == 0.25

    def test_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            MatchingSettings(max_score=1.5)
