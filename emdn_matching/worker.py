"""arq worker configuration for the batch tasks.

This module configures the arq worker with:
    - recategorize_products_task: Rule-based product recategorization
    - map_leaf_categories_task: Subcode to leaf-category mapping for prices
    - match_products_to_prices_task: Product to reference-price matching

All tasks default to dry-run; enqueue with ``apply=True`` to write.
"""
from arq.connections import RedisSettings
from typing import Dict, Any
import structlog
from emdn_matching.config import settings, configure_logging

from emdn_matching.tasks.recategorize_tasks import recategorize_products_task
from emdn_matching.tasks.leaf_tasks import map_leaf_categories_task
from emdn_matching.tasks.matching_tasks import match_products_to_prices_task

# Configure logging
configure_logging(settings.log_level)
logger = structlog.get_logger(__name__)


async def on_job_end(ctx: Dict[str, Any]) -> None:
    """Hook called after each job ends (success or failure)."""
    logger.info(
        "job_ended",
        job_id=ctx.get("job_id", "unknown"),
        job_try=ctx.get("job_try", 1),
    )


class WorkerSettings:
    """arq worker configuration settings.

    This class is imported by arq CLI: `arq emdn_matching.worker.WorkerSettings`

    Configuration errors are returned as a ``config_error`` status rather
    than raised, so arq does not retry a run that cannot succeed.
    """

    redis_settings = RedisSettings.from_dsn(settings.redis_url)
    queue_name = settings.queue_name
    max_jobs = 1  # Runs replace whole tables; never overlap them
    job_timeout = settings.job_timeout
    keep_result = 3600  # Keep results for 1 hour
    max_tries = 1

    functions = [
        recategorize_products_task,
        map_leaf_categories_task,
        match_products_to_prices_task,
    ]

    on_job_end = on_job_end
