"""Queue task narrowing reference prices to leaf categories by subcode."""
import time
from typing import Any, Dict

import structlog

from emdn_matching.config import matching_settings
from emdn_matching.db.operations import apply_leaf_categories
from emdn_matching.errors.exceptions import ConfigError, CycleError
from emdn_matching.services.matching import LeafCategoryMapper, LeafMappingPlan
from emdn_matching.services.taxonomy import CategoryTree
from emdn_matching.tasks.common import (
    STATUS_CONFIG_ERROR,
    STATUS_PARTIAL,
    STATUS_SUCCESS,
    load_snapshot,
)

logger = structlog.get_logger(__name__)


def render_leaf_report(plan: LeafMappingPlan, tree: CategoryTree) -> str:
    lines = [
        "=== Leaf category mapping ===",
        f"Planned updates: {len(plan.updates)}",
        f"Already mapped: {plan.already_mapped}",
        f"Unknown subcodes (kept broad): {plan.unmapped_subcodes}",
        f"Without subcode: {plan.without_subcode}",
        "",
        "=== Leaf depth distribution ===",
    ]
    for depth, count in plan.depth_distribution(tree).items():
        lines.append(f"  depth {depth}: {count}")
    return "\n".join(lines) + "\n"


async def map_leaf_categories_task(
    ctx: Dict[str, Any],
    task_id: str,
    apply: bool = False,
) -> Dict[str, Any]:
    """Set leaf categories on reference prices with a known subcode.

    Args:
        ctx: Worker context
        task_id: Unique task identifier for logging
        apply: Write the updates (default is a dry run)
    """
    start_time = time.time()
    log = logger.bind(task_id=task_id, apply=apply)
    log.info("leaf_mapping_task_started")

    snapshot = await load_snapshot(with_products=False)

    try:
        tree = CategoryTree.from_records(snapshot.categories)
        mapper = LeafCategoryMapper(tree)
    except (ConfigError, CycleError) as e:
        log.error(
            "leaf_mapping_task_config_error",
            error=e.message,
            error_type=type(e).__name__,
        )
        return {
            "task_id": task_id,
            "status": STATUS_CONFIG_ERROR,
            "error": e.message,
            "error_type": type(e).__name__,
        }

    plan = mapper.plan(snapshot.prices)

    status = STATUS_SUCCESS
    persistence = None
    if apply:
        summary = await apply_leaf_categories(plan.updates, batch_size=matching_settings.batch_size)
        persistence = summary.render()
        if summary.has_failures:
            status = STATUS_PARTIAL

    duration = time.time() - start_time
    log.info(
        "leaf_mapping_task_completed",
        status=status,
        updates=len(plan.updates),
        duration_seconds=round(duration, 2),
    )

    return {
        "task_id": task_id,
        "status": status,
        "report": render_leaf_report(plan, tree),
        "persistence": persistence,
        "updates": len(plan.updates),
        "duration_seconds": round(duration, 2),
    }
