"""Batch tasks for recategorization, leaf mapping and price matching."""
from emdn_matching.tasks.leaf_tasks import map_leaf_categories_task
from emdn_matching.tasks.matching_tasks import compute_matches, match_products_to_prices_task
from emdn_matching.tasks.recategorize_tasks import (
    RecategorizationPlan,
    plan_recategorization,
    recategorize_products_task,
)

__all__ = [
    "RecategorizationPlan",
    "compute_matches",
    "map_leaf_categories_task",
    "match_products_to_prices_task",
    "plan_recategorization",
    "recategorize_products_task",
]
