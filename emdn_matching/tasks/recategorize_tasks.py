"""Queue task for rule-based product recategorization.

Flow:
    1. Load the category table and all products
    2. Build the category index and validate the rule list against it
    3. Classify every product and decide new / deepen / fix / no-op
    4. Render the report (identical in dry-run and apply mode)
    5. In apply mode, write the category changes in batches
"""
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import structlog

from emdn_matching.config import classification_settings, settings
from emdn_matching.db.operations import apply_category_changes
from emdn_matching.errors.exceptions import ConfigError, CycleError
from emdn_matching.models.records import ProductRecord
from emdn_matching.services.classification import (
    ClassificationResult,
    ReclassificationOutcome,
    RuleClassifier,
    decide,
)
from emdn_matching.services.reporting import (
    ProductChange,
    RecategorizationReport,
    write_changes_csv,
)
from emdn_matching.services.taxonomy import CategoryTree
from emdn_matching.tasks.common import (
    STATUS_CONFIG_ERROR,
    STATUS_PARTIAL,
    STATUS_SUCCESS,
    load_snapshot,
    map_in_order,
)

logger = structlog.get_logger(__name__)

Decision = Tuple[ClassificationResult, Optional[ReclassificationOutcome], Optional[ProductChange]]


@dataclass
class RecategorizationPlan:
    """Changes to write plus the report describing them."""
    changes: List[ProductChange]
    report: RecategorizationReport


def decide_product(
    product: ProductRecord,
    classifier: RuleClassifier,
    tree: CategoryTree,
) -> Decision:
    """Classify one product and work out what would change.

    A product whose current category id is not in the index is treated as
    uncategorized.
    """
    result = classifier.classify(product.name)
    if not result.is_classified:
        return result, None, None

    current = tree.get(product.category_id) if product.category_id is not None else None
    outcome = decide(current.code if current else None, result.category_code)
    if not outcome.writes:
        return result, outcome, None

    target = tree.by_code(result.category_code)
    change = ProductChange(
        product_id=product.id,
        product_name=product.name,
        old_code=current.code if current else None,
        old_name=current.name if current else None,
        new_category_id=target.id,
        new_code=target.code,
        new_name=target.name,
        outcome=outcome,
        rule_name=result.rule_name,
    )
    return result, outcome, change


def plan_recategorization(
    products: Sequence[ProductRecord],
    classifier: RuleClassifier,
    tree: CategoryTree,
    max_workers: int = 1,
    sample_size: int = 30,
) -> RecategorizationPlan:
    """Classify all products; no side effects.

    Products are independent, so they may be classified on worker threads.
    The report is assembled in product order either way.
    """
    decisions = map_in_order(
        lambda product: decide_product(product, classifier, tree),
        products,
        max_workers,
    )

    report = RecategorizationReport(sample_size=sample_size)
    for product, (result, outcome, change) in zip(products, decisions):
        if outcome is None:
            report.record_unclassified(product.name)
        else:
            report.record(result.rule_name, outcome, change)

    return RecategorizationPlan(changes=list(report.changes), report=report)


async def recategorize_products_task(
    ctx: Dict[str, Any],
    task_id: str,
    apply: bool = False,
    csv_path: Optional[str] = None,
) -> Dict[str, Any]:
    """Recategorize every product with the curated rule list.

    Args:
        ctx: Worker context
        task_id: Unique task identifier for logging
        apply: Write the changes (default is a dry run)
        csv_path: Optional path for a CSV export of the proposed changes

    Returns:
        Dictionary with status, rendered report and counts. The persistence
        summary is included only when ``apply`` is set.
    """
    start_time = time.time()
    log = logger.bind(task_id=task_id, apply=apply)
    log.info("recategorize_task_started")

    snapshot = await load_snapshot(with_prices=False)

    try:
        tree = CategoryTree.from_records(snapshot.categories)
        classifier = RuleClassifier(tree)
    except (ConfigError, CycleError) as e:
        log.error(
            "recategorize_task_config_error",
            error=e.message,
            error_type=type(e).__name__,
            problems=getattr(e, "problems", None),
        )
        return {
            "task_id": task_id,
            "status": STATUS_CONFIG_ERROR,
            "error": e.message,
            "error_type": type(e).__name__,
        }

    plan = plan_recategorization(
        snapshot.products,
        classifier,
        tree,
        max_workers=settings.max_workers,
        sample_size=classification_settings.sample_size,
    )
    report = plan.report

    if csv_path:
        write_changes_csv(plan.changes, csv_path)
        log.info("changes_csv_written", path=csv_path, rows=len(plan.changes))

    status = STATUS_SUCCESS
    persistence = None
    if apply:
        summary = await apply_category_changes(
            plan.changes,
            batch_size=classification_settings.batch_size,
        )
        persistence = summary.render()
        if summary.has_failures:
            status = STATUS_PARTIAL

    duration = time.time() - start_time
    log.info(
        "recategorize_task_completed",
        status=status,
        total_products=report.total_products,
        changes=len(plan.changes),
        unclassified=report.unclassified_count,
        duration_seconds=round(duration, 2),
    )

    return {
        "task_id": task_id,
        "status": status,
        "report": report.render(),
        "persistence": persistence,
        "total_products": report.total_products,
        "new": report.count(ReclassificationOutcome.NEW),
        "deepen": report.count(ReclassificationOutcome.DEEPEN),
        "fix": report.count(ReclassificationOutcome.FIX),
        "no_op": report.count(ReclassificationOutcome.NO_OP),
        "unclassified": report.unclassified_count,
        "duration_seconds": round(duration, 2),
    }
