"""Queue task for rule-based product to reference-price matching.

Flow:
    1. Load categories, products and reference prices
    2. Build the category index, the inverted price index and the brand table
    3. For every categorized product, resolve candidates along its ancestor
       chain, score them and keep the top K
    4. Render the report (identical in dry-run and apply mode)
    5. In apply mode, replace all matches carrying the automated method tag
"""
import time
from typing import Any, Dict, List, Sequence, Tuple

import structlog

from emdn_matching.config import matching_settings, settings
from emdn_matching.db.operations import replace_matches
from emdn_matching.errors.exceptions import ConfigError, CycleError
from emdn_matching.models.matching import PriceMatch
from emdn_matching.models.records import ProductRecord
from emdn_matching.services.matching import (
    BrandTable,
    CandidateResolver,
    MatchScorer,
    ReferencePriceIndex,
    ScoringWeights,
)
from emdn_matching.services.reporting import MatchingReport
from emdn_matching.services.taxonomy import CategoryTree
from emdn_matching.tasks.common import (
    STATUS_CONFIG_ERROR,
    STATUS_PARTIAL,
    STATUS_SUCCESS,
    load_snapshot,
    map_in_order,
)

logger = structlog.get_logger(__name__)


def compute_matches(
    products: Sequence[ProductRecord],
    resolver: CandidateResolver,
    scorer: MatchScorer,
    max_workers: int = 1,
) -> List[Tuple[ProductRecord, List[PriceMatch]]]:
    """Rank candidates for every product; no side effects.

    Products without a category get an empty list.
    """
    def match_one(product: ProductRecord) -> List[PriceMatch]:
        return scorer.rank(product, resolver.candidates(product))

    return list(zip(products, map_in_order(match_one, products, max_workers)))


def build_matching_report(
    results: Sequence[Tuple[ProductRecord, List[PriceMatch]]],
    index: ReferencePriceIndex,
    prices: Sequence,
) -> MatchingReport:
    report = MatchingReport(excluded_price_ids=list(index.excluded_ids))
    by_id = {price.id: price for price in prices}
    for product, matches in results:
        report.record(product, matches, by_id)
    return report


async def match_products_to_prices_task(
    ctx: Dict[str, Any],
    task_id: str,
    apply: bool = False,
) -> Dict[str, Any]:
    """Match every categorized product to reference prices.

    Args:
        ctx: Worker context
        task_id: Unique task identifier for logging
        apply: Replace stored matches (default is a dry run)

    Returns:
        Dictionary with status, rendered report and counts
    """
    start_time = time.time()
    log = logger.bind(task_id=task_id, apply=apply)
    log.info("match_prices_task_started")

    snapshot = await load_snapshot()

    try:
        tree = CategoryTree.from_records(snapshot.categories)
        brands = BrandTable()
    except (ConfigError, CycleError) as e:
        log.error(
            "match_prices_task_config_error",
            error=e.message,
            error_type=type(e).__name__,
        )
        return {
            "task_id": task_id,
            "status": STATUS_CONFIG_ERROR,
            "error": e.message,
            "error_type": type(e).__name__,
        }

    weights = ScoringWeights.from_settings(matching_settings)
    index = ReferencePriceIndex(snapshot.prices)
    resolver = CandidateResolver(tree, index)
    scorer = MatchScorer(tree, brands=brands, weights=weights)

    products = [p for p in snapshot.products if p.category_id is not None]
    results = compute_matches(products, resolver, scorer, max_workers=settings.max_workers)
    report = build_matching_report(results, index, snapshot.prices)

    status = STATUS_SUCCESS
    persistence = None
    if apply:
        all_matches = [match for _, matches in results for match in matches]
        summary = await replace_matches(
            all_matches,
            method=weights.match_method,
            batch_size=matching_settings.batch_size,
        )
        persistence = summary.render()
        if summary.has_failures:
            status = STATUS_PARTIAL

    duration = time.time() - start_time
    log.info(
        "match_prices_task_completed",
        status=status,
        products=len(products),
        products_with_matches=report.products_with_matches,
        total_matches=report.total_matches,
        duration_seconds=round(duration, 2),
    )

    return {
        "task_id": task_id,
        "status": status,
        "report": report.render(),
        "persistence": persistence,
        "products_with_matches": report.products_with_matches,
        "products_without_matches": report.products_without_matches,
        "total_matches": report.total_matches,
        "duration_seconds": round(duration, 2),
    }
