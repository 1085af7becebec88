"""Helpers shared by the batch tasks."""
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Sequence, TypeVar

import structlog

from emdn_matching.db.base import async_session_maker
from emdn_matching.db.operations import (
    load_categories,
    load_products,
    load_reference_prices,
)
from emdn_matching.models.records import CategoryRecord, ProductRecord, ReferencePriceRecord

logger = structlog.get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

STATUS_SUCCESS = "success"
STATUS_PARTIAL = "partial_success"
STATUS_CONFIG_ERROR = "config_error"


@dataclass
class Snapshot:
    """Everything a run reads, loaded once before any computation."""
    categories: List[CategoryRecord] = field(default_factory=list)
    products: List[ProductRecord] = field(default_factory=list)
    prices: List[ReferencePriceRecord] = field(default_factory=list)


async def load_snapshot(
    with_products: bool = True,
    with_prices: bool = True,
    session_factory=async_session_maker,
) -> Snapshot:
    """Read the tables a run needs in a single session."""
    async with session_factory() as session:
        snapshot = Snapshot(categories=await load_categories(session))
        if with_products:
            snapshot.products = await load_products(session)
        if with_prices:
            snapshot.prices = await load_reference_prices(session)
    return snapshot


def map_in_order(fn: Callable[[T], R], items: Sequence[T], max_workers: int = 1) -> List[R]:
    """Apply ``fn`` to every item, optionally on a thread pool.

    Results always come back in input order.
    """
    if max_workers <= 1 or len(items) < 2:
        return [fn(item) for item in items]
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(fn, items))
