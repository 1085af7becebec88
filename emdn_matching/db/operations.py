"""Database operations for recategorization and price matching.

Loaders return frozen snapshot records so the compute phase never touches
ORM state. Writers run each batch in its own transaction; a failed batch is
retried row by row and the failures are collected into a PersistenceSummary
instead of aborting the run.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select, delete, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from typing import Awaitable, Callable, Dict, List, Sequence, TypeVar
import structlog

from emdn_matching.db.base import async_session_maker
from emdn_matching.db.models.category import Category
from emdn_matching.db.models.product import Product
from emdn_matching.db.models.reference_price import ReferencePrice
from emdn_matching.db.models.product_price_match import ProductPriceMatch
from emdn_matching.errors.exceptions import PersistenceError
from emdn_matching.models.matching import PriceMatch
from emdn_matching.models.records import (
    CategoryRecord,
    ProductRecord,
    RecordId,
    ReferencePriceRecord,
)
from emdn_matching.services.matching.leaf_mapping import LeafUpdate
from emdn_matching.services.reporting.persistence import PersistenceSummary
from emdn_matching.services.reporting.recategorization import ProductChange

logger = structlog.get_logger(__name__)

T = TypeVar("T")

BatchWriter = Callable[[AsyncSession, Sequence[T]], Awaitable[None]]


# ========== Snapshot loaders ==========

async def load_categories(session: AsyncSession) -> List[CategoryRecord]:
    """Load the full category table ordered by code."""
    result = await session.execute(select(Category).order_by(Category.code))
    records = [
        CategoryRecord(
            id=row.id,
            code=row.code,
            name=row.name,
            parent_id=row.parent_id,
            depth=row.depth,
            path=tuple(row.path or ()),
        )
        for row in result.scalars().all()
    ]
    logger.info("categories_loaded", count=len(records))
    return records


async def load_products(session: AsyncSession) -> List[ProductRecord]:
    """Load every product ordered by name, then id."""
    result = await session.execute(select(Product).order_by(Product.name, Product.id))
    records = [
        ProductRecord(
            id=row.id,
            name=row.name,
            description=row.description,
            sku=row.sku,
            vendor_name=row.vendor_name,
            manufacturer_name=row.manufacturer_name,
            category_id=row.emdn_category_id,
        )
        for row in result.scalars().all()
    ]
    logger.info("products_loaded", count=len(records))
    return records


async def load_reference_prices(session: AsyncSession) -> List[ReferencePriceRecord]:
    """Load every reference price ordered by id."""
    result = await session.execute(select(ReferencePrice).order_by(ReferencePrice.id))
    records = [
        ReferencePriceRecord(
            id=row.id,
            category_id=row.emdn_category_id,
            leaf_category_id=row.emdn_leaf_category_id,
            manufacturer_code=row.manufacturer_name,
            component_description=row.component_description,
            xc_subcode=row.xc_subcode,
            price=row.price_eur,
        )
        for row in result.scalars().all()
    ]
    logger.info("reference_prices_loaded", count=len(records))
    return records


# ========== Batch writing ==========

async def _write_batch(
    session_factory,
    write: BatchWriter,
    batch: Sequence[T],
    row_ids: List[RecordId],
) -> None:
    """Run one write in its own transaction.

    Raises:
        PersistenceError: If the database rejects the write
    """
    try:
        async with session_factory() as session:
            async with session.begin():
                await write(session, batch)
    except SQLAlchemyError as e:
        raise PersistenceError(f"{type(e).__name__}: {e}", row_ids=row_ids) from e


async def write_in_batches(
    items: Sequence[T],
    write: BatchWriter,
    row_id: Callable[[T], RecordId],
    operation: str,
    batch_size: int = 100,
    session_factory=async_session_maker,
) -> PersistenceSummary:
    """Write ``items`` in batches, retrying failed batches one row at a time.

    Args:
        items: Rows to write, in order
        write: Coroutine writing a batch with the given session
        row_id: Identifier reported for a failed row
        operation: Name used in logs and in the summary
        batch_size: Rows per batch
        session_factory: Async session factory

    Returns:
        PersistenceSummary with written count and failed row ids
    """
    summary = PersistenceSummary(operation=operation)
    log = logger.bind(operation=operation)

    for start in range(0, len(items), batch_size):
        batch = list(items[start:start + batch_size])
        try:
            await _write_batch(session_factory, write, batch, [row_id(i) for i in batch])
            summary.written += len(batch)
            continue
        except PersistenceError as e:
            log.warning(
                "batch_write_failed",
                batch_start=start,
                batch_size=len(batch),
                error=e.message,
            )
            summary.errors.append(f"batch at {start}: {e.message}")

        for item in batch:
            try:
                await _write_batch(session_factory, write, [item], [row_id(item)])
                summary.written += 1
            except PersistenceError as e:
                log.error("row_write_failed", row_id=str(row_id(item)), error=e.message)
                summary.failed_ids.append(row_id(item))
                summary.errors.append(f"row {row_id(item)}: {e.message}")

    log.info(
        "batch_write_completed",
        written=summary.written,
        failed=len(summary.failed_ids),
    )
    return summary


def _group_by(items: Sequence[T], key: Callable[[T], RecordId]) -> Dict[RecordId, List[T]]:
    """Group preserving first-seen key order."""
    groups: Dict[RecordId, List[T]] = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)
    return groups


# ========== Write operations ==========

async def apply_category_changes(
    changes: Sequence[ProductChange],
    batch_size: int = 100,
    session_factory=async_session_maker,
) -> PersistenceSummary:
    """Set the new category on every changed product.

    Changes are grouped by target category so each batch is a single
    ``UPDATE ... WHERE id IN (...)``.
    """
    summary = PersistenceSummary(operation="apply_category_changes")

    for category_id, group in _group_by(changes, lambda c: c.new_category_id).items():
        async def write(session: AsyncSession, batch: Sequence[ProductChange], category_id=category_id) -> None:
            await session.execute(
                update(Product)
                .where(Product.id.in_([c.product_id for c in batch]))
                .values(emdn_category_id=category_id)
            )

        summary.merge(
            await write_in_batches(
                group,
                write,
                row_id=lambda c: c.product_id,
                operation="apply_category_changes",
                batch_size=batch_size,
                session_factory=session_factory,
            )
        )

    logger.info(
        "category_changes_applied",
        written=summary.written,
        failed=len(summary.failed_ids),
    )
    return summary


async def replace_matches(
    matches: Sequence[PriceMatch],
    method: str,
    batch_size: int = 100,
    session_factory=async_session_maker,
) -> PersistenceSummary:
    """Replace every match carrying ``method`` with ``matches``.

    Existing rows for the method are deleted first. If the delete fails
    nothing is inserted, so the previous run's matches stay intact.
    """
    summary = PersistenceSummary(operation="replace_matches")

    try:
        async with session_factory() as session:
            async with session.begin():
                await session.execute(
                    delete(ProductPriceMatch).where(ProductPriceMatch.match_method == method)
                )
    except SQLAlchemyError as e:
        logger.error("match_delete_failed", method=method, error=str(e))
        summary.errors.append(f"delete of '{method}' matches failed: {type(e).__name__}: {e}")
        summary.aborted = True
        return summary

    logger.info("matches_cleared", method=method)

    async def write(session: AsyncSession, batch: Sequence[PriceMatch]) -> None:
        stmt = pg_insert(ProductPriceMatch).values([m.to_dict() for m in batch])
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                ProductPriceMatch.product_id,
                ProductPriceMatch.reference_price_id,
                ProductPriceMatch.match_method,
            ],
            set_={
                "match_score": stmt.excluded.match_score,
                "match_reason": stmt.excluded.match_reason,
            },
        )
        await session.execute(stmt)

    return summary.merge(
        await write_in_batches(
            matches,
            write,
            row_id=lambda m: f"{m.product_id}:{m.reference_price_id}",
            operation="replace_matches",
            batch_size=batch_size,
            session_factory=session_factory,
        )
    )


async def apply_leaf_categories(
    updates: Sequence[LeafUpdate],
    batch_size: int = 100,
    session_factory=async_session_maker,
) -> PersistenceSummary:
    """Set ``emdn_leaf_category_id`` on reference prices."""
    summary = PersistenceSummary(operation="apply_leaf_categories")

    for leaf_id, group in _group_by(updates, lambda u: u.leaf_category_id).items():
        async def write(session: AsyncSession, batch: Sequence[LeafUpdate], leaf_id=leaf_id) -> None:
            await session.execute(
                update(ReferencePrice)
                .where(ReferencePrice.id.in_([u.price_id for u in batch]))
                .values(emdn_leaf_category_id=leaf_id)
            )

        summary.merge(
            await write_in_batches(
                group,
                write,
                row_id=lambda u: u.price_id,
                operation="apply_leaf_categories",
                batch_size=batch_size,
                session_factory=session_factory,
            )
        )

    return summary
