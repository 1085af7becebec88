"""Category tree index built from the flat category table.

The index is built once per run and never mutated afterwards, so it can be
shared by worker threads without locking. Rebuilding it is the only way to
observe changes to the category table.

Example:
    tree = CategoryTree.from_records(records)
    tree.ancestors(leaf_id)   # (leaf_id, parent_id, ..., root_id)
    tree.depth(leaf_id)       # 5
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

import structlog

from emdn_matching.errors.exceptions import CycleError
from emdn_matching.models.records import CategoryRecord, RecordId

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CategoryNode:
    """Immutable tree node."""
    id: RecordId
    code: str
    name: str
    parent_id: Optional[RecordId]
    depth: int
    path: Tuple[str, ...]


class CategoryTree:
    """Id-indexed view of the category forest.

    Attributes:
        nodes: Read-only mapping of category id to node
    """

    def __init__(self, nodes: Mapping[RecordId, CategoryNode]):
        self._nodes: Mapping[RecordId, CategoryNode] = MappingProxyType(dict(nodes))
        self._log = logger.bind(component="CategoryTree")

        by_code: Dict[str, CategoryNode] = {}
        for node in self._nodes.values():
            if node.code in by_code:
                self._log.warning(
                    "duplicate_category_code",
                    code=node.code,
                    kept_id=str(by_code[node.code].id),
                    ignored_id=str(node.id),
                )
                continue
            by_code[node.code] = node
        self._by_code: Mapping[str, CategoryNode] = MappingProxyType(by_code)

        # Walk every chain up front so a corrupt table fails before any
        # product is processed.
        self._ancestors: Mapping[RecordId, Tuple[RecordId, ...]] = MappingProxyType(
            {node_id: self._walk(node_id) for node_id in self._nodes}
        )
        self._check_code_prefixes()

    @classmethod
    def from_records(cls, records: Iterable[CategoryRecord]) -> "CategoryTree":
        """Build the index from category table rows.

        Rows without a depth get one computed from the parent chain (or from
        their path when it is present).

        Raises:
            CycleError: If a parent chain loops
        """
        records = list(records)
        parents = {r.id: r.parent_id for r in records}
        nodes: Dict[RecordId, CategoryNode] = {}

        for record in records:
            depth = record.depth
            if depth is None:
                depth = len(record.path) - 1 if record.path else _chain_depth(record.id, parents)
            nodes[record.id] = CategoryNode(
                id=record.id,
                code=record.code,
                name=record.name,
                parent_id=record.parent_id,
                depth=depth,
                path=tuple(record.path) or (record.code,),
            )

        tree = cls(nodes)
        tree._log.info("category_tree_built", categories=len(nodes))
        return tree

    def _walk(self, category_id: RecordId) -> Tuple[RecordId, ...]:
        node = self._nodes[category_id]
        chain: List[RecordId] = [category_id]
        current = node

        while current.parent_id is not None:
            if len(chain) > node.depth:
                raise CycleError(
                    f"Ancestor chain of category {node.code} did not reach a root "
                    f"within {node.depth + 1} steps",
                    category_id=category_id,
                    chain=chain,
                )
            parent = self._nodes.get(current.parent_id)
            if parent is None:
                self._log.warning(
                    "category_parent_missing",
                    code=current.code,
                    parent_id=str(current.parent_id),
                )
                break
            chain.append(parent.id)
            current = parent

        return tuple(chain)

    def _check_code_prefixes(self) -> None:
        for node in self._nodes.values():
            parent = self._nodes.get(node.parent_id) if node.parent_id is not None else None
            if parent is not None and not (
                node.code.startswith(parent.code) and len(node.code) > len(parent.code)
            ):
                self._log.warning(
                    "category_code_prefix_mismatch",
                    code=node.code,
                    parent_code=parent.code,
                )

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[CategoryNode]:
        return iter(self._nodes.values())

    def get(self, category_id: RecordId) -> Optional[CategoryNode]:
        return self._nodes.get(category_id)

    def by_code(self, code: str) -> Optional[CategoryNode]:
        return self._by_code.get(code)

    def has_code(self, code: str) -> bool:
        return code in self._by_code

    def ancestors(self, category_id: RecordId) -> Tuple[RecordId, ...]:
        """Ids from ``category_id`` up to its root, inclusive.

        Raises:
            KeyError: If the category is not in the index
        """
        return self._ancestors[category_id]

    def depth(self, category_id: RecordId) -> int:
        return self._nodes[category_id].depth

    def code(self, category_id: RecordId) -> str:
        return self._nodes[category_id].code

    def name(self, category_id: RecordId) -> str:
        return self._nodes[category_id].name


def _chain_depth(category_id: RecordId, parents: Mapping[RecordId, Optional[RecordId]]) -> int:
    """Count ancestors by following parent links, bounded by the table size."""
    chain = [category_id]
    current = parents.get(category_id)
    while current is not None and current in parents:
        if current in chain:
            raise CycleError(
                f"Category {category_id} is part of a parent cycle",
                category_id=category_id,
                chain=chain,
            )
        chain.append(current)
        current = parents[current]
    return len(chain) - 1
