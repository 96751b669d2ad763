"""Node store: ID allocation, traversal and deletion safety over the nodes table.

The store owns the structural invariants of the forest:

- ids are positive, unique, and allocated as ``max(id) + 1``;
- a parent must exist when its child is created;
- a node with children cannot be deleted.

Read-then-write sequences (allocate-and-insert, check-and-delete) run inside
a single ``BEGIN IMMEDIATE`` transaction, so they are serialized against
concurrent creations and deletions on the same connection and on other
connections to the same database file.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from nodetree.db.connection import (
    Database,
    DuplicateRecordError,
    ReferenceViolationError,
    StorageError,
)
from nodetree.models import MAX_NODE_ID, Node, placeholder_title
from nodetree.nodes.repository import NodeRepository, RecordNotFoundError

logger = logging.getLogger(__name__)


class NodeStore:
    """Tree storage and query engine. Construct once, share everywhere."""

    def __init__(self, db: Database, create_retries: int = 3) -> None:
        self._db = db
        self._create_retries = max(1, create_retries)

    async def get(self, node_id: int) -> Node:
        """Fetch a single node by id."""
        _require_positive(node_id, "id")
        try:
            node = await NodeRepository(self._db).get(node_id)
        except StorageError as e:
            raise StorageFailureError(str(e)) from e
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    async def create_with_placeholder(self, parent: int | None = None) -> Node:
        """Allocate the next id and insert a node titled ``node-<id>``.

        The caller is expected to follow up with ``update_title`` once it has
        computed the real title from the returned id.
        """
        return await self._create(parent, placeholder_title)

    async def create(
        self, parent: int | None, render_title: Callable[[int], str]
    ) -> Node:
        """Allocate the next id and insert a node titled ``render_title(id)``.

        Title rendering happens inside the allocation transaction, so the
        node is never visible with a placeholder title.
        """
        return await self._create(parent, render_title)

    async def update_title(self, node_id: int, title: str) -> None:
        """Replace a node's title. Idempotent."""
        _require_positive(node_id, "id")
        if not isinstance(title, str):
            raise NodeValidationError("title must be a string")
        try:
            await NodeRepository(self._db).update_title(node_id, title)
        except RecordNotFoundError as e:
            raise NodeNotFoundError(node_id) from e
        except StorageError as e:
            raise StorageFailureError(str(e)) from e

    async def list_roots(self) -> list[Node]:
        """All nodes without a parent, ordered by id."""
        try:
            return await NodeRepository(self._db).find_by_parent(None)
        except StorageError as e:
            raise StorageFailureError(str(e)) from e

    async def list_descendants(self, parent_id: int, depth: int = 1) -> list[Node]:
        """Nodes reachable from ``parent_id`` by at most ``depth`` parent->child edges.

        ``depth`` below 1 is treated as 1. Expansion is breadth-first over an
        explicit frontier, one batched child query per level, so deep trees
        never grow the call stack. Results come out level by level with ids
        ascending inside each level.
        """
        _require_positive(parent_id, "parentId")
        if isinstance(depth, bool) or not isinstance(depth, int):
            raise NodeValidationError("depth must be an integer")
        depth = max(1, depth)

        descendants: list[Node] = []
        try:
            async with self._db.transaction(immediate=False) as tx:
                repo = NodeRepository(tx)
                if not await repo.exists(parent_id):
                    raise NodeNotFoundError(parent_id)

                frontier = [parent_id]
                level = 0
                while frontier and level < depth:
                    children = await repo.find_by_parents(frontier)
                    descendants.extend(children)
                    frontier = [child.id for child in children]
                    level += 1
        except StorageError as e:
            raise StorageFailureError(str(e)) from e

        logger.debug(
            "Collected %d descendant(s) of node %d in %d level(s)",
            len(descendants), parent_id, level,
        )
        return descendants

    async def delete(self, node_id: int) -> None:
        """Delete a childless node. No cascade of any kind."""
        _require_positive(node_id, "id")
        try:
            async with self._db.transaction() as tx:
                repo = NodeRepository(tx)
                if not await repo.exists(node_id):
                    raise NodeNotFoundError(node_id)
                if await repo.has_children(node_id):
                    raise NodeConflictError(
                        node_id, f"Cannot delete node {node_id}: it has child nodes"
                    )
                await repo.delete(node_id)
        except RecordNotFoundError as e:
            raise NodeNotFoundError(node_id) from e
        except ReferenceViolationError as e:
            raise NodeConflictError(
                node_id, f"Cannot delete node {node_id}: it has child nodes"
            ) from e
        except StorageError as e:
            raise StorageFailureError(str(e)) from e
        logger.info("Deleted node %d", node_id)

    async def _create(
        self, parent: int | None, render_title: Callable[[int], str]
    ) -> Node:
        if parent is not None:
            _require_positive(parent, "parent")

        for attempt in range(1, self._create_retries + 1):
            try:
                async with self._db.transaction() as tx:
                    repo = NodeRepository(tx)
                    if parent is not None and not await repo.exists(parent):
                        raise NodeNotFoundError(
                            parent, f"Parent node not found: {parent}"
                        )
                    node_id = (await repo.max_id() or 0) + 1
                    node = Node(
                        id=node_id,
                        parent=parent,
                        title=render_title(node_id),
                        created_at=datetime.now(UTC),
                    )
                    await repo.insert(node)
            except DuplicateRecordError:
                logger.warning(
                    "Node id collision on create (attempt %d/%d), retrying",
                    attempt, self._create_retries,
                )
                continue
            except ReferenceViolationError as e:
                raise NodeNotFoundError(parent, f"Parent node not found: {parent}") from e
            except StorageError as e:
                raise StorageFailureError(str(e)) from e

            logger.info("Created node %d (parent=%s)", node.id, parent)
            return node

        raise NodeConflictError(
            None,
            f"Could not allocate a unique node id after {self._create_retries} attempt(s)",
        )


def _require_positive(value: object, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise NodeValidationError(f"{name} must be a positive integer")
    if value > MAX_NODE_ID:
        raise NodeValidationError(f"{name} must not exceed {MAX_NODE_ID}")


class NodeStoreError(Exception):
    """Base for every error the store reports. ``kind`` names the category."""

    kind = "error"


class NodeNotFoundError(NodeStoreError):
    kind = "not_found"

    def __init__(self, node_id: int | None, message: str | None = None) -> None:
        self.node_id = node_id
        super().__init__(message or f"Node not found: {node_id}")


class NodeConflictError(NodeStoreError):
    kind = "conflict"

    def __init__(self, node_id: int | None, message: str) -> None:
        self.node_id = node_id
        super().__init__(message)


class NodeValidationError(NodeStoreError):
    kind = "validation"


class StorageFailureError(NodeStoreError):
    kind = "storage_failure"
