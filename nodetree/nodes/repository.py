"""SQLite persistence adapter for node records.

Every method runs against whatever executor it was built with: a ``Database``
for one-off statements, or a ``Transaction`` when the caller needs several
statements to act as one unit. SQLite errors are translated into the
storage error types so the store can tell a missing record, a key
collision, a broken parent reference, and a backend failure apart.
"""

from collections.abc import Iterable, Iterator
from datetime import datetime

import aiosqlite

from nodetree.db.connection import Database, Transaction, translate_errors
from nodetree.models import Node

# Keeps IN (...) lists well below SQLite's bound-parameter limit.
_IN_CHUNK = 500


class NodeRepository:
    """Point lookups, predicate finds and single-row writes on ``nodes``."""

    def __init__(self, executor: Database | Transaction) -> None:
        self._db = executor

    async def get(self, node_id: int) -> Node | None:
        with translate_errors("get"):
            row = await self._db.fetchone(
                "SELECT id, parent, title, created_at FROM nodes WHERE id = ?",
                (node_id,),
            )
        return _node_from_row(row) if row is not None else None

    async def exists(self, node_id: int) -> bool:
        with translate_errors("exists"):
            row = await self._db.fetchone(
                "SELECT 1 FROM nodes WHERE id = ?", (node_id,)
            )
        return row is not None

    async def has_children(self, node_id: int) -> bool:
        with translate_errors("has_children"):
            row = await self._db.fetchone(
                "SELECT 1 FROM nodes WHERE parent = ? LIMIT 1", (node_id,)
            )
        return row is not None

    async def max_id(self) -> int | None:
        """Highest id in the table, or None when it is empty."""
        with translate_errors("max_id"):
            row = await self._db.fetchone("SELECT MAX(id) AS max_id FROM nodes")
        return row["max_id"] if row is not None else None

    async def insert(self, node: Node) -> None:
        """Insert a new record. Never replaces an existing one."""
        with translate_errors("insert"):
            await self._db.execute(
                "INSERT INTO nodes (id, parent, title, created_at) VALUES (?, ?, ?, ?)",
                (node.id, node.parent, node.title, node.created_at.isoformat()),
            )

    async def update_title(self, node_id: int, title: str) -> None:
        with translate_errors("update_title"):
            cursor = await self._db.execute(
                "UPDATE nodes SET title = ? WHERE id = ?", (title, node_id)
            )
        if cursor.rowcount == 0:
            raise RecordNotFoundError(node_id)

    async def delete(self, node_id: int) -> None:
        with translate_errors("delete"):
            cursor = await self._db.execute(
                "DELETE FROM nodes WHERE id = ?", (node_id,)
            )
        if cursor.rowcount == 0:
            raise RecordNotFoundError(node_id)

    async def find_by_parent(self, parent_id: int | None) -> list[Node]:
        """Direct children of ``parent_id``; roots when it is None."""
        with translate_errors("find_by_parent"):
            if parent_id is None:
                rows = await self._db.fetchall(
                    "SELECT id, parent, title, created_at FROM nodes "
                    "WHERE parent IS NULL ORDER BY id"
                )
            else:
                rows = await self._db.fetchall(
                    "SELECT id, parent, title, created_at FROM nodes "
                    "WHERE parent = ? ORDER BY id",
                    (parent_id,),
                )
        return [_node_from_row(row) for row in rows]

    async def find_by_parents(self, parent_ids: Iterable[int]) -> list[Node]:
        """Direct children of every id in ``parent_ids``, ordered by id."""
        ids = sorted(set(parent_ids))
        nodes: list[Node] = []
        for chunk in _chunks(ids, _IN_CHUNK):
            placeholders = ", ".join("?" for _ in chunk)
            with translate_errors("find_by_parents"):
                rows = await self._db.fetchall(
                    "SELECT id, parent, title, created_at FROM nodes "
                    f"WHERE parent IN ({placeholders}) ORDER BY id",
                    tuple(chunk),
                )
            nodes.extend(_node_from_row(row) for row in rows)
        nodes.sort(key=lambda n: n.id)
        return nodes


def _node_from_row(row: aiosqlite.Row) -> Node:
    return Node(
        id=row["id"],
        parent=row["parent"],
        title=row["title"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def _chunks(items: list[int], size: int) -> Iterator[list[int]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


class RecordNotFoundError(Exception):
    def __init__(self, node_id: int) -> None:
        self.node_id = node_id
        super().__init__(f"No record with id {node_id}")
