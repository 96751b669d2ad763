"""Shared test helpers for building forests."""

from datetime import UTC, datetime

from nodetree.models import Node
from nodetree.nodes.store import NodeStore


def make_node(
    node_id: int,
    parent: int | None = None,
    title: str | None = None,
    created_at: datetime | None = None,
) -> Node:
    """Build a Node value without touching storage."""
    return Node(
        id=node_id,
        parent=parent,
        title=title or f"node-{node_id}",
        created_at=created_at or datetime(2024, 1, 15, 12, 30, 45, tzinfo=UTC),
    )


async def create_forest(store: NodeStore, parents: list[int | None]) -> list[Node]:
    """Create one node per entry, in order, with the given parent ids."""
    return [await store.create_with_placeholder(parent) for parent in parents]


async def create_chain(store: NodeStore, length: int) -> list[Node]:
    """Create root -> n2 -> n3 ... of the given length. Returns nodes top-down."""
    nodes = [await store.create_with_placeholder(None)]
    for _ in range(length - 1):
        nodes.append(await store.create_with_placeholder(nodes[-1].id))
    return nodes


def ids(nodes) -> list[int]:
    """Ids of nodes or node views, in the order given."""
    return [n.id for n in nodes]
