"""Canonical data structures for Nodetree.

Defined once here, referenced everywhere else.
"""

from datetime import datetime

from pydantic import BaseModel, Field

# Largest value a SQLite INTEGER column can hold.
MAX_NODE_ID = 2**63 - 1


class Node(BaseModel):
    """A node in the forest. ``parent`` is None for roots."""

    id: int = Field(gt=0, le=MAX_NODE_ID)
    parent: int | None = Field(default=None, gt=0, le=MAX_NODE_ID)
    title: str
    created_at: datetime


def placeholder_title(node_id: int) -> str:
    """Title stored between insert and the caller's title fix-up."""
    return f"node-{node_id}"
