"""
Reset the nodes table and load a small demo forest.

Three roots (1, 5, 10), each with a couple of levels below them, titled with
the English word form of their id. Ids are written explicitly, so the forest
has the same shape on every run.

Usage:
    python scripts/seed.py            # database from NODETREE_DB_PATH / .env
    python scripts/seed.py demo.db    # explicit path
"""

import asyncio
import sys
from datetime import UTC, datetime

from nodetree.config import load_settings
from nodetree.db.connection import Database
from nodetree.models import Node
from nodetree.nodes.repository import NodeRepository
from nodetree.utils.titles import render_title

# (id, parent) in insertion order; parents always come first.
DEMO_FOREST: list[tuple[int, int | None]] = [
    (1, None),
    (5, None),
    (10, None),
    (2, 1),
    (3, 1),
    (4, 2),
    (6, 2),
    (7, 5),
    (8, 5),
    (9, 7),
    (11, 10),
    (12, 10),
]


async def seed(db: Database) -> int:
    """Replace every node with the demo forest. Returns the number inserted."""
    now = datetime.now(UTC)
    async with db.transaction() as tx:
        await tx.execute("DELETE FROM nodes")
        repo = NodeRepository(tx)
        for node_id, parent in DEMO_FOREST:
            await repo.insert(
                Node(id=node_id, parent=parent, title=render_title(node_id, "en"), created_at=now)
            )
    return len(DEMO_FOREST)


async def main(db_path: str) -> None:
    db = await Database.connect(db_path)
    try:
        count = await seed(db)
    finally:
        await db.close()
    print(f"Seeded {count} node(s) into {db_path}")


if __name__ == "__main__":
    path = sys.argv[1] if len(sys.argv) > 1 else load_settings().db_path
    asyncio.run(main(path))
