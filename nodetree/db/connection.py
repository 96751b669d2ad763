"""Async SQLite connection wrapper with WAL mode, schema init, and transactions."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager

import aiosqlite

from nodetree.db.schema import SCHEMA_SQL

logger = logging.getLogger(__name__)


class Database:
    """Thin async wrapper around aiosqlite with WAL mode and auto-schema.

    The connection runs in autocommit mode. Statements issued through
    ``execute``/``fetchone``/``fetchall`` each run on their own; multi-step
    sequences go through ``transaction()``. A single asyncio lock guards the
    connection so statements from concurrent tasks never land inside another
    task's open transaction.
    """

    def __init__(self, connection: aiosqlite.Connection) -> None:
        self._conn = connection
        self._lock = asyncio.Lock()

    @classmethod
    async def connect(cls, path: str = "nodetree.db") -> Database:
        """Create a connection with WAL mode, foreign keys, and schema init."""
        conn = await aiosqlite.connect(path, isolation_level=None)
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")
        await conn.execute("PRAGMA busy_timeout=5000")
        db = cls(conn)
        await db._ensure_schema()
        logger.debug("Connected to %s", path)
        return db

    async def _ensure_schema(self) -> None:
        """Create tables if they don't exist. Idempotent."""
        async with self._lock:
            await self._conn.executescript(SCHEMA_SQL)

    async def execute(self, sql: str, params: tuple | None = None) -> aiosqlite.Cursor:
        """Execute a single SQL statement."""
        async with self._lock:
            return await self._conn.execute(sql, params or ())

    async def fetchone(self, sql: str, params: tuple | None = None) -> aiosqlite.Row | None:
        """Execute and return a single row."""
        async with self._lock:
            cursor = await self._conn.execute(sql, params or ())
            return await cursor.fetchone()

    async def fetchall(self, sql: str, params: tuple | None = None) -> list[aiosqlite.Row]:
        """Execute and return all rows."""
        async with self._lock:
            cursor = await self._conn.execute(sql, params or ())
            return list(await cursor.fetchall())

    @asynccontextmanager
    async def transaction(self, immediate: bool = True) -> AsyncIterator[Transaction]:
        """Run a block of statements as one transaction.

        ``immediate=True`` takes SQLite's write lock up front (BEGIN IMMEDIATE),
        which serializes read-then-write sequences against other connections
        to the same file. Read-only blocks use a deferred transaction so they
        see one consistent snapshot.

        Commits on normal exit, rolls back if the block raises. Failures to
        begin or commit surface as StorageError.
        """
        async with self._lock:
            with translate_errors("begin"):
                await self._conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
            try:
                yield Transaction(self._conn)
                with translate_errors("commit"):
                    await self._conn.execute("COMMIT")
            except BaseException:
                if self._conn.in_transaction:
                    await self._conn.execute("ROLLBACK")
                raise

    async def close(self) -> None:
        """Close the database connection."""
        await self._conn.close()


class Transaction:
    """Statement executor bound to an open transaction on a Database.

    Only valid inside the ``Database.transaction()`` block that produced it.
    """

    def __init__(self, connection: aiosqlite.Connection) -> None:
        self._conn = connection

    async def execute(self, sql: str, params: tuple | None = None) -> aiosqlite.Cursor:
        return await self._conn.execute(sql, params or ())

    async def fetchone(self, sql: str, params: tuple | None = None) -> aiosqlite.Row | None:
        cursor = await self._conn.execute(sql, params or ())
        return await cursor.fetchone()

    async def fetchall(self, sql: str, params: tuple | None = None) -> list[aiosqlite.Row]:
        cursor = await self._conn.execute(sql, params or ())
        return list(await cursor.fetchall())


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Map sqlite exceptions raised inside the block to storage errors.

    Integrity failures are split by cause so callers can tell a key
    collision from a broken parent reference.
    """
    try:
        yield
    except aiosqlite.IntegrityError as e:
        message = str(e)
        if "FOREIGN KEY" in message:
            raise ReferenceViolationError(operation, message) from e
        if "UNIQUE" in message or "PRIMARY KEY" in message:
            raise DuplicateRecordError(operation, message) from e
        raise StorageError(operation, message) from e
    except aiosqlite.Error as e:
        raise StorageError(operation, str(e)) from e
    except ValueError as e:
        # aiosqlite raises ValueError once the connection has been closed
        raise StorageError(operation, str(e)) from e
    except OverflowError as e:
        # parameter outside the 64-bit INTEGER range
        raise StorageError(operation, str(e)) from e


class StorageError(Exception):
    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")


class DuplicateRecordError(StorageError):
    """An insert collided with an existing key."""


class ReferenceViolationError(StorageError):
    """A write would leave a parent reference pointing at no node."""
