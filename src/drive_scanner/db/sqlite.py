import asyncio
import logging
import os
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import aiosqlite

logger = logging.getLogger(__name__)


class Database:
    """Asynchronous SQLite database wrapper."""

    def __init__(self, db_path: Union[str, Path]):
        """Initialize the database."""
        self._db_path = Path(db_path)
        self._conn: Optional[aiosqlite.Connection] = None
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._db_path

    async def initialize(self) -> None:
        """Initialize the database connection and schema."""
        async with self._lock:
            if self._initialized:
                return

            if str(self._db_path) != ":memory:":
                os.makedirs(self._db_path.parent, exist_ok=True)

            logger.info(f"Initializing database at {self._db_path}")

            self._conn = await aiosqlite.connect(self._db_path)
            self._conn.row_factory = sqlite3.Row

            await self._create_tables()

            self._initialized = True
            logger.info("Database initialization complete")

    async def close(self) -> None:
        """Close the database connection."""
        async with self._lock:
            if self._conn:
                await self._conn.close()
                self._conn = None
                self._initialized = False
                logger.info("Database connection closed")

    async def _create_tables(self) -> None:
        """Create the database tables if they don't exist."""
        if not self._conn:
            raise RuntimeError("Database not initialized")

        await self._conn.execute("""
        CREATE TABLE IF NOT EXISTS settings (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            value_type TEXT NOT NULL,
            description TEXT,
            editable BOOLEAN NOT NULL DEFAULT 1,
            last_updated TEXT NOT NULL
        )
        """)

        await self._conn.commit()

    async def execute(self, query: str, params: Union[Tuple, Dict[str, Any], None] = None) -> aiosqlite.Cursor:
        """Execute a SQL query."""
        if not self._conn:
            raise RuntimeError("Database not initialized")

        async with self._lock:
            return await self._conn.execute(query, params or ())

    async def execute_and_fetchall(self, query: str, params: Union[Tuple, Dict[str, Any], None] = None) -> List[
        sqlite3.Row]:
        """Execute a SQL query and fetch all results."""
        if not self._conn:
            raise RuntimeError("Database not initialized")

        async with self._lock:
            cursor = await self._conn.execute(query, params or ())
            return await cursor.fetchall()

    async def execute_and_fetchone(self, query: str, params: Union[Tuple, Dict[str, Any], None] = None) -> Optional[
        sqlite3.Row]:
        """Execute a SQL query and fetch one result."""
        if not self._conn:
            raise RuntimeError("Database not initialized")

        async with self._lock:
            cursor = await self._conn.execute(query, params or ())
            return await cursor.fetchone()

    async def commit(self) -> None:
        """Commit the current transaction."""
        if not self._conn:
            raise RuntimeError("Database not initialized")

        async with self._lock:
            await self._conn.commit()

    def transaction(self) -> "Transaction":
        """Context manager committing on success and rolling back on error."""
        if not self._conn:
            raise RuntimeError("Database not initialized")

        return Transaction(self)


class Transaction:
    """Holds the database lock for the duration of a transaction."""

    def __init__(self, db: Database):
        self.db = db

    async def __aenter__(self) -> aiosqlite.Connection:
        await self.db._lock.acquire()
        return self.db._conn

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is not None:
                await self.db._conn.rollback()
            else:
                await self.db._conn.commit()
        finally:
            self.db._lock.release()
