"""
Async database access (raw SQL) using asyncpg.

`Database` owns the connection pool. The app builds one instance at startup,
keeps it on `app.state.db` and closes it on shutdown (see `api/main.py`).
Request handlers receive it through the `get_db` dependency.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Any

import asyncpg
from fastapi import Request

from .config import Settings
from .errors import DatabaseConnectionError, QueryError

logger = logging.getLogger(__name__)

# Driver-level failures that a single statement can hit.
_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)

PEOPLE_TABLE_DDL = """
CREATE TABLE IF NOT EXISTS people (
    id INTEGER GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
    name VARCHAR(100) NOT NULL,
    email VARCHAR(100) NULL,
    created_at TIMESTAMPTZ DEFAULT now()
)
"""


class StoreState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    SHUTTING_DOWN = "shutting_down"
    CLOSED = "closed"


def affected_rows(status: str | None) -> int:
    """
    Row count from a command status tag, e.g. "DELETE 1" or "INSERT 0 1".
    """
    last = (status or "").rsplit(" ", 1)[-1]
    return int(last) if last.isdigit() else 0


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class Database:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.state = StoreState.UNINITIALIZED
        self._pool: asyncpg.Pool | None = None

    @property
    def is_ready(self) -> bool:
        return self.state is StoreState.READY

    async def initialize(self) -> None:
        """
        Connect and make sure the `people` table exists.

        Any failure releases what was opened and raises `DatabaseConnectionError`.
        """
        if self.is_ready:
            return None
        await self.connect()
        try:
            await self.ensure_schema()
        except DatabaseConnectionError:
            await self.close()
            raise

    async def connect(self) -> None:
        if self._pool is not None:
            return None
        settings = self.settings
        try:
            self._pool = await asyncpg.create_pool(
                **settings.connect_kwargs(),
                min_size=settings.pool_min_size,
                max_size=settings.pool_max_size,
                timeout=settings.connect_timeout,
                command_timeout=settings.command_timeout,
            )
        except _DRIVER_ERRORS as exc:
            raise DatabaseConnectionError(
                f"Could not connect to database {settings.describe_target()}: {exc}"
            ) from exc
        self.state = StoreState.READY
        logger.info("db_connected target=%s", settings.describe_target())

    async def ensure_schema(self) -> None:
        try:
            await self._require_pool().execute(PEOPLE_TABLE_DDL)
        except _DRIVER_ERRORS as exc:
            raise DatabaseConnectionError(f"Could not prepare the people table: {exc}") from exc
        logger.info("people_table_ready")

    async def close(self) -> None:
        if self.state is StoreState.CLOSED:
            return None
        self.state = StoreState.SHUTTING_DOWN
        pool, self._pool = self._pool, None
        try:
            if pool is not None:
                await pool.close()
        finally:
            self.state = StoreState.CLOSED
            logger.info("db_closed")

    def _require_pool(self) -> asyncpg.Pool:
        if self._pool is None or not self.is_ready:
            raise QueryError("Database is not ready.")
        return self._pool

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        pool = self._require_pool()
        try:
            row = await pool.fetchrow(sql, *args)
        except _DRIVER_ERRORS as exc:
            raise QueryError(str(exc) or exc.__class__.__name__) from exc
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        pool = self._require_pool()
        try:
            rows = await pool.fetch(sql, *args)
        except _DRIVER_ERRORS as exc:
            raise QueryError(str(exc) or exc.__class__.__name__) from exc
        return [_record_to_dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any) -> int:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL) and return the affected row count.
        """
        pool = self._require_pool()
        try:
            status = await pool.execute(sql, *args)
        except _DRIVER_ERRORS as exc:
            raise QueryError(str(exc) or exc.__class__.__name__) from exc
        return affected_rows(status)

    async def ping(self) -> bool:
        row = await self.fetch_one("SELECT 1 AS ok")
        return row is not None


def get_db(request: Request) -> Database:
    """
    FastAPI dependency: the store handle created by the app lifespan.
    """
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise QueryError("Database is not initialized.")
    return db
