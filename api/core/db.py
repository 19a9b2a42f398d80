"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...

Constraint violations are re-raised as the typed signals below so the engines
never need to know about driver exception classes.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Protocol
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None

# Largest value asyncpg will encode for an `integer` (int4) parameter.
INT4_MAX = 2_147_483_647


class QueryError(RuntimeError):
    pass


class DuplicateKeyError(QueryError):
    """A unique constraint rejected the statement."""


class RowReferencedError(QueryError):
    """A delete/update hit a row that a dependent table still references."""


class MissingReferenceError(QueryError):
    """An insert/update pointed a foreign key at a row that does not exist."""


class QueryExecutor(Protocol):
    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None: ...

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]: ...

    async def execute(self, sql: str, *args: Any) -> int: ...


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}.") from exc


def pool_min_size() -> int:
    return _int_env("DB_POOL_MIN_SIZE", 1)


def pool_max_size() -> int:
    return _int_env("DB_POOL_MAX_SIZE", 5)


def command_timeout() -> int:
    return _int_env("DB_COMMAND_TIMEOUT", 30)


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=pool_min_size(),
        max_size=pool_max_size(),
        command_timeout=command_timeout(),
    )
    logger.info("db_pool_ready min_size=%s max_size=%s", pool_min_size(), pool_max_size())


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


def affected_rows(status: str) -> int:
    """
    Parse the row count out of a command status tag ("DELETE 1", "INSERT 0 3").
    """
    tail = (status or "").rsplit(" ", 1)[-1]
    return int(tail) if tail.isdigit() else 0


def translate_integrity_error(exc: asyncpg.PostgresError, sql: str = "") -> QueryError | None:
    """
    Map a constraint violation to a typed signal, or None for any other error.

    A foreign-key violation raised by a DELETE means a dependent row still
    points here; raised by anything else it means the statement points at a
    row that does not exist. The server message is localized, so it is not
    consulted.
    """
    if isinstance(exc, asyncpg.exceptions.UniqueViolationError):
        return DuplicateKeyError(str(exc))
    if isinstance(exc, asyncpg.exceptions.ForeignKeyViolationError):
        if statement_kind(sql) == "DELETE":
            return RowReferencedError(str(exc))
        return MissingReferenceError(str(exc))
    return None


def statement_kind(sql: str) -> str:
    words = sql.split(None, 1)
    return words[0].upper() if words else ""


class PoolExecutor:
    """
    QueryExecutor backed by the process-wide asyncpg pool.
    """

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        try:
            row = await pool().fetchrow(sql, *args)
        except asyncpg.PostgresError as exc:
            signal = translate_integrity_error(exc, sql)
            if signal is None:
                raise
            raise signal from exc
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        try:
            rows = await pool().fetch(sql, *args)
        except asyncpg.PostgresError as exc:
            signal = translate_integrity_error(exc, sql)
            if signal is None:
                raise
            raise signal from exc
        return [_record_to_dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any) -> int:
        """
        Run a statement (INSERT/UPDATE/DELETE). Returns the affected row count.
        """
        try:
            status = await pool().execute(sql, *args)
        except asyncpg.PostgresError as exc:
            signal = translate_integrity_error(exc, sql)
            if signal is None:
                raise
            raise signal from exc
        return affected_rows(status)
