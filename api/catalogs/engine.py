"""
Generic CRUD over the catalog tables (raw SQL).

Every catalog kind shares this one code path; the differences between kinds
are purely columnar and live in `registry.TableConfig`. Table and column names
are interpolated from the registry only (quoted); every value is bound.
"""

from __future__ import annotations

import logging
from typing import Any

from core.db import DuplicateKeyError, QueryExecutor, RowReferencedError
from core.errors import BadRequestError, ConflictError, NotFoundError
from core.sql import Placeholders, like_contains, quote_ident

from .registry import CatalogKind, TableConfig, TableConfigRegistry

logger = logging.getLogger(__name__)


def _search_clause(config: TableConfig, search: str | None, params: Placeholders) -> str:
    if not search:
        return ""
    ph = params.bind(like_contains(search.lower()))
    return f" WHERE lower({quote_ident(config.name_column)}) LIKE {ph} ESCAPE '\\'"


class CatalogEngine:
    def __init__(self, registry: TableConfigRegistry, executor: QueryExecutor):
        self.registry = registry
        self.executor = executor

    async def list_all(
        self,
        kind: CatalogKind | str,
        *,
        search: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Rows of `kind` ordered by name ascending.

        Without `limit` the whole table comes back. `offset` only applies
        together with `limit`.
        """
        config = self.registry.resolve(kind)
        params = Placeholders()

        sql = f"SELECT * FROM {quote_ident(config.table)}"
        sql += _search_clause(config, search, params)
        sql += f" ORDER BY {quote_ident(config.name_column)} ASC"

        if limit is not None:
            if limit < 0 or (offset is not None and offset < 0):
                raise BadRequestError("limit and offset must be non-negative.")
            sql += f" LIMIT {params.bind(int(limit))} OFFSET {params.bind(int(offset or 0))}"

        return await self.executor.fetch_all(sql, *params.args)

    async def count(self, kind: CatalogKind | str, search: str | None = None) -> int:
        config = self.registry.resolve(kind)
        params = Placeholders()

        sql = f"SELECT COUNT(*) AS total FROM {quote_ident(config.table)}"
        sql += _search_clause(config, search, params)

        row = await self.executor.fetch_one(sql, *params.args)
        return int(row["total"]) if row is not None else 0

    async def get_by_id(self, kind: CatalogKind | str, record_id: int) -> dict[str, Any]:
        config = self.registry.resolve(kind)
        row = await self.executor.fetch_one(
            f"SELECT * FROM {quote_ident(config.table)} WHERE {quote_ident(config.id_column)} = $1",
            record_id,
        )
        if row is None:
            raise NotFoundError(
                f"Record {record_id} not found in {config.kind.value}.",
                details={"kind": config.kind.value, "id": record_id},
            )
        return row

    async def create(self, kind: CatalogKind | str, data: dict[str, Any]) -> dict[str, Any]:
        config = self.registry.resolve(kind)
        params = Placeholders()

        columns = [config.name_column]
        values = [params.bind(data["name"])]

        if config.has_description and data.get("description") is not None:
            columns.append(config.description_column)
            values.append(params.bind(data["description"]))

        # Omitted extra columns fall back to the column default.
        for extra in config.extra_columns:
            if extra.name in data:
                columns.append(extra.name)
                values.append(params.bind(data[extra.name]))

        sql = (
            f"INSERT INTO {quote_ident(config.table)} ({', '.join(quote_ident(c) for c in columns)}) "
            f"VALUES ({', '.join(values)}) "
            f"RETURNING {quote_ident(config.id_column)}"
        )
        try:
            row = await self.executor.fetch_one(sql, *params.args)
        except DuplicateKeyError as exc:
            raise ConflictError(
                f'A record named "{data["name"]}" already exists in {config.kind.value}.',
                details={"kind": config.kind.value, config.name_column: data["name"]},
            ) from exc

        if row is None:
            raise RuntimeError(f"Failed to create {config.kind.value} record.")

        new_id = row[config.id_column]
        logger.info("catalog_created kind=%s id=%s", config.kind.value, new_id)
        return await self.get_by_id(config.kind, new_id)

    async def update(
        self,
        kind: CatalogKind | str,
        record_id: int,
        data: dict[str, Any],
    ) -> dict[str, Any]:
        config = self.registry.resolve(kind)
        await self.get_by_id(config.kind, record_id)

        params = Placeholders()
        assignments: list[str] = []

        if data.get("name") is not None:
            assignments.append(f"{quote_ident(config.name_column)} = {params.bind(data['name'])}")

        if config.has_description and "description" in data:
            assignments.append(
                f"{quote_ident(config.description_column)} = {params.bind(data['description'])}"
            )

        for extra in config.extra_columns:
            if extra.name in data:
                assignments.append(f"{quote_ident(extra.name)} = {params.bind(data[extra.name])}")

        if not assignments:
            raise BadRequestError(
                "No fields to update.",
                details={"kind": config.kind.value, "id": record_id},
            )

        sql = (
            f"UPDATE {quote_ident(config.table)} SET {', '.join(assignments)} "
            f"WHERE {quote_ident(config.id_column)} = {params.bind(record_id)}"
        )
        try:
            await self.executor.execute(sql, *params.args)
        except DuplicateKeyError as exc:
            raise ConflictError(
                f'A record named "{data.get("name")}" already exists in {config.kind.value}.',
                details={"kind": config.kind.value, config.name_column: data.get("name")},
            ) from exc

        logger.info("catalog_updated kind=%s id=%s", config.kind.value, record_id)
        return await self.get_by_id(config.kind, record_id)

    async def remove(self, kind: CatalogKind | str, record_id: int) -> dict[str, Any]:
        """
        Delete a row and return its pre-delete snapshot.

        Rows still referenced by dependent tables are refused, never cascaded.
        """
        config = self.registry.resolve(kind)
        snapshot = await self.get_by_id(config.kind, record_id)

        try:
            affected = await self.executor.execute(
                f"DELETE FROM {quote_ident(config.table)} WHERE {quote_ident(config.id_column)} = $1",
                record_id,
            )
        except RowReferencedError as exc:
            raise ConflictError(
                f"Cannot delete: there are records that still use this {config.label}.",
                details={"kind": config.kind.value, "id": record_id},
            ) from exc

        if affected == 0:
            # Deleted by someone else between the read and the delete.
            raise NotFoundError(
                f"Record {record_id} not found in {config.kind.value}.",
                details={"kind": config.kind.value, "id": record_id},
            )

        logger.info("catalog_deleted kind=%s id=%s", config.kind.value, record_id)
        return snapshot

    async def exists_by_name(
        self,
        kind: CatalogKind | str,
        name: str,
        exclude_id: int | None = None,
    ) -> bool:
        config = self.registry.resolve(kind)
        params = Placeholders()

        sql = (
            f"SELECT {quote_ident(config.id_column)} FROM {quote_ident(config.table)} "
            f"WHERE {quote_ident(config.name_column)} = {params.bind(name)}"
        )
        if exclude_id is not None:
            sql += f" AND {quote_ident(config.id_column)} <> {params.bind(exclude_id)}"
        sql += " LIMIT 1"

        row = await self.executor.fetch_one(sql, *params.args)
        return row is not None
