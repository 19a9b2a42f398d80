"""
Many-to-many association persistence (raw SQL).

Existence of both sides is checked before any insert, and the link table's
unique index plus foreign keys back that up under concurrency: a racing
duplicate insert still surfaces as ConflictError.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from core.db import DuplicateKeyError, MissingReferenceError, QueryExecutor
from core.errors import BadRequestError, CaseRecordsError, ConflictError, NotFoundError
from core.sql import quote_ident

from .config import AssociationConfig, EntityRef

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Association:
    left_id: int
    right_id: int


class OutcomeStatus(str, Enum):
    ASSOCIATED = "associated"
    FAILED = "failed"


@dataclass(frozen=True)
class BatchOutcome:
    right_id: Any
    status: OutcomeStatus
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"right_id": self.right_id, "status": self.status.value}
        if self.reason is not None:
            result["reason"] = self.reason
        return result


def _is_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class AssociationManager:
    def __init__(self, config: AssociationConfig, executor: QueryExecutor):
        self.config = config
        self.executor = executor

    async def _entity_exists(self, entity: EntityRef, entity_id: int) -> bool:
        row = await self.executor.fetch_one(
            f"SELECT 1 AS ok FROM {quote_ident(entity.table)} "
            f"WHERE {quote_ident(entity.id_column)} = $1 LIMIT 1",
            entity_id,
        )
        return row is not None

    async def _require(self, entity: EntityRef, entity_id: int) -> None:
        if not await self._entity_exists(entity, entity_id):
            raise NotFoundError(
                f"{entity.label} {entity_id} does not exist.",
                details={entity.label: entity_id},
            )

    def _pair_details(self, left_id: int, right_id: int) -> dict[str, Any]:
        return {self.config.left.label: left_id, self.config.right.label: right_id}

    async def exists(self, left_id: int, right_id: int) -> bool:
        cfg = self.config
        row = await self.executor.fetch_one(
            f"SELECT 1 AS ok FROM {quote_ident(cfg.link_table)} "
            f"WHERE {quote_ident(cfg.left_column)} = $1 AND {quote_ident(cfg.right_column)} = $2 "
            "LIMIT 1",
            left_id,
            right_id,
        )
        return row is not None

    async def associate(self, left_id: int, right_id: int) -> Association:
        cfg = self.config
        await self._require(cfg.left, left_id)
        await self._require(cfg.right, right_id)

        if await self.exists(left_id, right_id):
            raise ConflictError(
                f"{cfg.right.label} {right_id} is already associated with {cfg.left.label} {left_id}.",
                details=self._pair_details(left_id, right_id),
            )

        try:
            await self.executor.execute(
                f"INSERT INTO {quote_ident(cfg.link_table)} "
                f"({quote_ident(cfg.left_column)}, {quote_ident(cfg.right_column)}) "
                "VALUES ($1, $2)",
                left_id,
                right_id,
            )
        except DuplicateKeyError as exc:
            raise ConflictError(
                f"{cfg.right.label} {right_id} is already associated with {cfg.left.label} {left_id}.",
                details=self._pair_details(left_id, right_id),
            ) from exc
        except MissingReferenceError as exc:
            # One side vanished after the existence checks.
            raise NotFoundError(
                f"{cfg.left.label} {left_id} or {cfg.right.label} {right_id} no longer exists.",
                details=self._pair_details(left_id, right_id),
            ) from exc

        logger.info(
            "association_created link=%s left=%s right=%s", cfg.link_table, left_id, right_id
        )
        return Association(left_id=left_id, right_id=right_id)

    async def disassociate(self, left_id: int, right_id: int) -> Association:
        """
        Remove an existing pair. Removing a pair that is not there is an error.
        """
        cfg = self.config
        if not await self.exists(left_id, right_id):
            raise NotFoundError(
                f"{cfg.right.label} {right_id} is not associated with {cfg.left.label} {left_id}.",
                details=self._pair_details(left_id, right_id),
            )

        affected = await self.executor.execute(
            f"DELETE FROM {quote_ident(cfg.link_table)} "
            f"WHERE {quote_ident(cfg.left_column)} = $1 AND {quote_ident(cfg.right_column)} = $2",
            left_id,
            right_id,
        )
        if affected == 0:
            raise NotFoundError(
                f"{cfg.right.label} {right_id} is not associated with {cfg.left.label} {left_id}.",
                details=self._pair_details(left_id, right_id),
            )

        logger.info(
            "association_deleted link=%s left=%s right=%s", cfg.link_table, left_id, right_id
        )
        return Association(left_id=left_id, right_id=right_id)

    async def list_by_left(self, left_id: int) -> list[dict[str, Any]]:
        cfg = self.config
        order_column = cfg.right.name_column or cfg.right.id_column
        return await self.executor.fetch_all(
            f"SELECT r.*, lt.{quote_ident(cfg.left_column)} FROM {quote_ident(cfg.right.table)} r "
            f"JOIN {quote_ident(cfg.link_table)} lt "
            f"ON r.{quote_ident(cfg.right.id_column)} = lt.{quote_ident(cfg.right_column)} "
            f"WHERE lt.{quote_ident(cfg.left_column)} = $1 "
            f"ORDER BY r.{quote_ident(order_column)} ASC, r.{quote_ident(cfg.right.id_column)} ASC",
            left_id,
        )

    async def list_by_right(self, right_id: int) -> list[dict[str, Any]]:
        # Most recent left entity first (highest id).
        cfg = self.config
        return await self.executor.fetch_all(
            f"SELECT l.* FROM {quote_ident(cfg.left.table)} l "
            f"JOIN {quote_ident(cfg.link_table)} lt "
            f"ON l.{quote_ident(cfg.left.id_column)} = lt.{quote_ident(cfg.left_column)} "
            f"WHERE lt.{quote_ident(cfg.right_column)} = $1 "
            f"ORDER BY l.{quote_ident(cfg.left.id_column)} DESC",
            right_id,
        )

    async def count_by_left(self, left_id: int) -> int:
        cfg = self.config
        row = await self.executor.fetch_one(
            f"SELECT COUNT(*) AS total FROM {quote_ident(cfg.link_table)} "
            f"WHERE {quote_ident(cfg.left_column)} = $1",
            left_id,
        )
        return int(row["total"]) if row is not None else 0

    async def associate_many(self, left_id: int, right_ids: Sequence[int]) -> list[BatchOutcome]:
        """
        Associate each of `right_ids` with `left_id`, one independent insert per id.

        The left side is checked once up front and fails the whole batch. After
        that, a failing item (missing entity, duplicate pair) is recorded in its
        outcome and the batch carries on. Outcomes follow input order, one per id.
        Items already processed stay committed if the batch is interrupted.
        """
        if isinstance(right_ids, (str, bytes)) or not isinstance(right_ids, Sequence):
            raise BadRequestError(f"{self.config.right.label} ids must be a list.")
        if len(right_ids) == 0:
            raise BadRequestError(f"{self.config.right.label} ids must contain at least one id.")
        if not all(_is_id(right_id) for right_id in right_ids):
            raise BadRequestError(f"{self.config.right.label} ids must be integers.")

        await self._require(self.config.left, left_id)

        outcomes: list[BatchOutcome] = []
        for right_id in right_ids:
            try:
                await self.associate(left_id, right_id)
            except CaseRecordsError as exc:
                logger.warning(
                    "association_batch_item_failed link=%s left=%s right=%s reason=%s",
                    self.config.link_table,
                    left_id,
                    right_id,
                    exc.message,
                )
                outcomes.append(BatchOutcome(right_id, OutcomeStatus.FAILED, exc.message))
            else:
                outcomes.append(BatchOutcome(right_id, OutcomeStatus.ASSOCIATED))
        return outcomes
