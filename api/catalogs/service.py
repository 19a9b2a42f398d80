"""
Catalog business logic between the router and the engine.

Scope:
- per-kind payload validation (models generated from the kind's TableConfig)
- list + total for paginated pick-lists
- catalog stats
"""

from __future__ import annotations

import asyncio
from typing import Any

from fastapi import Depends
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from core import db

from . import schemas
from .engine import CatalogEngine
from .registry import CatalogKind, TableConfigRegistry, default_registry


def get_registry() -> TableConfigRegistry:
    return default_registry()


def get_engine(registry: TableConfigRegistry = Depends(get_registry)) -> CatalogEngine:
    return CatalogEngine(registry, db.PoolExecutor())


def _validate(model: type[schemas.CatalogPayload], payload: dict[str, Any]) -> dict[str, Any]:
    try:
        parsed = model.model_validate(payload)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc
    return parsed.to_engine_data()


async def list_catalog(
    engine: CatalogEngine,
    kind: CatalogKind,
    *,
    search: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> dict:
    search = (search or "").strip() or None
    items, total = await asyncio.gather(
        engine.list_all(kind, search=search, limit=limit, offset=offset),
        engine.count(kind, search),
    )
    return {
        "items": items,
        "count": len(items),
        "total": total,
        "limit": limit,
        "offset": offset if limit is not None else None,
    }


async def catalog_stats(engine: CatalogEngine, kind: CatalogKind) -> dict:
    total = await engine.count(kind)
    records = await engine.list_all(kind)
    return {"tipo": kind.value, "total": total, "registros": records}


async def create_record(engine: CatalogEngine, kind: CatalogKind, payload: dict[str, Any]) -> dict:
    config = engine.registry.resolve(kind)
    data = _validate(schemas.create_model_for(config), payload)
    return await engine.create(kind, data)


async def update_record(
    engine: CatalogEngine,
    kind: CatalogKind,
    record_id: int,
    payload: dict[str, Any],
) -> dict:
    config = engine.registry.resolve(kind)
    data = _validate(schemas.update_model_for(config), payload)
    return await engine.update(kind, record_id, data)
