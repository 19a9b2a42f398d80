"""
Catalog API endpoints.

One set of routes serves every catalog kind; `{kind}` is validated against
`CatalogKind`, so an unknown kind never reaches the engine.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Path, Query, status

from core.db import INT4_MAX

from . import service
from .engine import CatalogEngine
from .registry import CatalogKind

router = APIRouter(prefix="/catalogos")

RecordId = Annotated[int, Path(ge=1, le=INT4_MAX)]


@router.get("/{kind}")
async def list_catalog(
    kind: CatalogKind,
    search: str | None = Query(default=None, max_length=200),
    limit: int | None = Query(default=None, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    engine: CatalogEngine = Depends(service.get_engine),
) -> dict:
    return await service.list_catalog(engine, kind, search=search, limit=limit, offset=offset)


# Registered before "/{kind}/{record_id}" so "stats" is never read as an id.
@router.get("/{kind}/stats")
async def catalog_stats(
    kind: CatalogKind,
    engine: CatalogEngine = Depends(service.get_engine),
) -> dict:
    return await service.catalog_stats(engine, kind)


@router.get("/{kind}/{record_id}")
async def get_record(
    kind: CatalogKind,
    record_id: RecordId,
    engine: CatalogEngine = Depends(service.get_engine),
) -> dict:
    return await engine.get_by_id(kind, record_id)


@router.post("/{kind}", status_code=status.HTTP_201_CREATED)
async def create_record(
    kind: CatalogKind,
    payload: dict[str, Any] = Body(...),
    engine: CatalogEngine = Depends(service.get_engine),
) -> dict:
    return await service.create_record(engine, kind, payload)


@router.put("/{kind}/{record_id}")
async def update_record(
    kind: CatalogKind,
    record_id: RecordId,
    payload: dict[str, Any] = Body(...),
    engine: CatalogEngine = Depends(service.get_engine),
) -> dict:
    return await service.update_record(engine, kind, record_id, payload)


@router.delete("/{kind}/{record_id}")
async def delete_record(
    kind: CatalogKind,
    record_id: RecordId,
    engine: CatalogEngine = Depends(service.get_engine),
) -> dict:
    deleted = await engine.remove(kind, record_id)
    return {"ok": True, "deleted": deleted}
