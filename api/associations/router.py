"""
Case <-> victim association endpoints.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from core import db

from . import schemas
from .config import CASE_VICTIMS
from .manager import AssociationManager, OutcomeStatus

router = APIRouter()

PathId = Annotated[int, Path(ge=1, le=db.INT4_MAX)]


def get_case_victims() -> AssociationManager:
    return AssociationManager(CASE_VICTIMS, db.PoolExecutor())


@router.get("/procesos/{proceso_id}/victimas")
async def list_case_victims(
    proceso_id: PathId,
    manager: AssociationManager = Depends(get_case_victims),
) -> dict:
    victims = await manager.list_by_left(proceso_id)
    return {"proceso_id": proceso_id, "victimas": victims, "count": len(victims)}


@router.post("/procesos/{proceso_id}/victimas", status_code=status.HTTP_201_CREATED)
async def associate_victim(
    proceso_id: PathId,
    request: schemas.AssociateVictimRequest,
    manager: AssociationManager = Depends(get_case_victims),
) -> dict:
    link = await manager.associate(proceso_id, request.victima_id)
    return {"proceso_id": link.left_id, "victima_id": link.right_id}


@router.post("/procesos/{proceso_id}/victimas/bulk")
async def associate_victims(
    proceso_id: PathId,
    request: schemas.AssociateVictimsRequest,
    manager: AssociationManager = Depends(get_case_victims),
) -> dict:
    outcomes = await manager.associate_many(proceso_id, request.victimas_ids)
    associated = sum(1 for o in outcomes if o.status is OutcomeStatus.ASSOCIATED)
    return {
        "proceso_id": proceso_id,
        "results": [o.to_dict() for o in outcomes],
        "associated": associated,
        "failed": len(outcomes) - associated,
    }


@router.delete("/procesos/{proceso_id}/victimas/{victima_id}")
async def disassociate_victim(
    proceso_id: PathId,
    victima_id: PathId,
    manager: AssociationManager = Depends(get_case_victims),
) -> dict:
    link = await manager.disassociate(proceso_id, victima_id)
    return {"ok": True, "proceso_id": link.left_id, "victima_id": link.right_id}


@router.get("/victimas/{victima_id}/procesos")
async def list_victim_cases(
    victima_id: PathId,
    manager: AssociationManager = Depends(get_case_victims),
) -> dict:
    cases = await manager.list_by_right(victima_id)
    return {"victima_id": victima_id, "procesos": cases, "count": len(cases)}
