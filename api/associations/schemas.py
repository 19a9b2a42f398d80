"""
Pydantic schemas for case <-> victim association endpoints.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field

from core.db import INT4_MAX

BULK_MAX_ITEMS = 200

# Ids are int4 columns; anything outside this range cannot name a row.
EntityId = Annotated[int, Field(ge=1, le=INT4_MAX)]


class AssociateVictimRequest(BaseModel):
    victima_id: EntityId


class AssociateVictimsRequest(BaseModel):
    victimas_ids: list[EntityId] = Field(..., min_length=1, max_length=BULK_MAX_ITEMS)
