"""
Pydantic schemas for catalog endpoints.

Catalog kinds differ only in their optional columns, so the request models are
generated from each kind's TableConfig: one create/update pair per kind.
Body keys are the column names clients read back (`nombre`, `descripcion`).
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, create_model

from .registry import TableConfig

NAME_MAX_LENGTH = 150
DESCRIPTION_MAX_LENGTH = 150

# Body key -> engine payload key.
ENGINE_KEYS = {"nombre": "name", "descripcion": "description"}


class CatalogPayload(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    def to_engine_data(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        return {ENGINE_KEYS.get(key, key): value for key, value in data.items()}


def _build_model(config: TableConfig, *, partial: bool) -> type[CatalogPayload]:
    fields: dict[str, Any] = {}
    if partial:
        # Optional on update, but an explicit null is not a rename.
        fields["nombre"] = (str, Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH))
    else:
        fields["nombre"] = (str, Field(..., min_length=1, max_length=NAME_MAX_LENGTH))

    if config.has_description:
        fields["descripcion"] = (str | None, Field(default=None, max_length=DESCRIPTION_MAX_LENGTH))

    # May be omitted, but never null: the columns are NOT NULL with a default.
    for extra in config.extra_columns:
        fields[extra.name] = (extra.value_type, None)

    suffix = "Update" if partial else "Create"
    model_name = "".join(part.capitalize() for part in config.table.split("_")) + suffix
    return create_model(model_name, __base__=CatalogPayload, **fields)


@lru_cache(maxsize=None)
def create_model_for(config: TableConfig) -> type[CatalogPayload]:
    return _build_model(config, partial=False)


@lru_cache(maxsize=None)
def update_model_for(config: TableConfig) -> type[CatalogPayload]:
    return _build_model(config, partial=True)
