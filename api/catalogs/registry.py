"""
Catalog kinds and their physical schema descriptors.

This is the single extension point for a new catalog: add a `CatalogKind`
member and a matching `TableConfig` in `default_registry()`. The registry
refuses to build if the two drift apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, Iterator

from core.errors import ConfigurationError
from core.sql import check_identifier


class CatalogKind(str, Enum):
    ROLES = "roles"
    ESTADOS_PROCESALES = "estados-procesales"
    STATUS = "status"
    TIPOS_MEDIDAS_SANCIONADORAS = "tipos-medidas-sancionadoras"
    TIPOS_MEDIDAS_CAUTELARES = "tipos-medidas-cautelares"
    TIPOS_REPARACION = "tipos-reparacion"


@dataclass(frozen=True)
class ExtraColumn:
    name: str
    value_type: type = bool


@dataclass(frozen=True)
class TableConfig:
    kind: CatalogKind
    table: str
    id_column: str
    # Human label used in error messages ("... still use this <label>").
    label: str
    name_column: str = "nombre"
    has_description: bool = False
    description_column: str = "descripcion"
    extra_columns: tuple[ExtraColumn, ...] = ()

    def identifiers(self) -> list[str]:
        names = [self.table, self.id_column, self.name_column]
        if self.has_description:
            names.append(self.description_column)
        names.extend(col.name for col in self.extra_columns)
        return names


class TableConfigRegistry:
    """
    Immutable kind -> TableConfig mapping, built once at startup.
    """

    def __init__(self, configs: Iterable[TableConfig]):
        by_kind: dict[CatalogKind, TableConfig] = {}
        for config in configs:
            if config.kind in by_kind:
                raise ConfigurationError(f"Catalog kind registered twice: {config.kind.value}")
            for name in config.identifiers():
                check_identifier(name)
            extra_names = [col.name for col in config.extra_columns]
            if len(set(extra_names)) != len(extra_names):
                raise ConfigurationError(f"Duplicate extra column for kind {config.kind.value}")
            by_kind[config.kind] = config

        missing = [kind.value for kind in CatalogKind if kind not in by_kind]
        if missing:
            raise ConfigurationError(f"Catalog kinds without a table config: {', '.join(missing)}")

        self._configs = MappingProxyType(by_kind)

    def resolve(self, kind: CatalogKind | str) -> TableConfig:
        try:
            key = CatalogKind(kind)
        except ValueError:
            raise ConfigurationError(f"Unknown catalog kind: {kind!r}") from None
        return self._configs[key]

    def __iter__(self) -> Iterator[TableConfig]:
        return iter(self._configs.values())

    def __len__(self) -> int:
        return len(self._configs)


@lru_cache(maxsize=1)
def default_registry() -> TableConfigRegistry:
    return TableConfigRegistry(
        [
            TableConfig(
                kind=CatalogKind.ROLES,
                table="rol",
                id_column="id_rol",
                label="rol",
                has_description=True,
            ),
            TableConfig(
                kind=CatalogKind.ESTADOS_PROCESALES,
                table="estado_procesal",
                id_column="id_estado",
                label="estado procesal",
            ),
            TableConfig(
                kind=CatalogKind.STATUS,
                table="status",
                id_column="id_status",
                label="status",
            ),
            TableConfig(
                kind=CatalogKind.TIPOS_MEDIDAS_SANCIONADORAS,
                table="tipo_medida_sancionadora",
                id_column="id_tipo_medida_sancionadora",
                label="tipo de medida sancionadora",
                extra_columns=(ExtraColumn("es_privativa", bool),),
            ),
            TableConfig(
                kind=CatalogKind.TIPOS_MEDIDAS_CAUTELARES,
                table="tipo_medida_cautelar",
                id_column="id_tipo_medida_cautelar",
                label="tipo de medida cautelar",
                extra_columns=(ExtraColumn("genera_cemci", bool),),
            ),
            TableConfig(
                kind=CatalogKind.TIPOS_REPARACION,
                table="tipo_reparacion",
                id_column="id_tipo_reparacion",
                label="tipo de reparación",
            ),
        ]
    )
