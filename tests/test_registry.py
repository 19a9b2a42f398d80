"""Tests for catalog kind registration."""
from __future__ import annotations

import pytest

from catalogs.registry import (
    CatalogKind,
    ExtraColumn,
    TableConfig,
    TableConfigRegistry,
    default_registry,
)
from core.errors import ConfigurationError


def _configs(replacement: TableConfig) -> list[TableConfig]:
    configs = {config.kind: config for config in default_registry()}
    configs[replacement.kind] = replacement
    return list(configs.values())


def test_every_kind_resolves_to_one_config() -> None:
    registry = default_registry()
    assert len(registry) == len(CatalogKind)
    for kind in CatalogKind:
        assert registry.resolve(kind).kind is kind
        assert registry.resolve(kind.value) is registry.resolve(kind)


def test_default_registry_is_built_once() -> None:
    assert default_registry() is default_registry()


def test_known_schema() -> None:
    registry = default_registry()
    roles = registry.resolve("roles")
    assert (roles.table, roles.id_column, roles.has_description) == ("rol", "id_rol", True)

    sanctions = registry.resolve(CatalogKind.TIPOS_MEDIDAS_SANCIONADORAS)
    assert sanctions.extra_columns == (ExtraColumn("es_privativa", bool),)
    assert registry.resolve("estados-procesales").id_column == "id_estado"


def test_unknown_kind_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match="colores"):
        default_registry().resolve("colores")


def test_configs_are_immutable() -> None:
    config = default_registry().resolve(CatalogKind.STATUS)
    with pytest.raises(AttributeError):
        config.table = "usuario"  # type: ignore[misc]


def test_missing_kind_is_rejected() -> None:
    configs = [c for c in default_registry() if c.kind is not CatalogKind.STATUS]
    with pytest.raises(ConfigurationError, match="status"):
        TableConfigRegistry(configs)


def test_duplicate_kind_is_rejected() -> None:
    configs = list(default_registry())
    configs.append(configs[0])
    with pytest.raises(ConfigurationError, match="twice"):
        TableConfigRegistry(configs)


@pytest.mark.parametrize(
    "bad",
    [
        {"table": "rol; DROP TABLE rol"},
        {"id_column": "Id"},
        {"name_column": 'nombre"'},
        {"extra_columns": (ExtraColumn("es privativa"),)},
    ],
)
def test_unsafe_identifiers_are_rejected(bad) -> None:
    base = default_registry().resolve(CatalogKind.ROLES)
    broken = TableConfig(
        kind=base.kind,
        table=bad.get("table", base.table),
        id_column=bad.get("id_column", base.id_column),
        label=base.label,
        name_column=bad.get("name_column", base.name_column),
        extra_columns=bad.get("extra_columns", ()),
    )
    with pytest.raises(ConfigurationError):
        TableConfigRegistry(_configs(broken))
