"""
Link-table descriptors for many-to-many associations.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.sql import check_identifier


@dataclass(frozen=True)
class EntityRef:
    table: str
    id_column: str
    # Used in messages ("<label> 7 does not exist").
    label: str
    # Column the entity is ordered by when listed as the right side.
    name_column: str | None = None


@dataclass(frozen=True)
class AssociationConfig:
    link_table: str
    left: EntityRef
    right: EntityRef
    left_column: str
    right_column: str

    def __post_init__(self) -> None:
        for name in (
            self.link_table,
            self.left_column,
            self.right_column,
            self.left.table,
            self.left.id_column,
            self.right.table,
            self.right.id_column,
        ):
            check_identifier(name)
        if self.right.name_column is not None:
            check_identifier(self.right.name_column)


# Case <-> victim. A case (proceso) can have many victims and a victim can
# appear in many cases.
CASE_VICTIMS = AssociationConfig(
    link_table="proceso_victima",
    left=EntityRef(table="proceso", id_column="id_proceso", label="proceso"),
    right=EntityRef(table="victima", id_column="id_victima", label="victima", name_column="nombre"),
    left_column="proceso_id",
    right_column="victima_id",
)
