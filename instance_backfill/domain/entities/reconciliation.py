"""
Entidades del dominio de reconciliacion de book_instance_id.

Todas son snapshots inmutables construidos una sola vez por corrida a partir
de una lectura puntual de ambos stores. Se mantienen libres de I/O.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Set

# title -> ids distintos observados para ese titulo
TitleIdIndex = Dict[str, Set[str]]


@dataclass(frozen=True)
class Observation:
    """Evidencia de que un titulo esta asociado a un instance id."""

    title: str
    instance_id: str


@dataclass(frozen=True)
class Classification:
    """
    Particion de las claves de un TitleIdIndex.

    - safe: titulos con exactamente un id distinto, junto a ese id
    - ambiguous: titulos con 2+ ids distintos (nunca se actualizan)

    Todo titulo del indice aparece en exactamente uno de los dos.
    """

    safe: Dict[str, str] = field(default_factory=dict)
    ambiguous: Set[str] = field(default_factory=set)

    @property
    def known_titles(self) -> Set[str]:
        """Titulos con al menos un id real (no nulo) en alguna fuente."""
        return set(self.safe) | set(self.ambiguous)


@dataclass(frozen=True)
class PlaceholderAssignment:
    """Id sintetico asignado a un titulo sin ningun id real."""

    title: str
    generated_id: str


@dataclass(frozen=True)
class TargetTable:
    """
    Tabla destino en Postgres.

    - observed: si True, la tabla tambien aporta observaciones (title, id)
      en la consulta inicial. Las tablas con observed=False solo se actualizan.
    """

    schema: str
    name: str
    title_column: str = "title"
    id_column: str = "book_instance_id"
    observed: bool = True

    @property
    def qualified_name(self) -> str:
        return f"{self.schema}.{self.name}"

    @classmethod
    def parse(cls, qualified_name: str, *, observed: bool = False) -> "TargetTable":
        """Construye una tabla desde 'schema.tabla'."""
        schema, sep, name = qualified_name.strip().partition(".")
        if not sep or not schema or not name:
            raise ValueError(f"Nombre de tabla invalido (se espera 'schema.tabla'): {qualified_name!r}")
        return cls(schema=schema, name=name, observed=observed)

    def __str__(self) -> str:
        return self.qualified_name


@dataclass(frozen=True)
class UpdatePlan:
    """
    Updates pendientes para una tabla concreta.

    assignments solo contiene titulos que hoy tienen id nulo en ESTA tabla.
    """

    table: TargetTable
    assignments: Dict[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.assignments

    def __len__(self) -> int:
        return len(self.assignments)


@dataclass(frozen=True)
class NullCounts:
    """Diagnostico de filas/titulos con id nulo en una tabla."""

    rows: int
    distinct_titles: int
