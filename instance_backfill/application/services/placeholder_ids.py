"""
Generacion de instance ids sinteticos.

Formato: "auto_" + UUID v4 (36 caracteres 8-4-4-4-12, version 4, variante
RFC 4122). El prefijo permite que auditorias futuras distingan estos ids de
los asignados organicamente por Bloom.
"""
from __future__ import annotations

import re
import uuid
from typing import Callable, Iterable, List

from instance_backfill.domain.entities.reconciliation import PlaceholderAssignment

PLACEHOLDER_PREFIX = "auto_"

_PLACEHOLDER_RE = re.compile(
    r"^auto_[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"
)

IdFactory = Callable[[], str]


def generate_placeholder_id() -> str:
    """Genera un id placeholder nuevo."""
    return f"{PLACEHOLDER_PREFIX}{uuid.uuid4()}"


def is_placeholder_id(value: str) -> bool:
    """Indica si el valor fue generado por generate_placeholder_id."""
    return bool(value) and _PLACEHOLDER_RE.match(value) is not None


def assign_placeholder_ids(
    titles: Iterable[str],
    *,
    id_factory: IdFactory = generate_placeholder_id,
) -> List[PlaceholderAssignment]:
    """Asigna un id fresco por titulo (sin reutilizar), en orden alfabetico."""
    return [
        PlaceholderAssignment(title=title, generated_id=id_factory())
        for title in sorted(set(titles))
    ]
