"""
Deteccion de titulos sin ningun id conocido.

No alcanza con buscar titulos con id nulo en Postgres: un titulo puede tener
id en una tabla/fila y no en otra. El hueco real es "no existe id en ningun
lado", es decir, titulos presentes en alguna tabla destino que no aparecen en
la clasificacion (ni como seguros ni como ambiguos) y que no tienen id en
ninguna tabla destino, tampoco en las de solo-update.
"""
from __future__ import annotations

from typing import Iterable, Set

from loguru import logger

from instance_backfill.domain.entities.reconciliation import Classification


def resolve_null_coverage(
    target_titles: Iterable[str],
    classification: Classification,
    titles_with_id: Iterable[str] = (),
) -> Set[str]:
    """
    Args:
        target_titles: Todos los titulos no nulos de las tablas destino
        classification: Clasificacion previa (define el conjunto conocido)
        titles_with_id: Titulos con algun id no nulo en cualquier tabla destino

    Returns:
        Set[str]: Titulos que necesitan un id placeholder
    """
    known = classification.known_titles | set(titles_with_id)
    uncovered = {title for title in target_titles if title and title not in known}
    logger.info(f"Titulos sin ningun instance id conocido: {len(uncovered)}")
    return uncovered
