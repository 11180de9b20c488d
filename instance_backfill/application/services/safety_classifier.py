"""
Clasificacion de titulos en seguros y ambiguos.

Un titulo es seguro si todas las fuentes coinciden en un unico id. Con dos o
mas ids distintos el titulo queda excluido: no se adivina ni se desempata por
frecuencia.
"""
from __future__ import annotations

from typing import Dict, Set

from loguru import logger

from instance_backfill.domain.entities.reconciliation import Classification, TitleIdIndex


def classify_titles(index: TitleIdIndex) -> Classification:
    """
    Particiona las claves del indice.

    Returns:
        Classification con safe (title -> id) y ambiguous (titulos con 2+ ids)
    """
    safe: Dict[str, str] = {}
    ambiguous: Set[str] = set()

    for title, ids in index.items():
        if len(ids) == 1:
            safe[title] = next(iter(ids))
        elif len(ids) > 1:
            ambiguous.add(title)
            logger.info(f"Titulo con multiples instance ids distintos: {title!r}, NumMatches: {len(ids)}")

    if ambiguous:
        logger.warning(f"AmbiguousCount = {len(ambiguous)}")
    else:
        logger.info("AmbiguousCount = 0")

    return Classification(safe=safe, ambiguous=ambiguous)
