"""
Construccion y fusion de indices title -> ids.

Cada fuente (Parse, Postgres) se normaliza por separado a Observations y luego
a un TitleIdIndex. La fusion es una union de conjuntos: si dos fuentes asocian
el mismo titulo a ids distintos, el indice fusionado lo refleja y el
clasificador lo marcara como ambiguo.
"""
from __future__ import annotations

from typing import Any, Iterable, List, Mapping

from loguru import logger

from instance_backfill.domain.entities.reconciliation import Observation, TitleIdIndex


def collect_observations(
    rows: Iterable[Mapping[str, Any]],
    *,
    title_field: str,
    id_field: str,
) -> List[Observation]:
    """
    Normaliza filas crudas a observaciones (title, instance_id).

    Las filas sin titulo o sin id (ausente, None o vacio) se descartan en
    silencio: no aportan evidencia.
    """
    observations: List[Observation] = []
    discarded = 0
    for row in rows:
        title = row.get(title_field)
        instance_id = row.get(id_field)
        if not title or not instance_id:
            discarded += 1
            continue
        observations.append(Observation(title=str(title), instance_id=str(instance_id)))

    if discarded:
        logger.debug(f"Descartadas {discarded} filas sin '{title_field}' o '{id_field}'")
    return observations


def build_title_index(observations: Iterable[Observation]) -> TitleIdIndex:
    """Agrupa las observaciones en title -> set de ids distintos."""
    index: TitleIdIndex = {}
    for obs in observations:
        index.setdefault(obs.title, set()).add(obs.instance_id)
    return index


def merge_title_indexes(*indexes: TitleIdIndex) -> TitleIdIndex:
    """
    Une varios indices en uno nuevo. Los indices de entrada no se modifican.

    Para un titulo presente en mas de un indice el resultado es la union de
    sus ids (nunca se sobreescribe).
    """
    merged: TitleIdIndex = {}
    for index in indexes:
        for title, ids in index.items():
            existing = merged.get(title)
            if existing is None:
                merged[title] = set(ids)
            else:
                existing.update(ids)
    return merged
