"""
Caso de uso principal: backfill de book_instance_id.

Diseño (resumen):
- Trae en paralelo los libros de Parse y los pares (title, id) de Postgres
- Indexa cada fuente por titulo y fusiona (union de ids)
- Clasifica: seguros (1 id) vs ambiguos (2+ ids)
- Pasada 1: aplica los ids seguros donde la tabla tenga id nulo
- Calcula los titulos sin ningun id conocido (ni clasificado ni presente en
  ninguna tabla destino) y les genera un placeholder
- Pasada 2: aplica los placeholders

Estrategia de idempotencia:
- Cada update lleva "AND id IS NULL": re-ejecutar no pisa nada.
- El plan de cada tabla se filtra con una consulta fresca de titulos con id nulo.

La clasificacion usada para los placeholders es la de antes de la pasada 1:
los placeholders solo cubren titulos nunca observados con id.
"""
from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from instance_backfill.application.dto.backfill_dto import (
    AmbiguousTitlesReport,
    BackfillReport,
)
from instance_backfill.application.services.null_coverage import resolve_null_coverage
from instance_backfill.application.services.placeholder_ids import (
    IdFactory,
    assign_placeholder_ids,
    generate_placeholder_id,
)
from instance_backfill.application.services.safety_classifier import classify_titles
from instance_backfill.application.services.title_index import (
    build_title_index,
    collect_observations,
    merge_title_indexes,
)
from instance_backfill.application.use_cases.update_applier import UpdateApplier
from instance_backfill.domain.entities.reconciliation import TargetTable, TitleIdIndex
from instance_backfill.domain.repositories.book_repositories import IDocumentStore, ITargetStore

PARSE_TITLE_FIELD = "title"
PARSE_ID_FIELD = "bookInstanceId"
SQL_TITLE_FIELD = "title"
SQL_ID_FIELD = "book_instance_id"


class BackfillUseCases:
    """
    Orquestador de una corrida de backfill.
    """

    def __init__(
        self,
        *,
        document_store: IDocumentStore,
        target_store: ITargetStore,
        tables: Sequence[TargetTable],
        environment: str,
        really_run: bool = False,
        ambiguous_report_path: Optional[Path] = None,
        id_factory: IdFactory = generate_placeholder_id,
    ) -> None:
        self._documents = document_store
        self._targets = target_store
        self._tables = list(tables)
        self._environment = environment
        self._really_run = really_run
        self._ambiguous_report_path = ambiguous_report_path
        self._id_factory = id_factory

    async def backfill(self) -> BackfillReport:
        """
        Ejecuta la corrida completa. Cualquier error de los stores se propaga.
        """
        logger.info(
            f"Iniciando backfill (entorno={self._environment}, really_run={self._really_run}, "
            f"tablas={len(self._tables)})"
        )

        books, sql_rows = await self._fetch_sources()

        parse_index = build_title_index(
            collect_observations(books, title_field=PARSE_TITLE_FIELD, id_field=PARSE_ID_FIELD)
        )
        sql_index = build_title_index(
            collect_observations(sql_rows, title_field=SQL_TITLE_FIELD, id_field=SQL_ID_FIELD)
        )
        combined = merge_title_indexes(parse_index, sql_index)
        logger.info(f"parseMap.size = {len(parse_index)}")
        logger.info(f"sqlMap.size = {len(sql_index)}")
        logger.info(f"combinedMap.size = {len(combined)}")

        classification = classify_titles(combined)
        await self._write_ambiguous_report(combined, classification.ambiguous)

        applier = UpdateApplier(self._targets, really_run=self._really_run)
        safe_pass = await applier.apply("safe", self._tables, classification.safe)

        target_titles = await self._targets.fetch_target_titles(self._tables)
        titles_with_id = await self._targets.fetch_titles_with_id(self._tables)
        uncovered = resolve_null_coverage(target_titles, classification, titles_with_id)
        assignments = assign_placeholder_ids(uncovered, id_factory=self._id_factory)
        placeholder_map: Dict[str, str] = {a.title: a.generated_id for a in assignments}
        for a in assignments:
            logger.debug(f"Placeholder generado: {a.title!r} -> {a.generated_id}")

        placeholder_pass = await applier.apply("placeholder", self._tables, placeholder_map)

        report = BackfillReport(
            environment=self._environment,
            really_run=self._really_run,
            document_store_titles=len(parse_index),
            relational_store_titles=len(sql_index),
            merged_titles=len(combined),
            safe_titles=len(classification.safe),
            ambiguous_titles=sorted(classification.ambiguous),
            placeholder_ids=placeholder_map,
            safe_pass=safe_pass,
            placeholder_pass=placeholder_pass,
        )
        logger.success(
            f"Backfill completado: seguros={report.safe_titles}, "
            f"ambiguos={len(report.ambiguous_titles)}, placeholders={len(placeholder_map)}"
        )
        return report

    async def _fetch_sources(self) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        """
        Unica concurrencia de la corrida; si una consulta falla, falla todo.

        La consulta hermana se cancela y se espera antes de propagar el error,
        para que no siga corriendo contra un pool que se va a cerrar.
        """
        books_task = asyncio.ensure_future(self._documents.fetch_books())
        rows_task = asyncio.ensure_future(self._targets.fetch_observation_rows(self._tables))
        try:
            books, sql_rows = await asyncio.gather(books_task, rows_task)
        except BaseException:
            for task in (books_task, rows_task):
                task.cancel()
            await asyncio.gather(books_task, rows_task, return_exceptions=True)
            raise
        return books, sql_rows

    async def _write_ambiguous_report(self, index: TitleIdIndex, ambiguous: set[str]) -> None:
        if not self._ambiguous_report_path:
            return

        report = AmbiguousTitlesReport(
            generated_at=datetime.now(timezone.utc),
            environment=self._environment,
            titles={title: sorted(index[title]) for title in sorted(ambiguous)},
        )
        path = self._ambiguous_report_path
        payload = json.dumps(report.model_dump(mode="json"), ensure_ascii=False, indent=2)
        await asyncio.to_thread(_write_text_file, path, payload)
        logger.info(f"Titulos ambiguos guardados en {path}")


def _write_text_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
