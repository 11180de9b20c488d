"""
Repositorio Postgres para las tablas de eventos de Bloom Reader.

Implementa ITargetStore sobre PostgresConnection:
- lectura de observaciones (title, book_instance_id)
- titulos con id nulo por tabla / con id en cualquier tabla / todos los titulos destino
- aplicacion de un UpdatePlan entre dos conteos de diagnostico

Los identificadores se componen con psycopg.sql; los valores van como
parametros. En BatchMode.TEXTUAL el plan se envia como un unico batch
multi-sentencia con literales escapados.
"""
from __future__ import annotations

from typing import Any, Dict, List, Sequence, Set, Tuple

from loguru import logger
from psycopg import sql

from instance_backfill.core.config import BatchMode
from instance_backfill.application.services.update_planner import render_textual_batch
from instance_backfill.domain.entities.reconciliation import NullCounts, TargetTable, UpdatePlan
from instance_backfill.domain.repositories.book_repositories import ITargetStore
from instance_backfill.infrastructure.database.postgres_connection import (
    PostgresConnection,
    StatementResult,
)
from instance_backfill.shared.exceptions import RelationalStoreError


def _table_identifier(table: TargetTable) -> sql.Composed:
    return sql.SQL("{}.{}").format(sql.Identifier(table.schema), sql.Identifier(table.name))


def _observation_query(table: TargetTable) -> sql.Composed:
    return sql.SQL(
        "SELECT DISTINCT {title} AS title, {id} AS book_instance_id FROM {table} "
        "WHERE {title} IS NOT NULL AND {id} IS NOT NULL"
    ).format(
        title=sql.Identifier(table.title_column),
        id=sql.Identifier(table.id_column),
        table=_table_identifier(table),
    )


def _titles_query(table: TargetTable) -> sql.Composed:
    return sql.SQL("SELECT DISTINCT {title} AS title FROM {table} WHERE {title} IS NOT NULL").format(
        title=sql.Identifier(table.title_column),
        table=_table_identifier(table),
    )


def _titles_with_id_query(table: TargetTable) -> sql.Composed:
    return sql.SQL(
        "SELECT DISTINCT {title} AS title FROM {table} WHERE {title} IS NOT NULL AND {id} IS NOT NULL"
    ).format(
        title=sql.Identifier(table.title_column),
        id=sql.Identifier(table.id_column),
        table=_table_identifier(table),
    )


def _null_counts_query(table: TargetTable) -> sql.Composed:
    return sql.SQL(
        "SELECT COUNT(*) AS cnt, COUNT(DISTINCT {title}) AS count_distinct_problem_titles "
        "FROM {table} WHERE {id} IS NULL"
    ).format(
        title=sql.Identifier(table.title_column),
        id=sql.Identifier(table.id_column),
        table=_table_identifier(table),
    )


def _update_query(table: TargetTable) -> sql.Composed:
    return sql.SQL("UPDATE {table} SET {id} = %s WHERE {title} = %s AND {id} IS NULL").format(
        table=_table_identifier(table),
        id=sql.Identifier(table.id_column),
        title=sql.Identifier(table.title_column),
    )


def _null_counts_from_row(row: Dict[str, Any] | None, table: TargetTable) -> NullCounts:
    if not row:
        raise RelationalStoreError(f"el conteo de diagnostico de {table} no devolvio filas")
    return NullCounts(rows=int(row["cnt"]), distinct_titles=int(row["count_distinct_problem_titles"]))


class TargetTableRepository(ITargetStore):
    """Repositorio de las tablas destino del backfill."""

    def __init__(
        self,
        db: PostgresConnection,
        *,
        batch_mode: BatchMode = BatchMode.PARAMETERIZED,
    ) -> None:
        self._db = db
        self._batch_mode = batch_mode

    async def fetch_observation_rows(self, tables: Sequence[TargetTable]) -> List[Dict[str, Any]]:
        observed = [t for t in tables if t.observed]
        if not observed:
            return []
        query = sql.SQL(" UNION ").join(_observation_query(t) for t in observed)
        rows = await self._db.execute_query(query)
        logger.info(f"Num Results from SQL: {len(rows)}")
        return rows

    async def fetch_target_titles(self, tables: Sequence[TargetTable]) -> Set[str]:
        if not tables:
            return set()
        query = sql.SQL(" UNION ").join(_titles_query(t) for t in tables)
        rows = await self._db.execute_query(query)
        return {row["title"] for row in rows if row.get("title")}

    async def fetch_titles_with_id(self, tables: Sequence[TargetTable]) -> Set[str]:
        if not tables:
            return set()
        query = sql.SQL(" UNION ").join(_titles_with_id_query(t) for t in tables)
        rows = await self._db.execute_query(query)
        return {row["title"] for row in rows if row.get("title")}

    async def fetch_titles_missing_id(self, table: TargetTable) -> Set[str]:
        query = sql.SQL("SELECT DISTINCT {title} AS title FROM {table} WHERE {id} IS NULL").format(
            title=sql.Identifier(table.title_column),
            table=_table_identifier(table),
            id=sql.Identifier(table.id_column),
        )
        rows = await self._db.execute_query(query)
        return {row["title"] for row in rows if row.get("title")}

    async def apply_update_plan(
        self,
        plan: UpdatePlan,
        *,
        really_run: bool,
    ) -> Tuple[NullCounts, NullCounts]:
        if self._batch_mode is BatchMode.TEXTUAL:
            return await self._apply_textual(plan, really_run=really_run)
        return await self._apply_parameterized(plan, really_run=really_run)

    async def _apply_parameterized(
        self,
        plan: UpdatePlan,
        *,
        really_run: bool,
    ) -> Tuple[NullCounts, NullCounts]:
        table = plan.table
        counts_query = _null_counts_query(table)

        async with self._db.cursor() as cur:
            await cur.execute(counts_query)
            before = _null_counts_from_row(await cur.fetchone(), table)

            if really_run:
                params = [(instance_id, title) for title, instance_id in plan.assignments.items()]
                await cur.executemany(_update_query(table), params)
            else:
                await cur.execute(
                    sql.SQL("SELECT 1 FROM {table} LIMIT 1").format(table=_table_identifier(table))
                )

            await cur.execute(counts_query)
            after = _null_counts_from_row(await cur.fetchone(), table)

        return before, after

    async def _apply_textual(
        self,
        plan: UpdatePlan,
        *,
        really_run: bool,
    ) -> Tuple[NullCounts, NullCounts]:
        results: List[StatementResult] = await self._db.execute_multi_statement_query(
            render_textual_batch(plan, really_run=really_run)
        )
        if len(results) < 2:
            raise RelationalStoreError(f"el batch de {plan.table} devolvio {len(results)} resultados")
        before = _null_counts_from_row(results[0].first_row, plan.table)
        after = _null_counts_from_row(results[-1].first_row, plan.table)
        return before, after
