"""
Aplicacion de updates por tabla.

Cada tabla recorre: Idle -> QueryMissing -> PlanBuilt -> (DryRunPreview | Executed) -> Reported.

Las tablas se procesan en serie para que los diagnosticos de cada una queden
juntos en el log y para no solapar transacciones sobre las mismas filas.
"""
from __future__ import annotations

from enum import Enum
from typing import List, Mapping, Sequence

from loguru import logger

from instance_backfill.application.dto.backfill_dto import TablePassReport
from instance_backfill.application.services.update_planner import (
    build_update_plan,
    render_update_statements,
)
from instance_backfill.domain.entities.reconciliation import TargetTable
from instance_backfill.domain.repositories.book_repositories import ITargetStore


class ApplyState(str, Enum):
    IDLE = "idle"
    QUERY_MISSING = "query_missing"
    PLAN_BUILT = "plan_built"
    DRY_RUN_PREVIEW = "dry_run_preview"
    EXECUTED = "executed"
    REPORTED = "reported"


class UpdateApplier:
    """
    Aplica un mapa de candidatos (title -> id) a una lista de tablas.

    Uso:
        applier = UpdateApplier(store, really_run=False)
        reports = await applier.apply("safe", tables, safe_map)
    """

    def __init__(self, store: ITargetStore, *, really_run: bool = False) -> None:
        self._store = store
        self._really_run = really_run
        self.state = ApplyState.IDLE

    async def apply(
        self,
        pass_name: str,
        tables: Sequence[TargetTable],
        candidates: Mapping[str, str],
    ) -> List[TablePassReport]:
        """Recorre las tablas en orden, una a la vez."""
        reports: List[TablePassReport] = []
        for table in tables:
            reports.append(await self.apply_table(pass_name, table, candidates))
        return reports

    async def apply_table(
        self,
        pass_name: str,
        table: TargetTable,
        candidates: Mapping[str, str],
    ) -> TablePassReport:
        self.state = ApplyState.IDLE
        if not candidates:
            self.state = ApplyState.REPORTED
            return TablePassReport(table=table.qualified_name, pass_name=pass_name)

        self.state = ApplyState.QUERY_MISSING
        missing_titles = await self._store.fetch_titles_missing_id(table)

        plan = build_update_plan(table, candidates, missing_titles)
        self.state = ApplyState.PLAN_BUILT
        if plan.is_empty:
            logger.info(f"{table} [{pass_name}]: sin titulos pendientes")
            self.state = ApplyState.REPORTED
            return TablePassReport(table=table.qualified_name, pass_name=pass_name)

        logger.info(f"{table} [{pass_name}]: Num update queries = {len(plan)}")
        for statement in render_update_statements(plan):
            logger.debug(f"{table} [{pass_name}]: {statement}")

        before, after = await self._store.apply_update_plan(plan, really_run=self._really_run)
        self.state = ApplyState.EXECUTED if self._really_run else ApplyState.DRY_RUN_PREVIEW

        report = TablePassReport(
            table=table.qualified_name,
            pass_name=pass_name,
            planned_updates=len(plan),
            executed=self._really_run,
            rows_before=before.rows,
            rows_after=after.rows,
            titles_before=before.distinct_titles,
            titles_after=after.distinct_titles,
        )
        logger.info(
            f"{table} [{pass_name}]: NumProblemRows Before: {report.rows_before}, "
            f"NumProblemRows After: {report.rows_after}, NumUpdated={report.rows_updated}"
        )
        logger.info(
            f"{table} [{pass_name}]: NumDistinctProblemTitles Before: {report.titles_before}, "
            f"NumDistinctProblemTitles After: {report.titles_after}, NumUpdated={report.titles_updated}"
        )
        self.state = ApplyState.REPORTED
        return report
