"""
Configuración de fixtures para pytest.

Los stores se reemplazan por dobles en memoria: un Parse Server que devuelve
una lista fija de libros y un Postgres con filas por tabla que aplica los
updates con la misma guarda "id IS NULL" que el SQL real.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

import pytest
from loguru import logger

from instance_backfill.domain.entities.reconciliation import NullCounts, TargetTable, UpdatePlan
from instance_backfill.domain.repositories.book_repositories import IDocumentStore, ITargetStore


class FakeDocumentStore(IDocumentStore):
    """Parse Server en memoria."""

    def __init__(self, books: Optional[List[Dict[str, Any]]] = None, error: Optional[Exception] = None):
        self.books = books or []
        self.error = error
        self.calls = 0

    async def fetch_books(self) -> List[Dict[str, Any]]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.books)


class InMemoryTargetStore(ITargetStore):
    """
    Postgres en memoria: TargetTable -> lista de filas {"title", "book_instance_id"}.
    """

    def __init__(self, rows_by_table: Dict[TargetTable, List[Dict[str, Any]]]):
        self.rows_by_table = {table: [dict(r) for r in rows] for table, rows in rows_by_table.items()}
        self.applied_plans: List[Tuple[UpdatePlan, bool]] = []
        self.missing_queries: List[TargetTable] = []

    @property
    def tables(self) -> List[TargetTable]:
        return list(self.rows_by_table)

    def ids_for(self, table: TargetTable, title: str) -> List[Optional[str]]:
        return [r["book_instance_id"] for r in self.rows_by_table[table] if r["title"] == title]

    async def fetch_observation_rows(self, tables: Sequence[TargetTable]) -> List[Dict[str, Any]]:
        pairs = {
            (r["title"], r["book_instance_id"])
            for t in tables
            if t.observed
            for r in self.rows_by_table.get(t, [])
            if r["title"] is not None and r["book_instance_id"] is not None
        }
        return [{"title": title, "book_instance_id": iid} for title, iid in sorted(pairs)]

    async def fetch_target_titles(self, tables: Sequence[TargetTable]) -> Set[str]:
        return {
            r["title"]
            for t in tables
            for r in self.rows_by_table.get(t, [])
            if r["title"] is not None
        }

    async def fetch_titles_with_id(self, tables: Sequence[TargetTable]) -> Set[str]:
        return {
            r["title"]
            for t in tables
            for r in self.rows_by_table.get(t, [])
            if r["title"] is not None and r["book_instance_id"] is not None
        }

    async def fetch_titles_missing_id(self, table: TargetTable) -> Set[str]:
        self.missing_queries.append(table)
        return {
            r["title"]
            for r in self.rows_by_table.get(table, [])
            if r["title"] is not None and r["book_instance_id"] is None
        }

    def _null_counts(self, table: TargetTable) -> NullCounts:
        nulls = [r for r in self.rows_by_table.get(table, []) if r["book_instance_id"] is None]
        return NullCounts(rows=len(nulls), distinct_titles=len({r["title"] for r in nulls}))

    async def apply_update_plan(self, plan: UpdatePlan, *, really_run: bool) -> Tuple[NullCounts, NullCounts]:
        self.applied_plans.append((plan, really_run))
        before = self._null_counts(plan.table)
        if really_run:
            for row in self.rows_by_table.get(plan.table, []):
                if row["book_instance_id"] is None and row["title"] in plan.assignments:
                    row["book_instance_id"] = plan.assignments[row["title"]]
        after = self._null_counts(plan.table)
        return before, after


@pytest.fixture
def pages_read() -> TargetTable:
    return TargetTable(schema="bloomreadertest", name="pages_read")


@pytest.fixture
def comprehension() -> TargetTable:
    return TargetTable(schema="bloomreadertest", name="comprehension")


@pytest.fixture
def questions_correct() -> TargetTable:
    return TargetTable(schema="bloomreadertest", name="questions_correct", observed=False)


@pytest.fixture
def make_target_store():
    """Factory de InMemoryTargetStore."""
    def _make(rows_by_table: Dict[TargetTable, List[Tuple[Optional[str], Optional[str]]]]) -> InMemoryTargetStore:
        return InMemoryTargetStore({
            table: [{"title": title, "book_instance_id": iid} for title, iid in rows]
            for table, rows in rows_by_table.items()
        })
    return _make


@pytest.fixture
def make_document_store():
    """Factory de FakeDocumentStore."""
    def _make(books: Optional[List[Dict[str, Any]]] = None, error: Optional[Exception] = None) -> FakeDocumentStore:
        return FakeDocumentStore(books=books, error=error)
    return _make


@pytest.fixture
def log_messages():
    """Captura los mensajes de loguru emitidos durante el test."""
    messages: List[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
