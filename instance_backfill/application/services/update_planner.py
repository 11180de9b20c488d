"""
Planificacion de updates por tabla y render de SQL textual.

El plan de una tabla es la interseccion entre los candidatos de la pasada
(mapa seguro o mapa de placeholders) y los titulos que HOY tienen id nulo en
esa tabla. Asi no se pisan filas ya pobladas ni se generan updates no-op.

Cada update lleva la guarda "AND id IS NULL", lo que lo hace idempotente.

El render textual (literales con comillas simples duplicadas) solo se usa para
batches multi-sentencia y para la vista previa en logs; la ejecucion por
defecto usa sentencias parametrizadas (ver TargetTableRepository).
"""
from __future__ import annotations

from typing import Collection, List, Mapping

from instance_backfill.domain.entities.reconciliation import TargetTable, UpdatePlan


def escape_sql_literal(value: str) -> str:
    """Duplica cada comilla simple para embeber el valor en un literal SQL."""
    return value.replace("'", "''")


def quote_sql_literal(value: str) -> str:
    return f"'{escape_sql_literal(value)}'"


def parse_sql_literal(literal: str) -> str:
    """
    Inversa de quote_sql_literal.

    Raises:
        ValueError: si el texto no es un literal SQL simple valido
    """
    if len(literal) < 2 or literal[0] != "'" or literal[-1] != "'":
        raise ValueError(f"No es un literal SQL: {literal!r}")
    body = literal[1:-1]
    if body.replace("''", "").count("'"):
        raise ValueError(f"Literal SQL con comilla sin escapar: {literal!r}")
    return body.replace("''", "'")


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def qualified_table_sql(table: TargetTable) -> str:
    return f"{quote_identifier(table.schema)}.{quote_identifier(table.name)}"


def build_update_plan(
    table: TargetTable,
    candidates: Mapping[str, str],
    missing_titles: Collection[str],
) -> UpdatePlan:
    """
    Restringe los candidatos a los titulos con id nulo en la tabla.

    Args:
        table: Tabla destino
        candidates: title -> id propuesto para esta pasada
        missing_titles: Titulos con id nulo en esta tabla
    """
    missing = set(missing_titles)
    assignments = {
        title: instance_id
        for title, instance_id in sorted(candidates.items())
        if title in missing
    }
    return UpdatePlan(table=table, assignments=assignments)


def render_update_statement(table: TargetTable, title: str, instance_id: str) -> str:
    """UPDATE condicional para un titulo, con literales escapados."""
    id_col = quote_identifier(table.id_column)
    return (
        f"UPDATE {qualified_table_sql(table)} "
        f"SET {id_col} = {quote_sql_literal(instance_id)} "
        f"WHERE {quote_identifier(table.title_column)} = {quote_sql_literal(title)} "
        f"AND {id_col} IS NULL;"
    )


def render_update_statements(plan: UpdatePlan) -> List[str]:
    return [
        render_update_statement(plan.table, title, instance_id)
        for title, instance_id in plan.assignments.items()
    ]


def render_null_counts_query(table: TargetTable) -> str:
    """Diagnostico: filas con id nulo y titulos distintos con id nulo."""
    return (
        f"SELECT COUNT(*) AS cnt, "
        f"COUNT(DISTINCT {quote_identifier(table.title_column)}) AS count_distinct_problem_titles "
        f"FROM {qualified_table_sql(table)} "
        f"WHERE {quote_identifier(table.id_column)} IS NULL;"
    )


def render_dry_run_statement(table: TargetTable) -> str:
    """Lectura inocua que reemplaza el batch cuando no se ejecuta de verdad."""
    return f"SELECT 1 FROM {qualified_table_sql(table)} LIMIT 1;"


def render_textual_batch(plan: UpdatePlan, *, really_run: bool) -> str:
    """
    Batch multi-sentencia: conteo antes, updates (o lectura inocua), conteo despues.

    El primer y el ultimo resultado del batch son siempre los conteos.
    """
    counts = render_null_counts_query(plan.table)
    if really_run:
        body = " ".join(render_update_statements(plan))
    else:
        body = render_dry_run_statement(plan.table)
    return f"{counts} {body} {counts}"
