"""
Servicios de aplicacion.

Logica pura de reconciliacion (sin I/O): indices por titulo, clasificacion,
cobertura de nulos, ids placeholder y planificacion de updates.
"""
from instance_backfill.application.services.title_index import (
    build_title_index,
    collect_observations,
    merge_title_indexes,
)
from instance_backfill.application.services.safety_classifier import classify_titles
from instance_backfill.application.services.null_coverage import resolve_null_coverage
from instance_backfill.application.services.placeholder_ids import (
    PLACEHOLDER_PREFIX,
    assign_placeholder_ids,
    generate_placeholder_id,
    is_placeholder_id,
)
from instance_backfill.application.services.update_planner import (
    build_update_plan,
    escape_sql_literal,
    parse_sql_literal,
    render_textual_batch,
    render_update_statements,
)

__all__ = [
    "build_title_index",
    "collect_observations",
    "merge_title_indexes",
    "classify_titles",
    "resolve_null_coverage",
    "PLACEHOLDER_PREFIX",
    "assign_placeholder_ids",
    "generate_placeholder_id",
    "is_placeholder_id",
    "build_update_plan",
    "escape_sql_literal",
    "parse_sql_literal",
    "render_textual_batch",
    "render_update_statements",
]
