"""
Acceso a base de datos (Postgres).
"""
from instance_backfill.infrastructure.database.postgres_connection import (
    PostgresConnection,
    StatementResult,
)

__all__ = ["PostgresConnection", "StatementResult"]
