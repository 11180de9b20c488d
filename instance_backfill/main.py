"""
Punto de entrada: backfill de book_instance_id (Parse Server + Postgres).

Uso recomendado:
  - Ejecutar como job puntual (no hay flags: todo se configura por entorno).
  - Primero en modo simulacion (BACKFILL_REALLY_RUN=false, default) y revisar
    los conteos antes/despues de cada tabla.

Variables de entorno principales (ver core/config.py):
  - BACKFILL_ENVIRONMENT (local | dev | prod)
  - BACKFILL_REALLY_RUN
  - PARSE_APPLICATION_ID
  - DATABASE_URL (o DATABASE_HOST/PORT/USER/PASSWORD/NAME)

Ejecución:
  instance-backfill
  python -m instance_backfill.main
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger
from pydantic import ValidationError

from instance_backfill.application.dto.backfill_dto import BackfillReport
from instance_backfill.application.use_cases.backfill_use_cases import BackfillUseCases
from instance_backfill.core.config import Settings, get_settings
from instance_backfill.core.logging import configure_logging
from instance_backfill.infrastructure.database.postgres_connection import PostgresConnection
from instance_backfill.infrastructure.external.parse_server.parse_client import (
    ParseCredentials,
    ParseServerClient,
)
from instance_backfill.infrastructure.repositories.target_table_repository import (
    TargetTableRepository,
)
from instance_backfill.shared.exceptions import AppException


def build_parse_client(settings: Settings) -> ParseServerClient:
    credentials = ParseCredentials(
        application_id=settings.parse_application_id,
        session_token=settings.PARSE_SESSION_TOKEN or None,
    )
    return ParseServerClient(
        credentials,
        base_url=settings.parse_url,
        limit=settings.PARSE_QUERY_LIMIT,
        timeout_s=settings.PARSE_TIMEOUT_S,
    )


async def run_backfill(settings: Settings, db: Optional[PostgresConnection] = None) -> BackfillReport:
    """
    Construye los colaboradores desde settings y ejecuta una corrida.

    El pool de Postgres se abre aqui y se cierra siempre, aunque la corrida falle.
    """
    tables = settings.target_tables()
    parse_client = build_parse_client(settings)
    db = db or PostgresConnection(
        settings.effective_database_url,
        min_size=settings.DB_POOL_MIN_SIZE,
        max_size=settings.DB_POOL_MAX_SIZE,
    )
    report_path = (
        Path(settings.BACKFILL_AMBIGUOUS_REPORT_PATH) if settings.BACKFILL_AMBIGUOUS_REPORT_PATH else None
    )

    async with db:
        use_cases = BackfillUseCases(
            document_store=parse_client,
            target_store=TargetTableRepository(db, batch_mode=settings.BACKFILL_BATCH_MODE),
            tables=tables,
            environment=settings.BACKFILL_ENVIRONMENT.value,
            really_run=settings.BACKFILL_REALLY_RUN,
            ambiguous_report_path=report_path,
        )
        return await use_cases.backfill()


def main() -> int:
    load_dotenv(Path.cwd() / ".env", override=False)

    try:
        settings = get_settings()
    except ValidationError as e:
        configure_logging()
        logger.error(f"Configuracion invalida: {e}")
        return 1
    configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)

    try:
        asyncio.run(run_backfill(settings))
    except AppException as e:
        logger.error(f"Backfill abortado [{e.error_code}]: {e.message}")
        return 1
    except Exception:
        logger.exception("Backfill abortado por un error inesperado:")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
