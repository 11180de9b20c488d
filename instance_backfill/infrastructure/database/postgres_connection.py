"""
Conexion a Postgres (psycopg v3 + psycopg_pool).

El pool se construye explicitamente y se usa como context manager asincrono:
se abre al inicio de la corrida y se cierra en cualquier salida, incluso ante
errores. No hay singleton global.

Todo psycopg.Error se envuelve en RelationalStoreError.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import psycopg
from loguru import logger
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool, PoolTimeout

from instance_backfill.shared.exceptions import RelationalStoreError


@dataclass(frozen=True)
class StatementResult:
    """Resultado de una sentencia dentro de un batch multi-sentencia."""

    rowcount: int
    rows: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def first_row(self) -> Optional[Dict[str, Any]]:
        return self.rows[0] if self.rows else None


class PostgresConnection:
    """
    Handle del pool de conexiones.

    Uso:
        async with PostgresConnection(dsn) as db:
            rows = await db.execute_query("SELECT 1 AS x")
    """

    def __init__(
        self,
        dsn: str,
        *,
        min_size: int = 1,
        max_size: int = 4,
        pool: Optional[AsyncConnectionPool] = None,
    ) -> None:
        self._dsn = dsn
        self._min_size = min_size
        self._max_size = max(min_size, max_size)
        self._pool = pool

    async def __aenter__(self) -> "PostgresConnection":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    async def open(self) -> None:
        """Crea el pool y espera a que tenga min_size conexiones."""
        if self._pool is not None:
            return

        pool = AsyncConnectionPool(
            self._dsn,
            min_size=self._min_size,
            max_size=self._max_size,
            kwargs={"row_factory": dict_row},
            open=False,
        )
        try:
            await pool.open(wait=True)
        except (psycopg.Error, PoolTimeout) as e:
            await pool.close()
            raise RelationalStoreError(
                f"{e}. Verifica que DATABASE_URL sea accesible desde donde ejecutas el job.",
                cause=e,
            ) from e
        self._pool = pool
        logger.debug(f"Pool de Postgres abierto (min={self._min_size}, max={self._max_size})")

    async def close(self) -> None:
        """Cierra el pool. Es seguro llamarlo mas de una vez."""
        if self._pool is None:
            return
        pool, self._pool = self._pool, None
        await pool.close()
        logger.debug("Pool de Postgres cerrado")

    def _require_pool(self) -> AsyncConnectionPool:
        if self._pool is None:
            raise RelationalStoreError("el pool de conexiones no esta abierto")
        return self._pool

    @asynccontextmanager
    async def cursor(self) -> AsyncIterator[psycopg.AsyncCursor]:
        """
        Cursor sobre una conexion del pool.

        Todo lo ejecutado dentro del bloque es una transaccion: commit al
        salir sin errores, rollback si hay excepcion.
        """
        pool = self._require_pool()
        try:
            async with pool.connection() as conn:
                async with conn.cursor() as cur:
                    yield cur
        except psycopg.Error as e:
            raise RelationalStoreError(str(e), cause=e) from e

    async def execute_query(
        self,
        query: Any,
        params: Optional[Sequence[Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Ejecuta una sentencia y retorna sus filas (lista vacia si no produce filas).
        """
        async with self.cursor() as cur:
            await cur.execute(query, params)
            if cur.description is None:
                return []
            return await cur.fetchall()

    async def execute_multi_statement_query(self, sql: str) -> List[StatementResult]:
        """
        Envia varias sentencias en un solo round trip.

        psycopg solo permite multiples sentencias sin parametros: los valores
        deben venir ya escapados en el texto.

        Returns:
            List[StatementResult]: un resultado por sentencia, en orden
        """
        results: List[StatementResult] = []
        async with self.cursor() as cur:
            await cur.execute(sql)
            while True:
                rows = await cur.fetchall() if cur.description is not None else []
                results.append(StatementResult(rowcount=cur.rowcount, rows=list(rows)))
                if not cur.nextset():
                    break
        return results
