"""
Cliente minimo de Parse Server (REST, httpx asincrono).

Solo se consulta la clase "books" pidiendo los campos necesarios para el
backfill. Sin reintentos: cualquier fallo de transporte, status != 200 o
respuesta sin "results" levanta DocumentStoreError.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import httpx
from loguru import logger

from instance_backfill.domain.repositories.book_repositories import IDocumentStore
from instance_backfill.shared.exceptions import DocumentStoreError

BOOK_KEYS: tuple[str, ...] = ("objectId", "bookInstanceId", "title")


@dataclass(frozen=True)
class ParseCredentials:
    application_id: str
    session_token: Optional[str] = None

    def headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "text/json",
            "X-Parse-Application-Id": self.application_id,
        }
        if self.session_token:
            headers["X-Parse-Session-Token"] = self.session_token
        return headers


@dataclass(frozen=True)
class ParseResponse:
    status: int
    results: List[Dict[str, Any]] = field(default_factory=list)


class ParseServerClient(IDocumentStore):
    """
    Cliente HTTP de Parse Server.

    Importante:
    - limit se envia siempre explicito: sin el Parse trunca a 100 resultados.
    - timeout_s=None significa sin timeout.
    """

    def __init__(
        self,
        credentials: ParseCredentials,
        *,
        base_url: str,
        limit: int = 1_000_000,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._creds = credentials
        self._base_url = base_url.rstrip("/")
        self._limit = limit
        self._timeout_s = timeout_s
        self._transport = transport

    async def fetch(self, keys: Sequence[str], limit: int, class_name: str = "books") -> ParseResponse:
        """
        GET {base_url}/classes/{class_name}?keys=...&limit=...

        Raises:
            DocumentStoreError: fallo de transporte, status != 200 o sin lista de results
        """
        url = f"{self._base_url}/classes/{class_name}"
        params = {"keys": ",".join(keys), "limit": limit}

        try:
            async with httpx.AsyncClient(
                headers=self._creds.headers(),
                timeout=self._timeout_s,
                transport=self._transport,
            ) as client:
                resp = await client.get(url, params=params)
        except httpx.HTTPError as e:
            raise DocumentStoreError(str(e) or type(e).__name__, cause=e) from e

        if resp.status_code != 200:
            raise DocumentStoreError(
                f"Parse request returned with problems. Status was {resp.status_code}"
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise DocumentStoreError("la respuesta no es JSON valido", cause=e) from e

        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list):
            raise DocumentStoreError(
                f"Parse request returned with problems. Status was {resp.status_code} (sin 'results')"
            )

        return ParseResponse(status=resp.status_code, results=results)

    async def fetch_books(self) -> List[Dict[str, Any]]:
        response = await self.fetch(BOOK_KEYS, self._limit)
        logger.info(f"Num Results from Parse: {len(response.results)}")
        if len(response.results) >= self._limit:
            logger.warning(
                f"Parse devolvio {len(response.results)} resultados (= limit). "
                f"Es probable que falten libros: aumenta PARSE_QUERY_LIMIT."
            )
        return [r for r in response.results if isinstance(r, dict)]
