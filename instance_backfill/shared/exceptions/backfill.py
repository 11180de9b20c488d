"""
Excepciones del pipeline de backfill.

Taxonomia:
- ConfigurationError: settings invalidos (fatal antes de tocar los stores).
- DocumentStoreError: fallo de Parse Server (status != 200, respuesta mal formada, transporte).
- RelationalStoreError: cualquier error devuelto por Postgres.

Ninguna se reintenta: cualquiera aborta la corrida completa.
"""
from typing import Optional

from instance_backfill.shared.exceptions.base import AppException


class ConfigurationError(AppException):
    """Excepción cuando la configuracion del backfill no es valida."""

    def __init__(self, message: str, setting: Optional[str] = None):
        details = {"setting": setting} if setting else None
        super().__init__(
            message=message,
            error_code="CONFIG_ERROR",
            details=details
        )


class UpstreamError(AppException):
    """Excepción base para fallos de un store externo."""

    PREFIX = ""

    def __init__(self, message: str, error_code: str, cause: Optional[BaseException] = None):
        details = {"cause": str(cause)} if cause is not None else None
        super().__init__(
            message=f"{self.PREFIX}{message}",
            error_code=error_code,
            details=details
        )


class DocumentStoreError(UpstreamError):
    """Excepción cuando falla la consulta a Parse Server."""

    PREFIX = "Parse request failed: "

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, error_code="DOCUMENT_STORE_ERROR", cause=cause)


class RelationalStoreError(UpstreamError):
    """Excepción cuando falla una sentencia contra Postgres."""

    PREFIX = "Postgresql request failed: "

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, error_code="RELATIONAL_STORE_ERROR", cause=cause)
