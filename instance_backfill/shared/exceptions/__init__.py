"""
Excepciones de la aplicación.
"""
from instance_backfill.shared.exceptions.base import AppException
from instance_backfill.shared.exceptions.backfill import (
    ConfigurationError,
    UpstreamError,
    DocumentStoreError,
    RelationalStoreError,
)

__all__ = [
    "AppException",
    "ConfigurationError",
    "UpstreamError",
    "DocumentStoreError",
    "RelationalStoreError",
]
