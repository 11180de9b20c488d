"""
Cliente de Parse Server (store documental de libros de Bloom Library).
"""
from instance_backfill.infrastructure.external.parse_server.parse_client import (
    BOOK_KEYS,
    ParseCredentials,
    ParseResponse,
    ParseServerClient,
)

__all__ = ["BOOK_KEYS", "ParseCredentials", "ParseResponse", "ParseServerClient"]
