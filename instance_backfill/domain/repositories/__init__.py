"""
Interfaces de repositorios del dominio.
"""
from instance_backfill.domain.repositories.book_repositories import (
    IDocumentStore,
    ITargetStore,
)

__all__ = ["IDocumentStore", "ITargetStore"]
