"""
Implementaciones de repositorios.
"""
from instance_backfill.infrastructure.repositories.target_table_repository import (
    TargetTableRepository,
)

__all__ = ["TargetTableRepository"]
