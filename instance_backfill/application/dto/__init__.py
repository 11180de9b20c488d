"""
DTOs de la aplicacion.
"""
from instance_backfill.application.dto.backfill_dto import (
    AmbiguousTitlesReport,
    BackfillReport,
    TablePassReport,
)

__all__ = ["AmbiguousTitlesReport", "BackfillReport", "TablePassReport"]
