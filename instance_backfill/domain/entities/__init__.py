"""
Entidades del dominio.
"""
from instance_backfill.domain.entities.reconciliation import (
    Classification,
    NullCounts,
    Observation,
    PlaceholderAssignment,
    TargetTable,
    TitleIdIndex,
    UpdatePlan,
)

__all__ = [
    "Classification",
    "NullCounts",
    "Observation",
    "PlaceholderAssignment",
    "TargetTable",
    "TitleIdIndex",
    "UpdatePlan",
]
