"""
Casos de uso de la aplicacion.
"""
from .backfill_use_cases import BackfillUseCases
from .update_applier import ApplyState, UpdateApplier

__all__ = ["BackfillUseCases", "ApplyState", "UpdateApplier"]
