"""
Interfaces de los stores consumidos por el backfill.
Definen el contrato que debe cumplir cualquier implementación.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence, Set, Tuple

from instance_backfill.domain.entities.reconciliation import (
    NullCounts,
    TargetTable,
    UpdatePlan,
)


class IDocumentStore(ABC):
    """
    Interfaz del store documental (Parse Server).
    """

    @abstractmethod
    async def fetch_books(self) -> List[Dict[str, Any]]:
        """
        Obtiene todos los libros con su titulo e instance id.

        Returns:
            List[Dict[str, Any]]: Registros crudos ({"title", "bookInstanceId", ...})

        Raises:
            DocumentStoreError: si la respuesta no es 200 o no trae resultados
        """
        pass


class ITargetStore(ABC):
    """
    Interfaz del store relacional destino (Postgres, multiples schemas/tablas).
    Toda operacion fallida levanta RelationalStoreError.
    """

    @abstractmethod
    async def fetch_observation_rows(self, tables: Sequence[TargetTable]) -> List[Dict[str, Any]]:
        """
        Obtiene los pares (title, book_instance_id) no nulos de las tablas observadas.

        Returns:
            List[Dict[str, Any]]: Filas con claves "title" y "book_instance_id"
        """
        pass

    @abstractmethod
    async def fetch_target_titles(self, tables: Sequence[TargetTable]) -> Set[str]:
        """
        Obtiene todos los titulos no nulos presentes en cualquier tabla destino,
        tengan o no id.
        """
        pass

    @abstractmethod
    async def fetch_titles_with_id(self, tables: Sequence[TargetTable]) -> Set[str]:
        """
        Obtiene los titulos que tienen algun id no nulo en cualquier tabla destino,
        incluidas las de solo-update.
        """
        pass

    @abstractmethod
    async def fetch_titles_missing_id(self, table: TargetTable) -> Set[str]:
        """
        Obtiene los titulos que tienen id nulo en ESTA tabla.
        """
        pass

    @abstractmethod
    async def apply_update_plan(
        self,
        plan: UpdatePlan,
        *,
        really_run: bool,
    ) -> Tuple[NullCounts, NullCounts]:
        """
        Ejecuta (o simula) el plan entre dos consultas de diagnostico.

        Args:
            plan: Updates de una tabla
            really_run: False = se sustituye el batch por una lectura inocua

        Returns:
            Tuple[NullCounts, NullCounts]: conteos antes y despues
        """
        pass
