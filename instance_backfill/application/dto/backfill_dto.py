"""
DTOs del resultado de una corrida de backfill.
"""
from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel, Field


class TablePassReport(BaseModel):
    """
    Resultado de una pasada (safe / placeholder) sobre una tabla.

    Con really_run=False los conteos antes y despues son iguales.
    """

    table: str = Field(..., description="schema.tabla")
    pass_name: str = Field(..., description="safe o placeholder")
    planned_updates: int = Field(0, description="Updates que sobrevivieron al filtro por tabla")
    executed: bool = Field(False, description="True si el batch real se ejecuto")
    rows_before: int = Field(0, description="Filas con id nulo antes")
    rows_after: int = Field(0, description="Filas con id nulo despues")
    titles_before: int = Field(0, description="Titulos distintos con id nulo antes")
    titles_after: int = Field(0, description="Titulos distintos con id nulo despues")

    @property
    def rows_updated(self) -> int:
        return self.rows_before - self.rows_after

    @property
    def titles_updated(self) -> int:
        return self.titles_before - self.titles_after


class AmbiguousTitlesReport(BaseModel):
    """Titulos ambiguos para resolucion manual por un operador."""

    generated_at: datetime
    environment: str
    titles: Dict[str, List[str]] = Field(default_factory=dict, description="titulo -> ids distintos")


class BackfillReport(BaseModel):
    """Resumen de una corrida completa."""

    environment: str
    really_run: bool
    document_store_titles: int = 0
    relational_store_titles: int = 0
    merged_titles: int = 0
    safe_titles: int = 0
    ambiguous_titles: List[str] = Field(default_factory=list)
    placeholder_ids: Dict[str, str] = Field(default_factory=dict, description="titulo -> id generado")
    safe_pass: List[TablePassReport] = Field(default_factory=list)
    placeholder_pass: List[TablePassReport] = Field(default_factory=list)
