"""
Backfill de book_instance_id para libros de Bloom.

Reconcilia el instance id de cada titulo entre Parse Server y las tablas de
eventos de Bloom Reader en Postgres.
"""

__version__ = "1.0.0"
