"""
Storage Package.

This package owns the alert store: the storage handle, the ORM
models and the repositories that are the only way to reach them.

Modules:
- database: Storage handle (open_database / Database.close)
- models/: ORM models
- repositories/: Data access layer
"""

from storage.database import Database, DatabaseConfig, close_database, open_database

__all__ = [
    "Database",
    "DatabaseConfig",
    "close_database",
    "open_database",
]
