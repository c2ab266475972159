"""
Repository Layer Package.

============================================================
PURPOSE
============================================================
The Repository Layer is the ONLY gateway to the alert store.
All database access MUST go through repository classes.

============================================================
ARCHITECTURE PRINCIPLES
============================================================
1. Session Injection: Sessions are injected, not created internally
2. Explicit Methods: No generic 'execute', clear method names
3. No Commits: The caller's transaction scope owns commit/rollback
4. Exception Handling: All DB errors wrapped in repository exceptions

============================================================
REPOSITORIES
============================================================
- NameAlertRepository
- BlockHeightTriggerRepository
- BlockHeightAlertRepository
- ProcessedBlockRepository

============================================================
"""

from storage.repositories.alerts import (
    BlockHeightAlertRepository,
    BlockHeightTriggerRepository,
    NameAlertRepository,
    ProcessedBlockRepository,
)
from storage.repositories.base import BaseRepository
from storage.repositories.exceptions import (
    ConnectionError,
    IntegrityError,
    QueryError,
    RepositoryException,
)

__all__ = [
    "BaseRepository",
    "BlockHeightAlertRepository",
    "BlockHeightTriggerRepository",
    "NameAlertRepository",
    "ProcessedBlockRepository",
    "ConnectionError",
    "IntegrityError",
    "QueryError",
    "RepositoryException",
]
