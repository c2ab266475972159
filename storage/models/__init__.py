"""
Storage Models Package.

ORM models for the alert store.

============================================================
MODEL ORGANIZATION
============================================================

Base (base.py)
- Base
- TimestampMixin

Alerts (alerts.py)
- NameAlert
- BlockHeightTrigger
- BlockHeightAlert
- ProcessedBlock

============================================================
"""

from storage.models.base import Base, TimestampMixin
from storage.models.alerts import (
    BlockHeightAlert,
    BlockHeightTrigger,
    NameAlert,
    ProcessedBlock,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "BlockHeightAlert",
    "BlockHeightTrigger",
    "NameAlert",
    "ProcessedBlock",
]
