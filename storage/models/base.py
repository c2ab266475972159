"""
Base ORM Model and Mixins.

============================================================
PURPOSE
============================================================
Declarative base shared by the alert store tables.

============================================================
COMPONENTS
============================================================
- Base: declarative base with named constraints and a short repr
  for repository logs
- TimestampMixin: created_at / updated_at columns

============================================================
"""

from datetime import datetime

from sqlalchemy import DateTime, MetaData, func, inspect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# Stable constraint names so schema diffs match across SQLite and Postgres
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """
    Declarative base for the alert store.

    Database.create_all_tables() builds the schema from this
    base's metadata.
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }

    def __repr__(self) -> str:
        identity = inspect(self).identity
        key = identity[0] if identity and len(identity) == 1 else identity
        return f"<{type(self).__name__} id={key}>"


class TimestampMixin:
    """
    created_at / updated_at, set by the database (UTC).

    Usage:
        class NameAlert(Base, TimestampMixin):
            __tablename__ = "name_alerts"
    """

    created_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        comment="Row creation time",
    )

    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
        comment="Last update time",
    )
