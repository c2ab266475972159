"""
Alert Store Models.

============================================================
PURPOSE
============================================================
Durable records of what subscribers asked to be told about.

============================================================
TABLES
============================================================
- name_alerts: one subscription per (chat_id, target_name)
- block_height_triggers: one-shot scheduled milestones of a name alert
- block_height_alerts: standalone "tell me at height N" subscriptions
- processed_blocks: block watcher resume bookkeeping

============================================================
DATA LIFECYCLE
============================================================
- Triggers are created with did_fire = False
- did_fire only ever flips False -> True
- Fired triggers are never deleted except with their alert
- Deleting a name alert cascades to its triggers

============================================================
"""

from typing import Any, List, Optional

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storage.models.base import Base, TimestampMixin


class NameAlert(Base, TimestampMixin):
    """
    Subscription of one chat to one name.

    Not unique at the schema level; lookups assume one row per
    (chat_id, target_name).
    """

    __tablename__ = "name_alerts"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    chat_id: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Subscriber chat id that receives the notifications"
    )

    target_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Encoded name being watched"
    )

    triggers: Mapped[List["BlockHeightTrigger"]] = relationship(
        back_populates="alert",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="BlockHeightTrigger.block_height",
    )

    __table_args__ = (
        Index("ix_name_alerts_chat_target", "chat_id", "target_name"),
        Index("ix_name_alerts_target", "target_name"),
    )

    def __repr__(self) -> str:
        return f"<NameAlert id={self.id} chat_id={self.chat_id} target_name={self.target_name!r}>"


class BlockHeightTrigger(Base, TimestampMixin):
    """One scheduled milestone of a name alert."""

    __tablename__ = "block_height_triggers"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    alert_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("name_alerts.id", ondelete="CASCADE"),
        nullable=False,
    )

    block_height: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Height at which the trigger becomes due"
    )

    milestone_kind: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="Name lifecycle milestone reached at block_height"
    )

    did_fire: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Delivered already; never reset"
    )

    alert: Mapped["NameAlert"] = relationship(back_populates="triggers")

    __table_args__ = (
        Index("ix_block_height_triggers_due", "did_fire", "block_height"),
        Index("ix_block_height_triggers_alert", "alert_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<BlockHeightTrigger id={self.id} alert_id={self.alert_id} "
            f"{self.milestone_kind}@{self.block_height} did_fire={self.did_fire}>"
        )


class BlockHeightAlert(Base, TimestampMixin):
    """Standalone subscription to a block height, not tied to a name."""

    __tablename__ = "block_height_alerts"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    chat_id: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    block_height: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    alert_type: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Purpose of the alert, e.g. BLOCK_MINED"
    )

    did_fire: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    context: Mapped[Optional[Any]] = mapped_column(
        JSON,
        nullable=True,
        comment="Opaque payload handed back on delivery"
    )

    __table_args__ = (
        Index("ix_block_height_alerts_due", "did_fire", "block_height"),
        Index("ix_block_height_alerts_match", "chat_id", "block_height", "alert_type"),
    )

    def __repr__(self) -> str:
        return (
            f"<BlockHeightAlert id={self.id} chat_id={self.chat_id} "
            f"{self.alert_type}@{self.block_height} did_fire={self.did_fire}>"
        )


class ProcessedBlock(Base, TimestampMixin):
    """Block the watcher has fully processed."""

    __tablename__ = "processed_blocks"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    block_height: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )

    block_hash: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
    )
