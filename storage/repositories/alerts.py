"""
Alert Store Repositories.

============================================================
PURPOSE
============================================================
Durable access to name alerts, their block height triggers,
standalone block height alerts, and processed block bookkeeping.

============================================================
DATA LIFECYCLE
============================================================
- Mutability: triggers and block height alerts only ever flip
  did_fire False -> True
- Deletes touch unfired rows only, except alert deletion which
  cascades to every trigger of the alert

============================================================
REPOSITORIES
============================================================
- NameAlertRepository: subscriptions by (chat_id, target_name)
- BlockHeightTriggerRepository: scheduled milestones, due sets
- BlockHeightAlertRepository: standalone height alerts, dedup
- ProcessedBlockRepository: watcher resume point

============================================================
"""

import json
from typing import Any, Iterable, List, Optional, Sequence, Set, Tuple

from sqlalchemy import delete, distinct, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError, ValidationError
from storage.models.alerts import (
    BlockHeightAlert,
    BlockHeightTrigger,
    NameAlert,
    ProcessedBlock,
)
from storage.repositories.base import BaseRepository


# =============================================================
# INPUT CHECKS
# =============================================================


def _require_chat_id(chat_id: Any) -> int:
    if isinstance(chat_id, bool) or not isinstance(chat_id, int):
        raise ValidationError("chat_id", "must be an integer", chat_id)
    return chat_id


def _require_block_height(block_height: Any) -> int:
    if isinstance(block_height, bool) or not isinstance(block_height, int):
        raise ValidationError("block_height", "must be an integer", block_height)
    if block_height < 0:
        raise ValidationError("block_height", "must not be negative", block_height)
    return block_height


def _require_text(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, "must be a non-empty string", value)
    return value


def _tag_value(tag: Any) -> Any:
    """Plain value of a str-Enum member; anything else unchanged."""
    return getattr(tag, "value", tag)


class NameAlertRepository(BaseRepository[NameAlert]):
    """
    Repository for name alert subscriptions.

    Lookups assume at most one alert per (chat_id, target_name);
    uniqueness is the caller's concern.
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session, NameAlert, "NameAlertRepository")

    def create(self, chat_id: int, target_name: str) -> NameAlert:
        """
        Create a name alert without triggers.

        Raises:
            ValidationError: If chat_id or target_name is malformed
        """
        entity = NameAlert(
            chat_id=_require_chat_id(chat_id),
            target_name=_require_text("target_name", target_name),
        )
        return self._add(entity)

    def add_triggers(
        self,
        alert_id: int,
        milestones: Iterable[Tuple[Any, int]],
    ) -> List[BlockHeightTrigger]:
        """
        Schedule one unfired trigger per (milestone_kind, block_height).

        Args:
            alert_id: Owning alert id
            milestones: Pairs of milestone kind and absolute height

        Returns:
            Created triggers
        """
        triggers = [
            BlockHeightTrigger(
                alert_id=alert_id,
                milestone_kind=_require_text("milestone_kind", _tag_value(kind)),
                block_height=_require_block_height(block_height),
                did_fire=False,
            )
            for kind, block_height in milestones
        ]
        return self._add_all(triggers)

    def get_by_id(self, alert_id: int) -> Optional[NameAlert]:
        return self._get_by_id(alert_id)

    def get(self, chat_id: int, target_name: str) -> Optional[NameAlert]:
        """Get the alert of a chat for a name, if any."""
        stmt = (
            select(NameAlert)
            .where(
                NameAlert.chat_id == chat_id,
                NameAlert.target_name == target_name,
            )
            .order_by(NameAlert.id)
        )
        return self._execute_scalar(stmt)

    def get_or_raise(self, chat_id: int, target_name: str) -> NameAlert:
        """
        Raises:
            NotFoundError: If the chat has no alert for the name
        """
        alert = self.get(chat_id, target_name)
        if alert is None:
            raise NotFoundError("NameAlert", chat_id=chat_id, target_name=target_name)
        return alert

    def exists(self, chat_id: int, target_name: str) -> bool:
        return self._count(
            NameAlert.chat_id == chat_id,
            NameAlert.target_name == target_name,
        ) > 0

    def delete(self, chat_id: int, target_name: str) -> int:
        """
        Delete every alert of a chat for a name, with their triggers.

        Returns:
            Number of alerts deleted
        """
        stmt = select(NameAlert).where(
            NameAlert.chat_id == chat_id,
            NameAlert.target_name == target_name,
        )
        alerts = self._execute_query(stmt)
        for alert in alerts:
            self._delete(alert)
        if alerts:
            self._logger.info(
                f"Deleted {len(alerts)} alert(s) chat_id={chat_id} target_name={target_name}"
            )
        return len(alerts)

    def list_target_names(self, chat_id: int) -> List[str]:
        """Names watched by one chat, in subscription order."""
        try:
            stmt = (
                select(NameAlert.target_name)
                .where(NameAlert.chat_id == chat_id)
                .order_by(NameAlert.id)
            )
            return list(self._session.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            self._handle_db_error(e, "list_target_names", {"chat_id": chat_id})
            raise

    def distinct_target_names(self) -> Set[str]:
        """Every name watched by at least one chat."""
        try:
            stmt = select(NameAlert.target_name).distinct()
            return set(self._session.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            self._handle_db_error(e, "distinct_target_names")
            raise

    def find_by_target_names(self, target_names: Iterable[str]) -> List[NameAlert]:
        """All alerts on any of the given names, ordered by id."""
        names = list(target_names)
        if not names:
            return []
        stmt = (
            select(NameAlert)
            .where(NameAlert.target_name.in_(names))
            .order_by(NameAlert.id)
        )
        return self._execute_query(stmt)

    def find_by_target_name(self, target_name: str) -> List[NameAlert]:
        return self.find_by_target_names([target_name])

    def count(self) -> int:
        return self._count()

    def count_unique_chats(self) -> int:
        """Number of distinct chats holding at least one name alert."""
        try:
            stmt = select(func.count(distinct(NameAlert.chat_id)))
            return self._session.execute(stmt).scalar() or 0
        except SQLAlchemyError as e:
            self._handle_db_error(e, "count_unique_chats")
            raise


class BlockHeightTriggerRepository(BaseRepository[BlockHeightTrigger]):
    """
    Repository for scheduled name alert milestones.

    ============================================================
    INVARIANTS
    ============================================================
    - Fired triggers are never updated or deleted here
    - Only unfired triggers strictly above a height are replaced

    ============================================================
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session, BlockHeightTrigger, "BlockHeightTriggerRepository")

    def list_unfired_for_alert(self, alert_id: int) -> List[BlockHeightTrigger]:
        """Unfired triggers of an alert, lowest height first."""
        stmt = (
            select(BlockHeightTrigger)
            .where(
                BlockHeightTrigger.alert_id == alert_id,
                BlockHeightTrigger.did_fire.is_(False),
            )
            .order_by(BlockHeightTrigger.block_height, BlockHeightTrigger.id)
        )
        return self._execute_query(stmt)

    def list_for_alert(self, alert_id: int) -> List[BlockHeightTrigger]:
        """Every trigger of an alert, fired or not."""
        stmt = (
            select(BlockHeightTrigger)
            .where(BlockHeightTrigger.alert_id == alert_id)
            .order_by(BlockHeightTrigger.block_height, BlockHeightTrigger.id)
        )
        return self._execute_query(stmt)

    def find_due(self, block_height: int) -> List[Tuple[BlockHeightTrigger, int, str]]:
        """
        Unfired triggers at or below a height, with their alert's chat and name.

        Returns:
            (trigger, chat_id, target_name) rows ordered by trigger id
        """
        try:
            stmt = (
                select(BlockHeightTrigger, NameAlert.chat_id, NameAlert.target_name)
                .join(NameAlert, BlockHeightTrigger.alert_id == NameAlert.id)
                .where(
                    BlockHeightTrigger.did_fire.is_(False),
                    BlockHeightTrigger.block_height <= block_height,
                )
                .order_by(BlockHeightTrigger.id)
            )
            return [tuple(row) for row in self._session.execute(stmt).all()]
        except SQLAlchemyError as e:
            self._handle_db_error(e, "find_due", {"block_height": block_height})
            raise

    def delete_future_unfired(self, alert_id: int, block_height: int) -> int:
        """
        Delete unfired triggers of an alert scheduled strictly after a height.

        Returns:
            Number of triggers deleted
        """
        stmt = delete(BlockHeightTrigger).where(
            BlockHeightTrigger.alert_id == alert_id,
            BlockHeightTrigger.did_fire.is_(False),
            BlockHeightTrigger.block_height > block_height,
        ).execution_options(synchronize_session="fetch")
        return self._execute_write(stmt, "delete_future_unfired")

    def mark_fired(self, trigger_ids: Sequence[int]) -> int:
        """
        Flip did_fire on the given unfired triggers.

        Returns:
            Number of triggers updated
        """
        if not trigger_ids:
            return 0
        stmt = (
            update(BlockHeightTrigger)
            .where(
                BlockHeightTrigger.id.in_(list(trigger_ids)),
                BlockHeightTrigger.did_fire.is_(False),
            )
            .values(did_fire=True)
            .execution_options(synchronize_session="fetch")
        )
        return self._execute_write(stmt, "mark_fired")

    def count_unfired(self) -> int:
        return self._count(BlockHeightTrigger.did_fire.is_(False))


class BlockHeightAlertRepository(BaseRepository[BlockHeightAlert]):
    """Repository for standalone block height alerts."""

    def __init__(self, session: Session) -> None:
        super().__init__(session, BlockHeightAlert, "BlockHeightAlertRepository")

    def count_unfired_matching(
        self,
        chat_id: int,
        block_height: int,
        alert_type: str,
    ) -> int:
        return self._count(
            BlockHeightAlert.chat_id == chat_id,
            BlockHeightAlert.block_height == block_height,
            BlockHeightAlert.alert_type == _tag_value(alert_type),
            BlockHeightAlert.did_fire.is_(False),
        )

    def create(
        self,
        chat_id: int,
        block_height: int,
        alert_type: str,
        context: Optional[Any] = None,
        enforce_unique: bool = False,
    ) -> Optional[BlockHeightAlert]:
        """
        Create a block height alert.

        Args:
            chat_id: Subscriber chat id
            block_height: Height to alert at
            alert_type: Purpose tag, e.g. BLOCK_MINED
            context: JSON-serializable payload returned on delivery
            enforce_unique: Skip creation when an unfired match exists

        Returns:
            Created alert, or None when an unfired duplicate exists

        Raises:
            ValidationError: If any field is malformed
        """
        chat_id = _require_chat_id(chat_id)
        block_height = _require_block_height(block_height)
        alert_type = _require_text("alert_type", _tag_value(alert_type))
        if context is not None:
            try:
                json.dumps(context)
            except (TypeError, ValueError) as e:
                raise ValidationError("context", f"not JSON serializable: {e}") from e

        if enforce_unique and self.count_unfired_matching(chat_id, block_height, alert_type) > 0:
            self._logger.info(
                f"Unfired {alert_type}@{block_height} already exists for chat_id={chat_id}"
            )
            return None

        entity = BlockHeightAlert(
            chat_id=chat_id,
            block_height=block_height,
            alert_type=alert_type,
            context=context,
            did_fire=False,
        )
        return self._add(entity)

    def delete_unfired(self, chat_id: int, block_height: int, alert_type: str) -> int:
        """
        Delete unfired alerts matching (chat_id, block_height, alert_type).

        Returns:
            Number of alerts deleted
        """
        stmt = delete(BlockHeightAlert).where(
            BlockHeightAlert.chat_id == chat_id,
            BlockHeightAlert.block_height == block_height,
            BlockHeightAlert.alert_type == _tag_value(alert_type),
            BlockHeightAlert.did_fire.is_(False),
        ).execution_options(synchronize_session="fetch")
        return self._execute_write(stmt, "delete_unfired")

    def list_unfired_for_chat(self, chat_id: int) -> List[BlockHeightAlert]:
        stmt = (
            select(BlockHeightAlert)
            .where(
                BlockHeightAlert.chat_id == chat_id,
                BlockHeightAlert.did_fire.is_(False),
            )
            .order_by(BlockHeightAlert.block_height, BlockHeightAlert.id)
        )
        return self._execute_query(stmt)

    def find_due(self, block_height: int) -> List[BlockHeightAlert]:
        """Unfired alerts at or below a height, ordered by id."""
        stmt = (
            select(BlockHeightAlert)
            .where(
                BlockHeightAlert.did_fire.is_(False),
                BlockHeightAlert.block_height <= block_height,
            )
            .order_by(BlockHeightAlert.id)
        )
        return self._execute_query(stmt)

    def mark_fired(self, alert_ids: Sequence[int]) -> int:
        if not alert_ids:
            return 0
        stmt = (
            update(BlockHeightAlert)
            .where(
                BlockHeightAlert.id.in_(list(alert_ids)),
                BlockHeightAlert.did_fire.is_(False),
            )
            .values(did_fire=True)
            .execution_options(synchronize_session="fetch")
        )
        return self._execute_write(stmt, "mark_fired")


class ProcessedBlockRepository(BaseRepository[ProcessedBlock]):
    """Repository for blocks the watcher has finished."""

    def __init__(self, session: Session) -> None:
        super().__init__(session, ProcessedBlock, "ProcessedBlockRepository")

    def record(self, block_height: int, block_hash: Optional[str] = None) -> ProcessedBlock:
        entity = ProcessedBlock(
            block_height=_require_block_height(block_height),
            block_hash=block_hash,
        )
        return self._add(entity)

    def get_last_processed_height(self) -> Optional[int]:
        """Highest processed height, or None before the first block."""
        try:
            stmt = select(func.max(ProcessedBlock.block_height))
            return self._session.execute(stmt).scalar()
        except SQLAlchemyError as e:
            self._handle_db_error(e, "get_last_processed_height")
            raise
