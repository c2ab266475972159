"""
Alert Manager.

============================================================
PURPOSE
============================================================
Subscriber-facing alert operations and the new block entry point.

PRINCIPLES:
- One storage handle, passed in, never global
- Reconcile before firing on every block
- Notifications are returned and handed to handlers; no emitter
  inheritance
- Block processing is serialized

============================================================
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from chain.base import ChainQueryService, fetch_current_block_height, fetch_name_info
from chain.models import NameAction, NewBlockEvent
from chain.names import clean_name, encode_name, verify_name
from core.constants import DEFAULT_NETWORK, NetworkParams, get_network
from core.exceptions import BlockProcessingInProgressError, NotFoundError, ValidationError
from storage.database import Database
from storage.repositories.alerts import (
    BlockHeightAlertRepository,
    BlockHeightTriggerRepository,
    NameAlertRepository,
)

from .events import (
    BlockHeightAlertType,
    Notification,
    NotificationHandler,
    TriggerSnapshot,
)
from .firing import AlertFiringEngine
from .milestones import calculate_all_future_milestones
from .reconciler import AlertReconciler


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NameAlertDetail:
    """A name alert with its pending triggers, lowest height first."""
    alert_id: int
    chat_id: int
    target_name: str
    triggers: Tuple[TriggerSnapshot, ...] = field(default_factory=tuple)


def _canonical_name(name: Any) -> str:
    """Cleaned, punycode-encoded form used for storage and matching."""
    if not isinstance(name, str):
        raise ValidationError("name", "must be a string", name)
    return encode_name(clean_name(name))


def _require_name(name: Any) -> str:
    encoded = _canonical_name(name)
    if not verify_name(encoded):
        raise ValidationError("name", "not a valid name", name)
    return encoded


# ============================================================
# ALERT MANAGER
# ============================================================

class AlertManager:
    """
    Coordinates the alert store, the reconciler and the firing engine.

    This is the central alert coordination point.
    """

    def __init__(
        self,
        chain: ChainQueryService,
        database: Database,
        network: Optional[NetworkParams] = None,
        notification_handlers: Optional[List[NotificationHandler]] = None,
        reject_concurrent: bool = False,
    ):
        """
        Initialize alert manager.

        Args:
            chain: Chain query collaborator
            database: Open storage handle
            network: Auction timing, defaults to main
            notification_handlers: Async callables receiving each notification
            reject_concurrent: Raise instead of waiting when a block is in progress
        """
        self._chain = chain
        self._database = database
        self._network = network or get_network(DEFAULT_NETWORK)
        self._handlers = list(notification_handlers or [])
        self._reject_concurrent = reject_concurrent

        self._reconciler = AlertReconciler(chain, database, self._network)
        self._firing = AlertFiringEngine(database)

        # Block processing lock
        self._block_lock = asyncio.Lock()
        self._processing_height: Optional[int] = None

    @property
    def network(self) -> NetworkParams:
        return self._network

    @property
    def reconciler(self) -> AlertReconciler:
        return self._reconciler

    @property
    def firing_engine(self) -> AlertFiringEngine:
        return self._firing

    @property
    def is_processing(self) -> bool:
        """Whether a block is being processed right now."""
        return self._block_lock.locked()

    def add_handler(self, handler: NotificationHandler) -> None:
        """Add a notification handler."""
        self._handlers.append(handler)

    def remove_handler(self, handler: NotificationHandler) -> None:
        """Remove a notification handler."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    # =========================================================
    # NAME ALERTS
    # =========================================================

    async def create_name_alert(self, chat_id: int, name: str) -> NameAlertDetail:
        """
        Subscribe a chat to a name and schedule its future milestones.

        Does not check for an existing alert; use check_exists_name_alert.

        Raises:
            ValidationError: If chat_id or name is malformed
            UpstreamQueryError: If the chain cannot be queried
            StorageError: If the alert cannot be stored
        """
        name = _require_name(name)
        block_height = await fetch_current_block_height(self._chain)
        name_info = await fetch_name_info(self._chain, name)
        milestones = calculate_all_future_milestones(name_info, block_height, self._network)

        with self._database.transaction() as session:
            alerts = NameAlertRepository(session)
            alert = alerts.create(chat_id, name)
            triggers = alerts.add_triggers(
                alert.id,
                [(m.kind, m.block_height) for m in milestones],
            )
            detail = NameAlertDetail(
                alert_id=alert.id,
                chat_id=alert.chat_id,
                target_name=alert.target_name,
                triggers=tuple(sorted(
                    (TriggerSnapshot.from_row(t) for t in triggers),
                    key=lambda t: (t.block_height, t.trigger_id),
                )),
            )

        logger.info(
            f"Name alert created: chat_id={chat_id} name={name} "
            f"at block {block_height} with {len(detail.triggers)} trigger(s)"
        )
        return detail

    def check_exists_name_alert(self, chat_id: int, name: str) -> bool:
        name = _canonical_name(name)
        with self._database.session() as session:
            return NameAlertRepository(session).exists(chat_id, name)

    def delete_name_alert(self, chat_id: int, name: str) -> bool:
        """
        Unsubscribe a chat from a name, with all its triggers.

        Returns:
            False when the chat had no alert for the name
        """
        name = _canonical_name(name)
        try:
            with self._database.transaction() as session:
                alerts = NameAlertRepository(session)
                alerts.get_or_raise(chat_id, name)
                alerts.delete(chat_id, name)
        except NotFoundError as e:
            logger.debug(f"Nothing to delete: {e}")
            return False
        return True

    def get_name_alerts(self, chat_id: int) -> List[str]:
        """Names a chat is subscribed to."""
        with self._database.session() as session:
            return NameAlertRepository(session).list_target_names(chat_id)

    def get_name_alert_detail(self, chat_id: int, name: str) -> Optional[NameAlertDetail]:
        """The alert of a chat on a name with its unfired triggers, or None."""
        name = _canonical_name(name)
        with self._database.session() as session:
            alert = NameAlertRepository(session).get(chat_id, name)
            if alert is None:
                return None
            triggers = BlockHeightTriggerRepository(session).list_unfired_for_alert(alert.id)
            return NameAlertDetail(
                alert_id=alert.id,
                chat_id=alert.chat_id,
                target_name=alert.target_name,
                triggers=tuple(TriggerSnapshot.from_row(t) for t in triggers),
            )

    # =========================================================
    # BLOCK HEIGHT ALERTS
    # =========================================================

    def create_block_height_alert(
        self,
        chat_id: int,
        block_height: int,
        alert_type: str = BlockHeightAlertType.BLOCK_MINED,
        context: Optional[Any] = None,
        enforce_unique: bool = False,
    ) -> Optional[int]:
        """
        Ask to be notified when a block height is reached.

        Returns:
            New alert id, or None when enforce_unique found an unfired match

        Raises:
            ValidationError: If any field is malformed
        """
        with self._database.transaction() as session:
            alert = BlockHeightAlertRepository(session).create(
                chat_id,
                block_height,
                alert_type,
                context=context,
                enforce_unique=enforce_unique,
            )
            if alert is None:
                return None
            alert_id, stored_type = alert.id, alert.alert_type

        logger.info(f"Block height alert created: chat_id={chat_id} {stored_type}@{block_height}")
        return alert_id

    def delete_block_height_alert(
        self,
        chat_id: int,
        block_height: int,
        alert_type: str = BlockHeightAlertType.BLOCK_MINED,
    ) -> bool:
        """
        Cancel unfired block height alerts. Fired ones are kept.

        Returns:
            False when nothing matched
        """
        with self._database.transaction() as session:
            deleted = BlockHeightAlertRepository(session).delete_unfired(
                chat_id, block_height, alert_type
            )
        return deleted > 0

    def get_block_height_alerts(self, chat_id: int) -> List[Dict[str, Any]]:
        """Unfired block height alerts of a chat, lowest height first."""
        with self._database.session() as session:
            return [
                {"block_height": a.block_height, "alert_type": a.alert_type}
                for a in BlockHeightAlertRepository(session).list_unfired_for_chat(chat_id)
            ]

    # =========================================================
    # COUNTERS
    # =========================================================

    def count_name_alerts(self) -> int:
        with self._database.session() as session:
            return NameAlertRepository(session).count()

    def count_unique_chats(self) -> int:
        with self._database.session() as session:
            return NameAlertRepository(session).count_unique_chats()

    # =========================================================
    # BLOCK PROCESSING
    # =========================================================

    async def on_new_block(
        self,
        block_height: int,
        name_actions: Iterable[NameAction] = (),
    ) -> List[Notification]:
        """
        Process one mined block.

        Runs reconciliation, then name alert firing, then standalone
        block height alert firing. Safe to retry for the same block.

        Returns:
            Every notification emitted, in emission order

        Raises:
            BlockProcessingInProgressError: If reject_concurrent and busy
            StorageError: If the alert store fails
        """
        if self._reject_concurrent and self._block_lock.locked():
            raise BlockProcessingInProgressError(block_height, self._processing_height)

        name_actions = tuple(name_actions)

        async with self._block_lock:
            self._processing_height = block_height
            try:
                notifications: List[Notification] = []

                async def emit(notification: Notification) -> None:
                    notifications.append(notification)
                    await self._dispatch_notification(notification)

                await self._reconciler.reconcile(block_height, name_actions)
                await self._firing.fire_name_alerts(block_height, name_actions, emit)
                await self._firing.fire_block_height_alerts(block_height, emit)

                logger.info(
                    f"Block {block_height} processed: {len(name_actions)} name action(s), "
                    f"{len(notifications)} notification(s)"
                )
                return notifications
            finally:
                self._processing_height = None

    async def on_new_block_event(self, event: NewBlockEvent) -> List[Notification]:
        return await self.on_new_block(event.block_height, event.name_actions)

    async def _dispatch_notification(self, notification: Notification) -> None:
        """Dispatch a notification to every handler."""
        for handler in self._handlers:
            try:
                await handler(notification)
            except Exception as e:
                logger.error(f"Notification handler error: {e}")
