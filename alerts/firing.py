"""
Alert Firing Engine.

============================================================
PURPOSE
============================================================
Decides, for one block, every notification that must go out now,
hands each to the notification sink once, and marks consumed
triggers fired.

============================================================
DUE SETS
============================================================
Name alerts (merged per (chat_id, target_name)):
- Name actions in this block on a watched name (stateless)
- Unfired triggers with block_height <= current height

Standalone block height alerts:
- Unfired alerts with block_height <= current height, one
  notification each

============================================================
DELIVERY
============================================================
- Emission is fire-and-forget
- did_fire is persisted after emission; that write is the
  durability boundary, not delivery confirmation
- Triggers left unfired after a failed write are re-emitted on
  the next pass (catch-up)

============================================================
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Iterable, List, Tuple

from chain.models import NameAction
from storage.database import Database
from storage.repositories.alerts import (
    BlockHeightAlertRepository,
    BlockHeightTriggerRepository,
    NameAlertRepository,
)

from .events import (
    BlockHeightAlertEvent,
    NameAlertTriggerEvent,
    Notification,
    TriggerSnapshot,
)


logger = logging.getLogger(__name__)


Emitter = Callable[[Notification], Awaitable[None]]

GroupKey = Tuple[int, str]


@dataclass
class DueNameAlerts:
    """Merged name alert notifications for one block, not yet emitted."""
    block_height: int
    events: List[NameAlertTriggerEvent] = field(default_factory=list)
    trigger_ids: List[int] = field(default_factory=list)


@dataclass
class _Group:
    name_actions: List[NameAction] = field(default_factory=list)
    triggers: List[TriggerSnapshot] = field(default_factory=list)


def group_actions_by_name(name_actions: Iterable[NameAction]) -> Dict[str, List[NameAction]]:
    """Named actions grouped by name, in block order."""
    by_name: Dict[str, List[NameAction]] = OrderedDict()
    for na in name_actions:
        if na.name is None:
            continue
        by_name.setdefault(na.name, []).append(na)
    return by_name


class AlertFiringEngine:
    """
    Computes due notifications and records them as fired.

    Due sets are read in id order so emission order is stable.
    """

    def __init__(self, database: Database):
        self._database = database

    # =========================================================
    # NAME ALERTS
    # =========================================================

    def collect_due_name_alerts(
        self,
        block_height: int,
        name_actions: Iterable[NameAction] = (),
    ) -> DueNameAlerts:
        """
        Build one event per (chat_id, target_name) with activity or due triggers.

        Read only; nothing is marked fired.
        """
        due = DueNameAlerts(block_height=block_height)
        groups: Dict[GroupKey, _Group] = OrderedDict()
        actions_by_name = group_actions_by_name(name_actions)

        with self._database.session() as session:
            if actions_by_name:
                alerts = NameAlertRepository(session).find_by_target_names(actions_by_name)
                for alert in alerts:
                    key = (alert.chat_id, alert.target_name)
                    group = groups.setdefault(key, _Group())
                    if not group.name_actions:
                        group.name_actions.extend(actions_by_name[alert.target_name])

            for trigger, chat_id, target_name in BlockHeightTriggerRepository(session).find_due(block_height):
                group = groups.setdefault((chat_id, target_name), _Group())
                group.triggers.append(TriggerSnapshot.from_row(trigger))
                due.trigger_ids.append(trigger.id)

        for (chat_id, target_name), group in groups.items():
            due.events.append(
                NameAlertTriggerEvent(
                    chat_id=chat_id,
                    target_name=target_name,
                    name_actions=tuple(group.name_actions),
                    block_height_triggers=tuple(group.triggers),
                )
            )

        return due

    async def fire_name_alerts(
        self,
        block_height: int,
        name_actions: Iterable[NameAction],
        emit: Emitter,
    ) -> List[NameAlertTriggerEvent]:
        """
        Emit due name alert notifications, then mark their triggers fired.

        Raises:
            StorageError: If the due set cannot be read or marked
        """
        due = self.collect_due_name_alerts(block_height, name_actions)

        for event in due.events:
            await emit(event)

        if due.trigger_ids:
            with self._database.transaction() as session:
                marked = BlockHeightTriggerRepository(session).mark_fired(due.trigger_ids)
            logger.info(f"Block {block_height}: marked {marked} trigger(s) fired")

        if due.events:
            logger.info(f"Block {block_height}: emitted {len(due.events)} name alert notification(s)")
        return due.events

    # =========================================================
    # BLOCK HEIGHT ALERTS
    # =========================================================

    async def fire_block_height_alerts(
        self,
        block_height: int,
        emit: Emitter,
    ) -> List[BlockHeightAlertEvent]:
        """
        Emit each due standalone alert, marking it fired right after.

        Raises:
            StorageError: If the due set cannot be read or marked
        """
        with self._database.session() as session:
            due = [
                (alert.id, BlockHeightAlertEvent(
                    chat_id=alert.chat_id,
                    block_height=alert.block_height,
                    alert_type=alert.alert_type,
                    context=alert.context,
                ))
                for alert in BlockHeightAlertRepository(session).find_due(block_height)
            ]

        events = []
        for alert_id, event in due:
            await emit(event)
            with self._database.transaction() as session:
                BlockHeightAlertRepository(session).mark_fired([alert_id])
            events.append(event)

        if events:
            logger.info(f"Block {block_height}: emitted {len(events)} block height alert(s)")
        return events
