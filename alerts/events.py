"""
Notification Records.

============================================================
PURPOSE
============================================================
Outbound notifications produced by block processing. The manager
returns them and hands each to every registered handler; the bot
layer renders and delivers them.

============================================================
EVENT TYPES
============================================================
- NameAlertTriggerEvent: one per (chat_id, target_name) per block,
  carrying this block's name actions and/or due milestones
- BlockHeightAlertEvent: one per due standalone block height alert

============================================================
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union

from chain.models import NameAction

from .milestones import MILESTONE_LABELS, MilestoneKind


logger = logging.getLogger(__name__)


class BlockHeightAlertType(str, Enum):
    """Known standalone alert purposes. Other tags are stored as-is."""
    BLOCK_MINED = "BLOCK_MINED"


@dataclass(frozen=True)
class TriggerSnapshot:
    """
    Detached copy of a block height trigger row.

    Tags written by a newer release stay raw strings and use the tag as
    their label.
    """
    trigger_id: int
    block_height: int
    milestone_kind: Union[MilestoneKind, str]

    @property
    def label(self) -> str:
        return MILESTONE_LABELS.get(self.milestone_kind, str(self.milestone_kind))

    @property
    def kind_tag(self) -> str:
        return getattr(self.milestone_kind, "value", self.milestone_kind)

    @classmethod
    def from_row(cls, trigger: Any) -> "TriggerSnapshot":
        try:
            kind: Union[MilestoneKind, str] = MilestoneKind(trigger.milestone_kind)
        except ValueError:
            logger.warning(
                f"Trigger {trigger.id} has unknown milestone kind {trigger.milestone_kind!r}"
            )
            kind = trigger.milestone_kind
        return cls(
            trigger_id=trigger.id,
            block_height=trigger.block_height,
            milestone_kind=kind,
        )


@dataclass(frozen=True)
class NameAlertTriggerEvent:
    """Activity and/or reached milestones for one watched name of one chat."""
    chat_id: int
    target_name: str
    name_actions: Tuple[NameAction, ...] = field(default_factory=tuple)
    block_height_triggers: Tuple[TriggerSnapshot, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chat_id": self.chat_id,
            "target_name": self.target_name,
            "name_actions": [na.to_dict() for na in self.name_actions],
            "block_height_triggers": [
                {
                    "block_height": t.block_height,
                    "milestone_kind": t.kind_tag,
                }
                for t in self.block_height_triggers
            ],
        }


@dataclass(frozen=True)
class BlockHeightAlertEvent:
    """A standalone block height alert came due."""
    chat_id: int
    block_height: int
    alert_type: str
    context: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chat_id": self.chat_id,
            "block_height": self.block_height,
            "alert_type": self.alert_type,
            "context": self.context,
        }


Notification = Union[NameAlertTriggerEvent, BlockHeightAlertEvent]

# Type for notification handlers
NotificationHandler = Callable[[Notification], Awaitable[None]]
