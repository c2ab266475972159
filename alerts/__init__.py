"""
Alerts Package - Name alert scheduling and triggering.

Components (leaves first):
- milestones: pure milestone and availability calculations
- reconciler: keeps future triggers in sync with chain activity
- firing: due sets, emission, fired bookkeeping
- manager: subscriber operations and the new block entry point
- watcher: polling loop feeding the manager

Quick Start:
    from alerts import AlertManager

    manager = AlertManager(chain, database)
    manager.add_handler(send_to_telegram)
    await manager.create_name_alert(chat_id, "ocer")
    notifications = await manager.on_new_block(62554, name_actions)
"""

from .events import (
    BlockHeightAlertEvent,
    BlockHeightAlertType,
    NameAlertTriggerEvent,
    Notification,
    NotificationHandler,
    TriggerSnapshot,
)
from .firing import AlertFiringEngine, DueNameAlerts
from .manager import AlertManager, NameAlertDetail
from .milestones import (
    MILESTONE_LABELS,
    Milestone,
    MilestoneKind,
    NameAvailability,
    calculate_all_future_milestones,
    calculate_all_milestones,
    calculate_auction_milestones,
    calculate_lockup_milestones,
    calculate_name_availability,
    calculate_renewal_milestones,
    calculate_transfer_milestones,
)
from .reconciler import AlertReconciler, ReconciliationResult, select_affected_names
from .watcher import BlockWatcher

__all__ = [
    "BlockHeightAlertEvent",
    "BlockHeightAlertType",
    "NameAlertTriggerEvent",
    "Notification",
    "NotificationHandler",
    "TriggerSnapshot",
    "AlertFiringEngine",
    "DueNameAlerts",
    "AlertManager",
    "NameAlertDetail",
    "MILESTONE_LABELS",
    "Milestone",
    "MilestoneKind",
    "NameAvailability",
    "calculate_all_future_milestones",
    "calculate_all_milestones",
    "calculate_auction_milestones",
    "calculate_lockup_milestones",
    "calculate_name_availability",
    "calculate_renewal_milestones",
    "calculate_transfer_milestones",
    "AlertReconciler",
    "ReconciliationResult",
    "select_affected_names",
    "BlockWatcher",
]
