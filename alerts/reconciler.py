"""
Alert Reconciler.

============================================================
PURPOSE
============================================================
Keeps each name alert's future triggers in sync with the name's
chain state when schedule-affecting activity shows up in a block.

============================================================
ALGORITHM
============================================================
1. Names with at least one alert
2. Block name actions on those names, schedule-affecting kinds only
3. Fresh name info per affected name (fetched concurrently)
4. Per alert, in one transaction: drop unfired triggers above the
   block height, insert one trigger per future milestone

============================================================
FAILURE SEMANTICS
============================================================
- Upstream failure for one name: logged, that name skipped
- Storage failure: raised, the whole block is retried later
- Fired or past triggers are never touched

============================================================
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from chain.base import ChainQueryService, fetch_name_info
from chain.models import NameAction
from core.constants import SCHEDULE_AFFECTING_ACTIONS, NetworkParams
from core.exceptions import UpstreamQueryError
from storage.database import Database
from storage.repositories.alerts import (
    BlockHeightTriggerRepository,
    NameAlertRepository,
)

from .milestones import Milestone, calculate_all_future_milestones


logger = logging.getLogger(__name__)


@dataclass
class ReconciliationResult:
    """Outcome of one reconciliation pass."""
    block_height: int
    alerts_updated: Dict[str, int] = field(default_factory=dict)
    failed_names: Dict[str, str] = field(default_factory=dict)

    @property
    def reconciled_names(self) -> List[str]:
        return list(self.alerts_updated)


def select_affected_names(
    name_actions: Iterable[NameAction],
    watched_names: Iterable[str],
) -> List[str]:
    """
    Watched names touched by a schedule-affecting action.

    Returns:
        Names in first-seen order, without duplicates
    """
    watched = set(watched_names)
    affected: List[str] = []
    for na in name_actions:
        if na.name is None or na.name not in watched:
            continue
        if na.kind not in SCHEDULE_AFFECTING_ACTIONS:
            continue
        if na.name not in affected:
            affected.append(na.name)
    return affected


class AlertReconciler:
    """
    Recomputes and replaces the future triggers of alerted names.

    Safe to run twice for the same block: the second pass replaces
    the same content.
    """

    def __init__(
        self,
        chain: ChainQueryService,
        database: Database,
        network: NetworkParams,
    ):
        self._chain = chain
        self._database = database
        self._network = network

    async def reconcile(
        self,
        block_height: int,
        name_actions: Iterable[NameAction],
    ) -> ReconciliationResult:
        """
        Reconcile every alerted name touched by this block.

        Raises:
            StorageError: If the alert store fails
        """
        result = ReconciliationResult(block_height=block_height)

        with self._database.session() as session:
            watched = NameAlertRepository(session).distinct_target_names()

        affected = select_affected_names(name_actions, watched)
        if not affected:
            return result

        logger.info(f"Block {block_height}: reconciling {len(affected)} name(s): {affected}")

        fetched = await asyncio.gather(
            *(fetch_name_info(self._chain, name) for name in affected),
            return_exceptions=True,
        )

        for name, name_info in zip(affected, fetched):
            if isinstance(name_info, UpstreamQueryError):
                logger.error(f"Skipping reconciliation of {name} at block {block_height}: {name_info}")
                result.failed_names[name] = str(name_info)
                continue
            if isinstance(name_info, BaseException):
                raise name_info

            milestones = calculate_all_future_milestones(name_info, block_height, self._network)
            result.alerts_updated[name] = self.replace_future_triggers(name, block_height, milestones)

        return result

    def replace_future_triggers(
        self,
        target_name: str,
        block_height: int,
        milestones: List[Milestone],
    ) -> int:
        """
        Replace the unfired future triggers of every alert on a name.

        Each alert is updated in its own transaction so a reader never
        sees it without its future triggers.

        Returns:
            Number of alerts updated
        """
        with self._database.session() as session:
            alert_ids = [a.id for a in NameAlertRepository(session).find_by_target_name(target_name)]

        updated = 0
        for alert_id in alert_ids:
            with self._database.transaction() as session:
                alerts = NameAlertRepository(session)
                if alerts.get_by_id(alert_id) is None:
                    # Deleted since the lookup
                    continue
                removed = BlockHeightTriggerRepository(session).delete_future_unfired(
                    alert_id, block_height
                )
                added = alerts.add_triggers(
                    alert_id,
                    [(m.kind, m.block_height) for m in milestones],
                )
            updated += 1
            logger.debug(
                f"Alert {alert_id} ({target_name}): replaced {removed} trigger(s) with {len(added)}"
            )

        return updated
