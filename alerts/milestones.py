"""
Milestone Calculator.

============================================================
PURPOSE
============================================================
Maps a name's current chain state to the block heights at which
its lifecycle milestones happen.

PRINCIPLES:
- Pure functions, no I/O
- Each rule is independent; results are unioned
- "Future" means strictly above the current height

============================================================
RULES
============================================================
- Auction: state OPENING/BIDDING/REVEAL, anchored at info.height
- Lockup: state LOCKED with stats
- Renewal: CLOSED, owned, stats.renewal_period_end set
- Transfer: CLOSED, owned, stats.transfer_lockup_start set

============================================================
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from chain.models import NameInfo, NameState
from core.constants import DEFAULT_NETWORK, NetworkParams, get_network


logger = logging.getLogger(__name__)


# ============================================================
# MILESTONE KINDS
# ============================================================

class MilestoneKind(str, Enum):
    """Lifecycle milestone of a name."""
    AUCTION_OPENING = "AUCTION_OPENING"
    AUCTION_BIDDING = "AUCTION_BIDDING"
    AUCTION_REVEAL = "AUCTION_REVEAL"
    AUCTION_CLOSED = "AUCTION_CLOSED"
    NAME_LOCKED = "NAME_LOCKED"
    NAME_UNLOCKED = "NAME_UNLOCKED"
    REGISTRATION_EXPIRED = "REGISTRATION_EXPIRED"
    TRANSFER_IN_PROGRESS = "TRANSFER_IN_PROGRESS"
    TRANSFER_FINALIZING = "TRANSFER_FINALIZING"


MILESTONE_LABELS: Dict[MilestoneKind, str] = {
    MilestoneKind.AUCTION_OPENING: "Auction opens",
    MilestoneKind.AUCTION_BIDDING: "Bidding begins",
    MilestoneKind.AUCTION_REVEAL: "Bid reveals begin",
    MilestoneKind.AUCTION_CLOSED: "Auction closes",
    MilestoneKind.NAME_LOCKED: "Name is locked",
    MilestoneKind.NAME_UNLOCKED: "Name is unlocked",
    MilestoneKind.REGISTRATION_EXPIRED: "Name registration expires",
    MilestoneKind.TRANSFER_IN_PROGRESS: "Name transfer initiated",
    MilestoneKind.TRANSFER_FINALIZING: "Name transfer can be finalized",
}


@dataclass(frozen=True)
class Milestone:
    """A milestone kind at an absolute block height."""
    kind: MilestoneKind
    block_height: int

    @property
    def label(self) -> str:
        return MILESTONE_LABELS[self.kind]


# ============================================================
# NAME AVAILABILITY
# ============================================================

class NameAvailability(str, Enum):
    """Whether a name can be acquired, and why not."""
    OTHER = "OTHER"
    UNAVAIL_RESERVED = "UNAVAIL_RESERVED"
    UNAVAIL_CLAIMING = "UNAVAIL_CLAIMING"
    UNAVAIL_TRANSFERRING = "UNAVAIL_TRANSFERRING"
    UNAVAIL_CLOSED = "UNAVAIL_CLOSED"
    AVAIL_NEVER_REGISTERED = "AVAIL_NEVER_REGISTERED"
    AVAIL_NOT_RENEWED = "AVAIL_NOT_RENEWED"
    AUCTION_OPENING = "AUCTION_OPENING"
    AUCTION_BIDDING = "AUCTION_BIDDING"
    AUCTION_REVEAL = "AUCTION_REVEAL"


_AUCTION_AVAILABILITY = {
    NameState.OPENING: NameAvailability.AUCTION_OPENING,
    NameState.BIDDING: NameAvailability.AUCTION_BIDDING,
    NameState.REVEAL: NameAvailability.AUCTION_REVEAL,
}


def calculate_name_availability(name_info: Any) -> NameAvailability:
    """
    Classify a name from its `getnameinfo` snapshot.

    Checks run in a fixed order; the first match wins.
    """
    name_info = NameInfo.from_rpc(name_info)
    info = name_info.info
    stats = name_info.stats
    reserved = name_info.is_reserved

    if reserved and info is None:
        return NameAvailability.UNAVAIL_RESERVED

    if reserved and info is not None and info.state == NameState.LOCKED and info.claimed != 0:
        return NameAvailability.UNAVAIL_CLAIMING

    closed = info is not None and info.state == NameState.CLOSED
    blocks_until_expire = stats.blocks_until_expire if stats else None

    if closed and stats is not None and stats.blocks_until_valid_finalize is not None:
        return NameAvailability.UNAVAIL_TRANSFERRING

    if closed and blocks_until_expire is not None and blocks_until_expire > 0:
        return NameAvailability.UNAVAIL_CLOSED

    if not reserved and info is None:
        return NameAvailability.AVAIL_NEVER_REGISTERED

    if closed and blocks_until_expire is not None and blocks_until_expire <= 0:
        return NameAvailability.AVAIL_NOT_RENEWED

    if info is not None and info.state in _AUCTION_AVAILABILITY:
        return _AUCTION_AVAILABILITY[info.state]

    return NameAvailability.OTHER


# ============================================================
# MILESTONE RULES
# ============================================================

def _default_network(network: Optional[NetworkParams]) -> NetworkParams:
    return network or get_network(DEFAULT_NETWORK)


def _milestone(kind: MilestoneKind, block_height: Optional[int]) -> List[Milestone]:
    if block_height is None:
        return []
    return [Milestone(kind, block_height)]


def calculate_auction_milestones(
    name_info: Any,
    network: Optional[NetworkParams] = None,
) -> List[Milestone]:
    """
    Auction phase boundaries for a name in auction.

    CLOSED is excluded since it may come from either a claim or a
    finished auction.
    """
    name_info = NameInfo.from_rpc(name_info)
    info = name_info.info
    if info is None or info.state not in _AUCTION_AVAILABILITY:
        return []

    params = _default_network(network)
    opening = info.height
    bidding = opening + params.open_period
    reveal = bidding + params.bidding_period
    closed = reveal + params.reveal_period

    return [
        Milestone(MilestoneKind.AUCTION_OPENING, opening),
        Milestone(MilestoneKind.AUCTION_BIDDING, bidding),
        Milestone(MilestoneKind.AUCTION_REVEAL, reveal),
        Milestone(MilestoneKind.AUCTION_CLOSED, closed),
    ]


def calculate_lockup_milestones(name_info: Any) -> List[Milestone]:
    """Lock and unlock heights of a locked (claimed) name."""
    name_info = NameInfo.from_rpc(name_info)
    stats = name_info.stats
    if name_info.state != NameState.LOCKED or stats is None:
        return []

    return (
        _milestone(MilestoneKind.NAME_LOCKED, stats.lockup_period_start)
        + _milestone(MilestoneKind.NAME_UNLOCKED, stats.lockup_period_end)
    )


def _is_owned_and_closed(name_info: NameInfo) -> bool:
    info = name_info.info
    return (
        info is not None
        and info.owner is not None
        and info.state == NameState.CLOSED
        and info.stats is not None
    )


def calculate_renewal_milestones(name_info: Any) -> List[Milestone]:
    """Expiry height of an owned, closed name."""
    name_info = NameInfo.from_rpc(name_info)
    if not _is_owned_and_closed(name_info) or not name_info.stats.renewal_period_end:
        return []

    return _milestone(MilestoneKind.REGISTRATION_EXPIRED, name_info.stats.renewal_period_end)


def calculate_transfer_milestones(name_info: Any) -> List[Milestone]:
    """Start and finalize heights of a pending transfer."""
    name_info = NameInfo.from_rpc(name_info)
    if not _is_owned_and_closed(name_info) or not name_info.stats.transfer_lockup_start:
        return []

    stats = name_info.stats
    return (
        _milestone(MilestoneKind.TRANSFER_IN_PROGRESS, stats.transfer_lockup_start)
        + _milestone(MilestoneKind.TRANSFER_FINALIZING, stats.transfer_lockup_end)
    )


def calculate_all_milestones(
    name_info: Any,
    network: Optional[NetworkParams] = None,
) -> List[Milestone]:
    """Union of every applicable rule, past and future."""
    name_info = NameInfo.from_rpc(name_info)
    return (
        calculate_auction_milestones(name_info, network)
        + calculate_lockup_milestones(name_info)
        + calculate_renewal_milestones(name_info)
        + calculate_transfer_milestones(name_info)
    )


def calculate_all_future_milestones(
    name_info: Any,
    current_block_height: int,
    network: Optional[NetworkParams] = None,
) -> List[Milestone]:
    """
    Milestones strictly after current_block_height.

    A milestone exactly at the current height has already happened.

    Args:
        name_info: `getnameinfo` result or NameInfo
        current_block_height: Height of the chain tip
        network: Auction timing, defaults to main

    Returns:
        Unordered list of future milestones
    """
    milestones = calculate_all_milestones(name_info, network)
    return [m for m in milestones if m.block_height > current_block_height]
