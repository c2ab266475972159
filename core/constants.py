"""
Core Module - Constants.

============================================================
RESPONSIBILITY
============================================================
Defines the chain-wide constants the alert engine depends on.

- Covenant type integers as they appear on the wire
- Name auction period lengths per network
- Name length limits

============================================================
DESIGN PRINCIPLES
============================================================
- All constants are immutable
- Related constants are grouped
- No business logic here

============================================================
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict


# ============================================================
# COVENANT TYPES
# ============================================================

class CovenantType(IntEnum):
    """Covenant type tag carried by every transaction output."""

    NONE = 0
    CLAIM = 1
    OPEN = 2
    BID = 3
    REVEAL = 4
    REDEEM = 5
    REGISTER = 6
    UPDATE = 7
    RENEW = 8
    TRANSFER = 9
    FINALIZE = 10
    REVOKE = 11


# Actions that can move a name's milestone schedule
SCHEDULE_AFFECTING_ACTIONS = frozenset({
    CovenantType.CLAIM,
    CovenantType.OPEN,
    CovenantType.REGISTER,
    CovenantType.TRANSFER,
    CovenantType.FINALIZE,
    CovenantType.REVOKE,
})


# ============================================================
# NAME RULES
# ============================================================

MAX_NAME_SIZE = 63


# ============================================================
# NETWORK PARAMETERS
# ============================================================

@dataclass(frozen=True)
class NetworkParams:
    """Name auction timing for one network, in blocks."""

    name: str
    tree_interval: int
    bidding_period: int
    reveal_period: int
    seconds_per_block: int = 600

    @property
    def open_period(self) -> int:
        """Blocks between OPEN and the start of bidding."""
        return self.tree_interval + 1


NETWORKS: Dict[str, NetworkParams] = {
    "main": NetworkParams("main", tree_interval=36, bidding_period=720, reveal_period=1440),
    "testnet": NetworkParams("testnet", tree_interval=36, bidding_period=720, reveal_period=1440),
    "regtest": NetworkParams("regtest", tree_interval=5, bidding_period=5, reveal_period=10),
    "simnet": NetworkParams("simnet", tree_interval=2, bidding_period=25, reveal_period=50),
}

DEFAULT_NETWORK = "main"


def get_network(name: str = DEFAULT_NETWORK) -> NetworkParams:
    """Look up network parameters by name."""
    try:
        return NETWORKS[name]
    except KeyError:
        raise KeyError(f"Unknown network: {name}") from None
