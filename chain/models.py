"""
Chain Data Models - Snapshots and decoded activity supplied by the chain collaborator.

NameInfo mirrors the node's `getnameinfo` result and is parsed with
pydantic so camelCase RPC keys map onto snake_case attributes. Unknown
keys (hours/days estimates, etc.) are ignored. Covenant outputs are
validated the same way before name actions are decoded from them.

NameAction is a single tagged value over the closed set of covenant
kinds. It is never persisted.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

from core.constants import CovenantType


# =============================================================
# NAME INFO SNAPSHOT
# =============================================================


class NameState(str, Enum):
    """Auction/registration state reported by the node."""
    OPENING = "OPENING"
    LOCKED = "LOCKED"
    BIDDING = "BIDDING"
    REVEAL = "REVEAL"
    CLOSED = "CLOSED"
    REVOKED = "REVOKED"


class _RpcModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class NameStart(_RpcModel):
    """When the name becomes available for auction."""
    reserved: bool = False
    week: Optional[int] = None
    start: Optional[int] = None


class NameOwner(_RpcModel):
    """Outpoint currently owning the name."""
    hash: str = ""
    index: int = 0


class NameStats(_RpcModel):
    """Precomputed period boundaries. Which keys exist depends on the state."""
    open_period_start: Optional[int] = None
    open_period_end: Optional[int] = None
    blocks_until_bidding: Optional[int] = None
    bid_period_start: Optional[int] = None
    bid_period_end: Optional[int] = None
    blocks_until_reveal: Optional[int] = None
    reveal_period_start: Optional[int] = None
    reveal_period_end: Optional[int] = None
    blocks_until_close: Optional[int] = None
    lockup_period_start: Optional[int] = None
    lockup_period_end: Optional[int] = None
    blocks_until_closed: Optional[int] = None
    renewal_period_start: Optional[int] = None
    renewal_period_end: Optional[int] = None
    blocks_until_expire: Optional[int] = None
    transfer_lockup_start: Optional[int] = None
    transfer_lockup_end: Optional[int] = None
    blocks_until_valid_finalize: Optional[int] = None


class NameAuctionInfo(_RpcModel):
    """The `info` block of a name that has been opened or claimed."""
    name: str = ""
    name_hash: str = ""
    state: NameState
    height: int
    renewal: Optional[int] = None
    owner: Optional[NameOwner] = None
    value: int = 0
    highest: int = 0
    transfer: int = 0
    revoked: int = 0
    claimed: int = 0
    renewals: int = 0
    registered: bool = False
    expired: bool = False
    weak: bool = False
    stats: Optional[NameStats] = None


class NameInfo(_RpcModel):
    """Current chain state of one name."""
    start: Optional[NameStart] = None
    info: Optional[NameAuctionInfo] = None

    @property
    def is_reserved(self) -> bool:
        return bool(self.start and self.start.reserved)

    @property
    def state(self) -> Optional[NameState]:
        return self.info.state if self.info else None

    @property
    def stats(self) -> Optional[NameStats]:
        return self.info.stats if self.info else None

    @classmethod
    def from_rpc(cls, raw: Any) -> "NameInfo":
        """Parse a `getnameinfo` result. Accepts an already parsed snapshot."""
        if isinstance(raw, NameInfo):
            return raw
        if raw is None:
            return cls()
        return cls.model_validate(raw)


# =============================================================
# COVENANT OUTPUTS
# =============================================================


class Covenant(_RpcModel):
    """Covenant attached to a transaction output."""
    type: StrictInt
    action: StrictStr
    items: Tuple[StrictStr, ...] = ()


class CovenantOutput(_RpcModel):
    """
    Transaction output carrying a name covenant.

    Strict types: a boolean or numeric string is never an amount.
    """
    covenant: Covenant
    value: Optional[Union[StrictInt, StrictFloat]] = None


# =============================================================
# NAME ACTIONS
# =============================================================


@dataclass(frozen=True)
class NameAction:
    """
    One covenant operation on a name, decoded from a block.

    `value` carries the kind-specific amount:
    CLAIM reserved amount, BID lockup, REVEAL bid, REGISTER burned value.
    """
    kind: CovenantType
    name_hash: str
    name: Optional[str] = None
    value: Optional[float] = None

    @property
    def action(self) -> str:
        """Covenant action name, e.g. 'OPEN'."""
        return self.kind.name

    def with_name(self, name: str) -> "NameAction":
        """Copy with the name filled in from its hash lookup."""
        return replace(self, name=name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action,
            "name_hash": self.name_hash,
            "name": self.name,
            "value": self.value,
        }


@dataclass(frozen=True)
class NewBlockEvent:
    """A freshly mined block and the name actions it contains."""
    block_height: int
    block_hash: Optional[str] = None
    name_actions: Tuple[NameAction, ...] = field(default_factory=tuple)
