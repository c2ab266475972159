"""
Chain Package - Chain-facing values and the chain query collaborator.

Provides name state snapshots and decoded block activity to the alert
engine. Transport to an actual node is supplied by the caller through a
ChainQueryService implementation.

Quick Start:
    from chain import ChainQueryService, build_new_block_event

    class NodeChain(ChainQueryService):
        async def get_current_block_height(self): ...
        async def get_name_info(self, encoded_name): ...
        async def get_block_by_height(self, block_height, include_txs=True): ...
        async def get_block_by_hash(self, block_hash, include_txs=True): ...
        async def get_name_by_hash(self, name_hash): ...

    event = await build_new_block_event(NodeChain(), 62517)
"""

from chain.base import ChainQueryService, fetch_current_block_height, fetch_name_info
from chain.blocks import build_new_block_event, resolve_action_names
from chain.exceptions import InvalidNameError, NameActionDecodeError
from chain.models import (
    Covenant,
    CovenantOutput,
    NameAction,
    NameAuctionInfo,
    NameInfo,
    NameOwner,
    NameStart,
    NameState,
    NameStats,
    NewBlockEvent,
)
from chain.nameactions import (
    COVENANT_DECODERS,
    get_name_action_from_txout,
    get_name_actions_from_block,
)
from chain.names import clean_name, decode_name, encode_name, require_valid_name, verify_name

__all__ = [
    "ChainQueryService",
    "fetch_current_block_height",
    "fetch_name_info",
    "build_new_block_event",
    "resolve_action_names",
    "InvalidNameError",
    "NameActionDecodeError",
    "Covenant",
    "CovenantOutput",
    "NameAction",
    "NameAuctionInfo",
    "NameInfo",
    "NameOwner",
    "NameStart",
    "NameState",
    "NameStats",
    "NewBlockEvent",
    "COVENANT_DECODERS",
    "get_name_action_from_txout",
    "get_name_actions_from_block",
    "clean_name",
    "decode_name",
    "encode_name",
    "require_valid_name",
    "verify_name",
]
