"""
Chain Query Service - Abstract interface for the chain collaborator.

The alert engine never talks to a node directly. Anything that can
answer these queries (an RPC client, an indexer, a test fake) can be
plugged in.

Implementations MUST:
- Return raw `getnameinfo` / `getblock` shaped dicts (or NameInfo)
- Raise InvalidNameError for malformed names
- Let transport failures propagate; callers wrap them
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

from core.exceptions import UpstreamQueryError

from .models import NameInfo


logger = logging.getLogger(__name__)


class ChainQueryService(ABC):
    """
    Abstract read-only view of the chain.

    Each implementation must provide:
    1. get_current_block_height() - Height of the chain tip
    2. get_name_info() - State snapshot of one encoded name
    3. get_block_by_height() / get_block_by_hash() - Blocks with transactions
    4. get_name_by_hash() - Reverse lookup for actions without a name
    """

    @abstractmethod
    async def get_current_block_height(self) -> int:
        """Height of the most recent block."""

    @abstractmethod
    async def get_name_info(self, encoded_name: str) -> Any:
        """
        Current state of a name.

        Returns:
            `getnameinfo` result dict or a NameInfo

        Raises:
            InvalidNameError: If the name is malformed
        """

    @abstractmethod
    async def get_block_by_height(self, block_height: int, include_txs: bool = True) -> Dict[str, Any]:
        """`getblockbyheight` result, transactions expanded when include_txs."""

    @abstractmethod
    async def get_block_by_hash(self, block_hash: str, include_txs: bool = True) -> Dict[str, Any]:
        """`getblock` result, transactions expanded when include_txs."""

    @abstractmethod
    async def get_name_by_hash(self, name_hash: str) -> str:
        """Encoded name for a name hash."""


async def fetch_name_info(chain: ChainQueryService, encoded_name: str) -> NameInfo:
    """
    Fetch and parse a name snapshot.

    Raises:
        UpstreamQueryError: If the collaborator fails or returns garbage
    """
    try:
        raw = await chain.get_name_info(encoded_name)
    except UpstreamQueryError:
        raise
    except Exception as e:
        raise UpstreamQueryError(
            f"get_name_info failed for {encoded_name}: {e}",
            operation="get_name_info",
            target=encoded_name,
            cause=e,
        ) from e

    try:
        return NameInfo.from_rpc(raw)
    except ValueError as e:
        raise UpstreamQueryError(
            f"Malformed name info for {encoded_name}: {e}",
            operation="get_name_info",
            target=encoded_name,
            cause=e,
        ) from e


async def fetch_current_block_height(chain: ChainQueryService) -> int:
    """
    Fetch the chain tip height.

    Raises:
        UpstreamQueryError: If the collaborator fails
    """
    try:
        return int(await chain.get_current_block_height())
    except UpstreamQueryError:
        raise
    except Exception as e:
        raise UpstreamQueryError(
            f"get_current_block_height failed: {e}",
            operation="get_current_block_height",
            cause=e,
        ) from e
