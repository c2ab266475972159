"""
New block events.

Turns a block height into a NewBlockEvent: fetch the block with its
transactions, decode name actions, and fill in names for covenants that
only carry a name hash.
"""

import logging
from typing import Dict, List

from core.exceptions import AlertingException, UpstreamQueryError

from .base import ChainQueryService
from .models import NameAction, NewBlockEvent
from .nameactions import get_name_actions_from_block


logger = logging.getLogger(__name__)


async def resolve_action_names(
    chain: ChainQueryService,
    name_actions: List[NameAction],
) -> List[NameAction]:
    """Fill missing names via hash lookup, one lookup per distinct hash."""
    names_by_hash: Dict[str, str] = {
        na.name_hash: na.name for na in name_actions if na.name
    }
    resolved = []

    for na in name_actions:
        if na.name:
            resolved.append(na)
            continue

        if na.name_hash not in names_by_hash:
            try:
                names_by_hash[na.name_hash] = await chain.get_name_by_hash(na.name_hash)
            except AlertingException:
                raise
            except Exception as e:
                raise UpstreamQueryError(
                    f"get_name_by_hash failed for {na.name_hash}: {e}",
                    operation="get_name_by_hash",
                    target=na.name_hash,
                    cause=e,
                ) from e

        resolved.append(na.with_name(names_by_hash[na.name_hash]))

    return resolved


async def build_new_block_event(
    chain: ChainQueryService,
    block_height: int,
) -> NewBlockEvent:
    """
    Build the event for one mined block.

    Raises:
        UpstreamQueryError: If the block or a name lookup cannot be fetched
        NameActionDecodeError: If the block contents are malformed
    """
    try:
        block = await chain.get_block_by_height(block_height, include_txs=True)
    except AlertingException:
        raise
    except Exception as e:
        raise UpstreamQueryError(
            f"get_block_by_height failed for {block_height}: {e}",
            operation="get_block_by_height",
            target=str(block_height),
            cause=e,
        ) from e

    name_actions = get_name_actions_from_block(block)
    name_actions = await resolve_action_names(chain, name_actions)

    logger.info(
        f"Block {block_height} ({block.get('hash')}): {len(name_actions)} name actions"
    )
    return NewBlockEvent(
        block_height=block_height,
        block_hash=block.get("hash"),
        name_actions=tuple(name_actions),
    )
