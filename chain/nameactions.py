"""
Name Action Decoding - Covenant outputs to NameAction values.

============================================================
DECODER TABLE
============================================================
COVENANT_DECODERS maps the wire covenant type integer to a decoder
function returning a NameAction. Each decoder is built from a small
field spec:

- name_item: index of the covenant item holding the hex-encoded name,
  or None when the covenant does not carry the name
- captures_value: whether the output value is part of the action

Covenant types missing from the table (NONE) decode to None. Outputs
are parsed into CovenantOutput first, so item and value types are
checked by pydantic before any field is read.

============================================================
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError

from core.constants import CovenantType

from .exceptions import NameActionDecodeError
from .models import CovenantOutput, NameAction


logger = logging.getLogger(__name__)


NAME_HASH_ITEM = 0


@dataclass(frozen=True)
class CovenantSpec:
    """Which parts of a covenant output a given kind carries."""
    kind: CovenantType
    name_item: Optional[int] = None
    captures_value: bool = False


COVENANT_SPECS: Dict[CovenantType, CovenantSpec] = {
    spec.kind: spec
    for spec in (
        CovenantSpec(CovenantType.CLAIM, name_item=2, captures_value=True),
        CovenantSpec(CovenantType.OPEN, name_item=2),
        CovenantSpec(CovenantType.BID, name_item=2, captures_value=True),
        CovenantSpec(CovenantType.REVEAL, captures_value=True),
        CovenantSpec(CovenantType.REDEEM),
        CovenantSpec(CovenantType.REGISTER, captures_value=True),
        CovenantSpec(CovenantType.UPDATE),
        CovenantSpec(CovenantType.RENEW),
        CovenantSpec(CovenantType.TRANSFER),
        CovenantSpec(CovenantType.FINALIZE, name_item=2),
        CovenantSpec(CovenantType.REVOKE),
    )
}


def decode_hex_name(hex_name: str) -> str:
    """Covenant items carry names as hex-encoded ASCII."""
    try:
        return bytes.fromhex(hex_name).decode("ascii")
    except (ValueError, UnicodeDecodeError) as e:
        raise NameActionDecodeError(
            f"Cannot decode name item {hex_name!r}: {e}", field="name"
        ) from e


def _parse_output(vout: Dict[str, Any], kind: CovenantType) -> CovenantOutput:
    try:
        return CovenantOutput.model_validate(vout)
    except ValidationError as e:
        error = e.errors()[0]
        loc = error["loc"]
        field = str(loc[1] if loc[0] == "covenant" and len(loc) > 1 else loc[0])
        raise NameActionDecodeError(
            f"{kind.name} covenant output is malformed at {'.'.join(map(str, loc))}: {error['msg']}",
            field=field,
            covenant_type=int(kind),
        ) from e


def _covenant_item(items: Tuple[str, ...], index: int, field: str, kind: CovenantType) -> str:
    if index >= len(items):
        raise NameActionDecodeError(
            f"{kind.name} covenant is missing item {index} ({field})",
            field=field,
            covenant_type=int(kind),
        )
    return items[index]


def _make_decoder(spec: CovenantSpec) -> Callable[[Dict[str, Any]], NameAction]:
    def decode(vout: Dict[str, Any]) -> NameAction:
        output = _parse_output(vout, spec.kind)
        covenant = output.covenant
        if covenant.action != spec.kind.name:
            raise NameActionDecodeError(
                f"Covenant action {covenant.action!r} does not match {spec.kind.name}",
                field="action",
                covenant_type=int(spec.kind),
            )

        name_hash = _covenant_item(covenant.items, NAME_HASH_ITEM, "nameHash", spec.kind)

        name = None
        if spec.name_item is not None:
            name = decode_hex_name(_covenant_item(covenant.items, spec.name_item, "name", spec.kind))

        value = None
        if spec.captures_value:
            if output.value is None:
                raise NameActionDecodeError(
                    f"{spec.kind.name} output has no value",
                    field="value",
                    covenant_type=int(spec.kind),
                )
            value = output.value

        return NameAction(kind=spec.kind, name_hash=name_hash, name=name, value=value)

    decode.__name__ = f"decode_{spec.kind.name.lower()}"
    return decode


COVENANT_DECODERS: Dict[int, Callable[[Dict[str, Any]], NameAction]] = {
    int(kind): _make_decoder(spec) for kind, spec in COVENANT_SPECS.items()
}


def get_name_action_from_txout(vout: Dict[str, Any]) -> Optional[NameAction]:
    """
    Decode a transaction output into a NameAction.

    Returns:
        NameAction, or None if the output carries no name covenant

    Raises:
        NameActionDecodeError: If the covenant is malformed
    """
    covenant_type = (vout.get("covenant") or {}).get("type")
    if covenant_type is None:
        return None

    decoder = COVENANT_DECODERS.get(covenant_type)
    if decoder is None:
        return None

    return decoder(vout)


def get_name_actions_from_block(block: Dict[str, Any]) -> List[NameAction]:
    """
    Extract the name actions contained in a block's transactions.

    Args:
        block: `getblock` result with transaction details

    Raises:
        NameActionDecodeError: If the block has no transactions attached
    """
    txs = block.get("tx")
    if txs is None:
        raise NameActionDecodeError("Block tx is undefined", field="tx")

    name_actions = []
    for tx in txs:
        for vout in tx.get("vout", []):
            name_action = get_name_action_from_txout(vout)
            if name_action:
                name_actions.append(name_action)

    logger.debug(f"Decoded {len(name_actions)} name actions from block {block.get('height')}")
    return name_actions
