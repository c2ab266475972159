"""
Shared chain fixtures.

`getnameinfo` results and covenant outputs captured from mainnet,
trimmed to the fields the alert engine reads (plus a few it ignores).
"""

import copy
from typing import Any, Dict, List


OCER_NAME_HASH = "952f1c3e3ed55ca92e16ccbe806ae59173b8c86a2c4119aab8673c43c3fa1a90"
OCER_OPEN_HEIGHT = 62517


def _info(**overrides: Any) -> Dict[str, Any]:
    info = {
        "name": "",
        "nameHash": "",
        "state": "OPENING",
        "height": 0,
        "renewal": 0,
        "owner": {"hash": "", "index": 4294967295},
        "value": 0,
        "highest": 0,
        "data": "",
        "transfer": 0,
        "revoked": 0,
        "claimed": 0,
        "renewals": 0,
        "registered": False,
        "expired": False,
        "weak": False,
        "stats": None,
    }
    info.update(overrides)
    return info


NAME_INFOS: Dict[str, Dict[str, Any]] = {
    "opening": {
        "start": {"reserved": False, "week": 13, "start": 15120},
        "info": _info(
            state="OPENING",
            height=69583,
            renewal=69583,
            stats={
                "openPeriodStart": 69583,
                "openPeriodEnd": 69620,
                "blocksUntilBidding": 37,
                "hoursUntilBidding": 6.17,
            },
        ),
    },
    "no_auction": {
        "start": {"reserved": False, "week": 33, "start": 35280},
        "info": None,
    },
    "reserved": {
        "start": {"reserved": True, "week": 33, "start": 35280},
        "info": None,
    },
    "locked": {
        "start": {"reserved": True, "week": 24, "start": 26208},
        "info": _info(
            state="LOCKED",
            height=68610,
            renewal=68610,
            owner={"hash": "", "index": 1},
            claimed=1,
            weak=True,
            stats={
                "lockupPeriodStart": 68610,
                "lockupPeriodEnd": 72930,
                "blocksUntilClosed": 1354,
                "hoursUntilClosed": 225.67,
            },
        ),
    },
    "reserved_registered": {
        "start": {"reserved": True, "week": 9, "start": 11088},
        "info": _info(
            state="CLOSED",
            height=22913,
            renewal=30015,
            owner={"hash": "", "index": 0},
            data="00",
            claimed=1,
            registered=True,
            weak=True,
            stats={
                "renewalPeriodStart": 30015,
                "renewalPeriodEnd": 135135,
                "blocksUntilExpire": 64553,
                "daysUntilExpire": 448.28,
            },
        ),
    },
    "not_renewed": {
        "start": {"reserved": False, "week": 29, "start": 31248},
        "info": _info(
            state="CLOSED",
            height=66734,
            renewal=68933,
            owner={"hash": "", "index": 37},
            highest=1000000000,
            registered=True,
            stats={
                "renewalPeriodStart": 68933,
                "renewalPeriodEnd": 174053,
                "blocksUntilExpire": -104485,
                "daysUntilExpire": -725.58,
            },
        ),
    },
    "transferring": {
        "start": {"reserved": True, "week": 24, "start": 26208},
        "info": _info(
            name="newmessages",
            nameHash="81a8fc0f1d001528a5ec0eeb4bc97d62178ddae985d8699e2930939dd34cf490",
            state="CLOSED",
            height=67610,
            renewal=71975,
            owner={
                "hash": "b04a20938377550896760abe4605171f83700f9f9101e86c1b02ae46c87bb7d1",
                "index": 0,
            },
            data="00",
            transfer=72136,
            claimed=1,
            registered=True,
            weak=True,
            stats={
                "renewalPeriodStart": 71975,
                "renewalPeriodEnd": 177095,
                "blocksUntilExpire": 104959,
                "daysUntilExpire": 728.88,
                "transferLockupStart": 72136,
                "transferLockupEnd": 72424,
                "blocksUntilValidFinalize": 288,
                "hoursUntilValidFinalize": 48,
            },
        ),
    },
    "bidding": {
        "start": {"reserved": False, "week": 0, "start": 2016},
        "info": _info(
            state="BIDDING",
            height=68978,
            renewal=68978,
            stats={
                "bidPeriodStart": 69015,
                "bidPeriodEnd": 69735,
                "blocksUntilReveal": 151,
                "hoursUntilReveal": 25.17,
            },
        ),
    },
    "in_reveal": {
        "start": {"reserved": False, "week": 39, "start": 41328},
        "info": _info(
            state="REVEAL",
            height=67916,
            renewal=67916,
            owner={"hash": "", "index": 25},
            value=400000,
            highest=10000100,
            stats={
                "revealPeriodStart": 68673,
                "revealPeriodEnd": 70113,
                "blocksUntilClose": 530,
                "hoursUntilClose": 88.33,
            },
        ),
    },
    "closed": {
        "start": {"reserved": False, "week": 10, "start": 12096},
        "info": _info(
            state="CLOSED",
            height=12104,
            renewal=14302,
            owner={"hash": "", "index": 0},
            value=55000000000,
            highest=150000000000,
            registered=True,
            stats={
                "renewalPeriodStart": 14302,
                "renewalPeriodEnd": 119422,
                "blocksUntilExpire": 49787,
                "daysUntilExpire": 345.74,
            },
        ),
    },
    "reserved_claimed_unregistered": {
        "start": {"reserved": True, "week": 7, "start": 9072},
        "info": _info(
            name="namecheap",
            state="CLOSED",
            height=62517,
            renewal=62517,
            owner={"hash": "", "index": 2},
            claimed=1,
            weak=True,
            stats={
                "renewalPeriodStart": 62517,
                "renewalPeriodEnd": 167637,
                "blocksUntilExpire": 98002,
                "daysUntilExpire": 680.57,
            },
        ),
    },
    "ocer_opening": {
        "start": {"reserved": False, "week": 13, "start": 15120},
        "info": _info(
            name="ocer",
            nameHash=OCER_NAME_HASH,
            state="OPENING",
            height=OCER_OPEN_HEIGHT,
            renewal=OCER_OPEN_HEIGHT,
            stats={
                "openPeriodStart": OCER_OPEN_HEIGHT,
                "openPeriodEnd": OCER_OPEN_HEIGHT + 37,
                "blocksUntilBidding": 37,
                "hoursUntilBidding": 37 / 6,
            },
        ),
    },
}


def name_info(key: str) -> Dict[str, Any]:
    """Fresh copy of a named `getnameinfo` fixture."""
    return copy.deepcopy(NAME_INFOS[key])


# =============================================================
# COVENANT OUTPUTS
# =============================================================

TXOUT_CLAIM = {
    "value": 2720503.385487,
    "n": 2,
    "address": {"version": 0, "hash": "82f68da64ce03b33942890e4a7170496c700ff23"},
    "covenant": {
        "type": 1,
        "action": "CLAIM",
        "items": [
            "7b504982ea98af85bad61fe98851dafe1b8ef5d0c3a0da7865839dd876220a0b",
            "35f40000",
            "6e616d656368656170",
            "01",
            "0000000000a5e40e8ba291bd7e8649747fa7fb8a7af39f5bacdb7433cd2f5971",
            "01000000",
        ],
    },
}

TXOUT_OPEN = {
    "value": 0,
    "n": 0,
    "address": {"version": 0, "hash": "34493644a905d817b0db072d8c808b98eeca360a"},
    "covenant": {
        "type": 2,
        "action": "OPEN",
        "items": [OCER_NAME_HASH, "00000000", "6f636572"],
    },
}

TXOUT_BID = {
    "value": 16.01,
    "n": 0,
    "address": {"version": 0, "hash": "7e8b9bd5d556159e47c63e5ab1f1255d2b42bb79"},
    "covenant": {
        "type": 3,
        "action": "BID",
        "items": [
            "dddec8590b724da53d102b251978df3d242bb53994ea13217c793f070cd5172f",
            "43f10000",
            "6d6f766965626f78",
            "0d27c295f40b057b709945b37dcbce46cb5952ff954528718069d7e46c2d3860",
        ],
    },
}

TXOUT_REVEAL = {
    "value": 5.01,
    "n": 0,
    "address": {"version": 0, "hash": "7e531db90896d5a1480281c49440f3d77f294fb6"},
    "covenant": {
        "type": 4,
        "action": "REVEAL",
        "items": [
            "5fe8fb5e547d3959e28d6764324ee170743d8c39d664b91d37df1d4f4c65a171",
            "32070100",
            "000005f8b5dccada41403dcedba36945bf7decbbfaf43b591d87da7f4d5be067",
        ],
    },
}

TXOUT_NONE = {
    "value": 1999.5,
    "n": 1,
    "address": {"version": 0, "hash": "c7b3a9fcd6b1e6e2c1a1b9e4a1e7d6b1c2a3b4c5"},
    "covenant": {"type": 0, "action": "NONE", "items": []},
}


def make_block(height: int, vouts: List[Dict[str, Any]], block_hash: str = "") -> Dict[str, Any]:
    """`getblock` result with one transaction per output."""
    return {
        "hash": block_hash or f"{height:064x}",
        "height": height,
        "tx": [{"txid": f"{height:08x}{i:056x}", "vout": [copy.deepcopy(v)]} for i, v in enumerate(vouts)],
    }
