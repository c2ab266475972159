"""
Shared pytest fixtures.

============================================================
FIXTURES
============================================================
- database: file-backed SQLite alert store under tmp_path
- chain: AsyncMock chain query collaborator
- manager: AlertManager wired to both

============================================================
"""

from typing import Any, Dict
from unittest.mock import AsyncMock

import pytest

from alerts.manager import AlertManager
from chain.base import ChainQueryService
from core.constants import get_network
from storage.database import DatabaseConfig, open_database

from tests.fixtures import OCER_OPEN_HEIGHT, name_info


def serve_name_infos(chain: AsyncMock, name_infos: Dict[str, Any]) -> None:
    """Answer get_name_info from a name -> `getnameinfo` mapping."""
    def lookup(encoded_name):
        value = name_infos[encoded_name]
        if isinstance(value, Exception):
            raise value
        return value

    chain.get_name_info.side_effect = lookup


@pytest.fixture
def database(tmp_path):
    """Fresh alert store with the schema created."""
    db = open_database(DatabaseConfig(url=f"sqlite:///{tmp_path / 'alerts.db'}"))
    db.create_all_tables()
    yield db
    db.close()


@pytest.fixture
def chain():
    """Chain collaborator at the ocer opening height, every name unopened."""
    mock = AsyncMock(spec=ChainQueryService)
    mock.get_current_block_height.return_value = OCER_OPEN_HEIGHT
    mock.get_name_info.return_value = name_info("no_auction")
    mock.get_name_by_hash.return_value = "ocer"
    return mock


@pytest.fixture
def manager(chain, database):
    """Alert manager on mainnet timing."""
    return AlertManager(chain, database, network=get_network("main"))
