"""
Tests for configuration loading and the exception hierarchy.
"""

import pytest

from chain.exceptions import InvalidNameError, NameActionDecodeError
from core.config import AlertServiceConfig
from core.constants import NETWORKS, get_network
from core.exceptions import (
    AlertingException,
    BlockProcessingInProgressError,
    ErrorClassification,
    InvalidConfigError,
    MissingConfigError,
    NotFoundError,
    Severity,
    StorageError,
    UpstreamQueryError,
    ValidationError,
)
from storage.repositories.exceptions import QueryError


class TestAlertServiceConfig:
    """Tests for AlertServiceConfig.from_env."""

    def test_defaults(self):
        config = AlertServiceConfig.from_env({}, load_env_file=False)

        assert config.database_url == "sqlite:///name_alerts.db"
        assert config.database_echo is False
        assert config.network == get_network("main")
        assert config.poll_interval_seconds == 10.0
        assert config.max_catchup_blocks == 10

    def test_reads_environment(self):
        """Test that every key is read and normalized."""
        config = AlertServiceConfig.from_env({
            "DATABASE_URL": "sqlite:///other.db",
            "DATABASE_ECHO": "Yes",
            "HNS_NETWORK": " Regtest ",
            "LOG_LEVEL": "debug",
            "BLOCK_POLL_INTERVAL_SECONDS": "2.5",
            "MAX_CATCHUP_BLOCKS": "3",
        }, load_env_file=False)

        assert config.database_echo is True
        assert config.network.tree_interval == 5
        assert config.log_level == "DEBUG"
        assert config.poll_interval_seconds == 2.5
        assert config.max_catchup_blocks == 3
        assert config.database_config().url == "sqlite:///other.db"
        assert config.database_config().echo is True

    @pytest.mark.parametrize("key,value", [
        ("HNS_NETWORK", "moonnet"),
        ("DATABASE_ECHO", "maybe"),
        ("LOG_LEVEL", "LOUD"),
        ("BLOCK_POLL_INTERVAL_SECONDS", "soon"),
        ("BLOCK_POLL_INTERVAL_SECONDS", "0"),
        ("MAX_CATCHUP_BLOCKS", "-1"),
        ("MAX_CATCHUP_BLOCKS", "2.5"),
    ])
    def test_invalid_values(self, key, value):
        with pytest.raises(InvalidConfigError) as exc_info:
            AlertServiceConfig.from_env({key: value}, load_env_file=False)
        assert exc_info.value.config_key == key

    def test_empty_database_url(self):
        with pytest.raises(MissingConfigError):
            AlertServiceConfig.from_env({"DATABASE_URL": ""}, load_env_file=False)


class TestNetworks:
    """Tests for network timing constants."""

    def test_mainnet_open_period(self):
        assert get_network("main").open_period == 37

    def test_unknown_network(self):
        with pytest.raises(KeyError):
            get_network("moonnet")

    def test_every_network_named(self):
        assert all(params.name == key for key, params in NETWORKS.items())


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_hierarchy(self):
        for exc in (
            InvalidConfigError("K", "v", "bad"),
            ValidationError("chat_id", "must be an integer"),
            NotFoundError("NameAlert", chat_id=1),
            UpstreamQueryError("down"),
            InvalidNameError("-x"),
            StorageError("disk"),
            QueryError("Repo", "count", "boom"),
            NameActionDecodeError("bad"),
            BlockProcessingInProgressError(2, 1),
        ):
            assert isinstance(exc, AlertingException)

        assert isinstance(InvalidNameError("-x"), UpstreamQueryError)
        assert isinstance(QueryError("Repo", "count", "boom"), StorageError)

    def test_classification(self):
        """Test which errors are worth retrying."""
        assert UpstreamQueryError("down").classification == ErrorClassification.TRANSIENT
        assert InvalidNameError("-x").classification == ErrorClassification.RECOVERABLE
        assert NameActionDecodeError("bad").is_recoverable is False
        assert StorageError("disk").severity == Severity.HIGH

    def test_to_dict_keeps_cause(self):
        cause = TimeoutError("rpc timeout")
        exc = UpstreamQueryError("down", operation="get_name_info", target="ocer", cause=cause)

        data = exc.to_dict()

        assert data["type"] == "UpstreamQueryError"
        assert data["context"]["operation"] == "get_name_info"
        assert data["context"]["cause_type"] == "TimeoutError"
        assert data["cause"] == "rpc timeout"

    def test_not_found_message(self):
        exc = NotFoundError("NameAlert", chat_id=1, target_name="ocer")

        assert str(exc) == "NameAlert not found (chat_id=1, target_name=ocer)"
