"""
Core Module - Configuration.

============================================================
CONFIGURATION SOURCES
============================================================

Configuration is loaded from:
- Default values
- Environment variables
- A .env file in the working directory (python-dotenv)

Keys:
- DATABASE_URL                  SQLAlchemy URL of the alert store
- DATABASE_ECHO                 Log SQL statements (true/false)
- HNS_NETWORK                   main | testnet | regtest | simnet
- LOG_LEVEL                     stdlib logging level name
- BLOCK_POLL_INTERVAL_SECONDS   Block watcher poll interval
- MAX_CATCHUP_BLOCKS            Missed blocks replayed per poll

============================================================
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional, TYPE_CHECKING

from dotenv import load_dotenv

from .constants import DEFAULT_NETWORK, NETWORKS, NetworkParams, get_network
from .exceptions import InvalidConfigError, MissingConfigError

if TYPE_CHECKING:
    from storage.database import DatabaseConfig


logger = logging.getLogger(__name__)


DEFAULT_DATABASE_URL = "sqlite:///name_alerts.db"
DEFAULT_POLL_INTERVAL_SECONDS = 10.0
DEFAULT_MAX_CATCHUP_BLOCKS = 10

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


def _parse_bool(key: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InvalidConfigError(key, raw, "expected a boolean")


def _parse_positive(key: str, raw: str, cast):
    try:
        value = cast(raw)
    except ValueError:
        raise InvalidConfigError(key, raw, f"expected {cast.__name__}") from None
    if value <= 0:
        raise InvalidConfigError(key, raw, "must be positive")
    return value


# =============================================================
# SERVICE CONFIGURATION
# =============================================================


@dataclass
class AlertServiceConfig:
    """Runtime settings for the alert engine and its block watcher."""

    database_url: str = DEFAULT_DATABASE_URL
    database_echo: bool = False
    network_name: str = DEFAULT_NETWORK
    log_level: str = "INFO"
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    max_catchup_blocks: int = DEFAULT_MAX_CATCHUP_BLOCKS

    def __post_init__(self) -> None:
        """Validate settings."""
        if self.network_name not in NETWORKS:
            raise InvalidConfigError(
                "HNS_NETWORK",
                self.network_name,
                f"expected one of {sorted(NETWORKS)}",
            )
        if not self.database_url:
            raise MissingConfigError("DATABASE_URL")
        if logging.getLevelName(self.log_level.upper()) == f"Level {self.log_level.upper()}":
            raise InvalidConfigError("LOG_LEVEL", self.log_level, "unknown logging level")

    @property
    def network(self) -> NetworkParams:
        """Auction timing constants for the configured network."""
        return get_network(self.network_name)

    def database_config(self) -> "DatabaseConfig":
        """Build the storage handle configuration."""
        from storage.database import DatabaseConfig

        return DatabaseConfig(url=self.database_url, echo=self.database_echo)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        load_env_file: bool = True,
    ) -> "AlertServiceConfig":
        """
        Load configuration from environment variables.

        Args:
            environ: Mapping to read instead of os.environ
            load_env_file: Load a .env file into os.environ first

        Raises:
            InvalidConfigError: If a value cannot be parsed
        """
        if load_env_file:
            load_dotenv()
        env = os.environ if environ is None else environ

        config = cls(
            database_url=env.get("DATABASE_URL", DEFAULT_DATABASE_URL),
            database_echo=_parse_bool("DATABASE_ECHO", env.get("DATABASE_ECHO", "false")),
            network_name=env.get("HNS_NETWORK", DEFAULT_NETWORK).strip().lower(),
            log_level=env.get("LOG_LEVEL", "INFO").strip().upper(),
            poll_interval_seconds=_parse_positive(
                "BLOCK_POLL_INTERVAL_SECONDS",
                env.get("BLOCK_POLL_INTERVAL_SECONDS", str(DEFAULT_POLL_INTERVAL_SECONDS)),
                float,
            ),
            max_catchup_blocks=_parse_positive(
                "MAX_CATCHUP_BLOCKS",
                env.get("MAX_CATCHUP_BLOCKS", str(DEFAULT_MAX_CATCHUP_BLOCKS)),
                int,
            ),
        )

        logger.debug(
            f"Loaded config: network={config.network_name} "
            f"db={config.database_url.split('@')[-1]}"
        )
        return config


# =============================================================
# LOGGING
# =============================================================


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for scripts and services."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
