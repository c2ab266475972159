"""
Core Module Package.

This package contains the core infrastructure components
that all other modules depend on.

Components:
- exceptions: Custom exception hierarchy
- constants: Covenant types and network auction timing
- config: Environment-driven settings and logging setup
"""

from .config import AlertServiceConfig, configure_logging
from .constants import CovenantType, NetworkParams, get_network
from .exceptions import (
    AlertingException,
    BlockProcessingInProgressError,
    ConfigurationError,
    InvalidConfigError,
    MissingConfigError,
    NotFoundError,
    StorageError,
    UpstreamQueryError,
    ValidationError,
)

__all__ = [
    "AlertServiceConfig",
    "configure_logging",
    "CovenantType",
    "NetworkParams",
    "get_network",
    "AlertingException",
    "BlockProcessingInProgressError",
    "ConfigurationError",
    "InvalidConfigError",
    "MissingConfigError",
    "NotFoundError",
    "StorageError",
    "UpstreamQueryError",
    "ValidationError",
]
