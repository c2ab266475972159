"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines the custom exceptions for the name alert system.

- Provides clear exception hierarchy
- Enables specific error handling
- Distinguishes fatal storage failures from per-name upstream failures
- Includes context for debugging

============================================================
EXCEPTION HIERARCHY
============================================================
AlertingException (base)
├── ConfigurationError
│   ├── MissingConfigError
│   └── InvalidConfigError
├── ValidationError
├── NotFoundError
├── UpstreamQueryError
│   └── InvalidNameError          (chain.exceptions)
├── StorageError
│   └── RepositoryException       (storage.repositories.exceptions)
├── NameActionDecodeError         (chain.exceptions)
└── BlockProcessingInProgressError

============================================================
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# ============================================================
# SEVERITY LEVELS
# ============================================================

class Severity(Enum):
    """Exception severity levels for alerting."""

    LOW = "low"
    """Minor issue, informational."""

    MEDIUM = "medium"
    """Moderate issue, requires attention."""

    HIGH = "high"
    """Serious issue, the current operation failed."""

    CRITICAL = "critical"
    """Critical issue, the service cannot continue."""


# ============================================================
# ERROR CLASSIFICATION
# ============================================================

class ErrorClassification(Enum):
    """Classification of error recoverability."""

    RECOVERABLE = "recoverable"
    """Caller can handle the error and carry on."""

    TRANSIENT = "transient"
    """Temporary error, retrying on the next block may succeed."""

    NON_RECOVERABLE = "non_recoverable"
    """Permanent error, requires intervention."""


# ============================================================
# BASE EXCEPTION
# ============================================================

class AlertingException(Exception):
    """
    Base exception for all name alert errors.

    All exceptions carry:
    - severity: for operator attention
    - context: for debugging
    - classification: for retry decisions
    - timestamp: when the error occurred
    """

    default_severity: Severity = Severity.MEDIUM
    default_classification: ErrorClassification = ErrorClassification.RECOVERABLE

    def __init__(
        self,
        message: str,
        severity: Optional[Severity] = None,
        context: Optional[Dict[str, Any]] = None,
        classification: Optional[ErrorClassification] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)

        self.message = message
        self.severity = severity or self.default_severity
        self.context = context or {}
        self.classification = classification or self.default_classification
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        if cause:
            self.context["cause_type"] = type(cause).__name__
            self.context["cause_message"] = str(cause)

    @property
    def is_recoverable(self) -> bool:
        """Check if error is recoverable."""
        return self.classification in (
            ErrorClassification.RECOVERABLE,
            ErrorClassification.TRANSIENT,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "severity": self.severity.value,
            "classification": self.classification.value,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None,
        }


# ============================================================
# CONFIGURATION ERRORS
# ============================================================

class ConfigurationError(AlertingException):
    """Error in configuration."""

    default_severity = Severity.HIGH
    default_classification = ErrorClassification.NON_RECOVERABLE

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if config_key:
            context["config_key"] = config_key
        if actual_value is not None:
            context["actual_value"] = str(actual_value)[:100]

        super().__init__(message, context=context, **kwargs)
        self.config_key = config_key


class MissingConfigError(ConfigurationError):
    """Required configuration is missing."""

    def __init__(self, key: str, source: str = "environment"):
        super().__init__(
            message=f"Missing required configuration: {key}",
            config_key=key,
            context={"source": source},
        )


class InvalidConfigError(ConfigurationError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            message=f"Invalid configuration for {key}: {reason}",
            config_key=key,
            actual_value=value,
            context={"reason": reason},
        )


# ============================================================
# INPUT ERRORS
# ============================================================

class ValidationError(AlertingException):
    """Malformed input to a create operation. Nothing was written."""

    default_severity = Severity.LOW

    def __init__(self, field: str, reason: str, value: Optional[Any] = None):
        context = {"field": field, "reason": reason}
        if value is not None:
            context["value"] = str(value)[:100]
        super().__init__(f"Invalid {field}: {reason}", context=context)
        self.field = field
        self.reason = reason


class NotFoundError(AlertingException):
    """Requested alert does not exist."""

    default_severity = Severity.LOW

    def __init__(self, entity: str, **lookup: Any):
        lookup_str = ", ".join(f"{k}={v}" for k, v in lookup.items())
        super().__init__(
            f"{entity} not found ({lookup_str})",
            context={"entity": entity, **{k: str(v) for k, v in lookup.items()}},
        )
        self.entity = entity


# ============================================================
# UPSTREAM ERRORS
# ============================================================

class UpstreamQueryError(AlertingException):
    """The chain query collaborator failed to answer."""

    default_classification = ErrorClassification.TRANSIENT

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        target: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if operation:
            context["operation"] = operation
        if target:
            context["target"] = target

        super().__init__(message, context=context, **kwargs)
        self.operation = operation
        self.target = target


# ============================================================
# STORAGE ERRORS
# ============================================================

class StorageError(AlertingException):
    """Storage transaction or connection failure. Fatal to the operation."""

    default_severity = Severity.HIGH
    default_classification = ErrorClassification.TRANSIENT


# ============================================================
# BLOCK PROCESSING ERRORS
# ============================================================

class BlockProcessingInProgressError(AlertingException):
    """A new block arrived while the previous one is still being processed."""

    def __init__(self, block_height: int, in_progress_height: Optional[int]):
        super().__init__(
            f"Cannot process block {block_height}: "
            f"block {in_progress_height} is still being processed",
            context={
                "block_height": block_height,
                "in_progress_height": in_progress_height,
            },
            classification=ErrorClassification.TRANSIENT,
        )
        self.block_height = block_height
        self.in_progress_height = in_progress_height
