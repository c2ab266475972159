"""
Chain Exceptions - Errors raised while talking to the chain collaborator.

Per-name query failures are isolated by the reconciler; decode failures
abort the block that produced them.
"""

from typing import Any, Optional

from core.exceptions import AlertingException, ErrorClassification, UpstreamQueryError


class InvalidNameError(UpstreamQueryError):
    """Name is not a valid encoded name."""

    def __init__(self, name: Any, reason: str = "not a valid name") -> None:
        super().__init__(
            f"Invalid name {name!r}: {reason}",
            operation="verify_name",
            target=str(name),
            classification=ErrorClassification.RECOVERABLE,
        )
        self.name = name
        self.reason = reason


class NameActionDecodeError(AlertingException):
    """Transaction output could not be decoded into a name action."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        covenant_type: Optional[int] = None,
    ) -> None:
        context: dict[str, Any] = {}
        if field:
            context["field"] = field
        if covenant_type is not None:
            context["covenant_type"] = covenant_type
        super().__init__(
            message,
            context=context,
            classification=ErrorClassification.NON_RECOVERABLE,
        )
        self.field = field
        self.covenant_type = covenant_type
