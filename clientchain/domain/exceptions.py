"""Domain exceptions for the ClientChain automation engine.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers. A policy veto is
not an exception; see clientchain.domain.value_objects.policy.PolicyVeto.
"""

from typing import Any


class ClientChainException(Exception):
    """Base exception for all ClientChain application errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body used by the API exception handler."""
        body: dict[str, Any] = {"error": self.error_code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationException(ClientChainException):
    """Raised when input validation fails (e.g. empty trigger list, negative wait)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(ClientChainException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'workflow', 'execution').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ChannelException(ClientChainException):
    """Raised when an outbound gateway (SMS, email, webhook) rejects or fails a send."""

    def __init__(
        self,
        channel: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        details: dict[str, Any] = {"channel": channel}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(f"{channel} delivery failed: {message}", "CHANNEL_ERROR", details)


class ExecutionFailureException(ClientChainException):
    """Wraps an unexpected error raised while running an action handler."""

    def __init__(self, execution_id: str, step_index: int, reason: str) -> None:
        super().__init__(
            f"Execution {execution_id} failed at step {step_index}: {reason}",
            "EXECUTION_FAILURE",
            {"execution_id": execution_id, "step_index": step_index},
        )


class ExecutionLeaseLostException(ClientChainException):
    """Raised when a save finds the execution lease held by another worker."""

    def __init__(self, execution_id: str) -> None:
        super().__init__(
            f"Execution lease lost: {execution_id}",
            "EXECUTION_LEASE_LOST",
            {"execution_id": execution_id},
        )


class InvalidExecutionTransitionException(ClientChainException):
    """Raised when a terminal execution (completed or failed) is mutated."""

    def __init__(self, execution_id: str, status: str) -> None:
        super().__init__(
            f"Execution {execution_id} is {status} and cannot change",
            "INVALID_EXECUTION_TRANSITION",
            {"execution_id": execution_id, "status": status},
        )


class WorkflowInactiveException(ClientChainException):
    """Raised when a manual run targets a paused workflow definition."""

    def __init__(self, workflow_id: str) -> None:
        super().__init__(
            f"Workflow is not active: {workflow_id}",
            "WORKFLOW_INACTIVE",
            {"workflow_id": workflow_id},
        )


class InsufficientCreditsException(ClientChainException):
    """Raised when a redemption exceeds the subject's credit balance."""

    def __init__(self, subject_id: str, requested: int, available: int | None = None) -> None:
        details: dict[str, Any] = {"subject_id": subject_id, "requested": requested}
        if available is not None:
            details["available"] = available
        super().__init__("Insufficient credits", "INSUFFICIENT_CREDITS", details)


class SqlNotConfiguredException(ClientChainException):
    """Raised when an operation requires Postgres but DATABASE_URL is not set."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
