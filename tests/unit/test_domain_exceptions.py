"""Tests for domain exceptions (error_code, message, details) and their HTTP status."""

import pytest

from clientchain.core.exception_handlers import status_for_error_code
from clientchain.domain.exceptions import (
    ChannelException,
    ClientChainException,
    ExecutionFailureException,
    ExecutionLeaseLostException,
    InsufficientCreditsException,
    InvalidExecutionTransitionException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    ValidationException,
    WorkflowInactiveException,
)


def test_base_exception_default_error_code() -> None:
    """Base ClientChainException uses class name as error_code when not provided."""
    exc = ClientChainException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "ClientChainException"
    assert exc.details == {}
    assert exc.to_dict() == {"error": "ClientChainException", "message": "Something failed"}


def test_base_exception_custom_error_code_and_details() -> None:
    exc = ClientChainException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_validation_exception() -> None:
    """ValidationException sets VALIDATION_ERROR and optional field in details."""
    exc = ValidationException("Invalid format", field="actions")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "actions"}
    assert ValidationException("Invalid").details == {}


def test_resource_not_found_exception() -> None:
    exc = ResourceNotFoundException("workflow", "wf1")
    assert exc.message == "workflow not found: wf1"
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.details == {"resource_type": "workflow", "resource_id": "wf1"}


def test_channel_exception_carries_status_code_only_when_known() -> None:
    assert ChannelException("sms", "down").details == {"channel": "sms"}
    exc = ChannelException("email", "HTTP 401", status_code=401)
    assert exc.message == "email delivery failed: HTTP 401"
    assert exc.details == {"channel": "email", "status_code": 401}


def test_execution_exceptions() -> None:
    failure = ExecutionFailureException("ex1", 2, "KeyError: 'x'")
    assert failure.message == "Execution ex1 failed at step 2: KeyError: 'x'"
    assert failure.details == {"execution_id": "ex1", "step_index": 2}
    assert ExecutionLeaseLostException("ex1").error_code == "EXECUTION_LEASE_LOST"
    transition = InvalidExecutionTransitionException("ex1", "completed")
    assert transition.message == "Execution ex1 is completed and cannot change"


def test_insufficient_credits_exception() -> None:
    exc = InsufficientCreditsException("s1", 50, 20)
    assert exc.message == "Insufficient credits"
    assert exc.details == {"subject_id": "s1", "requested": 50, "available": 20}


def test_sql_not_configured_exception() -> None:
    exc = SqlNotConfiguredException()
    assert exc.error_code == "SERVICE_UNAVAILABLE"
    assert "SQL database" in exc.message


@pytest.mark.parametrize(
    ("exc", "status"),
    [
        (ValidationException("x"), 400),
        (ResourceNotFoundException("workflow", "w"), 404),
        (WorkflowInactiveException("w"), 409),
        (InsufficientCreditsException("s", 1), 409),
        (InvalidExecutionTransitionException("e", "failed"), 409),
        (ChannelException("sms", "down"), 502),
        (SqlNotConfiguredException(), 503),
        (ClientChainException("x"), 400),
    ],
)
def test_error_codes_map_to_http_status(exc: ClientChainException, status: int) -> None:
    assert status_for_error_code(exc.error_code) == status
