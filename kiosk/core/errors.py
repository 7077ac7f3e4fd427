from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    INVALID_ARGUMENT = "invalid_argument"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    UPSTREAM_ERROR = "upstream_error"
    MALFORMED_RESPONSE = "malformed_response"
    STEP_DATA_UNAVAILABLE = "step_data_unavailable"
    WORKFLOW_ERROR = "workflow_error"


class CheckoutError(Exception):
    """
    Base of every failure the checkout flow reports.

    Callers branch on ``kind`` instead of probing attributes. ``http_status``
    is what the HTTP layer answers with; ``retryable`` marks failures the
    orchestrator may try again.
    """

    kind: ErrorKind
    http_status: int = 500
    retryable: bool = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind.value, "detail": self.message}


class InvalidArgument(CheckoutError):
    kind = ErrorKind.INVALID_ARGUMENT
    http_status = 400


class UpstreamUnavailable(CheckoutError):
    kind = ErrorKind.UPSTREAM_UNAVAILABLE
    http_status = 503
    retryable = True


class UpstreamError(CheckoutError):
    kind = ErrorKind.UPSTREAM_ERROR

    def __init__(self, status_code: int, body: str, message: Optional[str] = None):
        super().__init__(message or f"Upstream returned status {status_code}")
        self.status_code = status_code
        self.body = body

    @property
    def http_status(self) -> int:
        return self.status_code

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["upstream_status"] = self.status_code
        data["upstream_body"] = self.body
        return data


class MalformedResponse(CheckoutError):
    kind = ErrorKind.MALFORMED_RESPONSE
    http_status = 502


class StepDataUnavailable(CheckoutError):
    kind = ErrorKind.STEP_DATA_UNAVAILABLE
    http_status = 502

    def __init__(self, step: str, cause: CheckoutError):
        super().__init__(f"Failed to load data for step '{step}': {cause.message}")
        self.step = step
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["step"] = self.step
        data["cause"] = self.cause.kind.value
        return data


class WorkflowError(CheckoutError):
    kind = ErrorKind.WORKFLOW_ERROR
    http_status = 409

    def __init__(self, message: str, status: Optional[str] = None):
        super().__init__(message)
        self.status = status

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["status"] = self.status
        return data
