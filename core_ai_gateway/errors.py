"""Error taxonomy for the gateway and voice proxy."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    OUT_OF_SCOPE = "out_of_scope"
    SERVICE_UNCONFIGURED = "service_unconfigured"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_FAILURE = "upstream_failure"
    INPUT_INVALID = "input_invalid"


class GatewayError(Exception):
    """Base exception for gateway errors."""


class ServiceUnconfigured(GatewayError):
    """A capability was not configured at process start."""

    def __init__(self, service: str):
        super().__init__(f"{service} is not configured")
        self.service = service


class UpstreamError(GatewayError):
    """An external service answered with an error or an unusable body."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def is_rate_limited(exc: BaseException) -> bool:
    """
    Decide whether an upstream failure is a rate-limit/quota signal.

    Matches HTTP 429 on errors that carry a status code, or the usual
    quota markers in the error message.
    """
    if getattr(exc, "status_code", None) == 429 or getattr(exc, "status", None) == 429:
        return True
    message = str(exc)
    return "429" in message or "RESOURCE_EXHAUSTED" in message
