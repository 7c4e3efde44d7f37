"""Relay errors and the HTTP status each one is answered with."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error responses."""

    # Generic errors
    RELAY_ERROR = "RELAY_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Session / credential errors
    SESSION_NOT_CONFIGURED = "SESSION_NOT_CONFIGURED"
    CREDENTIALS_INVALID = "CREDENTIALS_INVALID"

    # Control errors
    UNKNOWN_ACTION = "UNKNOWN_ACTION"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"


class RelayException(Exception):
    """Base for errors answered to the caller with a status code.

    The registered handler renders `message` as the `error` string of the
    response body, so it must be safe to show to clients.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.RELAY_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class SessionNotConfiguredException(RelayException):
    """A command was issued before any token/group pair was installed."""

    def __init__(
        self,
        message: str = "No token or groupId configured. Open the web app and select a group first.",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message,
            code=ErrorCode.SESSION_NOT_CONFIGURED,
            status_code=500,
            details=details,
        )


class CredentialValidationException(RelayException):
    """Credential intake was called with a missing token or group id."""

    def __init__(self, message: str = "token and groupId are required", details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.CREDENTIALS_INVALID,
            status_code=400,
            details=details,
        )


class UnknownActionException(RelayException):
    """Command name does not map to an upstream action."""

    def __init__(self, action: str):
        super().__init__(
            f"Unknown playback action: {action}",
            code=ErrorCode.UNKNOWN_ACTION,
            status_code=400,
            details={"action": action},
        )


class UpstreamControlException(RelayException):
    """Upstream control API call failed (network error or non-2xx)."""

    def __init__(self, message: str, status_code: int = 502, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.UPSTREAM_ERROR,
            status_code=status_code,
            details=details,
        )
