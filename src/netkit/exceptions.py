"""Structured exception classes for netkit."""

import json
from typing import Any, Dict, List, Optional

from .models import NetworkErrorParams


class NetKitError(Exception):
    """Base exception for all netkit errors.

    This exception serves as the parent class for all netkit specific
    exceptions, providing a consistent interface for error handling
    across the dispatcher, the refresh coordinator and the queue.

    :param message: Human-readable error message
    :param code: Optional error code for programmatic handling
    :param details: Optional dictionary containing additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the exception with message, code, and details."""
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format.

        :return: Dictionary containing error code, message, and details
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        """Convert exception to JSON string.

        :return: JSON-encoded string representation of the exception
        """
        return json.dumps(self.to_dict())


class ApiException(NetKitError):
    """Raised when the server answered a request with a failure.

    Instances are produced by the error normalizer from the response
    body and status code. They carry no reference to the transport
    error they were built from.

    :param status_code: HTTP status code (from the body or the response)
    :param message: Primary error message
    :param messages: Ordered sub-messages, possibly empty
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        messages: Optional[List[str]] = None,
    ):
        """Initialize API error with status, message and sub-messages."""
        self.status_code = status_code
        self.messages = tuple(messages or ())
        super().__init__(
            message=message,
            code="API_ERROR",
            details={"status_code": status_code, "messages": list(self.messages)},
        )

    @classmethod
    def from_json(
        cls,
        body: Any,
        params: Optional[NetworkErrorParams] = None,
        status_code: Optional[int] = None,
    ) -> "ApiException":
        """Build an exception from a decoded error body.

        :param body: Decoded response body (None, str, mapping, ...)
        :param params: Error vocabulary; defaults are used when omitted
        :param status_code: HTTP status of the failed response, if known
        :return: Normalized exception, never raises
        """
        # Import here to avoid circular dependency
        from .errors import normalize_error

        return normalize_error(body, params or NetworkErrorParams(), status_code)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(status_code={self.status_code!r}, "
            f"message={self.message!r}, messages={list(self.messages)!r})"
        )


class ResponseShapeError(ApiException):
    """Raised when a response body is an object where a list was expected, or vice versa."""

    def __init__(self, message: str):
        super().__init__(400, message)
        self.code = "RESPONSE_SHAPE_ERROR"


class RequestCancelledError(NetKitError):
    """Raised for queued requests dropped because a token refresh failed.

    :param reason: Reason supplied when the queue was cancelled
    """

    def __init__(self, reason: str):
        """Initialize cancellation error with the cancellation reason."""
        super().__init__(
            message=f"Request canceled: {reason}",
            code="REQUEST_CANCELLED",
            details={"reason": reason},
        )
        self.reason = reason


class ConfigurationError(NetKitError):
    """Raised for configuration-related errors.

    :param message: Description of the configuration error
    :param setting: Optional name of the problematic setting
    """

    def __init__(self, message: str, setting: Optional[str] = None):
        """Initialize configuration error with message and optional setting."""
        details = {}
        if setting:
            details["setting"] = setting
        super().__init__(message=message, code="CONFIGURATION_ERROR", details=details)
