"""netkit: authenticated HTTP request dispatcher.

This package dispatches requests against a remote API, normalizes
server failures into a single exception shape, and coordinates
credential refresh so that concurrent requests failing with an expired
session trigger exactly one refresh.

:var __version__: Current package version
:type __version__: str
"""

from .config.settings import Settings
from .enums import RequestMethod, request_method_to_string
from .errors import normalize_error
from .exceptions import (
    ApiException,
    ConfigurationError,
    NetKitError,
    RequestCancelledError,
    ResponseShapeError,
)
from .models import LogicalRequest, NetworkErrorParams, RequestOptions
from .network_manager import NetworkManager
from .utils.secure_logging import setup_logging

__version__ = "0.1.0"

__all__ = [
    "NetworkManager",
    "Settings",
    "NetworkErrorParams",
    "RequestOptions",
    "LogicalRequest",
    "RequestMethod",
    "request_method_to_string",
    "normalize_error",
    "NetKitError",
    "ApiException",
    "ResponseShapeError",
    "RequestCancelledError",
    "ConfigurationError",
    "setup_logging",
]
