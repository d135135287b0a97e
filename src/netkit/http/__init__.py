"""HTTP layer public API (barrel module).

This package provides:
- Client construction helpers (timeouts, pool limits)
- The transport abstraction and its httpx implementation
- The pending request queue
- The single-flight refresh coordinator

Recommended import pattern for consumers:
    from netkit.http import RefreshCoordinator, RequestQueue, HttpxTransport
"""

from .client import create_http_client, create_limits, create_timeout
from .refresh import REFRESH_FAILED_REASON, RefreshCoordinator
from .request_queue import (
    REPLAY_CANCELLED_REASON,
    CancelHandle,
    QueuedRequest,
    RequestQueue,
)
from .transport import HttpxTransport, Transport

__all__ = [
    "create_http_client",
    "create_timeout",
    "create_limits",
    "Transport",
    "HttpxTransport",
    "CancelHandle",
    "QueuedRequest",
    "RequestQueue",
    "RefreshCoordinator",
    "REFRESH_FAILED_REASON",
    "REPLAY_CANCELLED_REASON",
]
