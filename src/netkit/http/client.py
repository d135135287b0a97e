"""Construction of the pooled httpx client used by the transport.

Timeouts and connection limits come from :class:`Settings`; callers
may inject their own ``httpx`` transport (for example
``httpx.MockTransport`` in tests) without changing anything else.
"""

import logging
import os
from typing import Any, Dict, Optional

import httpx

from ..config.settings import Settings

logger = logging.getLogger(__name__)


def create_timeout(
    connect: float = 5.0,
    read: float = 30.0,
    write: float = 10.0,
    pool: float = 5.0,
) -> httpx.Timeout:
    """Create a timeout configuration object.

    :param connect: Connection timeout in seconds
    :type connect: float
    :param read: Read timeout in seconds
    :type read: float
    :param write: Write timeout in seconds
    :type write: float
    :param pool: Pool timeout in seconds
    :type pool: float
    :return: Configured timeout object
    :rtype: httpx.Timeout
    """
    return httpx.Timeout(connect=connect, read=read, write=write, pool=pool)


def create_limits(
    max_keepalive_connections: int = 10,
    max_connections: int = 20,
    keepalive_expiry: float = 30.0,
) -> httpx.Limits:
    """Create a connection limits configuration object.

    :param max_keepalive_connections: Maximum number of keepalive connections
    :type max_keepalive_connections: int
    :param max_connections: Maximum total number of connections
    :type max_connections: int
    :param keepalive_expiry: Keepalive connection expiry time in seconds
    :type keepalive_expiry: float
    :return: Configured limits object
    :rtype: httpx.Limits
    """
    return httpx.Limits(
        max_keepalive_connections=max_keepalive_connections,
        max_connections=max_connections,
        keepalive_expiry=keepalive_expiry,
    )


def create_http_client(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    **kwargs: Any,
) -> httpx.AsyncClient:
    """Create an ``httpx.AsyncClient`` configured from settings.

    HTTP/2 is enabled when ``HTTP_ENABLE_HTTP2=true`` and the ``h2``
    package is importable.

    :param settings: Dispatcher settings
    :type settings: Settings
    :param transport: Optional low-level httpx transport
    :type transport: Optional[httpx.AsyncBaseTransport]
    :param kwargs: Additional ``httpx.AsyncClient`` options
    :return: Configured client bound to the effective base URL
    :rtype: httpx.AsyncClient
    """
    http2_flag = kwargs.pop("http2", None)
    if http2_flag is None:
        http2_flag = os.getenv("HTTP_ENABLE_HTTP2", "false").lower() == "true"
    if http2_flag and transport is None:
        try:
            import h2  # type: ignore  # noqa: F401
        except ImportError:
            logger.warning(
                "HTTP/2 requested but 'h2' package not installed; falling back to HTTP/1.1"
            )
            http2_flag = False

    client_config: Dict[str, Any] = {
        "base_url": settings.effective_base_url,
        "timeout": create_timeout(
            settings.connect_timeout,
            settings.read_timeout,
            settings.write_timeout,
            settings.pool_timeout,
        ),
        "follow_redirects": settings.follow_redirects,
        **kwargs,
    }
    if transport is not None:
        client_config["transport"] = transport
    else:
        client_config["limits"] = create_limits(
            settings.max_keepalive_connections,
            settings.max_connections,
            settings.keepalive_expiry,
        )
        client_config["http2"] = bool(http2_flag)

    logger.debug("Creating HTTP client for %s", settings.effective_base_url)
    return httpx.AsyncClient(**client_config)
