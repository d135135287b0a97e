"""Single-flight coordination of credential refresh.

When a request fails with 401, the :class:`RefreshCoordinator` decides
what happens next:

- no refresh in flight: refresh credentials once, replay everything
  that queued up meanwhile, then retry the failed request;
- a refresh already in flight: park the request in the
  :class:`RequestQueue` until that refresh settles;
- the failing request *is* the refresh call: give up, cancel the queue
  and surface the failure.

At most one refresh call is outstanding per coordinator. The
``refreshing`` flag is checked and set with no suspension point in
between, so concurrent tasks on one event loop cannot both start a
refresh.

Example:
    >>> queue = RequestQueue(transport)
    >>> coordinator = RefreshCoordinator(transport, queue, "/auth/refresh")
    >>> response = await coordinator.send(request)
"""

import asyncio
import logging
from typing import Callable, Optional

import httpx

from .request_queue import RequestQueue
from .transport import Transport

logger = logging.getLogger(__name__)

UNAUTHORIZED = 401
REFRESH_FAILED_REASON = "Token refresh failed"


class RefreshCoordinator:
    """Guard that lets exactly one token refresh run at a time.

    :param transport: Transport used for the refresh call and retries
    :type transport: Transport
    :param queue: Queue holding requests that wait for the refresh
    :type queue: RequestQueue
    :param refresh_token_path: Path of the refresh endpoint. When None
        the coordinator never activates and every failure passes
        through unchanged.
    :type refresh_token_path: Optional[str]
    :param refresh_method: HTTP method of the refresh call
    :type refresh_method: str
    :param refresh_request_factory: Builds the refresh request; defaults
        to ``transport.build_request(refresh_method, refresh_token_path)``
    :type refresh_request_factory: Optional[Callable[[], httpx.Request]]
    :param base_url: Base URL relative refresh paths are resolved
        against; only its path component is used
    :type base_url: Optional[str]
    """

    def __init__(
        self,
        transport: Transport,
        queue: RequestQueue,
        refresh_token_path: Optional[str] = None,
        refresh_method: str = "POST",
        refresh_request_factory: Optional[Callable[[], httpx.Request]] = None,
        base_url: Optional[str] = None,
    ):
        self._transport = transport
        self._queue = queue
        self.refresh_token_path = refresh_token_path
        self.refresh_method = refresh_method
        self.base_url = base_url
        self._refresh_request_factory = refresh_request_factory
        self._refreshing = False

    @property
    def refreshing(self) -> bool:
        """Whether a refresh call is currently outstanding."""
        return self._refreshing

    @property
    def enabled(self) -> bool:
        return bool(self.refresh_token_path)

    def build_refresh_request(self) -> httpx.Request:
        """Build the request sent to the refresh endpoint."""
        if self._refresh_request_factory is not None:
            return self._refresh_request_factory()
        return self._transport.build_request(
            self.refresh_method, self.refresh_token_path
        )

    def is_refresh_request(self, request: Optional[httpx.Request]) -> bool:
        """Check whether a request targets the refresh endpoint.

        The refresh path may be configured as a bare path or as an
        absolute URL. A bare path is resolved under the path of
        ``base_url``; only path components are compared.

        :param request: Request to check
        :type request: Optional[httpx.Request]
        :return: True if the request path is the refresh endpoint path
        :rtype: bool
        """
        if request is None or not self.refresh_token_path:
            return False
        refresh_url = httpx.URL(self.refresh_token_path)
        refresh_path = refresh_url.path.rstrip("/")
        if not refresh_path:
            return False
        if not refresh_url.is_absolute_url and self.base_url:
            base_path = httpx.URL(self.base_url).path.rstrip("/")
            refresh_path = f"{base_path}/{refresh_path.lstrip('/')}"
        return request.url.path.rstrip("/") == refresh_path

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send a request, coordinating a refresh on authorization failure.

        :param request: Request to send
        :type request: httpx.Request
        :return: The response, possibly from a replay after refresh
        :rtype: httpx.Response
        :raises httpx.HTTPStatusError: Server failures that could not be
            recovered by a refresh, including a failed refresh call
        :raises httpx.RequestError: Failures without any response
        :raises RequestCancelledError: If the request was queued and the
            refresh it was waiting for failed
        """
        try:
            return await self._transport.send(request)
        except httpx.HTTPStatusError as error:
            return await self.handle_failure(error)

    async def handle_failure(self, error: httpx.HTTPStatusError) -> httpx.Response:
        """Decide how to recover from a failed response.

        :param error: Failure raised by the transport
        :type error: httpx.HTTPStatusError
        :return: Response obtained after refreshing credentials
        :rtype: httpx.Response
        """
        if error.response.status_code != UNAUTHORIZED or not self.enabled:
            raise error

        request = error.request
        if self.is_refresh_request(request):
            # Refreshing here would recurse
            logger.warning(
                f"Refresh endpoint {request.url.path} rejected credentials"
            )
            self._queue.cancel_all(REFRESH_FAILED_REASON)
            raise error

        if self._refreshing:
            logger.debug(
                f"Refresh in progress, queueing {request.method} {request.url.path}"
            )
            return await self._queue.enqueue(request)

        self._refreshing = True
        logger.info(
            f"Received 401 for {request.method} {request.url.path}, refreshing credentials"
        )
        try:
            await self._transport.send(self.build_refresh_request())
        except asyncio.CancelledError:
            self._refreshing = False
            self._queue.cancel_all("Token refresh cancelled")
            raise
        except Exception as refresh_error:
            self._refreshing = False
            reason = str(refresh_error) or REFRESH_FAILED_REASON
            logger.warning(f"Token refresh failed: {reason}")
            self._queue.cancel_all(reason)
            raise

        self._refreshing = False
        logger.info("Token refresh succeeded")
        await self._queue.drain_and_replay()

        # Exactly one retry; a second 401 surfaces to the caller
        logger.debug(f"Retrying {request.method} {request.url.path}")
        return await self._transport.send(request)
