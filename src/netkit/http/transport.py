"""Transport abstraction consumed by the coordinator and the queue.

A transport sends one fully built ``httpx.Request`` and either returns
a successful response or raises:

- ``httpx.HTTPStatusError`` when the server answered with a non-2xx
  status (the exception carries the request and the response);
- ``httpx.RequestError`` when no response reached the client.
"""

import logging
from typing import Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)


@runtime_checkable
class Transport(Protocol):
    """Anything able to build and send a request."""

    def build_request(self, method: str, url: str, **kwargs) -> httpx.Request:
        """Build a request relative to the transport's base URL."""
        ...

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send the request, raising on failure statuses."""
        ...


class HttpxTransport:
    """Transport backed by a shared ``httpx.AsyncClient``.

    :param client: Client used to send requests
    :type client: httpx.AsyncClient
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    def build_request(self, method: str, url: str, **kwargs) -> httpx.Request:
        """Build a request bound to the client's base URL and defaults."""
        return self.client.build_request(method, url, **kwargs)

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send a request and raise for non-success statuses.

        :param request: Request to send
        :type request: httpx.Request
        :return: Successful response with its body read
        :rtype: httpx.Response
        :raises httpx.HTTPStatusError: If the status is not 2xx
        :raises httpx.RequestError: If no response was received
        """
        logger.debug(f"=== SEND: {request.method} {request.url}")
        response = await self.client.send(request)
        logger.debug(f"=== RECV: {response.status_code} {request.method} {request.url}")
        response.raise_for_status()
        return response

    async def aclose(self) -> None:
        await self.client.aclose()
