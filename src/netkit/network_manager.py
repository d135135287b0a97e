"""Authenticated request dispatcher.

:class:`NetworkManager` is the public entry point of netkit. It turns a
logical request (path, method, body, per-call options) into an
``httpx.Request``, sends it through its :class:`RefreshCoordinator`,
checks the shape of the response body and normalizes server failures
into :class:`ApiException`.

Key Features:

- Static base headers merged with per-call headers
- Optional pre-emptive credential refresh before dispatch
- Single-flight token refresh with replay of parked requests
- Uniform error shape for every server failure
- Transport failures (no response) propagated untouched

Credentials themselves are not handled here. Attach an ``httpx.Auth``
to the client (or cookies on it) to inject tokens; httpx re-applies
client auth on every send, including replays after a refresh.

Examples:
    >>> async with NetworkManager(settings=Settings(base_url="https://api.example.com",
    ...                                             refresh_token_path="/auth/refresh")) as nm:
    ...     order = await nm.request("/orders/1", RequestMethod.GET)
    ...     orders = await nm.request_list("/orders", RequestMethod.GET)
"""

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel

from .config.settings import Settings
from .enums import RequestMethod, request_method_to_string
from .errors import normalize_error
from .exceptions import ConfigurationError, ResponseShapeError
from .http.client import create_http_client
from .http.refresh import RefreshCoordinator
from .http.request_queue import RequestQueue
from .http.transport import HttpxTransport, Transport
from .models import LogicalRequest, NetworkErrorParams, RequestOptions
from .utils.secure_logging import sanitize_headers

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

NOT_AN_OBJECT = "Response is not an object"
NOT_A_LIST = "Response is not a list"


def decode_body(response: httpx.Response) -> Any:
    """Decode a response body.

    :param response: Response whose body has been read
    :type response: httpx.Response
    :return: None for an empty body, the parsed JSON value, or the raw
        text when the body is not JSON
    :rtype: Any
    """
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class NetworkManager:
    """Dispatches API requests with coordinated credential refresh.

    Each manager owns one refresh coordinator and one request queue;
    concurrent calls on the same manager share them.

    :param settings: Dispatcher settings; loaded from the environment
        when omitted
    :type settings: Optional[Settings]
    :param error_params: Error vocabulary used to normalize failures
    :type error_params: Optional[NetworkErrorParams]
    :param base_options: Static options (headers, params, timeout)
        applied to every request
    :type base_options: Optional[RequestOptions]
    :param transport: Custom transport; when omitted an
        :class:`HttpxTransport` over ``client`` is used
    :type transport: Optional[Transport]
    :param client: httpx client to send with; created from settings
        when omitted and closed by :meth:`aclose`
    :type client: Optional[httpx.AsyncClient]
    :param http_transport: Low-level httpx transport for the created
        client (e.g. ``httpx.MockTransport``)
    :type http_transport: Optional[httpx.AsyncBaseTransport]
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        error_params: Optional[NetworkErrorParams] = None,
        base_options: Optional[RequestOptions] = None,
        transport: Optional[Transport] = None,
        client: Optional[httpx.AsyncClient] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or Settings()
        self.error_params = error_params or NetworkErrorParams()
        self.base_options = base_options or RequestOptions()

        if transport is not None and (client is not None or http_transport is not None):
            raise ConfigurationError(
                "Pass either a transport or an httpx client/transport, not both",
                setting="transport",
            )

        self._owns_transport = False
        if transport is None:
            if client is None:
                client = create_http_client(self.settings, transport=http_transport)
                self._owns_transport = True
            transport = HttpxTransport(client)
        self.transport = transport

        self.request_queue = RequestQueue(self.transport)
        self.refresh_coordinator = RefreshCoordinator(
            self.transport,
            self.request_queue,
            refresh_token_path=self.settings.refresh_token_path,
            refresh_method=self.settings.refresh_method,
            refresh_request_factory=self._build_refresh_request,
            base_url=self.settings.effective_base_url,
        )
        logger.debug(
            "NetworkManager initialized: base_url=%s refresh_path=%s",
            self.settings.effective_base_url,
            self.settings.refresh_token_path,
        )

    async def __aenter__(self) -> "NetworkManager":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the httpx client if this manager created it."""
        if self._owns_transport:
            await self.transport.aclose()
            self._owns_transport = False

    def _get_headers(self, options: RequestOptions) -> Dict[str, str]:
        return {**self.base_options.headers, **options.headers}

    def _build_request(self, logical: LogicalRequest) -> httpx.Request:
        """Derive the transport request from a logical request.

        :param logical: Request description
        :type logical: LogicalRequest
        :return: Request ready to send
        :rtype: httpx.Request
        """
        options = logical.config
        kwargs: Dict[str, Any] = {"headers": self._get_headers(options)}

        params = options.params if options.params is not None else self.base_options.params
        if params:
            kwargs["params"] = params

        timeout = options.timeout if options.timeout is not None else self.base_options.timeout
        if timeout is not None:
            kwargs["timeout"] = timeout

        if logical.data is not None:
            if isinstance(logical.data, (str, bytes)):
                kwargs["content"] = logical.data
            else:
                kwargs["json"] = logical.data

        return self.transport.build_request(
            request_method_to_string(logical.method), logical.url, **kwargs
        )

    def _build_refresh_request(self) -> httpx.Request:
        return self._build_request(
            LogicalRequest(
                url=self.settings.refresh_token_path,
                method=RequestMethod(self.settings.refresh_method),
            )
        )

    async def _send(self, request: httpx.Request) -> httpx.Response:
        """Send through the coordinator and normalize server failures."""
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Dispatching %s %s headers=%s",
                request.method,
                request.url,
                sanitize_headers(request.headers),
            )
        try:
            return await self.refresh_coordinator.send(request)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.debug(f"{request.method} {request.url.path} failed with {status}")
            raise normalize_error(
                decode_body(e.response), self.error_params, status
            ) from None
        except httpx.RequestError as e:
            logger.warning(
                f"{self.error_params.no_internet_error}: "
                f"{request.method} {request.url.path} ({type(e).__name__}: {e})"
            )
            raise

    async def _dispatch(self, logical: LogicalRequest) -> Any:
        request = self._build_request(logical)

        if logical.is_token_refresh_required:
            if self.refresh_coordinator.enabled:
                logger.debug("Refreshing credentials before dispatch")
                await self._send(self._build_refresh_request())
            else:
                logger.debug("Pre-dispatch refresh requested but no refresh path is set")

        response = await self._send(request)
        return decode_body(response)

    @staticmethod
    def _to_logical(
        url: str,
        method: RequestMethod,
        data: Any,
        config: Optional[RequestOptions],
        is_token_refresh_required: bool,
    ) -> LogicalRequest:
        return LogicalRequest(
            url=url,
            method=method,
            data=data,
            config=config or RequestOptions(),
            is_token_refresh_required=is_token_refresh_required,
        )

    async def request(
        self,
        url: str,
        method: RequestMethod = RequestMethod.GET,
        data: Any = None,
        config: Optional[RequestOptions] = None,
        is_token_refresh_required: bool = False,
        model: Optional[Type[M]] = None,
    ) -> Any:
        """Dispatch a request that returns a single object.

        :param url: Path relative to the base URL, or an absolute URL
        :type url: str
        :param method: HTTP method
        :type method: RequestMethod
        :param data: Request body; mappings and lists are sent as JSON,
            str and bytes as-is
        :type data: Any
        :param config: Per-call options merged over the base options
        :type config: Optional[RequestOptions]
        :param is_token_refresh_required: Refresh credentials first
        :type is_token_refresh_required: bool
        :param model: Optional pydantic model to validate the body into
        :type model: Optional[Type[BaseModel]]
        :return: The decoded body (or model instance)
        :raises ResponseShapeError: If the body is a list
        :raises ApiException: If the server answered with a failure
        :raises httpx.RequestError: If no response was received
        """
        body = await self._dispatch(
            self._to_logical(url, method, data, config, is_token_refresh_required)
        )
        if isinstance(body, list):
            raise ResponseShapeError(NOT_AN_OBJECT)
        if model is not None:
            return model.model_validate(body)
        return body

    async def request_list(
        self,
        url: str,
        method: RequestMethod = RequestMethod.GET,
        data: Any = None,
        config: Optional[RequestOptions] = None,
        is_token_refresh_required: bool = False,
        model: Optional[Type[M]] = None,
    ) -> List[Any]:
        """Dispatch a request that returns a list.

        Parameters are the same as for :meth:`request`.

        :return: The decoded list (or list of model instances)
        :raises ResponseShapeError: If the body is not a list
        """
        body = await self._dispatch(
            self._to_logical(url, method, data, config, is_token_refresh_required)
        )
        if not isinstance(body, list):
            raise ResponseShapeError(NOT_A_LIST)
        if model is not None:
            return [model.model_validate(item) for item in body]
        return body

    async def request_void(
        self,
        url: str,
        method: RequestMethod = RequestMethod.GET,
        data: Any = None,
        config: Optional[RequestOptions] = None,
        is_token_refresh_required: bool = False,
    ) -> None:
        """Dispatch a request and discard the response body."""
        await self._dispatch(
            self._to_logical(url, method, data, config, is_token_refresh_required)
        )
