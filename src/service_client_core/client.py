"""Async service client produced by ClientBuilder."""

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import httpx

from service_client_core.config.composer import compose
from service_client_core.config.environment import BUILTIN_DEFAULTS
from service_client_core.config.models import AsyncConfiguration
from service_client_core.errors.exceptions import ClientClosedError
from service_client_core.errors import handler
from service_client_core.transport.ownership import OwnershipTransport
from service_client_core.transport.retry import wrap_with_retries

if TYPE_CHECKING:
    from service_client_core.builder import ClientBuilder

logger = logging.getLogger(__name__)


class AsyncServiceClient:
    """Immutable handle bound to a configuration and a transport.

    The client closes ``transport`` on ``aclose()`` only when
    ``owns_transport`` is set, i.e. when the transport came from a factory.
    A transport handed in ready-made stays open for its owner to close.

    Service clients subclass this and add operations on top of ``request()``.

    Example:
        ```python
        async with AsyncServiceClient.builder().set_base_url("https://api.example.com").build() as client:
            response = await client.request("GET", "/status")
        ```
    """

    __slots__ = ("_configuration", "_transport", "_owns_transport", "_base_url", "_ownership", "_http", "_limiter")

    def __init__(
        self,
        configuration: AsyncConfiguration,
        transport: httpx.AsyncBaseTransport,
        *,
        owns_transport: bool,
        base_url: str = "",
    ) -> None:
        # Fill anything a hand-built configuration left unset
        configuration = compose(BUILTIN_DEFAULTS, configuration)

        self._configuration = configuration
        self._transport = transport
        self._owns_transport = owns_transport
        self._base_url = base_url
        self._ownership = OwnershipTransport(transport, owns_transport=owns_transport)
        self._http = httpx.AsyncClient(
            transport=wrap_with_retries(self._ownership, configuration.retry_policy),
            base_url=base_url,
            timeout=configuration.timeout,
            headers=configuration.headers,
        )
        self._limiter = asyncio.Semaphore(configuration.max_concurrency)

    @classmethod
    def builder(cls) -> "ClientBuilder":
        """Return a ClientBuilder producing instances of this class."""
        from service_client_core.builder import ClientBuilder

        return ClientBuilder(client_class=cls)

    @property
    def configuration(self) -> AsyncConfiguration:
        return self._configuration

    @property
    def transport(self) -> httpx.AsyncBaseTransport:
        return self._transport

    @property
    def owns_transport(self) -> bool:
        return self._owns_transport

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def closed(self) -> bool:
        return self._http.is_closed

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(base_url={self._base_url!r}, transport={self._transport!r}, "
            f"owns_transport={self._owns_transport})"
        )

    async def send(self, request: httpx.Request, **kwargs: Any) -> httpx.Response:
        """Send a prepared request through the pipeline without status checks."""
        self._ensure_open()
        async with self._limiter:
            return await self._http.send(request, **kwargs)

    async def request(
        self, method: str, url: str, *, raise_for_status: bool = True, **kwargs: Any
    ) -> httpx.Response:
        """Issue a request, raising an APIError subclass for error responses.

        Args:
            method: HTTP method
            url: URL, relative to the client's base URL
            raise_for_status: Set to False to get error responses back instead
            **kwargs: Passed to ``httpx.AsyncClient.request``

        Raises:
            ClientClosedError: If the client was closed
            APIError: On 4xx/5xx responses when ``raise_for_status`` is set
        """
        self._ensure_open()
        async with self._limiter:
            response = await self._http.request(method, url, **kwargs)
        if raise_for_status:
            handler.raise_for_status(response)
        return response

    async def aclose(self) -> None:
        """Release the client; closes the transport only if the client owns it."""
        if self._http.is_closed:
            return
        logger.debug(f"Closing {self!r}")
        await self._http.aclose()

    async def __aenter__(self) -> "AsyncServiceClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def _ensure_open(self) -> None:
        if self._http.is_closed:
            raise ClientClosedError(f"{type(self).__name__} has been closed")
