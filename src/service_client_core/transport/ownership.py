"""Transport wrapper enforcing the ownership flag on close."""

import logging

import httpx

logger = logging.getLogger(__name__)


class OwnershipTransport(httpx.AsyncBaseTransport):
    """Forward requests to ``transport``; close it only when ``owns_transport`` is set.

    ``aclose()`` reaches the wrapped transport at most once, however many times
    it is called.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport, *, owns_transport: bool) -> None:
        self._transport = transport
        self.owns_transport = owns_transport
        self._closed = False

    @property
    def transport(self) -> httpx.AsyncBaseTransport:
        return self._transport

    @property
    def closed(self) -> bool:
        return self._closed

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await self._transport.handle_async_request(request)

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True

        if self.owns_transport:
            logger.debug(f"Closing owned transport {self._transport!r}")
            await self._transport.aclose()
        else:
            logger.debug(f"Leaving externally owned transport {self._transport!r} open")
