"""Testing utilities for code built on service-client-core.

``RecordingTransport`` serves requests from a handler and counts how often it
was closed, which is what ownership tests need to observe.
``RecordingTransportFactory`` keeps every transport it built.

Example:
    ```python
    from service_client_core.testing import RecordingTransport


    async def test_shared_transport_stays_open():
        shared = RecordingTransport()
        client = ClientBuilder().set_transport(shared).build()
        await client.aclose()
        assert shared.close_count == 0
    ```
"""

from collections.abc import Callable

import httpx

from service_client_core.transport.factory import TransportDefaults


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"ok": True})


class RecordingTransport(httpx.AsyncBaseTransport):
    """Transport answering from ``handler`` and recording requests and closes."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response] | None = None, name: str = "recording"):
        self._handler = handler or _ok
        self.name = name
        self.requests: list[httpx.Request] = []
        self.close_count = 0

    @property
    def closed(self) -> bool:
        return self.close_count > 0

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    async def aclose(self) -> None:
        self.close_count += 1

    def __repr__(self) -> str:
        return f"RecordingTransport({self.name!r})"


class RecordingTransportFactory:
    """TransportFactory building a new RecordingTransport on every call.

    ``defaults_received`` records the TransportDefaults passed by each
    ``build_with_defaults()`` call.
    """

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response] | None = None):
        self._handler = handler
        self.built: list[RecordingTransport] = []
        self.defaults_received: list[TransportDefaults] = []

    @property
    def build_count(self) -> int:
        return len(self.built)

    def build(self) -> RecordingTransport:
        transport = RecordingTransport(self._handler, name=f"managed-{len(self.built)}")
        self.built.append(transport)
        return transport

    def build_with_defaults(self, defaults: TransportDefaults) -> RecordingTransport:
        self.defaults_received.append(defaults)
        return self.build()


__all__ = ["RecordingTransport", "RecordingTransportFactory"]
