"""Default managed transport factory and the service defaults it merges."""

import dataclasses
from dataclasses import dataclass

import httpx


@dataclass(frozen=True)
class TransportDefaults:
    """Service-specific settings for transports the client builds itself.

    A service builder supplies these through
    ``ClientBuilder.default_transport_settings()``. They are merged into
    factories that support ``build_with_defaults()`` and never touch a
    transport handed in through ``set_transport()``.
    """

    max_connections: int | None = 100
    max_keepalive_connections: int | None = 20
    keepalive_expiry: float | None = 5.0
    http2: bool = False
    verify: bool | str = True
    connect_retries: int = 0


@dataclass
class HTTPTransportFactory:
    """Build ``httpx.AsyncHTTPTransport`` instances with connection pool settings.

    Each call returns a new transport with its own connection pool, so every
    client built from this factory owns a separate pool. Share a pool between
    clients with ``ClientBuilder.set_transport()`` instead.

    Fields left as None take the service's TransportDefaults; fields set here
    win over them.

    Args:
        max_connections: Maximum number of concurrent connections
        max_keepalive_connections: Maximum number of idle keep-alive connections
        keepalive_expiry: Seconds an idle connection is kept alive
        http2: Enable HTTP/2 (requires the ``h2`` package)
        verify: TLS verification flag or CA bundle path
        connect_retries: Connection-level retries done by the pool
        proxy: Optional proxy URL

    Example:
        ```python
        builder.set_transport_factory(HTTPTransportFactory(max_connections=20))
        ```
    """

    max_connections: int | None = None
    max_keepalive_connections: int | None = None
    keepalive_expiry: float | None = None
    http2: bool | None = None
    verify: bool | str | None = None
    connect_retries: int | None = None
    proxy: str | None = None

    def settings_with_defaults(self, defaults: TransportDefaults) -> TransportDefaults:
        """Return ``defaults`` overridden by every field set on this factory."""
        overrides = {}
        for setting in dataclasses.fields(TransportDefaults):
            value = getattr(self, setting.name)
            if value is not None:
                overrides[setting.name] = value
        return dataclasses.replace(defaults, **overrides)

    def build_with_defaults(self, defaults: TransportDefaults) -> httpx.AsyncHTTPTransport:
        settings = self.settings_with_defaults(defaults)
        limits = httpx.Limits(
            max_connections=settings.max_connections,
            max_keepalive_connections=settings.max_keepalive_connections,
            keepalive_expiry=settings.keepalive_expiry,
        )
        return httpx.AsyncHTTPTransport(
            verify=settings.verify,
            http2=settings.http2,
            limits=limits,
            proxy=self.proxy,
            retries=settings.connect_retries,
        )

    def build(self) -> httpx.AsyncHTTPTransport:
        return self.build_with_defaults(TransportDefaults())
