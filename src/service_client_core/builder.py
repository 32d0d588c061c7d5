"""Fluent builder for async service clients.

The builder accumulates configuration overrides and a transport selection,
then ``build()`` produces an immutable client. Two ways to choose a transport:

- ``set_transport(transport)``: the caller owns ``transport`` and must close
  it. The client never does, so the transport can be shared by many clients.
- ``set_transport_factory(factory)``: the factory runs once per ``build()``
  and the client closes what it produced when the client is closed.

Whichever setter is called last wins. With neither, the default transport
resolver decides.

Builders are mutable and not thread-safe.

Example:
    ```python
    shared = httpx.AsyncHTTPTransport()

    client = (
        ClientBuilder()
        .set_base_url("https://api.example.com")
        .set_configuration(lambda b: b.timeout(10.0).max_concurrency(8))
        .set_transport(shared)
        .build()
    )
    ```
"""

import asyncio
import logging
from collections.abc import Callable, Mapping
from urllib.parse import urlsplit

import httpx

from service_client_core.client import AsyncServiceClient
from service_client_core.config.composer import ConfigurationFragment, compose
from service_client_core.config.environment import DefaultConfigurationProvider, StaticConfigurationProvider
from service_client_core.config.models import RETRY_STRATEGIES, AsyncConfiguration
from service_client_core.errors.exceptions import ValidationError
from service_client_core.transport.factory import HTTPTransportFactory, TransportDefaults
from service_client_core.transport.selection import (
    ExternallyOwned,
    ManagedFactory,
    TransportFactory,
    TransportSelection,
    as_transport_factory,
)

logger = logging.getLogger(__name__)

DefaultTransportResolver = Callable[[], TransportSelection]

# Close tasks for transports discarded inside a running event loop
_pending_closes: set[asyncio.Task] = set()


def _timeout_values(timeout: httpx.Timeout) -> dict[str, float | None]:
    return {"connect": timeout.connect, "read": timeout.read, "write": timeout.write, "pool": timeout.pool}


def _header_problems(headers: Mapping) -> list[str]:
    problems = []
    for name, value in headers.items():
        if not isinstance(name, (str, bytes)):
            problems.append(f"header name {name!r} must be str or bytes, got {type(name).__name__}")
        if not isinstance(value, (str, bytes)):
            problems.append(f"header {name!r} value must be str or bytes, got {type(value).__name__}")
    return problems


def _discard_transport(transport: httpx.AsyncBaseTransport) -> None:
    """Close a managed transport whose client was never constructed."""
    logger.warning(f"Client construction failed, closing managed transport {transport!r}")
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        asyncio.run(transport.aclose())
        return

    task = loop.create_task(transport.aclose())
    _pending_closes.add(task)
    task.add_done_callback(_pending_closes.discard)


class ClientBuilder:
    """Accumulate overrides and a transport selection, then build a client.

    Service-specific builders subclass this and override
    ``default_configuration()``, ``default_transport_selection()``,
    ``default_transport_settings()`` or ``validate()``, and set ``client_class``.

    Args:
        client_class: Client type produced by ``build()``
        defaults_provider: Supplies the baseline configuration
        default_transport_resolver: Called by ``build()`` when no transport
            was selected
        transport_defaults: Service settings merged into factory-built transports
    """

    client_class: type[AsyncServiceClient] = AsyncServiceClient

    def __init__(
        self,
        *,
        client_class: type[AsyncServiceClient] | None = None,
        defaults_provider: DefaultConfigurationProvider | None = None,
        default_transport_resolver: DefaultTransportResolver | None = None,
        transport_defaults: TransportDefaults | None = None,
    ) -> None:
        if client_class is not None:
            self.client_class = client_class
        self._defaults_provider = defaults_provider or StaticConfigurationProvider()
        self._default_transport_resolver = default_transport_resolver
        self._transport_defaults = transport_defaults or TransportDefaults()
        self._configuration: AsyncConfiguration | None = None
        self._transport_selection: TransportSelection | None = None
        self._base_url = ""

    @property
    def configuration(self) -> AsyncConfiguration:
        """Current effective configuration: defaults with every override applied."""
        if self._configuration is None:
            self._configuration = self.default_configuration()
        return self._configuration

    @property
    def transport_selection(self) -> TransportSelection | None:
        return self._transport_selection

    def set_configuration(self, configuration: ConfigurationFragment) -> "ClientBuilder":
        """Override configuration slots.

        Accepts a finished ``AsyncConfiguration`` or a callable receiving an
        ``AsyncConfigurationBuilder`` seeded with the current values. Slots the
        override leaves unset keep their current value.
        """
        self._configuration = compose(self.configuration, configuration)
        return self

    def set_transport(self, transport: httpx.AsyncBaseTransport) -> "ClientBuilder":
        """Use a pre-built transport. The caller keeps ownership and must close it."""
        if not (hasattr(transport, "handle_async_request") and hasattr(transport, "aclose")):
            raise TypeError(f"Expected an async transport, got {type(transport).__name__}")
        self._select(ExternallyOwned(transport))
        return self

    def set_transport_factory(
        self, factory: TransportFactory | Callable[[], httpx.AsyncBaseTransport]
    ) -> "ClientBuilder":
        """Use a factory invoked at build time. The client owns and closes its product."""
        self._select(ManagedFactory(as_transport_factory(factory)))
        return self

    def set_base_url(self, base_url: str) -> "ClientBuilder":
        self._base_url = base_url
        return self

    def default_configuration(self) -> AsyncConfiguration:
        """Baseline configuration; complete, every slot set."""
        return self._defaults_provider.default_configuration()

    def default_transport_selection(self) -> TransportSelection:
        """Selection used when neither transport setter was called."""
        if self._default_transport_resolver is not None:
            return self._default_transport_resolver()
        return ManagedFactory(HTTPTransportFactory())

    def default_transport_settings(self) -> TransportDefaults:
        """Settings merged into transports built by a managed factory.

        A transport passed to ``set_transport()`` is used as given.
        """
        return self._transport_defaults

    def validate(self, configuration: AsyncConfiguration, selection: TransportSelection) -> list[str]:
        """Return every structural problem with the settings about to be built.

        Subclasses extend the list returned by ``super().validate()``.
        """
        problems = []

        if configuration.timeout is not None:
            for name, value in _timeout_values(configuration.timeout).items():
                if value is not None and value < 0:
                    problems.append(f"timeout.{name} must not be negative")

        policy = configuration.retry_policy
        if policy is not None:
            if policy.strategy not in RETRY_STRATEGIES:
                problems.append(f"retry_policy.strategy must be one of {sorted(RETRY_STRATEGIES)}")
            if policy.max_retries < 0:
                problems.append("retry_policy.max_retries must not be negative")
            if policy.backoff_factor < 0:
                problems.append("retry_policy.backoff_factor must not be negative")
            if policy.max_backoff < 0:
                problems.append("retry_policy.max_backoff must not be negative")

        if configuration.max_concurrency is not None and configuration.max_concurrency < 1:
            problems.append("max_concurrency must be at least 1")

        if configuration.headers is not None:
            problems.extend(_header_problems(configuration.headers))

        if self._base_url:
            parts = urlsplit(self._base_url)
            if parts.scheme not in ("http", "https") or not parts.netloc:
                problems.append(f"base_url must be an absolute http(s) URL, got {self._base_url!r}")

        return problems

    def build(self) -> AsyncServiceClient:
        """Validate, resolve the transport and return a new client.

        A managed factory is invoked only after validation passed. If the
        client cannot be constructed afterwards, the managed transport is
        closed before the error propagates, so a failed build never leaves a
        transport without an owner.

        Raises:
            ValidationError: If the accumulated settings are inconsistent
        """
        selection = self._transport_selection
        if selection is None:
            selection = self.default_transport_selection()
            if not isinstance(selection, (ExternallyOwned, ManagedFactory)):
                raise ValidationError(
                    "Default transport resolver must return ExternallyOwned or ManagedFactory",
                    problems=[f"default transport resolver returned {type(selection).__name__}"],
                )
            logger.debug(f"No transport selected, using default {selection!r}")

        configuration = self.configuration
        problems = self.validate(configuration, selection)
        if problems:
            raise ValidationError(f"Invalid client configuration: {'; '.join(problems)}", problems=problems)

        transport = selection.resolve(self.default_transport_settings())
        try:
            client = self.client_class(
                configuration,
                transport,
                owns_transport=selection.owns_transport,
                base_url=self._base_url,
            )
        except Exception:
            if selection.owns_transport:
                _discard_transport(transport)
            raise
        logger.debug(f"Built {client!r}")
        return client

    def _select(self, selection: TransportSelection) -> None:
        if self._transport_selection is not None:
            logger.debug(f"Replacing transport selection {self._transport_selection!r} with {selection!r}")
        self._transport_selection = selection
