"""Transport selection and ownership.

A builder records at most one ``TransportSelection``:

- ``ExternallyOwned`` wraps a transport the caller built and keeps closing
  responsibility for. It may be shared between many clients.
- ``ManagedFactory`` wraps a factory. The factory is only invoked when the
  selection is resolved at build time, and the client owns what it produces.
  Factories implementing ``build_with_defaults()`` also receive the service's
  TransportDefaults.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, TypeAlias, runtime_checkable

import httpx

from service_client_core.transport.factory import TransportDefaults

logger = logging.getLogger(__name__)


@runtime_checkable
class TransportFactory(Protocol):
    """Anything able to produce a fresh async transport."""

    def build(self) -> httpx.AsyncBaseTransport: ...


@runtime_checkable
class DefaultsAwareTransportFactory(Protocol):
    """Factory able to apply service TransportDefaults to what it builds."""

    def build_with_defaults(self, defaults: TransportDefaults) -> httpx.AsyncBaseTransport: ...


class CallableTransportFactory:
    """Adapt a zero-argument callable to the TransportFactory protocol."""

    def __init__(self, func: Callable[[], httpx.AsyncBaseTransport]):
        self._func = func

    def build(self) -> httpx.AsyncBaseTransport:
        return self._func()

    def __repr__(self) -> str:
        return f"CallableTransportFactory({self._func!r})"


def as_transport_factory(factory: TransportFactory | Callable[[], httpx.AsyncBaseTransport]) -> TransportFactory:
    """Return ``factory`` as a TransportFactory, wrapping plain callables."""
    if isinstance(factory, TransportFactory):
        return factory
    if callable(factory):
        return CallableTransportFactory(factory)
    raise TypeError(f"Expected a transport factory or callable, got {type(factory).__name__}")


@dataclass(frozen=True)
class ExternallyOwned:
    """A pre-built transport; the caller closes it, never the client."""

    transport: httpx.AsyncBaseTransport

    owns_transport = False

    def resolve(self, defaults: TransportDefaults | None = None) -> httpx.AsyncBaseTransport:
        # Service defaults never apply to a transport the caller configured
        return self.transport


@dataclass(frozen=True)
class ManagedFactory:
    """A factory whose product the client owns and closes."""

    factory: TransportFactory

    owns_transport = True

    def resolve(self, defaults: TransportDefaults | None = None) -> httpx.AsyncBaseTransport:
        if defaults is not None and isinstance(self.factory, DefaultsAwareTransportFactory):
            transport = self.factory.build_with_defaults(defaults)
        else:
            transport = self.factory.build()
        if not isinstance(transport, httpx.AsyncBaseTransport):
            raise TypeError(f"{self.factory!r} built {type(transport).__name__}, expected an httpx.AsyncBaseTransport")
        logger.debug(f"Built managed transport {transport!r} from {self.factory!r}")
        return transport


TransportSelection: TypeAlias = ExternallyOwned | ManagedFactory
