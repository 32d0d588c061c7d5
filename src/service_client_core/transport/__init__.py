"""Transport selection, ownership and the retry layer.

Transports are ``httpx.AsyncBaseTransport`` implementations: they expose
``handle_async_request()`` to perform a request and ``aclose()`` to release
their resources.

Modules:
    selection: ExternallyOwned / ManagedFactory selections and the factory protocol
    factory: TransportDefaults and the default managed factory producing httpx.AsyncHTTPTransport
    ownership: Wrapper closing the transport only when the client owns it
    retry: Retry layer driven by RetryPolicy
"""

from service_client_core.transport.factory import HTTPTransportFactory, TransportDefaults
from service_client_core.transport.ownership import OwnershipTransport
from service_client_core.transport.retry import RetryTransport, wrap_with_retries
from service_client_core.transport.selection import (
    CallableTransportFactory,
    DefaultsAwareTransportFactory,
    ExternallyOwned,
    ManagedFactory,
    TransportFactory,
    TransportSelection,
    as_transport_factory,
)

__all__ = [
    "CallableTransportFactory",
    "DefaultsAwareTransportFactory",
    "ExternallyOwned",
    "HTTPTransportFactory",
    "ManagedFactory",
    "OwnershipTransport",
    "RetryTransport",
    "TransportDefaults",
    "TransportFactory",
    "TransportSelection",
    "as_transport_factory",
    "wrap_with_retries",
]
