"""Service Client Core - construction and lifecycle of async service clients.

This library provides:
- A fluent ClientBuilder accumulating configuration overrides
- Field-wise composition of async configuration (timeouts, retries, concurrency)
- Explicit transport ownership: shared transports stay open, factory-built ones
  are closed with the client
- Environment-based default configuration (python-dotenv)

Example:
    ```python
    import httpx

    from service_client_core import ClientBuilder, HTTPTransportFactory

    # Client owns its transport and closes it
    client = (
        ClientBuilder()
        .set_base_url("https://api.example.com")
        .set_transport_factory(HTTPTransportFactory(max_connections=20))
        .build()
    )

    # Transport shared between clients; the caller closes it
    shared = httpx.AsyncHTTPTransport()
    first = ClientBuilder().set_transport(shared).build()
    second = ClientBuilder().set_transport(shared).build()
    ```
"""

from service_client_core.builder import ClientBuilder
from service_client_core.client import AsyncServiceClient
from service_client_core.config import (
    AsyncConfiguration,
    AsyncConfigurationBuilder,
    EnvironmentConfigurationProvider,
    RetryPolicy,
    compose,
)
from service_client_core.errors import ValidationError
from service_client_core.transport import (
    ExternallyOwned,
    HTTPTransportFactory,
    ManagedFactory,
    TransportDefaults,
    TransportFactory,
)

__version__ = "0.1.0"

__all__ = [
    "AsyncConfiguration",
    "AsyncConfigurationBuilder",
    "AsyncServiceClient",
    "ClientBuilder",
    "EnvironmentConfigurationProvider",
    "ExternallyOwned",
    "HTTPTransportFactory",
    "ManagedFactory",
    "RetryPolicy",
    "TransportDefaults",
    "TransportFactory",
    "ValidationError",
    "__version__",
    "compose",
]
