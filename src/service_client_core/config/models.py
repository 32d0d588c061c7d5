"""Async configuration models.

``AsyncConfiguration`` is an immutable record of override slots. A slot holding
``None`` is unset: when two configurations are composed, unset slots inherit
the value of the earlier configuration.

Example:
    ```python
    from service_client_core.config import AsyncConfiguration, RetryPolicy

    configuration = (
        AsyncConfiguration.builder()
        .timeout(httpx.Timeout(10.0))
        .retry_policy(RetryPolicy(strategy="rate_limited", max_retries=3))
        .build()
    )
    ```
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Literal

import httpx

RetryStrategy = Literal["none", "idempotent_only", "rate_limited"]

RETRY_STRATEGIES: frozenset[str] = frozenset(["none", "idempotent_only", "rate_limited"])


@dataclass(frozen=True)
class RetryPolicy:
    """How the client's request pipeline retries failed requests.

    Args:
        strategy: ``"idempotent_only"`` retries GET, HEAD, OPTIONS and TRACE on
            5xx. ``"rate_limited"`` additionally retries every method on 429 and
            PUT/DELETE on 5xx. ``"none"`` disables retries.
        max_retries: Maximum number of retry attempts
        backoff_factor: Multiplier for exponential backoff
        max_backoff: Upper bound for a single delay, in seconds
        retry_status_codes: 5xx status codes that trigger a retry
    """

    strategy: RetryStrategy = "rate_limited"
    max_retries: int = 3
    backoff_factor: float = 1.0
    max_backoff: float = 60.0
    retry_status_codes: frozenset[int] = frozenset([502, 503, 504])

    @classmethod
    def none(cls) -> "RetryPolicy":
        return cls(strategy="none", max_retries=0)


def _coerce_timeout(timeout: httpx.Timeout | float | None) -> httpx.Timeout | None:
    if timeout is None or isinstance(timeout, httpx.Timeout):
        return timeout
    return httpx.Timeout(timeout)


def _freeze_headers(headers: Mapping[str, str] | None) -> Mapping[str, str] | None:
    if headers is None:
        return None
    return MappingProxyType(dict(headers))


@dataclass(frozen=True)
class AsyncConfiguration:
    """Immutable async configuration overrides.

    Attributes:
        timeout: Timeout policy for every request; plain numbers are seconds
        retry_policy: Retry behaviour of the request pipeline
        max_concurrency: Upper bound of requests in flight at once
        headers: Headers sent on every request. Replaced as a whole on override.
    """

    timeout: httpx.Timeout | float | None = None
    retry_policy: RetryPolicy | None = None
    max_concurrency: int | None = None
    headers: Mapping[str, str] | None = field(default=None)

    def __post_init__(self) -> None:
        object.__setattr__(self, "timeout", _coerce_timeout(self.timeout))
        object.__setattr__(self, "headers", _freeze_headers(self.headers))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AsyncConfiguration):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __hash__(self) -> int:
        headers = None if self.headers is None else frozenset(self.headers.items())
        return hash((repr(self.timeout), self.retry_policy, self.max_concurrency, headers))

    @classmethod
    def builder(cls) -> "AsyncConfigurationBuilder":
        """Return a fresh builder with every slot unset."""
        return AsyncConfigurationBuilder()

    def to_builder(self) -> "AsyncConfigurationBuilder":
        """Return a builder seeded with this configuration's slots."""
        return AsyncConfigurationBuilder().apply_all_fields_of(self)

    def as_dict(self) -> dict[str, Any]:
        values = {slot.name: getattr(self, slot.name) for slot in fields(self)}
        if values["headers"] is not None:
            values["headers"] = dict(values["headers"])
        return values

    def is_complete(self) -> bool:
        """True when every slot holds a value."""
        return all(value is not None for value in self.as_dict().values())


class AsyncConfigurationBuilder:
    """Mutable, fluent builder for AsyncConfiguration.

    Not thread-safe.
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def timeout(self, timeout: httpx.Timeout | float | None) -> "AsyncConfigurationBuilder":
        return self._set("timeout", _coerce_timeout(timeout))

    def retry_policy(self, retry_policy: RetryPolicy | None) -> "AsyncConfigurationBuilder":
        return self._set("retry_policy", retry_policy)

    def max_concurrency(self, max_concurrency: int | None) -> "AsyncConfigurationBuilder":
        return self._set("max_concurrency", max_concurrency)

    def headers(self, headers: Mapping[str, str] | None) -> "AsyncConfigurationBuilder":
        return self._set("headers", None if headers is None else dict(headers))

    def apply(self, configurator: Callable[["AsyncConfigurationBuilder"], Any]) -> "AsyncConfigurationBuilder":
        """Invoke ``configurator`` once on this builder and return the builder."""
        configurator(self)
        return self

    def apply_all_fields_of(self, configuration: AsyncConfiguration) -> "AsyncConfigurationBuilder":
        """Copy every set slot of ``configuration`` onto this builder."""
        for name, value in configuration.as_dict().items():
            if value is not None:
                self._values[name] = value
        return self

    def build(self) -> AsyncConfiguration:
        return AsyncConfiguration(**self._values)

    def _set(self, name: str, value: Any) -> "AsyncConfigurationBuilder":
        if value is None:
            self._values.pop(name, None)
        else:
            self._values[name] = value
        return self
