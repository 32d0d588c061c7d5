"""Retry layer of the client's request pipeline.

``RetryTransport`` wraps another transport and retries according to a
``RetryPolicy``:

| Strategy | 429 (Rate Limit) | 5xx Errors | Network errors |
|----------|------------------|------------|----------------|
| `idempotent_only` | No retry | GET, HEAD, OPTIONS, TRACE | any method |
| `rate_limited` | All methods, honours Retry-After | GET, HEAD, PUT, DELETE, OPTIONS, TRACE | idempotent methods |

Example:
    ```python
    transport = RetryTransport(
        wrapped_transport=httpx.AsyncHTTPTransport(),
        policy=RetryPolicy(strategy="rate_limited", max_retries=5, max_backoff=60),
    )
    ```
"""

import asyncio
import logging
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

import httpx

from service_client_core.config.models import RetryPolicy

logger = logging.getLogger(__name__)

# Truly idempotent HTTP methods (per RFC 7231)
SAFE_METHODS: frozenset[str] = frozenset(["HEAD", "GET", "OPTIONS", "TRACE"])

IDEMPOTENT_METHODS: frozenset[str] = SAFE_METHODS | {"PUT", "DELETE"}


class RetryTransport(httpx.AsyncBaseTransport):
    """Retry requests on the wrapped transport according to ``policy``.

    Closing this transport closes the wrapped transport.

    Args:
        wrapped_transport: The underlying transport to wrap
        policy: Strategy, attempt limit and backoff settings
    """

    def __init__(self, *, wrapped_transport: httpx.AsyncBaseTransport, policy: RetryPolicy) -> None:
        self._wrapped_transport = wrapped_transport
        self.policy = policy

    @property
    def retryable_methods(self) -> frozenset[str]:
        """Methods retried on 5xx responses."""
        if self.policy.strategy == "rate_limited":
            return IDEMPOTENT_METHODS
        return SAFE_METHODS

    async def aclose(self) -> None:
        await self._wrapped_transport.aclose()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        """Send ``request``, retrying per policy.

        Returns:
            HTTP response (the last one received when retries are exhausted)
        """
        retries = 0

        while True:
            try:
                response = await self._wrapped_transport.handle_async_request(request)
            except httpx.TransportError as e:
                if not self._may_retry_error(request, retries):
                    raise

                retries += 1
                delay = self._calculate_backoff_delay(retries)
                logger.warning(
                    f"Request {request.method} {request.url} failed with {e!r}, "
                    f"retrying in {delay}s (attempt {retries}/{self.policy.max_retries})"
                )
                await asyncio.sleep(delay)
                continue

            delay = self._retry_delay(request, response, retries)
            if delay is None:
                return response

            retries += 1
            logger.warning(
                f"Request {request.method} {request.url} failed with {response.status_code}, "
                f"retrying in {delay}s (attempt {retries}/{self.policy.max_retries})"
            )
            await response.aclose()
            await asyncio.sleep(delay)

    def _may_retry_error(self, request: httpx.Request, current_retries: int) -> bool:
        if self.policy.strategy == "none" or current_retries >= self.policy.max_retries:
            return False
        if self.policy.strategy == "rate_limited":
            return request.method in IDEMPOTENT_METHODS
        return True

    def _retry_delay(self, request: httpx.Request, response: httpx.Response, current_retries: int) -> float | None:
        """Return the delay before the next attempt, or None when not retrying."""
        if self.policy.strategy == "none" or current_retries >= self.policy.max_retries:
            return None

        if response.status_code == 429 and self.policy.strategy == "rate_limited":
            delay = self._parse_retry_after(response)
            if delay is None:
                delay = self._calculate_backoff_delay(current_retries + 1)
            return delay

        if response.status_code in self.policy.retry_status_codes and request.method in self.retryable_methods:
            return self._calculate_backoff_delay(current_retries + 1)

        return None

    def _parse_retry_after(self, response: httpx.Response) -> float | None:
        """Parse Retry-After as delay-seconds or HTTP-date, capped at max_backoff.

        Returns:
            Delay in seconds, or None if header is missing, negative or invalid
        """
        retry_after = response.headers.get("Retry-After")
        if not retry_after:
            return None

        try:
            delay = float(int(retry_after))
        except ValueError:
            try:
                retry_date = parsedate_to_datetime(retry_after)
            except (ValueError, TypeError):
                return None
            delay = (retry_date - datetime.now(UTC)).total_seconds()

        # Negative delays come from clock skew
        if delay < 0:
            return None
        return min(delay, self.policy.max_backoff)

    def _calculate_backoff_delay(self, retry_number: int) -> float:
        """Exponential backoff: backoff_factor * 2 ** (retry_number - 1), capped at max_backoff."""
        delay = self.policy.backoff_factor * (2 ** (retry_number - 1))
        return min(delay, self.policy.max_backoff)


def wrap_with_retries(transport: httpx.AsyncBaseTransport, policy: RetryPolicy | None) -> httpx.AsyncBaseTransport:
    """Return ``transport`` wrapped in a RetryTransport unless retries are disabled."""
    if policy is None or policy.strategy == "none" or policy.max_retries == 0:
        return transport
    return RetryTransport(wrapped_transport=transport, policy=policy)
