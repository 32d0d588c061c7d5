"""Map HTTP error responses onto the APIError hierarchy."""

import httpx

from service_client_core.errors.exceptions import (
    APIError,
    BadRequestError,
    ClientError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ServerError,
    UnauthorizedError,
)

_STATUS_EXCEPTIONS: dict[int, type[APIError]] = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
    429: RateLimitError,
}


def _exception_class_for(status_code: int) -> type[APIError]:
    if status_code in _STATUS_EXCEPTIONS:
        return _STATUS_EXCEPTIONS[status_code]
    if 400 <= status_code < 500:
        return ClientError
    if 500 <= status_code < 600:
        return ServerError
    return APIError


def _parse_retry_after(response: httpx.Response) -> int | None:
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        # HTTP-date form is handled by the retry layer, not here
        return None


def raise_for_status(response: httpx.Response) -> None:
    """Raise the matching APIError subclass for an HTTP error response.

    Args:
        response: HTTP response object

    Raises:
        APIError subclass based on status code
    """
    if response.is_success:
        return

    status_code = response.status_code
    exc_class = _exception_class_for(status_code)

    # Streaming responses may not be read yet
    try:
        body = response.text[:200]
    except httpx.ResponseNotRead:
        body = ""
    message = f"HTTP {status_code}: {body}" if body else f"HTTP {status_code}"

    if exc_class is RateLimitError:
        raise RateLimitError(
            message,
            retry_after=_parse_retry_after(response),
            status_code=status_code,
            response=response,
        )

    raise exc_class(message, status_code=status_code, response=response)
