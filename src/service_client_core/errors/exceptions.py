"""Structured exceptions for client construction and API errors."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


class ServiceClientError(Exception):
    """Base exception for everything raised by service-client-core."""

    pass


class ValidationError(ServiceClientError):
    """Raised by ``ClientBuilder.build()`` when the accumulated settings are inconsistent.

    Attributes:
        problems: Every problem found, in the order they were detected.
    """

    def __init__(self, message: str, problems: list[str] | None = None):
        super().__init__(message)
        self.problems = problems if problems is not None else []


class ConfigurationError(ServiceClientError):
    """Raised when a default configuration source holds an unusable value."""

    def __init__(self, message: str, setting_name: str | None = None):
        super().__init__(message)
        self.setting_name = setting_name


class ClientClosedError(ServiceClientError):
    """Raised when a request is issued on a client that was already closed."""

    pass


class APIError(ServiceClientError):
    """Base exception for HTTP error responses."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response: "httpx.Response | None" = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class ClientError(APIError):
    """4xx client errors."""

    pass


class BadRequestError(ClientError):
    """400 Bad Request."""

    pass


class UnauthorizedError(ClientError):
    """401 Unauthorized."""

    pass


class ForbiddenError(ClientError):
    """403 Forbidden."""

    pass


class NotFoundError(ClientError):
    """404 Not Found."""

    pass


class ConflictError(ClientError):
    """409 Conflict."""

    pass


class RateLimitError(ClientError):
    """429 Too Many Requests."""

    def __init__(self, message: str, retry_after: int | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(APIError):
    """5xx server errors."""

    pass
