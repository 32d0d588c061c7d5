"""Error hierarchy for client construction and HTTP responses."""

from service_client_core.errors.exceptions import (
    APIError,
    BadRequestError,
    ClientClosedError,
    ClientError,
    ConfigurationError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ServerError,
    ServiceClientError,
    UnauthorizedError,
    ValidationError,
)
from service_client_core.errors.handler import raise_for_status

__all__ = [
    "APIError",
    "BadRequestError",
    "ClientClosedError",
    "ClientError",
    "ConfigurationError",
    "ConflictError",
    "ForbiddenError",
    "NotFoundError",
    "RateLimitError",
    "ServerError",
    "ServiceClientError",
    "UnauthorizedError",
    "ValidationError",
    "raise_for_status",
]
