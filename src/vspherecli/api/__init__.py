"""API client and authentication."""

from .auth import AuthHandler
from .client import VSphereClient
from .exceptions import (
    APIError,
    AuthenticationError,
    ConfigError,
    NetworkError,
    PermissionError,
    ResourceNotFoundError,
    SpecNotFoundError,
    TaskError,
    TimeoutError,
    UsageError,
    ValidationError,
    VSphereCliError,
)

__all__ = [
    "APIError",
    "AuthHandler",
    "AuthenticationError",
    "ConfigError",
    "NetworkError",
    "PermissionError",
    "ResourceNotFoundError",
    "SpecNotFoundError",
    "TaskError",
    "TimeoutError",
    "UsageError",
    "ValidationError",
    "VSphereClient",
    "VSphereCliError",
]
