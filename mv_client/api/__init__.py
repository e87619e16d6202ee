"""MV API client layer -- re-exports the client class and its errors."""

from mv_client.api.client import MVClient
from mv_client.api.errors import (
    AuthenticationError,
    MVClientError,
    NoRefreshToken,
    RefreshFailure,
    TransportError,
    UnauthorizedError,
)

__all__ = [
    "AuthenticationError",
    "MVClient",
    "MVClientError",
    "NoRefreshToken",
    "RefreshFailure",
    "TransportError",
    "UnauthorizedError",
]
