"""HTTP client for the MV distribution platform API."""

from mv_client.api import (
    AuthenticationError,
    MVClient,
    MVClientError,
    NoRefreshToken,
    RefreshFailure,
    TransportError,
    UnauthorizedError,
)
from mv_client.models import CredentialPair, RequestDescriptor

__version__ = "0.1.0"

__all__ = [
    "AuthenticationError",
    "CredentialPair",
    "MVClient",
    "MVClientError",
    "NoRefreshToken",
    "RefreshFailure",
    "RequestDescriptor",
    "TransportError",
    "UnauthorizedError",
]
