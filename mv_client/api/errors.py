"""Exception hierarchy raised by the client layer."""

from __future__ import annotations

import httpx


class MVClientError(Exception):
    """Base class for every error raised by :mod:`mv_client`."""


class TransportError(MVClientError):
    """Raised when an endpoint cannot be reached (connection error, timeout)."""


class AuthenticationError(MVClientError):
    """Raised when authentication fails and cannot be automatically recovered."""


class UnauthorizedError(AuthenticationError):
    """A request was rejected as unauthorized after it had already been retried."""

    def __init__(self, message: str, response: httpx.Response | None = None) -> None:
        super().__init__(message)
        self.response = response


class RefreshFailure(AuthenticationError):
    """The renewal endpoint rejected the refresh token, errored or returned garbage."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NoRefreshToken(AuthenticationError):
    """No refresh token is stored, so the access token cannot be renewed."""
