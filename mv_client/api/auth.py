"""Token endpoints of the MV API: login and access-token renewal.

Both calls go straight to the transport without an ``Authorization``
header, so an expired access token can never interfere with obtaining a
new one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
from loguru import logger
from pydantic import ValidationError

from ..models.credentials import CredentialPair
from ..storage.config import Settings
from .errors import AuthenticationError, RefreshFailure

if TYPE_CHECKING:
    from .client import MVClient


def _unwrap(body: Any) -> dict[str, Any]:
    """Return the payload dict; the API wraps it under a ``data`` key."""
    if isinstance(body, dict) and isinstance(body.get("data"), dict):
        return body["data"]
    return body if isinstance(body, dict) else {}


def request_token_refresh(
    http: httpx.Client,
    refresh_token: str,
    *,
    settings: Settings,
) -> CredentialPair:
    """Exchange *refresh_token* for a new credential pair.

    The returned pair keeps *refresh_token* unless the server rotated it.

    Raises :class:`RefreshFailure` on network errors (including timeouts),
    non-2xx responses and bodies without an access token.
    """
    try:
        resp = http.post(
            settings.url_for(settings.refresh_path),
            json={"refreshToken": refresh_token},
        )
    except httpx.TransportError as exc:
        raise RefreshFailure(f"Token refresh request failed: {exc}") from exc

    if not resp.is_success:
        raise RefreshFailure(
            f"Token refresh rejected (HTTP {resp.status_code})",
            status_code=resp.status_code,
        )

    try:
        payload = _unwrap(resp.json())
    except ValueError as exc:
        raise RefreshFailure(
            "Token refresh returned a non-JSON body", status_code=resp.status_code
        ) from exc

    access_token = payload.get("accessToken")
    if not access_token or not isinstance(access_token, str):
        raise RefreshFailure(
            "Token refresh response has no access token",
            status_code=resp.status_code,
        )

    return CredentialPair(
        access_token=access_token,
        refresh_token=payload.get("refreshToken") or refresh_token,
    )


def login(client: MVClient, email: str, password: str) -> CredentialPair:
    """Sign in with email and password and store the returned tokens.

    Raises :class:`AuthenticationError` if the credentials are rejected or
    the response does not contain a token pair.
    """
    url = client.settings.url_for(client.settings.login_path)
    try:
        resp = client.raw_post(url, json={"emailAddress": email, "password": password})
    except httpx.TransportError as exc:
        raise AuthenticationError(f"Login request failed: {exc}") from exc

    try:
        body = resp.json()
    except ValueError:
        body = {}

    if not resp.is_success:
        message = body.get("message") if isinstance(body, dict) else None
        raise AuthenticationError(message or f"Login failed (HTTP {resp.status_code})")

    tokens = _unwrap(body).get("tokens")
    try:
        pair = CredentialPair.model_validate(tokens)
    except ValidationError as exc:
        raise AuthenticationError("Login response did not contain tokens") from exc

    client.set_tokens(pair)
    logger.info("Signed in")
    return pair
