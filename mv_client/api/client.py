"""Base HTTP client for the MV API with bearer-token management."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from ..models.credentials import CredentialPair
from ..models.request import RequestDescriptor
from ..storage.config import Settings, load_settings
from ..storage.credentials import CredentialStore
from .auth import request_token_refresh
from .classifier import ResponseClassifier
from .dispatcher import RequestDispatcher
from .refresh import RefreshCoordinator
from .session import SessionListener, SessionSignal


class MVClient:
    """HTTP client that keeps requests authorised across token expiry.

    The client wraps :mod:`httpx` and loads stored tokens on construction.
    Every request carries the current access token; when the server answers
    401 the token is renewed once (no matter how many requests failed at
    the same time) and the failed requests are replayed.  If renewal is
    impossible the stored tokens are dropped and listeners registered with
    :meth:`on_session_invalidated` are told.

    Example::

        with MVClient() as client:
            client.on_session_invalidated(lambda exc: show_login())
            resp = client.get("/v1/releases/my-releases")

    The instance is safe to share between threads.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        store: CredentialStore | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self._store = store or CredentialStore(persist=self.settings.persist_tokens)
        self._http = httpx.Client(timeout=self.settings.timeout, transport=transport)
        self._session_signal = SessionSignal()
        self._dispatcher = RequestDispatcher(self._http, self._store)
        self._coordinator = RefreshCoordinator(
            self._store,
            renew=self._renew,
            replay=self._replay,
            signal=self._session_signal,
        )
        self._classifier = ResponseClassifier(
            self._coordinator.request_refresh,
            unauthorized_statuses=self.settings.unauthorized_statuses,
        )

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        """Return ``True`` if an access token is available."""
        return bool(self._store.access_token)

    @property
    def access_token(self) -> str | None:
        """Return the current access token, or ``None``."""
        return self._store.access_token

    @property
    def credentials(self) -> CredentialStore:
        return self._store

    def set_tokens(self, pair: CredentialPair) -> None:
        """Store *pair* in memory (and on disk when persistence is on)."""
        self._store.set(pair)

    def clear_tokens(self) -> None:
        """Remove tokens from memory and disk."""
        self._store.clear()

    def on_session_invalidated(self, listener: SessionListener) -> SessionListener:
        """Register *listener* to be called when stored tokens are discarded."""
        return self._session_signal.connect(listener)

    # ------------------------------------------------------------------
    # Refresh plumbing
    # ------------------------------------------------------------------

    def _renew(self, refresh_token: str) -> CredentialPair:
        return request_token_refresh(self._http, refresh_token, settings=self.settings)

    def _replay(self, descriptor: RequestDescriptor, access_token: str) -> httpx.Response:
        logger.debug(f"Replaying {descriptor.method} {descriptor.url}")
        response = self._dispatcher.send(descriptor, access_token=access_token)
        return self._classifier.classify(descriptor, response)

    # ------------------------------------------------------------------
    # Authenticated HTTP verbs (prefixed with settings.base_url)
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        json: Any = None,
        content: bytes | str | None = None,
        data: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send an authenticated request to ``base_url + path``.

        Non-401 responses are returned as they are; callers decide whether
        to ``raise_for_status()``.

        Raises :class:`~mv_client.api.errors.TransportError` when the
        server cannot be reached, and an
        :class:`~mv_client.api.errors.AuthenticationError` subclass when the
        request stays unauthorised.
        """
        descriptor = RequestDescriptor(
            method=method.upper(),
            url=self.settings.url_for(path),
            params=params,
            headers=headers or {},
            json=json,
            content=content,
            data=data,
        )
        response = self._dispatcher.send(descriptor)
        return self._classifier.classify(descriptor, response)

    def get(self, path: str, **kwargs) -> httpx.Response:
        """Send an authenticated GET request to ``base_url + path``."""
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> httpx.Response:
        """Send an authenticated POST request to ``base_url + path``."""
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> httpx.Response:
        """Send an authenticated PUT request to ``base_url + path``."""
        return self.request("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs) -> httpx.Response:
        """Send an authenticated PATCH request to ``base_url + path``."""
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs) -> httpx.Response:
        """Send an authenticated DELETE request to ``base_url + path``."""
        return self.request("DELETE", path, **kwargs)

    # ------------------------------------------------------------------
    # Raw (unauthenticated) helper
    # ------------------------------------------------------------------

    def raw_post(self, url: str, **kwargs) -> httpx.Response:
        """POST to an arbitrary URL without credentials or refresh handling."""
        return self._http.post(url, **kwargs)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the underlying HTTP transport."""
        self._http.close()

    def __enter__(self) -> MVClient:
        return self

    def __exit__(self, *args) -> None:
        self.close()
