"""Attach the bearer credential to a request and hand it to the transport."""

from __future__ import annotations

import httpx
from loguru import logger

from ..models.request import RequestDescriptor
from ..storage.credentials import CredentialStore
from .errors import TransportError


class RequestDispatcher:
    """Mechanical send step: no retry or refresh logic lives here."""

    def __init__(self, http: httpx.Client, store: CredentialStore) -> None:
        self._http = http
        self._store = store

    def send(
        self,
        descriptor: RequestDescriptor,
        access_token: str | None = None,
    ) -> httpx.Response:
        """Issue *descriptor* and return the response, whatever its status.

        *access_token* overrides the stored token; the refresh coordinator
        uses it so every replay in an episode carries the same credential.

        Raises :class:`TransportError` if the endpoint cannot be reached.
        """
        token = access_token or self._store.access_token
        headers = dict(descriptor.headers)
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.debug(
            f"{descriptor.method} {descriptor.url}"
            f"{' (retry)' if descriptor.retried else ''}"
        )
        try:
            return self._http.request(
                descriptor.method,
                descriptor.url,
                **descriptor.to_httpx_kwargs(headers),
            )
        except httpx.TransportError as exc:
            raise TransportError(
                f"{descriptor.method} {descriptor.url} failed: {exc}"
            ) from exc
