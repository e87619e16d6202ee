"""Service health check against the MV API."""

from __future__ import annotations

from typing import Any

from .client import MVClient


def get_server_health(client: MVClient) -> dict[str, Any]:
    """Return the JSON body of ``GET /v1/health``.

    Raises :class:`httpx.HTTPStatusError` on non-2xx responses.
    """
    resp = client.get("/v1/health")
    resp.raise_for_status()
    return resp.json()
