"""Immutable description of an outgoing API request."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything needed to (re-)issue a request through the dispatcher.

    ``retried`` is set at most once in a request's lifetime, when the
    request is handed to the refresh coordinator.  A descriptor is never
    mutated; :meth:`mark_retried` returns a copy.
    """

    method: str
    url: str
    params: Mapping[str, Any] | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    json: Any = None
    content: bytes | str | None = None
    data: Mapping[str, Any] | None = None
    retried: bool = False

    def mark_retried(self) -> RequestDescriptor:
        return dataclasses.replace(self, retried=True)

    def to_httpx_kwargs(self, headers: Mapping[str, str]) -> dict[str, Any]:
        """Render the descriptor as keyword arguments for ``httpx.Client.request``.

        *headers* replaces the descriptor's own headers so the caller can
        attach credentials without touching the descriptor.
        """
        kwargs: dict[str, Any] = {"headers": dict(headers)}
        if self.params is not None:
            kwargs["params"] = self.params
        if self.json is not None:
            kwargs["json"] = self.json
        if self.content is not None:
            kwargs["content"] = self.content
        if self.data is not None:
            kwargs["data"] = self.data
        return kwargs
