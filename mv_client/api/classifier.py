"""Decide what a completed response means for the request that produced it."""

from __future__ import annotations

from typing import Callable, Iterable

import httpx

from ..models.request import RequestDescriptor
from .errors import UnauthorizedError

RefreshHandler = Callable[[RequestDescriptor], httpx.Response]


class ResponseClassifier:
    """Pass responses through, or route an expired credential to a refresh.

    * Any status outside *unauthorized_statuses* is returned unchanged.
    * An unauthorized response to a descriptor that was already retried is
      terminal and raises :class:`UnauthorizedError`.
    * Otherwise the descriptor is marked retried and handed to
      *on_unauthorized*, whose outcome becomes the request's outcome.
    """

    def __init__(
        self,
        on_unauthorized: RefreshHandler,
        unauthorized_statuses: Iterable[int] = (401,),
    ) -> None:
        self._on_unauthorized = on_unauthorized
        self._unauthorized = frozenset(unauthorized_statuses)

    def is_unauthorized(self, response: httpx.Response) -> bool:
        return response.status_code in self._unauthorized

    def classify(
        self,
        descriptor: RequestDescriptor,
        response: httpx.Response,
    ) -> httpx.Response:
        if not self.is_unauthorized(response):
            return response
        if descriptor.retried:
            raise UnauthorizedError(
                f"{descriptor.method} {descriptor.url} is still unauthorized "
                f"after a token refresh (HTTP {response.status_code})",
                response=response,
            )
        return self._on_unauthorized(descriptor.mark_retried())
