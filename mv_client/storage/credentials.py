"""Process-wide holder of the current credential pair."""

from __future__ import annotations

import threading
from pathlib import Path

from loguru import logger

from ..models.credentials import CredentialPair
from .tokens import delete_tokens, load_tokens, save_tokens


class CredentialStore:
    """Thread-safe get/set/clear access to the current :class:`CredentialPair`.

    When *persist* is ``True`` the pair is loaded once from the token file on
    construction and every change is written back to disk.

    :attr:`generation` increases on every :meth:`set` and :meth:`clear`, so
    callers can tell whether the credentials changed since they last looked.
    """

    def __init__(self, *, persist: bool = True, path: Path | None = None) -> None:
        self._persist = persist
        self._path = path
        self._lock = threading.Lock()
        self._generation = 0
        self._pair: CredentialPair | None = load_tokens(path) if persist else None
        if self._pair is not None:
            logger.debug("Loaded stored credentials")

    def get(self) -> CredentialPair | None:
        with self._lock:
            return self._pair

    def set(self, pair: CredentialPair) -> None:
        """Replace the stored pair wholesale."""
        with self._lock:
            self._pair = pair
            self._generation += 1
            if self._persist:
                save_tokens(pair, self._path)

    def clear(self) -> None:
        with self._lock:
            self._pair = None
            self._generation += 1
            if self._persist:
                delete_tokens(self._path)

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def access_token(self) -> str | None:
        pair = self.get()
        return pair.access_token if pair else None
