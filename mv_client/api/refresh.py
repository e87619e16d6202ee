"""Single-flight renewal of an expired access token.

When several requests fail with an expired token at the same time, only
the first one (the *leader*) calls the renewal endpoint.  Every request
that fails while that call is in flight is parked in a FIFO queue with a
:class:`~concurrent.futures.Future` as its settlement handle, and the
calling thread blocks on it.  Once the renewal settles the leader:

* on success, replays its own request and then each queued request, in
  enqueue order, with the new access token, settling each handle with the
  replay's outcome;
* on failure, clears the stored credentials, fails its own request and
  each queued handle with the same :class:`RefreshFailure`, then emits the
  session-invalidation signal once.

Callers that find no refresh token share one :class:`NoRefreshToken`, and
callers that arrive after a failed renewal share its :class:`RefreshFailure`,
until the stored credentials change again.  Either way the signal fires
once per lost session.

All state transitions happen under one lock.  The renewal call and the
replays run outside it, so requests that are already authorised are never
held up.
"""

from __future__ import annotations

import enum
import threading
from collections import deque
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Callable

import httpx
from loguru import logger

from ..models.credentials import CredentialPair
from ..models.request import RequestDescriptor
from ..storage.credentials import CredentialStore
from .errors import AuthenticationError, NoRefreshToken, RefreshFailure
from .session import SessionSignal

Renewer = Callable[[str], CredentialPair]
Replayer = Callable[[RequestDescriptor, str], httpx.Response]


class RefreshState(enum.Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


@dataclass
class PendingRefresh:
    """A caller suspended until the in-flight renewal settles."""

    descriptor: RequestDescriptor
    handle: Future = field(default_factory=Future)


class RefreshCoordinator:
    """Serialise token renewals and settle every caller of an episode alike.

    Parameters
    ----------
    store:
        Holder of the current credential pair.
    renew:
        Performs the renewal call for a refresh token and returns the new
        pair, raising :class:`RefreshFailure` when renewal is not possible.
    replay:
        Re-issues a (retried) descriptor with the given access token and
        returns the classified response.
    signal:
        Emitted once whenever the stored credentials had to be discarded.
    """

    def __init__(
        self,
        store: CredentialStore,
        renew: Renewer,
        replay: Replayer,
        signal: SessionSignal,
    ) -> None:
        self._store = store
        self._renew = renew
        self._replay = replay
        self._signal = signal
        self._lock = threading.Lock()
        self._state = RefreshState.IDLE
        self._pending: deque[PendingRefresh] = deque()
        self._rejection: tuple[AuthenticationError, int] | None = None

    @property
    def state(self) -> RefreshState:
        with self._lock:
            return self._state

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def request_refresh(self, descriptor: RequestDescriptor) -> httpx.Response:
        """Renew the access token (or join the renewal in flight) and replay.

        Returns the replayed response.  Raises :class:`NoRefreshToken` or
        :class:`RefreshFailure` if the token could not be renewed, and
        whatever the replay raises otherwise.
        """
        pending: PendingRefresh | None = None
        rejection: AuthenticationError | None = None
        first_rejection = False
        with self._lock:
            if self._state is RefreshState.REFRESHING:
                pending = PendingRefresh(descriptor)
                self._pending.append(pending)
            else:
                pair = self._store.get()
                if pair is not None and pair.can_refresh:
                    self._state = RefreshState.REFRESHING
                    refresh_token = pair.refresh_token
                else:
                    rejection, first_rejection = self._reject_locked()

        if rejection is not None:
            if first_rejection:
                self._signal.emit(rejection)
            raise rejection
        if pending is not None:
            logger.debug(f"Waiting for token refresh: {descriptor.method} {descriptor.url}")
            return pending.handle.result()
        return self._run_episode(descriptor, refresh_token)

    # ------------------------------------------------------------------
    # Episode handling
    # ------------------------------------------------------------------

    def _reject_locked(self) -> tuple[AuthenticationError, bool]:
        """Return the error for a caller that cannot refresh, and whether it is new.

        Until the credentials change again every such caller shares the last
        rejection, so the session signal fires once per loss of session.
        Must be called with the lock held.
        """
        if self._rejection is not None:
            error, generation = self._rejection
            if generation == self._store.generation:
                return error, False
        error = NoRefreshToken("No refresh token available; sign in again")
        logger.warning("Access token rejected and no refresh token is stored")
        self._store.clear()
        self._rejection = (error, self._store.generation)
        return error, True

    def _run_episode(
        self, descriptor: RequestDescriptor, refresh_token: str
    ) -> httpx.Response:
        outcome: Future = Future()
        waiting: list[PendingRefresh] = []
        finished = False
        logger.info("Access token rejected, refreshing")
        try:
            try:
                new_pair = self._renew(refresh_token)
                self._store.set(new_pair)
            except RefreshFailure as exc:
                failure = exc
            except Exception as exc:
                failure = RefreshFailure(f"Token refresh failed: {exc}")
                failure.__cause__ = exc
            else:
                waiting = self._finish()
                finished = True
                self._complete_episode(outcome, descriptor, waiting, new_pair.access_token)
                return outcome.result()

            waiting = self._finish(failure)
            finished = True
            self._fail_episode(outcome, waiting, failure)
            return outcome.result()
        finally:
            if not finished:
                waiting = self._finish()
            self._abandon(waiting)

    def _finish(self, failure: RefreshFailure | None = None) -> list[PendingRefresh]:
        """Return to IDLE and detach the queue in one step.

        On *failure* the stored credentials are cleared in the same critical
        section, so no caller can see an empty store while still REFRESHING.
        """
        with self._lock:
            if failure is not None:
                self._store.clear()
                self._rejection = (failure, self._store.generation)
            self._state = RefreshState.IDLE
            waiting = list(self._pending)
            self._pending.clear()
        return waiting

    def _complete_episode(
        self,
        outcome: Future,
        descriptor: RequestDescriptor,
        waiting: list[PendingRefresh],
        access_token: str,
    ) -> None:
        logger.info(f"Access token refreshed; replaying {len(waiting) + 1} request(s)")
        self._settle_replay(outcome, descriptor, access_token)
        for pending in waiting:
            self._settle_replay(pending.handle, pending.descriptor, access_token)

    def _fail_episode(
        self, outcome: Future, waiting: list[PendingRefresh], failure: RefreshFailure
    ) -> None:
        logger.error(f"Token refresh failed: {failure}")
        outcome.set_exception(failure)
        for pending in waiting:
            pending.handle.set_exception(failure)
        if waiting:
            logger.warning(f"Rejected {len(waiting)} queued request(s) after failed refresh")
        self._signal.emit(failure)

    def _settle_replay(
        self, handle: Future, descriptor: RequestDescriptor, access_token: str
    ) -> None:
        try:
            handle.set_result(self._replay(descriptor, access_token))
        except Exception as exc:
            handle.set_exception(exc)

    @staticmethod
    def _abandon(waiting: list[PendingRefresh]) -> None:
        """Fail every handle the episode left unsettled (leader interrupted)."""
        for pending in waiting:
            if not pending.handle.done():
                pending.handle.set_exception(
                    RefreshFailure("Token refresh was interrupted")
                )
