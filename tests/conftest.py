"""Shared fixtures: an in-process fake of the MV API and client factory."""
import json
import threading
import time

import httpx
import pytest

from mv_client.api.client import MVClient
from mv_client.models.credentials import CredentialPair
from mv_client.storage.config import Settings
from mv_client.storage.credentials import CredentialStore

BASE_URL = "https://api.test"
REFRESH_PATH = "/v1/auth/refresh-token"


class FakeAPI:
    """Answers 401 unless the bearer token is in ``valid_tokens``.

    The refresh endpoint blocks on ``refresh_gate`` so tests can hold a
    renewal open while other requests pile up behind it.
    """

    def __init__(self):
        self.valid_tokens = {"T2"}
        self.refresh_calls = 0
        self.refresh_bodies = []
        self.refresh_gate = threading.Event()
        self.refresh_gate.set()
        self.refresh_started = threading.Event()
        self.refresh_response = lambda request: httpx.Response(
            200, json={"data": {"accessToken": "T2"}}
        )
        self.route_overrides = {}
        self.log = []
        self._lock = threading.Lock()

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == REFRESH_PATH:
            with self._lock:
                self.refresh_calls += 1
                self.refresh_bodies.append(json.loads(request.content))
            self.refresh_started.set()
            self.refresh_gate.wait(5)
            return self.refresh_response(request)

        auth = request.headers.get("Authorization")
        with self._lock:
            self.log.append((request.url.path, auth))
        override = self.route_overrides.get(request.url.path)
        if override is not None:
            return override(request)
        if auth not in {f"Bearer {token}" for token in self.valid_tokens}:
            return httpx.Response(401, json={"message": "jwt expired"})
        return httpx.Response(200, json={"path": request.url.path, "auth": auth})

    def replayed_paths(self, token):
        return [path for path, auth in self.log if auth == f"Bearer {token}"]


def wait_until(predicate, timeout=5.0):
    """Poll *predicate* until it is true or fail the test."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met in time")
        time.sleep(0.005)


@pytest.fixture
def api():
    return FakeAPI()


@pytest.fixture
def make_client(api):
    clients = []

    def _make(access_token="T1", refresh_token="R1"):
        store = CredentialStore(persist=False)
        if access_token:
            store.set(
                CredentialPair(access_token=access_token, refresh_token=refresh_token)
            )
        client = MVClient(
            Settings(base_url=BASE_URL, persist_tokens=False),
            store=store,
            transport=httpx.MockTransport(api.handler),
        )
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture
def wait():
    return wait_until
