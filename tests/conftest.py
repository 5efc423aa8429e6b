"""Shared fixtures: a fake requests session and a recording listener."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs, urlparse

import pytest
import requests

from repobrowser.auth import AuthToken
from repobrowser.github_api import GitHubClient
from repobrowser.network_manager import NetworkManager


@dataclass
class FakeResponse:
    status_code: int = 200
    text: str = ""
    headers: dict[str, str] = field(default_factory=dict)


def json_response(data: Any, status_code: int = 200) -> FakeResponse:
    return FakeResponse(status_code=status_code, text=json.dumps(data))


class FakeSession:
    """Stands in for requests.Session, replaying queued responses.

    A queued item may be a FakeResponse or an exception instance to raise.
    When ``gate`` is set, every request waits for it before answering.
    """

    def __init__(self) -> None:
        self.responses: list[Any] = []
        self.requests: list[dict[str, Any]] = []
        self.gate: threading.Event | None = None
        self.started = threading.Event()
        self.closed = False
        self._lock = threading.Lock()

    def queue(self, *items: Any) -> None:
        self.responses.extend(items)

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        with self._lock:
            self.requests.append({"method": method, "url": url, **kwargs})
            item = self.responses.pop(0) if self.responses else FakeResponse(404, "")
        self.started.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self) -> None:
        self.closed = True

    def query(self, index: int = -1) -> dict[str, list[str]]:
        return parse_qs(urlparse(self.requests[index]["url"]).query)

    def path(self, index: int = -1) -> str:
        return urlparse(self.requests[index]["url"]).path


class RecordingListener:
    """Records every callback together with the thread it ran on."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []
        self.threads: list[str] = []

    def on_load_empty(self, http_code: int) -> None:
        self._record("empty", http_code)

    def on_load_success(self, data: Any) -> None:
        self._record("success", data)

    def on_load_failure(self) -> None:
        self._record("failure", None)

    def _record(self, kind: str, value: Any) -> None:
        self.events.append((kind, value))
        self.threads.append(threading.current_thread().name)

    @property
    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.events]


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def token() -> AuthToken:
    return AuthToken("abc123")


@pytest.fixture
def client(session: FakeSession, token: AuthToken) -> GitHubClient:
    return GitHubClient(token_provider=token, session=session)


@pytest.fixture
def manager(client: GitHubClient):
    with NetworkManager(client, max_workers=2) as mgr:
        yield mgr


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def connection_refused() -> requests.ConnectionError:
    return requests.ConnectionError("[Errno 111] Connection refused")
