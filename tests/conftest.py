import json
import threading
import time
from typing import Callable, List, Tuple

import httpx
import pytest

from condenser_bot.commands.base import Invocation, Origin
from condenser_bot.condenser.client import CondenserClient
from condenser_bot.condenser.schemas import ServiceCredentials
from condenser_bot.config import Settings
from condenser_bot.schemas.reply import Reply
from condenser_bot.workers import shutdown_worker_pool

BASE_URL = "https://condenser.test"
API_KEY = "test-api-key"


class RecordingMessenger:
    """Collects every reply instead of posting to Slack. Thread-safe."""

    def __init__(self):
        self.sent: List[Tuple[str, Reply]] = []
        self._cond = threading.Condition()

    def send(self, channel_id: str, reply: Reply) -> None:
        with self._cond:
            self.sent.append((channel_id, reply))
            self._cond.notify_all()

    def wait_for(self, count: int, timeout: float = 5.0) -> bool:
        deadline = time.monotonic() + timeout
        with self._cond:
            while len(self.sent) < count:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._cond.wait(remaining)
            return True

    def only(self) -> Tuple[str, Reply]:
        assert len(self.sent) == 1, f"expected exactly one message, got {len(self.sent)}"
        return self.sent[0]


class InlinePool:
    """Runs submitted work straight away on the calling thread."""

    def __init__(self):
        self.submitted = 0

    def submit(self, work: Callable[[], None]) -> None:
        self.submitted += 1
        work()


class StubCondenser:
    """A fake Condenser service behind httpx.MockTransport. Records every request."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: List[httpx.Request] = []
        self._lock = threading.Lock()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
        return self.handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def client(self, base_url: str = BASE_URL) -> CondenserClient:
        return CondenserClient(base_url, transport=self.transport)

    def json_bodies(self) -> list:
        return [json.loads(r.content) for r in self.requests]


def respond(status: int, payload=None) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        if payload is None:
            return httpx.Response(status)
        return httpx.Response(status, json=payload)
    return handler


@pytest.fixture
def make_stub():
    """
    make_stub(200, {...}) answers every request the same way;
    make_stub(handler=fn) lets the test decide per request.
    """
    def _make(status: int = 200, payload=None, handler=None) -> StubCondenser:
        return StubCondenser(handler or respond(status, payload))
    return _make


@pytest.fixture
def messenger():
    return RecordingMessenger()


@pytest.fixture
def inline_pool():
    return InlinePool()


@pytest.fixture
def credentials():
    return ServiceCredentials(api_key=API_KEY, base_url=BASE_URL)


@pytest.fixture
def origin():
    return Origin(
        author_id="U123",
        author_tag="alice",
        mention="<@U123>",
        channel_id="C42",
        guild_name="Test Workspace",
    )


@pytest.fixture
def invoke(origin):
    def _invoke(name: str, *args: str, **overrides) -> Invocation:
        return Invocation(name=name, args=tuple(args), origin=overrides.get("origin", origin))
    return _invoke


@pytest.fixture
def make_settings(tmp_path, monkeypatch):
    """
    Builds Settings from explicit values only: no .env file and no YAML file.
    """
    monkeypatch.setenv("CONDENSER_BOT_CONFIG", str(tmp_path / "missing.yaml"))
    for name in ("CONDENSER_API_KEY", "CONDENSER_SERVER", "OWNER_IDS", "ALLOW_UPDATE", "COMMAND_PREFIX"):
        monkeypatch.delenv(name, raising=False)

    def _make(**overrides) -> Settings:
        values = {"SLACK_BOT_TOKEN": "xoxb-test", "SLACK_APP_TOKEN": "xapp-test"}
        values.update(overrides)
        return Settings(_env_file=None, **values)
    return _make


@pytest.fixture(autouse=True)
def _reset_worker_pool():
    yield
    shutdown_worker_pool(wait=True)
