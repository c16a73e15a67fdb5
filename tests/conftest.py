import asyncio
import sys
from pathlib import Path

import httpx
import pytest

# Ensure pytest-asyncio plugin is loaded so @pytest.mark.asyncio works with pytest>=9.
pytest_plugins = ["pytest_asyncio"]


# Ensure project root is on sys.path for local test runs without installation.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from querydeck.endpoints import EndpointRegistry  # noqa: E402
from querydeck.models import EndpointRecord  # noqa: E402
from querydeck.session import SessionLink, TextDocument  # noqa: E402


@pytest.fixture
def tmp_config_dir(tmp_path, monkeypatch):
    cfg = tmp_path / "config"
    cfg.mkdir()
    monkeypatch.setenv("QUERYDECK_CONFIG_DIR", str(cfg))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    return cfg


@pytest.fixture
def endpoint():
    return EndpointRecord(url="http://x/gql", options={"headers": {"X-Token": "abc"}}, name="local")


@pytest.fixture
def registry(endpoint):
    return EndpointRegistry([endpoint, EndpointRecord(url="http://y/gql")])


@pytest.fixture
def session_link(registry):
    return SessionLink(registry)


@pytest.fixture
def query_document():
    return TextDocument("query.graphql", "{ a }", language="graphql")


class RecordingTransport:
    """Serves canned responses through httpx.MockTransport and keeps every request."""

    def __init__(self, text: str = '{"data":{}}', status_code: int = 200) -> None:
        self.text = text
        self.status_code = status_code
        self.requests: list[httpx.Request] = []
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text=self.text)

    def client_factory(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def transport():
    return RecordingTransport()


class NotifierSpy:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str]] = []

    def notify(self, message: str, *, title: str = "", severity: str = "information") -> None:
        self.calls.append((severity, title, message))


@pytest.fixture
def notifier():
    return NotifierSpy()


class SinkSpy:
    def __init__(self) -> None:
        self.results = []

    def show_result(self, result) -> None:
        self.results.append(result)


@pytest.fixture
def sink():
    return SinkSpy()


class StubService:
    def __init__(self) -> None:
        self.events: list[str] = []
        self.consumer = None
        self.attach_count = 0
        self.gate: asyncio.Event | None = None
        self.error: Exception | None = None

    async def start(self) -> None:
        self.events.append("start")
        if self.error is not None:
            raise self.error

    async def stop(self) -> None:
        self.events.append("stop")

    async def restart(self) -> None:
        self.events.append("restart")
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error

    def attach(self, consumer) -> None:
        self.events.append("attach")
        self.attach_count += 1
        self.consumer = consumer

    def detach(self) -> None:
        self.events.append("detach")
        self.consumer = None


@pytest.fixture
def stub_service():
    return StubService()
