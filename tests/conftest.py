"""Pytest configuration for all tests."""

import json
from pathlib import Path
from typing import Any, AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from schemaproxy.core.config import Settings
from schemaproxy.core.keyed_lock import KeyedLock
from schemaproxy.domain.services import SchemaMirror
from schemaproxy.infrastructure.api.app import create_app
from schemaproxy.infrastructure.backend import BackendClient
from schemaproxy.infrastructure.storage import DescriptorStore

BACKEND_URL = "http://backend.test"
ADMIN_KEY = "test-admin-key"

Route = tuple[str, str]


class BackendStub:
    """In-process stand-in for the backend service.

    Routes map ``(method, path)`` to a response or to an exception raised
    as if the connection failed. Unrouted requests get ``200 {}``.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[Route, Callable[[httpx.Request], httpx.Response] | Exception] = {}

    def respond(self, method: str, path: str, status_code: int = 200, json_body: Any = None) -> None:
        self.routes[(method, path)] = lambda request: httpx.Response(
            status_code, json=json_body if json_body is not None else {}
        )

    def fail(self, method: str, path: str, error: Exception | None = None) -> None:
        self.routes[(method, path)] = error or httpx.ConnectError("Connection refused")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(200, json={})
        if isinstance(route, Exception):
            if isinstance(route, httpx.RequestError):
                route.request = request
            raise route
        return route(request)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content)


@pytest.fixture
def resources_dir(tmp_path: Path) -> Path:
    path = tmp_path / "resources"
    path.mkdir()
    return path


@pytest.fixture
def settings(resources_dir: Path) -> Settings:
    return Settings(
        environment="testing",
        resources_directory=str(resources_dir),
        backend_url=BACKEND_URL,
        backend_admin_key=ADMIN_KEY,
    )


@pytest.fixture
def store(resources_dir: Path) -> DescriptorStore:
    return DescriptorStore(resources_dir)


@pytest.fixture
def backend_stub() -> BackendStub:
    return BackendStub()


@pytest_asyncio.fixture
async def backend_client(backend_stub: BackendStub) -> AsyncGenerator[BackendClient, None]:
    client = BackendClient(
        BACKEND_URL,
        admin_key=ADMIN_KEY,
        transport=httpx.MockTransport(backend_stub.handler),
    )
    yield client
    await client.aclose()


@pytest.fixture
def mirror(store: DescriptorStore, backend_client: BackendClient) -> SchemaMirror:
    return SchemaMirror(store, backend_client, locks=KeyedLock())


@pytest_asyncio.fixture
async def client(
    settings: Settings,
    store: DescriptorStore,
    backend_client: BackendClient,
) -> AsyncGenerator[AsyncClient, None]:
    """Test client for the proxy wired to the stubbed backend."""
    app = create_app(settings=settings, store=store, backend_client=backend_client)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def property_body() -> Callable[..., dict]:
    """Build a property definition in the shape clients send."""

    def _build(name: str, prop_type: str = "string", required: bool = False) -> dict:
        return {
            "name": name,
            "type": prop_type,
            "typeLabel": prop_type,
            "required": required,
            "id": name,
        }

    return _build
