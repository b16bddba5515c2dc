import httpx
import pytest
from fastapi.testclient import TestClient

from query_console.console.state import ResultAreaRegistry, get_result_areas
from query_console.console.transport import TransportClient, get_transport_client
from query_console.main import app


class FakeQueryEndpoint:
    """Stands in for POST /federations/query and records what it received."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._response = httpx.Response(200, json={"cols": [], "rows": []})
        self._error: Exception | None = None

    def respond(self, status_code: int = 200, **kwargs) -> None:
        self._response = httpx.Response(status_code, **kwargs)
        self._error = None

    def refuse(self) -> None:
        self._error = httpx.ConnectError("Connection refused")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        return httpx.Response(
            self._response.status_code,
            headers=self._response.headers,
            content=self._response.content,
        )

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture()
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def endpoint():
    return FakeQueryEndpoint()


@pytest.fixture()
def transport(endpoint):
    return TransportClient(client=httpx.AsyncClient(transport=httpx.MockTransport(endpoint)))


@pytest.fixture()
def areas():
    return ResultAreaRegistry(max_sessions=8)


@pytest.fixture()
def client(transport, areas):
    app.dependency_overrides[get_transport_client] = lambda: transport
    app.dependency_overrides[get_result_areas] = lambda: areas
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
