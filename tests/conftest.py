import json

import httpx
import pytest

from orderdesk.core.config import Settings
from orderdesk.db.storage import MemoryStorage
from orderdesk.main import OrderDeskApp


ADMIN = {"id": 1, "name": "Alice Admin", "email": "admin@example.com", "role": "Admin"}
MODERATOR = {"id": 2, "name": "Mo Rahman", "email": "mod@example.com", "role": "Moderator"}


class FakeBackend:
    """
    In-process stand-in for the REST API, served through httpx.MockTransport.

    Routes map (method, path) to either a fixed (status, body) pair or a
    callable taking the request. Unknown routes answer 404.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def on(self, method, path, status=200, body=None, handler=None):
        self.routes[(method.upper(), path)] = handler or (status, body)

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    def count(self, method, path):
        return len(self.calls(method, path))

    def last(self, method, path):
        matching = self.calls(method, path)
        return matching[-1] if matching else None

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        if callable(route):
            return route(request)
        status, body = route
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


def json_body(request: httpx.Request):
    return json.loads(request.content.decode("utf-8"))


@pytest.fixture
def config():
    return Settings(
        ENVIRONMENT="development",
        API_BASE_URL="http://api.test",
        SESSION_STORAGE_PATH=None,
    )


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
async def app(config, storage, backend):
    client = OrderDeskApp(config=config, storage=storage, transport=backend.transport)
    yield client
    await client.close()


@pytest.fixture
def login_as(app, backend):
    """Logs the app in as the given user profile through the fake backend."""

    async def _login(profile=ADMIN, token="tok-123"):
        backend.on("POST", "/api/auth/login", body={"token": token})
        backend.on("GET", "/api/auth/me", body=profile)
        user = await app.auth.login(profile["email"], "Secret#123")
        app.notifier.clear()
        return user

    return _login
