import asyncio
import json

import httpx
import pytest

from orderdesk.core.exceptions import AuthenticationError, LoginInProgressError
from orderdesk.db.storage import MemoryStorage
from orderdesk.flow.states import SessionState, is_valid_transition
from orderdesk.main import OrderDeskApp
from orderdesk.schemas.user import Role

from conftest import ADMIN, MODERATOR, json_body


def make_app(config, backend, stored=None):
    return OrderDeskApp(config=config, storage=MemoryStorage(stored), transport=backend.transport)


async def test_initial_state_is_loading(app):
    assert app.auth.state == SessionState.UNINITIALIZED
    assert app.auth.is_loading
    assert not app.auth.is_authenticated


async def test_initialize_without_stored_session(app, backend):
    user = await app.auth.initialize()

    assert user is None
    assert app.auth.state == SessionState.ANONYMOUS
    assert not app.auth.is_loading
    # No revalidation request without a token
    assert backend.count("GET", "/api/auth/me") == 0


async def test_initialize_restores_and_revalidates(config, backend):
    stored = {"token": "tok-1", "user": json.dumps(ADMIN)}
    fresh = dict(ADMIN, name="Alice Updated")
    backend.on("GET", "/api/auth/me", body=fresh)
    app = make_app(config, backend, stored)

    user = await app.auth.initialize()

    assert user.name == "Alice Updated"
    assert app.auth.state == SessionState.AUTHENTICATED
    assert app.auth.token == "tok-1"
    assert json.loads(app.store.get("user"))["name"] == "Alice Updated"
    assert backend.last("GET", "/api/auth/me").headers["Authorization"] == "Bearer tok-1"
    await app.close()


async def test_session_is_optimistic_while_restoring(config, backend):
    stored = {"token": "tok-1", "user": json.dumps(MODERATOR)}
    app = make_app(config, backend, stored)
    seen = {}

    def me(request):
        seen["state"] = app.auth.state
        seen["authenticated"] = app.auth.is_authenticated
        seen["loading"] = app.auth.is_loading
        return httpx.Response(200, json=MODERATOR)

    backend.on("GET", "/api/auth/me", handler=me)

    await app.auth.initialize()

    assert seen == {"state": SessionState.RESTORING, "authenticated": True, "loading": True}
    await app.close()


async def test_failed_revalidation_clears_storage(config, backend):
    stored = {"token": "stale", "user": json.dumps(ADMIN)}
    backend.on("GET", "/api/auth/me", status=401, body={"message": "invalid token"})
    app = make_app(config, backend, stored)

    user = await app.auth.initialize()

    assert user is None
    assert app.auth.state == SessionState.ANONYMOUS
    assert app.store.get("token") is None
    assert app.store.get("user") is None
    await app.close()


async def test_revalidation_network_failure_also_clears(config, backend):
    def down(request):
        raise httpx.ConnectError("refused", request=request)

    backend.on("GET", "/api/auth/me", handler=down)
    app = make_app(config, backend, {"token": "tok", "user": json.dumps(ADMIN)})

    await app.auth.initialize()

    assert app.auth.state == SessionState.ANONYMOUS
    assert not app.store.has_session()
    await app.close()


async def test_half_session_is_discarded(config, backend):
    app = make_app(config, backend, {"token": "tok", "user": "undefined"})

    await app.auth.initialize()

    assert app.auth.state == SessionState.ANONYMOUS
    assert app.store.get("token") is None
    assert backend.count("GET", "/api/auth/me") == 0
    await app.close()


async def test_admin_login_lands_on_dashboard(app, backend):
    backend.on("POST", "/api/auth/login", body={"token": "tok-admin"})
    backend.on("GET", "/api/auth/me", body=ADMIN)

    user = await app.auth.login("admin@example.com", "Secret#123")

    assert user.role == Role.ADMIN
    assert app.auth.state == SessionState.AUTHENTICATED
    assert app.navigator.current_path == "/dashboard"
    assert app.store.read_token() == "tok-admin"
    assert app.store.read_user()["email"] == "admin@example.com"
    assert app.notifier.last.description == "Login successful!"
    assert json_body(backend.last("POST", "/api/auth/login")) == {
        "email": "admin@example.com",
        "password": "Secret#123",
    }


async def test_moderator_login_lands_on_orders(app, login_as):
    await login_as(MODERATOR)

    assert app.auth.role == Role.MODERATOR
    assert app.navigator.current_path == "/orders"


async def test_credentials_are_never_persisted(app, storage, login_as):
    await login_as(ADMIN)

    assert sorted(storage.keys()) == ["token", "user"]
    assert "Secret#123" not in storage.get("user")


async def test_bad_credentials_do_not_expire_session(app, backend):
    backend.on("POST", "/api/auth/login", status=401, body={"message": "Invalid email or password"})

    with pytest.raises(AuthenticationError) as exc_info:
        await app.auth.login("admin@example.com", "wrong")

    assert exc_info.value.message == "Invalid email or password"
    assert app.navigator.current_path == "/"
    assert app.notifier.titles() == ["Error"]
    assert app.notifier.last.description == "Invalid email or password"
    assert app.auth.state == SessionState.ANONYMOUS
    assert not app.auth.is_logging_in


async def test_login_without_token_fails(app, backend):
    backend.on("POST", "/api/auth/login", body={"success": True})

    with pytest.raises(AuthenticationError):
        await app.auth.login("admin@example.com", "Secret#123")

    assert app.store.read_token() is None
    assert backend.count("GET", "/api/auth/me") == 0


async def test_profile_failure_removes_written_token(app, backend):
    backend.on("POST", "/api/auth/login", body={"token": "tok"})
    backend.on("GET", "/api/auth/me", status=500)

    with pytest.raises(AuthenticationError) as exc_info:
        await app.auth.login("admin@example.com", "Secret#123")

    assert "failed to fetch user details" in exc_info.value.message
    assert app.store.read_token() is None
    assert not app.auth.is_authenticated


async def test_concurrent_login_is_rejected(app, backend):
    release = asyncio.Event()
    backend.on("GET", "/api/auth/me", body=ADMIN)

    original_login = app.api.login

    async def gated_login(credentials):
        await release.wait()
        return await original_login(credentials)

    backend.on("POST", "/api/auth/login", body={"token": "tok"})
    app.api.login = gated_login

    first = asyncio.create_task(app.auth.login("admin@example.com", "Secret#123"))
    await asyncio.sleep(0)
    assert app.auth.is_logging_in

    with pytest.raises(LoginInProgressError):
        await app.auth.login("admin@example.com", "Secret#123")

    release.set()
    user = await first
    assert user.role == Role.ADMIN
    assert not app.auth.is_logging_in
    assert backend.count("POST", "/api/auth/login") == 1


async def test_login_refresh_logout_cycle(config, backend, storage):
    backend.on("POST", "/api/auth/login", body={"token": "tok-9"})
    backend.on("GET", "/api/auth/me", body=MODERATOR)

    first = OrderDeskApp(config=config, storage=storage, transport=backend.transport)
    await first.auth.initialize()
    await first.auth.login("mod@example.com", "Secret#123")
    await first.close()

    # A fresh process over the same storage restores the session
    second = OrderDeskApp(config=config, storage=storage, transport=backend.transport)
    restored = await second.auth.initialize()
    assert restored.email == "mod@example.com"
    assert second.auth.is_authenticated

    second.auth.logout()
    assert second.auth.state == SessionState.ANONYMOUS
    assert second.navigator.current_path == "/"
    assert second.notifier.last.description == "Logged out successfully"
    assert storage.get("token") is None and storage.get("user") is None
    await second.close()


async def test_logout_clears_cached_collections(app, backend, login_as):
    await login_as(ADMIN)
    backend.on("GET", "/api/orders", body=[{"id": 1, "customer_name": "Rahim"}])
    await app.orders.load()
    assert len(app.orders.collection) == 1

    app.auth.logout()

    assert app.orders.collection == []


async def test_state_listeners_are_notified(app, login_as):
    states = []
    app.auth.subscribe(states.append)

    await login_as(ADMIN)
    app.auth.logout()

    assert states == [SessionState.ANONYMOUS, SessionState.AUTHENTICATED, SessionState.ANONYMOUS]


def test_transition_table():
    assert is_valid_transition(SessionState.UNINITIALIZED, SessionState.RESTORING)
    assert is_valid_transition(SessionState.RESTORING, SessionState.AUTHENTICATED)
    assert is_valid_transition(SessionState.AUTHENTICATED, SessionState.ANONYMOUS)
    assert not is_valid_transition(SessionState.ANONYMOUS, SessionState.RESTORING)
    assert not is_valid_transition(SessionState.UNINITIALIZED, SessionState.AUTHENTICATED)


@pytest.mark.parametrize("profile", [{"id": 1, "role": "Owner"}, {"id": 1, "email": "a@b.co"}, None])
async def test_malformed_profile_on_restore_ends_anonymous(config, backend, profile):
    backend.on("GET", "/api/auth/me", body=profile)
    app = make_app(config, backend, {"token": "t", "user": json.dumps(ADMIN)})

    user = await app.auth.initialize()

    assert user is None
    assert app.auth.state == SessionState.ANONYMOUS
    assert not app.auth.is_loading
    assert not app.store.has_session()
    await app.close()


async def test_malformed_profile_on_login_removes_token(app, backend):
    backend.on("POST", "/api/auth/login", body={"token": "tok"})
    backend.on("GET", "/api/auth/me", body={"message": "ok"})

    with pytest.raises(AuthenticationError):
        await app.auth.login("admin@example.com", "Secret#123")

    assert app.store.read_token() is None
    assert app.auth.state == SessionState.ANONYMOUS
    assert app.notifier.titles() == ["Error"]


async def test_malformed_login_response_is_a_login_failure(app, backend):
    backend.on("POST", "/api/auth/login", body=["not", "an", "object"])

    with pytest.raises(AuthenticationError):
        await app.auth.login("admin@example.com", "Secret#123")

    assert app.notifier.last.description == "Invalid response from server"
    assert backend.count("GET", "/api/auth/me") == 0


async def test_rejected_profile_during_login_shows_one_notice(app, backend):
    backend.on("POST", "/api/auth/login", body={"token": "tok"})
    backend.on("GET", "/api/auth/me", status=401, body={"message": "invalid token"})

    with pytest.raises(AuthenticationError):
        await app.auth.login("admin@example.com", "Secret#123")

    assert app.notifier.titles() == ["Error"]
    assert app.notifier.last.description == "Login successful but failed to fetch user details"
    assert app.navigator.current_path == "/"
    assert app.store.read_token() is None
