from types import SimpleNamespace

import pytest

from orderdesk.flow.navigation import Navigator
from orderdesk.flow.route_gate import (
    ADMIN_ONLY,
    GateDecision,
    RouteGate,
    authorize,
    landing_path_for,
    navigation_items,
)
from orderdesk.schemas.user import Role

from conftest import ADMIN, MODERATOR


def session(loading=False, authenticated=True, role=Role.ADMIN):
    return SimpleNamespace(is_loading=loading, is_authenticated=authenticated, role=role)


def test_loading_wins_over_everything():
    result = authorize(session(loading=True, authenticated=False), ADMIN_ONLY)
    assert result.decision == GateDecision.LOADING


def test_anonymous_is_redirected_to_login():
    result = authorize(session(authenticated=False, role=None))
    assert result.decision == GateDecision.REDIRECT
    assert result.redirect_to == "/login"


def test_wrong_role_is_denied_in_place():
    result = authorize(session(role=Role.MODERATOR), ADMIN_ONLY)
    assert result.decision == GateDecision.ACCESS_DENIED
    assert result.title == "Access Denied"
    assert result.redirect_to is None


def test_empty_roles_allow_any_authenticated_user():
    assert authorize(session(role=Role.MODERATOR)).should_render


def test_access_denied_does_not_navigate(config):
    navigator = Navigator("/dashboard")
    gate = RouteGate(session(role=Role.MODERATOR), navigator, config=config)

    result = gate.resolve("/users")

    assert result.decision == GateDecision.ACCESS_DENIED
    assert navigator.history == ["/dashboard"]


def test_redirect_replaces_current_entry(config):
    navigator = Navigator("/orders")
    gate = RouteGate(session(authenticated=False, role=None), navigator, config=config)

    gate.resolve("/orders")

    assert navigator.history == ["/login"]


@pytest.mark.parametrize(
    "path, role, decision",
    [
        ("/orders", Role.ADMIN, GateDecision.RENDER),
        ("/orders", Role.MODERATOR, GateDecision.RENDER),
        ("/products", Role.MODERATOR, GateDecision.ACCESS_DENIED),
        ("/create-order", Role.ADMIN, GateDecision.ACCESS_DENIED),
        ("/follow-ups", Role.MODERATOR, GateDecision.RENDER),
        ("/sms", Role.MODERATOR, GateDecision.RENDER),
        ("/analytics/", Role.ADMIN, GateDecision.RENDER),
        ("/nowhere", Role.ADMIN, GateDecision.NOT_FOUND),
    ],
)
def test_route_table(config, path, role, decision):
    gate = RouteGate(session(role=role), Navigator(), config=config)
    assert gate.resolve(path).decision == decision


def test_public_pages_send_signed_in_users_to_dashboard(config):
    navigator = Navigator("/login")
    gate = RouteGate(session(role=Role.MODERATOR), navigator, config=config)

    result = gate.resolve("/login")

    assert result.decision == GateDecision.REDIRECT
    assert navigator.current_path == "/dashboard"


def test_public_pages_render_for_anonymous(config):
    gate = RouteGate(session(authenticated=False, role=None), Navigator(), config=config)
    assert gate.resolve("/").should_render
    assert gate.resolve("/login").should_render


def test_unknown_path_redirects_anonymous_home(config):
    navigator = Navigator("/x")
    gate = RouteGate(session(authenticated=False, role=None), navigator, config=config)

    result = gate.resolve("/x")

    assert result.redirect_to == "/"
    assert navigator.current_path == "/"


def test_landing_paths(config):
    assert landing_path_for(Role.ADMIN, config) == "/dashboard"
    assert landing_path_for(Role.MODERATOR, config) == "/orders"


def test_navigation_items_per_role():
    admin_paths = [item.path for item in navigation_items(Role.ADMIN)]
    moderator_paths = [item.path for item in navigation_items(Role.MODERATOR)]

    assert "/users" in admin_paths
    assert "/create-order" not in admin_paths
    assert moderator_paths == ["/dashboard", "/my-orders", "/create-order", "/my-tasks", "/follow-ups"]
    assert navigation_items(None) == []


async def test_gate_follows_live_session(app, backend, login_as):
    assert app.gate.resolve("/orders").decision == GateDecision.LOADING

    await app.auth.initialize()
    assert app.gate.resolve("/orders").decision == GateDecision.REDIRECT
    assert app.navigator.current_path == "/login"

    await login_as(MODERATOR)
    assert app.gate.resolve("/orders").should_render
    assert app.gate.resolve("/users").decision == GateDecision.ACCESS_DENIED

    app.auth.logout()
    await login_as(ADMIN)
    assert app.gate.resolve("/users").should_render
