"""
orderdesk/flow/route_gate.py

Purpose: Route authorization

- Route table: path -> required roles
- Pure authorize() decision (loading / redirect / access denied / render)
- RouteGate: applies the decision and performs redirects
- Role landing pages and sidebar navigation per role
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from orderdesk.core.config import Settings, settings
from orderdesk.core.logging import LogContext, get_logger
from orderdesk.flow.navigation import Navigator
from orderdesk.schemas.user import Role
from orderdesk.utils.constants import ACCESS_DENIED_PAGE_MESSAGE, ACCESS_DENIED_PAGE_TITLE

logger = get_logger(__name__)

ANY_ROLE: FrozenSet[Role] = frozenset()
ADMIN_ONLY = frozenset({Role.ADMIN})
MODERATOR_ONLY = frozenset({Role.MODERATOR})
STAFF = frozenset({Role.ADMIN, Role.MODERATOR})


class GateDecision(str, Enum):
    LOADING = "LOADING"
    REDIRECT = "REDIRECT"
    ACCESS_DENIED = "ACCESS_DENIED"
    RENDER = "RENDER"
    NOT_FOUND = "NOT_FOUND"


@dataclass(frozen=True)
class GateResult:
    decision: GateDecision
    redirect_to: Optional[str] = None
    title: Optional[str] = None
    message: Optional[str] = None

    @property
    def should_render(self) -> bool:
        return self.decision == GateDecision.RENDER


@dataclass(frozen=True)
class NavItem:
    title: str
    path: str


# Protected routes. An empty role set means any authenticated user.
ROUTES: Dict[str, FrozenSet[Role]] = {
    "/dashboard": ANY_ROLE,
    # Moderators land here and see only their own orders
    "/orders": STAFF,
    "/products": ADMIN_ONLY,
    "/tasks": ADMIN_ONLY,
    "/analytics": ADMIN_ONLY,
    "/users": ADMIN_ONLY,
    "/create-order": MODERATOR_ONLY,
    "/my-orders": MODERATOR_ONLY,
    "/my-tasks": MODERATOR_ONLY,
    "/follow-ups": MODERATOR_ONLY,
    "/sms": ANY_ROLE,
    "/courier": ANY_ROLE,
    "/reports": ANY_ROLE,
    "/settings": ANY_ROLE,
}

ADMIN_NAVIGATION = [
    NavItem("Dashboard", "/dashboard"),
    NavItem("Orders", "/orders"),
    NavItem("Products", "/products"),
    NavItem("Users", "/users"),
    NavItem("Tasks", "/tasks"),
    NavItem("Analytics", "/analytics"),
    NavItem("SMS", "/sms"),
    NavItem("Courier", "/courier"),
    NavItem("Reports", "/reports"),
    NavItem("Settings", "/settings"),
]

MODERATOR_NAVIGATION = [
    NavItem("Dashboard", "/dashboard"),
    NavItem("My Orders", "/my-orders"),
    NavItem("Create Order", "/create-order"),
    NavItem("My Tasks", "/my-tasks"),
    NavItem("Follow-ups", "/follow-ups"),
]


def landing_path_for(role: Optional[Role], config: Optional[Settings] = None) -> str:
    """Page a user is sent to after login: Admin -> dashboard, Moderator -> orders."""
    config = config or settings
    if role == Role.MODERATOR:
        return config.MODERATOR_LANDING_PATH
    return config.ADMIN_LANDING_PATH


def navigation_items(role: Optional[Role]) -> List[NavItem]:
    if role == Role.ADMIN:
        return list(ADMIN_NAVIGATION)
    if role == Role.MODERATOR:
        return list(MODERATOR_NAVIGATION)
    return []


def authorize(session, required_roles: FrozenSet[Role] = ANY_ROLE, login_path: str = "/login") -> GateResult:
    """
    Decides what a protected route shows for the current session.

    Args:
        session: Anything exposing is_loading, is_authenticated and role
        required_roles: Allowed roles; empty means any authenticated user
        login_path: Redirect target for anonymous sessions

    Returns:
        GateResult; ACCESS_DENIED never navigates anywhere
    """
    if session.is_loading:
        return GateResult(GateDecision.LOADING)

    if not session.is_authenticated:
        return GateResult(GateDecision.REDIRECT, redirect_to=login_path)

    if required_roles and session.role not in required_roles:
        return GateResult(
            GateDecision.ACCESS_DENIED,
            title=ACCESS_DENIED_PAGE_TITLE,
            message=ACCESS_DENIED_PAGE_MESSAGE,
        )

    return GateResult(GateDecision.RENDER)


class RouteGate:
    """
    Resolves a path against the route table for the current session and
    performs any redirect through the navigator (replacing the current entry).
    """

    def __init__(self, session, navigator: Navigator, config: Optional[Settings] = None):
        self.session = session
        self.navigator = navigator
        self.config = config or settings

    @property
    def public_paths(self) -> FrozenSet[str]:
        return frozenset({self.config.PUBLIC_PATH, self.config.LOGIN_PATH})

    def resolve(self, path: str) -> GateResult:
        path = self._normalize(path)
        role = getattr(self.session, "role", None)

        with LogContext(path=path, role=role.value if role else None):
            result = self._decide(path)
            if result.decision == GateDecision.REDIRECT and result.redirect_to != path:
                logger.debug(f"Redirecting {path} -> {result.redirect_to}")
                self.navigator.navigate(result.redirect_to, replace=True)
            elif result.decision == GateDecision.ACCESS_DENIED:
                logger.info(f"Access denied to {path}")

        return result

    def _decide(self, path: str) -> GateResult:
        if path in self.public_paths:
            if self.session.is_loading:
                return GateResult(GateDecision.LOADING)
            if self.session.is_authenticated:
                return GateResult(GateDecision.REDIRECT, redirect_to=self.config.ADMIN_LANDING_PATH)
            return GateResult(GateDecision.RENDER)

        required_roles = ROUTES.get(path)
        if required_roles is None:
            if self.session.is_loading:
                return GateResult(GateDecision.LOADING)
            if self.session.is_authenticated:
                return GateResult(GateDecision.NOT_FOUND)
            return GateResult(GateDecision.REDIRECT, redirect_to=self.config.PUBLIC_PATH)

        return authorize(self.session, required_roles, login_path=self.config.LOGIN_PATH)

    @staticmethod
    def _normalize(path: str) -> str:
        path = (path or "/").split("?", 1)[0].split("#", 1)[0]
        if len(path) > 1:
            path = path.rstrip("/")
        return path or "/"
