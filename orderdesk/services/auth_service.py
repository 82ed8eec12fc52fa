"""
orderdesk/services/auth_service.py

Purpose: Auth session manager

- Restores the persisted session at startup and revalidates it
- Login (one at a time) with role-based landing page
- Logout and API-driven session expiry
- The only writer of the persisted token / user pair
"""

from typing import Callable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from orderdesk.core.config import Settings, settings
from orderdesk.core.exceptions import AuthenticationError, LoginInProgressError, OrderDeskError
from orderdesk.core.logging import get_logger
from orderdesk.core.notifications import Notifier
from orderdesk.db.storage import PersistedSessionStore
from orderdesk.flow.navigation import Navigator
from orderdesk.flow.route_gate import landing_path_for
from orderdesk.flow.states import SessionState, get_state_metadata, is_valid_transition
from orderdesk.schemas.user import LoginRequest, Role, User
from orderdesk.services.endpoints import OrderDeskApi
from orderdesk.services.query_client import QueryClient
from orderdesk.utils.constants import (
    LOGIN_FAILED_MESSAGE,
    LOGIN_NO_TOKEN_MESSAGE,
    LOGIN_PROFILE_FAILED_MESSAGE,
    LOGIN_SUCCESS_MESSAGE,
    LOGOUT_SUCCESS_MESSAGE,
)

logger = get_logger(__name__)

StateListener = Callable[[SessionState], None]


class AuthSessionManager:
    """
    Owns the client-side session.

    Installs itself as the gateway's 401 handler on construction, so any
    rejected token (from any service) ends the session here.
    """

    def __init__(
        self,
        api: OrderDeskApi,
        store: PersistedSessionStore,
        notifier: Notifier,
        navigator: Navigator,
        queries: Optional[QueryClient] = None,
        config: Optional[Settings] = None,
    ):
        self.api = api
        self.store = store
        self.notifier = notifier
        self.navigator = navigator
        self.queries = queries
        self.config = config or settings

        self._state = SessionState.UNINITIALIZED
        self._user: Optional[User] = None
        self._token: Optional[str] = None
        self._logging_in = False
        self._listeners: List[StateListener] = []

        self.api.gateway.set_session_expired_handler(self.handle_session_expired)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def role(self) -> Optional[Role]:
        return self._user.role if self._user else None

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None and self._user is not None

    @property
    def is_loading(self) -> bool:
        return get_state_metadata(self._state).is_loading

    @property
    def is_logging_in(self) -> bool:
        return self._logging_in

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _transition(self, to_state: SessionState) -> None:
        if not is_valid_transition(self._state, to_state):
            raise ValueError(f"Invalid session transition: {self._state.value} -> {to_state.value}")

        previous = self._state
        self._state = to_state
        if previous != to_state:
            logger.info(f"Session state: {previous.value} -> {to_state.value}")

        for listener in list(self._listeners):
            listener(to_state)

    def _end_session(self) -> None:
        """Clears storage, in-memory session and cached data; goes ANONYMOUS."""
        self.store.clear()
        self._token = None
        self._user = None
        if self.queries is not None:
            self.queries.clear()
        self._transition(SessionState.ANONYMOUS)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def initialize(self) -> Optional[User]:
        """
        Restores the stored session, if any, and revalidates it.

        The stored profile is applied before revalidation so the session is
        authenticated while RESTORING; any revalidation failure clears it.

        Returns:
            The restored user, or None when the session ends up anonymous
        """
        if self._state != SessionState.UNINITIALIZED:
            return self._user

        token = self.store.read_token()
        stored_user = self.store.read_user()

        user = None
        if stored_user is not None:
            try:
                user = User.model_validate(stored_user)
            except PydanticValidationError as e:
                logger.warning(f"Discarding invalid stored user: {e.error_count()} errors")

        if not token or user is None:
            if token or stored_user is not None:
                logger.info("Clearing incomplete stored session")
            self._end_session()
            return None

        self._token = token
        self._user = user
        self._transition(SessionState.RESTORING)

        try:
            fresh_user = await self.api.get_current_user()
        except OrderDeskError as e:
            logger.info(f"Stored session rejected: {e.message}")
            self._end_session()
            return None

        # A 401 handler may already have ended the session
        if self._state != SessionState.RESTORING:
            return None

        self._user = fresh_user
        self.store.write_user(fresh_user.to_storage())
        self._transition(SessionState.AUTHENTICATED)
        logger.info(f"Session restored for {fresh_user.role.value}", extra={"user_id": fresh_user.id, "role": fresh_user.role.value})
        return fresh_user

    async def login(self, email: str, password: str) -> User:
        """
        Logs in and navigates to the role's landing page.

        Raises:
            LoginInProgressError: another login has not finished yet
            AuthenticationError: login failed; a notice has been shown
        """
        if self._logging_in:
            raise LoginInProgressError()

        if self._state == SessionState.UNINITIALIZED:
            # Logging in replaces whatever was stored
            self._transition(SessionState.ANONYMOUS)

        self._logging_in = True
        token_written = False
        try:
            response = await self.api.login(LoginRequest(email=email.strip(), password=password))
            if not response.token:
                raise AuthenticationError(LOGIN_NO_TOKEN_MESSAGE)

            self.store.write_token(response.token)
            token_written = True

            try:
                user = await self.api.get_current_user(during_login=True)
            except OrderDeskError as e:
                raise AuthenticationError(LOGIN_PROFILE_FAILED_MESSAGE, details=e.message) from e

            self.store.write_user(user.to_storage())
        except OrderDeskError as e:
            message = e.message or LOGIN_FAILED_MESSAGE
            logger.warning(f"Login failed: {message}")
            if token_written:
                self._end_session()
            self.notifier.error(message)
            if isinstance(e, AuthenticationError):
                raise
            raise AuthenticationError(message, details=e.code) from e
        finally:
            self._logging_in = False

        self._token = response.token
        self._user = user
        self._transition(SessionState.AUTHENTICATED)

        logger.info("Login successful", extra={"user_id": user.id, "role": user.role.value})
        self.notifier.success(LOGIN_SUCCESS_MESSAGE)
        self.navigator.navigate(landing_path_for(user.role, self.config))
        return user

    async def refresh_user(self) -> Optional[User]:
        """Re-fetches the profile of the signed-in user."""
        if not self.is_authenticated:
            return None

        try:
            user = await self.api.get_current_user()
        except OrderDeskError as e:
            logger.warning(f"Refreshing profile failed: {e.message}")
            return self._user

        if self._state != SessionState.AUTHENTICATED:
            return None

        self._user = user
        self.store.write_user(user.to_storage())
        self._transition(SessionState.AUTHENTICATED)
        return user

    def logout(self) -> None:
        self._end_session()
        logger.info("Logged out")
        self.navigator.navigate(self.config.PUBLIC_PATH)
        self.notifier.success(LOGOUT_SUCCESS_MESSAGE)

    def handle_session_expired(self) -> None:
        """401 handler: drops the session and sends the user to login."""
        logger.warning("Session expired; clearing stored credentials")
        self._end_session()
        self.navigator.navigate(self.config.LOGIN_PATH)
