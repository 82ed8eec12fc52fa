"""
orderdesk/services/api_client.py

Purpose: API gateway - the single chokepoint for HTTP calls

- Attaches the bearer token, request timestamp and XHR marker to every request
- Applies one response policy (401 / 403 / 429 / 500 / other errors)
- Converts transport failures and timeouts into NetworkError
- Never retries, queues or replays a request
"""

import time
from typing import Any, Callable, Dict, Optional

import httpx

from orderdesk.core.config import Settings, settings
from orderdesk.core.exceptions import (
    ApiError,
    AuthenticationError,
    AuthorizationDeniedError,
    NetworkError,
    OrderDeskError,
    RateLimitedError,
    ResourceNotFoundError,
    ServerError,
    SessionExpiredError,
)
from orderdesk.core.logging import get_logger
from orderdesk.core.notifications import Notifier
from orderdesk.db.storage import PersistedSessionStore
from orderdesk.schemas.common import ErrorResponse
from orderdesk.utils.constants import (
    ACCESS_DENIED_MESSAGE,
    ACCESS_DENIED_TITLE,
    NETWORK_ERROR_MESSAGE,
    NETWORK_ERROR_TITLE,
    RATE_LIMITED_MESSAGE,
    RATE_LIMITED_TITLE,
    SERVER_ERROR_MESSAGE,
    SERVER_ERROR_TITLE,
    SESSION_EXPIRED_MESSAGE,
    SESSION_EXPIRED_TITLE,
    TIMEOUT_MESSAGE,
    TITLE_ERROR,
    VARIANT_DESTRUCTIVE,
)

logger = get_logger(__name__)

SessionExpiredHandler = Callable[[], None]


def extract_error_message(response: httpx.Response) -> str:
    """
    Pulls the backend's message out of an error response.

    Falls back to the HTTP reason phrase when the body has no message.
    """
    try:
        error = ErrorResponse.model_validate(response.json())
    except ValueError:
        error = None

    if error is not None and error.text:
        return error.text

    return response.reason_phrase or f"Request failed with status {response.status_code}"


class ApiGateway:
    """
    Async HTTP client shared by every resource service.

    The gateway reads the token from the session store but never writes it;
    on 401 it delegates to the installed session-expired handler, which is
    owned by the auth session manager.
    """

    def __init__(
        self,
        store: PersistedSessionStore,
        notifier: Notifier,
        config: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        session_expired_handler: Optional[SessionExpiredHandler] = None,
    ):
        self.config = config or settings
        self.store = store
        self.notifier = notifier
        self._session_expired_handler = session_expired_handler

        self._client = httpx.AsyncClient(
            base_url=self.config.API_BASE_URL,
            timeout=self.config.REQUEST_TIMEOUT_SECONDS,
            headers={
                "Accept": "application/json",
                "X-Requested-With": "XMLHttpRequest",
            },
            transport=transport,
            event_hooks={"request": [self._prepare_request]},
        )

    def set_session_expired_handler(self, handler: Optional[SessionExpiredHandler]) -> None:
        self._session_expired_handler = handler

    async def _prepare_request(self, request: httpx.Request) -> None:
        """Request interceptor: token and replay-mitigation timestamp."""
        token = self.store.read_token()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        else:
            request.headers.pop("Authorization", None)

        request.headers["X-Timestamp"] = str(int(time.time() * 1000))

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Any] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Any:
        """
        Sends one request and applies the response policy.

        Args:
            method: HTTP method
            path: Path relative to API_BASE_URL
            json: JSON body
            data: Form fields (multipart when files are given)
            files: Multipart files
            params: Query string parameters
            authenticated: False for calls made while logging in, where a 401
                means bad credentials rather than an expired session; errors
                are then raised without notifications so the caller can
                surface one.

        Returns:
            Decoded JSON body, raw text, or None for an empty body

        Raises:
            OrderDeskError subclass matching the failure
        """
        try:
            response = await self._client.request(
                method, path, json=json, data=data, files=files, params=params
            )
        except httpx.TimeoutException as e:
            logger.error(f"Request timed out: {method} {path}", extra={"method": method, "path": path})
            if authenticated:
                self.notifier.notify(NETWORK_ERROR_TITLE, TIMEOUT_MESSAGE, VARIANT_DESTRUCTIVE)
            raise NetworkError(TIMEOUT_MESSAGE) from e
        except httpx.RequestError as e:
            logger.error(f"Network error on {method} {path}: {e}", extra={"method": method, "path": path})
            if authenticated:
                self.notifier.notify(NETWORK_ERROR_TITLE, NETWORK_ERROR_MESSAGE, VARIANT_DESTRUCTIVE)
            raise NetworkError(NETWORK_ERROR_MESSAGE) from e

        if response.is_error:
            raise self._handle_error(response, authenticated)

        logger.debug(
            f"{method} {path} -> {response.status_code}",
            extra={"method": method, "path": path, "status": response.status_code},
        )
        return self._decode(response)

    def _handle_error(self, response: httpx.Response, authenticated: bool) -> OrderDeskError:
        """
        Maps an error response to a notification and a typed exception.
        The exception is returned for the caller to raise.
        """
        status = response.status_code
        message = extract_error_message(response)
        method = response.request.method
        path = response.request.url.path

        logger.warning(
            f"{method} {path} failed with {status}: {message}",
            extra={"method": method, "path": path, "status": status},
        )

        if not authenticated:
            if status == 401:
                return AuthenticationError(message)
            return self._error_for_status(status, message)

        if status == 401:
            self._expire_session()
            self.notifier.notify(SESSION_EXPIRED_TITLE, SESSION_EXPIRED_MESSAGE, VARIANT_DESTRUCTIVE)
            return SessionExpiredError(message)
        if status == 403:
            self.notifier.notify(ACCESS_DENIED_TITLE, ACCESS_DENIED_MESSAGE, VARIANT_DESTRUCTIVE)
        elif status == 429:
            self.notifier.notify(RATE_LIMITED_TITLE, RATE_LIMITED_MESSAGE, VARIANT_DESTRUCTIVE)
        elif status == 500:
            self.notifier.notify(SERVER_ERROR_TITLE, SERVER_ERROR_MESSAGE, VARIANT_DESTRUCTIVE)
        else:
            self.notifier.notify(TITLE_ERROR, message, VARIANT_DESTRUCTIVE)

        return self._error_for_status(status, message)

    @staticmethod
    def _error_for_status(status: int, message: str) -> OrderDeskError:
        if status == 401:
            return SessionExpiredError(message)
        if status == 403:
            return AuthorizationDeniedError(message)
        if status == 404:
            return ResourceNotFoundError(message)
        if status == 429:
            return RateLimitedError(message)
        if status == 500:
            return ServerError(message)
        return ApiError(message, status_code=status)

    def _expire_session(self) -> None:
        if self._session_expired_handler is not None:
            self._session_expired_handler()
        else:
            # No session manager wired: still never keep a rejected token
            self.store.clear()

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def close(self) -> None:
        await self._client.aclose()
        logger.debug("API gateway closed")
