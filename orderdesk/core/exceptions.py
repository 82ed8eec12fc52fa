from typing import Optional, Any


class OrderDeskError(Exception):
    """
    Base exception for the OrderDesk client.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(OrderDeskError):
    """
    Raised when login fails (bad credentials, missing token, profile fetch failure).
    """
    def __init__(self, message: str = "Login failed", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)


class SessionExpiredError(OrderDeskError):
    """
    Raised when the API rejects the stored token (401 on an authenticated call).
    """
    def __init__(self, message: str = "Session expired", details: Optional[Any] = None):
        super().__init__(message, code="SESSION_EXPIRED", status_code=401, details=details)


class AuthorizationDeniedError(OrderDeskError):
    """
    Raised on a 403 response or a role mismatch.
    """
    def __init__(self, message: str = "Access denied", details: Optional[Any] = None):
        super().__init__(message, code="ACCESS_DENIED", status_code=403, details=details)


class ResourceNotFoundError(OrderDeskError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)


class ValidationError(OrderDeskError):
    """
    Raised when form input fails validation before it is sent.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=422, details=details)


class RateLimitedError(OrderDeskError):
    """
    Raised on a 429 response. Never retried automatically.
    """
    def __init__(self, message: str = "Too many requests", details: Optional[Any] = None):
        super().__init__(message, code="RATE_LIMITED", status_code=429, details=details)


class ServerError(OrderDeskError):
    """
    Raised on a 500 response.
    """
    def __init__(self, message: str = "Server error", details: Optional[Any] = None):
        super().__init__(message, code="SERVER_ERROR", status_code=500, details=details)


class ApiError(OrderDeskError):
    """
    Raised for any other error status; carries the backend message verbatim.
    """
    def __init__(self, message: str, status_code: int, details: Optional[Any] = None):
        super().__init__(message, code="HTTP_ERROR", status_code=status_code, details=details)


class NetworkError(OrderDeskError):
    """
    Raised when the API cannot be reached or the request times out.
    """
    def __init__(self, message: str = "Unable to reach the server", details: Optional[Any] = None):
        super().__init__(message, code="NETWORK_ERROR", status_code=503, details=details)


class LoginInProgressError(OrderDeskError):
    """
    Raised when login is called while another login is still in flight.
    """
    def __init__(self, message: str = "A login attempt is already in progress", details: Optional[Any] = None):
        super().__init__(message, code="LOGIN_IN_PROGRESS", status_code=409, details=details)
