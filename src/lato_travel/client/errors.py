"""Typed errors raised by the authenticated API client."""
from typing import Any


class APIError(Exception):
    """Non-2xx response (or a failure standing in for one).

    Carries enough structure for a caller to render a message: HTTP status,
    status text and the parsed JSON body when there was one.
    """

    def __init__(
        self,
        message: str,
        status: int,
        status_text: str = "",
        data: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.status_text = status_text
        self.data = data

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status}, message={self.message!r})"


class NetworkError(APIError):
    """No response was received (connection refused, DNS failure, reset)."""

    def __init__(
        self,
        message: str = "Network error. Please check your internet connection.",
        status_text: str = "Network Error",
    ) -> None:
        super().__init__(message, 0, status_text)


class RequestTimeoutError(NetworkError):
    """The request exceeded its deadline before a response arrived."""

    def __init__(self, message: str = "Request timed out") -> None:
        super().__init__(message, "Timeout")


class SessionExpiredError(APIError):
    """Credentials are gone and could not be renewed.

    Tokens have already been cleared when this is raised; the caller owns the
    redirect to the login screen.
    """

    def __init__(self, message: str = "Session expired. Please sign in again.") -> None:
        super().__init__(message, 401, "Unauthorized")


class TokenRefreshError(APIError):
    """An in-flight refresh ended without an outcome (it was cancelled)."""

    def __init__(self, message: str = "Token refresh was cancelled") -> None:
        super().__init__(message, 0, "Refresh Cancelled")
