"""Cookie channel: the copy of credentials that server-side middleware reads."""
import time
from abc import ABC, abstractmethod
from collections.abc import Callable

import httpx


class CookieChannel(ABC):
    """Minimal cookie interface with per-cookie lifetimes."""

    @abstractmethod
    def set(self, name: str, value: str, max_age_seconds: float) -> None:
        """Set a cookie that expires after max_age_seconds."""

    @abstractmethod
    def get(self, name: str) -> str | None:
        """Return the cookie value if present and not expired."""

    @abstractmethod
    def delete(self, name: str) -> None:
        """Remove the cookie; missing cookies are ignored."""


class HttpxCookieChannel(CookieChannel):
    """Writes cookies into an ``httpx.Cookies`` jar.

    Pass the jar of the client that talks to the server so every request
    carries the cookies. httpx has no per-cookie expiry setter, so lifetimes
    are tracked here and expired cookies are removed on read.
    """

    def __init__(
        self,
        cookies: httpx.Cookies,
        *,
        domain: str = "",
        path: str = "/",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._cookies = cookies
        self._domain = domain
        self._path = path
        self._clock = clock
        self._expires_at: dict[str, float] = {}

    def set(self, name: str, value: str, max_age_seconds: float) -> None:
        self._cookies.set(name, value, domain=self._domain, path=self._path)
        self._expires_at[name] = self._clock() + max_age_seconds

    def get(self, name: str) -> str | None:
        expires_at = self._expires_at.get(name)
        if expires_at is not None and self._clock() >= expires_at:
            self.delete(name)
            return None
        return self._cookies.get(name, domain=self._domain, path=self._path)

    def delete(self, name: str) -> None:
        self._expires_at.pop(name, None)
        try:
            self._cookies.delete(name, domain=self._domain, path=self._path)
        except KeyError:
            pass
