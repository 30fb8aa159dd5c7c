"""Credential storage with expiry bookkeeping.

The access token lives in two channels: the durable key-value store (read by
the client) and the cookie channel (read by server-side middleware). Both are
written by one operation so they cannot drift apart silently.
"""
import logging
import time
from collections.abc import Callable

from lato_travel.storage import CookieChannel, KeyValueStore, StorageError

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "lato_access_token"
TOKEN_EXPIRY_KEY = "lato_token_expiry"
REFRESH_TOKEN_KEY = "lato_refresh_token"
ACCESS_TOKEN_COOKIE = "lato_access_token"

REFRESH_TOKEN_MAX_AGE = 30 * 24 * 60 * 60


class TokenStore:
    """Holds access and refresh credentials; never performs network I/O."""

    def __init__(
        self,
        store: KeyValueStore,
        cookies: CookieChannel,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._cookies = cookies
        self._clock = clock
        self._access_token: str | None = None
        self._expires_at: float | None = None

    def set_access_token(self, token: str, expires_in_seconds: float) -> None:
        """Store token with absolute expiry now + expires_in_seconds.

        Writes the durable store and the cookie channel as one unit: if either
        write fails, both are restored to their previous values and
        StorageError is raised.
        """
        expires_at = self._clock() + expires_in_seconds
        previous = (
            self._store.get(ACCESS_TOKEN_KEY),
            self._store.get(TOKEN_EXPIRY_KEY),
            self._cookies.get(ACCESS_TOKEN_COOKIE),
        )
        try:
            self._store.set(ACCESS_TOKEN_KEY, token)
            self._store.set(TOKEN_EXPIRY_KEY, repr(expires_at))
            self._cookies.set(ACCESS_TOKEN_COOKIE, token, expires_in_seconds)
        except Exception as exc:
            logger.error("Failed to persist access token, rolling back: %s", exc)
            self._restore(*previous)
            raise StorageError("Failed to persist access token") from exc
        self._access_token = token
        self._expires_at = expires_at

    def _restore(
        self, token: str | None, expiry: str | None, cookie: str | None
    ) -> None:
        try:
            for key, value in ((ACCESS_TOKEN_KEY, token), (TOKEN_EXPIRY_KEY, expiry)):
                if value is None:
                    self._store.delete(key)
                else:
                    self._store.set(key, value)
            if cookie is None:
                self._cookies.delete(ACCESS_TOKEN_COOKIE)
            elif expiry is not None:
                remaining = max(float(expiry) - self._clock(), 0.0)
                self._cookies.set(ACCESS_TOKEN_COOKIE, cookie, remaining)
            else:
                # Old cookie lifetime unknown
                self._cookies.delete(ACCESS_TOKEN_COOKIE)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Rollback of access token failed; clearing all credentials")
            self.clear_all()

    def _load_expiry(self) -> float | None:
        raw = self._store.get(TOKEN_EXPIRY_KEY)
        if raw is None:
            return None
        try:
            return float(raw)
        except ValueError:
            logger.warning("Discarding corrupt token expiry %r", raw)
            return None

    def get_access_token(self) -> str | None:
        """Return the access token while it is unexpired, else None.

        An expired token is cleared from both channels on the way out.
        """
        if self._access_token is None:
            token = self._store.get(ACCESS_TOKEN_KEY)
            expires_at = self._load_expiry()
            if token is None or expires_at is None:
                return None
            self._access_token, self._expires_at = token, expires_at
        if self._expires_at is None or self._clock() >= self._expires_at:
            self.clear_access_token()
            return None
        return self._access_token

    def is_token_expired(self, buffer_seconds: float = 60) -> bool:
        """True when no expiry is known or it falls within buffer_seconds."""
        expires_at = self._expires_at if self._access_token else self._load_expiry()
        if expires_at is None:
            return True
        return self._clock() >= expires_at - buffer_seconds

    def clear_access_token(self) -> None:
        self._access_token = None
        self._expires_at = None
        self._store.delete(ACCESS_TOKEN_KEY)
        self._store.delete(TOKEN_EXPIRY_KEY)
        self._cookies.delete(ACCESS_TOKEN_COOKIE)

    def set_refresh_token(self, token: str) -> None:
        self._cookies.set(REFRESH_TOKEN_KEY, token, REFRESH_TOKEN_MAX_AGE)

    def get_refresh_token(self) -> str | None:
        return self._cookies.get(REFRESH_TOKEN_KEY)

    def clear_all(self) -> None:
        """Wipe both tokens and the cookie channel (logout, failed refresh)."""
        self.clear_access_token()
        self._cookies.delete(REFRESH_TOKEN_KEY)

    @property
    def is_authenticated(self) -> bool:
        return self.get_access_token() is not None
