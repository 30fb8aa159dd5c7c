"""Single-flight access token refresh.

Without single-flighting, N parallel 401s would fire N refresh calls, each
rotating the refresh token at the provider and racing to write the new access
token. Here at most one refresh is in flight; callers that arrive meanwhile
wait on it and all observe the same outcome.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable

from lato_travel.client.errors import SessionExpiredError, TokenRefreshError
from lato_travel.client.models import AuthTokens
from lato_travel.client.token_store import TokenStore

logger = logging.getLogger(__name__)

RefreshCall = Callable[[str], Awaitable[AuthTokens]]


class TokenRefresher:
    """Owns the ``refreshing`` flag and the FIFO list of waiters.

    One instance per API client; nothing here is module-level state.
    """

    def __init__(self, token_store: TokenStore, refresh_call: RefreshCall) -> None:
        self._tokens = token_store
        self._refresh_call = refresh_call
        self._refreshing = False
        self._waiters: list[asyncio.Future[str]] = []

    @property
    def refreshing(self) -> bool:
        return self._refreshing

    async def ensure_fresh_token(self, stale_token: str | None = None) -> str:
        """Return a usable access token, refreshing at most once concurrently.

        Args:
            stale_token: A token the server just rejected. A stored token equal
                to it does not count as valid, so a 401 forces a refresh unless
                another caller already replaced the token.

        Raises:
            SessionExpiredError: No refresh token, or the refresh failed. All
                tokens are cleared and every waiter gets the same error.
        """
        token = self._tokens.get_access_token()
        if token is not None and token != stale_token:
            return token

        if self._refreshing:
            waiter: asyncio.Future[str] = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            return await waiter

        self._refreshing = True
        try:
            new_token = await self._refresh()
        except asyncio.CancelledError:
            self._settle(error=TokenRefreshError())
            raise
        except SessionExpiredError as exc:
            self._settle(error=exc)
            raise
        self._settle(token=new_token)
        return new_token

    async def _refresh(self) -> str:
        refresh_token = self._tokens.get_refresh_token()
        if not refresh_token:
            self._tokens.clear_all()
            raise SessionExpiredError()
        logger.info("Refreshing access token")
        try:
            tokens = await self._refresh_call(refresh_token)
            self._tokens.set_access_token(tokens.access_token, tokens.expires_in)
            if tokens.refresh_token:
                self._tokens.set_refresh_token(tokens.refresh_token)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Token refresh failed: %s", exc)
            self._tokens.clear_all()
            raise SessionExpiredError() from exc
        logger.info("Access token refreshed")
        return tokens.access_token

    def _settle(
        self,
        *,
        token: str | None = None,
        error: BaseException | None = None,
    ) -> None:
        """Resolve every waiter in enqueue order with one outcome."""
        waiters, self._waiters = self._waiters, []
        self._refreshing = False
        for waiter in waiters:
            if waiter.done():
                continue
            if error is not None:
                waiter.set_exception(error)
            else:
                waiter.set_result(token)
