"""Authenticated request wrapper around ``httpx.AsyncClient``.

Injects the bearer token, turns a 401 into one refresh-and-replay, and
surfaces everything else as typed errors. Navigation on session expiry is
left to the caller: it gets a ``SessionExpiredError``.
"""
import logging
from typing import Any

import httpx

from lato_travel.client.errors import (APIError, NetworkError,
                                       RequestTimeoutError, SessionExpiredError)
from lato_travel.client.models import AuthTokens
from lato_travel.client.refresher import TokenRefresher
from lato_travel.client.token_store import TokenStore

logger = logging.getLogger(__name__)

REFRESH_ENDPOINT = "/api/v1/auth/refresh"


class ApiClient:
    """HTTP client for the external API.

    The refresher (and so the single-flight state) belongs to this instance;
    pass one in to share it, otherwise a private one is created that calls
    ``REFRESH_ENDPOINT``.
    """

    def __init__(
        self,
        base_url: str,
        token_store: TokenStore,
        *,
        http_client: httpx.AsyncClient | None = None,
        refresher: TokenRefresher | None = None,
        timeout: float = 30.0,
        owns_client: bool | None = None,
    ) -> None:
        self._tokens = token_store
        # A passed-in client is closed by its creator unless owns_client=True
        self._owns_client = http_client is None if owns_client is None else owns_client
        self._client = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._refresher = refresher or TokenRefresher(token_store, self._call_refresh_endpoint)

    @property
    def token_store(self) -> TokenStore:
        return self._tokens

    @property
    def refresher(self) -> TokenRefresher:
        return self._refresher

    async def _call_refresh_endpoint(self, refresh_token: str) -> AuthTokens:
        """POST the refresh token; no bearer header and no retry."""
        data = await self.request(
            "POST",
            REFRESH_ENDPOINT,
            json={"refreshToken": refresh_token},
            requires_auth=False,
        )
        return AuthTokens.from_payload(data)

    async def _current_token(self) -> str | None:
        token = self._tokens.get_access_token()
        if token is None and self._tokens.get_refresh_token():
            token = await self._refresher.ensure_fresh_token()
        return token

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        requires_auth: bool = True,
        is_retry: bool = False,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Returns an empty dict when the response is not JSON.

        Raises:
            SessionExpiredError: 401 survived one refresh-and-replay, or the
                refresh itself failed. Credentials are cleared.
            APIError: Any other non-2xx response.
            NetworkError: No response was received (RequestTimeoutError for
                timeouts).
        """
        request_headers = {"Content-Type": "application/json", **(headers or {})}
        token: str | None = None
        if requires_auth:
            token = await self._current_token()
            if token is not None:
                request_headers["Authorization"] = f"Bearer {token}"

        response = await self._send(method, endpoint, json, params, request_headers)

        if response.status_code == 401 and requires_auth:
            if is_retry:
                logger.warning("%s %s rejected after refresh; session expired", method, endpoint)
                self._tokens.clear_all()
                raise SessionExpiredError()
            await self._refresher.ensure_fresh_token(stale_token=token)
            return await self.request(
                method,
                endpoint,
                json=json,
                params=params,
                headers=headers,
                requires_auth=requires_auth,
                is_retry=True,
            )

        if not response.is_success:
            raise _api_error(response)

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            return {}
        return response.json()

    async def _send(
        self,
        method: str,
        endpoint: str,
        json: Any,
        params: dict[str, Any] | None,
        headers: dict[str, str],
    ) -> httpx.Response:
        try:
            return await self._client.request(
                method, endpoint, json=json, params=params, headers=headers
            )
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out", method, endpoint)
            raise RequestTimeoutError() from exc
        except httpx.TransportError as exc:
            logger.warning("%s %s failed without a response: %s", method, endpoint, exc)
            raise NetworkError() from exc

    async def get(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request("GET", endpoint, **kwargs)

    async def post(self, endpoint: str, data: Any = None, **kwargs: Any) -> Any:
        return await self.request("POST", endpoint, json=data, **kwargs)

    async def put(self, endpoint: str, data: Any = None, **kwargs: Any) -> Any:
        return await self.request("PUT", endpoint, json=data, **kwargs)

    async def patch(self, endpoint: str, data: Any = None, **kwargs: Any) -> Any:
        return await self.request("PATCH", endpoint, json=data, **kwargs)

    async def delete(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", endpoint, **kwargs)

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.close()


def _api_error(response: httpx.Response) -> APIError:
    """Build an APIError from a non-2xx response, keeping the JSON body."""
    try:
        data = response.json()
    except ValueError:
        data = None
    message = None
    if isinstance(data, dict):
        message = data.get("message")
    return APIError(
        message or f"HTTP error! status: {response.status_code}",
        response.status_code,
        response.reason_phrase,
        data,
    )
