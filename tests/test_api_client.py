"""Tests for ApiClient and AuthApi against an httpx.MockTransport backend."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from lato_travel.client import (APIError, ApiClient, AuthApi, NetworkError,
                                RequestTimeoutError, SessionExpiredError)
from lato_travel.client.api_client import REFRESH_ENDPOINT

BASE_URL = "https://api.example.test"


class FakeBackend:
    """Accepts only bearer tokens in ``valid``; refresh hands out the next token."""

    def __init__(self, valid: set[str] | None = None, next_token: str = "fresh") -> None:
        self.valid = valid if valid is not None else set()
        self.next_token = next_token
        self.requests: list[httpx.Request] = []
        self.refresh_calls = 0
        self.refresh_status = 200

    def calls_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        # let concurrent requests interleave
        await asyncio.sleep(0)
        if request.url.path == REFRESH_ENDPOINT:
            self.refresh_calls += 1
            if self.refresh_status != 200:
                return httpx.Response(self.refresh_status, json={"message": "Invalid refresh token"})
            self.valid.add(self.next_token)
            return httpx.Response(
                200,
                json={"tokens": {"accessToken": self.next_token, "expiresIn": 3600, "refreshToken": "r2"}},
            )
        if request.url.path == "/plain":
            return httpx.Response(200, text="ok", headers={"content-type": "text/plain"})
        auth = request.headers.get("Authorization", "")
        if auth.removeprefix("Bearer ") not in self.valid:
            return httpx.Response(401, json={"message": "Unauthorized"})
        return httpx.Response(200, json={"path": request.url.path, "auth": auth})


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def api(backend, token_store):
    http = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(backend))
    return ApiClient(BASE_URL, token_store, http_client=http)


# ── Bearer injection ──────────────────────────────────────────────────────────


class TestBearerInjection:
    @pytest.mark.asyncio
    async def test_attaches_current_token(self, api, backend, token_store):
        backend.valid.add("t0")
        token_store.set_access_token("t0", 3600)

        data = await api.get("/tours/mine")

        assert data == {"path": "/tours/mine", "auth": "Bearer t0"}
        assert backend.requests[0].headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_no_auth_header_when_not_required(self, api, backend, token_store):
        token_store.set_access_token("t0", 3600)
        await api.get("/plain", requires_auth=False)
        assert "Authorization" not in backend.requests[0].headers

    @pytest.mark.asyncio
    async def test_missing_access_token_refreshes_first(self, api, backend, token_store):
        token_store.set_refresh_token("r1")

        data = await api.get("/tours/mine")

        assert data["auth"] == "Bearer fresh"
        assert backend.refresh_calls == 1
        refresh_body = json.loads(backend.calls_to(REFRESH_ENDPOINT)[0].content)
        assert refresh_body == {"refreshToken": "r1"}
        assert "Authorization" not in backend.calls_to(REFRESH_ENDPOINT)[0].headers


# ── 401 handling ──────────────────────────────────────────────────────────────


class TestUnauthorized:
    @pytest.mark.asyncio
    async def test_401_refreshes_and_replays_once(self, api, backend, token_store):
        token_store.set_access_token("revoked", 3600)
        token_store.set_refresh_token("r1")

        data = await api.get("/tours/mine")

        assert data["auth"] == "Bearer fresh"
        assert backend.refresh_calls == 1
        assert len(backend.calls_to("/tours/mine")) == 2
        assert token_store.get_refresh_token() == "r2"

    @pytest.mark.asyncio
    async def test_concurrent_401s_share_one_refresh(self, api, backend, token_store):
        token_store.set_access_token("revoked", 3600)
        token_store.set_refresh_token("r1")

        a, b = await asyncio.gather(api.get("/a"), api.get("/b"))

        assert backend.refresh_calls == 1
        assert a["auth"] == b["auth"] == "Bearer fresh"

    @pytest.mark.asyncio
    async def test_second_401_expires_session(self, token_store):
        paths: list[str] = []

        def handler(request):
            paths.append(request.url.path)
            if request.url.path == REFRESH_ENDPOINT:
                return httpx.Response(200, json={"accessToken": "fresh", "expiresIn": 3600})
            return httpx.Response(401, json={"message": "Unauthorized"})

        api = _client_for(handler, token_store)
        token_store.set_access_token("revoked", 3600)
        token_store.set_refresh_token("r1")

        with pytest.raises(SessionExpiredError):
            await api.get("/tours/mine")

        assert paths.count("/tours/mine") == 2
        assert paths.count(REFRESH_ENDPOINT) == 1
        assert token_store.get_access_token() is None
        assert token_store.get_refresh_token() is None

    @pytest.mark.asyncio
    async def test_failed_refresh_expires_session(self, api, backend, token_store):
        backend.refresh_status = 401
        token_store.set_access_token("revoked", 3600)
        token_store.set_refresh_token("r1")

        with pytest.raises(SessionExpiredError):
            await api.get("/tours/mine")

        assert len(backend.calls_to("/tours/mine")) == 1
        assert token_store.get_refresh_token() is None

    @pytest.mark.asyncio
    async def test_401_without_auth_is_a_plain_api_error(self, api, token_store):
        with pytest.raises(APIError) as exc_info:
            await api.get("/tours/mine", requires_auth=False)
        assert exc_info.value.status == 401
        assert not isinstance(exc_info.value, SessionExpiredError)


# ── Errors and bodies ─────────────────────────────────────────────────────────


def _client_for(handler, token_store) -> ApiClient:
    http = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return ApiClient(BASE_URL, token_store, http_client=http)


class TestErrors:
    @pytest.mark.asyncio
    async def test_api_error_carries_status_and_body(self, token_store):
        def handler(request):
            return httpx.Response(404, json={"message": "Tour not found", "tourId": "t-9"})

        api = _client_for(handler, token_store)
        with pytest.raises(APIError) as exc_info:
            await api.get("/tours/t-9", requires_auth=False)

        err = exc_info.value
        assert err.message == "Tour not found"
        assert err.status == 404
        assert err.status_text == "Not Found"
        assert err.data == {"message": "Tour not found", "tourId": "t-9"}

    @pytest.mark.asyncio
    async def test_api_error_without_message(self, token_store):
        api = _client_for(lambda request: httpx.Response(500, text="boom"), token_store)
        with pytest.raises(APIError) as exc_info:
            await api.get("/tours", requires_auth=False)
        assert exc_info.value.message == "HTTP error! status: 500"
        assert exc_info.value.data is None

    @pytest.mark.asyncio
    async def test_connection_failure_is_network_error(self, token_store):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        api = _client_for(handler, token_store)
        with pytest.raises(NetworkError) as exc_info:
            await api.get("/tours", requires_auth=False)
        assert exc_info.value.status == 0
        assert exc_info.value.status_text == "Network Error"

    @pytest.mark.asyncio
    async def test_timeout_is_timeout_error(self, token_store):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        api = _client_for(handler, token_store)
        with pytest.raises(RequestTimeoutError) as exc_info:
            await api.get("/tours", requires_auth=False)
        assert exc_info.value.status_text == "Timeout"

    @pytest.mark.asyncio
    async def test_non_json_success_returns_empty_dict(self, api):
        assert await api.get("/plain", requires_auth=False) == {}


# ── AuthApi ───────────────────────────────────────────────────────────────────


class TestAuthApi:
    @pytest.mark.asyncio
    async def test_login_stores_tokens(self, token_store):
        def handler(request):
            return httpx.Response(
                200,
                json={
                    "user": {"id": "u1", "email": "ana@example.com", "name": "Ana"},
                    "tokens": {"accessToken": "a1", "expiresIn": 900, "refreshToken": "r1"},
                },
            )

        auth = AuthApi(_client_for(handler, token_store))
        user = await auth.login("ana@example.com", "secret")

        assert user.email == "ana@example.com"
        assert token_store.get_access_token() == "a1"
        assert token_store.get_refresh_token() == "r1"

    @pytest.mark.asyncio
    async def test_logout_clears_tokens_even_when_server_fails(self, token_store):
        auth = AuthApi(_client_for(lambda request: httpx.Response(503), token_store))
        token_store.set_access_token("a1", 900)
        token_store.set_refresh_token("r1")

        await auth.logout()

        assert token_store.get_access_token() is None
        assert token_store.get_refresh_token() is None
