"""Tests for the proxied trip routes (TestClient + httpx.MockTransport upstream)."""

from __future__ import annotations

import socket

import httpx
import pytest
from fastapi.testclient import TestClient

from lato_travel.main import app
from lato_travel.providers import LatoTripsProvider
from lato_travel.providers.core import RetryPolicy
from lato_travel.routers.trips import (MARKETPLACE_CACHE_CONTROL,
                                       USER_TRIP_CACHE_CONTROL)
from lato_travel.services import TripService, is_uuid_v4

UPSTREAM = "https://upstream.example.test"
TRIP_ID = "3f2b5c1e-8a4d-4f6b-9c2e-1d7a0b9e4f21"
TRIP = {"id": TRIP_ID, "title": "Douro Valley Wine Weekend", "days": [{"day": 1}]}


async def _no_sleep(_: float) -> None:
    return None


class Upstream:
    """Records requests and answers with a configurable handler."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler = lambda request: httpx.Response(200, json=TRIP)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


@pytest.fixture
def upstream():
    return Upstream()


def _install(upstream: Upstream, token: str | None) -> None:
    provider = LatoTripsProvider(
        UPSTREAM,
        token,
        retry_policy=RetryPolicy(sleep=_no_sleep),
        client=httpx.AsyncClient(base_url=UPSTREAM, transport=httpx.MockTransport(upstream)),
    )
    app.state.trip_service = TripService(provider)


@pytest.fixture
def client(upstream):
    _install(upstream, "server-secret")
    yield TestClient(app)
    del app.state.trip_service


@pytest.fixture
def client_without_token(upstream):
    _install(upstream, None)
    yield TestClient(app)
    del app.state.trip_service


# ── Validation ────────────────────────────────────────────────────────────────


class TestTripIdValidation:
    def test_not_a_uuid(self, client, upstream):
        r = client.get("/api/v1/usertrips/not-a-uuid")
        assert r.status_code == 400
        body = r.json()
        assert body["error"] == "Invalid trip ID format"
        assert body["message"] == "Trip ID must be a valid UUID v4"
        assert body["receivedId"] == "not-a-uuid"
        assert upstream.requests == []

    def test_uuid_v1_rejected(self, client, upstream):
        r = client.get("/api/v1/usertrips/3f2b5c1e-8a4d-1f6b-9c2e-1d7a0b9e4f21")
        assert r.status_code == 400
        assert upstream.requests == []

    def test_uppercase_uuid_accepted(self):
        assert is_uuid_v4(TRIP_ID.upper())

    def test_missing_credentials(self, client_without_token, upstream):
        r = client_without_token.get(f"/api/v1/usertrips/{TRIP_ID}")
        assert r.status_code == 500
        assert r.json() == {"error": "Server configuration error: API credentials not set"}
        assert upstream.requests == []


# ── Success ───────────────────────────────────────────────────────────────────


class TestTripSuccess:
    def test_passes_payload_through_with_cache_header(self, client, upstream):
        r = client.get(f"/api/v1/usertrips/{TRIP_ID}")
        assert r.status_code == 200
        assert r.json() == TRIP
        assert r.headers["cache-control"] == USER_TRIP_CACHE_CONTROL

        sent = upstream.requests[0]
        assert sent.url.path == f"/api/v1/usertrips/{TRIP_ID}"
        assert sent.headers["Authorization"] == "Bearer server-secret"

    def test_recovers_after_one_connect_failure(self, client, upstream):
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) == 1:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json=TRIP)

        upstream.handler = handler
        r = client.get(f"/api/v1/usertrips/{TRIP_ID}")
        assert r.status_code == 200
        assert len(attempts) == 2


# ── Upstream failures ─────────────────────────────────────────────────────────


class TestTripFailures:
    def test_upstream_status_relayed_with_message(self, client, upstream):
        upstream.handler = lambda request: httpx.Response(404, json={"message": "Trip not found"})
        r = client.get(f"/api/v1/usertrips/{TRIP_ID}")
        assert r.status_code == 404
        assert r.json() == {"error": "Trip not found", "status": 404}
        assert len(upstream.requests) == 1

    def test_upstream_status_without_message(self, client, upstream):
        upstream.handler = lambda request: httpx.Response(502, text="bad gateway")
        r = client.get(f"/api/v1/usertrips/{TRIP_ID}")
        assert r.status_code == 502
        assert r.json() == {"error": "External API error: 502", "status": 502}

    def test_timeout_is_504_after_retries(self, client, upstream):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        upstream.handler = handler
        r = client.get(f"/api/v1/usertrips/{TRIP_ID}")
        assert r.status_code == 504
        assert r.json()["error"] == "Gateway timeout"
        assert len(upstream.requests) == 3

    def test_refused_connection_is_503(self, client, upstream):
        def handler(request):
            raise httpx.ConnectError("[Errno 111] Connection refused", request=request)

        upstream.handler = handler
        r = client.get(f"/api/v1/usertrips/{TRIP_ID}")
        assert r.status_code == 503
        assert r.json()["message"] == "Could not connect to the External API"

    def test_dns_failure_is_503_with_its_own_message(self, client, upstream):
        def handler(request):
            raise httpx.ConnectError("connect failed", request=request) from socket.gaierror(
                -2, "Name or service not known"
            )

        upstream.handler = handler
        r = client.get(f"/api/v1/usertrips/{TRIP_ID}")
        assert r.status_code == 503
        assert r.json()["message"] == "Could not resolve the External API host"

    def test_non_object_payload_is_500(self, client, upstream):
        upstream.handler = lambda request: httpx.Response(200, json=[1, 2, 3])
        r = client.get(f"/api/v1/usertrips/{TRIP_ID}")
        assert r.status_code == 500
        assert r.json() == {"error": "Invalid data received from External API"}


# ── Marketplace and health ────────────────────────────────────────────────────


class TestMarketplace:
    def test_forwards_query_and_sets_cache_header(self, client, upstream):
        upstream.handler = lambda request: httpx.Response(200, json={"data": [], "page": 2})
        r = client.get("/api/v1/trips/marketplace", params={"page": 2, "countries": "PT,ES"})

        assert r.status_code == 200
        assert r.headers["cache-control"] == MARKETPLACE_CACHE_CONTROL
        params = dict(upstream.requests[0].url.params)
        assert params == {"page": "2", "step": "10", "sample": "true", "countries": "PT,ES"}

    def test_page_must_be_positive(self, client, upstream):
        r = client.get("/api/v1/trips/marketplace", params={"page": 0})
        assert r.status_code == 422
        assert upstream.requests == []


def test_health(client):
    assert client.get("/").json() == {"status": "ok"}
