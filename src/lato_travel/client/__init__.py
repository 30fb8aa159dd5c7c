"""Authenticated API client: token store, single-flight refresher and the
request wrapper.

Example:
    settings = get_settings()
    store = create_key_value_store(settings)
    async with create_api_client(settings, store) as client:
        user = await AuthApi(client).login("me@example.com", "secret")
        trips = await client.get("/api/v1/usertrips")
"""
from lato_travel.client.api_client import ApiClient
from lato_travel.client.auth_api import AuthApi
from lato_travel.client.errors import (APIError, NetworkError,
                                       RequestTimeoutError, SessionExpiredError,
                                       TokenRefreshError)
from lato_travel.client.jwt import parse_jwt_payload
from lato_travel.client.models import AuthTokens, User, UserRole
from lato_travel.client.refresher import TokenRefresher
from lato_travel.client.resources import CompaniesApi, SavedToursApi, ToursApi
from lato_travel.client.token_store import TokenStore

__all__ = [
    "APIError",
    "ApiClient",
    "AuthApi",
    "AuthTokens",
    "CompaniesApi",
    "NetworkError",
    "RequestTimeoutError",
    "SavedToursApi",
    "SessionExpiredError",
    "TokenRefreshError",
    "TokenRefresher",
    "TokenStore",
    "ToursApi",
    "User",
    "UserRole",
    "parse_jwt_payload",
]
