"""Auth endpoints of the external API.

Login and register store the returned tokens; logout always clears them,
even when the server call fails.
"""
import logging

from lato_travel.client.api_client import ApiClient
from lato_travel.client.errors import APIError
from lato_travel.client.models import (AuthResponse, AuthTokens, LoginRequest,
                                       RegisterRequest, User)

logger = logging.getLogger(__name__)

AUTH_PREFIX = "/api/v1/auth"


class AuthApi:
    """Session lifecycle on top of an ApiClient."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    def _store_tokens(self, tokens: AuthTokens) -> None:
        store = self._client.token_store
        store.set_access_token(tokens.access_token, tokens.expires_in)
        if tokens.refresh_token:
            store.set_refresh_token(tokens.refresh_token)

    async def login(self, email: str, password: str) -> User:
        payload = LoginRequest(email=email, password=password).model_dump()
        data = await self._client.post(f"{AUTH_PREFIX}/login", payload, requires_auth=False)
        auth = AuthResponse.model_validate(data)
        self._store_tokens(auth.tokens)
        return auth.user

    async def register(self, request: RegisterRequest) -> User:
        data = await self._client.post(
            f"{AUTH_PREFIX}/register", request.model_dump(mode="json"), requires_auth=False
        )
        auth = AuthResponse.model_validate(data)
        self._store_tokens(auth.tokens)
        return auth.user

    async def refresh_token(self) -> str:
        """Force a refresh through the client's single-flight refresher."""
        stale = self._client.token_store.get_access_token()
        return await self._client.refresher.ensure_fresh_token(stale_token=stale)

    async def get_current_user(self) -> User:
        data = await self._client.get(f"{AUTH_PREFIX}/me")
        return User.model_validate(data)

    async def logout(self) -> None:
        """Tell the server, then clear local credentials regardless of the outcome."""
        token = self._client.token_store.get_access_token()
        try:
            if token is not None:
                await self._client.post(
                    f"{AUTH_PREFIX}/logout",
                    headers={"Authorization": f"Bearer {token}"},
                    requires_auth=False,
                )
        except APIError as exc:
            logger.warning("Logout API call failed: %s", exc)
        finally:
            self._client.token_store.clear_all()

    async def forgot_password(self, email: str) -> dict:
        return await self._client.post(
            f"{AUTH_PREFIX}/forgot-password", {"email": email}, requires_auth=False
        )

    async def reset_password(self, token: str, new_password: str) -> dict:
        return await self._client.post(
            f"{AUTH_PREFIX}/reset-password",
            {"token": token, "newPassword": new_password},
            requires_auth=False,
        )

    async def change_password(self, current_password: str, new_password: str) -> dict:
        return await self._client.post(
            f"{AUTH_PREFIX}/change-password",
            {"currentPassword": current_password, "newPassword": new_password},
        )
