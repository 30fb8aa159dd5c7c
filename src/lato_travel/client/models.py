"""Models for the auth endpoints of the external API."""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class UserRole(str, Enum):
    TRAVELER = "TRAVELER"
    PROVIDER = "PROVIDER"
    ADMIN = "ADMIN"


class User(BaseModel):
    """Authenticated user profile as returned by ``/auth/me`` and login."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    email: str
    name: str
    role: UserRole = UserRole.TRAVELER
    avatar: str | None = None
    email_verified: bool | None = Field(default=None, alias="emailVerified")
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")


class AuthTokens(BaseModel):
    """Token triple from login and refresh.

    Refresh responses may omit ``refreshToken``; when present it replaces
    the stored one.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    access_token: str = Field(alias="accessToken")
    expires_in: int = Field(alias="expiresIn", gt=0)
    refresh_token: str | None = Field(default=None, alias="refreshToken")

    @classmethod
    def from_payload(cls, payload: dict) -> "AuthTokens":
        """Accept both ``{"tokens": {...}}`` and a bare token object."""
        tokens = payload.get("tokens") if isinstance(payload, dict) else None
        return cls.model_validate(tokens if isinstance(tokens, dict) else payload)


class AuthResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user: User
    tokens: AuthTokens


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    email: str
    password: str
    name: str
    role: UserRole = UserRole.TRAVELER
