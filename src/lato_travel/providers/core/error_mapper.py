"""Domain concept for mapping provider exceptions to proxy responses."""
from dataclasses import dataclass
from typing import Any

import httpx

from lato_travel.providers.core.exceptions import (InvalidTripIdError,
                                                   MissingCredentialsError,
                                                   ProxyError,
                                                   UpstreamPayloadError,
                                                   is_connection_error,
                                                   is_dns_error,
                                                   is_timeout_error)


@dataclass(frozen=True)
class ProviderErrorMapper:
    """Maps provider/backend exceptions to HTTP (status_code, body).

    Inject this into services so every route answers upstream failures with
    the same statuses and body shapes.
    """

    resource_name: str = "Resource"
    api_name: str = "External API"

    def to_http(self, exc: Exception) -> tuple[int, dict[str, Any]]:
        """Map a provider exception to (status_code, body) for JSON responses.

        Args:
            exc: The exception raised by the provider or service.

        Returns:
            (status_code, body) suitable for ProxyError(status_code, body).
        """
        if isinstance(exc, InvalidTripIdError):
            return (
                400,
                {
                    "error": f"Invalid {self.resource_name} ID format",
                    "message": f"{self.resource_name.capitalize()} ID must be a valid UUID v4",
                    "receivedId": exc.received_id,
                },
            )
        if isinstance(exc, MissingCredentialsError):
            return (500, {"error": "Server configuration error: API credentials not set"})
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            message = _upstream_message(exc.response)
            return (
                status,
                {"error": message or f"{self.api_name} error: {status}", "status": status},
            )
        if is_timeout_error(exc):
            return (
                504,
                {
                    "error": "Gateway timeout",
                    "message": f"Request to {self.api_name} timed out",
                },
            )
        if is_dns_error(exc):
            return (
                503,
                {
                    "error": "Service unavailable",
                    "message": f"Could not resolve the {self.api_name} host",
                },
            )
        if is_connection_error(exc):
            return (
                503,
                {
                    "error": "Service unavailable",
                    "message": f"Could not connect to the {self.api_name}",
                },
            )
        if isinstance(exc, UpstreamPayloadError):
            return (500, {"error": f"Invalid data received from {self.api_name}"})
        return (
            500,
            {"error": f"Failed to fetch {self.resource_name}", "message": str(exc) or "Unknown error"},
        )

    def raise_http(self, exc: Exception) -> None:
        """Map provider exception and raise ProxyError. Never returns."""
        status_code, body = self.to_http(exc)
        raise ProxyError(status_code, body) from exc


def _upstream_message(response: httpx.Response) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    return None
