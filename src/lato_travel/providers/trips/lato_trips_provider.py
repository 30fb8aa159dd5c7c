"""External Lato API provider for user trips and marketplace listings."""
import logging
from typing import Any

import httpx

from lato_travel.providers.core.exceptions import (MissingCredentialsError,
                                                   UpstreamPayloadError)
from lato_travel.providers.core.retry import RetryPolicy
from lato_travel.providers.core.trips_provider_abc import TripsProviderABC
from lato_travel.providers.trips.models import MarketplaceParams

logger = logging.getLogger(__name__)


class LatoTripsProvider(TripsProviderABC):
    """Trip data from the external Lato API.

    Each call carries the server's bearer token. Attempts that get no
    response (timeout, refused connection, DNS failure) are retried by the
    RetryPolicy; responses with an error status are raised as
    ``httpx.HTTPStatusError`` without retrying.
    """

    def __init__(
        self,
        base_url: str,
        bearer_token: str | None,
        *,
        retry_policy: RetryPolicy | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            base_url: External API root, e.g. ``https://api.latotravelapp.com``.
            bearer_token: Server-side credential; None makes every call raise
                MissingCredentialsError.
            retry_policy: Timeout/retry settings. Defaults to 15s, 2 retries, 1s backoff.
            client: Preconfigured client (tests pass one with a mock transport).
        """
        self._bearer_token = bearer_token
        self._retry = retry_policy or RetryPolicy()
        # httpx defaults to 5s; the per-attempt deadline belongs to the retry policy
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers={"Content-Type": "application/json"},
            timeout=self._retry.timeout_seconds,
        )

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        if not self._bearer_token:
            logger.error("API_BEARER_TOKEN is not configured")
            raise MissingCredentialsError("API_BEARER_TOKEN is not configured")

        headers = {"Authorization": f"Bearer {self._bearer_token}"}
        logger.info("Fetching %s from external API", path)
        response = await self._retry.run(
            lambda: self._client.get(path, params=params, headers=headers),
            description=f"GET {path}",
        )
        if response.is_error:
            logger.error("External API error %s for %s", response.status_code, path)
        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamPayloadError(f"Non-JSON response from {path}") from exc
        if not isinstance(data, dict):
            raise UpstreamPayloadError(f"Expected a JSON object from {path}")
        if "id" not in data and "data" not in data:
            logger.warning("Response from %s has neither 'id' nor 'data'", path)
        return data

    async def get_user_trip(self, trip_id: str) -> dict[str, Any]:
        return await self._get_json(f"/api/v1/usertrips/{trip_id}")

    async def list_marketplace(self, params: MarketplaceParams) -> dict[str, Any]:
        return await self._get_json("/api/v1/trips/marketplace", params=params.to_query())

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
