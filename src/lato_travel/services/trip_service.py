"""Trip service: validates ids and maps provider failures to proxy responses.

TripService wraps a TripsProviderABC with a ProviderErrorMapper so the routes
only ever see a JSON payload or a ProxyError carrying the status and body.
"""
import asyncio
import logging
import re
from typing import Any

import httpx

from lato_travel.providers.core import (InvalidTripIdError,
                                        MissingCredentialsError,
                                        ProviderErrorMapper, TripsProviderABC,
                                        UpstreamPayloadError)
from lato_travel.providers.trips.models import MarketplaceParams

logger = logging.getLogger(__name__)

UUID_V4_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

# Exceptions from providers we map to HTTP; all others propagate (bugs, cancellation).
_PROVIDER_EXCEPTIONS: tuple[type[Exception], ...] = (
    MissingCredentialsError,
    UpstreamPayloadError,
    httpx.HTTPStatusError,
    httpx.TransportError,
    TimeoutError,
    asyncio.TimeoutError,
    OSError,
)


def is_uuid_v4(value: str) -> bool:
    return bool(UUID_V4_PATTERN.match(value))


class TripService:
    """Service over a trips provider; maps provider errors to ProxyError."""

    def __init__(
        self,
        provider: TripsProviderABC,
        error_mapper: ProviderErrorMapper | None = None,
    ) -> None:
        """Initialize with a provider and an error mapper.

        Args:
            provider: Upstream trips source (e.g. LatoTripsProvider).
            error_mapper: Maps provider exceptions to (status, body). Defaults
                to trip wording for the external API.
        """
        self._provider = provider
        self._error_mapper = error_mapper or ProviderErrorMapper(
            resource_name="trip", api_name="External API"
        )

    async def get_user_trip(self, trip_id: str) -> dict[str, Any]:
        """Fetch a user trip. The id is checked before any upstream call."""
        if not is_uuid_v4(trip_id):
            logger.warning("Rejected trip id %r: not a UUID v4", trip_id)
            self._error_mapper.raise_http(InvalidTripIdError(trip_id))
        try:
            return await self._provider.get_user_trip(trip_id)
        except _PROVIDER_EXCEPTIONS as e:
            logger.error("Failed to fetch trip %s: %s", trip_id, e)
            self._error_mapper.raise_http(e)

    async def list_marketplace(self, params: MarketplaceParams) -> dict[str, Any]:
        try:
            return await self._provider.list_marketplace(params)
        except _PROVIDER_EXCEPTIONS as e:
            logger.error("Failed to fetch marketplace page %d: %s", params.page, e)
            self._error_mapper.raise_http(e)

    async def close(self) -> None:
        await self._provider.close()
