"""Abstract base class for trip data providers."""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from lato_travel.providers.trips.models import MarketplaceParams


class TripsProviderABC(ABC):
    """Base interface for upstream trip sources.

    Implementations return the upstream JSON objects unchanged; the proxy
    passes them through to its own clients.
    """

    @abstractmethod
    async def get_user_trip(self, trip_id: str) -> dict[str, Any]:
        """Fetch one user trip by id.

        Args:
            trip_id: Trip UUID, already validated by the caller.

        Returns:
            The upstream JSON object.
        """

    @abstractmethod
    async def list_marketplace(self, params: "MarketplaceParams") -> dict[str, Any]:
        """Fetch one page of marketplace trips."""

    async def close(self) -> None:
        """Clean up resources (connections, clients).

        Override in subclasses if cleanup is needed.
        """

    async def __aenter__(self) -> "TripsProviderABC":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.close()
