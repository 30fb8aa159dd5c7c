"""Resource helpers for tours, companies and server-side saved tours."""
from typing import Any

from lato_travel.client.api_client import ApiClient


class ToursApi:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def get_all(self, params: dict[str, Any] | None = None) -> Any:
        return await self._client.get("/tours", params=params, requires_auth=False)

    async def get_by_id(self, tour_id: str | int) -> Any:
        return await self._client.get(f"/tours/{tour_id}", requires_auth=False)

    async def create(self, data: dict[str, Any]) -> Any:
        return await self._client.post("/tours", data)

    async def update(self, tour_id: str | int, data: dict[str, Any]) -> Any:
        return await self._client.put(f"/tours/{tour_id}", data)

    async def delete(self, tour_id: str | int) -> Any:
        return await self._client.delete(f"/tours/{tour_id}")


class CompaniesApi:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def get_all(self, params: dict[str, Any] | None = None) -> Any:
        return await self._client.get("/companies", params=params, requires_auth=False)

    async def get_by_id(self, company_id: str | int) -> Any:
        return await self._client.get(f"/companies/{company_id}", requires_auth=False)


class SavedToursApi:
    """Server-side copy of the saved set (the local cache is the UI source)."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def list(self) -> Any:
        return await self._client.get("/user/saved-tours")

    async def save(self, tour_id: str) -> Any:
        return await self._client.post("/user/saved-tours", {"tourId": tour_id})

    async def unsave(self, tour_id: str) -> Any:
        return await self._client.delete(f"/user/saved-tours/{tour_id}")
