"""Trip proxy routes backed by the external Lato API."""
from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from lato_travel.dependencies import TripServiceDep
from lato_travel.providers.trips.models import MarketplaceParams

router = APIRouter(prefix="/api/v1", tags=["trips"])

USER_TRIP_CACHE_CONTROL = "public, s-maxage=600, stale-while-revalidate=1200"
MARKETPLACE_CACHE_CONTROL = "public, s-maxage=300, stale-while-revalidate=600"


@router.get("/usertrips/{trip_id}")
async def get_user_trip(trip_id: str, service: TripServiceDep) -> JSONResponse:
    """Get a user trip by UUID.

    The upstream JSON is returned unchanged. Failures are answered by the
    ProxyError handler with the mapped status and body.
    """
    trip = await service.get_user_trip(trip_id)
    return JSONResponse(trip, headers={"Cache-Control": USER_TRIP_CACHE_CONTROL})


@router.get("/trips/marketplace")
async def list_marketplace(
    service: TripServiceDep,
    page: int = Query(1, ge=1, description="Page number"),
    step: int = Query(10, ge=1, le=100, description="Page size"),
    sample: bool = Query(True, description="Ask upstream for sample trips"),
    countries: str | None = Query(None, description="Comma-separated country filter"),
) -> JSONResponse:
    """List marketplace trips, one page at a time."""
    params = MarketplaceParams(page=page, step=step, sample=sample, countries=countries)
    data = await service.list_marketplace(params)
    return JSONResponse(data, headers={"Cache-Control": MARKETPLACE_CACHE_CONTROL})
