"""API routers.

Includes routes for:
- /api/v1/usertrips/{trip_id} - Single user trip (proxied)
- /api/v1/trips/marketplace - Marketplace listing (proxied)
"""
from lato_travel.routers.trips import router as trips_router

__all__ = ["trips_router"]
