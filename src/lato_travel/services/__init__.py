"""Services between the routes and the upstream providers."""
from lato_travel.services.trip_service import TripService, is_uuid_v4

__all__ = ["TripService", "is_uuid_v4"]
