from lato_travel.providers.trips.lato_trips_provider import LatoTripsProvider
from lato_travel.providers.trips.models import MarketplaceParams

__all__ = ["LatoTripsProvider", "MarketplaceParams"]
