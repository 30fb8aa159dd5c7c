"""Upstream data providers for the proxy routes.

- LatoTripsProvider: user trips and marketplace listings from the external
  Lato API, with a bearer credential and bounded retries.

Example:
    async with LatoTripsProvider(settings.external_api_url, token) as provider:
        trip = await provider.get_user_trip("3f2b...")
"""
from lato_travel.providers.core import TripsProviderABC
from lato_travel.providers.trips import LatoTripsProvider, MarketplaceParams

__all__ = [
    "LatoTripsProvider",
    "MarketplaceParams",
    "TripsProviderABC",
]
