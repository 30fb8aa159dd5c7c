"""Core provider abstractions."""
from lato_travel.providers.core.error_mapper import ProviderErrorMapper
from lato_travel.providers.core.exceptions import (InvalidTripIdError,
                                                   MissingCredentialsError,
                                                   ProxyError,
                                                   UpstreamPayloadError)
from lato_travel.providers.core.retry import RetryPolicy
from lato_travel.providers.core.trips_provider_abc import TripsProviderABC

__all__ = [
    "InvalidTripIdError",
    "MissingCredentialsError",
    "ProviderErrorMapper",
    "ProxyError",
    "RetryPolicy",
    "TripsProviderABC",
    "UpstreamPayloadError",
]
