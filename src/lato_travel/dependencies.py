"""FastAPI dependency injection: app.state holds singletons; Depends() resolves them.

The lifespan in main.py creates the provider and TripService once and
attaches them to app.state; tests set app.state.trip_service directly.
"""
from typing import Annotated

from fastapi import Depends, Request

from lato_travel.services import TripService


def get_trip_service(request: Request) -> TripService:
    """Resolve TripService from app.state (created at startup)."""
    return request.app.state.trip_service


TripServiceDep = Annotated[TripService, Depends(get_trip_service)]
