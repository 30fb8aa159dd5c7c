"""Main module for the Lato Travel proxy service."""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from lato_travel.config import get_settings
from lato_travel.logging_config import setup_logging
from lato_travel.providers import LatoTripsProvider
from lato_travel.providers.core import ProxyError, RetryPolicy
from lato_travel.routers import trips_router
from lato_travel.services import TripService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    """Create the provider and service at startup; close the provider on shutdown."""
    settings = get_settings()
    if not settings.api_bearer_token:
        logger.warning("API_BEARER_TOKEN is not set; trip routes will answer 500")

    provider = LatoTripsProvider(
        settings.external_api_url,
        settings.api_bearer_token,
        retry_policy=RetryPolicy(
            max_retries=settings.upstream_max_retries,
            backoff_seconds=settings.upstream_retry_backoff_seconds,
            timeout_seconds=settings.upstream_timeout_seconds,
        ),
    )
    fastapi_app.state.trip_service = TripService(provider)

    yield

    try:
        await provider.close()
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("Error closing provider %s: %s", type(provider).__name__, exc)


app = FastAPI(
    title="Lato Travel API",
    description="Proxy for the external Lato trips API",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(ProxyError)
async def proxy_error_handler(_: Request, exc: ProxyError) -> JSONResponse:
    return JSONResponse(exc.body, status_code=exc.status_code)


app.include_router(trips_router)


@app.get("/")
def health():
    """Return health check status."""
    return {"status": "ok"}


def run():
    """Run the server (uvicorn). Use for `poetry run start`."""
    settings = get_settings()
    setup_logging("Server", settings.log_level)
    uvicorn.run("lato_travel.main:app", host="127.0.0.1", port=8000, log_config=None)
