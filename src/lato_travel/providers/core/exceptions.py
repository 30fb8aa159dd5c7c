"""Exceptions shared by upstream providers and the proxy routes."""
import socket
from typing import Any

import httpx

_DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "no address associated",
    "getaddrinfo failed",
)


class ProxyError(Exception):
    """Carries the exact status and JSON body the proxy should answer with."""

    def __init__(self, status_code: int, body: dict[str, Any]) -> None:
        super().__init__(body.get("error", "Proxy error"))
        self.status_code = status_code
        self.body = body


class InvalidTripIdError(ValueError):
    """Trip id is not a UUID v4; rejected before any upstream call."""

    def __init__(self, received_id: str) -> None:
        super().__init__(f"Trip ID must be a valid UUID v4, got {received_id!r}")
        self.received_id = received_id


class MissingCredentialsError(RuntimeError):
    """The server has no bearer token configured for the external API."""


class UpstreamPayloadError(ValueError):
    """The upstream answered 2xx with something that is not a JSON object."""


def is_dns_error(exc: BaseException) -> bool:
    """True when exc (or anything it was raised from) is a name-resolution failure."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, socket.gaierror):
            return True
        message = str(current).lower()
        if any(marker in message for marker in _DNS_MARKERS):
            return True
        current = current.__cause__ or current.__context__
    return False


def is_timeout_error(exc: BaseException) -> bool:
    return isinstance(exc, (TimeoutError, httpx.TimeoutException))


def is_connection_error(exc: BaseException) -> bool:
    """Connection refused, reset or DNS failure: no response was received."""
    return isinstance(exc, (httpx.ConnectError, ConnectionError)) or is_dns_error(exc)
