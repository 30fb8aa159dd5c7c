"""Bounded retry for upstream calls that never got a response."""
import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from lato_travel.providers.core.exceptions import (is_connection_error,
                                                   is_timeout_error)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Per-attempt timeout with a fixed backoff between attempts.

    Only timeouts and connection/DNS failures are retried. Anything that
    produced a response (4xx/5xx included) is returned or raised after the
    first attempt; callers check the status outside the retry loop.
    """

    max_retries: int = 2
    backoff_seconds: float = 1.0
    timeout_seconds: float = 15.0
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    @staticmethod
    def is_retryable(exc: BaseException) -> bool:
        return is_timeout_error(exc) or is_connection_error(exc)

    async def run(self, operation: Callable[[], Awaitable[T]], *, description: str = "request") -> T:
        """Run operation, retrying up to max_retries times on network errors.

        The last network error is re-raised once retries are exhausted.
        """
        attempt = 0
        while True:
            try:
                return await asyncio.wait_for(operation(), timeout=self.timeout_seconds)
            except Exception as exc:  # pylint: disable=broad-except
                if not self.is_retryable(exc) or attempt >= self.max_retries:
                    raise
                attempt += 1
                logger.warning(
                    "%s failed (%s); retry %d/%d in %.1fs",
                    description,
                    type(exc).__name__,
                    attempt,
                    self.max_retries,
                    self.backoff_seconds,
                )
                await self.sleep(self.backoff_seconds)
