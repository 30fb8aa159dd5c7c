"""Shared utilities for the lato travel core."""

import math
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def round_half_up(value: float, decimals: int = 1) -> float:
    """Round halves up, not to even as the builtin round() does."""
    factor = 10**decimals
    return math.floor(value * factor + 0.5) / factor
