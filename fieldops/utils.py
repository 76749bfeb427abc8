"""Shared utilities used across the field operations core."""

import math
import re
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Callable, TypeVar

EARTH_RADIUS_KM = 6371.0

T = TypeVar("T")


def run_with_timeout(func: Callable[..., T], timeout: float, *args: Any) -> T:
    """Run a blocking call on a worker thread and wait at most ``timeout`` seconds.

    The caller gets control back when the timeout expires even if the call
    is still running; the worker is abandoned rather than joined.

    Raises:
        concurrent.futures.TimeoutError: If the call did not finish in time.
        Exception: Whatever the call itself raised.
    """
    executor = ThreadPoolExecutor(max_workers=1)
    try:
        future = executor.submit(func, *args)
        return future.result(timeout=timeout)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("(555) 010-0199")
        '5550100199'
        >>> normalize_phone("+1 555 010 0199")
        '+15550100199'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def is_valid_time(value: str) -> bool:
    """Check a time string is in HH:MM (24h) format."""
    try:
        datetime.strptime(value.strip(), "%H:%M")
        return True
    except ValueError:
        return False


def time_to_minutes(value: str) -> int:
    """Convert an HH:MM time to minutes since midnight.

    Raises:
        ValueError: If the value is not a valid HH:MM time.
    """
    parsed = datetime.strptime(value.strip(), "%H:%M")
    return parsed.hour * 60 + parsed.minute


def parse_price_range(value: str) -> tuple[int, int]:
    """Parse a ``"$min-$max"`` range string into integers.

    Examples:
        >>> parse_price_range("$100-$400")
        (100, 400)
    """
    low, high = value.split("-", 1)
    return int(low.strip().lstrip("$")), int(high.strip().lstrip("$"))


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two coordinates in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
