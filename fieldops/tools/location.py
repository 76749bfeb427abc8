"""
Location collaborator: GPS capture for start/end of field work.

In production, the employee's mobile client supplies the fix. Capture is
a hard precondition for starting and completing work, so it always runs
as one bounded call and reports failure instead of hanging.
"""

import logging
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from typing import Optional, Protocol

from fieldops.config import settings
from fieldops.schemas.booking_schema import LocationFix
from fieldops.utils import run_with_timeout

logger = logging.getLogger(__name__)


class LocationError(Exception):
    """Raised by a provider when no fix can be obtained."""


class LocationProvider(Protocol):
    def capture(self) -> LocationFix: ...


@dataclass
class LocationResult:
    """Outcome of a bounded location capture."""
    success: bool
    fix: Optional[LocationFix] = None
    error: Optional[str] = None


def capture_location(
    provider: LocationProvider, timeout: Optional[float] = None
) -> LocationResult:
    """Capture a location fix, failing after ``timeout`` seconds."""
    limit = timeout if timeout is not None else settings.scheduling.location_timeout_sec
    try:
        fix = run_with_timeout(provider.capture, limit)
    except FuturesTimeoutError:
        logger.warning("Location capture timed out after %.1fs", limit)
        return LocationResult(success=False, error=f"Location capture timed out after {limit}s")
    except LocationError as exc:
        logger.warning("Location capture failed: %s", exc)
        return LocationResult(success=False, error=str(exc))
    except Exception as exc:
        logger.exception("Location provider raised during capture")
        return LocationResult(success=False, error=str(exc) or type(exc).__name__)
    if not isinstance(fix, LocationFix):
        logger.warning("Location provider returned %r instead of a fix", fix)
        return LocationResult(success=False, error="Location provider returned no fix")
    return LocationResult(success=True, fix=fix)


class StaticLocationProvider:
    """Always returns the same fix. Used for tests and the console demo."""

    def __init__(self, latitude: float, longitude: float, accuracy: Optional[float] = 5.0) -> None:
        self._fix = LocationFix(latitude=latitude, longitude=longitude, accuracy=accuracy)

    def capture(self) -> LocationFix:
        return self._fix.model_copy()


class UnavailableLocationProvider:
    """Simulates a device with location services disabled."""

    def __init__(self, reason: str = "Location services are disabled") -> None:
        self.reason = reason

    def capture(self) -> LocationFix:
        raise LocationError(self.reason)
