"""
Evidence-storage collaborator for before/after photos.

In production, this would upload to an object-storage bucket and return
its public URL. Evidence is optional for completing work unless the
company turns on REQUIRE_PHOTO_EVIDENCE.
"""

import logging
import time
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from fieldops.config import settings
from fieldops.schemas.booking_schema import BookingPhoto, PhotoType
from fieldops.utils import run_with_timeout

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp"})
EXTENSIONS = {"image/jpeg": "jpg", "image/jpg": "jpg", "image/png": "png", "image/webp": "webp"}


class StorageError(Exception):
    """Raised by a storage backend when an upload is rejected."""


class EvidenceStorage(Protocol):
    def put(self, key: str, content: bytes, content_type: str) -> str: ...


@dataclass
class UploadResult:
    """Outcome of a photo validation and upload."""
    success: bool
    url: Optional[str] = None
    error: Optional[str] = None


def validate_image(content_type: str, size: int) -> Optional[str]:
    """Return an error message for an unacceptable image, or None when it is fine."""
    if content_type.lower() not in ALLOWED_CONTENT_TYPES:
        return "Invalid file type. Only JPEG, PNG, and WebP images are allowed."
    if size <= 0:
        return "File is empty."
    if size > settings.scheduling.max_photo_bytes:
        limit_mb = settings.scheduling.max_photo_bytes / (1024 * 1024)
        return f"File size too large. Maximum size is {limit_mb:g}MB."
    return None


def photo_key(booking_id: str, photo_type: PhotoType, content_type: str) -> str:
    ext = EXTENSIONS.get(content_type.lower(), "bin")
    return f"{booking_id}/{photo_type.value}-{time.time_ns()}.{ext}"


def upload_photo(
    storage: EvidenceStorage,
    booking_id: str,
    photo_type: PhotoType,
    content: bytes,
    content_type: str,
    timeout: Optional[float] = None,
) -> UploadResult:
    """Validate and upload one photo within the configured timeout."""
    problem = validate_image(content_type, len(content))
    if problem:
        return UploadResult(success=False, error=problem)

    limit = timeout if timeout is not None else settings.scheduling.upload_timeout_sec
    key = photo_key(booking_id, photo_type, content_type)
    try:
        url = run_with_timeout(storage.put, limit, key, content, content_type)
    except FuturesTimeoutError:
        logger.warning("Photo upload for %s timed out after %.1fs", booking_id, limit)
        return UploadResult(success=False, error=f"Upload timed out after {limit}s")
    except StorageError as exc:
        logger.warning("Photo upload for %s failed: %s", booking_id, exc)
        return UploadResult(success=False, error=str(exc))
    except Exception as exc:
        logger.exception("Storage raised while uploading a photo for %s", booking_id)
        return UploadResult(success=False, error=str(exc) or type(exc).__name__)
    return UploadResult(success=True, url=url)


def evidence_summary(photos: Iterable[BookingPhoto]) -> dict[str, int]:
    """Count photos per type, e.g. ``{"before": 2, "after": 0}``."""
    counts = {photo_type.value: 0 for photo_type in PhotoType}
    for photo in photos:
        counts[photo.photo_type.value] += 1
    return counts


class InMemoryEvidenceStorage:
    """Keeps uploaded blobs in a dict keyed by object path."""

    BUCKET = "booking-photos"

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}

    def put(self, key: str, content: bytes, content_type: str) -> str:
        if key in self.objects:
            raise StorageError(f"Object {key} already exists")
        self.objects[key] = content
        return f"memory://{self.BUCKET}/{key}"
