from __future__ import annotations

import logging
from typing import Optional

from cityfix.config import settings
from cityfix.exceptions import ValidationError
from cityfix.services.blob_store import LocalBlobStore, safe_object_name
from cityfix.services.report_service import now_ms

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}


def validate_image(content_type: Optional[str], size: int) -> None:
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError("Invalid file type. Only JPEG, PNG, and WebP are allowed.")
    if size > settings.MAX_UPLOAD_BYTES:
        raise ValidationError("File size exceeds 5MB limit")


def store_report_image(
    blob_store: LocalBlobStore,
    *,
    filename: Optional[str],
    content_type: Optional[str],
    data: bytes,
) -> str:
    """Validate and upload a report photo, returning a signed URL for it."""
    validate_image(content_type, len(data))

    name = f"{now_ms()}-{safe_object_name(filename)}"
    blob_store.upload(settings.STORAGE_BUCKET, name, data, content_type)
    url = blob_store.create_signed_url(
        settings.STORAGE_BUCKET,
        name,
        settings.SIGNED_URL_TTL_SECONDS,
    )
    logger.info("Uploaded report image %s", name)
    return url
