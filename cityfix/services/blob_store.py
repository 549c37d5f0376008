"""
Filesystem blob store with signed download URLs.

Bucket metadata is kept in ``storage_buckets``; object bytes live under
``STORAGE_ROOT/<bucket>/<name>``. A signed URL embeds a short JWT naming the
bucket and object, checked by the ``/storage`` route.
"""

from __future__ import annotations

import logging
import re
from datetime import timedelta
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cityfix.config import settings
from cityfix.exceptions import AuthError, NotFoundError, StorageError, ValidationError
from cityfix.models.storage import StorageBucket
from cityfix.utils.security import create_token, decode_token

logger = logging.getLogger(__name__)

SAFE_NAME_RE = re.compile(r"^[A-Za-z0-9._-]+$")


def safe_object_name(filename: Optional[str]) -> str:
    """Reduce a client-supplied filename to a single safe path segment."""
    base = (filename or "").replace("\\", "/").rsplit("/", 1)[-1]
    base = re.sub(r"[^A-Za-z0-9._-]+", "_", base).strip("._")
    return base or "upload"


class LocalBlobStore:
    def __init__(self, db: Session, root: Optional[str] = None, base_url: Optional[str] = None):
        self.db = db
        self.root = Path(root or settings.STORAGE_ROOT)
        self.base_url = (base_url or settings.PUBLIC_BASE_URL).rstrip("/")

    # ----- buckets -----

    def list_buckets(self) -> List[StorageBucket]:
        try:
            return self.db.query(StorageBucket).all()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(f"Failed to list buckets: {exc}") from exc

    def get_bucket(self, name: str) -> Optional[StorageBucket]:
        return self.db.get(StorageBucket, name)

    def bucket_exists(self, name: str) -> bool:
        return any(bucket.name == name for bucket in self.list_buckets())

    def create_bucket(self, name: str, *, public: bool = False, file_size_limit: Optional[int] = None) -> StorageBucket:
        if not SAFE_NAME_RE.match(name):
            raise ValidationError(f"Invalid bucket name: {name}")
        bucket = StorageBucket(name=name, public=public, file_size_limit=file_size_limit)
        try:
            self.db.add(bucket)
            self.db.commit()
            (self.root / name).mkdir(parents=True, exist_ok=True)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(f"Failed to create bucket {name}: {exc}") from exc
        except OSError as exc:
            raise StorageError(f"Failed to create bucket directory {name}: {exc}") from exc
        return bucket

    # ----- objects -----

    def upload(self, bucket_name: str, name: str, data: bytes, content_type: str) -> str:
        bucket = self.get_bucket(bucket_name)
        if bucket is None:
            raise StorageError(f"Bucket not found: {bucket_name}")
        if bucket.file_size_limit is not None and len(data) > bucket.file_size_limit:
            raise StorageError("Object exceeds bucket size limit")

        path = self._object_path(bucket_name, name)
        if path.exists():
            raise StorageError(f"Object already exists: {name}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Failed to write object {name}: {exc}") from exc
        logger.info("Stored %s/%s (%d bytes, %s)", bucket_name, name, len(data), content_type)
        return name

    def create_signed_url(self, bucket_name: str, name: str, ttl_seconds: int) -> str:
        if not self._object_path(bucket_name, name).is_file():
            raise StorageError(f"Object not found: {name}")
        token = create_token(
            {"bucket": bucket_name, "name": name},
            "object",
            timedelta(seconds=ttl_seconds),
        )
        path = f"{settings.API_PREFIX}/storage/{quote(bucket_name)}/{quote(name)}"
        return f"{self.base_url}{path}?token={token}"

    def open_signed(self, bucket_name: str, name: str, token: str) -> Path:
        """Resolve a signed download to a file path, or raise."""
        payload = decode_token(token, "object")
        if payload.get("bucket") != bucket_name or payload.get("name") != name:
            raise AuthError("Signature does not match object")
        path = self._object_path(bucket_name, name)
        if not path.is_file():
            raise NotFoundError("Object not found")
        return path

    def _object_path(self, bucket_name: str, name: str) -> Path:
        if not SAFE_NAME_RE.match(bucket_name) or not SAFE_NAME_RE.match(name) or name.startswith("."):
            raise ValidationError("Invalid object name")
        return self.root / bucket_name / name
