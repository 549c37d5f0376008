"""
Request-scoped providers and the admin guard.

Routers never build collaborators themselves; they ask for them here so
tests can swap any of them through ``app.dependency_overrides``.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, Request
from pydantic import ValidationError as SchemaError
from sqlalchemy.orm import Session

from cityfix.config import settings
from cityfix.crud.report import ReportRepository
from cityfix.database import get_db
from cityfix.exceptions import AuthError, ForbiddenError, ValidationError
from cityfix.kv_store import KVStore
from cityfix.schemas.auth import AuthUser
from cityfix.schemas.report import ReportStatusUpdate
from cityfix.services.blob_store import LocalBlobStore
from cityfix.services.identity import LocalIdentityProvider
from cityfix.services.report_service import ReportService
from cityfix.utils.security import get_bearer_token

logger = logging.getLogger(__name__)


def get_kv_store(db: Session = Depends(get_db)) -> KVStore:
    return KVStore(db)


def get_report_repository(kv: KVStore = Depends(get_kv_store)) -> ReportRepository:
    return ReportRepository(kv)


def get_report_service(
    repository: ReportRepository = Depends(get_report_repository),
) -> ReportService:
    return ReportService(repository)


def get_identity_provider(db: Session = Depends(get_db)) -> LocalIdentityProvider:
    return LocalIdentityProvider(db)


def get_blob_store(db: Session = Depends(get_db)) -> LocalBlobStore:
    return LocalBlobStore(db)


# ─────────────────────────────────────────
# Admin guard for mutating endpoints
# ─────────────────────────────────────────
def require_admin(
    request: Request,
    authorization: Optional[str] = Header(None),
    identity: LocalIdentityProvider = Depends(get_identity_provider),
) -> AuthUser:
    token = get_bearer_token(authorization)
    if not token or token == settings.ANON_KEY:
        raise AuthError("Unauthorized - Admin access required")

    try:
        user = identity.resolve_token(token)
    except AuthError as exc:
        logger.info("Rejected token on %s: %s", request.url.path, exc.message)
        raise AuthError("Invalid authentication token") from exc

    if not user.is_admin:
        raise ForbiddenError("Access denied - Admin privileges required")

    request.state.user = user
    return user


async def read_status_update(request: Request) -> ReportStatusUpdate:
    """Parse the status body by hand.

    Declared after ``require_admin`` so an unauthenticated request is refused
    before its body is looked at.
    """
    try:
        body = await request.json()
    except ValueError as exc:
        raise ValidationError("Invalid JSON body") from exc
    try:
        return ReportStatusUpdate.model_validate(body)
    except SchemaError as exc:
        raise ValidationError("Invalid status") from exc
