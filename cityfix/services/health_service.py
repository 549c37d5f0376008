from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError

from cityfix.config import settings
from cityfix.exceptions import CityFixError

logger = logging.getLogger(__name__)


def check_health(repository, blob_store, identity) -> Dict[str, Any]:
    """
    Probe each backing service independently.

    A failing probe is reported in ``services`` and downgrades the overall
    status to ``degraded``; it never raises.
    """
    services: Dict[str, Any] = {}
    healthy = True

    try:
        services["reports_count"] = repository.count()
        services["database"] = "connected"
    except CityFixError as exc:
        logger.warning("Health check: database unreachable: %s", exc)
        services["reports_count"] = None
        services["database"] = "unreachable"
        healthy = False

    try:
        exists = blob_store.bucket_exists(settings.STORAGE_BUCKET)
        services["storage"] = "ready" if exists else "bucket missing"
        healthy = healthy and exists
    except CityFixError as exc:
        logger.warning("Health check: storage unavailable: %s", exc)
        services["storage"] = "unavailable"
        healthy = False

    try:
        ready = identity.is_ready()
    except SQLAlchemyError as exc:
        logger.warning("Health check: auth unavailable: %s", exc)
        ready = False
    services["auth"] = "ready" if ready else "no admin account"
    healthy = healthy and ready

    return {
        "status": "healthy" if healthy else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": services,
    }
