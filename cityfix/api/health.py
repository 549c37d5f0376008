from fastapi import APIRouter, Depends

from cityfix.crud.report import ReportRepository
from cityfix.dependencies import get_blob_store, get_identity_provider, get_report_repository
from cityfix.services.blob_store import LocalBlobStore
from cityfix.services.health_service import check_health
from cityfix.services.identity import LocalIdentityProvider

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(
    repository: ReportRepository = Depends(get_report_repository),
    blob_store: LocalBlobStore = Depends(get_blob_store),
    identity: LocalIdentityProvider = Depends(get_identity_provider),
):
    return {"success": True, **check_health(repository, blob_store, identity)}
