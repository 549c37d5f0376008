from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import FileResponse

from cityfix.config import settings
from cityfix.dependencies import get_blob_store
from cityfix.exceptions import ValidationError
from cityfix.services.blob_store import LocalBlobStore
from cityfix.services.image_service import store_report_image, validate_image

router = APIRouter(tags=["Storage"])


@router.post("/upload")
def upload_image(
    file: UploadFile = File(None),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    """Store a report photo and return a long-lived signed URL for it."""
    if file is None:
        raise ValidationError("No file provided")

    # Type and declared size are checked before any bytes are read
    validate_image(file.content_type, file.size or 0)
    data = file.file.read(settings.MAX_UPLOAD_BYTES + 1)

    url = store_report_image(
        blob_store,
        filename=file.filename,
        content_type=file.content_type,
        data=data,
    )
    return {"success": True, "imageUrl": url}


@router.get("/storage/{bucket}/{name}")
def download_object(
    bucket: str,
    name: str,
    token: str = Query(...),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    """Serve an object to holders of a valid signed URL."""
    path = blob_store.open_signed(bucket, name, token)
    return FileResponse(path)
