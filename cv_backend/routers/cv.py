import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from cv_backend.config import settings
from cv_backend.database import get_db
from cv_backend.dependencies import get_current_username, require_rotated_password
from cv_backend.errors import NotFoundError, StorageError
from cv_backend.repos.cv_repo import (
    upload_cv as store_cv,
    get_current_cv,
    get_current_cv_with_data,
    delete_current_cv,
    get_stats,
)
from cv_backend.schemas.cv import CVUploadResponse, CVInfoResponse, CVStatsResponse, DeleteResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["cv"])
ALLOWED_EXTENSIONS = (".pdf",)


def _serve_current_cv(db: Session, disposition: str) -> Response:
    try:
        cv = get_current_cv_with_data(db)
    except StorageError as e:
        logger.exception("Failed to load current CV: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to get current CV") from e
    if not cv:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No CV found")

    headers = {
        "Content-Disposition": f'{disposition}; filename="{settings.cv_download_filename}"',
        "Content-Length": str(cv.file_size),
    }
    if disposition == "attachment":
        headers["Content-Description"] = "File Transfer"
        headers["Content-Transfer-Encoding"] = "binary"
    return Response(content=cv.file_data, media_type=cv.content_type, headers=headers)


@router.post("/upload-cv", response_model=CVUploadResponse)
def upload_cv(
    cv: UploadFile = File(..., description="CV PDF file"),
    db: Session = Depends(get_db),
    _user=Depends(require_rotated_password),
):
    """Replace the current CV. Previous upload is kept as a superseded row."""
    if not cv.filename or not cv.filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only PDF files are allowed")

    max_bytes = settings.max_cv_upload_mb * 1024 * 1024
    if cv.size is not None and cv.size > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size exceeds {settings.max_cv_upload_mb}MB limit",
        )

    try:
        stored = store_cv(db, cv.file, cv.filename, cv.size, cv.content_type)
    except StorageError as e:
        logger.exception("Failed saving CV %s: %s", cv.filename, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save CV") from e

    return CVUploadResponse(
        filename=stored.filename,
        original_name=stored.original_name,
        size=stored.file_size,
        uploaded_at=stored.created_at,
    )


@router.get("/download-cv")
def download_cv(db: Session = Depends(get_db)):
    return _serve_current_cv(db, "attachment")


@router.get("/view-cv")
def view_cv(db: Session = Depends(get_db)):
    return _serve_current_cv(db, "inline")


@router.get("/cv-info", response_model=CVInfoResponse)
def get_cv_info(
    db: Session = Depends(get_db),
    _username: str = Depends(get_current_username),
):
    try:
        cv = get_current_cv(db)
    except StorageError as e:
        logger.exception("Failed to load CV info: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to get current CV") from e
    if not cv:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No CV found")
    return CVInfoResponse(
        name=cv.original_name,
        size=cv.file_size,
        content_type=cv.content_type,
        last_modified=cv.updated_at,
        uploaded_at=cv.created_at,
    )


@router.get("/cv-stats", response_model=CVStatsResponse)
def get_cv_stats(
    db: Session = Depends(get_db),
    _username: str = Depends(get_current_username),
):
    try:
        stats = get_stats(db)
    except StorageError as e:
        logger.exception("Failed to compute CV stats: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to get statistics") from e
    return CVStatsResponse(
        file_count=stats.file_count,
        total_size=stats.total_size,
        total_size_mb=round(stats.total_size / 1024 / 1024, 4),
    )


@router.delete("/cv", response_model=DeleteResponse)
def delete_cv(
    db: Session = Depends(get_db),
    _user=Depends(require_rotated_password),
):
    try:
        delete_current_cv(db)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No CV found to delete")
    except StorageError as e:
        logger.exception("Failed to delete CV: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete CV") from e
    return DeleteResponse()
