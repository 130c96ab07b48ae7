"""Storage for the single current CV.

Every upload inserts a new row marked current and, in the same transaction,
marks the previous current row as superseded. Superseded rows are kept until
purge_superseded() is run.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import BinaryIO

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, undefer

from cv_backend.config import settings
from cv_backend.errors import NotFoundError, StorageError
from cv_backend.models.cv_file import CVFile, DEFAULT_CONTENT_TYPE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CVStats:
    file_count: int
    total_size: int


def _read_payload(stream: BinaryIO | bytes) -> bytes:
    if isinstance(stream, (bytes, bytearray, memoryview)):
        return bytes(stream)
    try:
        data = stream.read()
    except (OSError, ValueError) as e:
        raise StorageError(f"failed to read file data: {e}") from e
    if not isinstance(data, bytes):
        raise StorageError("file stream did not return bytes")
    return data


def upload_cv(
    db: Session,
    stream: BinaryIO | bytes,
    original_name: str,
    declared_size: int | None = None,
    content_type: str | None = None,
) -> CVFile:
    """Store a new CV and make it the only current one. All-or-nothing."""
    data = _read_payload(stream)
    if declared_size is not None and declared_size != len(data):
        logger.warning(
            "Declared upload size %d differs from payload size %d for %s; storing actual size",
            declared_size,
            len(data),
            original_name,
        )

    now = datetime.now(timezone.utc)
    cv = CVFile(
        filename=settings.stored_cv_name,
        original_name=original_name,
        content_type=content_type or DEFAULT_CONTENT_TYPE,
        file_size=len(data),
        file_data=data,
        is_current=True,
    )
    try:
        superseded = (
            db.query(CVFile)
            .filter(CVFile.is_current.is_(True))
            .update(
                {CVFile.is_current: False, CVFile.updated_at: now},
                synchronize_session=False,
            )
        )
        db.add(cv)
        db.flush()
        db.commit()
        db.refresh(cv)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("CV upload rolled back for %s: %s", original_name, e)
        raise StorageError(f"failed to store CV: {e}") from e

    logger.info(
        "CV stored: id=%s original=%s size=%d superseded=%d",
        cv.id,
        cv.original_name,
        cv.file_size,
        superseded,
    )
    return cv


def _current_query(db: Session):
    # Newest wins if more than one row is ever marked current
    return (
        db.query(CVFile)
        .filter(CVFile.is_current.is_(True))
        .order_by(CVFile.created_at.desc(), CVFile.id.desc())
    )


def get_current_cv(db: Session) -> CVFile | None:
    """Current CV metadata; the payload column stays unloaded."""
    try:
        return _current_query(db).first()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"failed to get current CV: {e}") from e


def get_current_cv_with_data(db: Session) -> CVFile | None:
    try:
        return _current_query(db).options(undefer(CVFile.file_data)).first()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"failed to get current CV with data: {e}") from e


def delete_current_cv(db: Session) -> None:
    try:
        rows = (
            db.query(CVFile)
            .filter(CVFile.is_current.is_(True))
            .delete(synchronize_session=False)
        )
        if rows == 0:
            db.rollback()
            raise NotFoundError("no CV found to delete")
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"failed to delete CV: {e}") from e
    logger.info("Current CV deleted (%d row(s))", rows)


def get_stats(db: Session) -> CVStats:
    try:
        count, total = (
            db.query(
                func.count(CVFile.id),
                func.coalesce(func.sum(CVFile.file_size), 0),
            )
            .filter(CVFile.is_current.is_(True))
            .one()
        )
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"failed to get stats: {e}") from e
    return CVStats(file_count=int(count), total_size=int(total))


def purge_superseded(db: Session, keep: int = 0) -> int:
    """Delete superseded CV rows, keeping the `keep` most recent. Returns rows removed."""
    if keep < 0:
        raise ValueError("keep must be >= 0")
    try:
        q = (
            db.query(CVFile.id)
            .filter(CVFile.is_current.is_(False))
            .order_by(CVFile.created_at.desc(), CVFile.id.desc())
        )
        stale_ids = [row.id for row in q.offset(keep).all()]
        if not stale_ids:
            return 0
        removed = (
            db.query(CVFile)
            .filter(CVFile.id.in_(stale_ids), CVFile.is_current.is_(False))
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"failed to purge superseded CVs: {e}") from e
    logger.info("Purged %d superseded CV row(s), kept %d", removed, keep)
    return removed
