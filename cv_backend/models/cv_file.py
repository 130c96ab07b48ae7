from sqlalchemy import Column, String, Boolean, DateTime, Integer, BigInteger, LargeBinary
from sqlalchemy.orm import deferred
from sqlalchemy.sql import func

from cv_backend.database import Base

DEFAULT_CONTENT_TYPE = "application/pdf"


class CVFile(Base):
    """One uploaded CV. Only the row with is_current=True is served."""

    __tablename__ = "cv_files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String, nullable=False)
    original_name = Column(String, nullable=False)
    content_type = Column(String, nullable=False, default=DEFAULT_CONTENT_TYPE)
    file_size = Column(BigInteger, nullable=False)
    file_data = deferred(Column(LargeBinary, nullable=False))
    is_current = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
