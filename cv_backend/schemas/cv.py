from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CVUploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = "CV uploaded successfully"
    filename: str
    original_name: str = Field(alias="originalName")
    size: int
    uploaded_at: datetime | None = Field(default=None, alias="uploadedAt")


class CVInfoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    exists: bool = True
    name: str
    size: int
    content_type: str = Field(alias="contentType")
    last_modified: datetime | None = Field(default=None, alias="lastModified")
    uploaded_at: datetime | None = Field(default=None, alias="uploadedAt")


class CVStatsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_count: int = Field(alias="fileCount")
    total_size: int = Field(alias="totalSize")
    total_size_mb: float = Field(alias="totalSizeMB")


class DeleteResponse(BaseModel):
    success: bool = True
    message: str = "CV deleted successfully"
