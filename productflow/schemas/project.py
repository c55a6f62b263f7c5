"""
Project and data file Pydantic schemas.
"""

import base64
import binascii
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from productflow.schemas.base import ProjectScopedRead, RecordRead

ProjectStatus = Literal["active", "archived"]
FileType = Literal["transcript", "usage_data"]


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None


class ProjectRead(RecordRead):
    user_id: UUID
    name: str
    description: Optional[str] = None
    status: str


class ProjectStats(BaseModel):
    files: int = 0
    analyses: int = 0
    proposals: int = 0
    tasks: int = 0
    research: int = 0


class DataFileUpload(BaseModel):
    """File upload with base64-encoded content."""

    file_name: str = Field(..., min_length=1, max_length=255)
    file_type: FileType
    content: str = Field(..., description="Base64-encoded file bytes")
    mime_type: str = Field(..., min_length=1, max_length=128)

    @field_validator("file_name")
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        name = v.strip().replace("\\", "/").split("/")[-1]
        if not name:
            raise ValueError("file_name must not be empty")
        return name

    def decoded_content(self) -> bytes:
        try:
            return base64.b64decode(self.content, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("content is not valid base64") from exc


class DataFileRead(ProjectScopedRead):
    user_id: UUID
    file_name: str
    file_type: str
    file_key: str
    file_url: str
    file_size: int
    mime_type: str


class DataFileUploadResponse(BaseModel):
    id: UUID
    url: str
