"""
Data files router - uploads of transcripts and usage data.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from productflow.core.dependencies import get_current_user, get_db, get_storage
from productflow.models.user import User
from productflow.schemas.base import SuccessResponse
from productflow.schemas.project import DataFileRead, DataFileUpload, DataFileUploadResponse
from productflow.services.data_file_service import DataFileService
from productflow.services.storage import LocalBlobStorage

router = APIRouter(prefix="/projects/{project_id}/files", tags=["files"])


@router.get("", response_model=List[DataFileRead])
async def list_files(
    project_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: LocalBlobStorage = Depends(get_storage),
):
    service = DataFileService(db, storage)
    return await service.list_files(user, project_id)


@router.post("", response_model=DataFileUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    project_id: UUID,
    data: DataFileUpload,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: LocalBlobStorage = Depends(get_storage),
):
    """Upload a base64-encoded file into the project."""
    service = DataFileService(db, storage)
    data_file = await service.upload(user, project_id, data)
    await db.commit()
    return DataFileUploadResponse(id=data_file.id, url=data_file.file_url)


@router.delete("/{file_id}", response_model=SuccessResponse)
async def delete_file(
    project_id: UUID,
    file_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: LocalBlobStorage = Depends(get_storage),
):
    service = DataFileService(db, storage)
    await service.delete_file(user, project_id, file_id)
    await db.commit()
    return SuccessResponse()
