"""
Data file service - uploads of transcripts and usage exports.
"""

import logging
import secrets
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from productflow.errors import InvalidRequestError, NotFoundError
from productflow.models.project import DataFile
from productflow.models.user import User
from productflow.repositories.data_file_repository import DataFileRepository
from productflow.schemas.project import DataFileUpload
from productflow.services.project_service import ProjectService
from productflow.services.storage import InvalidKeyError, LocalBlobStorage
from productflow.services.usage_service import UsageService

logger = logging.getLogger(__name__)


def build_file_key(project_id: UUID, file_name: str) -> str:
    return f"projects/{project_id}/files/{secrets.token_hex(4)}-{file_name}"


class DataFileService:
    """Service layer for uploaded data files."""

    def __init__(self, db: AsyncSession, storage: LocalBlobStorage):
        self.db = db
        self.storage = storage
        self.repo = DataFileRepository(db)
        self.projects = ProjectService(db)
        self.usage = UsageService(db)

    async def upload(self, user: User, project_id: UUID, data: DataFileUpload) -> DataFile:
        project = await self.projects.get_project(user, project_id)

        try:
            content = data.decoded_content()
        except ValueError as exc:
            raise InvalidRequestError("invalid_file_content", str(exc)) from exc

        await self.usage.ensure_can_upload_file(user, project.id)

        file_key = build_file_key(project.id, data.file_name)
        try:
            stored = self.storage.put(file_key, content, data.mime_type)
        except InvalidKeyError as exc:
            raise InvalidRequestError("invalid_file_name", "File name is not allowed", {"file_name": data.file_name}) from exc

        data_file = await self.repo.create(
            project_id=project.id,
            user_id=user.id,
            file_name=data.file_name,
            file_type=data.file_type,
            file_key=stored["key"],
            file_url=stored["url"],
            file_size=len(content),
            mime_type=data.mime_type,
        )
        logger.info("Uploaded file %s (%d bytes) to project %s", data_file.id, len(content), project.id)
        return data_file

    async def list_files(self, user: User, project_id: UUID) -> List[DataFile]:
        project = await self.projects.get_project(user, project_id)
        return await self.repo.list_for_project(project.id)

    async def delete_file(self, user: User, project_id: UUID, file_id: UUID) -> None:
        project = await self.projects.get_project(user, project_id)
        data_file = await self.repo.get_by_id(project.id, file_id)
        if not data_file:
            raise NotFoundError("Data file", file_id)
        await self.repo.delete(data_file)
        self.storage.delete(data_file.file_key)
