"""
Data file repository.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import asc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from productflow.models.project import DataFile


class DataFileRepository:
    """Repository for uploaded data files."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        project_id: UUID,
        user_id: UUID,
        file_name: str,
        file_type: str,
        file_key: str,
        file_url: str,
        file_size: int,
        mime_type: str,
    ) -> DataFile:
        data_file = DataFile(
            project_id=project_id,
            user_id=user_id,
            file_name=file_name,
            file_type=file_type,
            file_key=file_key,
            file_url=file_url,
            file_size=file_size,
            mime_type=mime_type,
        )
        self.db.add(data_file)
        await self.db.flush()
        await self.db.refresh(data_file)
        return data_file

    async def list_for_project(self, project_id: UUID) -> List[DataFile]:
        """Files in upload order."""
        result = await self.db.execute(
            select(DataFile)
            .where(DataFile.project_id == project_id)
            .order_by(asc(DataFile.created_at))
        )
        return list(result.scalars().all())

    async def get_by_id(self, project_id: UUID, file_id: UUID) -> Optional[DataFile]:
        result = await self.db.execute(
            select(DataFile).where(
                DataFile.id == file_id,
                DataFile.project_id == project_id,
            )
        )
        return result.scalar_one_or_none()

    async def count_for_project(self, project_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(DataFile.id)).where(DataFile.project_id == project_id)
        )
        return int(result.scalar_one() or 0)

    async def delete(self, data_file: DataFile) -> None:
        await self.db.delete(data_file)
        await self.db.flush()
