"""
Project service - business logic for projects.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from productflow.errors import NotFoundError
from productflow.models.project import Project
from productflow.models.user import User
from productflow.repositories.project_repository import ProjectRepository
from productflow.schemas.project import ProjectCreate, ProjectStats, ProjectUpdate
from productflow.services.usage_service import UsageService

logger = logging.getLogger(__name__)


class ProjectService:
    """Service layer for project operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = ProjectRepository(db)
        self.usage = UsageService(db)

    async def list_projects(self, user: User) -> List[Project]:
        return await self.repo.list_for_user(user.id)

    async def get_project(self, user: User, project_id: UUID) -> Project:
        """Project owned by ``user``; anything else is reported as not found."""
        project = await self.repo.get_by_id(user.id, project_id)
        if not project:
            raise NotFoundError("Project", project_id)
        return project

    async def create_project(self, user: User, data: ProjectCreate) -> Project:
        await self.usage.ensure_can_create_project(user)
        project = await self.repo.create(user.id, data)
        logger.info("Created project %s for user %s", project.id, user.id)
        return project

    async def update_project(self, user: User, project_id: UUID, data: ProjectUpdate) -> Project:
        project = await self.get_project(user, project_id)
        return await self.repo.update(project, data)

    async def delete_project(self, user: User, project_id: UUID) -> None:
        project = await self.get_project(user, project_id)
        await self.repo.delete_cascade(project)
        logger.info("Deleted project %s", project_id)

    async def get_stats(self, user: User, project_id: UUID) -> ProjectStats:
        project = await self.get_project(user, project_id)
        return await self.repo.stats(project.id)
