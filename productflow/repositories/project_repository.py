"""
Project repository - database operations for projects and their aggregates.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from productflow.models.analysis import Analysis, FeatureProposal, Task
from productflow.models.company_research import CompanyResearch, ResearchFinding
from productflow.models.project import DataFile, Project
from productflow.schemas.project import ProjectCreate, ProjectStats, ProjectUpdate


class ProjectRepository:
    """Repository for Project database operations. Every read is scoped to the owner."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_user(self, user_id: UUID) -> List[Project]:
        """Projects of one user, most recently updated first."""
        result = await self.db.execute(
            select(Project)
            .where(Project.user_id == user_id)
            .order_by(desc(Project.updated_at), desc(Project.created_at))
        )
        return list(result.scalars().all())

    async def get_by_id(self, user_id: UUID, project_id: UUID) -> Optional[Project]:
        result = await self.db.execute(
            select(Project).where(
                Project.id == project_id,
                Project.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def create(self, user_id: UUID, data: ProjectCreate) -> Project:
        project = Project(user_id=user_id, **data.model_dump())
        self.db.add(project)
        await self.db.flush()
        await self.db.refresh(project)
        return project

    async def update(self, project: Project, data: ProjectUpdate) -> Project:
        update_data = data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(project, field, value)

        await self.db.flush()
        await self.db.refresh(project)
        return project

    async def count_active(self, user_id: UUID) -> int:
        """Active projects owned by the user; archived ones do not count against the plan."""
        result = await self.db.execute(
            select(func.count(Project.id)).where(
                Project.user_id == user_id,
                Project.status == "active",
            )
        )
        return int(result.scalar_one() or 0)

    async def _count(self, model, project_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(model.id)).where(model.project_id == project_id)
        )
        return int(result.scalar_one() or 0)

    async def stats(self, project_id: UUID) -> ProjectStats:
        return ProjectStats(
            files=await self._count(DataFile, project_id),
            analyses=await self._count(Analysis, project_id),
            proposals=await self._count(FeatureProposal, project_id),
            tasks=await self._count(Task, project_id),
            research=await self._count(CompanyResearch, project_id),
        )

    async def delete_cascade(self, project: Project) -> None:
        """Delete a project and everything that hangs off it, children first."""
        project_id = project.id
        for model in (Task, FeatureProposal, Analysis, DataFile, ResearchFinding, CompanyResearch):
            await self.db.execute(delete(model).where(model.project_id == project_id))
        await self.db.delete(project)
        await self.db.flush()
