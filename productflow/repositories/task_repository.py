"""
Task repository.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import asc, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from productflow.models.analysis import Task
from productflow.schemas.llm_outputs import TaskDraft


class TaskRepository:
    """Repository for Task records."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def delete_for_proposal(self, proposal_id: UUID) -> int:
        result = await self.db.execute(
            delete(Task).where(Task.feature_proposal_id == proposal_id)
        )
        return result.rowcount or 0

    async def create_many(
        self,
        proposal_id: UUID,
        project_id: UUID,
        user_id: UUID,
        drafts: List[TaskDraft],
    ) -> List[Task]:
        """Insert tasks with sort_order equal to their position in ``drafts``."""
        tasks = [
            Task(
                feature_proposal_id=proposal_id,
                project_id=project_id,
                user_id=user_id,
                status="todo",
                sort_order=index,
                **draft.model_dump(),
            )
            for index, draft in enumerate(drafts)
        ]
        self.db.add_all(tasks)
        await self.db.flush()
        return tasks

    async def list_for_proposal(self, proposal_id: UUID) -> List[Task]:
        result = await self.db.execute(
            select(Task)
            .where(Task.feature_proposal_id == proposal_id)
            .order_by(asc(Task.sort_order))
        )
        return list(result.scalars().all())

    async def list_for_project(self, project_id: UUID) -> List[Task]:
        result = await self.db.execute(
            select(Task)
            .where(Task.project_id == project_id)
            .order_by(asc(Task.feature_proposal_id), asc(Task.sort_order))
        )
        return list(result.scalars().all())

    async def get_for_project(self, project_id: UUID, task_id: UUID) -> Optional[Task]:
        result = await self.db.execute(
            select(Task).where(
                Task.id == task_id,
                Task.project_id == project_id,
            )
        )
        return result.scalar_one_or_none()

    async def update_status(self, task: Task, status: str) -> Task:
        task.status = status
        await self.db.flush()
        await self.db.refresh(task)
        return task
