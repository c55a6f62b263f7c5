"""
Tasks router - development tasks generated from proposals.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from productflow.core.dependencies import get_current_user, get_db, get_llm
from productflow.models.user import User
from productflow.schemas.analysis import TaskGenerateResponse, TaskRead, TaskStatusUpdate
from productflow.services.llm_client import LlmClient
from productflow.services.task_service import TaskService

router = APIRouter(prefix="/projects/{project_id}", tags=["tasks"])


@router.get("/tasks", response_model=List[TaskRead])
async def list_project_tasks(
    project_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = TaskService(db)
    return await service.list_for_project(user, project_id)


@router.get("/proposals/{proposal_id}/tasks", response_model=List[TaskRead])
async def list_proposal_tasks(
    project_id: UUID,
    proposal_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Tasks of one proposal in dependency order."""
    service = TaskService(db)
    return await service.list_for_proposal(user, project_id, proposal_id)


@router.post("/proposals/{proposal_id}/tasks/generate", response_model=TaskGenerateResponse)
async def generate_tasks(
    project_id: UUID,
    proposal_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    llm: LlmClient = Depends(get_llm),
):
    """Replace the proposal's tasks with a freshly generated batch."""
    service = TaskService(db, llm=llm)
    tasks = await service.generate(user, project_id, proposal_id)
    await db.commit()
    return TaskGenerateResponse(count=len(tasks))


@router.patch("/tasks/{task_id}/status", response_model=TaskRead)
async def update_task_status(
    project_id: UUID,
    task_id: UUID,
    data: TaskStatusUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = TaskService(db)
    task = await service.update_status(user, project_id, task_id, data.status)
    await db.commit()
    return task
