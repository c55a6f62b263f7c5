"""
Task service.

Generating tasks for a proposal replaces its previous tasks as a batch. The
delete and the insert share the request transaction, so a failed generation
leaves the earlier tasks in place.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from productflow.errors import GenerationFailedError, NotFoundError
from productflow.models.analysis import Task
from productflow.models.user import User
from productflow.repositories.proposal_repository import FeatureProposalRepository
from productflow.repositories.task_repository import TaskRepository
from productflow.schemas.llm_outputs import TasksPayload
from productflow.services import prompts
from productflow.services.analysis_service import validate_payload
from productflow.services.llm_client import LlmClient, LlmError, json_schema_format, parse_json_content
from productflow.services.project_service import ProjectService

logger = logging.getLogger(__name__)


class TaskService:
    """Service layer for development tasks."""

    def __init__(self, db: AsyncSession, llm: Optional[LlmClient] = None):
        self.db = db
        self.llm = llm
        self.repo = TaskRepository(db)
        self.proposal_repo = FeatureProposalRepository(db)
        self.projects = ProjectService(db)

    async def generate(self, user: User, project_id: UUID, proposal_id: UUID) -> List[Task]:
        project = await self.projects.get_project(user, project_id)
        proposal = await self.proposal_repo.get_for_project(project.id, proposal_id)
        if not proposal:
            raise NotFoundError("Feature proposal", proposal_id)
        if self.llm is None:
            raise RuntimeError("TaskService needs an LLM client to generate tasks")

        deleted = await self.repo.delete_for_proposal(proposal.id)
        logger.info("Cleared %d task(s) for proposal %s", deleted, proposal.id)

        try:
            response = await self.llm.invoke(
                prompts.task_messages(proposal),
                response_format=json_schema_format(prompts.TASKS_SCHEMA_NAME, prompts.TASKS_SCHEMA),
            )
            payload = validate_payload(TasksPayload, parse_json_content(response))
        except LlmError as exc:
            logger.warning("Task generation failed for proposal %s: %s", proposal.id, exc)
            raise GenerationFailedError(
                "Failed to generate tasks",
                {"proposal_id": str(proposal.id), "reason": str(exc)[:500]},
            ) from exc

        tasks = await self.repo.create_many(proposal.id, project.id, user.id, payload.tasks)
        logger.info("Created %d task(s) for proposal %s", len(tasks), proposal.id)
        return tasks

    async def list_for_proposal(self, user: User, project_id: UUID, proposal_id: UUID) -> List[Task]:
        project = await self.projects.get_project(user, project_id)
        proposal = await self.proposal_repo.get_for_project(project.id, proposal_id)
        if not proposal:
            raise NotFoundError("Feature proposal", proposal_id)
        return await self.repo.list_for_proposal(proposal.id)

    async def list_for_project(self, user: User, project_id: UUID) -> List[Task]:
        project = await self.projects.get_project(user, project_id)
        return await self.repo.list_for_project(project.id)

    async def update_status(self, user: User, project_id: UUID, task_id: UUID, status: str) -> Task:
        project = await self.projects.get_project(user, project_id)
        task = await self.repo.get_for_project(project.id, task_id)
        if not task:
            raise NotFoundError("Task", task_id)
        return await self.repo.update_status(task, status)
