"""
Feature proposal service.

Proposals are generated inside the request from a completed analysis and
accumulate: generating again adds rows, it never replaces earlier proposals.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from productflow.errors import GenerationFailedError, NotFoundError, PreconditionFailedError
from productflow.models.analysis import FeatureProposal
from productflow.models.user import User
from productflow.repositories.analysis_repository import AnalysisRepository
from productflow.repositories.proposal_repository import FeatureProposalRepository
from productflow.schemas.llm_outputs import ProposalsPayload
from productflow.services import prompts
from productflow.services.analysis_service import validate_payload
from productflow.services.llm_client import LlmClient, LlmError, json_schema_format, parse_json_content
from productflow.services.notification_service import Notifier
from productflow.services.pipeline_runner import PipelineRunner
from productflow.services.project_service import ProjectService

logger = logging.getLogger(__name__)


class ProposalService:
    """Service layer for feature proposals."""

    def __init__(
        self,
        db: AsyncSession,
        llm: Optional[LlmClient] = None,
        notifier: Optional[Notifier] = None,
        runner: Optional[PipelineRunner] = None,
    ):
        self.db = db
        self.llm = llm
        self.notifier = notifier
        self.runner = runner
        self.repo = FeatureProposalRepository(db)
        self.analysis_repo = AnalysisRepository(db)
        self.projects = ProjectService(db)

    async def generate(self, user: User, project_id: UUID, analysis_id: UUID) -> List[FeatureProposal]:
        project = await self.projects.get_project(user, project_id)
        analysis = await self.analysis_repo.get_for_project(project.id, analysis_id)
        if not analysis:
            raise NotFoundError("Analysis", analysis_id)
        if analysis.status != "completed":
            raise PreconditionFailedError(
                "analysis_not_ready",
                "Analysis is not completed yet",
                {"analysis_id": str(analysis.id), "status": analysis.status},
            )
        if self.llm is None:
            raise RuntimeError("ProposalService needs an LLM client to generate proposals")

        try:
            response = await self.llm.invoke(
                prompts.proposal_messages(project.name, analysis),
                response_format=json_schema_format(prompts.PROPOSALS_SCHEMA_NAME, prompts.PROPOSALS_SCHEMA),
            )
            payload = validate_payload(ProposalsPayload, parse_json_content(response))
        except LlmError as exc:
            logger.warning("Proposal generation failed for analysis %s: %s", analysis.id, exc)
            raise GenerationFailedError(
                "Failed to generate feature proposals",
                {"analysis_id": str(analysis.id), "reason": str(exc)[:500]},
            ) from exc

        proposals = await self.repo.create_many(project.id, analysis.id, user.id, payload.proposals)
        logger.info("Created %d proposal(s) from analysis %s", len(proposals), analysis.id)

        if self.notifier is not None and self.runner is not None and proposals:
            self.runner.fire_and_forget(
                f"notify:proposals:{analysis.id}",
                self.notifier.notify(
                    f"Feature Proposals Ready - {project.name}",
                    f"{len(proposals)} feature proposals have been generated for {project.name}.",
                ),
            )
        return proposals

    async def list_proposals(self, user: User, project_id: UUID) -> List[FeatureProposal]:
        project = await self.projects.get_project(user, project_id)
        return await self.repo.list_for_project(project.id)

    async def get_proposal(self, user: User, project_id: UUID, proposal_id: UUID) -> FeatureProposal:
        project = await self.projects.get_project(user, project_id)
        proposal = await self.repo.get_for_project(project.id, proposal_id)
        if not proposal:
            raise NotFoundError("Feature proposal", proposal_id)
        return proposal

    async def update_status(self, user: User, project_id: UUID, proposal_id: UUID, status: str) -> FeatureProposal:
        proposal = await self.get_proposal(user, project_id, proposal_id)
        return await self.repo.update_status(proposal, status)
