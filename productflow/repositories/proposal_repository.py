"""
Feature proposal repository.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import asc, desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from productflow.models.analysis import FeatureProposal
from productflow.schemas.llm_outputs import ProposalDraft


class FeatureProposalRepository:
    """Repository for FeatureProposal records."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_many(
        self,
        project_id: UUID,
        analysis_id: UUID,
        user_id: UUID,
        drafts: List[ProposalDraft],
    ) -> List[FeatureProposal]:
        """Insert one proposal per draft, preserving draft order."""
        proposals = [
            FeatureProposal(
                project_id=project_id,
                analysis_id=analysis_id,
                user_id=user_id,
                status="draft",
                **draft.model_dump(),
            )
            for draft in drafts
        ]
        self.db.add_all(proposals)
        await self.db.flush()
        return proposals

    async def get_for_project(self, project_id: UUID, proposal_id: UUID) -> Optional[FeatureProposal]:
        result = await self.db.execute(
            select(FeatureProposal).where(
                FeatureProposal.id == proposal_id,
                FeatureProposal.project_id == project_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_project(self, project_id: UUID) -> List[FeatureProposal]:
        result = await self.db.execute(
            select(FeatureProposal)
            .where(FeatureProposal.project_id == project_id)
            .order_by(desc(FeatureProposal.created_at), asc(FeatureProposal.title))
        )
        return list(result.scalars().all())

    async def update_status(self, proposal: FeatureProposal, status: str) -> FeatureProposal:
        proposal.status = status
        await self.db.flush()
        await self.db.refresh(proposal)
        return proposal
