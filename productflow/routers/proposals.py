"""
Feature proposals router.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from productflow.core.dependencies import get_current_user, get_db, get_llm, get_notifier, get_runner
from productflow.models.user import User
from productflow.schemas.analysis import (
    FeatureProposalRead,
    ProposalGenerateRequest,
    ProposalGenerateResponse,
    ProposalStatusUpdate,
)
from productflow.services.llm_client import LlmClient
from productflow.services.notification_service import Notifier
from productflow.services.pipeline_runner import PipelineRunner
from productflow.services.proposal_service import ProposalService

router = APIRouter(prefix="/projects/{project_id}/proposals", tags=["proposals"])


@router.get("", response_model=List[FeatureProposalRead])
async def list_proposals(
    project_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = ProposalService(db)
    return await service.list_proposals(user, project_id)


@router.get("/{proposal_id}", response_model=FeatureProposalRead)
async def get_proposal(
    project_id: UUID,
    proposal_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = ProposalService(db)
    return await service.get_proposal(user, project_id, proposal_id)


@router.post("/generate", response_model=ProposalGenerateResponse, status_code=status.HTTP_201_CREATED)
async def generate_proposals(
    project_id: UUID,
    data: ProposalGenerateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    llm: LlmClient = Depends(get_llm),
    notifier: Notifier = Depends(get_notifier),
    runner: PipelineRunner = Depends(get_runner),
):
    """Generate 2-4 proposals from a completed analysis. Earlier proposals are kept."""
    service = ProposalService(db, llm=llm, notifier=notifier, runner=runner)
    proposals = await service.generate(user, project_id, data.analysis_id)
    await db.commit()
    return ProposalGenerateResponse(ids=[p.id for p in proposals], count=len(proposals))


@router.patch("/{proposal_id}/status", response_model=FeatureProposalRead)
async def update_proposal_status(
    project_id: UUID,
    proposal_id: UUID,
    data: ProposalStatusUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = ProposalService(db)
    proposal = await service.update_status(user, project_id, proposal_id, data.status)
    await db.commit()
    return proposal
