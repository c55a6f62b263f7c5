"""
Company research router.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from productflow.core.dependencies import (
    get_current_user,
    get_db,
    get_llm,
    get_notifier,
    get_runner,
    get_session_factory,
)
from productflow.models.user import User
from productflow.schemas.base import CreatedResponse, SuccessResponse
from productflow.schemas.company_research import (
    CompanyResearchDetail,
    CompanyResearchRead,
    CompanyResearchStart,
    ResearchFindingRead,
)
from productflow.services.company_research_service import CompanyResearchService, ResearchPipeline
from productflow.services.llm_client import LlmClient
from productflow.services.notification_service import Notifier
from productflow.services.pipeline_runner import PipelineRunner

router = APIRouter(prefix="/projects/{project_id}/research", tags=["company-research"])


@router.get("", response_model=List[CompanyResearchRead])
async def list_research(
    project_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = CompanyResearchService(db)
    return await service.list_research(user, project_id)


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_202_ACCEPTED)
async def start_research(
    project_id: UUID,
    data: CompanyResearchStart,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    runner: PipelineRunner = Depends(get_runner),
    llm: LlmClient = Depends(get_llm),
    notifier: Notifier = Depends(get_notifier),
):
    """Start a research run for a company URL; poll the record for progress."""
    pipeline = ResearchPipeline(session_factory, llm, notifier)
    service = CompanyResearchService(db, runner=runner, pipeline=pipeline)
    research = await service.start_research(user, project_id, data.company_url)
    return CreatedResponse(id=research.id)


@router.get("/{research_id}", response_model=CompanyResearchDetail)
async def get_research(
    project_id: UUID,
    research_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Research run with its findings."""
    service = CompanyResearchService(db)
    research = await service.get_research(user, project_id, research_id)
    findings = await service.list_findings(user, project_id, research_id)
    detail = CompanyResearchDetail.model_validate(research)
    detail.findings = [ResearchFindingRead.model_validate(f) for f in findings]
    return detail


@router.get("/{research_id}/findings", response_model=List[ResearchFindingRead])
async def list_findings(
    project_id: UUID,
    research_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = CompanyResearchService(db)
    return await service.list_findings(user, project_id, research_id)


@router.delete("/{research_id}", response_model=SuccessResponse)
async def delete_research(
    project_id: UUID,
    research_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = CompanyResearchService(db)
    await service.delete_research(user, project_id, research_id)
    await db.commit()
    return SuccessResponse()
