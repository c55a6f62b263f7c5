"""
Analyses router.

Starting an analysis returns the new record's id straight away; the LLM work
runs detached and clients poll the record for its terminal status.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from productflow.core.dependencies import (
    get_current_user,
    get_db,
    get_fetcher,
    get_llm,
    get_notifier,
    get_runner,
    get_session_factory,
)
from productflow.models.user import User
from productflow.schemas.analysis import AnalysisRead
from productflow.schemas.base import CreatedResponse
from productflow.services.analysis_service import AnalysisPipeline, AnalysisService
from productflow.services.llm_client import LlmClient
from productflow.services.notification_service import Notifier
from productflow.services.pipeline_runner import PipelineRunner
from productflow.services.storage import ContentFetcher

router = APIRouter(prefix="/projects/{project_id}/analyses", tags=["analyses"])


@router.get("", response_model=List[AnalysisRead])
async def list_analyses(
    project_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = AnalysisService(db)
    return await service.list_analyses(user, project_id)


@router.get("/{analysis_id}", response_model=AnalysisRead)
async def get_analysis(
    project_id: UUID,
    analysis_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = AnalysisService(db)
    return await service.get_analysis(user, project_id, analysis_id)


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_202_ACCEPTED)
async def run_analysis(
    project_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    runner: PipelineRunner = Depends(get_runner),
    llm: LlmClient = Depends(get_llm),
    fetcher: ContentFetcher = Depends(get_fetcher),
    notifier: Notifier = Depends(get_notifier),
):
    """Start an analysis over every file of the project."""
    pipeline = AnalysisPipeline(session_factory, llm, fetcher, notifier)
    service = AnalysisService(db, runner=runner, pipeline=pipeline)
    analysis = await service.start_analysis(user, project_id)
    return CreatedResponse(id=analysis.id)
