"""
Usage limiter.

Checks the acting user's plan limits against current counts before any record
is created. Counts are read at decision time without a lock, so two concurrent
requests can both pass the same check; limits are soft.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from productflow.core.plans import PricingPlan, is_within_limit, resolve_plan
from productflow.errors import LimitReachedError
from productflow.models.user import User
from productflow.repositories.analysis_repository import AnalysisRepository
from productflow.repositories.company_research_repository import CompanyResearchRepository
from productflow.repositories.data_file_repository import DataFileRepository
from productflow.repositories.project_repository import ProjectRepository
from productflow.schemas.billing import UsageRead
from productflow.utils.time import start_of_month


class UsageService:
    """Plan-based gating for projects, analyses, research runs and uploads."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.project_repo = ProjectRepository(db)
        self.analysis_repo = AnalysisRepository(db)
        self.research_repo = CompanyResearchRepository(db)
        self.file_repo = DataFileRepository(db)

    def plan_for(self, user: User) -> PricingPlan:
        return resolve_plan(user.plan_id)

    async def get_usage(self, user: User, now: Optional[datetime] = None) -> UsageRead:
        period_start = start_of_month(now)
        return UsageRead(
            projects=await self.project_repo.count_active(user.id),
            analyses_this_month=await self.analysis_repo.count_since(user.id, period_start),
            research_this_month=await self.research_repo.count_since(user.id, period_start),
            period_start=period_start,
        )

    def _check(self, plan: PricingPlan, resource: str, limit: int, used: int) -> None:
        if not is_within_limit(limit, used):
            raise LimitReachedError(resource, limit=limit, used=used, plan_id=plan.id)

    async def ensure_can_create_project(self, user: User) -> None:
        plan = self.plan_for(user)
        used = await self.project_repo.count_active(user.id)
        self._check(plan, "projects", plan.limits.max_projects, used)

    async def ensure_can_create_analysis(self, user: User, now: Optional[datetime] = None) -> None:
        plan = self.plan_for(user)
        used = await self.analysis_repo.count_since(user.id, start_of_month(now))
        self._check(plan, "analyses", plan.limits.max_analyses_per_month, used)

    async def ensure_can_create_research(self, user: User, now: Optional[datetime] = None) -> None:
        plan = self.plan_for(user)
        used = await self.research_repo.count_since(user.id, start_of_month(now))
        self._check(plan, "research", plan.limits.max_research_per_month, used)

    async def ensure_can_upload_file(self, user: User, project_id: UUID) -> None:
        plan = self.plan_for(user)
        used = await self.file_repo.count_for_project(project_id)
        self._check(plan, "files", plan.limits.max_files_per_project, used)
