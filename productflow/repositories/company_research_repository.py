"""
Company Research repository - database operations.

Handles research runs and the findings gathered for them.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import asc, delete, desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from productflow.models.company_research import CompanyResearch, ResearchFinding
from productflow.schemas.llm_outputs import FindingDraft


class CompanyResearchRepository:
    """Repository for company research operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ========================================================================
    # Research Run Operations
    # ========================================================================

    async def create_research(
        self,
        project_id: UUID,
        user_id: UUID,
        company_url: str,
        company_name: Optional[str] = None,
        status: str = "searching",
    ) -> CompanyResearch:
        research = CompanyResearch(
            project_id=project_id,
            user_id=user_id,
            company_url=company_url,
            company_name=company_name,
            status=status,
        )
        self.db.add(research)
        await self.db.flush()
        await self.db.refresh(research)
        return research

    async def get_research(self, research_id: UUID) -> Optional[CompanyResearch]:
        """Unscoped lookup, for detached pipeline runs."""
        result = await self.db.execute(
            select(CompanyResearch).where(CompanyResearch.id == research_id)
        )
        return result.scalar_one_or_none()

    async def get_research_for_project(self, project_id: UUID, research_id: UUID) -> Optional[CompanyResearch]:
        result = await self.db.execute(
            select(CompanyResearch).where(
                CompanyResearch.id == research_id,
                CompanyResearch.project_id == project_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_research_for_project(self, project_id: UUID) -> List[CompanyResearch]:
        result = await self.db.execute(
            select(CompanyResearch)
            .where(CompanyResearch.project_id == project_id)
            .order_by(desc(CompanyResearch.created_at))
        )
        return list(result.scalars().all())

    async def transition_research(
        self,
        research_id: UUID,
        from_statuses: Sequence[str],
        values: Dict[str, Any],
    ) -> bool:
        """Conditional update; False when the run already left ``from_statuses``."""
        result = await self.db.execute(
            update(CompanyResearch)
            .where(CompanyResearch.id == research_id, CompanyResearch.status.in_(from_statuses))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def count_since(self, user_id: UUID, since: datetime) -> int:
        result = await self.db.execute(
            select(func.count(CompanyResearch.id)).where(
                CompanyResearch.user_id == user_id,
                CompanyResearch.created_at >= since,
            )
        )
        return int(result.scalar_one() or 0)

    async def list_stale(self, statuses: List[str], updated_before: datetime) -> List[CompanyResearch]:
        result = await self.db.execute(
            select(CompanyResearch).where(
                CompanyResearch.status.in_(statuses),
                CompanyResearch.updated_at < updated_before,
            )
        )
        return list(result.scalars().all())

    async def delete_research(self, research: CompanyResearch) -> None:
        """Delete a run together with its findings."""
        await self.db.execute(
            delete(ResearchFinding).where(ResearchFinding.research_id == research.id)
        )
        await self.db.delete(research)
        await self.db.flush()

    # ========================================================================
    # Finding Operations
    # ========================================================================

    async def create_findings(
        self,
        research_id: UUID,
        project_id: UUID,
        drafts: List[FindingDraft],
    ) -> List[ResearchFinding]:
        findings = [
            ResearchFinding(
                research_id=research_id,
                project_id=project_id,
                **draft.model_dump(),
            )
            for draft in drafts
        ]
        self.db.add_all(findings)
        await self.db.flush()
        return findings

    async def list_findings(self, research_id: UUID) -> List[ResearchFinding]:
        result = await self.db.execute(
            select(ResearchFinding)
            .where(ResearchFinding.research_id == research_id)
            .order_by(asc(ResearchFinding.created_at))
        )
        return list(result.scalars().all())

    async def sentiment_counts(self, research_id: UUID) -> Dict[str, int]:
        """Findings per sentiment label for one run."""
        result = await self.db.execute(
            select(ResearchFinding.sentiment, func.count(ResearchFinding.id))
            .where(ResearchFinding.research_id == research_id)
            .group_by(ResearchFinding.sentiment)
        )
        counts = {"positive": 0, "negative": 0, "neutral": 0}
        for sentiment, count in result.all():
            counts[sentiment] = int(count)
        return counts
