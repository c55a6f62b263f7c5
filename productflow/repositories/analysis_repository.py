"""
Analysis repository - database operations for analysis runs.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from productflow.models.analysis import Analysis


class AnalysisRepository:
    """Repository for Analysis records."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, project_id: UUID, user_id: UUID, status: str = "processing") -> Analysis:
        analysis = Analysis(project_id=project_id, user_id=user_id, status=status)
        self.db.add(analysis)
        await self.db.flush()
        await self.db.refresh(analysis)
        return analysis

    async def get(self, analysis_id: UUID) -> Optional[Analysis]:
        """Unscoped lookup, for detached pipeline runs."""
        result = await self.db.execute(select(Analysis).where(Analysis.id == analysis_id))
        return result.scalar_one_or_none()

    async def get_for_project(self, project_id: UUID, analysis_id: UUID) -> Optional[Analysis]:
        result = await self.db.execute(
            select(Analysis).where(
                Analysis.id == analysis_id,
                Analysis.project_id == project_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_project(self, project_id: UUID) -> List[Analysis]:
        """Analyses of one project, newest first."""
        result = await self.db.execute(
            select(Analysis)
            .where(Analysis.project_id == project_id)
            .order_by(desc(Analysis.created_at))
        )
        return list(result.scalars().all())

    async def transition(self, analysis_id: UUID, from_statuses: Sequence[str], values: Dict[str, Any]) -> bool:
        """Apply ``values`` only while the row is still in one of ``from_statuses``.

        Returns False when another writer already moved the run on.
        """
        result = await self.db.execute(
            update(Analysis)
            .where(Analysis.id == analysis_id, Analysis.status.in_(from_statuses))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def count_since(self, user_id: UUID, since: datetime) -> int:
        """Analyses the user started at or after ``since``, whatever their outcome."""
        result = await self.db.execute(
            select(func.count(Analysis.id)).where(
                Analysis.user_id == user_id,
                Analysis.created_at >= since,
            )
        )
        return int(result.scalar_one() or 0)

    async def list_stale(self, statuses: List[str], updated_before: datetime) -> List[Analysis]:
        result = await self.db.execute(
            select(Analysis).where(
                Analysis.status.in_(statuses),
                Analysis.updated_at < updated_before,
            )
        )
        return list(result.scalars().all())
