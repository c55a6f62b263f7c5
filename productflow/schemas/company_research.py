"""
Company Research Pydantic schemas.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from productflow.schemas.base import ProjectScopedRead


class CompanyResearchStart(BaseModel):
    company_url: str = Field(..., max_length=2048)


class ResearchFindingRead(ProjectScopedRead):
    research_id: UUID
    source: str
    source_type: str
    title: str
    content: str
    sentiment: str
    sentiment_score: int
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    source_url: Optional[str] = None


class CompanyResearchRead(ProjectScopedRead):
    user_id: UUID
    company_url: str
    company_name: Optional[str] = None
    company_description: Optional[str] = None
    status: str
    overall_sentiment: Optional[str] = None
    positive_count: Optional[int] = None
    negative_count: Optional[int] = None
    neutral_count: Optional[int] = None
    summary: Optional[str] = None
    key_strengths: Optional[List[Dict[str, Any]]] = None
    key_weaknesses: Optional[List[Dict[str, Any]]] = None
    recommendations: Optional[List[Dict[str, Any]]] = None
    error_message: Optional[str] = None
    completed_at: Optional[datetime] = None


class CompanyResearchDetail(CompanyResearchRead):
    """Research run plus its findings and the stage A audit payload."""

    raw_search_results: Optional[Dict[str, Any]] = None
    findings: List[ResearchFindingRead] = Field(default_factory=list)
