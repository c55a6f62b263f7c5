"""
Analysis, feature proposal and task Pydantic schemas.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel

from productflow.schemas.base import ProjectScopedRead

ProposalStatus = Literal["draft", "approved", "rejected", "in_progress", "completed"]
TaskStatus = Literal["todo", "in_progress", "done"]


class AnalysisRead(ProjectScopedRead):
    user_id: UUID
    status: str
    themes: Optional[List[Dict[str, Any]]] = None
    pain_points: Optional[List[Dict[str, Any]]] = None
    feature_requests: Optional[List[Dict[str, Any]]] = None
    sentiment_summary: Optional[Dict[str, Any]] = None
    raw_analysis: Optional[str] = None
    error_message: Optional[str] = None
    completed_at: Optional[datetime] = None


class FeatureProposalRead(ProjectScopedRead):
    analysis_id: UUID
    user_id: UUID
    title: str
    problem_statement: str
    proposed_solution: str
    ui_changes: Optional[str] = None
    data_model_changes: Optional[str] = None
    workflow_changes: Optional[str] = None
    priority: str
    effort: str
    status: str


class ProposalGenerateRequest(BaseModel):
    analysis_id: UUID


class ProposalGenerateResponse(BaseModel):
    ids: List[UUID]
    count: int


class ProposalStatusUpdate(BaseModel):
    status: ProposalStatus


class TaskRead(ProjectScopedRead):
    feature_proposal_id: UUID
    user_id: UUID
    title: str
    description: Optional[str] = None
    category: str
    priority: str
    estimated_hours: Optional[float] = None
    sort_order: int
    status: str


class TaskGenerateResponse(BaseModel):
    count: int


class TaskStatusUpdate(BaseModel):
    status: TaskStatus
