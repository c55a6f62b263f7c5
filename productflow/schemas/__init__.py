"""
Schemas package.

Pydantic models for API requests/responses and for structured LLM payloads.
"""

from productflow.schemas.base import CreatedResponse, SuccessResponse
from productflow.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectRead,
    ProjectStats,
    DataFileUpload,
    DataFileRead,
    DataFileUploadResponse,
)
from productflow.schemas.analysis import (
    AnalysisRead,
    FeatureProposalRead,
    ProposalGenerateRequest,
    ProposalGenerateResponse,
    ProposalStatusUpdate,
    TaskRead,
    TaskGenerateResponse,
    TaskStatusUpdate,
)
from productflow.schemas.company_research import (
    CompanyResearchStart,
    CompanyResearchRead,
    CompanyResearchDetail,
    ResearchFindingRead,
)
from productflow.schemas.billing import PlanRead, CurrentPlanRead, UsageRead

__all__ = [
    "CreatedResponse",
    "SuccessResponse",
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectRead",
    "ProjectStats",
    "DataFileUpload",
    "DataFileRead",
    "DataFileUploadResponse",
    "AnalysisRead",
    "FeatureProposalRead",
    "ProposalGenerateRequest",
    "ProposalGenerateResponse",
    "ProposalStatusUpdate",
    "TaskRead",
    "TaskGenerateResponse",
    "TaskStatusUpdate",
    "CompanyResearchStart",
    "CompanyResearchRead",
    "CompanyResearchDetail",
    "ResearchFindingRead",
    "PlanRead",
    "CurrentPlanRead",
    "UsageRead",
]
