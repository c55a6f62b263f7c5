"""
Models package.

Import all models here so they are registered with SQLAlchemy.
This file also makes it easy to import models from one place.
"""

from productflow.models.user import User
from productflow.models.project import Project, DataFile
from productflow.models.analysis import Analysis, FeatureProposal, Task
from productflow.models.company_research import CompanyResearch, ResearchFinding

# Export all models
__all__ = [
    "User",
    "Project",
    "DataFile",
    "Analysis",
    "FeatureProposal",
    "Task",
    "CompanyResearch",
    "ResearchFinding",
]
