"""
Base Pydantic schemas with common fields.

These are templates that other schemas inherit from.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class RecordRead(BaseModel):
    """
    Base schema for reading a stored record.

    Includes all the auto-generated fields like id and timestamps.
    """

    id: UUID
    created_at: datetime
    updated_at: datetime

    # This tells Pydantic to work with SQLAlchemy models
    model_config = ConfigDict(from_attributes=True)


class ProjectScopedRead(RecordRead):
    """Read schema for records that live inside a project."""

    project_id: UUID


class CreatedResponse(BaseModel):
    """Returned by endpoints that start work or create a single record."""

    id: UUID


class SuccessResponse(BaseModel):
    success: bool = True
