"""
Analysis, FeatureProposal and Task models.

These form the discovery chain: uploaded files -> analysis -> proposals -> tasks.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from productflow.models.base_model import JSONType, TimestampedModel


class Analysis(TimestampedModel):
    """
    One LLM analysis over all files of a project.

    Created in `processing`, then mutated exactly once to `completed` (with
    every result field set) or `failed` (result fields left null).
    """

    __tablename__ = "analyses"

    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id"),
        nullable=False,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pending",
        index=True,
    )  # pending, processing, completed, failed

    # Results
    themes: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)
    pain_points: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)
    feature_requests: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)
    sentiment_summary: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)

    raw_analysis: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_analyses_project_id", "project_id"),
        Index("ix_analyses_user_created", "user_id", "created_at"),
    )


class FeatureProposal(TimestampedModel):
    """Feature proposal derived from a completed analysis. Only status changes after creation."""

    __tablename__ = "feature_proposals"

    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id"),
        nullable=False,
    )

    analysis_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("analyses.id"),
        nullable=False,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(512), nullable=False)
    problem_statement: Mapped[str] = mapped_column(Text, nullable=False)
    proposed_solution: Mapped[str] = mapped_column(Text, nullable=False)
    ui_changes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    data_model_changes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    workflow_changes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")  # critical, high, medium, low
    effort: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")  # small, medium, large, xlarge
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="draft",
    )  # draft, approved, rejected, in_progress, completed

    __table_args__ = (
        Index("ix_feature_proposals_project_id", "project_id"),
    )


class Task(TimestampedModel):
    """Development task generated from a proposal; sort_order is 0-based per proposal."""

    __tablename__ = "tasks"

    feature_proposal_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("feature_proposals.id"),
        nullable=False,
    )

    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id"),
        nullable=False,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(512), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="frontend",
    )  # frontend, backend, database, api, testing, devops, design
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")
    estimated_hours: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="todo")  # todo, in_progress, done

    __table_args__ = (
        Index("ix_tasks_feature_proposal_id", "feature_proposal_id"),
        Index("ix_tasks_project_id", "project_id"),
    )
