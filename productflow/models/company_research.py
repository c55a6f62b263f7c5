"""
Company Research models.

A research run gathers public-sentiment findings about one company (stage A)
and then synthesizes them into a summary with strengths, weaknesses and
recommendations (stage B).
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from productflow.models.base_model import JSONType, TimestampedModel


class CompanyResearch(TimestampedModel):
    """
    Company research run.

    Status flow: searching -> analyzing -> completed, with failed reachable
    from either active state.
    """

    __tablename__ = "company_research"

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

    company_url: Mapped[str] = mapped_column(String(2048), nullable=False)

    company_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    company_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pending",
        index=True,
    )  # pending, searching, analyzing, completed, failed

    # Aggregates (set on completion)
    overall_sentiment: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)  # positive, negative, neutral, mixed
    positive_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    negative_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    neutral_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    key_strengths: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)
    key_weaknesses: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)
    recommendations: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)

    # Stage A payload kept for audit
    raw_search_results: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)

    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_company_research_project_id", "project_id"),
        Index("ix_company_research_user_created", "user_id", "created_at"),
    )


class ResearchFinding(TimestampedModel):
    """Single piece of evidence gathered during a research run. Written once, never updated."""

    __tablename__ = "research_findings"

    research_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("company_research.id"),
        nullable=False,
    )

    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id"),
        nullable=False,
    )

    source: Mapped[str] = mapped_column(String(255), nullable=False)

    source_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="other",
    )  # review, forum, social_media, news, blog, support, other

    title: Mapped[str] = mapped_column(String(512), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    sentiment: Mapped[str] = mapped_column(String(20), nullable=False)  # positive, negative, neutral

    sentiment_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # -100..100

    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    tags: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)

    source_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_research_findings_research_id", "research_id"),
        Index("ix_research_findings_project_id", "project_id"),
    )
