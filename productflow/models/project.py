"""
Project and DataFile models.

A project is the container for uploaded customer data and everything
derived from it (analyses, proposals, tasks, company research).
"""

import uuid
from typing import Optional

from sqlalchemy import BigInteger, ForeignKey, String, Text, Uuid, Index
from sqlalchemy.orm import Mapped, mapped_column

from productflow.models.base_model import TimestampedModel


class Project(TimestampedModel):
    """Project table."""

    __tablename__ = "projects"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="active",
    )  # active, archived


class DataFile(TimestampedModel):
    """
    Uploaded customer data (interview transcripts or usage exports).

    Immutable once created; the content lives in blob storage and is read
    back through file_url.
    """

    __tablename__ = "data_files"

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

    file_name: Mapped[str] = mapped_column(String(512), nullable=False)

    file_type: Mapped[str] = mapped_column(String(20), nullable=False)  # transcript, usage_data

    file_key: Mapped[str] = mapped_column(String(1024), nullable=False)

    file_url: Mapped[str] = mapped_column(Text, nullable=False)

    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)

    mime_type: Mapped[str] = mapped_column(String(128), nullable=False)

    __table_args__ = (
        Index("ix_data_files_project_id", "project_id"),
    )
