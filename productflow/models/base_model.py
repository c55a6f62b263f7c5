"""
Shared columns for ProductFlow tables.

Every table gets a UUID primary key plus created/updated timestamps.
JSON columns use JSONB on PostgreSQL and plain JSON elsewhere.
"""

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from productflow.db.base import Base
from productflow.utils.time import utc_now

JSONType = JSON().with_variant(JSONB(), "postgresql")


class TimestampedModel(Base):
    """Abstract base: id, created_at, updated_at."""

    __abstract__ = True

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
        index=True,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
        server_default=func.now(),
    )
