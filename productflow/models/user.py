"""
User model.

Identity comes from an external login provider (open_id). The plan id is
maintained by the billing side and read by the usage limiter.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from productflow.models.base_model import TimestampedModel


class User(TimestampedModel):
    """User table - owners of projects and everything below them."""

    __tablename__ = "users"

    open_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
    )

    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="user",
    )  # user, admin

    # Billing
    plan_id: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="free",
        server_default="free",
    )  # free, pro, team

    stripe_customer_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    stripe_subscription_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    plan_period_end: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
