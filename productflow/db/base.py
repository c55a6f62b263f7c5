"""
Declarative base for all ORM models.

Alembic reads Base.metadata to autogenerate migrations.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for every ProductFlow table."""
