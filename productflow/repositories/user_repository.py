"""
User repository - database operations for users.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from productflow.models.user import User


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID."""
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_open_id(self, open_id: str) -> Optional[User]:
        """Get user by the login provider's open id."""
        result = await self.db.execute(select(User).where(User.open_id == open_id))
        return result.scalar_one_or_none()

    async def create(
        self,
        open_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        plan_id: str = "free",
    ) -> User:
        """Create a new user."""
        user = User(open_id=open_id, name=name, email=email, plan_id=plan_id)
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)
        return user

    async def get_or_create(self, open_id: str, name: Optional[str] = None, email: Optional[str] = None) -> User:
        user = await self.get_by_open_id(open_id)
        if user:
            return user
        return await self.create(open_id=open_id, name=name, email=email)
