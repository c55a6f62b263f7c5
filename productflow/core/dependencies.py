"""
FastAPI dependencies.

The acting user is resolved once per request here and passed explicitly into
every service call. Long-lived collaborators (runner, LLM client, storage...)
live on ``app.state`` and are created in the application lifespan.
"""

from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from productflow.core.config import settings
from productflow.db.session import get_db
from productflow.errors import AppError
from productflow.models.user import User
from productflow.repositories.user_repository import UserRepository
from productflow.services.llm_client import LlmClient
from productflow.services.notification_service import Notifier
from productflow.services.pipeline_runner import PipelineRunner
from productflow.services.storage import ContentFetcher, LocalBlobStorage

__all__ = [
    "get_db",
    "get_current_user",
    "get_session_factory",
    "get_runner",
    "get_llm",
    "get_fetcher",
    "get_notifier",
    "get_storage",
]


async def get_current_user(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the acting user.

    An ``X-User-Id`` header must name an existing user. Without the header the
    default local user is used (created on first use) when ALLOW_DEFAULT_USER
    is on; otherwise the request is rejected.
    """
    repo = UserRepository(db)

    if x_user_id:
        try:
            user_id = UUID(x_user_id)
        except ValueError:
            raise AppError(401, "invalid_user", "X-User-Id must be a UUID") from None
        user = await repo.get_by_id(user_id)
        if not user:
            raise AppError(401, "unknown_user", "Unknown user")
        return user

    if not settings.ALLOW_DEFAULT_USER:
        raise AppError(401, "unauthenticated", "Authentication required")

    user = await repo.get_or_create(
        settings.DEFAULT_USER_OPEN_ID,
        name=settings.DEFAULT_USER_NAME,
        email=settings.DEFAULT_USER_EMAIL,
    )
    await db.commit()
    return user


def get_session_factory(request: Request) -> async_sessionmaker:
    return request.app.state.session_factory


def get_runner(request: Request) -> PipelineRunner:
    return request.app.state.runner


def get_llm(request: Request) -> LlmClient:
    return request.app.state.llm


def get_fetcher(request: Request) -> ContentFetcher:
    return request.app.state.fetcher


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def get_storage(request: Request) -> LocalBlobStorage:
    return request.app.state.storage
