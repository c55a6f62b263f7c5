"""
Pytest configuration and shared fixtures.

Tests run against an in-memory SQLite database built from the ORM metadata,
with in-process doubles for the LLM, the content fetcher and the notifier.
"""

import asyncio
import json
from typing import Any, Dict, List, Optional, Union

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import productflow.models  # noqa: F401
from productflow.db.base import Base
from productflow.models.project import DataFile, Project
from productflow.models.user import User
from productflow.services.llm_client import LlmChoice, LlmMessage, LlmResponse
from productflow.services.pipeline_runner import PipelineRunner


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no external deps")


# ============================================================================
# Test doubles
# ============================================================================

class FakeLlm:
    """Scripted LLM: pops one queued result per call and records the messages.

    A queued exception is raised instead of returned. Dict results are
    JSON-encoded as the message content unless ``as_string=False``.
    """

    def __init__(self, *results: Any, as_string: bool = True):
        self.results: List[Any] = list(results)
        self.as_string = as_string
        self.calls: List[Dict[str, Any]] = []

    def queue(self, *results: Any) -> None:
        self.results.extend(results)

    async def invoke(self, messages, response_format=None) -> LlmResponse:
        self.calls.append({"messages": messages, "response_format": response_format})
        if not self.results:
            raise AssertionError("FakeLlm called more times than scripted")
        result = self.results.pop(0)
        if isinstance(result, BaseException):
            raise result
        if isinstance(result, LlmResponse):
            return result
        content = json.dumps(result) if (self.as_string and isinstance(result, (dict, list))) else result
        return LlmResponse(choices=[LlmChoice(message=LlmMessage(role="assistant", content=content))])


class GatedLlm(FakeLlm):
    """FakeLlm whose calls from index ``hold_from`` on block until ``release()``."""

    def __init__(self, *results: Any, hold_from: int = 0):
        super().__init__(*results)
        self.hold_from = hold_from
        self.entered = asyncio.Event()
        self._gate = asyncio.Event()

    def release(self) -> None:
        self._gate.set()

    async def invoke(self, messages, response_format=None) -> LlmResponse:
        if len(self.calls) >= self.hold_from:
            self.entered.set()
            await self._gate.wait()
        return await super().invoke(messages, response_format)


class FakeFetcher:
    """Serve file text by URL; URLs mapped to an exception raise it."""

    def __init__(self, contents: Optional[Dict[str, Union[str, Exception]]] = None):
        self.contents = contents or {}
        self.fetched: List[str] = []

    async def fetch_text(self, url: str) -> str:
        self.fetched.append(url)
        value = self.contents.get(url)
        if value is None:
            raise httpx.ConnectError(f"no content for {url}")
        if isinstance(value, Exception):
            raise value
        return value


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.sent: List[Dict[str, str]] = []
        self.fail = fail

    async def notify(self, title: str, content: str) -> bool:
        self.sent.append({"title": title, "content": content})
        if self.fail:
            raise RuntimeError("notification backend down")
        return True


# ============================================================================
# Sample LLM payloads
# ============================================================================

def analysis_payload(overall: str = "negative") -> Dict[str, Any]:
    return {
        "themes": [
            {"name": "Onboarding friction", "description": "Users struggle in the first week", "frequency": 80, "sentiment": "negative"},
            {"name": "Reporting", "description": "Reports are valued", "frequency": 40, "sentiment": "positive"},
            {"name": "Integrations", "description": "Slack and Jira asked for", "frequency": 30, "sentiment": "neutral"},
        ],
        "pain_points": [
            {"title": "Confusing onboarding flow", "description": "Setup wizard loses progress", "severity": "high", "frequency": 70},
            {"title": "Slow dashboard", "description": "Dashboard takes 10s to load", "severity": "medium", "frequency": 35},
            {"title": "Missing docs", "description": "API docs are outdated", "severity": "low", "frequency": 20},
        ],
        "feature_requests": [
            {"title": "Guided onboarding", "description": "Interactive checklist", "request_count": 55, "priority": "high"},
            {"title": "Slack integration", "description": "Push alerts to Slack", "request_count": 25, "priority": "medium"},
            {"title": "CSV export", "description": "Export any table", "request_count": 15, "priority": "low"},
        ],
        "sentiment_summary": {
            "overall": overall,
            "positive_percent": 20,
            "negative_percent": 60,
            "neutral_percent": 20,
            "highlights": ["Onboarding is the top complaint"],
        },
    }


def proposals_payload(count: int = 2) -> Dict[str, Any]:
    return {
        "proposals": [
            {
                "title": f"Proposal {i}",
                "problem_statement": "Users drop off during onboarding.",
                "proposed_solution": "Add a guided checklist.",
                "ui_changes": "New checklist panel",
                "data_model_changes": "onboarding_progress table",
                "workflow_changes": "Trigger checklist on first login",
                "priority": "high",
                "effort": "medium",
            }
            for i in range(count)
        ]
    }


def tasks_payload(count: int = 5, prefix: str = "Task") -> Dict[str, Any]:
    categories = ["database", "backend", "api", "frontend", "testing", "devops", "design"]
    return {
        "tasks": [
            {
                "title": f"{prefix} {i}",
                "description": f"Do step {i}",
                "category": categories[i % len(categories)],
                "priority": "medium",
                "estimated_hours": 2 + i,
            }
            for i in range(count)
        ]
    }


def gather_payload(sentiments: Optional[List[str]] = None, company_name: str = "Notion") -> Dict[str, Any]:
    sentiments = sentiments or ["positive"] * 8 + ["negative"] * 5 + ["neutral"] * 3
    scores = {"positive": 70, "negative": -60, "neutral": 0}
    return {
        "company_name": company_name,
        "company_description": "All-in-one workspace for notes and docs.",
        "findings": [
            {
                "source": "G2",
                "source_url": f"https://www.g2.com/products/notion/reviews/{i}",
                "source_type": "review",
                "title": f"Finding {i}",
                "content": "Users describe their experience.",
                "sentiment": sentiment,
                "sentiment_score": scores[sentiment],
                "category": "usability",
                "tags": ["ux"],
            }
            for i, sentiment in enumerate(sentiments)
        ],
    }


def synthesis_payload() -> Dict[str, Any]:
    insight = {"title": "Flexible", "description": "Adapts to many workflows", "evidence_count": 5}
    return {
        "summary": "Paragraph one.\n\nParagraph two.\n\nParagraph three.",
        "overall_sentiment": "mixed",
        "key_strengths": [insight, insight, insight],
        "key_weaknesses": [insight, insight, insight],
        "recommendations": [
            {"title": "Improve offline mode", "description": "Cache pages", "priority": "high", "category": "performance"},
            {"title": "Simplify pricing", "description": "Fewer tiers", "priority": "medium", "category": "pricing"},
            {"title": "Better search", "description": "Full text", "priority": "low", "category": "search"},
        ],
    }


# ============================================================================
# Database fixtures
# ============================================================================

@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def user(db) -> User:
    user = User(open_id="user-1", name="Test User", email="user@example.com", plan_id="free")
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def pro_user(db) -> User:
    user = User(open_id="user-pro", name="Pro User", plan_id="pro")
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def project(db, user) -> Project:
    project = Project(user_id=user.id, name="Acme CRM", description="Discovery for Acme", status="active")
    db.add(project)
    await db.commit()
    return project


async def add_file(db, project: Project, name: str = "interview.txt", url: Optional[str] = None) -> DataFile:
    data_file = DataFile(
        project_id=project.id,
        user_id=project.user_id,
        file_name=name,
        file_type="transcript",
        file_key=f"projects/{project.id}/files/abcd1234-{name}",
        file_url=url or f"http://files.test/{name}",
        file_size=100,
        mime_type="text/plain",
    )
    db.add(data_file)
    await db.commit()
    return data_file


@pytest_asyncio.fixture
async def runner():
    runner = PipelineRunner()
    yield runner
    await runner.shutdown(timeout=1.0)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
