"""
Analysis service and pipeline.

``AnalysisService`` validates and records the start of an analysis inside the
request. ``AnalysisPipeline`` does the detached work with its own session:
fetch every file of the project, make one LLM call, and move the record from
``processing`` to ``completed`` or ``failed``.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from productflow.core.config import settings
from productflow.errors import InvalidRequestError, NotFoundError
from productflow.models.analysis import Analysis
from productflow.models.project import DataFile
from productflow.models.user import User
from productflow.repositories.analysis_repository import AnalysisRepository
from productflow.repositories.data_file_repository import DataFileRepository
from productflow.repositories.project_repository import ProjectRepository
from productflow.schemas.llm_outputs import AnalysisPayload
from productflow.services import prompts
from productflow.services.llm_client import LlmClient, LlmOutputError, content_text, json_schema_format, parse_json_content
from productflow.services.notification_service import Notifier
from productflow.services.pipeline_runner import PipelineRunner
from productflow.services.project_service import ProjectService
from productflow.services.storage import ContentFetcher
from productflow.services.usage_service import UsageService
from productflow.utils.time import utc_now

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = ("pending", "processing")


def describe_failure(exc: BaseException) -> str:
    message = str(exc).strip()
    if not message:
        message = type(exc).__name__
    return message[:2000]


def file_section(data_file: DataFile, text: Optional[str], max_chars: int) -> str:
    """Prompt section for one file; ``text=None`` marks an unreadable file."""
    header = f"--- File: {data_file.file_name} ({data_file.file_type}) ---"
    if text is None:
        return f"{header} [Could not fetch content]"
    return f"{header}\n{text[:max_chars]}"


def validate_payload(model, payload: Dict[str, Any]):
    """Validate a parsed LLM object, converting schema violations to ``LlmOutputError``."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise LlmOutputError(f"LLM output did not match {model.__name__}: {exc.error_count()} error(s)") from exc


class AnalysisPipeline:
    """Detached analysis run over all files of a project."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        llm: LlmClient,
        fetcher: ContentFetcher,
        notifier: Notifier,
        max_chars: Optional[int] = None,
    ) -> None:
        self.session_factory = session_factory
        self.llm = llm
        self.fetcher = fetcher
        self.notifier = notifier
        self.max_chars = max_chars or settings.FILE_CONTENT_MAX_CHARS

    async def assemble_content(self, files: List[DataFile]) -> str:
        sections: List[str] = []
        for data_file in files:
            try:
                text = await self.fetcher.fetch_text(data_file.file_url)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Could not fetch file %s (%s): %s", data_file.id, data_file.file_name, exc)
                text = None
            sections.append(file_section(data_file, text, self.max_chars))
        return "\n\n".join(sections)

    async def run(self, analysis_id: UUID) -> None:
        async with self.session_factory() as session:
            analysis_repo = AnalysisRepository(session)
            analysis = await analysis_repo.get(analysis_id)
            if analysis is None:
                logger.warning("Analysis %s disappeared before it could run", analysis_id)
                return

            project = await ProjectRepository(session).get_by_id(analysis.user_id, analysis.project_id)
            if project is None:
                logger.warning("Project for analysis %s no longer exists", analysis_id)
                return
            project_name = project.name
            files = await DataFileRepository(session).list_for_project(analysis.project_id)

            logger.info("Analysis %s: assembling %d file(s)", analysis_id, len(files))
            combined = await self.assemble_content(files)

            logger.info("Analysis %s: invoking LLM", analysis_id)
            response = await self.llm.invoke(
                prompts.analysis_messages(project_name, combined),
                response_format=json_schema_format(prompts.ANALYSIS_SCHEMA_NAME, prompts.ANALYSIS_SCHEMA),
            )
            parsed = parse_json_content(response)
            result = validate_payload(AnalysisPayload, parsed)

            data = result.model_dump()
            completed = await analysis_repo.transition(
                analysis_id,
                ACTIVE_STATUSES,
                {
                    "status": "completed",
                    "themes": data["themes"],
                    "pain_points": data["pain_points"],
                    "feature_requests": data["feature_requests"],
                    "sentiment_summary": data["sentiment_summary"],
                    "raw_analysis": content_text(response),
                    "error_message": None,
                    "completed_at": utc_now(),
                },
            )
            await session.commit()
            if not completed:
                logger.warning("Analysis %s: no longer active, result discarded", analysis_id)
                return
            logger.info("Analysis %s: completed", analysis_id)

        await self._notify(
            f"Analysis Complete - {project_name}",
            (
                f"Your analysis for {project_name} is ready: {len(result.themes)} themes, "
                f"{len(result.pain_points)} pain points and {len(result.feature_requests)} feature requests "
                f"identified."
            ),
        )

    async def _notify(self, title: str, content: str) -> None:
        try:
            await self.notifier.notify(title, content)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Notification %r failed: %s", title, exc)

    async def mark_failed(self, analysis_id: UUID, exc: BaseException) -> None:
        """Terminal failure for a run; result fields stay null."""
        async with self.session_factory() as session:
            failed = await AnalysisRepository(session).transition(
                analysis_id,
                ACTIVE_STATUSES,
                {"status": "failed", "error_message": describe_failure(exc)},
            )
            await session.commit()
        if failed:
            logger.info("Analysis %s: marked failed", analysis_id)


class AnalysisService:
    """Request-scoped analysis operations."""

    def __init__(
        self,
        db: AsyncSession,
        runner: Optional[PipelineRunner] = None,
        pipeline: Optional[AnalysisPipeline] = None,
    ):
        self.db = db
        self.runner = runner
        self.pipeline = pipeline
        self.repo = AnalysisRepository(db)
        self.file_repo = DataFileRepository(db)
        self.projects = ProjectService(db)
        self.usage = UsageService(db)

    async def start_analysis(self, user: User, project_id: UUID) -> Analysis:
        """Validate, record the run in ``processing`` and hand it to the runner.

        Zero files and exhausted plans are rejected before any row exists.
        """
        if self.runner is None or self.pipeline is None:
            raise RuntimeError("AnalysisService needs a runner and a pipeline to start analyses")

        project = await self.projects.get_project(user, project_id)
        file_count = await self.file_repo.count_for_project(project.id)
        if file_count == 0:
            raise InvalidRequestError(
                "no_data_files",
                "No data files uploaded. Please upload files first.",
                {"project_id": str(project.id)},
            )
        await self.usage.ensure_can_create_analysis(user)

        analysis = await self.repo.create(project.id, user.id, status="processing")
        await self.db.commit()
        logger.info("Analysis %s started for project %s (%d files)", analysis.id, project.id, file_count)

        analysis_id = analysis.id
        pipeline = self.pipeline

        async def on_failure(exc: BaseException) -> None:
            await pipeline.mark_failed(analysis_id, exc)

        self.runner.spawn(f"analysis:{analysis_id}", pipeline.run(analysis_id), on_failure)
        return analysis

    async def list_analyses(self, user: User, project_id: UUID) -> List[Analysis]:
        project = await self.projects.get_project(user, project_id)
        return await self.repo.list_for_project(project.id)

    async def get_analysis(self, user: User, project_id: UUID, analysis_id: UUID) -> Analysis:
        project = await self.projects.get_project(user, project_id)
        analysis = await self.repo.get_for_project(project.id, analysis_id)
        if not analysis:
            raise NotFoundError("Analysis", analysis_id)
        return analysis
