"""
Company Research service and pipeline.

A run goes through two LLM stages. Stage A gathers the company identity plus
raw findings and persists them; stage B synthesizes those findings into a
summary. Status flow: searching -> analyzing -> completed, or failed from
either active state. When stage B fails the stage A findings stay in place
and no synthesis field is written.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from productflow.errors import InvalidRequestError, NotFoundError
from productflow.models.company_research import CompanyResearch, ResearchFinding
from productflow.models.user import User
from productflow.repositories.company_research_repository import CompanyResearchRepository
from productflow.schemas.llm_outputs import FindingDraft, GatherPayload, SynthesisPayload
from productflow.services import prompts
from productflow.services.analysis_service import describe_failure, validate_payload
from productflow.services.llm_client import LlmClient, json_schema_format, parse_json_content
from productflow.services.notification_service import Notifier
from productflow.services.pipeline_runner import PipelineRunner
from productflow.services.project_service import ProjectService
from productflow.services.usage_service import UsageService
from productflow.utils.time import utc_now
from productflow.utils.url_canonicalizer import extract_domain, fallback_company_name, normalize_company_url

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = ("pending", "searching", "analyzing")
GATHER_STATUSES = ("pending", "searching")


def count_sentiments(findings: List[FindingDraft]) -> Dict[str, int]:
    """Positive/negative/neutral tallies over the gathered findings."""
    counts = {"positive": 0, "negative": 0, "neutral": 0}
    for finding in findings:
        counts[finding.sentiment] += 1
    return counts


def findings_for_prompt(findings: List[FindingDraft]) -> List[Dict[str, Any]]:
    return [
        {
            "source": f.source,
            "source_type": f.source_type,
            "title": f.title,
            "content": f.content,
            "sentiment": f.sentiment,
            "sentiment_score": f.sentiment_score,
            "category": f.category,
        }
        for f in findings
    ]


class ResearchPipeline:
    """Detached two-stage research run."""

    def __init__(self, session_factory: async_sessionmaker, llm: LlmClient, notifier: Notifier) -> None:
        self.session_factory = session_factory
        self.llm = llm
        self.notifier = notifier

    async def gather(self, research: CompanyResearch) -> Tuple[GatherPayload, Dict[str, Any]]:
        """Stage A. Returns the validated payload and the object as the model sent it."""
        response = await self.llm.invoke(
            prompts.research_gather_messages(research.company_url, extract_domain(research.company_url)),
            response_format=json_schema_format(
                prompts.RESEARCH_GATHER_SCHEMA_NAME,
                prompts.RESEARCH_GATHER_SCHEMA,
            ),
        )
        raw = parse_json_content(response)
        return validate_payload(GatherPayload, raw), raw

    async def synthesize(self, company_name: str, findings: List[FindingDraft]) -> SynthesisPayload:
        """Stage B."""
        response = await self.llm.invoke(
            prompts.research_synthesis_messages(company_name, findings_for_prompt(findings)),
            response_format=json_schema_format(
                prompts.RESEARCH_SYNTHESIS_SCHEMA_NAME,
                prompts.RESEARCH_SYNTHESIS_SCHEMA,
            ),
        )
        return validate_payload(SynthesisPayload, parse_json_content(response))

    async def run(self, research_id: UUID) -> None:
        async with self.session_factory() as session:
            repo = CompanyResearchRepository(session)
            research = await repo.get_research(research_id)
            if research is None:
                logger.warning("Research %s disappeared before it could run", research_id)
                return

            logger.info("Research %s: gathering findings for %s", research_id, research.company_url)
            gathered, raw = await self.gather(research)

            company_name = gathered.company_name.strip() or research.company_name or research.company_url
            moved = await repo.transition_research(
                research_id,
                GATHER_STATUSES,
                {
                    "company_name": company_name,
                    "company_description": gathered.company_description or None,
                    "raw_search_results": raw,
                    "status": "analyzing",
                },
            )
            if not moved:
                logger.warning("Research %s: no longer active, findings discarded", research_id)
                return
            await repo.create_findings(research_id, research.project_id, gathered.findings)
            await session.commit()
            logger.info("Research %s: %d finding(s) stored, synthesizing", research_id, len(gathered.findings))

            synthesis = await self.synthesize(company_name, gathered.findings)
            counts = count_sentiments(gathered.findings)
            data = synthesis.model_dump()
            completed = await repo.transition_research(
                research_id,
                ("analyzing",),
                {
                    "status": "completed",
                    "summary": data["summary"],
                    "overall_sentiment": data["overall_sentiment"],
                    "key_strengths": data["key_strengths"],
                    "key_weaknesses": data["key_weaknesses"],
                    "recommendations": data["recommendations"],
                    "positive_count": counts["positive"],
                    "negative_count": counts["negative"],
                    "neutral_count": counts["neutral"],
                    "error_message": None,
                    "completed_at": utc_now(),
                },
            )
            await session.commit()
            if not completed:
                logger.warning("Research %s: no longer active, synthesis discarded", research_id)
                return
            logger.info("Research %s: completed", research_id)

        try:
            await self.notifier.notify(
                f"Company Research Complete - {company_name}",
                (
                    f"Research on {company_name} found {len(gathered.findings)} data points: "
                    f"{counts['positive']} positive, {counts['negative']} negative, {counts['neutral']} neutral."
                ),
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Research notification failed: %s", exc)

    async def mark_failed(self, research_id: UUID, exc: BaseException) -> None:
        async with self.session_factory() as session:
            failed = await CompanyResearchRepository(session).transition_research(
                research_id,
                ACTIVE_STATUSES,
                {"status": "failed", "error_message": describe_failure(exc)},
            )
            await session.commit()
        if failed:
            logger.info("Research %s: marked failed", research_id)


class CompanyResearchService:
    """Request-scoped company research operations."""

    def __init__(
        self,
        db: AsyncSession,
        runner: Optional[PipelineRunner] = None,
        pipeline: Optional[ResearchPipeline] = None,
    ):
        self.db = db
        self.runner = runner
        self.pipeline = pipeline
        self.repo = CompanyResearchRepository(db)
        self.projects = ProjectService(db)
        self.usage = UsageService(db)

    async def start_research(self, user: User, project_id: UUID, company_url: str) -> CompanyResearch:
        if self.runner is None or self.pipeline is None:
            raise RuntimeError("CompanyResearchService needs a runner and a pipeline to start research")

        project = await self.projects.get_project(user, project_id)
        try:
            normalized_url = normalize_company_url(company_url)
        except ValueError as exc:
            if str(exc) == "empty_url":
                raise InvalidRequestError("empty_company_url", "Company URL is required") from exc
            raise InvalidRequestError(
                "invalid_company_url",
                "Company URL could not be parsed",
                {"company_url": company_url},
            ) from exc
        await self.usage.ensure_can_create_research(user)

        research = await self.repo.create_research(
            project_id=project.id,
            user_id=user.id,
            company_url=normalized_url,
            company_name=fallback_company_name(normalized_url),
            status="searching",
        )
        await self.db.commit()
        logger.info("Research %s started for %s in project %s", research.id, normalized_url, project.id)

        research_id = research.id
        pipeline = self.pipeline

        async def on_failure(exc: BaseException) -> None:
            await pipeline.mark_failed(research_id, exc)

        self.runner.spawn(f"research:{research_id}", pipeline.run(research_id), on_failure)
        return research

    async def list_research(self, user: User, project_id: UUID) -> List[CompanyResearch]:
        project = await self.projects.get_project(user, project_id)
        return await self.repo.list_research_for_project(project.id)

    async def get_research(self, user: User, project_id: UUID, research_id: UUID) -> CompanyResearch:
        project = await self.projects.get_project(user, project_id)
        research = await self.repo.get_research_for_project(project.id, research_id)
        if not research:
            raise NotFoundError("Company research", research_id)
        return research

    async def list_findings(self, user: User, project_id: UUID, research_id: UUID) -> List[ResearchFinding]:
        research = await self.get_research(user, project_id, research_id)
        return await self.repo.list_findings(research.id)

    async def delete_research(self, user: User, project_id: UUID, research_id: UUID) -> None:
        research = await self.get_research(user, project_id, research_id)
        await self.repo.delete_research(research)
        logger.info("Deleted research %s", research_id)
