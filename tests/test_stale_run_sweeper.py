import asyncio
from datetime import timedelta

import pytest
from sqlalchemy import select

from productflow.models.analysis import Analysis
from productflow.models.company_research import CompanyResearch
from productflow.repositories.company_research_repository import CompanyResearchRepository
from productflow.services.analysis_service import AnalysisPipeline, AnalysisService
from productflow.services.company_research_service import CompanyResearchService, ResearchPipeline
from productflow.utils.time import utc_now
from productflow.workers.stale_run_sweeper import STALE_ERROR_MESSAGE, StaleRunSweeper

from tests.conftest import FakeFetcher, GatedLlm, add_file, analysis_payload, gather_payload, synthesis_payload


@pytest.mark.asyncio
async def test_sweeper_fails_only_stale_active_runs(db, session_factory, user, project):
    old = utc_now() - timedelta(hours=2)
    stale_analysis = Analysis(project_id=project.id, user_id=user.id, status="processing", created_at=old, updated_at=old)
    fresh_analysis = Analysis(project_id=project.id, user_id=user.id, status="processing")
    done_analysis = Analysis(project_id=project.id, user_id=user.id, status="completed", created_at=old, updated_at=old)
    stale_search = CompanyResearch(
        project_id=project.id, user_id=user.id, company_url="https://a.com", status="searching",
        created_at=old, updated_at=old,
    )
    stale_synth = CompanyResearch(
        project_id=project.id, user_id=user.id, company_url="https://b.com", status="analyzing",
        created_at=old, updated_at=old,
    )
    db.add_all([stale_analysis, fresh_analysis, done_analysis, stale_search, stale_synth])
    await db.commit()

    sweeper = StaleRunSweeper(session_factory, grace_minutes=30, interval_seconds=1)
    result = await sweeper.run_once()

    assert (result.analyses, result.research) == (1, 2)

    async with session_factory() as session:
        statuses = {
            a.id: (a.status, a.error_message)
            for a in (await session.execute(select(Analysis))).scalars()
        }
        research = {r.id: r.status for r in (await session.execute(select(CompanyResearch))).scalars()}

    assert statuses[stale_analysis.id] == ("failed", STALE_ERROR_MESSAGE)
    assert statuses[fresh_analysis.id][0] == "processing"
    assert statuses[done_analysis.id][0] == "completed"
    assert research[stale_search.id] == "failed"
    assert research[stale_synth.id] == "failed"

    again = await sweeper.run_once()
    assert again.total == 0


async def _reload(session_factory, model, row_id):
    async with session_factory() as session:
        return (await session.execute(select(model).where(model.id == row_id))).scalar_one()


@pytest.mark.asyncio
async def test_swept_analysis_stays_failed_when_run_finishes_late(db, session_factory, runner, user, project, notifier):
    data_file = await add_file(db, project)
    llm = GatedLlm(analysis_payload())
    pipeline = AnalysisPipeline(session_factory, llm, FakeFetcher({data_file.file_url: "transcript"}), notifier)
    analysis = await AnalysisService(db, runner=runner, pipeline=pipeline).start_analysis(user, project.id)
    await asyncio.wait_for(llm.entered.wait(), timeout=5)

    sweeper = StaleRunSweeper(session_factory, grace_minutes=1, interval_seconds=1)
    swept = await sweeper.run_once(now=utc_now() + timedelta(hours=1))
    assert swept.analyses == 1

    llm.release()
    await runner.wait_idle()

    stored = await _reload(session_factory, Analysis, analysis.id)
    assert stored.status == "failed"
    assert stored.error_message == STALE_ERROR_MESSAGE
    assert stored.themes is None
    assert stored.completed_at is None
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_swept_research_keeps_findings_but_drops_late_synthesis(db, session_factory, runner, user, project, notifier):
    llm = GatedLlm(gather_payload(), synthesis_payload(), hold_from=1)
    pipeline = ResearchPipeline(session_factory, llm, notifier)
    research = await CompanyResearchService(db, runner=runner, pipeline=pipeline).start_research(
        user, project.id, "notion.so"
    )
    await asyncio.wait_for(llm.entered.wait(), timeout=5)

    mid_run = await _reload(session_factory, CompanyResearch, research.id)
    assert mid_run.status == "analyzing"

    sweeper = StaleRunSweeper(session_factory, grace_minutes=1, interval_seconds=1)
    swept = await sweeper.run_once(now=utc_now() + timedelta(hours=1))
    assert swept.research == 1

    llm.release()
    await runner.wait_idle()

    stored = await _reload(session_factory, CompanyResearch, research.id)
    assert stored.status == "failed"
    assert stored.error_message == STALE_ERROR_MESSAGE
    assert stored.summary is None
    assert stored.positive_count is None
    assert stored.completed_at is None
    assert notifier.sent == []

    async with session_factory() as session:
        findings = await CompanyResearchRepository(session).list_findings(research.id)
    assert len(findings) == 16
