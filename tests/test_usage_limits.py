from datetime import timedelta

import pytest
from sqlalchemy import func, select

from productflow.core.plans import UNLIMITED, get_plan_by_id, is_within_limit, resolve_plan
from productflow.errors import LimitReachedError
from productflow.models.analysis import Analysis
from productflow.models.company_research import CompanyResearch
from productflow.models.project import Project
from productflow.schemas.project import ProjectCreate
from productflow.services.project_service import ProjectService
from productflow.services.usage_service import UsageService
from productflow.utils.time import start_of_month, utc_now


@pytest.mark.unit
def test_plan_limits():
    free = resolve_plan("free")
    assert free.limits.max_projects == 2
    assert free.limits.max_analyses_per_month == 3
    assert free.limits.max_research_per_month == 1
    assert get_plan_by_id("pro").limits.max_projects == UNLIMITED
    assert get_plan_by_id("team").limits.max_analyses_per_month == UNLIMITED


@pytest.mark.unit
def test_unknown_plan_falls_back_to_free():
    assert resolve_plan("enterprise-legacy").id == "free"
    assert resolve_plan(None).id == "free"


@pytest.mark.unit
def test_is_within_limit():
    assert is_within_limit(2, 1)
    assert not is_within_limit(2, 2)
    assert is_within_limit(UNLIMITED, 10_000)


@pytest.mark.unit
def test_start_of_month():
    now = utc_now().replace(day=17, hour=13, minute=5)
    start = start_of_month(now)
    assert (start.day, start.hour, start.minute, start.second, start.microsecond) == (1, 0, 0, 0, 0)
    assert start.month == now.month


@pytest.mark.asyncio
async def test_free_plan_project_limit(db, user):
    service = ProjectService(db)
    await service.create_project(user, ProjectCreate(name="One"))
    await service.create_project(user, ProjectCreate(name="Two"))
    await db.commit()

    with pytest.raises(LimitReachedError) as exc_info:
        await service.create_project(user, ProjectCreate(name="Three"))

    assert exc_info.value.details["resource"] == "projects"
    assert exc_info.value.message.startswith("Project limit reached")
    count = (await db.execute(select(func.count(Project.id)))).scalar_one()
    assert count == 2, "no row may be created when the limit is hit"


@pytest.mark.asyncio
async def test_archived_projects_do_not_count(db, user):
    service = ProjectService(db)
    await service.create_project(user, ProjectCreate(name="One"))
    archived = await service.create_project(user, ProjectCreate(name="Two"))
    archived.status = "archived"
    await db.commit()

    await service.create_project(user, ProjectCreate(name="Three"))


@pytest.mark.asyncio
async def test_pro_plan_has_no_project_limit(db, pro_user):
    service = ProjectService(db)
    for i in range(5):
        await service.create_project(pro_user, ProjectCreate(name=f"P{i}"))


@pytest.mark.asyncio
async def test_previous_month_analyses_do_not_count(db, user, project):
    period_start = start_of_month()
    db.add(Analysis(
        project_id=project.id,
        user_id=user.id,
        status="completed",
        created_at=period_start - timedelta(seconds=1),
    ))
    db.add(Analysis(
        project_id=project.id,
        user_id=user.id,
        status="failed",
        created_at=period_start - timedelta(days=3),
    ))
    db.add(Analysis(project_id=project.id, user_id=user.id, status="completed", created_at=period_start))
    await db.commit()

    usage = await UsageService(db).get_usage(user)
    assert usage.analyses_this_month == 1
    assert usage.projects == 1


@pytest.mark.asyncio
async def test_analysis_limit_counts_every_outcome(db, user, project):
    for status in ("completed", "failed", "processing"):
        db.add(Analysis(project_id=project.id, user_id=user.id, status=status))
    await db.commit()

    with pytest.raises(LimitReachedError) as exc_info:
        await UsageService(db).ensure_can_create_analysis(user)
    assert exc_info.value.details == {"resource": "analyses", "limit": 3, "used": 3, "plan_id": "free"}


@pytest.mark.asyncio
async def test_research_limit(db, user, project):
    service = UsageService(db)
    await service.ensure_can_create_research(user)

    db.add(CompanyResearch(project_id=project.id, user_id=user.id, company_url="https://a.com", status="failed"))
    await db.commit()

    with pytest.raises(LimitReachedError) as exc_info:
        await service.ensure_can_create_research(user)
    assert exc_info.value.details["resource"] == "research"
