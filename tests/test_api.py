"""HTTP-level tests: routing, actor resolution and the error envelope."""

import base64
import uuid
from pathlib import Path
from urllib.parse import unquote

import httpx
import pytest
import pytest_asyncio

from productflow.core.dependencies import get_db
from productflow.main import app
from productflow.services.storage import LocalBlobStorage

from tests.conftest import FakeLlm, analysis_payload, gather_payload, proposals_payload, synthesis_payload, tasks_payload

PUBLIC_BASE = "http://files.test"


class StorageFetcher:
    """Read uploaded blobs straight from the local storage root."""

    def __init__(self, root: Path):
        self.root = root

    async def fetch_text(self, url: str) -> str:
        key = unquote(url.split("/files/", 1)[1])
        return (self.root / key).read_text(encoding="utf-8")


@pytest_asyncio.fixture
async def api(session_factory, runner, notifier, tmp_path):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    llm = FakeLlm()
    app.dependency_overrides[get_db] = override_get_db
    app.state.session_factory = session_factory
    app.state.runner = runner
    app.state.llm = llm
    app.state.fetcher = StorageFetcher(tmp_path)
    app.state.notifier = notifier
    app.state.storage = LocalBlobStorage(root=str(tmp_path), public_base_url=PUBLIC_BASE)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        client.llm = llm
        yield client

    app.dependency_overrides.clear()


def _upload_body(text: str, name: str = "interview.txt"):
    return {
        "file_name": name,
        "file_type": "transcript",
        "content": base64.b64encode(text.encode("utf-8")).decode("ascii"),
        "mime_type": "text/plain",
    }


async def _create_project(api, name="Acme"):
    response = await api.post("/projects", json={"name": name})
    assert response.status_code == 201, response.text
    return response.json()["id"]


@pytest.mark.asyncio
async def test_project_limit_uses_error_envelope(api):
    await _create_project(api, "One")
    await _create_project(api, "Two")

    response = await api.post("/projects", json={"name": "Three"})

    assert response.status_code == 403
    error = response.json()["error"]
    assert error["code"] == "limit_reached"
    assert error["message"].startswith("Project limit reached")
    assert error["details"]["resource"] == "projects"

    listed = await api.get("/projects")
    assert len(listed.json()) == 2


@pytest.mark.asyncio
async def test_unknown_project_is_not_found(api):
    response = await api.get("/projects/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "not_found"


@pytest.mark.asyncio
async def test_unknown_user_header_is_rejected(api):
    response = await api.get("/projects", headers={"X-User-Id": "00000000-0000-0000-0000-000000000000"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "unknown_user"


@pytest.mark.asyncio
async def test_projects_are_scoped_to_their_owner(api, user):
    project_id = await _create_project(api)

    response = await api.get(f"/projects/{project_id}", headers={"X-User-Id": str(user.id)})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_analysis_without_files_is_a_validation_error(api):
    project_id = await _create_project(api)

    response = await api.post(f"/projects/{project_id}/analyses")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "no_data_files"
    assert (await api.get(f"/projects/{project_id}/analyses")).json() == []


@pytest.mark.asyncio
async def test_invalid_base64_upload_is_rejected(api):
    project_id = await _create_project(api)
    body = _upload_body("x")
    body["content"] = "***not base64***"

    response = await api.post(f"/projects/{project_id}/files", json=body)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_file_content"


@pytest.mark.asyncio
async def test_discovery_flow_end_to_end(api, runner, notifier, tmp_path):
    project_id = await _create_project(api)

    upload = await api.post(
        f"/projects/{project_id}/files",
        json=_upload_body("The onboarding was painful and confusing."),
    )
    assert upload.status_code == 201, upload.text
    file_url = upload.json()["url"]
    assert file_url.startswith(f"{PUBLIC_BASE}/files/projects/{project_id}/files/")
    assert file_url.endswith("-interview.txt")

    files = (await api.get(f"/projects/{project_id}/files")).json()
    assert files[0]["file_size"] == len("The onboarding was painful and confusing.")

    api.llm.queue(analysis_payload(overall="negative"))
    started = await api.post(f"/projects/{project_id}/analyses")
    assert started.status_code == 202
    analysis_id = started.json()["id"]
    await runner.wait_idle()

    analysis = (await api.get(f"/projects/{project_id}/analyses/{analysis_id}")).json()
    assert analysis["status"] == "completed"
    assert analysis["sentiment_summary"]["overall"] == "negative"
    assert "painful and confusing" in api.llm.calls[0]["messages"][1]["content"]

    first = [a["id"] for a in (await api.get(f"/projects/{project_id}/analyses")).json()]
    second = [a["id"] for a in (await api.get(f"/projects/{project_id}/analyses")).json()]
    assert first == second == [analysis_id]

    api.llm.queue(proposals_payload(2))
    generated = await api.post(f"/projects/{project_id}/proposals/generate", json={"analysis_id": analysis_id})
    assert generated.status_code == 201
    assert generated.json()["count"] == 2
    proposal_id = generated.json()["ids"][0]

    api.llm.queue(tasks_payload(6))
    tasks = await api.post(f"/projects/{project_id}/proposals/{proposal_id}/tasks/generate")
    assert tasks.json() == {"count": 6}

    listed = (await api.get(f"/projects/{project_id}/proposals/{proposal_id}/tasks")).json()
    assert [t["sort_order"] for t in listed] == list(range(6))

    stats = (await api.get(f"/projects/{project_id}/stats")).json()
    assert stats == {"files": 1, "analyses": 1, "proposals": 2, "tasks": 6, "research": 0}

    deleted = await api.delete(f"/projects/{project_id}")
    assert deleted.json() == {"success": True}
    assert (await api.get(f"/projects/{project_id}")).status_code == 404


@pytest.mark.asyncio
async def test_proposals_against_processing_analysis_conflict(api, session_factory):
    from productflow.models.analysis import Analysis

    project_id = await _create_project(api)
    projects = (await api.get("/projects")).json()
    async with session_factory() as session:
        analysis = Analysis(
            project_id=uuid.UUID(project_id),
            user_id=uuid.UUID(projects[0]["user_id"]),
            status="processing",
        )
        session.add(analysis)
        await session.commit()
        analysis_id = str(analysis.id)

    response = await api.post(f"/projects/{project_id}/proposals/generate", json={"analysis_id": analysis_id})

    assert response.status_code == 409
    assert response.json()["error"] == {
        "code": "analysis_not_ready",
        "message": "Analysis is not completed yet",
        "details": {"analysis_id": analysis_id, "status": "processing"},
    }
    assert (await api.get(f"/projects/{project_id}/proposals")).json() == []


@pytest.mark.asyncio
async def test_research_flow(api, runner):
    project_id = await _create_project(api)
    api.llm.queue(gather_payload(), synthesis_payload())

    started = await api.post(f"/projects/{project_id}/research", json={"company_url": "notion.so"})
    assert started.status_code == 202
    research_id = started.json()["id"]
    await runner.wait_idle()

    detail = (await api.get(f"/projects/{project_id}/research/{research_id}")).json()
    assert detail["status"] == "completed"
    assert detail["company_url"] == "https://notion.so"
    assert len(detail["findings"]) == detail["positive_count"] + detail["negative_count"] + detail["neutral_count"]

    usage = (await api.get("/billing/usage")).json()
    assert usage["research_this_month"] == 1

    again = await api.post(f"/projects/{project_id}/research", json={"company_url": "figma.com"})
    assert again.status_code == 403
    assert again.json()["error"]["details"]["resource"] == "research"


@pytest.mark.asyncio
async def test_list_endpoints_are_stable_without_mutation(api, runner):
    project_id = await _create_project(api)
    upload = await api.post(f"/projects/{project_id}/files", json=_upload_body("Setup took a week."))
    assert upload.status_code == 201, upload.text

    api.llm.queue(analysis_payload(), analysis_payload(overall="mixed"))
    analysis_ids = []
    for _ in range(2):
        started = await api.post(f"/projects/{project_id}/analyses")
        assert started.status_code == 202
        analysis_ids.append(started.json()["id"])
        await runner.wait_idle()

    api.llm.queue(proposals_payload(3))
    generated = await api.post(f"/projects/{project_id}/proposals/generate", json={"analysis_id": analysis_ids[0]})
    proposal_id = generated.json()["ids"][0]
    api.llm.queue(tasks_payload(5))
    await api.post(f"/projects/{project_id}/proposals/{proposal_id}/tasks/generate")

    api.llm.queue(gather_payload(), synthesis_payload())
    await api.post(f"/projects/{project_id}/research", json={"company_url": "notion.so"})
    await runner.wait_idle()

    paths = [
        f"/projects/{project_id}/analyses",
        f"/projects/{project_id}/proposals",
        f"/projects/{project_id}/tasks",
        f"/projects/{project_id}/proposals/{proposal_id}/tasks",
        f"/projects/{project_id}/research",
    ]
    for path in paths:
        first = [item["id"] for item in (await api.get(path)).json()]
        second = [item["id"] for item in (await api.get(path)).json()]
        assert first, path
        assert first == second, path

    listed = [a["id"] for a in (await api.get(paths[0])).json()]
    assert sorted(listed) == sorted(analysis_ids)


@pytest.mark.asyncio
async def test_unparseable_company_url_is_rejected(api):
    project_id = await _create_project(api)

    response = await api.post(f"/projects/{project_id}/research", json={"company_url": "[acme.com"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_company_url"
    assert (await api.get(f"/projects/{project_id}/research")).json() == []


@pytest.mark.asyncio
async def test_billing_endpoints(api):
    plans = (await api.get("/billing/plans")).json()
    assert [p["id"] for p in plans] == ["free", "pro", "team"]
    assert plans[1]["limits"]["max_analyses_per_month"] == 50

    current = (await api.get("/billing/current-plan")).json()
    assert current["plan_id"] == "free"
    assert current["limits"]["max_projects"] == 2


@pytest.mark.asyncio
async def test_health(api):
    response = await api.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["api_ok"] is True
    assert body["db_ok"] is True
    assert body["active_pipelines"] == 0
