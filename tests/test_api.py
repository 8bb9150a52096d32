"""HTTP routes exercised over an in-process ASGI transport."""
from __future__ import annotations

import anyio
import httpx
import pytest

from agentflow import main
from agentflow.config import Config
from agentflow.main import app
from agentflow.runtime import get_orchestrator


@pytest.fixture
def client_for(orchestrator):
    def _client() -> httpx.AsyncClient:
        transport = httpx.ASGITransport(app=app)
        return httpx.AsyncClient(transport=transport, base_url="http://test")

    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield _client
    app.dependency_overrides.clear()


@pytest.mark.anyio
async def test_health_and_agents(client_for) -> None:
    async with client_for() as client:
        health = await client.get("/health")
        agents = await client.get("/agents")
        missing = await client.get("/agents/nobody-0")

    assert health.json() == {"status": "ok"}
    assert agents.status_code == 200
    body = agents.json()
    assert len(body) == 11
    assert body[0]["role"] == "orchestrator"
    assert body[0]["status"] == "idle"
    assert missing.status_code == 404


@pytest.mark.anyio
async def test_create_and_read_task(client_for, orchestrator) -> None:
    async with client_for() as client:
        created = await client.post(
            "/tasks",
            json={"type": "research", "description": "Find papers", "input": {"q": "rl"}, "priority": "high"},
        )
        task_id = created.json()["task_id"]
        fetched = await client.get(f"/tasks/{task_id}")
        listed = await client.get("/tasks")
        bad = await client.post(
            "/tasks", json={"type": "research", "description": "x", "priority": "urgent"}
        )
        missing = await client.get("/tasks/task-nope")

    assert created.status_code == 201
    assert fetched.json()["status"] == "pending"
    assert fetched.json()["priority"] == "high"
    assert fetched.json()["input"] == {"q": "rl"}
    assert [task["task_id"] for task in listed.json()] == [task_id]
    assert bad.status_code == 400
    assert missing.status_code == 404
    assert orchestrator.get_task_status(task_id) is not None


@pytest.mark.anyio
async def test_metrics_endpoint(client_for, orchestrator) -> None:
    orchestrator.create_task("research", "queued", {})
    async with client_for() as client:
        response = await client.get("/metrics")

    body = response.json()
    assert body["agents"]["total"] == 11
    assert body["tasks"]["pending"] == 1
    assert body["queue"] == {"length": 1, "processing": False}


@pytest.mark.anyio
async def test_workflow_routes(client_for, orchestrator) -> None:
    steps = [
        {"id": "survey", "agent_role": "researcher", "action": "research", "input": {"topic": "x"}},
        {"id": "plan", "agent_role": "revenue", "action": "business_strategy",
         "input": {"findings": "${step_survey_output}"}},
    ]
    await orchestrator.start()
    try:
        async with client_for() as client:
            invalid = await client.post(
                "/workflows", json={"name": "dupes", "steps": [steps[0], steps[0]]}
            )
            created = await client.post("/workflows", json={"name": "chain", "steps": steps})
            workflow_id = created.json()["workflow_id"]
            with anyio.fail_after(5):
                executed = await client.post(
                    f"/workflows/{workflow_id}/execute", json={"variables": {"seed": 1}}
                )
            missing = await client.post("/workflows/workflow-nope/execute", json={})
            fetched = await client.get(f"/workflows/{workflow_id}")
    finally:
        await orchestrator.scheduler.stop()

    assert invalid.status_code == 400
    assert created.status_code == 201
    assert created.json()["status"] == "draft"
    assert executed.status_code == 200
    assert executed.json()["status"] == "completed"
    assert set(executed.json()["variables"]) == {"seed", "step_survey_output", "step_plan_output"}
    assert missing.status_code == 404
    assert fetched.json()["status"] == "completed"


@pytest.mark.anyio
async def test_failed_workflow_returns_conflict(client_for, orchestrator) -> None:
    await orchestrator.start()
    try:
        async with client_for() as client:
            created = await client.post(
                "/workflows",
                json={
                    "name": "doomed",
                    "steps": [{"id": "only", "agent_role": "dancer", "action": "interpretive_dance"}],
                },
            )
            workflow_id = created.json()["workflow_id"]
            with anyio.fail_after(5):
                executed = await client.post(f"/workflows/{workflow_id}/execute", json={})
    finally:
        await orchestrator.scheduler.stop()

    assert executed.status_code == 409
    assert executed.json()["detail"]["step_id"] == "only"
    assert orchestrator.get_workflow(workflow_id).status.value == "paused"


def test_serve_runs_app_on_configured_address(monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(main, "get_config", lambda: Config(host="0.0.0.0", port=9100))
    monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    main.serve()

    assert calls == [("agentflow.main:app", {"host": "0.0.0.0", "port": 9100})]
