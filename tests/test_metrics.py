"""System metrics recomputed from live state."""
from __future__ import annotations

import asyncio

import pytest

from agentflow.core.models import WorkflowStep


def test_fresh_system_metrics(orchestrator) -> None:
    metrics = orchestrator.get_system_metrics().to_dict()

    assert metrics == {
        "agents": {"total": 11, "idle": 11, "busy": 0, "error": 0},
        "tasks": {"total": 0, "pending": 0, "in_progress": 0, "completed": 0, "failed": 0},
        "queue": {"length": 0, "processing": False},
        "workflows": {"total": 0, "draft": 0, "active": 0, "paused": 0, "completed": 0},
    }


@pytest.mark.anyio
async def test_metrics_track_task_outcomes(make_service, make_orchestrator) -> None:
    service = make_service(fail_when=lambda request: "broken" in request.messages[1].content)
    orchestrator = make_orchestrator(service)
    orchestrator.create_task("research", "works", {}, "critical")
    orchestrator.create_task("research", "broken", {}, "high")
    orchestrator.create_task("research", "queued", {})
    orchestrator.create_task("research", "blocked", {}, dependencies=["task-missing"])
    orchestrator.create_workflow(
        "draft", "", [WorkflowStep(id="a", agent_role="researcher", action="research")]
    )

    before = orchestrator.get_system_metrics()
    assert before.tasks.pending == 4
    assert before.queue.length == 3

    await orchestrator.scheduler.process_next_task()
    await orchestrator.scheduler.process_next_task()

    metrics = orchestrator.get_system_metrics()
    assert metrics.tasks.total == 4
    assert metrics.tasks.completed == 1
    assert metrics.tasks.failed == 1
    assert metrics.tasks.pending == 2
    assert metrics.tasks.in_progress == 0
    assert metrics.queue.length == 1
    assert metrics.queue.processing is False
    assert metrics.agents.idle == 11
    assert metrics.workflows.total == metrics.workflows.draft == 1


@pytest.mark.anyio
async def test_metrics_report_in_flight_work(make_service, make_orchestrator) -> None:
    orchestrator = make_orchestrator(make_service(delay=0.05))
    orchestrator.create_task("research", "slow", {})

    handle = orchestrator.scheduler.tick()
    await asyncio.sleep(0)
    during = orchestrator.get_system_metrics()
    await handle

    assert during.queue.processing is True
    assert during.agents.busy == 1
    assert during.tasks.in_progress == 1
    assert orchestrator.get_system_metrics().agents.busy == 0
