"""Point-in-time counts over the agent pool, task store and workflows."""
from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable

from agentflow.core.models import (
    AgentInstance,
    AgentStatus,
    Task,
    TaskStatus,
    Workflow,
    WorkflowStatus,
)


@dataclass(slots=True)
class AgentCounts:
    total: int
    idle: int
    busy: int
    error: int


@dataclass(slots=True)
class TaskCounts:
    total: int
    pending: int
    in_progress: int
    completed: int
    failed: int


@dataclass(slots=True)
class QueueState:
    length: int
    processing: bool


@dataclass(slots=True)
class WorkflowCounts:
    total: int
    draft: int
    active: int
    paused: int
    completed: int


@dataclass(slots=True)
class SystemMetrics:
    agents: AgentCounts
    tasks: TaskCounts
    queue: QueueState
    workflows: WorkflowCounts

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def collect_metrics(
    agents: Iterable[AgentInstance],
    tasks: Iterable[Task],
    workflows: Iterable[Workflow],
    *,
    queue_length: int,
    processing: bool,
) -> SystemMetrics:
    """Recount everything from the current state; nothing is cached."""
    agent_states = Counter(agent.status for agent in agents)
    task_states = Counter(task.status for task in tasks)
    workflow_states = Counter(workflow.status for workflow in workflows)

    return SystemMetrics(
        agents=AgentCounts(
            total=sum(agent_states.values()),
            idle=agent_states[AgentStatus.IDLE],
            busy=agent_states[AgentStatus.BUSY],
            error=agent_states[AgentStatus.ERROR],
        ),
        tasks=TaskCounts(
            total=sum(task_states.values()),
            pending=task_states[TaskStatus.PENDING],
            in_progress=task_states[TaskStatus.IN_PROGRESS],
            completed=task_states[TaskStatus.COMPLETED],
            failed=task_states[TaskStatus.FAILED],
        ),
        queue=QueueState(length=queue_length, processing=processing),
        workflows=WorkflowCounts(
            total=sum(workflow_states.values()),
            draft=workflow_states[WorkflowStatus.DRAFT],
            active=workflow_states[WorkflowStatus.ACTIVE],
            paused=workflow_states[WorkflowStatus.PAUSED],
            completed=workflow_states[WorkflowStatus.COMPLETED],
        ),
    )
