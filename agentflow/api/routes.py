"""HTTP API exposing the agent pool and system metrics."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from agentflow.core.models import AgentInstance
from agentflow.orchestration.metrics import SystemMetrics
from agentflow.orchestration.orchestrator import Orchestrator
from agentflow.runtime import get_orchestrator

router = APIRouter(tags=["agents"])


class AgentResponse(BaseModel):
    agent_id: str
    role: str
    name: str
    capabilities: List[str]
    status: str
    current_task: Optional[str]
    completed_tasks: int
    failed_tasks: int
    average_execution_time: float
    last_activity: Optional[datetime]

    @classmethod
    def from_instance(cls, agent: AgentInstance) -> "AgentResponse":
        return cls(
            agent_id=agent.id,
            role=agent.role.id,
            name=agent.role.name,
            capabilities=list(agent.role.capabilities),
            status=agent.status.value,
            current_task=agent.current_task,
            completed_tasks=agent.completed_tasks,
            failed_tasks=agent.failed_tasks,
            average_execution_time=agent.average_execution_time,
            last_activity=agent.last_activity,
        )


class AgentCountsModel(BaseModel):
    total: int
    idle: int
    busy: int
    error: int


class TaskCountsModel(BaseModel):
    total: int
    pending: int
    in_progress: int
    completed: int
    failed: int


class QueueStateModel(BaseModel):
    length: int
    processing: bool


class WorkflowCountsModel(BaseModel):
    total: int
    draft: int
    active: int
    paused: int
    completed: int


class MetricsResponse(BaseModel):
    agents: AgentCountsModel
    tasks: TaskCountsModel
    queue: QueueStateModel
    workflows: WorkflowCountsModel

    @classmethod
    def from_metrics(cls, metrics: SystemMetrics) -> "MetricsResponse":
        return cls.model_validate(metrics.to_dict())


@router.get("/agents", response_model=List[AgentResponse])
async def list_agents(orchestrator: Orchestrator = Depends(get_orchestrator)) -> List[AgentResponse]:
    return [AgentResponse.from_instance(agent) for agent in orchestrator.get_all_agents()]


@router.get("/agents/{agent_id}", response_model=AgentResponse)
async def get_agent(agent_id: str, orchestrator: Orchestrator = Depends(get_orchestrator)) -> AgentResponse:
    agent = orchestrator.get_agent_status(agent_id)
    if agent is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown agent")
    return AgentResponse.from_instance(agent)


@router.get("/metrics", response_model=MetricsResponse, tags=["metrics"])
async def get_metrics(orchestrator: Orchestrator = Depends(get_orchestrator)) -> MetricsResponse:
    return MetricsResponse.from_metrics(orchestrator.get_system_metrics())
