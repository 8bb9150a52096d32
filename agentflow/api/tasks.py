"""Task submission and lookup routes."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from agentflow.core.errors import InvalidPriorityError
from agentflow.core.models import Task, TaskPriority
from agentflow.orchestration.orchestrator import Orchestrator
from agentflow.runtime import get_orchestrator

router = APIRouter(prefix="/tasks", tags=["tasks"])


class TaskCreateRequest(BaseModel):
    type: str = Field(..., description="Task type used to route to capable agents")
    description: str = Field(..., description="Human readable summary of the work")
    input: Any = Field(default=None, description="Arbitrary payload handed to the agent")
    priority: str = Field(default=TaskPriority.MEDIUM.value)
    dependencies: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None


class TaskCreatedResponse(BaseModel):
    task_id: str


class TaskResponse(BaseModel):
    task_id: str
    type: str
    description: str
    priority: str
    status: str
    input: Any
    output: Optional[Dict[str, Any]]
    error: Optional[str]
    assigned_agent: Optional[str]
    created_at: datetime
    started_at: Optional[datetime]
    completed_at: Optional[datetime]
    dependencies: Optional[List[str]]
    metadata: Optional[Dict[str, Any]]

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        return cls(
            task_id=task.id,
            type=task.type,
            description=task.description,
            priority=task.priority.value,
            status=task.status.value,
            input=task.input,
            output=task.output,
            error=task.error,
            assigned_agent=task.assigned_agent,
            created_at=task.created_at,
            started_at=task.started_at,
            completed_at=task.completed_at,
            dependencies=task.dependencies,
            metadata=task.metadata,
        )


@router.post("", response_model=TaskCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    request: TaskCreateRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> TaskCreatedResponse:
    try:
        task_id = orchestrator.create_task(
            request.type,
            request.description,
            request.input,
            request.priority,
            request.dependencies,
            request.metadata,
        )
    except InvalidPriorityError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return TaskCreatedResponse(task_id=task_id)


@router.get("", response_model=List[TaskResponse])
async def list_tasks(orchestrator: Orchestrator = Depends(get_orchestrator)) -> List[TaskResponse]:
    return [TaskResponse.from_task(task) for task in orchestrator.get_all_tasks()]


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, orchestrator: Orchestrator = Depends(get_orchestrator)) -> TaskResponse:
    task = orchestrator.get_task_status(task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown task")
    return TaskResponse.from_task(task)
