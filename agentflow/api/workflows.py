"""Workflow definition and execution routes."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from agentflow.core.errors import WorkflowNotFoundError, WorkflowStepError
from agentflow.core.models import Workflow, WorkflowStep
from agentflow.orchestration.orchestrator import Orchestrator
from agentflow.runtime import get_orchestrator

router = APIRouter(prefix="/workflows", tags=["workflows"])


class WorkflowStepModel(BaseModel):
    id: str
    agent_role: str
    action: str = Field(..., description="Task type each step materializes as")
    input: Optional[Dict[str, Any]] = None
    condition: Optional[str] = None
    on_success: Optional[str] = None
    on_failure: Optional[str] = None

    def to_step(self) -> WorkflowStep:
        return WorkflowStep(
            id=self.id,
            agent_role=self.agent_role,
            action=self.action,
            input=self.input,
            condition=self.condition,
            on_success=self.on_success,
            on_failure=self.on_failure,
        )


class WorkflowCreateRequest(BaseModel):
    name: str
    description: str = ""
    steps: List[WorkflowStepModel]


class WorkflowExecuteRequest(BaseModel):
    variables: Dict[str, Any] = Field(default_factory=dict)


class WorkflowResponse(BaseModel):
    workflow_id: str
    name: str
    description: str
    status: str
    steps: List[WorkflowStepModel]
    variables: Dict[str, Any]

    @classmethod
    def from_workflow(cls, workflow: Workflow) -> "WorkflowResponse":
        return cls(
            workflow_id=workflow.id,
            name=workflow.name,
            description=workflow.description,
            status=workflow.status.value,
            steps=[
                WorkflowStepModel(
                    id=step.id,
                    agent_role=step.agent_role,
                    action=step.action,
                    input=step.input,
                    condition=step.condition,
                    on_success=step.on_success,
                    on_failure=step.on_failure,
                )
                for step in workflow.steps
            ],
            variables=workflow.variables,
        )


@router.post("", response_model=WorkflowResponse, status_code=status.HTTP_201_CREATED)
async def create_workflow(
    request: WorkflowCreateRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> WorkflowResponse:
    try:
        workflow_id = orchestrator.create_workflow(
            request.name,
            request.description,
            [step.to_step() for step in request.steps],
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return WorkflowResponse.from_workflow(orchestrator.get_workflow(workflow_id))


@router.get("", response_model=List[WorkflowResponse])
async def list_workflows(orchestrator: Orchestrator = Depends(get_orchestrator)) -> List[WorkflowResponse]:
    return [WorkflowResponse.from_workflow(wf) for wf in orchestrator.get_all_workflows()]


@router.get("/{workflow_id}", response_model=WorkflowResponse)
async def get_workflow(
    workflow_id: str, orchestrator: Orchestrator = Depends(get_orchestrator)
) -> WorkflowResponse:
    workflow = orchestrator.get_workflow(workflow_id)
    if workflow is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown workflow")
    return WorkflowResponse.from_workflow(workflow)


@router.post("/{workflow_id}/execute", response_model=WorkflowResponse)
async def execute_workflow(
    workflow_id: str,
    request: WorkflowExecuteRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> WorkflowResponse:
    """Run the workflow to completion; the call returns once every step is done."""
    try:
        workflow = await orchestrator.execute_workflow(workflow_id, request.variables)
    except WorkflowNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except WorkflowStepError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(exc), "step_id": exc.step_id, "task_id": exc.task_id},
        ) from exc
    return WorkflowResponse.from_workflow(workflow)
