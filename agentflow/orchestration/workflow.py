"""Sequential workflow execution on top of the task scheduler."""
from __future__ import annotations

import copy
import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from agentflow.core.errors import WorkflowNotFoundError, WorkflowStepError
from agentflow.core.events import TaskEventBus
from agentflow.core.models import (
    Task,
    TaskPriority,
    TaskStatus,
    Workflow,
    WorkflowStatus,
    WorkflowStep,
)
from agentflow.orchestration.task_store import TaskStore, new_id

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$\{([_a-zA-Z][_a-zA-Z0-9]*)\}")


def output_key(step_id: str) -> str:
    """Variable name under which a completed step's output is stored."""
    return f"step_{step_id}_output"


def render_input(value: Any, variables: Mapping[str, Any]) -> Any:
    """Resolve ``${name}`` placeholders against workflow variables.

    A string made of a single placeholder becomes the referenced value itself;
    placeholders embedded in longer strings are substituted as text. Unknown
    names and any other ``$`` text are left as written.
    """
    if isinstance(value, str):
        match = _PLACEHOLDER.fullmatch(value)
        if match and match.group(1) in variables:
            return copy.deepcopy(variables[match.group(1)])

        def _substitute(found: re.Match) -> str:
            name = found.group(1)
            return str(variables[name]) if name in variables else found.group(0)

        return _PLACEHOLDER.sub(_substitute, value)
    if isinstance(value, dict):
        return {key: render_input(item, variables) for key, item in value.items()}
    if isinstance(value, list):
        return [render_input(item, variables) for item in value]
    return value


class WorkflowEngine:
    """Run workflow steps strictly in order, one task per step."""

    def __init__(self, *, store: TaskStore, events: TaskEventBus) -> None:
        self._store = store
        self._events = events
        self._workflows: Dict[str, Workflow] = {}

    def create(self, name: str, description: str, steps: Iterable[WorkflowStep]) -> Workflow:
        steps = list(steps)
        _validate_steps(steps)
        workflow = Workflow(
            id=new_id("workflow"),
            name=name,
            description=description,
            steps=steps,
        )
        self._workflows[workflow.id] = workflow
        logger.info(f"Created workflow {workflow.id}: {name}")
        return workflow

    def get(self, workflow_id: str) -> Optional[Workflow]:
        return self._workflows.get(workflow_id)

    def list_all(self) -> List[Workflow]:
        return list(self._workflows.values())

    def clear(self) -> None:
        self._workflows.clear()

    async def execute(
        self, workflow_id: str, variables: Optional[Mapping[str, Any]] = None
    ) -> Workflow:
        """Run every step in order; raise ``WorkflowStepError`` on the first failure."""
        workflow = self._workflows.get(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(workflow_id)

        workflow.status = WorkflowStatus.ACTIVE
        workflow.variables = dict(variables or {})
        logger.info(f"Executing workflow {workflow_id}: {workflow.name}")

        try:
            for step in workflow.steps:
                await self._execute_step(workflow, step)
        except Exception:
            workflow.status = WorkflowStatus.PAUSED
            logger.exception(f"Workflow {workflow_id} failed")
            raise

        workflow.status = WorkflowStatus.COMPLETED
        logger.info(f"Workflow {workflow_id} completed successfully")
        return workflow

    async def _execute_step(self, workflow: Workflow, step: WorkflowStep) -> None:
        step_input = render_input(step.input or {}, workflow.variables)
        task_input = {**step_input, "workflow_variables": copy.deepcopy(workflow.variables)}

        task = self._store.create(
            step.action,
            f"Workflow {workflow.name} - Step {step.id}",
            task_input,
            TaskPriority.HIGH,
            metadata={"workflow_id": workflow.id, "step_id": step.id},
        )
        await self.wait_for_task(task)

        if task.status is TaskStatus.FAILED:
            raise WorkflowStepError(workflow.id, step.id, task.id, task.error or "Task failed")

        if task.output is not None:
            workflow.variables[output_key(step.id)] = task.output

    async def wait_for_task(self, task: Task) -> Task:
        """Block until the scheduler reports ``task`` completed or failed."""
        async with self._events.subscribe(task.id) as inbox:
            while not task.status.is_terminal:
                await inbox.get()
        return task


def _validate_steps(steps: List[WorkflowStep]) -> None:
    if not steps:
        raise ValueError("A workflow needs at least one step")
    seen = set()
    for step in steps:
        if not step.id:
            raise ValueError("Workflow steps need a non-empty id")
        if not step.action:
            raise ValueError(f"Workflow step '{step.id}' has no action")
        if step.id in seen:
            raise ValueError(f"Duplicate workflow step id: {step.id}")
        seen.add(step.id)
