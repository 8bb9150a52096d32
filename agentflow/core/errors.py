"""Exceptions raised by the orchestration core."""
from __future__ import annotations

from typing import Any


class OrchestrationError(RuntimeError):
    """Base class for scheduling and workflow failures."""


class InvalidPriorityError(ValueError):
    def __init__(self, value: Any) -> None:
        super().__init__(
            f"Invalid task priority {value!r}; expected one of critical, high, medium, low"
        )
        self.value = value


class NoEligibleAgentError(OrchestrationError):
    """No agent in the pool declares a capability the task type requires."""

    def __init__(self, task_type: str) -> None:
        super().__init__(f"No suitable agent found for task: {task_type}")
        self.task_type = task_type


class AgentsBusyError(OrchestrationError):
    """Capable agents exist but none of them is idle right now."""

    def __init__(self, task_type: str) -> None:
        super().__init__(f"All agents able to handle '{task_type}' are busy")
        self.task_type = task_type


class CompletionServiceError(OrchestrationError):
    """The completion service failed or returned nothing usable."""


class WorkflowNotFoundError(OrchestrationError, KeyError):
    def __init__(self, workflow_id: str) -> None:
        OrchestrationError.__init__(self, f"Workflow not found: {workflow_id}")
        self.workflow_id = workflow_id

    def __str__(self) -> str:
        return self.args[0]


class WorkflowStepError(OrchestrationError):
    """A workflow step's task ended in the failed state."""

    def __init__(self, workflow_id: str, step_id: str, task_id: str, reason: str) -> None:
        super().__init__(f"Workflow step failed: {step_id} ({reason})")
        self.workflow_id = workflow_id
        self.step_id = step_id
        self.task_id = task_id
        self.reason = reason
