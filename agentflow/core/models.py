"""Core data models shared across orchestrator components."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from .errors import InvalidPriorityError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AgentStatus(str, Enum):
    """Availability of a live agent instance."""

    IDLE = "idle"
    BUSY = "busy"
    ERROR = "error"


class TaskStatus(str, Enum):
    """Lifecycle states for a task; transitions only move forward."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


class TaskPriority(str, Enum):
    """Dispatch precedence; a lower rank is dispatched first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def parse(cls, value: Union[str, TaskPriority]) -> TaskPriority:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidPriorityError(value) from None


_PRIORITY_RANK = {
    TaskPriority.CRITICAL: 0,
    TaskPriority.HIGH: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 3,
}


class WorkflowStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass(frozen=True)
class AgentRole:
    """Immutable specialist persona the agent pool is built from."""

    id: str
    name: str
    description: str
    system_prompt: str
    capabilities: Tuple[str, ...]
    preferred_model: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None

    def has_any(self, capabilities: Tuple[str, ...]) -> bool:
        return any(cap in self.capabilities for cap in capabilities)


@dataclass(slots=True)
class AgentInstance:
    """Live worker bound to a role; mutated only by the scheduler."""

    id: str
    role: AgentRole
    status: AgentStatus = AgentStatus.IDLE
    current_task: Optional[str] = None
    completed_tasks: int = 0
    failed_tasks: int = 0
    average_execution_time: float = 0.0
    last_activity: Optional[datetime] = None


@dataclass(slots=True)
class Task:
    """Unit of work routed to an agent by its ``type``."""

    id: str
    type: str
    description: str
    priority: TaskPriority
    input: Any
    status: TaskStatus = TaskStatus.PENDING
    output: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    assigned_agent: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    dependencies: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None


@dataclass(slots=True)
class WorkflowStep:
    """Declarative step; ``condition``/``on_success``/``on_failure`` are not interpreted."""

    id: str
    agent_role: str
    action: str
    input: Optional[Dict[str, Any]] = None
    condition: Optional[str] = None
    on_success: Optional[str] = None
    on_failure: Optional[str] = None


@dataclass(slots=True)
class Workflow:
    id: str
    name: str
    description: str
    steps: List[WorkflowStep]
    status: WorkflowStatus = WorkflowStatus.DRAFT
    variables: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ChatMessage:
    role: str
    content: str


@dataclass(slots=True)
class CompletionRequest:
    """Payload handed to the completion service."""

    model: str
    messages: List[ChatMessage]
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


@dataclass(slots=True)
class CompletionUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass(slots=True)
class CompletionResponse:
    content: str
    model: str
    usage: CompletionUsage = field(default_factory=CompletionUsage)
