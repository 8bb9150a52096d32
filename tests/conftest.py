"""Shared fixtures and fakes for orchestrator tests."""
from __future__ import annotations

import asyncio
from typing import Callable, List, Optional

import pytest

from agentflow.config import Config, SchedulerConfig
from agentflow.core.models import CompletionRequest, CompletionResponse, CompletionUsage
from agentflow.orchestration.orchestrator import Orchestrator


def task_description(request: CompletionRequest) -> str:
    """Pull the task description back out of the user prompt."""
    user = next(m.content for m in request.messages if m.role == "user")
    return user.split("\n", 1)[0].removeprefix("Task: ")


class ScriptedCompletionService:
    """Completion service double that records requests and fails on demand."""

    def __init__(
        self,
        *,
        fail_when: Optional[Callable[[CompletionRequest], bool]] = None,
        delay: float = 0.0,
        on_call: Optional[Callable[[CompletionRequest], None]] = None,
    ) -> None:
        self.requests: List[CompletionRequest] = []
        self.fail_when = fail_when
        self.delay = delay
        self.on_call = on_call

    @property
    def descriptions(self) -> List[str]:
        return [task_description(request) for request in self.requests]

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        self.requests.append(request)
        if self.on_call is not None:
            self.on_call(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_when is not None and self.fail_when(request):
            raise RuntimeError("provider exploded")
        return CompletionResponse(
            content=f"done: {task_description(request)}",
            model=request.model,
            usage=CompletionUsage(prompt_tokens=10, completion_tokens=5, total_tokens=15),
        )


def make_config(**scheduler: object) -> Config:
    scheduler.setdefault("tick_interval", 0.01)
    return Config(scheduler=SchedulerConfig(**scheduler))


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def make_service() -> Callable[..., ScriptedCompletionService]:
    return ScriptedCompletionService


@pytest.fixture
def make_orchestrator() -> Callable[..., Orchestrator]:
    """Build an orchestrator; keyword arguments go to ``SchedulerConfig``."""

    def _build(service: Optional[ScriptedCompletionService] = None, **scheduler: object) -> Orchestrator:
        return Orchestrator(
            config=make_config(**scheduler),
            completion_service=service or ScriptedCompletionService(),
        )

    return _build


@pytest.fixture
def service() -> ScriptedCompletionService:
    return ScriptedCompletionService()


@pytest.fixture
def orchestrator(service: ScriptedCompletionService) -> Orchestrator:
    return Orchestrator(config=make_config(), completion_service=service)
