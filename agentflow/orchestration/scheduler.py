"""Periodic dispatcher that runs queued tasks against the agent pool."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any, Dict, Optional, Set

from agentflow.core.errors import AgentsBusyError, CompletionServiceError
from agentflow.core.events import TaskEvent, TaskEventBus
from agentflow.core.models import (
    AgentInstance,
    ChatMessage,
    CompletionRequest,
    Task,
    TaskStatus,
    utcnow,
)

if TYPE_CHECKING:
    from agentflow.agents.registry import AgentRegistry
    from agentflow.config import Config
    from agentflow.orchestration.task_store import TaskStore
    from agentflow.services.completion import CompletionService

logger = logging.getLogger(__name__)


class Scheduler:
    """Pull ready tasks off the queue on a fixed tick and execute them.

    At most one task is dispatched per tick. With the default
    ``max_in_flight`` of one, a dispatched task must finish before the next
    is taken; larger values let several tasks run, one per idle agent.
    """

    def __init__(
        self,
        *,
        config: Config,
        registry: AgentRegistry,
        store: TaskStore,
        completion_service: CompletionService,
        events: Optional[TaskEventBus] = None,
    ) -> None:
        self._config = config
        self._registry = registry
        self._store = store
        self._completion = completion_service
        self.events = events if events is not None else TaskEventBus()
        self._in_flight: Set[asyncio.Task[Task]] = set()
        self._runner: Optional[asyncio.Task[None]] = None
        self._stop_event = asyncio.Event()

    @property
    def is_processing(self) -> bool:
        return bool(self._in_flight)

    @property
    def is_running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    async def start(self) -> None:
        """Start the background tick loop."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._runner = asyncio.create_task(self._run_safe())
        logger.info(
            f"Scheduler started (tick={self._config.scheduler.tick_interval}s, "
            f"max_in_flight={self._config.scheduler.max_in_flight})"
        )

    async def stop(self) -> None:
        """Stop ticking and wait for tasks already dispatched."""
        if self._runner is not None:
            self._stop_event.set()
            await self._runner
            self._runner = None
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)
        logger.info("Scheduler stopped")

    def halt(self, reason: str) -> None:
        """Stop ticking without waiting and fail every unfinished task.

        Dispatched executions are cancelled. Anyone waiting on a task receives
        its failure event, so no waiter outlives the scheduler.
        """
        self._stop_event.set()
        if self._runner is not None:
            self._runner.cancel()
            self._runner = None
        for handle in list(self._in_flight):
            handle.cancel()
        for task in self._store.list_all():
            if not task.status.is_terminal:
                self._mark_failed(task, reason)
        logger.info(f"Scheduler halted: {reason}")

    async def _run_safe(self) -> None:
        interval = self._config.scheduler.tick_interval
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception:  # noqa: BLE001
                logger.exception("Scheduler tick failed")
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue

    def tick(self) -> Optional[asyncio.Task[Task]]:
        """Dispatch at most one ready task; return its execution handle."""
        if len(self._in_flight) >= self._config.scheduler.max_in_flight:
            return None
        task = self._store.dequeue()
        if task is None:
            return None

        handle = asyncio.create_task(self._process(task), name=f"execute:{task.id}")
        self._in_flight.add(handle)
        handle.add_done_callback(self._in_flight.discard)
        return handle

    async def process_next_task(self) -> Optional[Task]:
        """Dispatch the next ready task and wait for it to settle."""
        handle = self.tick()
        if handle is None:
            return None
        return await handle

    async def _process(self, task: Task) -> Task:
        """Execute one task, turning any failure into task state."""
        try:
            await self.execute_task(task)
        except AgentsBusyError as exc:
            if task.status is TaskStatus.PENDING and self._config.scheduler.requeue_when_busy:
                logger.info(f"Task {task.id} requeued: {exc}")
                self._store.requeue(task.id)
            else:
                self._fail_unassigned(task, exc)
        except Exception as exc:  # noqa: BLE001
            logger.error(f"Task execution failed: {task.id}: {exc}")
            if task.status is TaskStatus.PENDING:
                self._fail_unassigned(task, exc)
        return task

    def _fail_unassigned(self, task: Task, exc: Exception) -> None:
        # The task never reached an agent, so it skips in_progress.
        self._mark_failed(task, str(exc))

    def _mark_failed(self, task: Task, error: str) -> None:
        task.status = TaskStatus.FAILED
        task.error = error
        task.completed_at = utcnow()
        self.events.publish(TaskEvent(task.id, task.status, task.error))

    async def execute_task(self, task: Task) -> Dict[str, Any]:
        """Run ``task`` on the best available agent and record the outcome.

        Raises whatever prevented completion; the task and agent state are
        already updated when the exception propagates.
        """
        if task.status is not TaskStatus.PENDING:
            raise RuntimeError(f"Task {task.id} is {task.status.value}, expected pending")

        logger.info(f"Executing task {task.id}: {task.description}")
        agent = self._registry.select(task.type)
        self._registry.assign(agent, task.id)

        task.status = TaskStatus.IN_PROGRESS
        task.assigned_agent = agent.id
        task.started_at = utcnow()

        try:
            output = await self._execute_with_agent(agent, task)
        except Exception as exc:
            task.status = TaskStatus.FAILED
            task.error = str(exc) or exc.__class__.__name__
            task.completed_at = utcnow()
            self._registry.record_failure(agent)
            logger.error(f"Task {task.id} failed on {agent.id}: {task.error}")
            self.events.publish(TaskEvent(task.id, task.status, task.error))
            raise
        else:
            task.output = output
            task.status = TaskStatus.COMPLETED
            task.completed_at = utcnow()
            elapsed_ms = (task.completed_at - task.started_at).total_seconds() * 1000
            self._registry.record_success(agent, elapsed_ms)
            logger.info(f"Task {task.id} completed successfully in {elapsed_ms:.0f}ms")

            released = self._store.release_dependents(task.id)
            if released:
                logger.info(f"Task {task.id} unblocked: {', '.join(released)}")
            self.events.publish(TaskEvent(task.id, task.status))
            return output
        finally:
            self._registry.release(agent)

    def build_request(self, agent: AgentInstance, task: Task) -> CompletionRequest:
        role = agent.role
        defaults = self._config.generation
        user_prompt = (
            f"Task: {task.description}\n\n"
            f"Input: {json.dumps(task.input, indent=2, default=str)}\n\n"
            "Please complete this task and provide a detailed response."
        )
        return CompletionRequest(
            model=role.preferred_model or defaults.default_model,
            messages=[
                ChatMessage(role="system", content=role.system_prompt),
                ChatMessage(role="user", content=user_prompt),
            ],
            temperature=(
                role.temperature if role.temperature is not None else defaults.default_temperature
            ),
            max_tokens=role.max_tokens or defaults.default_max_tokens,
        )

    async def _execute_with_agent(self, agent: AgentInstance, task: Task) -> Dict[str, Any]:
        request = self.build_request(agent, task)
        timeout = self._config.scheduler.completion_timeout
        try:
            if timeout is None:
                response = await self._completion.complete(request)
            else:
                response = await asyncio.wait_for(self._completion.complete(request), timeout)
        except asyncio.TimeoutError as exc:
            raise CompletionServiceError(
                f"Completion for task {task.id} timed out after {timeout}s"
            ) from exc

        if response is None or not response.content:
            raise CompletionServiceError("No response from model")

        return {
            "content": response.content,
            "model": response.model,
            "usage": {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            },
        }
