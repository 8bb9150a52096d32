"""Task bookkeeping: the id -> task map and the dispatch queue."""
from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from agentflow.core.models import Task, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)


def new_id(prefix: str) -> str:
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


class PriorityTaskQueue:
    """Task ids ordered by priority rank, first-in-first-out within a rank."""

    def __init__(self) -> None:
        self._entries: List[Tuple[int, str]] = []

    def push(self, task_id: str, rank: int) -> int:
        """Insert behind every entry of equal or higher precedence."""
        index = next(
            (i for i, (queued_rank, _) in enumerate(self._entries) if queued_rank > rank),
            len(self._entries),
        )
        self._entries.insert(index, (rank, task_id))
        return index

    def push_front(self, task_id: str, rank: int) -> int:
        """Insert ahead of the other entries sharing ``rank``."""
        index = next(
            (i for i, (queued_rank, _) in enumerate(self._entries) if queued_rank >= rank),
            len(self._entries),
        )
        self._entries.insert(index, (rank, task_id))
        return index

    def pop(self) -> Optional[str]:
        if not self._entries:
            return None
        return self._entries.pop(0)[1]

    def remove(self, task_id: str) -> bool:
        for i, (_, queued_id) in enumerate(self._entries):
            if queued_id == task_id:
                del self._entries[i]
                return True
        return False

    def clear(self) -> None:
        self._entries.clear()

    def snapshot(self) -> List[str]:
        return [task_id for _, task_id in self._entries]

    def __contains__(self, task_id: object) -> bool:
        return any(queued_id == task_id for _, queued_id in self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class TaskStore:
    """In-process record of every task ever created, plus the ready queue.

    Tasks are never removed here; status and ``created_at`` are enough for a
    collaborator to prune old finished tasks.
    """

    def __init__(self, queue: Optional[PriorityTaskQueue] = None) -> None:
        self._tasks: Dict[str, Task] = {}
        self.queue = queue if queue is not None else PriorityTaskQueue()

    def create(
        self,
        task_type: str,
        description: str,
        input: Any,
        priority: Union[str, TaskPriority] = TaskPriority.MEDIUM,
        dependencies: Optional[Iterable[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Task:
        """Record a new pending task and queue it if its dependencies are met."""
        task = Task(
            id=new_id("task"),
            type=task_type,
            description=description,
            priority=TaskPriority.parse(priority),
            input=input,
            dependencies=list(dependencies) if dependencies is not None else None,
            metadata=dict(metadata) if metadata is not None else None,
        )
        self._tasks[task.id] = task
        self.enqueue(task.id)
        logger.info(f"Created task {task.id}: {description}")
        return task

    def get(self, task_id: str) -> Optional[Task]:
        return self._tasks.get(task_id)

    def list_all(self) -> List[Task]:
        return list(self._tasks.values())

    def unmet_dependencies(self, task: Task) -> List[str]:
        """Dependency ids that are missing or not yet completed."""
        if not task.dependencies:
            return []
        unmet = []
        for dep_id in task.dependencies:
            dep = self._tasks.get(dep_id)
            if dep is None or dep.status is not TaskStatus.COMPLETED:
                unmet.append(dep_id)
        return unmet

    def enqueue(self, task_id: str) -> bool:
        """Queue a pending task whose dependencies are all completed.

        Returns ``True`` when the task entered the queue.
        """
        task = self._tasks.get(task_id)
        if task is None or task.status is not TaskStatus.PENDING or task_id in self.queue:
            return False

        unmet = self.unmet_dependencies(task)
        if unmet:
            logger.info(f"Task {task_id} waiting for dependencies: {', '.join(unmet)}")
            return False

        self.queue.push(task_id, task.priority.rank)
        return True

    def requeue(self, task_id: str) -> None:
        """Put a task that could not be placed back at the head of its tier."""
        task = self._tasks[task_id]
        self.queue.push_front(task_id, task.priority.rank)

    def dequeue(self) -> Optional[Task]:
        """Pop the next ready task, skipping ids that no longer resolve."""
        while True:
            task_id = self.queue.pop()
            if task_id is None:
                return None
            task = self._tasks.get(task_id)
            if task is not None:
                return task
            logger.warning(f"Dropping unknown task id {task_id} from queue")

    def release_dependents(self, completed_id: str) -> List[str]:
        """Re-check pending tasks waiting on ``completed_id``; return those queued."""
        released = []
        for task in list(self._tasks.values()):
            if (
                task.status is TaskStatus.PENDING
                and task.dependencies
                and completed_id in task.dependencies
                and self.enqueue(task.id)
            ):
                released.append(task.id)
        return released

    def clear(self) -> None:
        self._tasks.clear()
        self.queue.clear()

    def __len__(self) -> int:
        return len(self._tasks)
