"""In-memory bus carrying task lifecycle notifications."""
from __future__ import annotations

import asyncio
from collections import defaultdict
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Dict, List, Optional

from .models import TaskStatus


@dataclass(slots=True)
class TaskEvent:
    """Emitted by the scheduler whenever a task reaches a terminal state."""

    task_id: str
    status: TaskStatus
    error: Optional[str] = None


class TaskEventBus:
    """Fan task events out to per-task mailboxes."""

    def __init__(self) -> None:
        self._mailboxes: Dict[str, List[asyncio.Queue[TaskEvent]]] = defaultdict(list)

    def publish(self, event: TaskEvent) -> None:
        """Deliver ``event`` to every subscriber of its task."""
        for queue in list(self._mailboxes.get(event.task_id, ())):
            queue.put_nowait(event)

    def subscriber_count(self, task_id: str) -> int:
        return len(self._mailboxes.get(task_id, ()))

    @asynccontextmanager
    async def subscribe(self, task_id: str) -> AsyncIterator[asyncio.Queue[TaskEvent]]:
        """Context manager yielding a mailbox for one task's events."""
        queue: asyncio.Queue[TaskEvent] = asyncio.Queue()
        self._mailboxes[task_id].append(queue)
        try:
            yield queue
        finally:
            queues = self._mailboxes.get(task_id)
            if queues is not None:
                queues.remove(queue)
                if not queues:
                    del self._mailboxes[task_id]
