"""Queue ordering and dependency gating in the task store."""
from __future__ import annotations

import pytest

from agentflow.core.errors import InvalidPriorityError
from agentflow.core.models import TaskPriority, TaskStatus
from agentflow.orchestration.task_store import PriorityTaskQueue, TaskStore


def test_priority_then_insertion_order() -> None:
    store = TaskStore()
    low = store.create("research", "low", {}, "low")
    critical = store.create("research", "critical", {}, "critical")
    medium = store.create("research", "medium", {}, TaskPriority.MEDIUM)

    assert store.queue.snapshot() == [critical.id, medium.id, low.id]


def test_fifo_within_priority() -> None:
    store = TaskStore()
    first = store.create("research", "A", {})
    second = store.create("research", "B", {})
    urgent = store.create("research", "C", {}, "high")

    assert store.queue.snapshot() == [urgent.id, first.id, second.id]
    assert store.dequeue() is urgent
    assert store.dequeue() is first
    assert store.dequeue() is second
    assert store.dequeue() is None


def test_new_task_defaults() -> None:
    store = TaskStore()
    task = store.create("research", "look around", {"q": 1})

    assert task.id.startswith("task-")
    assert task.status is TaskStatus.PENDING
    assert task.priority is TaskPriority.MEDIUM
    assert task.output is None and task.error is None
    assert task.started_at is None and task.completed_at is None
    assert store.get(task.id) is task
    assert store.get("task-unknown") is None


def test_invalid_priority_is_rejected() -> None:
    store = TaskStore()
    with pytest.raises(InvalidPriorityError):
        store.create("research", "bad", {}, "urgent")
    assert len(store) == 0


def test_unmet_dependency_keeps_task_out_of_queue() -> None:
    store = TaskStore()
    parent = store.create("research", "parent", {})
    child = store.create("research", "child", {}, dependencies=[parent.id])

    assert store.unmet_dependencies(child) == [parent.id]
    assert store.queue.snapshot() == [parent.id]
    assert child.status is TaskStatus.PENDING


def test_missing_dependency_counts_as_unmet() -> None:
    store = TaskStore()
    orphan = store.create("research", "orphan", {}, dependencies=["task-ghost"])

    assert store.unmet_dependencies(orphan) == ["task-ghost"]
    assert len(store.queue) == 0


def test_release_dependents_after_completion() -> None:
    store = TaskStore()
    first = store.create("research", "first", {})
    second = store.create("research", "second", {})
    child = store.create("research", "child", {}, "critical", dependencies=[first.id, second.id])
    store.dequeue()
    store.dequeue()

    first.status = TaskStatus.COMPLETED
    assert store.release_dependents(first.id) == []
    assert child.id not in store.queue

    second.status = TaskStatus.COMPLETED
    assert store.release_dependents(second.id) == [child.id]
    assert store.queue.snapshot() == [child.id]
    # A second notification does not enqueue the task twice.
    assert store.release_dependents(second.id) == []
    assert len(store.queue) == 1


def test_dependency_already_completed_queues_immediately() -> None:
    store = TaskStore()
    parent = store.create("research", "parent", {})
    store.dequeue()
    parent.status = TaskStatus.COMPLETED

    child = store.create("research", "child", {}, dependencies=[parent.id])
    assert store.queue.snapshot() == [child.id]


def test_requeue_goes_to_head_of_its_tier() -> None:
    store = TaskStore()
    high = store.create("research", "high", {}, "high")
    medium_a = store.create("research", "a", {})
    medium_b = store.create("research", "b", {})
    assert store.dequeue() is high
    assert store.dequeue() is medium_a

    store.requeue(medium_a.id)
    assert store.queue.snapshot() == [medium_a.id, medium_b.id]

    store.requeue(high.id)
    assert store.queue.snapshot() == [high.id, medium_a.id, medium_b.id]


def test_queue_primitives() -> None:
    queue = PriorityTaskQueue()
    assert queue.pop() is None
    assert queue.push("b", 2) == 0
    assert queue.push("c", 3) == 1
    assert queue.push("a", 0) == 0
    assert "b" in queue
    assert queue.remove("b") is True
    assert queue.remove("b") is False
    assert queue.snapshot() == ["a", "c"]
