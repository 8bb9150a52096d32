"""Live agent pool, capability matching and performance scoring."""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from agentflow.agents.catalog import DEFAULT_ROLES
from agentflow.core.errors import AgentsBusyError, NoEligibleAgentError
from agentflow.core.models import AgentInstance, AgentRole, AgentStatus, utcnow

if TYPE_CHECKING:
    from agentflow.config import Config

logger = logging.getLogger(__name__)

SUCCESS_WEIGHT = 0.7
SPEED_WEIGHT = 0.3


class AgentRegistry:
    """Holds one agent instance per catalog role for the process lifetime."""

    def __init__(self, config: Config, roles: Sequence[AgentRole] = DEFAULT_ROLES) -> None:
        self._config = config
        self._roles = tuple(roles)
        self._agents: Dict[str, AgentInstance] = {}

    @property
    def roles(self) -> Sequence[AgentRole]:
        return self._roles

    def initialize(self) -> List[AgentInstance]:
        """Create an idle instance for every role; repeated calls are no-ops."""
        if self._agents:
            return self.list_all()

        logger.info("Initializing agent instances...")
        created_ms = int(time.time() * 1000)
        for role in self._roles:
            agent = AgentInstance(id=f"{role.id}-{created_ms}", role=role)
            self._agents[agent.id] = agent
        logger.info(f"Initialized {len(self._agents)} agent instances")
        return self.list_all()

    def get(self, agent_id: str) -> Optional[AgentInstance]:
        return self._agents.get(agent_id)

    def list_all(self) -> List[AgentInstance]:
        return list(self._agents.values())

    def clear(self) -> None:
        self._agents.clear()

    def can_handle(self, agent: AgentInstance, task_type: str) -> bool:
        """True when the agent's role shares a capability with the task type."""
        return agent.role.has_any(self._config.required_capabilities(task_type))

    def eligible(self, task_type: str) -> List[AgentInstance]:
        """Every agent able to run ``task_type``, whatever its current status."""
        return [agent for agent in self._agents.values() if self.can_handle(agent, task_type)]

    def select(self, task_type: str) -> AgentInstance:
        """Pick the idle, capable agent with the strictly highest score.

        Raises:
            NoEligibleAgentError: no agent in the pool can run ``task_type``.
            AgentsBusyError: capable agents exist but none of them is idle.
        """
        capable = self.eligible(task_type)
        if not capable:
            raise NoEligibleAgentError(task_type)

        best: Optional[AgentInstance] = None
        best_score = 0.0
        for agent in capable:
            if agent.status is not AgentStatus.IDLE:
                continue
            agent_score = score(agent)
            if best is None or agent_score > best_score:
                best, best_score = agent, agent_score

        if best is None:
            raise AgentsBusyError(task_type)
        return best

    def assign(self, agent: AgentInstance, task_id: str) -> None:
        if agent.current_task is not None:
            raise RuntimeError(
                f"Agent {agent.id} already holds task {agent.current_task}"
            )
        agent.status = AgentStatus.BUSY
        agent.current_task = task_id
        agent.last_activity = utcnow()

    def release(self, agent: AgentInstance) -> None:
        agent.status = AgentStatus.IDLE
        agent.current_task = None

    def record_success(self, agent: AgentInstance, elapsed_ms: float) -> None:
        agent.completed_tasks += 1
        n = agent.completed_tasks
        agent.average_execution_time = (agent.average_execution_time * (n - 1) + elapsed_ms) / n

    def record_failure(self, agent: AgentInstance) -> None:
        agent.failed_tasks += 1


def success_rate(agent: AgentInstance) -> float:
    attempts = agent.completed_tasks + agent.failed_tasks
    if attempts == 0:
        return 1.0
    return agent.completed_tasks / attempts


def speed_score(agent: AgentInstance) -> float:
    if agent.average_execution_time > 0:
        return 1.0 / agent.average_execution_time
    return 1.0


def score(agent: AgentInstance) -> float:
    """Weighted blend of reliability and speed; unused agents score highest."""
    return success_rate(agent) * SUCCESS_WEIGHT + speed_score(agent) * SPEED_WEIGHT
