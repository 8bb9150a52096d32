"""Orchestrator composing the agent pool, task scheduler and workflow engine."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from agentflow.agents.catalog import DEFAULT_ROLES
from agentflow.agents.registry import AgentRegistry
from agentflow.config import Config
from agentflow.core.events import TaskEventBus
from agentflow.core.models import (
    AgentInstance,
    AgentRole,
    Task,
    TaskPriority,
    Workflow,
    WorkflowStep,
)
from agentflow.orchestration.metrics import SystemMetrics, collect_metrics
from agentflow.orchestration.scheduler import Scheduler
from agentflow.orchestration.task_store import TaskStore
from agentflow.orchestration.workflow import WorkflowEngine
from agentflow.services.completion import CompletionService

logger = logging.getLogger(__name__)


class Orchestrator:
    """Public entry point for creating tasks and workflows and reading their state."""

    def __init__(
        self,
        *,
        config: Config,
        completion_service: CompletionService,
        roles: Sequence[AgentRole] = DEFAULT_ROLES,
    ) -> None:
        self.config = config
        self.registry = AgentRegistry(config, roles)
        self.store = TaskStore()
        self.events = TaskEventBus()
        self.scheduler = Scheduler(
            config=config,
            registry=self.registry,
            store=self.store,
            completion_service=completion_service,
            events=self.events,
        )
        self.workflows = WorkflowEngine(store=self.store, events=self.events)
        self.registry.initialize()

    async def start(self) -> None:
        await self.scheduler.start()

    async def shutdown(self) -> None:
        """Stop the scheduler, then drop every agent, task and workflow."""
        await self.scheduler.stop()
        self.dispose()

    def dispose(self) -> None:
        """Halt the scheduler, fail unfinished tasks and forget all state."""
        self.scheduler.halt("Orchestrator disposed")
        self.registry.clear()
        self.store.clear()
        self.workflows.clear()
        logger.info("Agent orchestrator disposed")

    # Tasks

    def create_task(
        self,
        task_type: str,
        description: str,
        input: Any,
        priority: Union[str, TaskPriority] = TaskPriority.MEDIUM,
        dependencies: Optional[Iterable[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        task = self.store.create(task_type, description, input, priority, dependencies, metadata)
        return task.id

    def get_task_status(self, task_id: str) -> Optional[Task]:
        return self.store.get(task_id)

    def get_all_tasks(self) -> List[Task]:
        return self.store.list_all()

    async def wait_for_task(self, task_id: str) -> Optional[Task]:
        """Wait until a task completes or fails; ``None`` for unknown ids."""
        task = self.store.get(task_id)
        if task is None:
            return None
        return await self.workflows.wait_for_task(task)

    # Agents

    def get_agent_status(self, agent_id: str) -> Optional[AgentInstance]:
        return self.registry.get(agent_id)

    def get_all_agents(self) -> List[AgentInstance]:
        return self.registry.list_all()

    # Workflows

    def create_workflow(
        self, name: str, description: str, steps: Iterable[WorkflowStep]
    ) -> str:
        return self.workflows.create(name, description, steps).id

    async def execute_workflow(
        self, workflow_id: str, variables: Optional[Mapping[str, Any]] = None
    ) -> Workflow:
        return await self.workflows.execute(workflow_id, variables)

    def get_workflow(self, workflow_id: str) -> Optional[Workflow]:
        return self.workflows.get(workflow_id)

    def get_all_workflows(self) -> List[Workflow]:
        return self.workflows.list_all()

    # Metrics

    def get_system_metrics(self) -> SystemMetrics:
        return collect_metrics(
            self.registry.list_all(),
            self.store.list_all(),
            self.workflows.list_all(),
            queue_length=len(self.store.queue),
            processing=self.scheduler.is_processing,
        )

    # Ready-made jobs

    async def create_course(self, requirements: Mapping[str, Any]) -> str:
        """Build and run the nine-step course creation workflow."""
        logger.info("Starting comprehensive course creation workflow")
        workflow_id = self.create_workflow(
            "Comprehensive Course Creation",
            "End-to-end course development workflow",
            course_creation_steps(requirements),
        )
        await self.execute_workflow(workflow_id, {"course_requirements": dict(requirements)})
        return workflow_id

    def create_instant_course(self, topic: str, target_audience: str) -> str:
        logger.info(f"Creating instant course: {topic}")
        return self.create_task(
            "course_creation",
            f"Create instant course: {topic}",
            {"topic": topic, "target_audience": target_audience, "mode": "instant"},
            TaskPriority.CRITICAL,
        )

    def optimize_revenue(self, business_data: Any) -> str:
        logger.info("Starting revenue optimization workflow")
        return self.create_task(
            "business_strategy",
            "Comprehensive revenue optimization analysis",
            {"business_data": business_data},
            TaskPriority.HIGH,
        )

    def conduct_market_research(self, topic: str, competitors: Sequence[str]) -> str:
        logger.info(f"Conducting market research for: {topic}")
        return self.create_task(
            "market_research",
            f"Market research and competitive analysis: {topic}",
            {"topic": topic, "competitors": list(competitors)},
            TaskPriority.MEDIUM,
        )

    def analyze_data(self, dataset: Any, analysis_type: str) -> str:
        logger.info(f"Starting data analysis: {analysis_type}")
        return self.create_task(
            "data_analysis",
            f"Data analysis: {analysis_type}",
            {"dataset": dataset, "analysis_type": analysis_type},
            TaskPriority.MEDIUM,
        )


def course_creation_steps(requirements: Mapping[str, Any]) -> List[WorkflowStep]:
    requirements = dict(requirements)
    return [
        WorkflowStep(
            id="business_analysis",
            agent_role="revenue",
            action="business_strategy",
            input={"requirements": requirements},
        ),
        WorkflowStep(
            id="market_research",
            agent_role="researcher",
            action="market_research",
            input={
                "topic": requirements.get("topic"),
                "target_audience": requirements.get("target_audience"),
            },
        ),
        WorkflowStep(
            id="curriculum_design",
            agent_role="course_creator",
            action="course_creation",
            input={"requirements": requirements},
        ),
        WorkflowStep(
            id="content_generation",
            agent_role="course_creator",
            action="course_content",
            input={"curriculum": "${step_curriculum_design_output}"},
        ),
        WorkflowStep(
            id="assessment_design",
            agent_role="course_creator",
            action="course_assessment",
            input={"curriculum": "${step_curriculum_design_output}"},
        ),
        WorkflowStep(
            id="multimedia_production",
            agent_role="designer",
            action="ui_design",
            input={"content": "${step_content_generation_output}"},
        ),
        WorkflowStep(
            id="platform_implementation",
            agent_role="builder",
            action="code_generation",
            input={"specifications": "${step_multimedia_production_output}"},
        ),
        WorkflowStep(
            id="quality_assurance",
            agent_role="security",
            action="security_audit",
            input={"course": "${step_platform_implementation_output}"},
        ),
        WorkflowStep(
            id="marketing_strategy",
            agent_role="marketing",
            action="marketing_strategy",
            input={
                "course": "${step_curriculum_design_output}",
                "business_analysis": "${step_business_analysis_output}",
            },
        ),
    ]
