"""CLI demonstration of dependency-gated tasks and a two-step workflow."""
from __future__ import annotations

import asyncio
import logging

from agentflow.config import Config, SchedulerConfig
from agentflow.core.models import WorkflowStep
from agentflow.orchestration.orchestrator import Orchestrator
from agentflow.services.completion import EchoCompletionService


async def main() -> None:
    config = Config(scheduler=SchedulerConfig(tick_interval=0.1))
    orchestrator = Orchestrator(config=config, completion_service=EchoCompletionService())
    await orchestrator.start()

    research_id = orchestrator.conduct_market_research("online courses", ["Udemy", "Coursera"])
    strategy_id = orchestrator.create_task(
        "business_strategy",
        "Pricing strategy based on the research",
        {"research_task": research_id},
        "high",
        dependencies=[research_id],
    )
    strategy = await orchestrator.wait_for_task(strategy_id)
    print(f"Task {strategy.id} finished as {strategy.status.value} on {strategy.assigned_agent}")

    workflow_id = orchestrator.create_workflow(
        "Launch plan",
        "Design a landing page, then build it",
        [
            WorkflowStep(id="design", agent_role="designer", action="ui_design", input={"page": "landing"}),
            WorkflowStep(
                id="build",
                agent_role="builder",
                action="code_generation",
                input={"design": "${step_design_output}"},
            ),
        ],
    )
    workflow = await orchestrator.execute_workflow(workflow_id)
    print(f"Workflow {workflow.id} {workflow.status.value}: {sorted(workflow.variables)}")
    print(f"Metrics: {orchestrator.get_system_metrics().to_dict()}")

    await orchestrator.shutdown()


def run() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] [%(name)s] %(message)s")
    asyncio.run(main())


if __name__ == "__main__":
    run()
