"""FastAPI entry-point exposing orchestrator controls."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from agentflow.api.routes import router as agents_router
from agentflow.api.tasks import router as tasks_router
from agentflow.api.workflows import router as workflows_router
from agentflow.runtime import get_config, get_orchestrator


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for FastAPI application."""
    logging.basicConfig(
        level=get_config().log_level,
        format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
    )
    orchestrator = get_orchestrator()
    await orchestrator.start()
    yield
    await orchestrator.shutdown()


app = FastAPI(title="Agent Task Orchestrator", lifespan=lifespan)
app.include_router(agents_router)
app.include_router(tasks_router)
app.include_router(workflows_router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


def serve() -> None:
    """Run the API under uvicorn on the configured host and port."""
    config = get_config()
    uvicorn.run("agentflow.main:app", host=config.host, port=config.port)
