"""Application runtime composition helpers."""
from __future__ import annotations

import logging
from functools import lru_cache

from agentflow.config import Config
from agentflow.orchestration.orchestrator import Orchestrator
from agentflow.services.completion import CompletionService, EchoCompletionService
from agentflow.services.llm_pool import LLMPool

logger = logging.getLogger(__name__)


@lru_cache
def get_config() -> Config:
    return Config.from_env()


def build_llm_pool(config: Config) -> LLMPool:
    pool = LLMPool(default_model=config.generation.default_model)

    if config.openai:
        pool.register_openai(config.generation.default_model, config.openai)
    if config.azure_openai:
        pool.register_azure_openai(config.azure_openai.deployment_name, config.azure_openai)
        if config.generation.default_model not in pool.models:
            pool.register_azure_openai(config.generation.default_model, config.azure_openai)

    return pool


@lru_cache
def get_completion_service() -> CompletionService:
    config = get_config()
    if config.openai is None and config.azure_openai is None:
        logger.warning("No LLM credentials configured; tasks will be answered by the echo service")
        return EchoCompletionService()
    return build_llm_pool(config)


@lru_cache
def get_orchestrator() -> Orchestrator:
    return Orchestrator(config=get_config(), completion_service=get_completion_service())
