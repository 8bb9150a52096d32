"""Configuration management for the task orchestrator."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from agentflow.agents.catalog import DEFAULT_TASK_TYPES


@dataclass(frozen=True)
class OpenAIConfig:
    """OpenAI service configuration."""

    api_key: str
    base_url: Optional[str] = None
    max_concurrent: int = 50


@dataclass(frozen=True)
class AzureOpenAIConfig:
    """Azure OpenAI service configuration."""

    api_key: str
    endpoint: str
    api_version: str = "2024-02-15-preview"
    deployment_name: str = "gpt-4"
    max_concurrent: int = 50


@dataclass(frozen=True)
class SchedulerConfig:
    """Knobs for the periodic task dispatcher."""

    tick_interval: float = 1.0
    max_in_flight: int = 1
    requeue_when_busy: bool = True
    completion_timeout: Optional[float] = None

    def __post_init__(self) -> None:
        if self.tick_interval <= 0:
            raise ValueError("tick_interval must be positive")
        if self.max_in_flight < 1:
            raise ValueError("max_in_flight must be at least 1")
        if self.completion_timeout is not None and self.completion_timeout <= 0:
            raise ValueError("completion_timeout must be positive when set")


@dataclass(frozen=True)
class GenerationDefaults:
    """Fallback generation parameters for roles that do not set their own."""

    default_model: str = "gpt-4-turbo-preview"
    default_temperature: float = 0.3
    default_max_tokens: int = 4096


@dataclass(frozen=True)
class Config:
    """Application configuration loaded from environment variables."""

    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    generation: GenerationDefaults = field(default_factory=GenerationDefaults)
    task_types: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_TASK_TYPES)
    )
    openai: Optional[OpenAIConfig] = None
    azure_openai: Optional[AzureOpenAIConfig] = None
    environment: str = "development"
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    def required_capabilities(self, task_type: str) -> Tuple[str, ...]:
        """Capabilities an agent needs for ``task_type``; empty when unknown."""
        return tuple(self.task_types.get(task_type, ()))

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables."""
        openai_key = os.getenv("OPENAI_API_KEY")
        openai_config = None
        if openai_key:
            openai_config = OpenAIConfig(
                api_key=openai_key,
                base_url=os.getenv("OPENAI_BASE_URL") or None,
                max_concurrent=int(os.getenv("OPENAI_MAX_CONCURRENT", "50")),
            )

        azure_key = os.getenv("AZURE_OPENAI_KEY")
        azure_endpoint = os.getenv("AZURE_OPENAI_ENDPOINT")
        azure_config = None
        if azure_key and azure_endpoint:
            azure_config = AzureOpenAIConfig(
                api_key=azure_key,
                endpoint=azure_endpoint,
                api_version=os.getenv("AZURE_OPENAI_API_VERSION", "2024-02-15-preview"),
                deployment_name=os.getenv("AZURE_OPENAI_DEPLOYMENT", "gpt-4"),
                max_concurrent=int(os.getenv("AZURE_OPENAI_MAX_CONCURRENT", "50")),
            )

        timeout = os.getenv("AGENTFLOW_COMPLETION_TIMEOUT")
        scheduler = SchedulerConfig(
            tick_interval=float(os.getenv("AGENTFLOW_TICK_INTERVAL", "1.0")),
            max_in_flight=int(os.getenv("AGENTFLOW_MAX_IN_FLIGHT", "1")),
            requeue_when_busy=_env_flag("AGENTFLOW_REQUEUE_WHEN_BUSY", True),
            completion_timeout=float(timeout) if timeout else None,
        )

        generation = GenerationDefaults(
            default_model=os.getenv("AGENTFLOW_DEFAULT_MODEL", "gpt-4-turbo-preview"),
        )

        task_types: Dict[str, Tuple[str, ...]] = dict(DEFAULT_TASK_TYPES)
        task_types_file = os.getenv("AGENTFLOW_TASK_TYPES_FILE")
        if task_types_file:
            task_types.update(load_task_types(Path(task_types_file)))

        return cls(
            scheduler=scheduler,
            generation=generation,
            task_types=task_types,
            openai=openai_config,
            azure_openai=azure_config,
            environment=os.getenv("ENVIRONMENT", "development"),
            log_level=os.getenv("AGENTFLOW_LOG_LEVEL", "INFO").upper(),
            host=os.getenv("AGENTFLOW_HOST", "127.0.0.1"),
            port=int(os.getenv("AGENTFLOW_PORT", "8000")),
        )


def load_task_types(path: Path) -> Dict[str, Tuple[str, ...]]:
    """Read a ``{task_type: [capability, ...]}`` JSON document."""
    with path.open(encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, dict):
        raise ValueError(f"Task type table in {path} must be a JSON object")

    table: Dict[str, Tuple[str, ...]] = {}
    for task_type, capabilities in raw.items():
        if not isinstance(capabilities, list) or not all(
            isinstance(cap, str) for cap in capabilities
        ):
            raise ValueError(
                f"Capabilities for task type '{task_type}' must be a list of strings"
            )
        table[task_type] = tuple(capabilities)
    return table


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}
