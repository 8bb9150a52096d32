"""Environment-driven configuration."""
from __future__ import annotations

import json

import pytest

from agentflow.agents.catalog import DEFAULT_TASK_TYPES
from agentflow.config import Config, SchedulerConfig, load_task_types

_ENV_VARS = (
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "AZURE_OPENAI_KEY",
    "AZURE_OPENAI_ENDPOINT",
    "AGENTFLOW_TICK_INTERVAL",
    "AGENTFLOW_MAX_IN_FLIGHT",
    "AGENTFLOW_REQUEUE_WHEN_BUSY",
    "AGENTFLOW_COMPLETION_TIMEOUT",
    "AGENTFLOW_DEFAULT_MODEL",
    "AGENTFLOW_TASK_TYPES_FILE",
    "AGENTFLOW_LOG_LEVEL",
    "AGENTFLOW_HOST",
    "AGENTFLOW_PORT",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env) -> None:
    config = Config.from_env()

    assert config.scheduler == SchedulerConfig()
    assert config.scheduler.tick_interval == 1.0
    assert config.scheduler.max_in_flight == 1
    assert config.scheduler.requeue_when_busy is True
    assert config.scheduler.completion_timeout is None
    assert config.generation.default_model == "gpt-4-turbo-preview"
    assert config.generation.default_temperature == 0.3
    assert config.generation.default_max_tokens == 4096
    assert config.openai is None and config.azure_openai is None
    assert (config.host, config.port) == ("127.0.0.1", 8000)
    assert dict(config.task_types) == DEFAULT_TASK_TYPES


def test_overrides(clean_env) -> None:
    clean_env.setenv("OPENAI_API_KEY", "sk-test")
    clean_env.setenv("AZURE_OPENAI_KEY", "azure-key")
    clean_env.setenv("AZURE_OPENAI_ENDPOINT", "https://example.openai.azure.com")
    clean_env.setenv("AGENTFLOW_TICK_INTERVAL", "0.25")
    clean_env.setenv("AGENTFLOW_MAX_IN_FLIGHT", "3")
    clean_env.setenv("AGENTFLOW_REQUEUE_WHEN_BUSY", "no")
    clean_env.setenv("AGENTFLOW_COMPLETION_TIMEOUT", "30")
    clean_env.setenv("AGENTFLOW_LOG_LEVEL", "debug")
    clean_env.setenv("AGENTFLOW_HOST", "0.0.0.0")
    clean_env.setenv("AGENTFLOW_PORT", "9000")

    config = Config.from_env()

    assert config.openai.api_key == "sk-test"
    assert config.azure_openai.endpoint == "https://example.openai.azure.com"
    assert config.scheduler == SchedulerConfig(
        tick_interval=0.25, max_in_flight=3, requeue_when_busy=False, completion_timeout=30.0
    )
    assert config.log_level == "DEBUG"
    assert (config.host, config.port) == ("0.0.0.0", 9000)


def test_task_types_file_extends_table(clean_env, tmp_path) -> None:
    table = tmp_path / "task_types.json"
    table.write_text(json.dumps({"translation": ["localization"], "research": ["research"]}))
    clean_env.setenv("AGENTFLOW_TASK_TYPES_FILE", str(table))

    config = Config.from_env()

    assert config.required_capabilities("translation") == ("localization",)
    assert config.required_capabilities("research") == ("research",)
    assert config.required_capabilities("ui_design") == ("ui_design", "ux_design")
    assert config.required_capabilities("unheard_of") == ()


def test_malformed_task_types_file(tmp_path) -> None:
    table = tmp_path / "task_types.json"
    table.write_text(json.dumps({"translation": "localization"}))
    with pytest.raises(ValueError, match="translation"):
        load_task_types(table)


@pytest.mark.parametrize(
    "kwargs",
    [{"tick_interval": 0}, {"max_in_flight": 0}, {"completion_timeout": -1.0}],
)
def test_invalid_scheduler_settings(kwargs) -> None:
    with pytest.raises(ValueError):
        SchedulerConfig(**kwargs)
