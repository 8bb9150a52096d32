"""LLM client pool for shared model access with concurrency control."""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional, Tuple, Union

from openai import AsyncAzureOpenAI, AsyncOpenAI

from agentflow.config import AzureOpenAIConfig, OpenAIConfig
from agentflow.core.errors import CompletionServiceError
from agentflow.core.models import CompletionRequest, CompletionResponse, CompletionUsage

logger = logging.getLogger(__name__)

ClientConfig = Union[OpenAIConfig, AzureOpenAIConfig]


class LLMPool:
    """Manages shared LLM clients with concurrency limiting."""

    def __init__(self, default_model: Optional[str] = None) -> None:
        self._configs: Dict[str, ClientConfig] = {}
        self._clients: Dict[str, Any] = {}
        self._semaphores: Dict[str, asyncio.Semaphore] = {}
        self.default_model = default_model

    def register_openai(self, name: str, config: OpenAIConfig) -> None:
        """Register an OpenAI model under ``name``."""
        self._register(name, config, config.max_concurrent)

    def register_azure_openai(self, name: str, config: AzureOpenAIConfig) -> None:
        """Register an Azure OpenAI model configuration."""
        self._register(name, config, config.max_concurrent)

    def register_client(self, name: str, client: Any, max_concurrent: int = 50) -> None:
        """Register an already constructed client exposing ``chat.completions.create``."""
        self._register(name, None, max_concurrent)
        self._clients[name] = client

    def _register(self, name: str, config: Optional[ClientConfig], max_concurrent: int) -> None:
        if config is not None:
            self._configs[name] = config
        self._clients.pop(name, None)
        self._semaphores[name] = asyncio.Semaphore(max_concurrent)
        if self.default_model is None:
            self.default_model = name

    @property
    def models(self) -> Tuple[str, ...]:
        return tuple(self._semaphores)

    def resolve(self, model_name: str) -> str:
        """Map a requested model onto a registered one, falling back to the default."""
        if model_name in self._semaphores:
            return model_name
        if self.default_model and self.default_model in self._semaphores:
            logger.warning(
                f"Model '{model_name}' not registered; routing to '{self.default_model}'"
            )
            return self.default_model
        raise CompletionServiceError(f"No provider available for model: {model_name}")

    @asynccontextmanager
    async def acquire(self, model_name: str) -> AsyncIterator[Any]:
        """Acquire access to a model client with concurrency control."""
        if model_name not in self._semaphores:
            raise KeyError(f"Model '{model_name}' not registered in LLM pool")

        async with self._semaphores[model_name]:
            # Lazy initialization on first use
            if model_name not in self._clients:
                self._clients[model_name] = self._build_client(self._configs[model_name])
            yield self._clients[model_name]

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        model_name = self.resolve(request.model)
        config = self._configs.get(model_name)
        deployment = (
            config.deployment_name if isinstance(config, AzureOpenAIConfig) else model_name
        )

        kwargs: Dict[str, Any] = {
            "model": deployment,
            "messages": [{"role": m.role, "content": m.content} for m in request.messages],
        }
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature
        if request.max_tokens is not None:
            kwargs["max_tokens"] = request.max_tokens

        async with self.acquire(model_name) as client:
            try:
                response = await client.chat.completions.create(**kwargs)
            except Exception as exc:
                raise CompletionServiceError(f"{model_name}: {exc}") from exc

        if not response.choices:
            raise CompletionServiceError("No response from model")
        content = response.choices[0].message.content
        if content is None:
            raise CompletionServiceError("Model returned an empty message")

        usage = getattr(response, "usage", None)
        return CompletionResponse(
            content=content,
            model=getattr(response, "model", None) or deployment,
            usage=CompletionUsage(
                prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
                completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
                total_tokens=getattr(usage, "total_tokens", 0) or 0,
            ),
        )

    @staticmethod
    def _build_client(config: ClientConfig) -> Any:
        if isinstance(config, AzureOpenAIConfig):
            return AsyncAzureOpenAI(
                api_key=config.api_key,
                api_version=config.api_version,
                azure_endpoint=config.endpoint,
            )
        return AsyncOpenAI(api_key=config.api_key, base_url=config.base_url)
