"""Contract between the scheduler and whatever generates task output."""
from __future__ import annotations

import asyncio
from typing import Protocol, runtime_checkable

from agentflow.core.models import CompletionRequest, CompletionResponse, CompletionUsage


@runtime_checkable
class CompletionService(Protocol):
    """Anything able to turn a chat request into generated text."""

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        ...


class EchoCompletionService:
    """Offline service that answers with the user message it received."""

    def __init__(self, latency: float = 0.05) -> None:
        self._latency = latency

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        user_message = next(
            (m.content for m in reversed(request.messages) if m.role == "user"), ""
        )
        await asyncio.sleep(self._latency)
        content = f"Echo from {request.model}: {user_message}"
        prompt_tokens = sum(len(m.content.split()) for m in request.messages)
        completion_tokens = len(content.split())
        return CompletionResponse(
            content=content,
            model=request.model,
            usage=CompletionUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
        )
