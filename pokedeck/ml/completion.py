"""
Text completion client.

Generates free-text deck advice with Claude. Anything satisfying the
CompletionGenerator protocol can be used in its place.
"""

from typing import Protocol

import anthropic
from anthropic.types import TextBlock

from pokedeck.config import settings


class CompletionGenerator(Protocol):
    """System prompt, user prompt and output budget in, text out."""

    async def complete(self, system: str, user: str, max_tokens: int) -> str: ...


class AnthropicCompletionClient:
    """Completion client backed by the Anthropic Messages API."""

    def __init__(self, api_key: str | None = None, model: str | None = None) -> None:
        self.api_key = settings.anthropic_api_key if api_key is None else api_key
        self.model = model or settings.advice_model
        self._client = anthropic.AsyncAnthropic(api_key=self.api_key)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def complete(self, system: str, user: str, max_tokens: int) -> str:
        response = await self._client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            system=system,
            messages=[{"role": "user", "content": user}],
        )

        text_content = ""
        for block in response.content:
            if isinstance(block, TextBlock):
                text_content += block.text
        return text_content
