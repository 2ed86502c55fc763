"""
Shared Claude client and model fallback chain.

Both the analysis generator and the chat companion ask Claude for plain
text. Models are tried in configured order; the first non-empty answer wins.
"""

import logging
from functools import lru_cache
from typing import Dict, List, Optional

from anthropic import AsyncAnthropic

from dropjournal.core.config import settings

logger = logging.getLogger("DropJournal.Anthropic")


@lru_cache(maxsize=1)
def get_anthropic_client() -> AsyncAnthropic:
    """Get the singleton Anthropic async client."""
    return AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY)


class ClaudeTextClient:
    """Plain-text completions with model fallback."""

    def __init__(
        self,
        client: Optional[AsyncAnthropic] = None,
        models: Optional[List[str]] = None,
        max_tokens: int = 2000,
        temperature: float = 0.7,
    ) -> None:
        self.client = client or get_anthropic_client()
        self.model_candidates = models or list(settings.CLAUDE_MODEL_OPTIONS)
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def complete(self, system: str, messages: List[Dict[str, str]]) -> str:
        """
        Return the first non-empty text answer from the model chain.

        Raises:
            RuntimeError: wrapping the last error once every model has failed.
        """
        last_error: Optional[Exception] = None

        for model_name in self.model_candidates:
            try:
                response = await self.client.messages.create(
                    model=model_name,
                    system=system,
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                    messages=messages,
                )
                text = "".join(
                    block.text for block in response.content if getattr(block, "type", None) == "text"
                ).strip()
                if not text:
                    raise ValueError(f"Model {model_name} returned empty content")
                logger.info(f"Completion served by {model_name}")
                return text
            except Exception as exc:  # pylint: disable=broad-except
                logger.warning("Model %s failed: %s", model_name, exc)
                last_error = exc

        raise RuntimeError(f"All Claude models failed: {last_error}") from last_error
