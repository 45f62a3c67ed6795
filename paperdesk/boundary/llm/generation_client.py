"""
Generative completion client.

Wraps ChatGoogleGenerativeAI behind a small protocol so orchestrators can
receive a scripted generator in tests. Each call chooses its own
temperature and token budget.

Dependencies: langchain_core, langchain_google_genai
System role: LLM boundary for answers, summaries, comparisons and parsing
"""

import logging
from collections.abc import AsyncIterator, Sequence
from typing import Any, Protocol

from langchain_core.messages import BaseMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from paperdesk.core.exceptions import GenerationFailedError

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    """Anything that can complete or stream a chat prompt."""

    async def complete(
        self,
        messages: Sequence[BaseMessage],
        *,
        temperature: float,
        max_tokens: int,
    ) -> str: ...

    def stream(
        self,
        messages: Sequence[BaseMessage],
        *,
        temperature: float,
        max_tokens: int,
    ) -> AsyncIterator[str]: ...


def flatten_content(content: Any) -> str:
    """
    Normalize message content to plain text.

    Gemini may return a list of parts instead of a string.
    """
    if isinstance(content, list):
        return "".join(
            item if isinstance(item, str) else (item.get("text", "") if isinstance(item, dict) else str(item))
            for item in content
        )
    return str(content) if content else ""


class GeminiGenerator:
    """Text generator backed by Google Gemini chat models."""

    def __init__(self, model_id: str = "gemini-2.5-flash", api_key: str | None = None) -> None:
        """
        Initialize generator.

        Args:
            model_id: Gemini chat model identifier
            api_key: Optional Google API key (GOOGLE_API_KEY is used when None)
        """
        self._model_id = model_id
        self._api_key = api_key

    def _model(self, temperature: float, max_tokens: int) -> ChatGoogleGenerativeAI:
        kwargs: dict[str, Any] = {
            "model": self._model_id,
            "temperature": temperature,
            "max_output_tokens": max_tokens,
        }
        if self._api_key:
            kwargs["google_api_key"] = self._api_key
        return ChatGoogleGenerativeAI(**kwargs)

    async def complete(
        self,
        messages: Sequence[BaseMessage],
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """
        Run one completion and return the full text.

        Raises:
            GenerationFailedError: If the model call fails
        """
        logger.info(
            f"{__name__}:complete - model={self._model_id}, messages={len(messages)}, max_tokens={max_tokens}"
        )
        try:
            response = await self._model(temperature, max_tokens).ainvoke(list(messages))
        except Exception as e:
            logger.error(f"{__name__}:complete - FAILED - {type(e).__name__}: {e}")
            raise GenerationFailedError(
                f"Generation failed: {e}",
                details={"model": self._model_id},
            ) from e
        return flatten_content(response.content)

    async def stream(
        self,
        messages: Sequence[BaseMessage],
        *,
        temperature: float,
        max_tokens: int,
    ) -> AsyncIterator[str]:
        """
        Stream completion text as it is produced.

        Yields:
            str: Non-empty token fragments

        Raises:
            GenerationFailedError: If the model call fails mid-stream
        """
        logger.info(
            f"{__name__}:stream - model={self._model_id}, messages={len(messages)}, max_tokens={max_tokens}"
        )
        try:
            async for chunk in self._model(temperature, max_tokens).astream(list(messages)):
                text = flatten_content(chunk.content)
                if text:
                    yield text
        except Exception as e:
            logger.error(f"{__name__}:stream - FAILED - {type(e).__name__}: {e}")
            raise GenerationFailedError(
                f"Generation failed: {e}",
                details={"model": self._model_id},
            ) from e
