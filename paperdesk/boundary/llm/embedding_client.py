"""
Embedding client with rate-limit backoff.

Wraps any LangChain Embeddings (Google Gemini by default). One batched
request per call; rate-limit responses are retried with exponential backoff
(2s, 4s, 8s), everything else fails immediately.

Dependencies: langchain_core, langchain_google_genai, tenacity
System role: Text to vector boundary for indexing and retrieval
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from langchain_core.embeddings import Embeddings
from langchain_google_genai import GoogleGenerativeAIEmbeddings
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from paperdesk.core.exceptions import EmbeddingError, RateLimitedError

logger = logging.getLogger(__name__)

RATE_LIMIT_MARKERS = ("rate limit", "ratelimit", "resource exhausted", "resource_exhausted", "quota", "429")


def is_rate_limited(error: BaseException) -> bool:
    """
    Decide whether an error (or anything it wraps) is a rate-limit signal.

    Checks HTTP-style status attributes first, then the error text.
    """
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        for attr in ("status_code", "code", "status"):
            if getattr(current, attr, None) == 429:
                return True
        response = getattr(current, "response", None)
        if getattr(response, "status_code", None) == 429:
            return True
        message = str(current).lower()
        if any(marker in message for marker in RATE_LIMIT_MARKERS):
            return True
        current = current.__cause__ or current.__context__
    return False


def build_gemini_embeddings(model: str, api_key: str | None = None) -> Embeddings:
    """Create the default Google Gemini embeddings backend."""
    if api_key:
        return GoogleGenerativeAIEmbeddings(model=model, google_api_key=api_key)
    return GoogleGenerativeAIEmbeddings(model=model)


class EmbeddingClient:
    """Batch text embedder with bounded rate-limit retries."""

    def __init__(
        self,
        embeddings: Embeddings,
        dimension: int | None = None,
        max_retries: int = 3,
        backoff_seconds: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize embedding client.

        Args:
            embeddings: LangChain embeddings backend
            dimension: Expected vector length; None skips the check
            max_retries: Retries after a rate-limit response
            backoff_seconds: First backoff delay, doubled on every retry
            sleep: Awaitable sleep used between retries
        """
        self._embeddings = embeddings
        self._dimension = dimension
        self._max_retries = max_retries
        self._backoff_seconds = backoff_seconds
        self._sleep = sleep

    @property
    def dimension(self) -> int | None:
        return self._dimension

    async def embed(self, texts: Sequence[str]) -> list[list[float]]:
        """
        Embed texts in a single batched request.

        Args:
            texts: Texts to embed

        Returns:
            list[list[float]]: One vector per input, in input order

        Raises:
            RateLimitedError: If rate limiting persists after every retry
            EmbeddingError: On any other failure or a malformed response
        """
        if not texts:
            return []

        texts = list(texts)
        logger.info(f"{__name__}:embed - Embedding {len(texts)} texts")
        retrying = AsyncRetrying(
            retry=retry_if_exception(is_rate_limited),
            stop=stop_after_attempt(self._max_retries + 1),
            wait=wait_exponential(multiplier=self._backoff_seconds),
            sleep=self._sleep,
            before_sleep=self._log_retry,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    vectors = await self._embeddings.aembed_documents(texts)
        except RetryError as e:
            cause = e.last_attempt.exception()
            logger.error(f"{__name__}:embed - Rate limit persisted after {self._max_retries} retries")
            raise RateLimitedError(
                f"Embedding rate limited: {cause}",
                attempts=self._max_retries + 1,
            ) from cause
        except Exception as e:
            logger.error(f"{__name__}:embed - FAILED - {type(e).__name__}: {e}")
            raise EmbeddingError(f"Embedding failed: {e}", details={"count": len(texts)}) from e

        self._validate(texts, vectors)
        return [list(vector) for vector in vectors]

    async def embed_query(self, text: str) -> list[float]:
        """Embed one query string."""
        return (await self.embed([text]))[0]

    def _validate(self, texts: list[str], vectors: list[list[float]]) -> None:
        if len(vectors) != len(texts):
            raise EmbeddingError(
                "Embedding count does not match input count",
                details={"expected": len(texts), "received": len(vectors)},
            )
        if self._dimension is None:
            return
        for index, vector in enumerate(vectors):
            if len(vector) != self._dimension:
                raise EmbeddingError(
                    "Embedding dimension mismatch",
                    details={"index": index, "expected": self._dimension, "received": len(vector)},
                )

    def _log_retry(self, retry_state) -> None:
        logger.warning(
            f"{__name__}:embed - Rate limited, retry {retry_state.attempt_number}/{self._max_retries} "
            f"in {retry_state.next_action.sleep:.1f}s"
        )
