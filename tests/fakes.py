"""
Hand-written fakes for orchestrator and API tests.

Provides: in-memory object store, deterministic embeddings, in-memory vector
index, scripted text generator
Dependencies: langchain_core, paperdesk
System role: Test doubles for every injected collaborator
"""

import json
from collections.abc import AsyncIterator, Callable, Sequence
from datetime import datetime, timezone
from typing import Any

from langchain_core.embeddings import Embeddings
from langchain_core.messages import BaseMessage

from paperdesk.boundary.aws.s3_object_store import is_internal
from paperdesk.boundary.vdb.vector_schemas import VectorMatch, VectorRecord, matches_filter
from paperdesk.core.exceptions import NotFoundError
from paperdesk.models.document import ObjectEntry, ObjectStat

EMBEDDING_DIMENSION = 8


class InMemoryObjectStore:
    """Dict-backed object store with the S3ObjectStore contract."""

    def __init__(self, objects: dict[str, bytes] | None = None) -> None:
        self.objects: dict[str, bytes] = dict(objects or {})
        self.reads: list[str] = []
        self.writes: list[str] = []
        self.deletes: list[str] = []

    async def write(self, key: str, data: bytes, content_type: str | None = None) -> None:
        self.writes.append(key)
        self.objects[key] = data

    async def read(self, key: str) -> bytes:
        self.reads.append(key)
        if key not in self.objects:
            raise NotFoundError(key)
        return self.objects[key]

    async def stat(self, key: str) -> ObjectStat:
        if key not in self.objects:
            raise NotFoundError(key)
        return ObjectStat(key=key, size=len(self.objects[key]), last_modified=datetime.now(timezone.utc))

    async def exists(self, key: str) -> bool:
        return key in self.objects

    async def delete(self, key: str) -> None:
        self.deletes.append(key)
        self.objects.pop(key, None)

    async def list_dir(self, prefix: str = "", include_internal: bool = False) -> list[ObjectEntry]:
        if prefix and not prefix.endswith("/"):
            prefix += "/"
        dirs: set[str] = set()
        files: list[ObjectEntry] = []
        for key, data in sorted(self.objects.items()):
            if not key.startswith(prefix) or (not include_internal and is_internal(key)):
                continue
            rest = key[len(prefix):]
            if "/" in rest:
                dirs.add(rest.split("/", 1)[0])
            else:
                files.append(ObjectEntry(path=rest, size=len(data)))
        return [ObjectEntry(path=d, is_dir=True) for d in sorted(dirs)] + files

    async def list_recursive(self, prefix: str = "", include_internal: bool = False) -> list[str]:
        return sorted(
            key
            for key in self.objects
            if key.startswith(prefix) and (include_internal or not is_internal(key))
        )


def letter_vector(text: str, dimension: int = EMBEDDING_DIMENSION) -> list[float]:
    """Deterministic non-zero vector from character codes."""
    vector = [1.0] * dimension
    for char in text:
        vector[ord(char) % dimension] += 1.0
    return vector


class FakeEmbeddings(Embeddings):
    """Deterministic LangChain embeddings backend."""

    def __init__(self, dimension: int = EMBEDDING_DIMENSION) -> None:
        self.dimension = dimension
        self.calls: list[list[str]] = []

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [letter_vector(text, self.dimension) for text in texts]

    def embed_query(self, text: str) -> list[float]:
        return self.embed_documents([text])[0]

    async def aembed_documents(self, texts: list[str]) -> list[list[float]]:
        return self.embed_documents(texts)


class RateLimitError(Exception):
    """Looks like an HTTP 429 from the provider SDK."""

    status_code = 429


class FlakyEmbeddings(FakeEmbeddings):
    """Raise the scripted errors first, then behave like FakeEmbeddings."""

    def __init__(self, errors: list[Exception], dimension: int = EMBEDDING_DIMENSION) -> None:
        super().__init__(dimension)
        self.errors = list(errors)
        self.attempts = 0

    async def aembed_documents(self, texts: list[str]) -> list[list[float]]:
        self.attempts += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.embed_documents(texts)


class SleepRecorder:
    """Awaitable sleep that records delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class InMemoryVectorIndex:
    """Vector index scoring by dot product; records every query."""

    def __init__(self) -> None:
        self.records: dict[str, VectorRecord] = {}
        self.queries: list[dict[str, Any]] = []
        self.upserts: list[list[VectorRecord]] = []

    async def upsert(self, records: list[VectorRecord]) -> None:
        self.upserts.append(list(records))
        for record in records:
            self.records[record.id] = record

    async def query(
        self,
        vector: list[float],
        top_k: int,
        filter: dict[str, Any] | None = None,
    ) -> list[VectorMatch]:
        self.queries.append({"top_k": top_k, "filter": filter})
        scored = [
            VectorMatch(
                id=record.id,
                score=sum(a * b for a, b in zip(vector, record.values)),
                metadata=dict(record.metadata),
            )
            for record in self.records.values()
            if matches_filter(record.metadata, filter)
        ]
        scored.sort(key=lambda m: m.score, reverse=True)
        return scored[:top_k]

    async def delete_by_metadata(self, filter: dict[str, Any]) -> int:
        doomed = [rid for rid, record in self.records.items() if matches_filter(record.metadata, filter)]
        for rid in doomed:
            del self.records[rid]
        return len(doomed)


Reply = str | Exception | Callable[[Sequence[BaseMessage]], str]


class ScriptedGenerator:
    """
    Text generator returning scripted replies in call order.

    Every call is recorded as a dict with kind ("complete" or "stream"),
    messages, temperature and max_tokens. When the script runs out the
    default reply is used.
    """

    def __init__(self, replies: list[Reply] | None = None, default: str = "OK") -> None:
        self.replies: list[Reply] = list(replies or [])
        self.default = default
        self.calls: list[dict[str, Any]] = []

    def _next(self, messages: Sequence[BaseMessage]) -> str:
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, Exception):
            raise reply
        return reply(messages) if callable(reply) else reply

    def _record(self, kind: str, messages: Sequence[BaseMessage], temperature: float, max_tokens: int) -> None:
        self.calls.append(
            {"kind": kind, "messages": list(messages), "temperature": temperature, "max_tokens": max_tokens}
        )

    async def complete(self, messages: Sequence[BaseMessage], *, temperature: float, max_tokens: int) -> str:
        self._record("complete", messages, temperature, max_tokens)
        return self._next(messages)

    async def stream(
        self,
        messages: Sequence[BaseMessage],
        *,
        temperature: float,
        max_tokens: int,
    ) -> AsyncIterator[str]:
        self._record("stream", messages, temperature, max_tokens)
        text = self._next(messages)
        words = text.split(" ")
        for index, word in enumerate(words):
            yield word if index == len(words) - 1 else f"{word} "

    def calls_of(self, kind: str) -> list[dict[str, Any]]:
        return [call for call in self.calls if call["kind"] == kind]


def prompt_text(call: dict[str, Any]) -> str:
    """Concatenated content of every message of a recorded call."""
    return "\n".join(str(message.content) for message in call["messages"])


async def collect(events) -> list:
    """Drain an event stream into a list."""
    return [event async for event in events]


NDJSON_HEADERS = {"Accept": "application/x-ndjson"}


def read_frames(response) -> list[dict]:
    """Parse an NDJSON response body into frames."""
    return [json.loads(line) for line in response.text.splitlines() if line.strip()]


PAPER_MARKDOWN = """Deep Residual Learning

# Abstract
We present a residual learning framework.

# Introduction
Deeper networks are harder to train.

## Motivation
Degradation appears as depth grows.

# Methods
We reformulate layers as residual functions.

# Results
The ensemble reaches 3.57% top-5 error.

# Conclusion
Residual learning eases optimization.
"""
