"""
Vector database schemas.

Pydantic models for vector operations and the id scheme that links a vector
back to its cached chunk.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

from typing import Any, Protocol

from pydantic import BaseModel, Field

SECTION_ID_PREFIX = "pdf::"


class VectorRecord(BaseModel):
    """One embedded chunk ready for upsert."""

    id: str = Field(description="Vector id, derived from document path and chunk id")
    values: list[float] = Field(description="Embedding vector")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Filterable metadata")


class VectorMatch(BaseModel):
    """Single result from a similarity query; higher score is closer."""

    id: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)


class VectorIndex(Protocol):
    """Contract shared by every vector index implementation."""

    async def upsert(self, records: list[VectorRecord]) -> None: ...

    async def query(
        self,
        vector: list[float],
        top_k: int,
        filter: dict[str, Any] | None = None,
    ) -> list[VectorMatch]: ...

    async def delete_by_metadata(self, filter: dict[str, Any]) -> int: ...


def window_vector_id(path: str, chunk_id: str) -> str:
    """Vector id for a fixed-window chunk: "<path>#<index>"."""
    return f"{path}#{chunk_id}"


def section_vector_id(path: str, chunk_id: str) -> str:
    """Vector id for a section chunk: "pdf::<path>::<chunkId>"."""
    return f"{SECTION_ID_PREFIX}{path}::{chunk_id}"


def chunk_id_from_vector_id(vector_id: str) -> str:
    """Recover the chunk id used to hydrate text from the chunk cache."""
    if vector_id.startswith(SECTION_ID_PREFIX):
        return vector_id.rsplit("::", 1)[-1]
    return vector_id.rsplit("#", 1)[-1]


def matches_filter(metadata: dict[str, Any], filter: dict[str, Any] | None) -> bool:
    """Equality match of every filter key against metadata."""
    if not filter:
        return True
    return all(metadata.get(key) == value for key, value in filter.items())
