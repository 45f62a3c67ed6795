"""
Chunk and section domain models.

Represents a chunk of document text with a run-stable identifier, and a
titled section of a document.

Dependencies: pydantic
System role: Document chunk data structure
"""

from pydantic import BaseModel, Field


class Chunk(BaseModel):
    """Contiguous slice of a document's text."""

    id: str = Field(description="Identifier, stable within one chunking run")
    text: str = Field(description="Chunk text content")
    section: str | None = Field(default=None, description="Title of the enclosing section")
    source: str | None = Field(default=None, description="Document path the chunk came from")


class Section(BaseModel):
    """Titled span of a document, in document order."""

    title: str
    text: str


class ChunkList(BaseModel):
    """Serialized form of the chunk cache artifact."""

    chunks: list[Chunk] = Field(default_factory=list)
