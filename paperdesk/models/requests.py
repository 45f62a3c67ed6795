"""
API request and response schemas.

Dependencies: pydantic
System role: HTTP API contracts
"""

from typing import Any

from pydantic import BaseModel, Field

from paperdesk.models.chunk import Chunk


class PathRequest(BaseModel):
    """Body naming one project file."""

    path: str = Field(min_length=1, description="Path of the file inside the project")


class IndexPdfRequest(PathRequest):
    use_section_parser: bool = Field(default=True, description="Build chunks from LLM-parsed sections")


class SummarizeRequest(PathRequest):
    force: bool = False


class SummarizeManyRequest(BaseModel):
    paths: list[str] = Field(min_length=1)
    force: bool = False


class QARequest(PathRequest):
    question: str = Field(min_length=1)
    top_k: int | None = Field(default=None, ge=1, le=100)


class QAAnswerRequest(QARequest):
    force: bool = False


class CompareRequest(BaseModel):
    paths: list[str] = Field(default_factory=list)
    focus: str = ""
    force: bool = False


class IndexManyRequest(BaseModel):
    paths: list[str] = Field(min_length=1)


class SearchRequest(BaseModel):
    query: str = ""
    top_k: int | None = Field(default=None, ge=1, le=100)
    filters: dict[str, Any] | None = Field(
        default=None,
        description='Optional filters; {"path": {"$regex": "..."}} or {"path": "exact"}',
    )


class IndexResponse(BaseModel):
    indexed: int


class ChunksResponse(BaseModel):
    chunks: list[Chunk]


class PathsResponse(BaseModel):
    paths: list[str]
