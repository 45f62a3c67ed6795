"""
Core business logic module.

Contains the exception hierarchy, document processing (chunking and
sections) and the RAG orchestrators.
"""

from paperdesk.core.exceptions import (
    EmbeddingError,
    ExtractionFailedError,
    GenerationFailedError,
    IndexingFailedError,
    NotFoundError,
    PaperDeskError,
    RateLimitedError,
    SizeLimitExceededError,
    ValidationError,
)

__all__ = [
    "EmbeddingError",
    "ExtractionFailedError",
    "GenerationFailedError",
    "IndexingFailedError",
    "NotFoundError",
    "PaperDeskError",
    "RateLimitedError",
    "SizeLimitExceededError",
    "ValidationError",
]
