"""
Exception hierarchy for the PaperDesk backend.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class PaperDeskError(Exception):
    """Base exception for all PaperDesk errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(PaperDeskError):
    """Raised when request parameters are invalid, before any side effect."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class NotFoundError(PaperDeskError):
    """Raised when an object or cached artifact does not exist."""

    def __init__(self, key: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize not found error.

        Args:
            key: Object key that was missing
            details: Additional context
        """
        details = details or {}
        details["key"] = key
        self.key = key
        super().__init__(f"Object not found: {key}", details)


class ExtractionFailedError(PaperDeskError):
    """Raised when the OCR service reports or causes a failure."""


class RateLimitedError(PaperDeskError):
    """Raised when an upstream rate limit persists after every retry."""

    def __init__(
        self,
        message: str,
        attempts: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize rate limited error.

        Args:
            message: Error message
            attempts: Number of attempts made before giving up
            details: Additional context
        """
        details = details or {}
        if attempts is not None:
            details["attempts"] = attempts
        super().__init__(message, details)


class SizeLimitExceededError(PaperDeskError):
    """Raised when a document or aggregate prompt is too large to process."""

    def __init__(
        self,
        message: str,
        size: int,
        limit: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize size limit error.

        Args:
            message: Error message including guidance for the caller
            size: Observed size
            limit: Configured limit
            details: Additional context
        """
        details = details or {}
        details["size"] = size
        details["limit"] = limit
        super().__init__(message, details)


class IndexingFailedError(PaperDeskError):
    """Raised when the vector index rejects a write, query or delete."""


class EmbeddingError(IndexingFailedError):
    """Raised when embedding fails for a reason other than rate limiting."""


class GenerationFailedError(PaperDeskError):
    """Raised when the generative model call fails."""
