"""
Streaming event schemas.

Tagged frames emitted by the orchestrators. The API renders them either as
NDJSON (one frame per line) or as plain text for simple clients.

Dependencies: pydantic
System role: Streaming protocol schemas
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class StreamEventType(str, Enum):
    """Server-to-client event types for streamed operations."""

    PROGRESS = "progress"
    CONTEXT = "context"
    TOKEN = "token"
    COMPLETE = "complete"
    ERROR = "error"


class StreamEvent(BaseModel):
    """
    Base streaming event model.

    Attributes:
        event: Event type identifier
        data: Event-specific payload
    """

    event: StreamEventType
    data: dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {"event": self.event.value, "data": self.data}

    def to_text(self) -> str:
        """Plain-text rendition for clients that do not read NDJSON."""
        if self.event == StreamEventType.TOKEN:
            return self.data.get("token", "")
        if self.event == StreamEventType.PROGRESS:
            return f"{self.data.get('message', '')}\n"
        if self.event == StreamEventType.ERROR:
            return f"\n❌ Error: {self.data.get('message', '')}\n"
        return ""


def progress(message: str, **data: Any) -> StreamEvent:
    """Build a progress frame."""
    return StreamEvent(event=StreamEventType.PROGRESS, data={"message": message, **data})


def token(text: str, index: int) -> StreamEvent:
    """Build a token frame."""
    return StreamEvent(event=StreamEventType.TOKEN, data={"token": text, "index": index})
