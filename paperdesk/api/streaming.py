"""
Streaming response rendering.

Orchestrators yield tagged StreamEvents. Clients that accept
application/x-ndjson receive one JSON frame per line; everyone else gets the
plain-text rendition. The first frame is produced before the response
starts, so failures up to that point still become proper HTTP errors;
later failures become an ERROR frame because headers are already sent.

Dependencies: fastapi, paperdesk.models.streaming
System role: Transport for streamed orchestrator output
"""

import json
import logging
from collections.abc import AsyncIterator

from fastapi import Request
from fastapi.responses import StreamingResponse

from paperdesk.core.exceptions import PaperDeskError
from paperdesk.models.streaming import StreamEvent, StreamEventType

logger = logging.getLogger(__name__)

NDJSON = "application/x-ndjson"
PLAIN_TEXT = "text/plain; charset=utf-8"
STREAM_HEADERS = {"Cache-Control": "no-cache, no-transform", "X-Accel-Buffering": "no"}


def wants_ndjson(request: Request) -> bool:
    return NDJSON in request.headers.get("accept", "")


def error_event(error: Exception) -> StreamEvent:
    code = type(error).__name__ if isinstance(error, PaperDeskError) else "InternalError"
    message = error.message if isinstance(error, PaperDeskError) else str(error)
    return StreamEvent(event=StreamEventType.ERROR, data={"code": code, "message": message})


def render(event: StreamEvent, ndjson: bool) -> str:
    if ndjson:
        return json.dumps(event.to_dict(), ensure_ascii=False) + "\n"
    return event.to_text()


async def stream_events(request: Request, events: AsyncIterator[StreamEvent]) -> StreamingResponse:
    """
    Wrap an event stream in a StreamingResponse.

    Args:
        request: Incoming request (Accept header selects the format)
        events: Orchestrator event stream

    Returns:
        StreamingResponse: NDJSON or plain-text body

    Raises:
        Exception: Anything raised before the first frame
    """
    ndjson = wants_ndjson(request)
    iterator = events.__aiter__()
    try:
        first: StreamEvent | None = await iterator.__anext__()
    except StopAsyncIteration:
        first = None

    async def body() -> AsyncIterator[str]:
        if first is None:
            return
        yield render(first, ndjson)
        try:
            async for event in iterator:
                yield render(event, ndjson)
        except Exception as e:
            logger.exception(f"{__name__}:stream_events - Stream failed mid-flight: {e}")
            yield render(error_event(e), ndjson)

    return StreamingResponse(
        body(),
        media_type=NDJSON if ndjson else PLAIN_TEXT,
        headers=STREAM_HEADERS,
    )
