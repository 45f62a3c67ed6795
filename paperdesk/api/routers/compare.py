"""
Comparison API endpoint.

Routes: POST /projects/{project_id}/compare

Dependencies: paperdesk.core.rag.comparison
System role: Multi-paper comparison HTTP API
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from paperdesk.api.deps import get_comparison_orchestrator
from paperdesk.api.errors import handle_service_errors
from paperdesk.api.streaming import stream_events
from paperdesk.core.rag.comparison import ComparisonOrchestrator
from paperdesk.models.requests import CompareRequest

from .router_utils import project_key

router = APIRouter(prefix="/projects/{project_id}", tags=["compare"])


@router.post("/compare")
@handle_service_errors
async def compare_papers(
    project_id: str,
    body: CompareRequest,
    request: Request,
    comparison: ComparisonOrchestrator = Depends(get_comparison_orchestrator),
) -> StreamingResponse:
    """
    Stream a comparative report over up to ten papers.

    A blank focus compares summaries; otherwise the full texts are compared
    against the focus question.

    Raises:
        HTTPException(400): Empty or oversized path list
        HTTPException(413): Combined content over the aggregate limit
    """
    comparison.validate(body.paths)
    events = comparison.stream_compare(project_key(project_id), body.paths, focus=body.focus, force=body.force)
    return await stream_events(request, events)
