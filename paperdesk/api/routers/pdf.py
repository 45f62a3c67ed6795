"""
Single-document API endpoints.

Routes:
- GET /projects/{project_id}/pdf/mmd - Extracted markdown
- POST /projects/{project_id}/pdf/index - Index one document
- GET /projects/{project_id}/pdf/summary - Cached or fresh summary
- POST /projects/{project_id}/pdf/summarize - Streamed summary
- POST /projects/{project_id}/pdf/summaries - Summarize many documents
- GET /projects/{project_id}/pdf/section - Streamed section extract
- POST /projects/{project_id}/pdf/qa - Streamed question answering
- POST /projects/{project_id}/pdf/qa/answer - Cached answer
- DELETE /projects/{project_id}/pdf/cache - Invalidate derived artifacts

Dependencies: paperdesk.core.rag, paperdesk.application.cache, paperdesk.models
System role: Document HTTP API
"""

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse, StreamingResponse

from paperdesk.api.deps import (
    get_cache_invalidator,
    get_document_indexer,
    get_qa_orchestrator,
    get_section_service,
    get_summarizer,
    get_text_service,
)
from paperdesk.api.errors import handle_service_errors
from paperdesk.api.streaming import stream_events
from paperdesk.application.cache.invalidation import CacheInvalidator, InvalidationReport
from paperdesk.core.rag.document_text import DocumentTextService
from paperdesk.core.rag.indexer import DocumentIndexer, IndexResult
from paperdesk.core.rag.qa_orchestrator import QAOrchestrator, QAResult
from paperdesk.core.rag.section_service import SectionMode, SectionService
from paperdesk.core.rag.summarizer import Summarizer, SummaryOutcome
from paperdesk.models.requests import (
    IndexPdfRequest,
    QAAnswerRequest,
    QARequest,
    SummarizeManyRequest,
    SummarizeRequest,
)

from .router_utils import document_ref, project_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects/{project_id}/pdf", tags=["pdf"])

MARKDOWN = "text/markdown; charset=utf-8"


@router.get("/mmd", response_class=PlainTextResponse)
@handle_service_errors
async def get_markdown(
    project_id: str,
    path: str = Query(min_length=1),
    force: bool = False,
    text_service: DocumentTextService = Depends(get_text_service),
) -> PlainTextResponse:
    """
    Return the document's markdown, extracting it on a cache miss.

    Raises:
        HTTPException(404): Source file missing
        HTTPException(502): Extraction failed
    """
    markdown = await text_service.ensure_markdown(document_ref(project_id, path), force=force)
    return PlainTextResponse(markdown, media_type=MARKDOWN)


@router.post("/index", response_model=IndexResult)
@handle_service_errors
async def index_pdf(
    project_id: str,
    request: IndexPdfRequest,
    indexer: DocumentIndexer = Depends(get_document_indexer),
) -> IndexResult:
    """Chunk, embed and upsert one document."""
    return await indexer.index_document(
        document_ref(project_id, request.path),
        rebuild=True,
        use_section_parser=request.use_section_parser,
    )


@router.get("/summary", response_class=PlainTextResponse)
@handle_service_errors
async def get_summary(
    project_id: str,
    path: str = Query(min_length=1),
    force: bool = False,
    summarizer: Summarizer = Depends(get_summarizer),
) -> PlainTextResponse:
    """Return the cached summary, generating it on a miss."""
    summary = await summarizer.summarize(document_ref(project_id, path), force=force)
    return PlainTextResponse(summary, media_type=MARKDOWN)


@router.post("/summarize")
@handle_service_errors
async def summarize_pdf(
    project_id: str,
    body: SummarizeRequest,
    request: Request,
    summarizer: Summarizer = Depends(get_summarizer),
) -> StreamingResponse:
    """
    Stream a summary of one document.

    Raises:
        HTTPException(413): Document over the size guard without force
    """
    ref = document_ref(project_id, body.path)
    await summarizer.ensure_within_size(ref, force=body.force)
    return await stream_events(request, summarizer.stream_summary(ref, force=body.force))


@router.post("/summaries", response_model=list[SummaryOutcome])
@handle_service_errors
async def summarize_many(
    project_id: str,
    body: SummarizeManyRequest,
    summarizer: Summarizer = Depends(get_summarizer),
) -> list[SummaryOutcome]:
    """Summarize several documents; per-document failures are reported inline."""
    return await summarizer.summarize_many(project_key(project_id), body.paths, force=body.force)


@router.get("/section")
@handle_service_errors
async def get_section(
    project_id: str,
    request: Request,
    path: str = Query(min_length=1),
    name: str = Query(min_length=1),
    mode: SectionMode = SectionMode.RAW,
    sections: SectionService = Depends(get_section_service),
) -> StreamingResponse:
    """Stream one named section, raw or summarized."""
    return await stream_events(request, sections.stream_section(document_ref(project_id, path), name, mode))


@router.post("/qa")
@handle_service_errors
async def ask_question(
    project_id: str,
    body: QARequest,
    request: Request,
    qa: QAOrchestrator = Depends(get_qa_orchestrator),
) -> StreamingResponse:
    """Stream the answer to a question about one document."""
    ref = document_ref(project_id, body.path)
    return await stream_events(request, qa.stream_answer(ref, body.question, body.top_k))


@router.post("/qa/answer", response_model=QAResult)
@handle_service_errors
async def answer_question(
    project_id: str,
    body: QAAnswerRequest,
    qa: QAOrchestrator = Depends(get_qa_orchestrator),
) -> QAResult:
    """Answer a question without streaming; answers are cached per question."""
    ref = document_ref(project_id, body.path)
    return await qa.answer(ref, body.question, body.top_k, force=body.force)


@router.delete("/cache", response_model=InvalidationReport)
@handle_service_errors
async def invalidate_cache(
    project_id: str,
    path: str = Query(min_length=1),
    invalidator: CacheInvalidator = Depends(get_cache_invalidator),
) -> InvalidationReport:
    """Delete every derived artifact and vector of a document."""
    report = await invalidator.invalidate(document_ref(project_id, path))
    logger.info(
        f"{__name__}:invalidate_cache - {path}",
        extra={"deleted_keys": len(report.deleted_keys), "deleted_vectors": report.deleted_vectors},
    )
    return report
