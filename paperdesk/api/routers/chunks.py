"""
Chunking and indexing API endpoints.

Routes:
- GET /projects/{project_id}/chunk - Chunk list of a file (cached)
- POST /projects/{project_id}/cognify - Streamed indexing of one file
- GET /projects/{project_id}/cognified - Paths with a cached chunk list
- POST /projects/{project_id}/index - Index several files

Dependencies: paperdesk.core.rag.indexer
System role: Ingestion HTTP API
"""

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse

from paperdesk.api.deps import get_document_indexer
from paperdesk.api.errors import handle_service_errors
from paperdesk.api.streaming import stream_events
from paperdesk.core.rag.indexer import DocumentIndexer
from paperdesk.models.requests import (
    ChunksResponse,
    IndexManyRequest,
    IndexResponse,
    PathRequest,
    PathsResponse,
)

from .router_utils import document_ref, project_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects/{project_id}", tags=["chunks"])


@router.get("/chunk", response_model=ChunksResponse)
@handle_service_errors
async def get_chunks(
    project_id: str,
    path: str = Query(min_length=1),
    chunk_size: int | None = None,
    overlap: int | None = None,
    indexer: DocumentIndexer = Depends(get_document_indexer),
) -> ChunksResponse:
    """
    Return the file's chunk list, chunking and caching it on a miss.

    Explicit chunk_size or overlap select fixed windows and only apply when
    no chunk list is cached yet.

    Raises:
        HTTPException(400): Invalid window parameters
        HTTPException(404): Source file missing
    """
    chunks, from_cache = await indexer.load_or_build_chunks(
        document_ref(project_id, path),
        chunk_size=chunk_size,
        overlap=overlap,
    )
    logger.info(f"{__name__}:get_chunks - {path}: {len(chunks)} chunks (cached={from_cache})")
    return ChunksResponse(chunks=chunks)


@router.post("/cognify")
@handle_service_errors
async def cognify(
    project_id: str,
    body: PathRequest,
    request: Request,
    indexer: DocumentIndexer = Depends(get_document_indexer),
) -> StreamingResponse:
    """Index one file, streaming a progress line after every step."""
    return await stream_events(request, indexer.stream_index(document_ref(project_id, body.path)))


@router.get("/cognified", response_model=PathsResponse)
@handle_service_errors
async def list_cognified(
    project_id: str,
    indexer: DocumentIndexer = Depends(get_document_indexer),
) -> PathsResponse:
    """List files that have a cached chunk list."""
    return PathsResponse(paths=await indexer.list_indexed(project_key(project_id)))


@router.post("/index", response_model=IndexResponse)
@handle_service_errors
async def index_files(
    project_id: str,
    body: IndexManyRequest,
    indexer: DocumentIndexer = Depends(get_document_indexer),
) -> IndexResponse:
    """Index several files one after another."""
    return IndexResponse(indexed=await indexer.index_many(project_key(project_id), body.paths))
