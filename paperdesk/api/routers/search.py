"""
Semantic search API endpoint.

Routes: POST /projects/{project_id}/search

Dependencies: paperdesk.core.rag.search
System role: Project-wide search HTTP API
"""

from typing import Any

from fastapi import APIRouter, Depends

from paperdesk.api.deps import get_semantic_search
from paperdesk.api.errors import handle_service_errors
from paperdesk.core.exceptions import ValidationError
from paperdesk.core.rag.search import SearchHit, SemanticSearch
from paperdesk.models.requests import SearchRequest

from .router_utils import project_key

router = APIRouter(prefix="/projects/{project_id}", tags=["search"])


def parse_path_filter(filters: dict[str, Any] | None) -> tuple[str | None, str | None]:
    """
    Split the path filter into (exact path, regex).

    Accepts {"path": "a/b.pdf"} or {"path": {"$regex": "..."}}.

    Raises:
        ValidationError: If the path filter has another shape
    """
    if not filters or "path" not in filters:
        return None, None
    value = filters["path"]
    if isinstance(value, str):
        return value, None
    if isinstance(value, dict) and isinstance(value.get("$regex"), str):
        return None, value["$regex"]
    raise ValidationError('filters.path must be a string or {"$regex": "..."}', field="filters.path")


@router.post("/search", response_model=list[SearchHit])
@handle_service_errors
async def search(
    project_id: str,
    body: SearchRequest,
    semantic_search: SemanticSearch = Depends(get_semantic_search),
) -> list[SearchHit]:
    """
    Search every indexed file of the project.

    Raises:
        HTTPException(400): Blank query or invalid filter
    """
    path, path_regex = parse_path_filter(body.filters)
    return await semantic_search.search(
        project_key(project_id),
        body.query,
        top_k=body.top_k,
        path_regex=path_regex,
        path=path,
    )
