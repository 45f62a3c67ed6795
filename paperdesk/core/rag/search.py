"""
Semantic search across a project.

Embeds the query, retrieves matches scoped to the project, optionally
narrows them with a case-insensitive path regex (applied after retrieval,
so more candidates are fetched), and hydrates short snippets from each
document's chunk list.

Dependencies: paperdesk.core.rag.indexer, paperdesk.boundary.llm, paperdesk.boundary.vdb
System role: Project-wide semantic search
"""

import logging
import re

from pydantic import BaseModel

from paperdesk.boundary.llm.embedding_client import EmbeddingClient
from paperdesk.boundary.vdb.vector_schemas import VectorIndex, chunk_id_from_vector_id
from paperdesk.configs.rag import RAGSettings
from paperdesk.core.exceptions import ValidationError
from paperdesk.core.rag.indexer import DocumentIndexer
from paperdesk.models.chunk import Chunk
from paperdesk.models.document import DocumentRef

logger = logging.getLogger(__name__)

SNIPPET_LIMIT = 300
MIN_REGEX_FETCH = 50
REGEX_FETCH_FACTOR = 5


class SearchHit(BaseModel):
    """One search result."""

    file: str
    snippet: str
    score: float
    section: str | None = None


def make_snippet(text: str) -> str:
    """Trim text to at most SNIPPET_LIMIT characters, ending with an ellipsis when cut."""
    if len(text) > SNIPPET_LIMIT:
        return f"{text[:SNIPPET_LIMIT - 3]}…"
    return text


class SemanticSearch:
    """Vector search with snippet hydration."""

    def __init__(
        self,
        indexer: DocumentIndexer,
        embedder: EmbeddingClient,
        index: VectorIndex,
        settings: RAGSettings | None = None,
    ) -> None:
        self._indexer = indexer
        self._embedder = embedder
        self._index = index
        self._settings = settings or RAGSettings()

    async def search(
        self,
        project_id: str,
        query: str,
        top_k: int | None = None,
        path_regex: str | None = None,
        path: str | None = None,
    ) -> list[SearchHit]:
        """
        Find the chunks most similar to query.

        Args:
            project_id: Project to search
            query: Natural-language query
            top_k: Number of results (default from settings)
            path_regex: Case-insensitive regex matched against each hit's path
            path: Exact path filter pushed to the index

        Returns:
            list[SearchHit]: Hits by descending score

        Raises:
            ValidationError: If the query is blank or the regex is invalid
        """
        if not isinstance(query, str) or not query.strip():
            raise ValidationError('"query" (non-empty string) is required', field="query")
        top_k = top_k or self._settings.search_top_k

        pattern = None
        if path_regex:
            try:
                pattern = re.compile(path_regex, re.IGNORECASE)
            except re.error as e:
                raise ValidationError(f"Invalid path regex: {e}", field="filters.path.$regex") from e

        search_filter = {"project_id": project_id}
        if path:
            search_filter["path"] = path
        fetch_k = max(MIN_REGEX_FETCH, top_k * REGEX_FETCH_FACTOR) if pattern else top_k

        vector = await self._embedder.embed_query(query.strip())
        matches = await self._index.query(vector, fetch_k, search_filter)
        if pattern:
            matches = [m for m in matches if pattern.search(str(m.metadata.get("path", "")))]
        matches = matches[:top_k]

        chunk_lists: dict[str, dict[str, Chunk]] = {}
        hits: list[SearchHit] = []
        for match in matches:
            file_path = str(match.metadata.get("path", ""))
            if file_path not in chunk_lists:
                chunk_lists[file_path] = await self._chunks_for(DocumentRef(project_id=project_id, path=file_path))
            chunk = chunk_lists[file_path].get(chunk_id_from_vector_id(match.id))
            hits.append(
                SearchHit(
                    file=file_path,
                    snippet=make_snippet(chunk.text if chunk else ""),
                    score=match.score,
                    section=match.metadata.get("section"),
                )
            )
        logger.info(f"{__name__}:search - {len(hits)} hits", extra={"project_id": project_id})
        return hits

    async def _chunks_for(self, ref: DocumentRef) -> dict[str, Chunk]:
        try:
            chunks, _ = await self._indexer.load_or_build_chunks(ref)
        except Exception as e:
            logger.error(f"{__name__}:_chunks_for - Failed to chunk {ref.key}: {e}")
            return {}
        return {chunk.id: chunk for chunk in chunks}
