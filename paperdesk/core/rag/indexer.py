"""
Document indexing pipeline.

Indexing is a sequence of idempotent steps with no transaction around them:

    load_text -> load_or_build_chunks (cache written) -> embed_chunks
        -> [delete_vectors] -> upsert_chunks

Vectors of a freshly rebuilt chunk list replace all earlier vectors of the
document, so every stored id resolves to a chunk in the cached list.

Any step can be repeated. A crash after the chunk cache is written but
before the upsert leaves a document with cached chunks and no vectors; the
QA orchestrator repairs that lazily by auto-indexing.

Dependencies: paperdesk.core.document_processing, paperdesk.boundary.llm, paperdesk.boundary.vdb
System role: Ingestion (chunk, embed, upsert) for search and QA
"""

import logging
from collections.abc import AsyncIterator

from pydantic import BaseModel

from paperdesk.application.cache.artifact_cache import ArtifactCache
from paperdesk.boundary.llm.embedding_client import EmbeddingClient
from paperdesk.boundary.vdb.vector_schemas import (
    VectorIndex,
    VectorRecord,
    section_vector_id,
    window_vector_id,
)
from paperdesk.configs.rag import RAGSettings
from paperdesk.core.document_processing.chunker import chunk_sections, chunk_text
from paperdesk.core.document_processing.sections import SectionParser
from paperdesk.core.exceptions import IndexingFailedError, ValidationError
from paperdesk.core.rag.document_text import DocumentTextService
from paperdesk.models.chunk import Chunk
from paperdesk.models.document import DocumentRef
from paperdesk.models.streaming import StreamEvent, StreamEventType, progress

logger = logging.getLogger(__name__)


class IndexResult(BaseModel):
    """Outcome of indexing one document."""

    path: str
    chunk_count: int
    vector_count: int
    chunks_from_cache: bool


def vector_metadata(ref: DocumentRef, chunk: Chunk) -> dict[str, str]:
    """Filterable metadata stored with every vector."""
    metadata = {"project_id": ref.project_id, "path": ref.path}
    if chunk.section:
        metadata["section"] = chunk.section
    return metadata


class DocumentIndexer:
    """Chunk, embed and upsert project documents."""

    def __init__(
        self,
        cache: ArtifactCache,
        text_service: DocumentTextService,
        embedder: EmbeddingClient,
        index: VectorIndex,
        section_parser: SectionParser | None = None,
        settings: RAGSettings | None = None,
    ) -> None:
        """
        Initialize indexer.

        Args:
            cache: Artifact cache for chunk lists
            text_service: Source of document text
            embedder: Embedding client
            index: Vector index
            section_parser: Optional LLM section parser for PDF indexing
            settings: Chunking configuration
        """
        self._cache = cache
        self._text = text_service
        self._embedder = embedder
        self._index = index
        self._section_parser = section_parser
        self._settings = settings or RAGSettings()

    @staticmethod
    def uses_sections(ref: DocumentRef) -> bool:
        """PDFs and extracted markdown are chunked by section."""
        return ref.is_pdf or ref.path.lower().endswith(".mmd")

    def vector_id(self, ref: DocumentRef, chunk: Chunk) -> str:
        if self.uses_sections(ref):
            return section_vector_id(ref.path, chunk.id)
        return window_vector_id(ref.path, chunk.id)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def load_text(self, ref: DocumentRef) -> str:
        return await self._text.ensure_markdown(ref)

    def build_chunks(
        self,
        ref: DocumentRef,
        text: str,
        chunk_size: int | None = None,
        overlap: int | None = None,
    ) -> list[Chunk]:
        """
        Chunk text with the strategy for ref.

        Explicit chunk_size/overlap force fixed windows for any document.
        """
        if chunk_size is None and overlap is None and self.uses_sections(ref):
            return chunk_sections(
                text,
                max_chars=self._settings.section_max_chars,
                overlap_chars=self._settings.section_overlap_chars,
                source=ref.path,
            )
        return chunk_text(
            text,
            chunk_size=chunk_size if chunk_size is not None else self._settings.chunk_size,
            overlap=overlap if overlap is not None else self._settings.chunk_overlap,
            source=ref.path,
        )

    async def build_parsed_chunks(self, ref: DocumentRef, text: str) -> list[Chunk]:
        """
        Chunk LLM-parsed sections into fixed windows "sec<i>_<j>".

        Raises:
            IndexingFailedError: If no sections could be parsed
        """
        if self._section_parser is None:
            raise ValidationError("Section parsing is not configured", field="use_section_parser")
        sections = await self._section_parser.parse(text)
        if not sections:
            raise IndexingFailedError("No sections parsed from document", details={"path": ref.path})
        chunks: list[Chunk] = []
        for s_index, section in enumerate(sections):
            for window in chunk_text(section.text, self._settings.chunk_size, self._settings.chunk_overlap):
                chunks.append(
                    Chunk(
                        id=f"sec{s_index}_{window.id}",
                        text=window.text,
                        section=section.title,
                        source=ref.path,
                    )
                )
        return chunks

    async def load_or_build_chunks(
        self,
        ref: DocumentRef,
        text: str | None = None,
        rebuild: bool = False,
        chunk_size: int | None = None,
        overlap: int | None = None,
    ) -> tuple[list[Chunk], bool]:
        """
        Return the cached chunk list, building and caching it on a miss.

        Args:
            ref: Project file
            text: Document text if already loaded
            rebuild: Ignore the cached list
            chunk_size: Optional fixed-window size (miss only)
            overlap: Optional fixed-window overlap (miss only)

        Returns:
            tuple[list[Chunk], bool]: Chunks and whether they came from the cache
        """
        if not rebuild:
            cached = await self._cache.get_chunks(ref)
            if cached is not None:
                return cached, True
        if text is None:
            text = await self.load_text(ref)
        chunks = self.build_chunks(ref, text, chunk_size=chunk_size, overlap=overlap)
        await self._cache.put_chunks(ref, chunks)
        return chunks, False

    async def embed_chunks(self, chunks: list[Chunk]) -> list[list[float]]:
        return await self._embedder.embed([chunk.text for chunk in chunks])

    async def delete_vectors(self, ref: DocumentRef) -> int:
        """Remove every vector stored for ref; returns the number deleted."""
        deleted = await self._index.delete_by_metadata({"project_id": ref.project_id, "path": ref.path})
        if deleted:
            logger.info(f"{__name__}:delete_vectors - Removed {deleted} stale vectors for {ref.key}")
        return deleted

    async def upsert_chunks(
        self,
        ref: DocumentRef,
        chunks: list[Chunk],
        vectors: list[list[float]],
    ) -> int:
        """Upsert one vector per chunk; returns the number written."""
        records = [
            VectorRecord(id=self.vector_id(ref, chunk), values=vector, metadata=vector_metadata(ref, chunk))
            for chunk, vector in zip(chunks, vectors)
        ]
        await self._index.upsert(records)
        return len(records)

    # ------------------------------------------------------------------
    # Pipelines
    # ------------------------------------------------------------------

    async def index_document(
        self,
        ref: DocumentRef,
        rebuild: bool = False,
        use_section_parser: bool = False,
    ) -> IndexResult:
        """
        Run every indexing step for one document.

        Args:
            ref: Project file
            rebuild: Rechunk even if a chunk list is cached
            use_section_parser: Build chunks from LLM-parsed sections

        Returns:
            IndexResult: Chunk and vector counts
        """
        logger.info(f"{__name__}:index_document - START {ref.key}")
        if use_section_parser:
            text = await self.load_text(ref)
            chunks = await self.build_parsed_chunks(ref, text)
            await self._cache.put_chunks(ref, chunks)
            from_cache = False
        else:
            chunks, from_cache = await self.load_or_build_chunks(ref, rebuild=rebuild)

        vectors = await self.embed_chunks(chunks)
        if not from_cache:
            await self.delete_vectors(ref)
        written = await self.upsert_chunks(ref, chunks, vectors)
        logger.info(f"{__name__}:index_document - DONE {ref.key}: {written} vectors")
        return IndexResult(
            path=ref.path,
            chunk_count=len(chunks),
            vector_count=written,
            chunks_from_cache=from_cache,
        )

    async def stream_index(self, ref: DocumentRef) -> AsyncIterator[StreamEvent]:
        """
        Index one document, reporting progress after every step.

        Yields:
            StreamEvent: Progress frames, then a COMPLETE frame with counts
        """
        yield progress("🔍 Extracting text…", step="load_text")
        text = await self.load_text(ref)
        yield progress("✅ Text extracted", step="load_text")

        yield progress("⏳ Checking chunk cache…", step="chunk")
        chunks, from_cache = await self.load_or_build_chunks(ref, text=text)
        if from_cache:
            yield progress(f"✅ Loaded {len(chunks)} cached chunks", step="chunk")
        else:
            yield progress(f"✅ {len(chunks)} chunks created and cached", step="chunk")

        yield progress("🔗 Generating embeddings…", step="embed")
        vectors = await self.embed_chunks(chunks)
        yield progress("✅ Embeddings generated", step="embed")

        yield progress("📥 Indexing into vector store…", step="upsert")
        if not from_cache:
            await self.delete_vectors(ref)
        written = await self.upsert_chunks(ref, chunks, vectors)
        yield progress(f"✅ Indexed {written} chunks", step="upsert")
        yield progress("🎉 Done! File is ready for semantic search.")
        yield StreamEvent(
            event=StreamEventType.COMPLETE,
            data={"path": ref.path, "chunk_count": len(chunks), "vector_count": written},
        )

    async def index_many(self, project_id: str, paths: list[str]) -> int:
        """
        Index several documents one after another.

        Raises:
            ValidationError: If paths is empty
        """
        if not paths:
            raise ValidationError("paths array required", field="paths")
        for path in paths:
            await self.index_document(DocumentRef(project_id=project_id, path=path))
        return len(paths)

    async def list_indexed(self, project_id: str) -> list[str]:
        return await self._cache.list_indexed(project_id)
