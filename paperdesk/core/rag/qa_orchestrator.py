"""
Retrieval and answer orchestrator.

Answers a question about one document as an explicit state machine:

    EMBED_QUERY -> VECTOR_SEARCH -> [AUTO_INDEX] -> BUILD_CONTEXT
        -> INITIAL_ANSWER -> [DEEP_FALLBACK] -> DONE

AUTO_INDEX runs at most once, only when the first search finds nothing.
DEEP_FALLBACK runs at most once, only when the initial answer admits it
does not know; it re-asks with the whole document.

Dependencies: paperdesk.core.rag, paperdesk.boundary.llm, paperdesk.boundary.vdb
System role: Document QA with lazy indexing and full-document fallback
"""

import logging
from collections.abc import AsyncIterator
from enum import Enum

from pydantic import BaseModel, Field

from paperdesk.application.cache.artifact_cache import ArtifactCache, ArtifactKind
from paperdesk.boundary.llm.embedding_client import EmbeddingClient
from paperdesk.boundary.llm.generation_client import TextGenerator
from paperdesk.boundary.vdb.vector_schemas import VectorIndex, VectorMatch, chunk_id_from_vector_id
from paperdesk.configs.rag import RAGSettings
from paperdesk.core.document_processing.chunker import soft_truncate
from paperdesk.core.exceptions import ValidationError
from paperdesk.core.rag.document_text import DocumentTextService
from paperdesk.core.rag.indexer import DocumentIndexer
from paperdesk.core.rag.prompts import DEEP_QA_PROMPT, QA_PROMPT
from paperdesk.models.chunk import Chunk
from paperdesk.models.document import DocumentRef
from paperdesk.models.streaming import StreamEvent, StreamEventType, progress, token

logger = logging.getLogger(__name__)

QA_TEMPERATURE = 0.25
QA_MAX_TOKENS = 512
FALLBACK_MARKER = "i don't know"


class QAState(str, Enum):
    """States of one QA run, in execution order."""

    EMBED_QUERY = "embed_query"
    VECTOR_SEARCH = "vector_search"
    AUTO_INDEX = "auto_index"
    BUILD_CONTEXT = "build_context"
    INITIAL_ANSWER = "initial_answer"
    DEEP_FALLBACK = "deep_fallback"
    DONE = "done"


class ContextMatch(BaseModel):
    """A retrieved chunk hydrated with its text."""

    id: str
    score: float
    section: str = ""
    text: str = ""


class QAResult(BaseModel):
    """Final answer and the path taken to reach it."""

    answer: str
    states: list[QAState] = Field(default_factory=list)
    auto_indexed: bool = False
    used_fallback: bool = False
    cached: bool = False
    matches: list[ContextMatch] = Field(default_factory=list)


def needs_deep_fallback(answer: str) -> bool:
    """True when the answer starts with "I don't know" (any case, either apostrophe)."""
    return answer.strip().lower().replace("’", "'").startswith(FALLBACK_MARKER)


def hydrate_matches(matches: list[VectorMatch], chunks: list[Chunk]) -> list[ContextMatch]:
    """Attach chunk text to matches by chunk id; unknown ids get empty text."""
    by_id = {chunk.id: chunk for chunk in chunks}
    hydrated = []
    for match in matches:
        chunk = by_id.get(chunk_id_from_vector_id(match.id))
        hydrated.append(
            ContextMatch(
                id=match.id,
                score=match.score,
                section=(chunk.section or "") if chunk else "",
                text=chunk.text if chunk else "",
            )
        )
    return hydrated


def format_context(matches: list[ContextMatch]) -> str:
    return "".join(f"---\n[{m.section}]\n{m.text.strip()}\n\n" for m in matches)


class QAOrchestrator:
    """Answer questions about a single document."""

    def __init__(
        self,
        cache: ArtifactCache,
        text_service: DocumentTextService,
        indexer: DocumentIndexer,
        embedder: EmbeddingClient,
        index: VectorIndex,
        generator: TextGenerator,
        settings: RAGSettings | None = None,
    ) -> None:
        """
        Initialize QA orchestrator.

        Args:
            cache: Artifact cache (answers)
            text_service: Document text loader
            indexer: Chunk loading and auto-index steps
            embedder: Query embedder
            index: Vector index
            generator: Text generator for answers
            settings: Retrieval depth and full-document limit
        """
        self._cache = cache
        self._text = text_service
        self._indexer = indexer
        self._embedder = embedder
        self._index = index
        self._generator = generator
        self._settings = settings or RAGSettings()

    async def stream_answer(
        self,
        ref: DocumentRef,
        question: str,
        top_k: int | None = None,
    ) -> AsyncIterator[StreamEvent]:
        """
        Answer a question, streaming progress, context and tokens.

        Args:
            ref: Document to ask about
            question: Natural-language question
            top_k: Matches to retrieve (default from settings)

        Yields:
            StreamEvent: PROGRESS, CONTEXT, TOKEN frames, then COMPLETE with the QAResult

        Raises:
            ValidationError: If the question is blank
        """
        if not question or not question.strip():
            raise ValidationError("path and question are required", field="question")
        top_k = top_k or self._settings.qa_top_k
        result = QAResult(answer="")
        search_filter = {"project_id": ref.project_id, "path": ref.path}

        markdown = await self._text.ensure_markdown(ref)
        chunks, _ = await self._indexer.load_or_build_chunks(ref, text=markdown)

        result.states.append(QAState.EMBED_QUERY)
        yield progress("🔍 Embedding question…", state=QAState.EMBED_QUERY.value)
        query_vector = await self._embedder.embed_query(question)

        result.states.append(QAState.VECTOR_SEARCH)
        matches = await self._index.query(query_vector, top_k, search_filter)
        logger.info(f"{__name__}:stream_answer - {len(matches)} matches for {ref.key}")

        if not matches:
            result.states.append(QAState.AUTO_INDEX)
            result.auto_indexed = True
            yield progress("📦 No vectors found; auto-indexing document…", state=QAState.AUTO_INDEX.value)
            vectors = await self._indexer.embed_chunks(chunks)
            await self._indexer.upsert_chunks(ref, chunks, vectors)
            yield progress("✅ Indexing complete; retrieving sections…", state=QAState.AUTO_INDEX.value)
            matches = await self._index.query(query_vector, top_k, search_filter)
            logger.info(f"{__name__}:stream_answer - Auto-indexed {len(chunks)} chunks, {len(matches)} matches")

        result.states.append(QAState.BUILD_CONTEXT)
        result.matches = hydrate_matches(matches, chunks)
        yield progress("💡 Building context…", state=QAState.BUILD_CONTEXT.value)
        yield StreamEvent(
            event=StreamEventType.CONTEXT,
            data={
                "matches": [
                    {"id": m.id, "score": m.score, "section": m.section, "snippet": m.text[:200]}
                    for m in result.matches
                ]
            },
        )

        result.states.append(QAState.INITIAL_ANSWER)
        messages = QA_PROMPT.format_messages(question=question, context=format_context(result.matches))
        initial = ""
        index = 0
        async for text in self._generator.stream(messages, temperature=QA_TEMPERATURE, max_tokens=QA_MAX_TOKENS):
            initial += text
            yield token(text, index)
            index += 1
        result.answer = initial.strip()

        if needs_deep_fallback(initial):
            result.states.append(QAState.DEEP_FALLBACK)
            result.used_fallback = True
            yield progress(
                "\n\n⚠️ Quick search didn't find an answer, trying full-document pass…\n",
                state=QAState.DEEP_FALLBACK.value,
            )
            document = soft_truncate(markdown, self._settings.full_document_char_limit)
            messages = DEEP_QA_PROMPT.format_messages(question=question, document=document)
            deep = ""
            async for text in self._generator.stream(messages, temperature=QA_TEMPERATURE, max_tokens=QA_MAX_TOKENS):
                deep += text
                yield token(text, index)
                index += 1
            result.answer = deep.strip()

        result.states.append(QAState.DONE)
        yield StreamEvent(event=StreamEventType.COMPLETE, data=result.model_dump(mode="json"))

    async def answer(
        self,
        ref: DocumentRef,
        question: str,
        top_k: int | None = None,
        force: bool = False,
    ) -> QAResult:
        """
        Answer a question without streaming, caching the final answer.

        Args:
            ref: Document to ask about
            question: Natural-language question
            top_k: Matches to retrieve
            force: Ignore a cached answer

        Returns:
            QAResult: Answer and the states visited
        """
        if not force:
            cached = await self._cache.get(ref, ArtifactKind.QA, question=question)
            if cached is not None:
                return QAResult(answer=cached, cached=True)

        result: QAResult | None = None
        async for event in self.stream_answer(ref, question, top_k):
            if event.event == StreamEventType.COMPLETE:
                result = QAResult.model_validate(event.data)
        await self._cache.put(ref, ArtifactKind.QA, result.answer, question=question)
        return result
