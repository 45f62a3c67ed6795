"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory storage, deterministic embedder, scripted generator and
fully wired orchestrators built from them
Dependencies: pytest, paperdesk
System role: Test infrastructure and fixture management
"""

from unittest.mock import AsyncMock

import pytest

from fakes import (
    EMBEDDING_DIMENSION,
    PAPER_MARKDOWN,
    FakeEmbeddings,
    InMemoryObjectStore,
    InMemoryVectorIndex,
    ScriptedGenerator,
    SleepRecorder,
)
from paperdesk.application.cache.artifact_cache import ArtifactCache
from paperdesk.application.cache.invalidation import CacheInvalidator
from paperdesk.boundary.llm.embedding_client import EmbeddingClient
from paperdesk.configs.rag import RAGSettings
from paperdesk.core.document_processing.sections import SectionParser
from paperdesk.core.rag.comparison import ComparisonOrchestrator
from paperdesk.core.rag.document_text import DocumentTextService
from paperdesk.core.rag.indexer import DocumentIndexer
from paperdesk.core.rag.qa_orchestrator import QAOrchestrator
from paperdesk.core.rag.search import SemanticSearch
from paperdesk.core.rag.section_service import SectionService
from paperdesk.core.rag.summarizer import Summarizer


@pytest.fixture
def rag_settings():
    """Default RAG settings."""
    return RAGSettings()


@pytest.fixture
def object_store():
    """Empty in-memory object store."""
    return InMemoryObjectStore()


@pytest.fixture
def artifact_cache(object_store):
    return ArtifactCache(object_store)


@pytest.fixture
def extractor():
    """
    Mock PDF extractor.

    Returns:
        AsyncMock: extract() resolves to PAPER_MARKDOWN
    """
    mock = AsyncMock()
    mock.extract = AsyncMock(return_value=PAPER_MARKDOWN)
    return mock


@pytest.fixture
def text_service(artifact_cache, extractor):
    return DocumentTextService(artifact_cache, extractor)


@pytest.fixture
def fake_embeddings():
    return FakeEmbeddings()


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def embedder(fake_embeddings, sleep_recorder):
    return EmbeddingClient(fake_embeddings, dimension=EMBEDDING_DIMENSION, sleep=sleep_recorder)


@pytest.fixture
def vector_index():
    return InMemoryVectorIndex()


@pytest.fixture
def generator():
    """Generator answering "OK" unless a test scripts replies."""
    return ScriptedGenerator()


@pytest.fixture
def indexer(artifact_cache, text_service, embedder, vector_index, generator, rag_settings):
    return DocumentIndexer(
        cache=artifact_cache,
        text_service=text_service,
        embedder=embedder,
        index=vector_index,
        section_parser=SectionParser(generator, max_chars=rag_settings.full_document_char_limit),
        settings=rag_settings,
    )


@pytest.fixture
def qa(artifact_cache, text_service, indexer, embedder, vector_index, generator, rag_settings):
    return QAOrchestrator(
        cache=artifact_cache,
        text_service=text_service,
        indexer=indexer,
        embedder=embedder,
        index=vector_index,
        generator=generator,
        settings=rag_settings,
    )


@pytest.fixture
def summarizer(artifact_cache, text_service, generator, rag_settings):
    return Summarizer(artifact_cache, text_service, generator, rag_settings)


@pytest.fixture
def comparison(text_service, summarizer, generator, rag_settings):
    return ComparisonOrchestrator(text_service, summarizer, generator, rag_settings)


@pytest.fixture
def semantic_search(indexer, embedder, vector_index, rag_settings):
    return SemanticSearch(indexer, embedder, vector_index, rag_settings)


@pytest.fixture
def section_service(text_service, generator, rag_settings):
    return SectionService(text_service, generator, rag_settings)


@pytest.fixture
def invalidator(object_store, vector_index):
    return CacheInvalidator(object_store, vector_index)
