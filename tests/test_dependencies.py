"""
Test suite for dependency injection container.

Tests lazy construction, reuse and reset of the service cache.

System role: Verification of DI container
"""

from unittest.mock import MagicMock, patch

import pytest

from fakes import InMemoryObjectStore, InMemoryVectorIndex, ScriptedGenerator
from paperdesk.api.deps import ServiceCache, get_qa_orchestrator, get_service_cache
from paperdesk.configs import Settings
from paperdesk.core.rag.qa_orchestrator import QAOrchestrator
from paperdesk.core.rag.summarizer import Summarizer


@pytest.fixture
def service_cache() -> ServiceCache:
    """Service cache with in-memory clients already in place."""
    cache = ServiceCache(settings=Settings())
    cache._object_store = InMemoryObjectStore()
    cache._vector_index = InMemoryVectorIndex()
    cache._embedder = MagicMock()
    cache._generator = ScriptedGenerator()
    cache._extractor = MagicMock()
    return cache


class TestServiceCache:
    """Test suite for ServiceCache."""

    def test_object_store_should_use_configured_bucket(self) -> None:
        """Test object_store builds S3ObjectStore from settings."""
        settings = Settings()
        with patch("paperdesk.boundary.aws.s3_object_store.S3ObjectStore") as mock_store_class:
            store = ServiceCache(settings=settings).object_store

        mock_store_class.assert_called_once_with(
            bucket=settings.object_store.bucket,
            region=settings.object_store.region,
        )
        assert store is mock_store_class.return_value

    def test_services_should_be_built_once(self, service_cache: ServiceCache) -> None:
        """Test orchestrators are reused across accesses."""
        assert isinstance(service_cache.qa, QAOrchestrator)
        assert service_cache.qa is service_cache.qa
        assert isinstance(service_cache.summarizer, Summarizer)
        assert service_cache.comparison is service_cache.comparison

    def test_services_should_share_collaborators(self, service_cache: ServiceCache) -> None:
        """Test orchestrators share one text service and one indexer."""
        assert service_cache.qa._text is service_cache.text_service
        assert service_cache.qa._indexer is service_cache.indexer
        assert service_cache.search._indexer is service_cache.indexer
        assert service_cache.summarizer._settings is service_cache.settings.rag

    def test_section_parser_should_use_full_document_limit(self, service_cache: ServiceCache) -> None:
        """Test the indexer's section parser is capped by rag.full_document_char_limit."""
        service_cache.settings.rag.full_document_char_limit = 1234

        assert service_cache.indexer._section_parser._max_chars == 1234

    def test_clear_should_drop_instances(self, service_cache: ServiceCache) -> None:
        """Test clear forgets every client and service."""
        qa = service_cache.qa

        service_cache.clear()
        service_cache._object_store = InMemoryObjectStore()
        service_cache._vector_index = InMemoryVectorIndex()
        service_cache._embedder = MagicMock()
        service_cache._generator = ScriptedGenerator()
        service_cache._extractor = MagicMock()

        assert service_cache.qa is not qa


class TestGetters:
    """Test suite for FastAPI dependency getters."""

    def test_get_qa_orchestrator_should_read_global_cache(self, service_cache: ServiceCache) -> None:
        """Test getters resolve through the global service cache."""
        with patch("paperdesk.api.deps.dependencies._service_cache", service_cache):
            assert get_service_cache() is service_cache
            assert get_qa_orchestrator() is service_cache.qa
