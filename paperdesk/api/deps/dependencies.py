"""
Dependency injection container.

Builds every client and orchestrator once per process and hands them to
routers through FastAPI dependencies. Tests replace the getters with
app.dependency_overrides.

Dependencies: paperdesk.configs, paperdesk.application, paperdesk.boundary, paperdesk.core
System role: DI container for service injection
"""

from paperdesk.application.cache.artifact_cache import ArtifactCache
from paperdesk.application.cache.invalidation import CacheInvalidator
from paperdesk.configs import Settings, get_settings
from paperdesk.core.rag.comparison import ComparisonOrchestrator
from paperdesk.core.rag.document_text import DocumentTextService
from paperdesk.core.rag.indexer import DocumentIndexer
from paperdesk.core.rag.qa_orchestrator import QAOrchestrator
from paperdesk.core.rag.search import SemanticSearch
from paperdesk.core.rag.section_service import SectionService
from paperdesk.core.rag.summarizer import Summarizer


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings
        self._object_store = None
        self._vector_index = None
        self._embedder = None
        self._generator = None
        self._extractor = None
        self._instances: dict[str, object] = {}

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def object_store(self):
        """Get cached S3 object store."""
        if self._object_store is None:
            from paperdesk.boundary.aws.s3_object_store import S3ObjectStore

            self._object_store = S3ObjectStore(
                bucket=self.settings.object_store.bucket,
                region=self.settings.object_store.region,
            )
        return self._object_store

    @property
    def vector_index(self):
        """Get cached vector index."""
        if self._vector_index is None:
            from paperdesk.boundary.vdb.vector_index_factory import get_vector_index

            self._vector_index = get_vector_index()
        return self._vector_index

    @property
    def embedder(self):
        """Get cached embedding client."""
        if self._embedder is None:
            from paperdesk.boundary.llm.embedding_client import EmbeddingClient, build_gemini_embeddings

            llm = self.settings.llm
            self._embedder = EmbeddingClient(
                embeddings=build_gemini_embeddings(llm.embedding_model, llm.google_api_key),
                dimension=llm.embedding_dimension,
                max_retries=self.settings.rag.embedding_max_retries,
                backoff_seconds=self.settings.rag.embedding_backoff_seconds,
            )
        return self._embedder

    @property
    def generator(self):
        """Get cached text generator."""
        if self._generator is None:
            from paperdesk.boundary.llm.generation_client import GeminiGenerator

            self._generator = GeminiGenerator(
                model_id=self.settings.llm.chat_model,
                api_key=self.settings.llm.google_api_key,
            )
        return self._generator

    @property
    def extractor(self):
        """Get cached Mathpix extractor."""
        if self._extractor is None:
            from paperdesk.boundary.extraction.mathpix_client import MathpixExtractor

            extraction = self.settings.extraction
            self._extractor = MathpixExtractor(
                app_id=extraction.app_id,
                app_key=extraction.app_key,
                base_url=extraction.base_url,
                poll_interval=extraction.poll_interval_seconds,
                timeout=extraction.request_timeout_seconds,
            )
        return self._extractor

    def _get(self, name: str, factory):
        if name not in self._instances:
            self._instances[name] = factory()
        return self._instances[name]

    @property
    def artifact_cache(self) -> ArtifactCache:
        return self._get("artifact_cache", lambda: ArtifactCache(self.object_store))

    @property
    def text_service(self) -> DocumentTextService:
        return self._get("text_service", lambda: DocumentTextService(self.artifact_cache, self.extractor))

    @property
    def indexer(self) -> DocumentIndexer:
        def build() -> DocumentIndexer:
            from paperdesk.core.document_processing.sections import SectionParser

            return DocumentIndexer(
                cache=self.artifact_cache,
                text_service=self.text_service,
                embedder=self.embedder,
                index=self.vector_index,
                section_parser=SectionParser(
                    self.generator, max_chars=self.settings.rag.full_document_char_limit
                ),
                settings=self.settings.rag,
            )

        return self._get("indexer", build)

    @property
    def qa(self) -> QAOrchestrator:
        return self._get(
            "qa",
            lambda: QAOrchestrator(
                cache=self.artifact_cache,
                text_service=self.text_service,
                indexer=self.indexer,
                embedder=self.embedder,
                index=self.vector_index,
                generator=self.generator,
                settings=self.settings.rag,
            ),
        )

    @property
    def summarizer(self) -> Summarizer:
        return self._get(
            "summarizer",
            lambda: Summarizer(self.artifact_cache, self.text_service, self.generator, self.settings.rag),
        )

    @property
    def comparison(self) -> ComparisonOrchestrator:
        return self._get(
            "comparison",
            lambda: ComparisonOrchestrator(self.text_service, self.summarizer, self.generator, self.settings.rag),
        )

    @property
    def search(self) -> SemanticSearch:
        return self._get(
            "search",
            lambda: SemanticSearch(self.indexer, self.embedder, self.vector_index, self.settings.rag),
        )

    @property
    def sections(self) -> SectionService:
        return self._get(
            "sections",
            lambda: SectionService(self.text_service, self.generator, self.settings.rag),
        )

    @property
    def invalidator(self) -> CacheInvalidator:
        return self._get("invalidator", lambda: CacheInvalidator(self.object_store, self.vector_index))

    def clear(self) -> None:
        """Clear all cached instances."""
        self._object_store = None
        self._vector_index = None
        self._embedder = None
        self._generator = None
        self._extractor = None
        self._instances.clear()


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_text_service() -> DocumentTextService:
    return get_service_cache().text_service


def get_document_indexer() -> DocumentIndexer:
    return get_service_cache().indexer


def get_qa_orchestrator() -> QAOrchestrator:
    return get_service_cache().qa


def get_summarizer() -> Summarizer:
    return get_service_cache().summarizer


def get_comparison_orchestrator() -> ComparisonOrchestrator:
    return get_service_cache().comparison


def get_semantic_search() -> SemanticSearch:
    return get_service_cache().search


def get_section_service() -> SectionService:
    return get_service_cache().sections


def get_cache_invalidator() -> CacheInvalidator:
    return get_service_cache().invalidator
