"""Dependency injection for API routers."""

from paperdesk.api.deps.dependencies import (
    ServiceCache,
    get_comparison_orchestrator,
    get_document_indexer,
    get_cache_invalidator,
    get_qa_orchestrator,
    get_section_service,
    get_semantic_search,
    get_service_cache,
    get_summarizer,
    get_text_service,
)

__all__ = [
    "ServiceCache",
    "get_cache_invalidator",
    "get_comparison_orchestrator",
    "get_document_indexer",
    "get_qa_orchestrator",
    "get_section_service",
    "get_semantic_search",
    "get_service_cache",
    "get_summarizer",
    "get_text_service",
]
