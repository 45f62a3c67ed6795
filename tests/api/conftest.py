"""
API test fixtures.

Provides: a TestClient whose service dependencies resolve to the in-memory
services from the root conftest
Dependencies: fastapi.testclient, paperdesk.api
System role: HTTP-level test wiring
"""

import pytest
from fastapi.testclient import TestClient

from paperdesk.api.deps import (
    get_cache_invalidator,
    get_comparison_orchestrator,
    get_document_indexer,
    get_qa_orchestrator,
    get_section_service,
    get_semantic_search,
    get_summarizer,
    get_text_service,
)
from paperdesk.api.main import create_app


@pytest.fixture
def sources(object_store):
    """A PDF and a text file in project p1, plus a PDF in the root project."""
    object_store.objects.update(
        {
            "p1/paper.pdf": b"%PDF-1.4",
            "p1/notes.txt": b"residual notes " * 200,
            "root.pdf": b"%PDF-1.4",
        }
    )
    return object_store


@pytest.fixture
def client(
    sources,
    text_service,
    indexer,
    qa,
    summarizer,
    comparison,
    semantic_search,
    section_service,
    invalidator,
):
    """TestClient with every service dependency overridden."""
    app = create_app()
    app.dependency_overrides.update(
        {
            get_text_service: lambda: text_service,
            get_document_indexer: lambda: indexer,
            get_qa_orchestrator: lambda: qa,
            get_summarizer: lambda: summarizer,
            get_comparison_orchestrator: lambda: comparison,
            get_semantic_search: lambda: semantic_search,
            get_section_service: lambda: section_service,
            get_cache_invalidator: lambda: invalidator,
        }
    )
    return TestClient(app)
