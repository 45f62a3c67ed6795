"""Tests for DocumentTextService."""

import pytest

from paperdesk.core.exceptions import NotFoundError
from paperdesk.models.document import DocumentRef
from fakes import PAPER_MARKDOWN

PDF = DocumentRef(project_id="p1", path="paper.pdf")


class TestEnsureMarkdown:
    """Tests for ensure_markdown."""

    @pytest.mark.asyncio
    async def test_extracts_once_then_uses_cache(self, text_service, object_store, extractor) -> None:
        """Should extract on the first call and read the cached .mmd afterwards."""
        object_store.objects["p1/paper.pdf"] = b"%PDF-1.4"

        first = await text_service.ensure_markdown(PDF)
        second = await text_service.ensure_markdown(PDF)

        assert first == second == PAPER_MARKDOWN
        assert object_store.objects["p1/paper.pdf.mmd"] == PAPER_MARKDOWN.encode("utf-8")
        extractor.extract.assert_awaited_once_with(b"%PDF-1.4", filename="paper.pdf")

    @pytest.mark.asyncio
    async def test_force_re_extracts(self, text_service, object_store, extractor) -> None:
        """Should ignore the cached markdown when forced."""
        object_store.objects["p1/paper.pdf"] = b"%PDF-1.4"
        object_store.objects["p1/paper.pdf.mmd"] = b"stale"

        assert await text_service.ensure_markdown(PDF, force=True) == PAPER_MARKDOWN
        assert extractor.extract.await_count == 1

    @pytest.mark.asyncio
    async def test_non_pdf_is_decoded(self, text_service, object_store, extractor) -> None:
        """Should return text files as-is without extraction or caching."""
        object_store.objects["p1/notes.md"] = "# Notes\ncafé".encode("utf-8")

        text = await text_service.ensure_markdown(DocumentRef(project_id="p1", path="notes.md"))

        assert text == "# Notes\ncafé"
        extractor.extract.assert_not_awaited()
        assert "p1/notes.md.mmd" not in object_store.objects

    @pytest.mark.asyncio
    async def test_missing_source(self, text_service) -> None:
        """Should raise NotFoundError for a missing file."""
        with pytest.raises(NotFoundError):
            await text_service.ensure_markdown(PDF)
