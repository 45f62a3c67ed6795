"""Tests for the multi-paper comparison orchestrator."""

import pytest

from paperdesk.configs.rag import RAGSettings
from paperdesk.core.exceptions import SizeLimitExceededError, ValidationError
from paperdesk.core.rag.comparison import CompareMode, ComparisonOrchestrator, compare_mode
from paperdesk.core.rag.summarizer import Summarizer
from paperdesk.models.streaming import StreamEventType
from fakes import PAPER_MARKDOWN, collect, prompt_text


@pytest.fixture(autouse=True)
def papers(object_store):
    """Two PDFs with cached summaries and one without."""
    object_store.objects.update(
        {
            "p1/a.pdf": b"%PDF-1.4",
            "p1/a.pdf.summary.md": b"Summary A",
            "p1/b.pdf": b"%PDF-1.4",
            "p1/b.pdf.summary.md": b"Summary B",
            "p1/c.pdf": b"%PDF-1.4",
        }
    )


def messages_of(events) -> list[str]:
    return [e.data["message"] for e in events if e.event == StreamEventType.PROGRESS]


class TestCompareMode:
    """Tests for compare_mode."""

    @pytest.mark.parametrize(
        "focus, mode",
        [("", CompareMode.SUMMARY), ("   ", CompareMode.SUMMARY), (None, CompareMode.SUMMARY), ("depth?", CompareMode.GENERIC)],
    )
    def test_selects_mode(self, focus, mode) -> None:
        """Should compare summaries unless a focus is given."""
        assert compare_mode(focus) == mode


class TestValidate:
    """Tests for request validation."""

    @pytest.mark.asyncio
    async def test_too_many_paths(self, comparison, extractor, generator) -> None:
        """Should reject eleven paths before loading any document."""
        paths = [f"paper{i}.pdf" for i in range(11)]

        with pytest.raises(ValidationError) as exc_info:
            await collect(comparison.stream_compare("p1", paths))

        assert "max 10" in exc_info.value.message
        extractor.extract.assert_not_called()
        assert generator.calls == []

    def test_empty_paths(self, comparison) -> None:
        """Should reject an empty path list."""
        with pytest.raises(ValidationError):
            comparison.validate([])

    def test_ten_paths_allowed(self, comparison) -> None:
        """Should accept exactly the maximum."""
        comparison.validate([f"paper{i}.pdf" for i in range(10)])


class TestSummaryMode:
    """Tests for blank-focus comparisons."""

    @pytest.mark.asyncio
    async def test_prompt_from_summaries(self, comparison, generator, extractor) -> None:
        """Should label cached summaries by position and stream at 0.25/1600."""
        generator.replies = ["## Overview [P1] [P2]"]

        events = await collect(comparison.stream_compare("p1", ["a.pdf", "b.pdf"]))

        call = generator.calls_of("stream")[0]
        assert (call["temperature"], call["max_tokens"]) == (0.25, 1600)
        prompt = prompt_text(call)
        assert "Provide a structured comparative report of the following papers." in prompt
        assert "[P1]\nSummary A" in prompt
        assert "[P2]\nSummary B" in prompt
        assert "Cite each paper as [P#]" in prompt
        extractor.extract.assert_not_called()
        assert events[-1].data == {
            "report": "## Overview [P1] [P2]",
            "papers": [{"label": "[P1]", "path": "a.pdf"}, {"label": "[P2]", "path": "b.pdf"}],
        }

    @pytest.mark.asyncio
    async def test_missing_summary_is_generated(self, comparison, generator, object_store) -> None:
        """Should summarize a paper without a cached summary first."""
        generator.replies = ["Summary C", "Report"]

        await collect(comparison.stream_compare("p1", ["c.pdf"]))

        assert object_store.objects["p1/c.pdf.summary.md"] == b"Summary C"
        assert "[P1]\nSummary C" in prompt_text(generator.calls[-1])

    @pytest.mark.asyncio
    async def test_failed_paper_is_skipped(self, comparison, generator) -> None:
        """Should report a failing paper and compare the survivors."""
        events = await collect(comparison.stream_compare("p1", ["missing.pdf", "a.pdf"]))

        assert any(m.startswith("❌ [P1] failed:") for m in messages_of(events))
        assert "✅ [P2] done" in messages_of(events)
        prompt = prompt_text(generator.calls_of("stream")[-1])
        assert "[P2]\nSummary A" in prompt
        assert "[P1]\n" not in prompt
        assert events[-1].data["papers"] == [{"label": "[P2]", "path": "a.pdf"}]

    @pytest.mark.asyncio
    async def test_all_papers_fail(self, comparison, generator) -> None:
        """Should abort without calling the model when nothing loads."""
        events = await collect(comparison.stream_compare("p1", ["missing.pdf", "gone.pdf"]))

        assert "\nNo usable inputs, aborting." in messages_of(events)
        assert events[-1].data == {"report": "", "papers": []}
        assert generator.calls_of("stream") == []


class TestGenericMode:
    """Tests for focused comparisons over full texts."""

    @pytest.mark.asyncio
    async def test_prompt_from_full_text(self, comparison, generator) -> None:
        """Should compare full markdown against the focus question."""
        await collect(comparison.stream_compare("p1", ["a.pdf", "b.pdf"], focus="  Which is deeper?  "))

        prompt = prompt_text(generator.calls[-1])
        assert "Focus / Question: Which is deeper?" in prompt
        assert f"[P1]\n{PAPER_MARKDOWN}" in prompt
        assert "Summary A" not in prompt

    @pytest.mark.asyncio
    async def test_per_document_truncation(self, summarizer, text_service, generator) -> None:
        """Should cap each paper at compare_max_chars_each."""
        comparison = ComparisonOrchestrator(
            text_service, summarizer, generator, RAGSettings(compare_max_chars_each=20)
        )

        await collect(comparison.stream_compare("p1", ["a.pdf"], focus="depth"))

        prompt = prompt_text(generator.calls[-1])
        assert f"[P1]\n{PAPER_MARKDOWN[:20]}" in prompt
        assert PAPER_MARKDOWN[:21] not in prompt

    @pytest.mark.asyncio
    async def test_aggregate_cap(self, summarizer, text_service, generator) -> None:
        """Should refuse combined content over compare_max_total_chars."""
        comparison = ComparisonOrchestrator(
            text_service, summarizer, generator, RAGSettings(compare_max_total_chars=15)
        )

        with pytest.raises(SizeLimitExceededError):
            await collect(comparison.stream_compare("p1", ["a.pdf", "b.pdf"]))

        assert generator.calls == []
