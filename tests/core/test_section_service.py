"""Tests for the section lookup service."""

import pytest

from paperdesk.core.exceptions import ValidationError
from paperdesk.core.rag.section_service import SectionMode
from paperdesk.models.document import DocumentRef
from paperdesk.models.streaming import StreamEventType
from fakes import PAPER_MARKDOWN, collect, prompt_text

PDF = DocumentRef(project_id="p1", path="paper.pdf")


@pytest.fixture(autouse=True)
def paper(object_store):
    object_store.objects["p1/paper.pdf"] = b"%PDF-1.4"


class TestStreamSection:
    """Tests for SectionService.stream_section."""

    @pytest.mark.asyncio
    async def test_raw_heading_hit(self, section_service, generator) -> None:
        """Should return the heading match without calling the model."""
        events = await collect(section_service.stream_section(PDF, "methods"))

        expected = "# Methods\nWe reformulate layers as residual functions."
        assert [e.event for e in events] == [StreamEventType.TOKEN, StreamEventType.COMPLETE]
        assert events[-1].data == {"text": expected, "source": "heading"}
        assert generator.calls == []

    @pytest.mark.asyncio
    async def test_raw_miss_asks_model(self, section_service, generator) -> None:
        """Should fall back to the model over the whole document."""
        generator.replies = ["Appendix text"]

        events = await collect(section_service.stream_section(PDF, "Appendix"))

        assert events[0].event == StreamEventType.PROGRESS
        assert "Appendix" in events[0].data["message"]
        call = generator.calls[0]
        assert (call["temperature"], call["max_tokens"]) == (0.2, 2048)
        assert 'section titled "Appendix"' in prompt_text(call)
        assert PAPER_MARKDOWN in prompt_text(call)
        assert events[-1].data == {"text": "Appendix text", "source": "model"}

    @pytest.mark.asyncio
    async def test_summary_of_found_section(self, section_service, generator) -> None:
        """Should summarize only the matched section."""
        generator.replies = ["Residual reformulation."]

        events = await collect(section_service.stream_section(PDF, "Results", SectionMode.SUMMARY))

        prompt = prompt_text(generator.calls[0])
        assert "150-word summary" in prompt
        assert "3.57% top-5 error" in prompt
        assert "Deep Residual Learning" not in prompt
        assert all(e.event != StreamEventType.PROGRESS for e in events)
        assert events[-1].data["source"] == "model"

    @pytest.mark.asyncio
    async def test_blank_name(self, section_service) -> None:
        """Should reject a blank section name."""
        with pytest.raises(ValidationError):
            await collect(section_service.stream_section(PDF, " "))
