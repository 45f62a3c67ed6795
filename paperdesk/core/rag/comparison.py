"""
Comparison orchestrator.

Compares up to ten papers in one streamed report. With a blank focus each
paper contributes its cached summary; with a focus each contributes its
full markdown, soft-truncated per document. Papers are labelled [P1],
[P2], ... by input position, and a paper that fails to load is skipped.

Dependencies: paperdesk.core.rag, paperdesk.boundary.llm
System role: Multi-paper comparative analysis
"""

import logging
from collections.abc import AsyncIterator
from enum import Enum

from pydantic import BaseModel

from paperdesk.boundary.llm.generation_client import TextGenerator
from paperdesk.configs.rag import RAGSettings
from paperdesk.core.document_processing.chunker import soft_truncate
from paperdesk.core.exceptions import SizeLimitExceededError, ValidationError
from paperdesk.core.rag.document_text import DocumentTextService
from paperdesk.core.rag.prompts import COMPARE_PROMPT, COMPARE_SUMMARY_HEADER
from paperdesk.core.rag.summarizer import Summarizer
from paperdesk.models.document import DocumentRef
from paperdesk.models.streaming import StreamEvent, StreamEventType, progress, token

logger = logging.getLogger(__name__)

COMPARE_TEMPERATURE = 0.25
COMPARE_MAX_TOKENS = 1600


class CompareMode(str, Enum):
    SUMMARY = "summary"
    GENERIC = "generic"


class LabelledPaper(BaseModel):
    label: str
    path: str
    content: str


def compare_mode(focus: str | None) -> CompareMode:
    return CompareMode.GENERIC if focus and focus.strip() else CompareMode.SUMMARY


class ComparisonOrchestrator:
    """Stream a comparative report over several papers."""

    def __init__(
        self,
        text_service: DocumentTextService,
        summarizer: Summarizer,
        generator: TextGenerator,
        settings: RAGSettings | None = None,
    ) -> None:
        """
        Initialize comparison orchestrator.

        Args:
            text_service: Document text loader (generic mode)
            summarizer: Summary source (summary mode)
            generator: Text generator for the report
            settings: Document count and size limits
        """
        self._text = text_service
        self._summarizer = summarizer
        self._generator = generator
        self._settings = settings or RAGSettings()

    def validate(self, paths: list[str]) -> None:
        """
        Check the request before touching any document.

        Raises:
            ValidationError: If paths is empty or longer than the configured maximum
        """
        max_docs = self._settings.compare_max_docs
        if not paths:
            raise ValidationError(f"paths must be a non-empty array (max {max_docs})", field="paths")
        if len(paths) > max_docs:
            raise ValidationError(
                f"paths must be a non-empty array (max {max_docs})",
                field="paths",
                details={"count": len(paths), "max": max_docs},
            )

    async def _load(self, ref: DocumentRef, mode: CompareMode, force: bool) -> str:
        if mode == CompareMode.SUMMARY:
            return await self._summarizer.summarize(ref, force=force)
        markdown = await self._text.ensure_markdown(ref)
        return soft_truncate(markdown, self._settings.compare_max_chars_each)

    async def stream_compare(
        self,
        project_id: str,
        paths: list[str],
        focus: str = "",
        force: bool = False,
    ) -> AsyncIterator[StreamEvent]:
        """
        Compare papers and stream the Markdown report.

        Args:
            project_id: Project owning every path
            paths: Documents to compare, in label order
            focus: Optional question; blank selects summary mode
            force: Regenerate summaries in summary mode

        Yields:
            StreamEvent: Per-paper progress, report tokens, then COMPLETE

        Raises:
            ValidationError: If paths is empty or too long
            SizeLimitExceededError: If the combined content exceeds the aggregate cap
        """
        self.validate(paths)
        mode = compare_mode(focus)
        logger.info(f"{__name__}:stream_compare - mode={mode.value}, papers={len(paths)}")

        papers: list[LabelledPaper] = []
        for position, path in enumerate(paths, start=1):
            label = f"[P{position}]"
            yield progress(f"🔍 Processing {label} {path} …", label=label, path=path)
            try:
                content = await self._load(DocumentRef(project_id=project_id, path=path), mode, force)
            except Exception as e:
                logger.warning(f"{__name__}:stream_compare - {label} {path} failed - {type(e).__name__}: {e}")
                yield progress(f"❌ {label} failed: {e}", label=label, path=path, failed=True)
                continue
            papers.append(LabelledPaper(label=label, path=path, content=content))
            yield progress(f"✅ {label} done", label=label, path=path)

        if not papers:
            yield progress("\nNo usable inputs, aborting.")
            yield StreamEvent(event=StreamEventType.COMPLETE, data={"report": "", "papers": []})
            return

        total = sum(len(p.content) for p in papers)
        limit = self._settings.compare_max_total_chars
        if total > limit:
            raise SizeLimitExceededError(
                f"Combined size {total} chars exceeds limit ({limit}). Reduce paper count.",
                size=total,
                limit=limit,
            )

        yield progress("\n🧠 Generating analysis…\n")
        header = COMPARE_SUMMARY_HEADER if mode == CompareMode.SUMMARY else f"Focus / Question: {focus.strip()}"
        messages = COMPARE_PROMPT.format_messages(
            header=header,
            papers="\n\n".join(f"{p.label}\n{p.content}" for p in papers),
        )
        report = ""
        index = 0
        async for part in self._generator.stream(messages, temperature=COMPARE_TEMPERATURE, max_tokens=COMPARE_MAX_TOKENS):
            report += part
            yield token(part, index)
            index += 1

        yield StreamEvent(
            event=StreamEventType.COMPLETE,
            data={"report": report, "papers": [{"label": p.label, "path": p.path} for p in papers]},
        )
