"""
Summarization orchestrator.

Chooses a strategy by extracted-text length: below the one-shot limit the
whole document goes into one request; above it, each large section is
summarized in turn and the section summaries are merged. The result is
cached beside the source file.

Dependencies: paperdesk.core.rag, paperdesk.boundary.llm
System role: Paper summaries (single, batch and streamed)
"""

import asyncio
import logging
from collections.abc import AsyncIterator

from pydantic import BaseModel

from paperdesk.application.cache.artifact_cache import ArtifactCache, ArtifactKind
from paperdesk.boundary.llm.generation_client import TextGenerator
from paperdesk.configs.rag import RAGSettings
from paperdesk.core.document_processing.chunker import chunk_sections
from paperdesk.core.exceptions import SizeLimitExceededError, ValidationError
from paperdesk.core.rag.document_text import DocumentTextService
from paperdesk.core.rag.prompts import (
    MERGE_SUMMARY_PROMPT,
    ONE_SHOT_SUMMARY_PROMPT,
    SECTION_SUMMARY_PROMPT,
)
from paperdesk.models.document import DocumentRef
from paperdesk.models.streaming import StreamEvent, StreamEventType, progress, token

logger = logging.getLogger(__name__)

ONE_SHOT_TEMPERATURE = 0.3
ONE_SHOT_MAX_TOKENS = 1024
SECTION_TEMPERATURE = 0.3
SECTION_MAX_TOKENS = 384
MERGE_TEMPERATURE = 0.25
MERGE_MAX_TOKENS = 768


class SummaryOutcome(BaseModel):
    """Per-document result of a batch summarization."""

    path: str
    summary: str | None = None
    error: str | None = None


def resolve_document(raw_path: str) -> DocumentRef:
    """
    Split "<project>/<path>" into a DocumentRef.

    A first segment containing a dot is a file name, so the path belongs to
    the root project.
    """
    raw_path = raw_path.lstrip("/")
    first, sep, rest = raw_path.partition("/")
    if not sep or "." in first:
        return DocumentRef(project_id="", path=raw_path)
    return DocumentRef(project_id=first, path=rest)


class Summarizer:
    """Produce and cache structured paper summaries."""

    def __init__(
        self,
        cache: ArtifactCache,
        text_service: DocumentTextService,
        generator: TextGenerator,
        settings: RAGSettings | None = None,
    ) -> None:
        """
        Initialize summarizer.

        Args:
            cache: Artifact cache for summaries
            text_service: Document text loader
            generator: Text generator
            settings: One-shot limit and two-pass section sizes
        """
        self._cache = cache
        self._text = text_service
        self._generator = generator
        self._settings = settings or RAGSettings()

    def is_one_shot(self, text: str) -> bool:
        return len(text) < self._settings.one_shot_limit

    async def ensure_within_size(self, ref: DocumentRef, force: bool = False) -> None:
        """
        Reject oversized raw documents unless forced.

        Raises:
            SizeLimitExceededError: If the source exceeds the configured byte limit
            NotFoundError: If the source does not exist
        """
        stat = await self._cache.stat_source(ref)
        limit = self._settings.summarize_max_bytes
        if stat.size > limit and not force:
            raise SizeLimitExceededError(
                f"PDF is {stat.size / 1048576:.1f} MB; summarization disabled for "
                f">{limit // 1048576} MB unless force=true",
                size=stat.size,
                limit=limit,
            )

    async def stream_summary(self, ref: DocumentRef, force: bool = False) -> AsyncIterator[StreamEvent]:
        """
        Summarize a document, streaming progress and the final text.

        Args:
            ref: Document to summarize
            force: Skip the cached summary (the result is always written)

        Yields:
            StreamEvent: PROGRESS and TOKEN frames, then COMPLETE with the summary
        """
        if not force:
            cached = await self._cache.get(ref, ArtifactKind.SUMMARY)
            if cached is not None:
                yield token(cached, 0)
                yield StreamEvent(event=StreamEventType.COMPLETE, data={"summary": cached, "cached": True})
                return

        markdown = await self._text.ensure_markdown(ref)
        if self.is_one_shot(markdown):
            yield progress("🔍 Generating one-shot summary…\n", mode="one_shot")
            messages = ONE_SHOT_SUMMARY_PROMPT.format_messages(document=markdown)
            temperature, max_tokens = ONE_SHOT_TEMPERATURE, ONE_SHOT_MAX_TOKENS
        else:
            yield progress("⚙️ Document too large, running two-pass summarization…\n", mode="two_pass")
            sections = chunk_sections(
                markdown,
                max_chars=self._settings.map_section_max_chars,
                overlap_chars=self._settings.map_section_overlap_chars,
            )
            section_summaries = []
            for section in sections:
                yield progress(f'✂️ Summarizing section "{section.section}"…', section=section.section)
                summary = await self._generator.complete(
                    SECTION_SUMMARY_PROMPT.format_messages(section=section.section, text=section.text),
                    temperature=SECTION_TEMPERATURE,
                    max_tokens=SECTION_MAX_TOKENS,
                )
                section_summaries.append(f"**{section.section}**:\n{summary.strip()}")
            yield progress(f"\n🔗 Merging {len(section_summaries)} section summaries…\n")
            messages = MERGE_SUMMARY_PROMPT.format_messages(section_summaries="\n\n".join(section_summaries))
            temperature, max_tokens = MERGE_TEMPERATURE, MERGE_MAX_TOKENS

        text = ""
        index = 0
        async for part in self._generator.stream(messages, temperature=temperature, max_tokens=max_tokens):
            text += part
            yield token(part, index)
            index += 1

        summary = text.strip()
        await self._cache.put(ref, ArtifactKind.SUMMARY, summary)
        logger.info(f"{__name__}:stream_summary - Cached summary for {ref.key} ({len(summary)} chars)")
        yield StreamEvent(event=StreamEventType.COMPLETE, data={"summary": summary, "cached": False})

    async def summarize(self, ref: DocumentRef, force: bool = False) -> str:
        """
        Return the document summary, generating and caching it on a miss.

        Args:
            ref: Document to summarize
            force: Regenerate even when a summary is cached

        Returns:
            str: Markdown summary
        """
        summary = ""
        async for event in self.stream_summary(ref, force=force):
            if event.event == StreamEventType.COMPLETE:
                summary = event.data["summary"]
        return summary

    async def summarize_many(
        self,
        project_id: str,
        paths: list[str],
        force: bool = False,
    ) -> list[SummaryOutcome]:
        """
        Summarize several documents concurrently.

        A failing document yields an outcome with error set; the others
        still complete.

        Raises:
            ValidationError: If paths is empty
        """
        if not paths:
            raise ValidationError("paths must be a non-empty list", field="paths")

        async def one(path: str) -> SummaryOutcome:
            try:
                summary = await self.summarize(DocumentRef(project_id=project_id, path=path), force=force)
                return SummaryOutcome(path=path, summary=summary)
            except Exception as e:
                logger.warning(f"{__name__}:summarize_many - {path} failed - {type(e).__name__}: {e}")
                return SummaryOutcome(path=path, error=str(e))

        return list(await asyncio.gather(*(one(path) for path in paths)))

    async def get_summary(self, raw_path: str, force: bool = False) -> str:
        """Summarize a document addressed as "<project>/<path>"."""
        return await self.summarize(resolve_document(raw_path), force=force)
