"""
Section lookup service.

Returns one named section of a paper, raw or summarized. The heuristic
heading match is tried first; when it finds nothing the model is asked to
locate the section in the whole document.

Dependencies: paperdesk.core.document_processing.sections, paperdesk.boundary.llm
System role: Section view of extracted papers
"""

import logging
from collections.abc import AsyncIterator
from enum import Enum

from paperdesk.boundary.llm.generation_client import TextGenerator
from paperdesk.configs.rag import RAGSettings
from paperdesk.core.document_processing.chunker import soft_truncate
from paperdesk.core.document_processing.sections import extract_section
from paperdesk.core.exceptions import ValidationError
from paperdesk.core.rag.document_text import DocumentTextService
from paperdesk.core.rag.prompts import SECTION_DESCRIBE_PROMPT, SECTION_EXTRACT_PROMPT
from paperdesk.models.document import DocumentRef
from paperdesk.models.streaming import StreamEvent, StreamEventType, progress, token

logger = logging.getLogger(__name__)

SECTION_TEMPERATURE = 0.2
SECTION_MAX_TOKENS = 2048


class SectionMode(str, Enum):
    RAW = "raw"
    SUMMARY = "summary"


class SectionService:
    """Stream a named section of a document."""

    def __init__(
        self,
        text_service: DocumentTextService,
        generator: TextGenerator,
        settings: RAGSettings | None = None,
    ) -> None:
        self._text = text_service
        self._generator = generator
        self._settings = settings or RAGSettings()

    async def stream_section(
        self,
        ref: DocumentRef,
        name: str,
        mode: SectionMode = SectionMode.RAW,
    ) -> AsyncIterator[StreamEvent]:
        """
        Stream a section's text (raw) or a 150-word summary of it.

        Args:
            ref: Document to read
            name: Canonical or literal section name
            mode: RAW or SUMMARY

        Yields:
            StreamEvent: TOKEN frames, then COMPLETE with the text and how it was found

        Raises:
            ValidationError: If name is blank
        """
        if not name or not name.strip():
            raise ValidationError("Both path and name are required", field="name")

        markdown = await self._text.ensure_markdown(ref)
        section = extract_section(markdown, name)
        logger.info(
            f"{__name__}:stream_section - {ref.key} [{name}] heuristic={'hit' if section else 'miss'}, mode={mode.value}"
        )

        if mode == SectionMode.RAW and section is not None:
            yield token(section, 0)
            yield StreamEvent(event=StreamEventType.COMPLETE, data={"text": section, "source": "heading"})
            return

        if section is None:
            yield progress(f'🔎 Heading "{name}" not found, asking the model…')
        document = section if section is not None else soft_truncate(markdown, self._settings.full_document_char_limit)
        prompt = SECTION_EXTRACT_PROMPT if mode == SectionMode.RAW else SECTION_DESCRIBE_PROMPT
        messages = prompt.format_messages(name=name, document=document)

        text = ""
        index = 0
        async for part in self._generator.stream(messages, temperature=SECTION_TEMPERATURE, max_tokens=SECTION_MAX_TOKENS):
            text += part
            yield token(part, index)
            index += 1
        yield StreamEvent(event=StreamEventType.COMPLETE, data={"text": text, "source": "model"})
