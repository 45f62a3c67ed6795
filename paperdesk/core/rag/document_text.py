"""
Document text service.

Turns a project file into text: PDFs go through the extractor with the
markdown cached beside the source, every other file is decoded as UTF-8.

Dependencies: paperdesk.application.cache, paperdesk.boundary.extraction
System role: Single entry point for "give me this document's text"
"""

import logging
from pathlib import PurePosixPath
from typing import Protocol

from paperdesk.application.cache.artifact_cache import ArtifactCache, ArtifactKind
from paperdesk.models.document import DocumentRef

logger = logging.getLogger(__name__)


class TextExtractor(Protocol):
    """Anything that can turn PDF bytes into markdown."""

    async def extract(self, data: bytes, filename: str = "document.pdf") -> str: ...


class DocumentTextService:
    """Load document text, extracting and caching PDF markdown on demand."""

    def __init__(self, cache: ArtifactCache, extractor: TextExtractor) -> None:
        """
        Initialize text service.

        Args:
            cache: Artifact cache for sources and markdown
            extractor: PDF to markdown converter
        """
        self._cache = cache
        self._extractor = extractor

    async def ensure_markdown(self, ref: DocumentRef, force: bool = False) -> str:
        """
        Return the document's text, extracting PDFs on a cache miss.

        Args:
            ref: Project file
            force: Re-extract even when markdown is cached

        Returns:
            str: Markdown for PDFs, decoded content for other files

        Raises:
            NotFoundError: If the source file does not exist
            ExtractionFailedError: If PDF extraction fails
        """
        if not ref.is_pdf:
            return (await self._cache.read_source(ref)).decode("utf-8", errors="replace")

        if not force:
            cached = await self._cache.get(ref, ArtifactKind.MARKDOWN)
            if cached is not None:
                return cached

        logger.info(f"{__name__}:ensure_markdown - Extracting {ref.key}")
        raw = await self._cache.read_source(ref)
        markdown = await self._extractor.extract(raw, filename=PurePosixPath(ref.path).name)
        await self._cache.put(ref, ArtifactKind.MARKDOWN, markdown)
        logger.info(f"{__name__}:ensure_markdown - Cached markdown for {ref.key} ({len(markdown)} chars)")
        return markdown
