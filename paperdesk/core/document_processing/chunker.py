"""
Fixed-window and section-aware text chunking.

Fixed windows advance by (chunk_size - overlap) characters until the window
start passes the end of the text, so the final window may be a short tail
that lies entirely inside the previous overlap. Section-aware chunking keeps
sections whole when they fit and sub-windows the rest.

Dependencies: paperdesk.models.chunk
System role: First stage of document indexing and summarization
"""

import logging
import re
from enum import Enum

from paperdesk.core.exceptions import ValidationError
from paperdesk.models.chunk import Chunk, Section

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1800
DEFAULT_OVERLAP = 200
DEFAULT_SECTION_MAX_CHARS = 3200
DEFAULT_SECTION_OVERLAP = 1000
PREAMBLE_TITLE = "Preamble"

LATEX_HEADING = re.compile(r"^\s*\\(?:sub)*section\*?\{(.+?)\}")
MARKDOWN_HEADING = re.compile(r"^\s{0,3}(#{1,6})\s+(.+?)\s*#*\s*$")


class HeadingStyle(str, Enum):
    """Which heading syntax opens a new section."""

    LATEX = "latex"
    MARKDOWN = "markdown"
    ANY = "any"


def _validate_window(chunk_size: int, overlap: int) -> None:
    if chunk_size <= 0:
        raise ValidationError(
            "chunk_size must be positive",
            field="chunk_size",
            details={"chunk_size": chunk_size},
        )
    if overlap < 0:
        raise ValidationError(
            "overlap must not be negative",
            field="overlap",
            details={"overlap": overlap},
        )
    if overlap >= chunk_size:
        raise ValidationError(
            "overlap must be smaller than chunk_size",
            field="overlap",
            details={"chunk_size": chunk_size, "overlap": overlap},
        )


def _windows(text: str, chunk_size: int, overlap: int) -> list[str]:
    step = chunk_size - overlap
    return [text[start:start + chunk_size] for start in range(0, len(text), step)]


def chunk_text(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_OVERLAP,
    source: str | None = None,
) -> list[Chunk]:
    """
    Split text into overlapping fixed-size windows.

    Args:
        text: Text to split
        chunk_size: Maximum characters per chunk
        overlap: Characters shared by consecutive chunks
        source: Optional document path recorded on every chunk

    Returns:
        list[Chunk]: Chunks with ids "0", "1", ... in text order

    Raises:
        ValidationError: If overlap >= chunk_size, chunk_size <= 0 or overlap < 0
    """
    _validate_window(chunk_size, overlap)
    return [
        Chunk(id=str(index), text=window, source=source)
        for index, window in enumerate(_windows(text, chunk_size, overlap))
    ]


def heading_title(line: str, style: HeadingStyle = HeadingStyle.ANY) -> str | None:
    """
    Return the heading title if the line opens a section, else None.

    Args:
        line: One line of document text
        style: Heading syntax to recognize
    """
    if style in (HeadingStyle.LATEX, HeadingStyle.ANY):
        match = LATEX_HEADING.match(line)
        if match:
            return match.group(1).strip()
    if style in (HeadingStyle.MARKDOWN, HeadingStyle.ANY):
        match = MARKDOWN_HEADING.match(line)
        if match:
            return match.group(2).strip()
    return None


def split_sections(text: str, style: HeadingStyle = HeadingStyle.ANY) -> list[Section]:
    """
    Split a document into sections at heading lines.

    Text before the first heading becomes a "Preamble" section. The heading
    line stays at the top of its own section. Blank sections are dropped.

    Args:
        text: Markdown or LaTeX-flavoured document text
        style: Heading syntax that opens a section

    Returns:
        list[Section]: Sections in document order
    """
    sections: list[Section] = []
    title = PREAMBLE_TITLE
    buffer: list[str] = []

    def flush() -> None:
        body = "\n".join(buffer)
        if body.strip():
            sections.append(Section(title=title, text=body))

    for line in text.split("\n"):
        heading = heading_title(line, style)
        if heading is not None:
            flush()
            title = heading
            buffer = [line]
        else:
            buffer.append(line)
    flush()
    return sections


def chunk_sections(
    text: str,
    max_chars: int = DEFAULT_SECTION_MAX_CHARS,
    overlap_chars: int = DEFAULT_SECTION_OVERLAP,
    style: HeadingStyle = HeadingStyle.ANY,
    source: str | None = None,
) -> list[Chunk]:
    """
    Chunk a document section by section.

    A section of at most max_chars characters becomes one chunk "sec<i>";
    a longer one is split into fixed windows "sec<i>_part<j>".

    Args:
        text: Document text
        max_chars: Largest section kept whole
        overlap_chars: Overlap used when sub-windowing
        style: Heading syntax that opens a section
        source: Optional document path recorded on every chunk

    Returns:
        list[Chunk]: Chunks tagged with their section title

    Raises:
        ValidationError: If the window parameters are invalid
    """
    _validate_window(max_chars, overlap_chars)
    chunks: list[Chunk] = []
    for index, section in enumerate(split_sections(text, style)):
        if len(section.text) <= max_chars:
            chunks.append(
                Chunk(id=f"sec{index}", text=section.text, section=section.title, source=source)
            )
            continue
        for part, window in enumerate(_windows(section.text, max_chars, overlap_chars)):
            chunks.append(
                Chunk(
                    id=f"sec{index}_part{part}",
                    text=window,
                    section=section.title,
                    source=source,
                )
            )
    logger.debug(
        f"{__name__}:chunk_sections - Produced {len(chunks)} chunks",
        extra={"source": source, "max_chars": max_chars},
    )
    return chunks


def soft_truncate(text: str, limit: int) -> str:
    """Return at most the first `limit` characters of text."""
    return text if len(text) <= limit else text[:limit]
