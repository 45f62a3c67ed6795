"""
Section lookup and LLM section parsing.

extract_section finds a named section by matching loose aliases against
headings. SectionParser asks the generator for a clean section list and
falls back to heading-based splitting when the reply is unusable.

Dependencies: paperdesk.boundary.llm, paperdesk.core.document_processing.chunker
System role: Section-level access to extracted documents
"""

import json
import logging
import re

from paperdesk.boundary.llm.generation_client import TextGenerator
from paperdesk.core.document_processing.chunker import (
    LATEX_HEADING,
    MARKDOWN_HEADING,
    soft_truncate,
    split_sections,
)
from paperdesk.core.rag.prompts import SECTION_PARSER_PROMPT
from paperdesk.models.chunk import Section

logger = logging.getLogger(__name__)

SECTION_ALIASES: dict[str, list[re.Pattern[str]]] = {
    "Abstract": [re.compile(r"abstract", re.I)],
    "Introduction": [
        re.compile(r"introduction", re.I),
        re.compile(r"\bintro\b", re.I),
    ],
    "Background": [
        re.compile(r"\bbackground\b", re.I),
        re.compile(r"\brelated\s+work\b", re.I),
    ],
    "Methods": [
        re.compile(r"\bmaterials?\s+and\s+methods\b", re.I),
        re.compile(r"\bmethodology\b", re.I),
        re.compile(r"\bmethods?\b", re.I),
    ],
    "Results": [
        re.compile(r"\bresults?\b", re.I),
        re.compile(r"\bexperiments?\b", re.I),
        re.compile(r"\bfindings?\b", re.I),
    ],
    "Discussion": [re.compile(r"\bdiscussion\b", re.I)],
    "Conclusion": [
        re.compile(r"\bconclusions?\b", re.I),
        re.compile(r"\bsummary\b", re.I),
    ],
    "Limitations": [re.compile(r"\blimitations?\b", re.I)],
    "Future Work": [re.compile(r"\bfuture\s+work\b", re.I)],
    "Related Work": [re.compile(r"\brelated\s+work\b", re.I)],
}

SECTION_PARSER_MAX_TOKENS = 4096


def _aliases_for(name: str) -> list[re.Pattern[str]]:
    for canonical, patterns in SECTION_ALIASES.items():
        if canonical.lower() == name.strip().lower():
            return patterns
    return [re.compile(re.escape(name.strip()), re.I)]


def _heading(line: str) -> tuple[int, str] | None:
    """Return (level, title) for a heading line; LaTeX depth counts subsections."""
    match = MARKDOWN_HEADING.match(line)
    if match:
        return len(match.group(1)), match.group(2).strip()
    match = LATEX_HEADING.match(line)
    if match:
        depth = re.match(r"^\s*\\((?:sub)*)section", line).group(1)
        return depth.count("sub") + 1, match.group(1).strip()
    return None


def extract_section(text: str, name: str) -> str | None:
    """
    Return the raw text of a named section, or None when no heading matches.

    The section runs from its heading to the next heading of the same or a
    higher level.

    Args:
        text: Extracted document markdown
        name: Canonical section name ("Methods") or any literal heading text

    Returns:
        str | None: Section text including its heading line
    """
    if not name or not name.strip():
        return None

    patterns = _aliases_for(name)
    lines = re.split(r"\r?\n", text)
    start = level = None
    for index, line in enumerate(lines):
        heading = _heading(line)
        if heading and any(p.search(heading[1]) for p in patterns):
            start, level = index, heading[0]
            break
    if start is None:
        return None

    end = len(lines)
    for index in range(start + 1, len(lines)):
        heading = _heading(lines[index])
        if heading and heading[0] <= level:
            end = index
            break
    return "\n".join(lines[start:end]).strip()


def _strip_code_fence(reply: str) -> str:
    reply = reply.strip()
    if reply.startswith("```"):
        reply = re.sub(r"^```[a-zA-Z]*\s*", "", reply)
        reply = re.sub(r"\s*```$", "", reply)
    return reply


class SectionParser:
    """LLM-backed section splitter with a deterministic fallback."""

    def __init__(self, generator: TextGenerator, max_chars: int) -> None:
        """
        Initialize parser.

        Args:
            generator: Text generator used to request the JSON section list
            max_chars: Longest document prefix sent to the model
        """
        self._generator = generator
        self._max_chars = max_chars

    async def parse(self, text: str) -> list[Section]:
        """
        Split a document into titled sections.

        Args:
            text: Extracted document markdown

        Returns:
            list[Section]: Parsed sections, or heading-based sections on any failure
        """
        messages = SECTION_PARSER_PROMPT.format_messages(document=soft_truncate(text, self._max_chars))
        try:
            reply = await self._generator.complete(
                messages, temperature=0.0, max_tokens=SECTION_PARSER_MAX_TOKENS
            )
            parsed = json.loads(_strip_code_fence(reply))
            if not isinstance(parsed, list):
                raise ValueError("section list is not a JSON array")
            sections = [
                Section(title=str(item.get("title") or "").strip(), text=str(item.get("text") or "").strip())
                for item in parsed
                if isinstance(item, dict)
            ]
            sections = [s for s in sections if s.title and s.text]
            if not sections:
                raise ValueError("section list is empty")
            logger.info(f"{__name__}:parse - Parsed {len(sections)} sections")
            return sections
        except Exception as e:
            logger.warning(f"{__name__}:parse - Falling back to heading split - {type(e).__name__}: {e}")
            return split_sections(text)
