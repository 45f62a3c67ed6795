"""
Artifact cache over the object store.

Derived artifacts (markdown, summaries, chunk lists, QA answers) live next
to their source file under suffixed keys. Key existence is the only hit
signal: no TTL, no versioning, no content hash. All key naming is confined
to ArtifactKeys so a different validity strategy can replace it without
touching the orchestrators.

Dependencies: paperdesk.boundary.aws, paperdesk.models
System role: Narrow cache interface used by every orchestrator
"""

import hashlib
import logging
from enum import Enum
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from paperdesk.core.exceptions import NotFoundError
from paperdesk.models.chunk import Chunk, ChunkList
from paperdesk.models.document import DocumentRef, ObjectEntry, ObjectStat

logger = logging.getLogger(__name__)


class ObjectStore(Protocol):
    """Subset of S3ObjectStore the cache layer depends on."""

    async def write(self, key: str, data: bytes, content_type: str | None = None) -> None: ...

    async def read(self, key: str) -> bytes: ...

    async def stat(self, key: str) -> ObjectStat: ...

    async def delete(self, key: str) -> None: ...

    async def list_dir(self, prefix: str = "", include_internal: bool = False) -> list[ObjectEntry]: ...

    async def list_recursive(self, prefix: str = "", include_internal: bool = False) -> list[str]: ...


class ArtifactKind(str, Enum):
    """Kinds of derived artifact, each with its own key suffix."""

    MARKDOWN = "mmd"
    SUMMARY = "summary"
    CHUNKS = "chunks"
    QA = "qa"


SUFFIXES = {
    ArtifactKind.MARKDOWN: ".mmd",
    ArtifactKind.SUMMARY: ".summary.md",
    ArtifactKind.CHUNKS: ".chunks.json",
}
QA_SUFFIX = ".qa.md"
QA_HASH_LENGTH = 16


def question_hash(question: str) -> str:
    """Short stable hash of a question, used in QA answer keys."""
    return hashlib.sha256(question.encode("utf-8")).hexdigest()[:QA_HASH_LENGTH]


class ArtifactKeys:
    """Object key naming for derived artifacts."""

    @staticmethod
    def source(ref: DocumentRef) -> str:
        return ref.key

    @staticmethod
    def artifact(ref: DocumentRef, kind: ArtifactKind, question: str | None = None) -> str:
        """
        Key of one derived artifact.

        Args:
            ref: Source document
            kind: Artifact kind
            question: Required for ArtifactKind.QA

        Raises:
            ValueError: If a QA key is requested without a question
        """
        if kind == ArtifactKind.QA:
            if question is None:
                raise ValueError("question is required for QA artifact keys")
            return f"{ref.key}.{question_hash(question)}{QA_SUFFIX}"
        return f"{ref.key}{SUFFIXES[kind]}"

    @staticmethod
    def is_qa_answer(ref: DocumentRef, key: str) -> bool:
        """True if key is a cached QA answer for ref."""
        prefix = f"{ref.key}."
        if not (key.startswith(prefix) and key.endswith(QA_SUFFIX)):
            return False
        digest = key[len(prefix):-len(QA_SUFFIX)]
        return len(digest) == QA_HASH_LENGTH and all(c in "0123456789abcdef" for c in digest)

    @staticmethod
    def project_prefix(project_id: str) -> str:
        return f"{project_id}/" if project_id else ""


class ArtifactCache:
    """Read-through helpers for derived artifacts of project documents."""

    def __init__(self, store: ObjectStore) -> None:
        """
        Initialize artifact cache.

        Args:
            store: Object store holding sources and artifacts
        """
        self._store = store

    @property
    def store(self) -> ObjectStore:
        return self._store

    async def get(self, ref: DocumentRef, kind: ArtifactKind, question: str | None = None) -> str | None:
        """
        Return a cached text artifact, or None on a miss.

        Args:
            ref: Source document
            kind: Artifact kind (not CHUNKS, see get_chunks)
            question: Question text for QA answers
        """
        key = ArtifactKeys.artifact(ref, kind, question)
        try:
            data = await self._store.read(key)
        except NotFoundError:
            logger.debug(f"{__name__}:get - Cache miss {key}")
            return None
        logger.debug(f"{__name__}:get - Cache hit {key}")
        return data.decode("utf-8")

    async def put(self, ref: DocumentRef, kind: ArtifactKind, text: str, question: str | None = None) -> None:
        """Write a text artifact, overwriting any previous value."""
        key = ArtifactKeys.artifact(ref, kind, question)
        await self._store.write(key, text.encode("utf-8"), content_type="text/markdown; charset=utf-8")

    async def get_chunks(self, ref: DocumentRef) -> list[Chunk] | None:
        """Return the cached chunk list, or None on a miss."""
        key = ArtifactKeys.artifact(ref, ArtifactKind.CHUNKS)
        try:
            data = await self._store.read(key)
        except NotFoundError:
            logger.debug(f"{__name__}:get_chunks - Cache miss {key}")
            return None
        try:
            return ChunkList.model_validate_json(data).chunks
        except PydanticValidationError as e:
            logger.warning(f"{__name__}:get_chunks - Ignoring unreadable chunk cache {key}: {e}")
            return None

    async def put_chunks(self, ref: DocumentRef, chunks: list[Chunk]) -> None:
        """Write the chunk list artifact."""
        key = ArtifactKeys.artifact(ref, ArtifactKind.CHUNKS)
        payload = ChunkList(chunks=chunks).model_dump_json(exclude_none=True)
        await self._store.write(key, payload.encode("utf-8"), content_type="application/json")

    async def read_source(self, ref: DocumentRef) -> bytes:
        """
        Read the raw project file.

        Raises:
            NotFoundError: If the file does not exist
        """
        return await self._store.read(ArtifactKeys.source(ref))

    async def stat_source(self, ref: DocumentRef) -> ObjectStat:
        """HEAD the raw project file."""
        return await self._store.stat(ArtifactKeys.source(ref))

    async def list_indexed(self, project_id: str) -> list[str]:
        """
        Paths of project files that have a cached chunk list.

        Args:
            project_id: Project to scan

        Returns:
            list[str]: Sorted relative paths
        """
        prefix = ArtifactKeys.project_prefix(project_id)
        suffix = SUFFIXES[ArtifactKind.CHUNKS]
        keys = await self._store.list_recursive(prefix, include_internal=True)
        return sorted(key[len(prefix):-len(suffix)] for key in keys if key.endswith(suffix))
