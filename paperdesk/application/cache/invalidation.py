"""
Cache invalidation for replaced or deleted documents.

Removes every derived artifact of a document and its vectors. Each step is
best-effort: a failure is logged and the remaining steps still run, so
invalidating an uncached document is a no-op that succeeds.

Dependencies: paperdesk.application.cache.artifact_cache, paperdesk.boundary.vdb
System role: Explicit cache consistency on document replacement
"""

import logging

from pydantic import BaseModel, Field

from paperdesk.application.cache.artifact_cache import (
    SUFFIXES,
    ArtifactKeys,
    ArtifactKind,
    ObjectStore,
)
from paperdesk.boundary.vdb.vector_schemas import VectorIndex
from paperdesk.models.document import DocumentRef

logger = logging.getLogger(__name__)


class InvalidationReport(BaseModel):
    """What an invalidation touched."""

    deleted_keys: list[str] = Field(default_factory=list)
    deleted_vectors: int = 0
    failures: list[str] = Field(default_factory=list)


class CacheInvalidator:
    """Delete cached artifacts and vectors of a document."""

    def __init__(self, store: ObjectStore, index: VectorIndex) -> None:
        self._store = store
        self._index = index

    async def invalidate(self, ref: DocumentRef) -> InvalidationReport:
        """
        Remove markdown, summary, chunk list, QA answers and vectors of ref.

        Args:
            ref: Document whose derived state is stale

        Returns:
            InvalidationReport: Deleted keys, deleted vector count and failures
        """
        report = InvalidationReport()
        keys = [ArtifactKeys.artifact(ref, kind) for kind in SUFFIXES]

        try:
            siblings = await self._store.list_recursive(f"{ref.key}.", include_internal=True)
            keys.extend(key for key in siblings if ArtifactKeys.is_qa_answer(ref, key))
        except Exception as e:
            logger.warning(f"{__name__}:invalidate - Could not list QA answers for {ref.key}: {e}")
            report.failures.append(f"list {ref.key}.*{ArtifactKind.QA.value}")

        for key in keys:
            try:
                await self._store.delete(key)
                report.deleted_keys.append(key)
            except Exception as e:
                logger.warning(f"{__name__}:invalidate - Could not delete {key}: {e}")
                report.failures.append(key)

        try:
            report.deleted_vectors = await self._index.delete_by_metadata(
                {"project_id": ref.project_id, "path": ref.path}
            )
        except Exception as e:
            logger.warning(f"{__name__}:invalidate - Could not delete vectors for {ref.key}: {e}")
            report.failures.append(f"vectors {ref.key}")

        logger.info(
            f"{__name__}:invalidate - Invalidated {ref.key}",
            extra={"deleted_keys": len(report.deleted_keys), "deleted_vectors": report.deleted_vectors},
        )
        return report
