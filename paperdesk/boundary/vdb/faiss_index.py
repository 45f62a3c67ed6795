"""
FAISS vector index for local development.

Provides the same contract as S3VectorsIndex with an in-process index.
Vectors are L2-normalized so inner product equals cosine similarity.
Filtered queries scan the whole index so a filter never starves top_k.

Dependencies: faiss-cpu, numpy
System role: Local vector index for development and tests
"""

import logging
from typing import Any

import faiss
import numpy as np

from paperdesk.boundary.vdb.vector_schemas import VectorMatch, VectorRecord, matches_filter
from paperdesk.core.exceptions import IndexingFailedError

logger = logging.getLogger(__name__)


class FAISSVectorIndex:
    """In-memory FAISS index keyed by string ids."""

    def __init__(self, dimension: int | None = None) -> None:
        """
        Initialize FAISS index.

        Args:
            dimension: Vector dimension; inferred from the first upsert when None
        """
        self._dimension = dimension
        self._index: faiss.IndexIDMap2 | None = None
        self._int_ids: dict[str, int] = {}
        self._keys: dict[int, str] = {}
        self._metadata: dict[int, dict[str, Any]] = {}
        self._next_id = 0
        if dimension:
            self._index = self._create(dimension)

    @staticmethod
    def _create(dimension: int) -> faiss.IndexIDMap2:
        logger.info(f"{__name__}:_create - Creating FAISS index (dimension={dimension})")
        return faiss.IndexIDMap2(faiss.IndexFlatIP(dimension))

    def _as_matrix(self, vectors: list[list[float]]) -> np.ndarray:
        matrix = np.asarray(vectors, dtype="float32")
        if matrix.ndim != 2 or matrix.shape[1] != self._dimension:
            raise IndexingFailedError(
                "Vector dimension does not match index",
                details={"expected": self._dimension, "received": list(matrix.shape)},
            )
        faiss.normalize_L2(matrix)
        return matrix

    def __len__(self) -> int:
        return 0 if self._index is None else self._index.ntotal

    async def upsert(self, records: list[VectorRecord]) -> None:
        """Insert or replace vectors by id."""
        if not records:
            return
        # Last record wins when an id repeats within the batch.
        records = list({r.id: r for r in records}.values())
        if self._index is None:
            self._dimension = len(records[0].values)
            self._index = self._create(self._dimension)

        matrix = self._as_matrix([r.values for r in records])
        replaced = [self._int_ids[r.id] for r in records if r.id in self._int_ids]
        if replaced:
            self._remove(replaced)

        new_ids = []
        for record in records:
            int_id = self._next_id
            self._next_id += 1
            self._int_ids[record.id] = int_id
            self._keys[int_id] = record.id
            self._metadata[int_id] = dict(record.metadata)
            new_ids.append(int_id)
        self._index.add_with_ids(matrix, np.asarray(new_ids, dtype="int64"))
        logger.debug(f"{__name__}:upsert - Upserted {len(records)} vectors (replaced {len(replaced)})")

    async def query(
        self,
        vector: list[float],
        top_k: int,
        filter: dict[str, Any] | None = None,
    ) -> list[VectorMatch]:
        """Return up to top_k matches by descending cosine similarity."""
        if self._index is None or self._index.ntotal == 0 or top_k <= 0:
            return []
        k = self._index.ntotal if filter else min(top_k, self._index.ntotal)
        scores, ids = self._index.search(self._as_matrix([vector]), k)

        matches: list[VectorMatch] = []
        for score, int_id in zip(scores[0], ids[0]):
            if int_id < 0:
                continue
            metadata = self._metadata[int(int_id)]
            if not matches_filter(metadata, filter):
                continue
            matches.append(VectorMatch(id=self._keys[int(int_id)], score=float(score), metadata=dict(metadata)))
            if len(matches) >= top_k:
                break
        return matches

    async def delete_by_metadata(self, filter: dict[str, Any]) -> int:
        """Delete every vector whose metadata matches filter."""
        doomed = [int_id for int_id, metadata in self._metadata.items() if matches_filter(metadata, filter)]
        if doomed:
            self._remove(doomed)
        return len(doomed)

    def _remove(self, int_ids: list[int]) -> None:
        self._index.remove_ids(np.asarray(int_ids, dtype="int64"))
        for int_id in int_ids:
            key = self._keys.pop(int_id)
            self._int_ids.pop(key, None)
            self._metadata.pop(int_id, None)
