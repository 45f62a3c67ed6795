"""
S3 Vectors index for production retrieval.

Talks to Amazon S3 Vectors through the boto3 "s3vectors" client. Metadata
filters are equality maps translated to the service's $eq / $and syntax.
Similarity is reported as 1 - cosine distance. Throttled calls are retried
with jittered exponential backoff.

Dependencies: boto3, botocore, fastapi.concurrency, tenacity
System role: Production vector index
"""

import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from paperdesk.boundary.vdb.vector_schemas import VectorMatch, VectorRecord, matches_filter
from paperdesk.core.exceptions import IndexingFailedError

logger = logging.getLogger(__name__)

BATCH_SIZE = 500
LIST_PAGE_SIZE = 1000
MAX_ATTEMPTS = 5
THROTTLING_CODES = {
    "ThrottlingException",
    "TooManyRequestsException",
    "ServiceUnavailableException",
    "SlowDown",
}


def is_throttling(error: BaseException) -> bool:
    """True for ClientErrors the service raises when it sheds load."""
    if not isinstance(error, ClientError):
        return False
    code = error.response.get("Error", {}).get("Code", "")
    status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return code in THROTTLING_CODES or status in (429, 503)


def build_filter(filter: dict[str, Any] | None) -> dict[str, Any] | None:
    """Translate an equality map into S3 Vectors filter syntax."""
    if not filter:
        return None
    clauses = [{key: {"$eq": value}} for key, value in filter.items()]
    return clauses[0] if len(clauses) == 1 else {"$and": clauses}


class S3VectorsIndex:
    """S3 Vectors index client."""

    def __init__(
        self,
        vectors_bucket: str,
        index_name: str,
        region: str = "us-east-1",
        client: Any = None,
    ) -> None:
        """
        Initialize S3 Vectors index.

        Args:
            vectors_bucket: S3 Vectors bucket name
            index_name: Index name within the bucket
            region: AWS region for S3 Vectors
            client: Optional pre-built boto3 s3vectors client (tests pass a mock)
        """
        self._vectors_bucket = vectors_bucket
        self._index_name = index_name
        self._client = client or boto3.client("s3vectors", region_name=region)

    @retry(
        retry=retry_if_exception(is_throttling),
        stop=stop_after_attempt(MAX_ATTEMPTS),
        wait=wait_exponential_jitter(initial=1, max=30, jitter=5),
        before_sleep=lambda retry_state: logger.warning(
            f"{__name__}:_call - Retry {retry_state.attempt_number}/{MAX_ATTEMPTS} after throttling"
        ),
        reraise=True,
    )
    def _call(self, operation: str, **params: Any) -> dict[str, Any]:
        """Invoke one s3vectors operation, retrying on throttling."""
        return getattr(self._client, operation)(**params)

    @property
    def _target(self) -> dict[str, str]:
        return {"vectorBucketName": self._vectors_bucket, "indexName": self._index_name}

    async def upsert(self, records: list[VectorRecord]) -> None:
        """
        Insert or replace vectors, in batches.

        Raises:
            IndexingFailedError: If the service rejects a batch
        """
        if not records:
            return
        logger.info(f"{__name__}:upsert - Upserting {len(records)} vectors")
        for start in range(0, len(records), BATCH_SIZE):
            batch = records[start:start + BATCH_SIZE]
            payload = [
                {"key": r.id, "data": {"float32": r.values}, "metadata": r.metadata}
                for r in batch
            ]
            try:
                await run_in_threadpool(self._call, "put_vectors", **self._target, vectors=payload)
            except (ClientError, BotoCoreError) as e:
                raise IndexingFailedError(
                    "Failed to upsert vectors to S3 Vectors",
                    details={"error": str(e), "batch_start": start, "vector_count": len(records)},
                ) from e

    async def query(
        self,
        vector: list[float],
        top_k: int,
        filter: dict[str, Any] | None = None,
    ) -> list[VectorMatch]:
        """
        Return the top_k closest vectors that satisfy filter.

        Raises:
            IndexingFailedError: If the query fails
        """
        params: dict[str, Any] = {
            **self._target,
            "queryVector": {"float32": vector},
            "topK": top_k,
            "returnMetadata": True,
            "returnDistance": True,
        }
        service_filter = build_filter(filter)
        if service_filter:
            params["filter"] = service_filter
        try:
            response = await run_in_threadpool(self._call, "query_vectors", **params)
        except (ClientError, BotoCoreError) as e:
            raise IndexingFailedError(
                "Failed to query S3 Vectors",
                details={"error": str(e), "top_k": top_k, "filter": filter},
            ) from e

        matches = [
            VectorMatch(
                id=item["key"],
                score=1.0 - float(item.get("distance", 0.0)),
                metadata=item.get("metadata") or {},
            )
            for item in response.get("vectors", [])
        ]
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches

    async def delete_by_metadata(self, filter: dict[str, Any]) -> int:
        """
        Delete every vector whose metadata matches filter.

        Returns:
            int: Number of vectors deleted

        Raises:
            IndexingFailedError: If listing or deletion fails
        """
        try:
            keys = await run_in_threadpool(self._matching_keys, filter)
            for start in range(0, len(keys), BATCH_SIZE):
                await run_in_threadpool(
                    self._call, "delete_vectors", **self._target, keys=keys[start:start + BATCH_SIZE]
                )
        except (ClientError, BotoCoreError) as e:
            raise IndexingFailedError(
                "Failed to delete vectors from S3 Vectors",
                details={"error": str(e), "filter": filter},
            ) from e
        logger.info(f"{__name__}:delete_by_metadata - Deleted {len(keys)} vectors", extra={"filter": filter})
        return len(keys)

    def _matching_keys(self, filter: dict[str, Any]) -> list[str]:
        keys: list[str] = []
        params: dict[str, Any] = {**self._target, "maxResults": LIST_PAGE_SIZE, "returnMetadata": True}
        while True:
            response = self._call("list_vectors", **params)
            keys.extend(
                item["key"]
                for item in response.get("vectors", [])
                if matches_filter(item.get("metadata") or {}, filter)
            )
            token = response.get("nextToken")
            if not token:
                return keys
            params["nextToken"] = token
