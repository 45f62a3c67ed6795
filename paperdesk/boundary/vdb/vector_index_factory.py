"""
Vector index factory for selecting between FAISS (dev) and S3 Vectors (prod).

Depends on VECTOR_STORE_STORE_TYPE environment variable.
Provides consistent interface regardless of underlying implementation.

Dependencies: paperdesk.boundary.vdb, paperdesk.configs
System role: Vector index instantiation and selection
"""

import logging

from paperdesk.boundary.vdb.faiss_index import FAISSVectorIndex
from paperdesk.boundary.vdb.s3_vectors_index import S3VectorsIndex
from paperdesk.boundary.vdb.vector_schemas import VectorIndex
from paperdesk.configs import get_settings

logger = logging.getLogger(__name__)


def get_vector_index() -> VectorIndex:
    """
    Factory function to get vector index based on environment configuration.

    Returns:
        FAISSVectorIndex or S3VectorsIndex: Configured vector index instance

    Raises:
        ValueError: If VECTOR_STORE_STORE_TYPE is invalid
    """
    settings = get_settings()
    store_type = settings.vector_store.store_type.lower()

    if store_type == "faiss":
        logger.info(f"{__name__}:get_vector_index - Creating FAISS index (local dev mode)")
        return FAISSVectorIndex(dimension=settings.llm.embedding_dimension)

    if store_type == "s3":
        logger.info(f"{__name__}:get_vector_index - Creating S3 Vectors index (production mode)")
        return S3VectorsIndex(
            vectors_bucket=settings.vector_store.vectors_bucket,
            index_name=settings.vector_store.index_name,
            region=settings.vector_store.region,
        )

    raise ValueError(
        f"Invalid VECTOR_STORE_STORE_TYPE: {store_type}. "
        f"Must be 'faiss' (dev) or 's3' (production)."
    )
