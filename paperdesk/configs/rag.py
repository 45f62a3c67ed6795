"""
Retrieval and generation tuning.

Chunk sizes, retrieval depth, summarization thresholds and comparison
limits. Every full-document prompt reads its character limits from here.

Dependencies: pydantic_settings
System role: RAG pipeline configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RAGSettings(BaseSettings):
    """Chunking, retrieval, summarization and comparison limits."""

    model_config = SettingsConfigDict(
        env_prefix="RAG_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Chunking
    chunk_size: int = Field(default=1800, description="Fixed-window chunk size (chars)")
    chunk_overlap: int = Field(default=200, description="Fixed-window overlap (chars)")
    section_max_chars: int = Field(default=3200, description="Largest section kept whole")
    section_overlap_chars: int = Field(default=1000, description="Overlap when sub-windowing a section")

    # Question answering
    qa_top_k: int = Field(default=15, description="Matches retrieved per question")
    search_top_k: int = Field(default=5, description="Default matches for semantic search")
    full_document_char_limit: int = Field(
        default=110_000,
        description="Largest document passed verbatim to a full-document prompt",
    )

    # Summarization
    one_shot_limit: int = Field(default=110_000, description="Below this length summarize in one request")
    map_section_max_chars: int = Field(default=50_000, description="Section size for two-pass summaries")
    map_section_overlap_chars: int = Field(default=1_000, description="Section overlap for two-pass summaries")
    summarize_max_bytes: int = Field(
        default=25 * 1024 * 1024,
        description="Raw size above which streamed summaries require force",
    )

    # Comparison
    compare_max_docs: int = Field(default=10, description="Most documents in one comparison")
    compare_max_chars_each: int = Field(default=60_000, description="Per-document cap in generic mode")
    compare_max_total_chars: int = Field(default=180_000, description="Aggregate cap for one comparison")

    # Embedding retries
    embedding_max_retries: int = Field(default=3, description="Retries after a rate-limit response")
    embedding_backoff_seconds: float = Field(default=2.0, description="First backoff delay, doubled per retry")
