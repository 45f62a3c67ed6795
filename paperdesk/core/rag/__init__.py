"""Retrieval-augmented generation: indexing, search, QA, summaries, comparisons."""
