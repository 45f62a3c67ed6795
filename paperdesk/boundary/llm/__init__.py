"""LLM clients: embeddings and text generation."""
