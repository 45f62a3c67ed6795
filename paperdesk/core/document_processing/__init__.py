"""Chunking and section handling for extracted documents."""
