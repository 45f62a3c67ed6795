"""
Boundary layer for external system integrations.

Handles all interactions with external systems (object storage, vector
indexes, OCR and LLM APIs). Provides adapters and clients for
infrastructure dependencies.
"""
