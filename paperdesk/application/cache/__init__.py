"""Artifact cache and invalidation."""

from paperdesk.application.cache.artifact_cache import ArtifactCache, ArtifactKeys, ArtifactKind
from paperdesk.application.cache.invalidation import CacheInvalidator

__all__ = ["ArtifactCache", "ArtifactKeys", "ArtifactKind", "CacheInvalidator"]
