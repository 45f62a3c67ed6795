"""Logging, correlation ids and request middleware."""

from paperdesk.observability.correlation import get_correlation_id, set_correlation_id
from paperdesk.observability.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_correlation_id", "get_logger", "set_correlation_id"]
