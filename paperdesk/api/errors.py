"""
Service error handling for API endpoints.

Maps the PaperDeskError hierarchy to HTTP status codes in one decorator so
every router reports failures the same way.

Dependencies: fastapi, paperdesk.core.exceptions
System role: Error translation at the HTTP edge
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from paperdesk.core.exceptions import (
    ExtractionFailedError,
    GenerationFailedError,
    IndexingFailedError,
    NotFoundError,
    PaperDeskError,
    RateLimitedError,
    SizeLimitExceededError,
    ValidationError,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

UPSTREAM_ERRORS = (ExtractionFailedError, IndexingFailedError, GenerationFailedError)


def status_for(error: Exception) -> int:
    """Return the HTTP status for a service exception."""
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, SizeLimitExceededError):
        return status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    if isinstance(error, RateLimitedError):
        return status.HTTP_429_TOO_MANY_REQUESTS
    if isinstance(error, UPSTREAM_ERRORS):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def handle_service_errors(func: F) -> F:
    """
    Decorator transforming service exceptions into HTTPExceptions.

    Misses are logged at debug level and bad input as warnings; upstream and
    unexpected failures are logged with their traceback.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except NotFoundError as e:
            logger.debug(f"{func.__name__} - NotFoundError: {e.message}")
            raise HTTPException(status_code=status_for(e), detail=e.message)

        except (ValidationError, SizeLimitExceededError) as e:
            logger.warning(
                f"{func.__name__} - {type(e).__name__}: {e.message}",
                extra={"error": str(e)},
            )
            raise HTTPException(status_code=status_for(e), detail=e.message)

        except PaperDeskError as e:
            logger.exception(
                f"{func.__name__} - {type(e).__name__}: {e.message}",
                extra={"error": str(e)},
            )
            raise HTTPException(status_code=status_for(e), detail=e.message)

        except Exception as e:
            logger.exception(
                f"{func.__name__} - Unexpected failure",
                extra={"error": str(e)},
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Internal error: {e}",
            )

    return wrapper  # type: ignore
