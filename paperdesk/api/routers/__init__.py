"""API routers."""

from .chunks import router as chunks_router
from .compare import router as compare_router
from .health import router as health_router
from .pdf import router as pdf_router
from .search import router as search_router

__all__ = [
    "chunks_router",
    "compare_router",
    "health_router",
    "pdf_router",
    "search_router",
]
