from .compress import router as compress_router
from .jobs import router as jobs_router
from .health import router as health_router

__all__ = ["compress_router", "jobs_router", "health_router"]
