import logging
from typing import Optional

from fastapi import FastAPI

from .repositories import Repository, get_repository
from .settings import get_settings
from .routers import todos as todos_router

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# PUBLIC_INTERFACE
def create_app(repository: Optional[Repository] = None) -> FastAPI:
    """
    Build the FastAPI application around a todo repository.

    Args:
        repository: Store used by every request. When omitted, the backend
            configured through the environment is constructed.

    Returns:
        The configured FastAPI app.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Todo Gateway",
        description="Server-rendered todo list returning htmx fragments from a managed store.",
        version="0.1.0",
    )
    app.state.repository = repository if repository is not None else get_repository(settings)
    backend = type(app.state.repository).__name__

    # PUBLIC_INTERFACE
    @app.get("/health", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy", "backend": backend}

    # Include routers
    app.include_router(todos_router.router)
    logger.info("Todo gateway ready (backend=%s)", backend)
    return app
