"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from appaloosa_publisher import __version__
from appaloosa_publisher.api.middleware import RequestLoggingMiddleware
from appaloosa_publisher.api.v1.router import router as v1_router
from appaloosa_publisher.config import settings
from appaloosa_publisher.core.exceptions import (
    AppaloosaPublisherError,
    ArtifactAccessError,
    BuildNotFoundError,
    ConfigurationError,
    ProjectNotFoundError,
)
from appaloosa_publisher.core.steps import get_step_registry
from appaloosa_publisher.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

ERROR_STATUS = {
    ProjectNotFoundError: status.HTTP_404_NOT_FOUND,
    BuildNotFoundError: status.HTTP_404_NOT_FOUND,
    ConfigurationError: status.HTTP_409_CONFLICT,
    ArtifactAccessError: status.HTTP_403_FORBIDDEN,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    configure_logging()
    logger.info(
        "application.starting",
        version=__version__,
        environment=settings.app_env,
        steps=get_step_registry().list_steps(),
    )

    yield

    # Shutdown
    logger.info("application.shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Appaloosa Publisher API",
        description="Uploads build artifacts to the Appaloosa store and keeps deployment history",
        version=__version__,
        docs_url="/docs" if settings.app_debug else None,
        redoc_url="/redoc" if settings.app_debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_development else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(AppaloosaPublisherError)
    async def publisher_error_handler(
        request: Request, exc: AppaloosaPublisherError
    ) -> JSONResponse:
        """Handle application-specific errors."""
        return JSONResponse(
            status_code=ERROR_STATUS.get(
                type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
            ),
            content={
                "error": {
                    "code": type(exc).__name__.upper(),
                    "message": exc.message,
                    "details": exc.details,
                }
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected errors."""
        logger.error(
            "unhandled_exception",
            error=str(exc),
            path=request.url.path,
            exc_info=True,
        )

        if settings.is_development:
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": {
                        "code": "INTERNAL_ERROR",
                        "message": str(exc),
                        "type": type(exc).__name__,
                    }
                },
            )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                }
            },
        )

    app.include_router(v1_router)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "appaloosa_publisher.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )
