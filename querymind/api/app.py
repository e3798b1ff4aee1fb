"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
error handlers, and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from querymind.api.chat import router as chat_router
from querymind.api.routes import router as documents_router
from querymind.models.schemas import ErrorResponse
from querymind.relay import upstream

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Releases the shared upstream connection pool on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    # Startup
    logger.info("Starting QueryMind API...")
    yield
    # Shutdown
    logger.info("Shutting down QueryMind API...")
    await upstream.close_relay()


async def upstream_error_handler(request: Request, exc: upstream.UpstreamError) -> JSONResponse:
    """Render relay failures as ``{"error": ...}``.

    429 passes through verbatim; any other failure becomes a 500.
    """
    status_code = (
        status.HTTP_429_TOO_MANY_REQUESTS
        if exc.is_rate_limited
        else status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=str(exc)).model_dump(),
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="QueryMind API",
        description=(
            "Document-aware chat relay. Streams replies from a hosted LLM as "
            "plain text fragments and extracts text from uploaded PDF documents."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.add_exception_handler(upstream.UpstreamError, upstream_error_handler)

    application.include_router(chat_router)
    application.include_router(documents_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "querymind"}

    return application


app = create_app()
