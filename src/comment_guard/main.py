"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from comment_guard import __version__
from comment_guard.api.routes import analyses, comments, health
from comment_guard.config import settings
from comment_guard.domain.errors import CommentGuardError
from comment_guard.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    logger.info("application_starting", version=__version__)

    # Startup: verify database connection
    try:
        from comment_guard.db.session import init_db

        init_db()
        logger.info("database_connected")
    except Exception as e:
        logger.error("database_connection_failed", error=str(e))
        # Don't raise - let health checks report the issue

    yield

    logger.info("application_shutting_down")


app = FastAPI(
    title="Comment Guard",
    description="Find and remediate policy-violating comments on your videos",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CommentGuardError)
async def comment_guard_error_handler(request: Request, exc: CommentGuardError) -> JSONResponse:
    """Render application errors as ``{error, message, details}``."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "request_failed",
        path=request.url.path,
        status_code=exc.status_code,
        error=exc.code,
        message=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(health.router)
app.include_router(analyses.router, prefix="/api/v1")
app.include_router(comments.router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    """Root endpoint redirect to docs."""
    return {
        "name": "Comment Guard",
        "version": __version__,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "comment_guard.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
