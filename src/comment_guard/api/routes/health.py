"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from comment_guard.api.deps import ClassifierDep, CommentsAdapterDep
from comment_guard.config import settings
from comment_guard.logging import get_logger

router = APIRouter(tags=["Health"])
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    components: dict[str, bool] | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool
    database: bool
    redis: bool
    components: dict[str, bool] | None = None


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Basic health check endpoint that verifies the API is running.",
)
async def health_check() -> HealthResponse:
    """Is the API up, and which gateways are real (not stubs)?"""
    from comment_guard import __version__

    providers = {
        "comments": settings.comments_provider,
        "classifier": settings.classifier_provider,
        "moderation": settings.moderation_provider,
    }

    return HealthResponse(
        status="healthy",
        version=__version__,
        components={k: v != "stub" for k, v in providers.items()},
    )


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Verifies the database, the broker and the configured gateways.",
)
async def readiness_check(
    comments: CommentsAdapterDep,
    classifier: ClassifierDep,
) -> ReadinessResponse:
    """Readiness check including dependencies."""
    database_ok = False
    try:
        from sqlalchemy import text

        from comment_guard.db.session import engine

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            database_ok = True
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))

    redis_ok = False
    try:
        import redis

        r = redis.from_url(settings.redis_url)
        r.ping()
        redis_ok = True
    except Exception as e:
        logger.error("redis_health_check_failed", error=str(e))

    components = {
        "comments": await comments.health_check(),
        "classifier": await classifier.health_check(),
    }

    return ReadinessResponse(
        ready=database_ok and redis_ok and all(components.values()),
        database=database_ok,
        redis=redis_ok,
        components=components,
    )


@router.get(
    "/health/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    description="Simple liveness probe for Kubernetes.",
)
async def liveness_check() -> dict[str, str]:
    """Is the process alive?"""
    return {"status": "alive"}
