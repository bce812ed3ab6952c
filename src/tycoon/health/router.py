"""Health, readiness, and version endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy import text

from tycoon.config import get_settings
from tycoon.context import GameContext
from tycoon.database import get_engine
from tycoon.dependencies import get_context
from tycoon.redis_client import get_redis_or_none

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe: returns 200 if the process is alive."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(ctx: GameContext = Depends(get_context)) -> dict[str, object]:  # noqa: B008
    """Readiness probe: checks the store backend and Redis when configured."""
    checks: dict[str, object] = {}

    if ctx.settings.store_backend == "sql":
        try:
            async with get_engine().connect() as conn:
                result = await conn.execute(text("SELECT 1"))
                result.scalar()
            checks["database"] = "ok"
        except Exception as exc:
            checks["database"] = f"error: {exc}"
    else:
        checks["store"] = "ok"

    redis = get_redis_or_none()
    if redis is not None:
        try:
            await redis.ping()
            checks["redis"] = "ok"
        except Exception as exc:
            checks["redis"] = f"error: {exc}"

    all_ok = all(v == "ok" for v in checks.values())
    return {"status": "ready" if all_ok else "degraded", "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    """Return API version and environment."""
    settings = get_settings()
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }
