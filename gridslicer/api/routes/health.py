import os

import redis
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from gridslicer.config import settings

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Service health."""

    status: str
    """'healthy' when every dependency is usable, otherwise 'degraded'."""

    redis: str
    storage: str


def get_redis_client() -> redis.Redis:
    return redis.Redis.from_url(settings.redis_url)


def _storage_status() -> str:
    writable = all(
        path.is_dir() and os.access(path, os.W_OK)
        for path in (settings.uploads_dir, settings.outputs_dir)
    )
    return "writable" if writable else "unavailable"


@router.get("/health", response_model=HealthResponse)
async def health_check(redis_client: redis.Redis = Depends(get_redis_client)):
    """Report whether jobs can be queued and bundles written."""
    try:
        redis_client.ping()
        redis_status = "healthy"
    except redis.RedisError:
        redis_status = "unhealthy"

    storage_status = _storage_status()
    healthy = redis_status == "healthy" and storage_status == "writable"

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        redis=redis_status,
        storage=storage_status,
    )
