from __future__ import annotations

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from floorops.infrastructure.cache.redis_client import ping_redis
from floorops.infrastructure.db.session import ping_database

router = APIRouter(tags=["health"])

PROBE_TIMEOUT_SECONDS = 1.0


class ReadinessResponse(BaseModel):
    status: str
    checks: dict[str, bool]


def _dependency_checks() -> dict[str, bool]:
    return {
        "database": ping_database(timeout_seconds=PROBE_TIMEOUT_SECONDS),
        "redis": ping_redis(timeout_seconds=PROBE_TIMEOUT_SECONDS),
    }


@router.get("/health/live")
def live() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready", response_model=ReadinessResponse)
def ready(response: Response) -> ReadinessResponse:
    checks = _dependency_checks()
    if all(checks.values()):
        return ReadinessResponse(status="ok", checks=checks)
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(status="unavailable", checks=checks)
