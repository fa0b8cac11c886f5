"""Endpoints de health check (liveness/readiness)."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config.settings import get_base_settings, get_store_settings

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Resposta do health check."""

    status: str
    service: str
    timestamp: str
    version: str = "0.1.0"


@dataclass(frozen=True, slots=True)
class DependencyCheck:
    """Resultado de checagem de dependência."""

    status: Literal["ok", "degraded", "failed"]
    latency_ms: float | None = None
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "latency_ms": self.latency_ms,
            "error": self.error,
        }


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe — verifica se o serviço está rodando."""
    return HealthResponse(
        status="healthy",
        service=get_base_settings().service_name,
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/ready")
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness probe: Redis é crítico apenas com STORE_BACKEND=redis."""
    if get_store_settings().backend == "redis":
        redis_check = await _check_redis(getattr(request.app.state, "redis_client", None))
    else:
        redis_check = DependencyCheck(status="degraded", error="memory_backend")

    ready = redis_check.status in {"ok", "degraded"}
    payload = {
        "status": "ready" if ready else "not_ready",
        "checks": {"redis": redis_check.as_dict()},
        "timestamp": datetime.now(UTC).isoformat(),
    }
    return JSONResponse(content=payload, status_code=200 if ready else 503)


async def _check_redis(redis_client: Any | None) -> DependencyCheck:
    if redis_client is None:
        return DependencyCheck(status="failed", error="not_configured")
    started_at = time.perf_counter()
    try:
        await asyncio.wait_for(redis_client.ping(), timeout=2.0)
    except TimeoutError:
        return DependencyCheck(status="failed", error="timeout")
    except Exception as exc:
        logger.warning("readiness_redis_check_failed", extra={"error_type": type(exc).__name__})
        return DependencyCheck(status="failed", error=type(exc).__name__)
    latency_ms = (time.perf_counter() - started_at) * 1000
    return DependencyCheck(status="ok", latency_ms=round(latency_ms, 2))
