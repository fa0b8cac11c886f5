"""Entrypoint da aplicação booking-core.

Inicializa o bootstrap e expõe a aplicação ASGI (FastAPI).

Uso (produção):
    uvicorn app.app:app --host 0.0.0.0 --port 8080

Uso (desenvolvimento):
    uvicorn app.app:app --reload --host 0.0.0.0 --port 8080
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request

from api.routes import create_api_router
from api.routes.bookings import register_error_handlers
from api.routes.bookings.dispatch_tasks import (
    configure_dispatch_concurrency,
    drain_dispatch_tasks,
)
from app.bootstrap import initialize_app, validate_runtime_settings
from app.bootstrap.clients import close_clients, create_async_redis_client
from app.observability import CORRELATION_HEADER, correlation_scope
from config.logging import get_logger
from config.settings import get_base_settings, get_booking_settings, get_store_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

    from starlette.responses import Response

# Inicializar logging ANTES de qualquer import que use logger
initialize_app()

logger = get_logger(__name__)

DRAIN_TIMEOUT_SECONDS = 30.0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Gerencia ciclo de vida da aplicação.

    Startup:
    - Valida configurações
    - Inicializa Redis quando STORE_BACKEND=redis

    Shutdown:
    - Aguarda dispatches pendentes de side effects
    - Fecha conexões (Redis, httpx)
    """
    service_name = get_base_settings().service_name
    logger.info("app_starting", extra={"service": service_name})
    validate_runtime_settings()
    configure_dispatch_concurrency(get_booking_settings().dispatch_max_concurrency)
    app.state.redis_client = None

    if get_store_settings().backend == "redis":
        try:
            app.state.redis_client = create_async_redis_client()
        except ValueError as exc:
            logger.warning("redis_client_not_ready", extra={"error_type": type(exc).__name__})

    yield

    logger.info("app_shutting_down", extra={"service": service_name})
    await drain_dispatch_tasks(timeout_seconds=DRAIN_TIMEOUT_SECONDS)
    await close_clients()


async def correlation_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Propaga X-Correlation-Id (ou gera um) para logs e resposta."""
    with correlation_scope(request.headers.get(CORRELATION_HEADER)) as correlation_id:
        response = await call_next(request)
    response.headers[CORRELATION_HEADER] = correlation_id
    return response


def create_app() -> FastAPI:
    """Cria e configura a aplicação FastAPI.

    Returns:
        Aplicação FastAPI configurada.
    """
    base = get_base_settings()
    fastapi_app = FastAPI(
        title="booking-core",
        description="Ciclo de vida de reservas e detecção de conflito de horários",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if not base.is_production else None,
        redoc_url=None,
        openapi_url="/openapi.json" if not base.is_production else None,
    )

    fastapi_app.middleware("http")(correlation_middleware)
    register_error_handlers(fastapi_app)

    # Registra todas as rotas
    fastapi_app.include_router(create_api_router())

    logger.info("app_configured", extra={"service": base.service_name})

    return fastapi_app


# Aplicação ASGI exposta para uvicorn
app = create_app()


def main() -> None:
    """Entrypoint para execução direta (desenvolvimento)."""
    import uvicorn

    logger.info("Starting booking-core in development mode")
    uvicorn.run(
        "app.app:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
    )


if __name__ == "__main__":
    main()
