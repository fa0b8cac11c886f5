"""Factories de clientes externos — Redis e httpx."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

import httpx

from config.settings import get_base_settings, get_collaborator_settings

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Redis Client Factory
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def create_async_redis_client() -> AsyncRedis:
    """Cria cliente Redis assíncrono (singleton).

    Returns:
        Cliente Redis assíncrono

    Raises:
        ValueError: Se REDIS_URL não configurado
    """
    from redis.asyncio import Redis as AsyncRedis

    redis_url = get_base_settings().redis_url
    if not redis_url:
        msg = "REDIS_URL não configurado"
        raise ValueError(msg)

    client: AsyncRedis = AsyncRedis.from_url(
        redis_url,
        decode_responses=False,
        socket_timeout=5.0,
        socket_connect_timeout=5.0,
    )

    host = client.connection_pool.connection_kwargs.get("host", "unknown")
    logger.info("async_redis_client_created", extra={"host": host})
    return client


# ──────────────────────────────────────────────────────────────────────────────
# HTTP Client Factory
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def create_http_client() -> httpx.AsyncClient:
    """Cria AsyncClient compartilhado pelos colaboradores HTTP (singleton)."""
    settings = get_collaborator_settings()
    client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
    )
    logger.info(
        "http_client_created",
        extra={"timeout_seconds": settings.http_timeout_seconds},
    )
    return client


async def close_clients() -> None:
    """Fecha clientes criados (shutdown). Não cria clientes novos."""
    if create_http_client.cache_info().currsize:
        await create_http_client().aclose()
        create_http_client.cache_clear()
    if create_async_redis_client.cache_info().currsize:
        await create_async_redis_client().aclose()
        create_async_redis_client.cache_clear()
