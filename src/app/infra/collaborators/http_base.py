"""Cliente HTTP base para colaboradores externos (httpx).

GETs são idempotentes e repetidos em 429/5xx/timeout com backoff
exponencial. POSTs só são repetidos quando levam `Idempotency-Key`.
Nenhum corpo de resposta ou PII vai para os logs.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from app.observability import CORRELATION_HEADER, get_correlation_id
from utils.errors import CollaboratorHttpError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollaboratorHttpConfig:
    """Configuração do cliente HTTP de um colaborador."""

    base_url: str
    service: str
    timeout_seconds: float = 5.0
    max_retries: int = 2
    backoff_base_seconds: float = 0.2
    backoff_max_seconds: float = 2.0
    api_token: str = ""


def _is_retryable_status(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


class CollaboratorHttpClient:
    """Wrapper fino sobre httpx.AsyncClient com retry e mapeamento de erro.

    Args:
        config: Endpoint, timeouts e política de retry
        client: AsyncClient compartilhado (bootstrap); criado se None
    """

    def __init__(
        self,
        config: CollaboratorHttpConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._client = client or httpx.AsyncClient(timeout=config.timeout_seconds)

    @property
    def service(self) -> str:
        return self._config.service

    def _headers(self, idempotency_key: str | None) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._config.api_token:
            headers["Authorization"] = f"Bearer {self._config.api_token}"
        correlation_id = get_correlation_id()
        if correlation_id:
            headers[CORRELATION_HEADER] = correlation_id
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key
        return headers

    async def get_json(
        self,
        path: str,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any] | None:
        """GET com retry; retorna None em 404."""
        response = await self._send("GET", path, params=params, retryable=True)
        if response.status_code == 404:
            return None
        return self._decode(response)

    async def post_json(
        self,
        path: str,
        body: dict[str, Any],
        *,
        idempotency_key: str | None = None,
    ) -> dict[str, Any]:
        """POST JSON; repetido apenas com chave de idempotência."""
        response = await self._send(
            "POST",
            path,
            json=body,
            idempotency_key=idempotency_key,
            retryable=idempotency_key is not None,
        )
        if response.status_code == 404:
            raise CollaboratorHttpError(self._config.service, 404)
        if response.status_code == 204 or not response.content:
            return {}
        return self._decode(response)

    async def _send(
        self,
        method: str,
        path: str,
        *,
        retryable: bool,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        idempotency_key: str | None = None,
    ) -> httpx.Response:
        url = f"{self._config.base_url}{path}"
        attempts = self._config.max_retries + 1 if retryable else 1
        for attempt in range(attempts):
            last = attempt >= attempts - 1
            try:
                response = await self._client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    headers=self._headers(idempotency_key),
                    timeout=self._config.timeout_seconds,
                )
            except (httpx.TimeoutException, httpx.TransportError) as exc:
                self._log_failure(method, path, attempt, status_code=None)
                if last:
                    raise CollaboratorHttpError(self._config.service) from exc
                await self._backoff(attempt)
                continue
            except httpx.HTTPError as exc:
                # Ex.: DecodingError, TooManyRedirects; não adianta repetir
                self._log_failure(method, path, attempt, status_code=None)
                raise CollaboratorHttpError(self._config.service) from exc

            if response.status_code < 400 or response.status_code == 404:
                return response
            self._log_failure(method, path, attempt, status_code=response.status_code)
            if last or not _is_retryable_status(response.status_code):
                raise CollaboratorHttpError(self._config.service, response.status_code)
            await self._backoff(attempt)
        raise CollaboratorHttpError(self._config.service)

    def _decode(self, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise CollaboratorHttpError(self._config.service, response.status_code) from exc
        if not isinstance(data, dict):
            raise CollaboratorHttpError(self._config.service, response.status_code)
        return data

    async def _backoff(self, attempt: int) -> None:
        delay = min((2**attempt) * self._config.backoff_base_seconds, self._config.backoff_max_seconds)
        await asyncio.sleep(delay)

    def _log_failure(
        self, method: str, path: str, attempt: int, status_code: int | None
    ) -> None:
        logger.warning(
            "collaborator_http_failure",
            extra={
                "component": self._config.service,
                "method": method,
                "path_template": path.split("?", 1)[0].rsplit("/", 1)[0],
                "attempt": attempt + 1,
                "status_code": status_code,
                "correlation_id": get_correlation_id(),
            },
        )

    async def aclose(self) -> None:
        await self._client.aclose()
