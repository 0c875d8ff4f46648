"""Cliente HTTP base para conectores da camada API."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from utils.errors import HttpError

logger = logging.getLogger(__name__)

# Métodos reenviados em 5xx/timeout; POST só é reenviado em 429 e falha de conexão
_IDEMPOTENT_METHODS = frozenset({"GET", "PUT", "DELETE", "HEAD", "OPTIONS"})


@dataclass
class HttpClientConfig:
    """Configuração do cliente HTTP."""

    base_url: str = ""
    timeout_seconds: float = 30.0
    max_retries: int = 2
    backoff_base_seconds: float = 0.5
    backoff_max_seconds: float = 8.0
    default_headers: dict[str, str] = field(default_factory=dict)
    verify_ssl: bool = True
    transport: httpx.AsyncBaseTransport | None = None


def response_body(response: httpx.Response) -> Any:
    """Corpo JSON da resposta ou texto quando não for JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text


def ensure_success(response: httpx.Response, operation: str) -> Any:
    """Retorna o corpo da resposta 2xx ou levanta HttpError."""
    body = response_body(response)
    if response.is_success:
        return body
    raise HttpError(
        f"{operation}_failed",
        status_code=response.status_code,
        is_retryable=response.status_code == 429 or response.status_code >= 500,
        body=body,
    )


class HttpClient:
    """Cliente HTTP simples para chamadas externas.

    Retorna a resposta para qualquer status não-retryable; o chamador
    decide o que é erro via `ensure_success`.
    """

    def __init__(self, config: HttpClientConfig | None = None) -> None:
        self._config = config or HttpClientConfig()

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._config.base_url}{path}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        method = method.upper()
        url = self._url(path)
        merged_headers = {**self._config.default_headers, **(headers or {})}
        idempotent = method in _IDEMPOTENT_METHODS

        for attempt in range(self._config.max_retries + 1):
            try:
                async with httpx.AsyncClient(
                    verify=self._config.verify_ssl,
                    transport=self._config.transport,
                ) as client:
                    response = await client.request(
                        method,
                        url,
                        json=json,
                        params=params,
                        data=data,
                        headers=merged_headers,
                        timeout=self._config.timeout_seconds,
                    )
                retryable = response.status_code == 429 or (
                    idempotent and response.status_code >= 500
                )
                if retryable:
                    raise HttpError(
                        "http_retryable_status",
                        status_code=response.status_code,
                        is_retryable=True,
                        body=response_body(response),
                    )
                return response
            except HttpError as exc:
                if not exc.is_retryable or attempt >= self._config.max_retries:
                    raise
                await _backoff_sleep(
                    attempt,
                    self._config.backoff_base_seconds,
                    self._config.backoff_max_seconds,
                )
            except httpx.ConnectError as exc:
                if attempt >= self._config.max_retries:
                    raise HttpError("http_connection_error", is_retryable=True) from exc
                await _backoff_sleep(
                    attempt,
                    self._config.backoff_base_seconds,
                    self._config.backoff_max_seconds,
                )
            except httpx.TimeoutException as exc:
                if not idempotent or attempt >= self._config.max_retries:
                    raise HttpError("http_timeout", is_retryable=True) from exc
                await _backoff_sleep(
                    attempt,
                    self._config.backoff_base_seconds,
                    self._config.backoff_max_seconds,
                )
            except httpx.TransportError as exc:
                # Read/write/protocolo: o servidor pode ter recebido o POST
                if not idempotent or attempt >= self._config.max_retries:
                    raise HttpError("http_transport_error", is_retryable=True) from exc
                await _backoff_sleep(
                    attempt,
                    self._config.backoff_base_seconds,
                    self._config.backoff_max_seconds,
                )
        raise HttpError("http_retry_exhausted", is_retryable=True)

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", path, **kwargs)


async def _backoff_sleep(attempt: int, base: float, max_seconds: float) -> None:
    backoff = min((2**attempt) * base, max_seconds)
    logger.info("http_backoff", extra={"backoff_seconds": backoff})
    await asyncio.sleep(backoff)
