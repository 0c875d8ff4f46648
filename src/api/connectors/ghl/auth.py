"""Tokens OAuth por tenant para a Platform.

O access token é renovado de forma preguiçosa: antes de cada chamada,
se expira dentro da janela configurada, ou uma única vez após um 401.
Tokens novos são persistidos no TenantStore.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from api.connectors.http_base import ensure_success
from utils.errors import HttpError, UnauthorizedError

if TYPE_CHECKING:
    from api.connectors.http_base import HttpClient
    from app.protocols.tenant_store import TenantStoreProtocol

logger = logging.getLogger(__name__)

TOKEN_PATH = "/oauth/token"


class GhlTokenProvider:
    """Fornece access tokens válidos por tenant_key."""

    def __init__(
        self,
        tenant_store: TenantStoreProtocol,
        http: HttpClient,
        *,
        client_id: str,
        client_secret: str,
        refresh_window_seconds: int = 300,
    ) -> None:
        self._tenant_store = tenant_store
        self._http = http
        self._client_id = client_id
        self._client_secret = client_secret
        self._refresh_window_seconds = refresh_window_seconds

    async def get_token(self, tenant_key: str, *, force_refresh: bool = False) -> str:
        """Retorna um access token utilizável.

        Raises:
            UnauthorizedError: tenant sem tokens ou refresh recusado
        """
        tenant = await self._tenant_store.get(tenant_key)
        if tenant is None or not tenant.has_tokens:
            logger.error("platform_tokens_missing", extra={"tenant_key": tenant_key})
            raise UnauthorizedError("Platform tokens not found, re-authorize")

        needs_refresh = force_refresh or tenant.token_expires_within(
            self._refresh_window_seconds
        )
        if not needs_refresh:
            return tenant.access_token or ""

        logger.info(
            "platform_token_refresh",
            extra={"tenant_key": tenant_key, "forced": force_refresh},
        )
        try:
            payload = await self._refresh(tenant.refresh_token or "")
        except HttpError as exc:
            logger.error(
                "platform_token_refresh_failed",
                extra={"tenant_key": tenant_key, "status_code": exc.status_code},
            )
            raise UnauthorizedError("Unable to refresh Platform token, re-authorize") from exc

        access_token = payload.get("access_token")
        if not access_token:
            raise UnauthorizedError("Unable to refresh Platform token, re-authorize")
        refresh_token = payload.get("refresh_token") or tenant.refresh_token or ""
        expires_at = datetime.now(UTC) + timedelta(seconds=int(payload.get("expires_in") or 0))
        await self._tenant_store.update_tokens(tenant_key, access_token, refresh_token, expires_at)
        return str(access_token)

    async def _refresh(self, refresh_token: str) -> dict[str, Any]:
        response = await self._http.post(
            TOKEN_PATH,
            data={
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "user_type": "Location",
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        body = ensure_success(response, "platform_token_refresh")
        if not isinstance(body, dict):
            raise HttpError("platform_token_refresh_invalid_body", status_code=response.status_code)
        return body
