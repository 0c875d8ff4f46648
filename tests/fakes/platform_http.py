"""GhlClient real sobre httpx.MockTransport, para exercitar erros de rede."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import httpx

from api.connectors.ghl import GhlClient, GhlTokenProvider
from api.connectors.http_base import HttpClient, HttpClientConfig
from app.domain.tenant import Tenant
from app.infra.stores import MemoryTenantStore
from tests.fakes.defaults import TENANT_KEY

if TYPE_CHECKING:
    from collections.abc import Callable


async def build_platform_client(
    handler: Callable[[httpx.Request], httpx.Response],
) -> GhlClient:
    """Cliente da Platform com tenant padrão válido e sem retries."""
    store = MemoryTenantStore()
    await store.save(
        Tenant(
            tenant_key=TENANT_KEY,
            access_token="access-1",
            refresh_token="refresh-1",
            token_expires_at=datetime.now(UTC) + timedelta(hours=12),
        )
    )
    http = HttpClient(
        HttpClientConfig(
            base_url="https://crm.test",
            max_retries=0,
            transport=httpx.MockTransport(handler),
        )
    )
    tokens = GhlTokenProvider(store, http, client_id="cid", client_secret="secret")
    return GhlClient(http, tokens, api_version="2021-07-28")
